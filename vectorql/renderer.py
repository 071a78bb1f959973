# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Render query descriptors into GraphQL documents.

Documents are emitted on a single line with a fixed ordering, so the same
descriptor always yields the same string. Arguments appear as: search mode,
``where``, ``limit``, ``offset``, ``after``, ``autocut``, ``sort``,
``groupBy``. The selection set lists fields in insertion order, then the raw
fragment, then ``_additional``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple, Union

from vectorql.aggregate import AggregateBuilder, AggregateDescriptor, PropertyAggregation
from vectorql.literals import GraphQLEnum, format_value
from vectorql.query import (
    BM25,
    MEDIA_TYPES,
    Generate,
    Hybrid,
    Move,
    NearMedia,
    NearObject,
    NearText,
    NearVector,
    QueryBuilder,
    QueryDescriptor,
    SearchMode,
)
from vectorql.serializer import serialize

GROUP_SELECTION = "group { id groupedBy { path value } count maxDistance minDistance hits { %s } }"


def _threshold(payload: Dict[str, Any], certainty: Any, distance: Any) -> None:
    if certainty is not None:
        payload["certainty"] = certainty
    if distance is not None:
        payload["distance"] = distance


def _move_payload(move: Move) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if move.concepts:
        payload["concepts"] = list(move.concepts)
    if move.objects:
        payload["objects"] = [{"id": object_id} for object_id in move.objects]
    payload["force"] = move.force
    return payload


def search_argument(mode: SearchMode) -> Tuple[str, Dict[str, Any]]:
    """Return the argument name and input object for a search mode."""
    payload: Dict[str, Any]
    match mode:
        case NearText():
            payload = {"concepts": list(mode.concepts)}
            _threshold(payload, mode.certainty, mode.distance)
            if mode.move_to is not None:
                payload["moveTo"] = _move_payload(mode.move_to)
            if mode.move_away_from is not None:
                payload["moveAwayFrom"] = _move_payload(mode.move_away_from)
            return "nearText", payload
        case NearVector():
            payload = {"vector": list(mode.vector)}
            _threshold(payload, mode.certainty, mode.distance)
            return "nearVector", payload
        case NearObject():
            payload = {"id": mode.id} if mode.id is not None else {"beacon": mode.beacon}
            _threshold(payload, mode.certainty, mode.distance)
            return "nearObject", payload
        case NearMedia():
            argument, key = MEDIA_TYPES[mode.media_type]
            payload = {key: mode.data}
            _threshold(payload, mode.certainty, mode.distance)
            return argument, payload
        case BM25():
            payload = {"query": mode.query}
            if mode.properties:
                payload["properties"] = list(mode.properties)
            return "bm25", payload
        case Hybrid():
            payload = {"query": mode.query}
            if mode.alpha is not None:
                payload["alpha"] = mode.alpha
            if mode.vector:
                payload["vector"] = list(mode.vector)
            if mode.properties:
                payload["properties"] = list(mode.properties)
            if mode.fusion_type is not None:
                payload["fusionType"] = GraphQLEnum(mode.fusion_type)
            return "hybrid", payload
        case _:
            raise TypeError(f"Unsupported search mode: {type(mode)!r}")


def _format_arguments(arguments: List[Tuple[str, Any]]) -> str:
    if not arguments:
        return ""
    return "(" + ", ".join(f"{name}: {format_value(value)}" for name, value in arguments) + ")"


def _get_arguments(descriptor: QueryDescriptor) -> List[Tuple[str, Any]]:
    arguments: List[Tuple[str, Any]] = []
    if descriptor.search is not None:
        arguments.append(search_argument(descriptor.search))
    if descriptor.filter is not None:
        arguments.append(("where", serialize(descriptor.filter)))
    if descriptor.limit is not None:
        arguments.append(("limit", descriptor.limit))
    if descriptor.offset is not None:
        arguments.append(("offset", descriptor.offset))
    if descriptor.after is not None:
        arguments.append(("after", descriptor.after))
    if descriptor.autocut is not None:
        arguments.append(("autocut", descriptor.autocut))
    if descriptor.sort:
        arguments.append(
            (
                "sort",
                [
                    {"path": list(spec.path), "order": GraphQLEnum(spec.order)}
                    for spec in descriptor.sort
                ],
            )
        )
    if descriptor.group_by is not None:
        group = descriptor.group_by
        arguments.append(
            (
                "groupBy",
                {
                    "path": list(group.path),
                    "groups": group.groups,
                    "objectsPerGroup": group.objects_per_group,
                },
            )
        )
    return arguments


def _generate_selection(spec: Generate) -> str:
    arguments: List[Tuple[str, Any]] = []
    results: List[str] = []
    if spec.single_prompt is not None:
        arguments.append(("singleResult", {"prompt": spec.single_prompt}))
        results.append("singleResult")
    if spec.grouped_task is not None:
        grouped: Dict[str, Any] = {"task": spec.grouped_task}
        if spec.grouped_properties:
            grouped["properties"] = list(spec.grouped_properties)
        arguments.append(("groupedResult", grouped))
        results.append("groupedResult")
    results.append("error")
    return f"generate{_format_arguments(arguments)} {{ {' '.join(results)} }}"


def _get_selection(descriptor: QueryDescriptor) -> str:
    parts: List[str] = list(descriptor.fields)
    if descriptor.raw_fragment:
        parts.append(descriptor.raw_fragment.strip())

    additional: List[str] = list(descriptor.additional)
    if descriptor.generate is not None:
        additional.append(_generate_selection(descriptor.generate))
    if descriptor.group_by is not None:
        hits = list(descriptor.fields) + ["_additional { id distance }"]
        additional.append(GROUP_SELECTION % " ".join(hits))
    if additional:
        parts.append("_additional { " + " ".join(additional) + " }")
    return " ".join(parts)


def render(query: Union[QueryBuilder, QueryDescriptor]) -> str:
    """Validate and render a ``Get`` query into a GraphQL document."""
    descriptor = query.build() if isinstance(query, QueryBuilder) else query.validate()
    arguments = _format_arguments(_get_arguments(descriptor))
    selection = _get_selection(descriptor)
    return f"{{ Get {{ {descriptor.collection}{arguments} {{ {selection} }} }} }}"


def _property_selection(prop: PropertyAggregation) -> str:
    metrics = []
    for metric in prop.metrics:
        if metric == "topOccurrences":
            limit = ""
            if prop.top_occurrences_limit is not None:
                limit = f"(limit: {prop.top_occurrences_limit})"
            metrics.append(f"topOccurrences{limit} {{ value occurs }}")
        else:
            metrics.append(metric)
    return f"{prop.name} {{ {' '.join(metrics)} }}"


def render_aggregate(query: Union[AggregateBuilder, AggregateDescriptor]) -> str:
    """Validate and render an ``Aggregate`` query into a GraphQL document."""
    descriptor = query.build() if isinstance(query, AggregateBuilder) else query.validate()

    arguments: List[Tuple[str, Any]] = []
    if descriptor.search is not None:
        arguments.append(search_argument(descriptor.search))
    if descriptor.filter is not None:
        arguments.append(("where", serialize(descriptor.filter)))
    if descriptor.group_by:
        arguments.append(("groupBy", list(descriptor.group_by)))
    if descriptor.object_limit is not None:
        arguments.append(("objectLimit", descriptor.object_limit))
    if descriptor.limit is not None:
        arguments.append(("limit", descriptor.limit))

    parts: List[str] = []
    if descriptor.meta_count:
        parts.append("meta { count }")
    parts.extend(_property_selection(prop) for prop in descriptor.properties)
    if descriptor.group_by:
        parts.append("groupedBy { path value }")

    return (
        f"{{ Aggregate {{ {descriptor.collection}{_format_arguments(arguments)} "
        f"{{ {' '.join(parts)} }} }} }}"
    )


def to_payload(document: str) -> Dict[str, str]:
    """Wrap a rendered document in the JSON request body."""
    return {"query": document}
