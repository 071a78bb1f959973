# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Immutable Aggregate-query descriptor and builder."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence, Tuple, Union

from vectorql.errors import ValidationError
from vectorql.expr import FILTER_NODE_TYPES, FilterNode
from vectorql.query import (
    NearObject,
    NearText,
    NearVector,
    _check_name,
    _check_non_negative_int,
    _check_text,
    _check_threshold,
    _check_vector,
    _path,
    _string_tuple,
    search_kind,
)

AGGREGATE_METRICS = (
    "count",
    "type",
    "sum",
    "mean",
    "median",
    "mode",
    "maximum",
    "minimum",
    "topOccurrences",
    "totalTrue",
    "totalFalse",
    "percentageTrue",
    "percentageFalse",
)

AggregateSearch = Union[NearText, NearVector, NearObject]


@dataclass(frozen=True)
class PropertyAggregation:
    name: str
    metrics: Tuple[str, ...]
    top_occurrences_limit: Optional[int] = None


@dataclass(frozen=True)
class AggregateDescriptor:
    collection: str
    meta_count: bool = False
    properties: Tuple[PropertyAggregation, ...] = ()
    filter: Optional[FilterNode] = None
    search: Optional[AggregateSearch] = None
    group_by: Tuple[str, ...] = ()
    object_limit: Optional[int] = None
    limit: Optional[int] = None

    def validate(self) -> "AggregateDescriptor":
        _check_name("collection name", self.collection)
        if not self.meta_count and not self.properties and not self.group_by:
            raise ValidationError("aggregate selects nothing; request meta count or properties")
        if self.object_limit is not None and self.search is None:
            raise ValidationError(
                "object_limit requires a nearText, nearVector or nearObject search"
            )
        return self


@dataclass(frozen=True)
class AggregateBuilder:
    descriptor: AggregateDescriptor

    def _update(self, **changes: Any) -> "AggregateBuilder":
        return AggregateBuilder(replace(self.descriptor, **changes))

    def build(self) -> AggregateDescriptor:
        return self.descriptor.validate()

    def meta_count(self) -> "AggregateBuilder":
        return self._update(meta_count=True)

    def property(
        self,
        name: str,
        *metrics: str,
        top_occurrences_limit: Optional[int] = None,
    ) -> "AggregateBuilder":
        """Aggregate ``name`` with ``metrics``; a repeated name replaces the earlier entry."""
        _check_name("property name", name)
        if not metrics:
            raise ValidationError(f"property {name!r} requires at least one metric")
        for metric in metrics:
            if metric not in AGGREGATE_METRICS:
                raise ValidationError(
                    f"Unknown aggregate metric {metric!r}. Available: {list(AGGREGATE_METRICS)}"
                )
        if top_occurrences_limit is not None:
            _check_non_negative_int("top_occurrences_limit", top_occurrences_limit)
            if "topOccurrences" not in metrics:
                raise ValidationError("top_occurrences_limit requires the topOccurrences metric")
        spec = PropertyAggregation(
            name=name,
            metrics=tuple(dict.fromkeys(metrics)),
            top_occurrences_limit=top_occurrences_limit,
        )
        kept = tuple(p for p in self.descriptor.properties if p.name != name)
        return self._update(properties=kept + (spec,))

    def where(self, node: FilterNode) -> "AggregateBuilder":
        if not isinstance(node, FILTER_NODE_TYPES):
            raise ValidationError(f"where() expects a filter node, got {type(node).__name__}")
        return self._update(filter=node)

    def group_by(self, path: Union[str, Sequence[str]]) -> "AggregateBuilder":
        return self._update(group_by=_path(path))

    def object_limit(self, value: int) -> "AggregateBuilder":
        return self._update(object_limit=_check_non_negative_int("object_limit", value))

    def limit(self, value: int) -> "AggregateBuilder":
        return self._update(limit=_check_non_negative_int("limit", value))

    def _with_search(self, mode: AggregateSearch) -> "AggregateBuilder":
        current = self.descriptor.search
        if current is not None and search_kind(current) != search_kind(mode):
            raise ValidationError("search mode already set")
        return self._update(search=mode)

    def near_text(
        self,
        concepts: Union[str, Sequence[str]],
        *,
        certainty: Optional[float] = None,
        distance: Optional[float] = None,
    ) -> "AggregateBuilder":
        concept_list = _string_tuple("concept", concepts)
        if not concept_list:
            raise ValidationError("nearText requires at least one concept")
        _check_threshold(certainty, distance)
        return self._with_search(
            NearText(concepts=concept_list, certainty=certainty, distance=distance)
        )

    def near_vector(
        self,
        vector: Sequence[float],
        *,
        certainty: Optional[float] = None,
        distance: Optional[float] = None,
    ) -> "AggregateBuilder":
        _check_threshold(certainty, distance)
        return self._with_search(
            NearVector(vector=_check_vector(vector), certainty=certainty, distance=distance)
        )

    def near_object(
        self,
        id: str,
        *,
        certainty: Optional[float] = None,
        distance: Optional[float] = None,
    ) -> "AggregateBuilder":
        _check_text("id", id)
        _check_threshold(certainty, distance)
        return self._with_search(NearObject(id=id, certainty=certainty, distance=distance))


def aggregate(collection: str) -> AggregateBuilder:
    """Start an ``Aggregate`` query for ``collection``."""
    return AggregateBuilder(AggregateDescriptor(collection=collection))
