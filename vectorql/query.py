# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Immutable Get-query descriptor with a fluent builder API.

Every ``QueryBuilder`` call returns a new builder around a new descriptor.
``fields`` appends and ``additional`` takes a set union in first-insertion
order; every other call replaces the previous value. Search modes are
mutually exclusive: setting a different mode than the one already present
raises ``ValidationError``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from vectorql.errors import ValidationError
from vectorql.expr import FILTER_NODE_TYPES, FilterNode

FUSION_TYPES = ("rankedFusion", "relativeScoreFusion")
SORT_ORDERS = ("asc", "desc")

# Collection and field names are spliced into the document unquoted.
GRAPHQL_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# media type -> (argument name, payload key)
MEDIA_TYPES = {
    "image": ("nearImage", "image"),
    "audio": ("nearAudio", "audio"),
    "video": ("nearVideo", "video"),
    "depth": ("nearDepth", "depth"),
    "thermal": ("nearThermal", "thermal"),
    "imu": ("nearIMU", "imu"),
}

# logical key -> name inside ``_additional { ... }``
ADDITIONAL_FIELDS = {
    "id": "id",
    "vector": "vector",
    "distance": "distance",
    "certainty": "certainty",
    "score": "score",
    "explainScore": "explainScore",
    "creationTime": "creationTimeUnix",
    "lastUpdateTime": "lastUpdateTimeUnix",
    "creationTimeUnix": "creationTimeUnix",
    "lastUpdateTimeUnix": "lastUpdateTimeUnix",
}


@dataclass(frozen=True)
class Move:
    """Shift a nearText query towards or away from concepts/objects."""

    force: float
    concepts: Tuple[str, ...] = ()
    objects: Tuple[str, ...] = ()


@dataclass(frozen=True)
class NearText:
    concepts: Tuple[str, ...]
    certainty: Optional[float] = None
    distance: Optional[float] = None
    move_to: Optional[Move] = None
    move_away_from: Optional[Move] = None


@dataclass(frozen=True)
class NearVector:
    vector: Tuple[float, ...]
    certainty: Optional[float] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class NearObject:
    id: Optional[str] = None
    beacon: Optional[str] = None
    certainty: Optional[float] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class NearMedia:
    media_type: str
    data: str
    certainty: Optional[float] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class BM25:
    query: str
    properties: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Hybrid:
    query: str
    alpha: Optional[float] = None
    vector: Tuple[float, ...] = ()
    properties: Tuple[str, ...] = ()
    fusion_type: Optional[str] = None


SearchMode = Union[NearText, NearVector, NearObject, NearMedia, BM25, Hybrid]


@dataclass(frozen=True)
class SortSpec:
    path: Tuple[str, ...]
    order: str = "asc"


@dataclass(frozen=True)
class GroupBy:
    path: Tuple[str, ...]
    groups: int
    objects_per_group: int


@dataclass(frozen=True)
class Generate:
    single_prompt: Optional[str] = None
    grouped_task: Optional[str] = None
    grouped_properties: Tuple[str, ...] = ()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_non_negative_int(name: str, value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValidationError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _check_unit_interval(name: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    if not _is_number(value) or not 0.0 <= value <= 1.0:
        raise ValidationError(f"{name} must be a number between 0 and 1, got {value!r}")
    return value


def _check_threshold(certainty: Any, distance: Any) -> None:
    if certainty is not None and distance is not None:
        raise ValidationError("certainty and distance are mutually exclusive")
    _check_unit_interval("certainty", certainty)
    if distance is not None and (not _is_number(distance) or not math.isfinite(distance)):
        raise ValidationError(f"distance must be a finite number, got {distance!r}")


def _check_vector(vector: Any) -> Tuple[float, ...]:
    if not isinstance(vector, (list, tuple)) or not vector:
        raise ValidationError("vector must be a non-empty list of numbers")
    for component in vector:
        if not _is_number(component) or not math.isfinite(component):
            raise ValidationError(f"vector contains a non-finite value: {component!r}")
    return tuple(float(component) for component in vector)


def _check_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string")
    return value


def _check_name(name: str, value: Any) -> str:
    if not isinstance(value, str) or not GRAPHQL_NAME.fullmatch(value):
        raise ValidationError(f"{name} must be a GraphQL name, got {value!r}")
    return value


def search_kind(mode: Any) -> Tuple[Any, ...]:
    """Identity of a search mode; media searches differ by media type."""
    if isinstance(mode, NearMedia):
        return (NearMedia, mode.media_type)
    return (type(mode),)


def _string_tuple(name: str, values: Any) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"{name} values must be a string or a list of strings")
    result = tuple(values)
    for item in result:
        _check_text(name, item)
    return result


def _path(value: Union[str, Sequence[str]]) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    segments = _string_tuple("path segment", value)
    if not segments:
        raise ValidationError("path must not be empty")
    return segments


def _move(name: str, value: Any) -> Optional[Move]:
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = Move(
            force=value.get("force"),
            concepts=_string_tuple("concept", value.get("concepts")),
            objects=_string_tuple("object id", value.get("objects")),
        )
    if not isinstance(value, Move):
        raise ValidationError(f"{name} must be a Move or a mapping")
    if value.force is None or _check_unit_interval(f"{name}.force", value.force) is None:
        raise ValidationError(f"{name} requires a force between 0 and 1")
    if not value.concepts and not value.objects:
        raise ValidationError(f"{name} requires concepts or objects")
    return value


@dataclass(frozen=True)
class QueryDescriptor:
    """Parameters of a single ``Get`` query against one collection."""

    collection: str
    fields: Tuple[str, ...] = ()
    raw_fragment: Optional[str] = None
    filter: Optional[FilterNode] = None
    search: Optional[SearchMode] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    after: Optional[str] = None
    autocut: Optional[int] = None
    additional: Tuple[str, ...] = ()
    sort: Tuple[SortSpec, ...] = ()
    group_by: Optional[GroupBy] = None
    generate: Optional[Generate] = None

    def validate(self) -> "QueryDescriptor":
        """Check cross-field invariants; returns ``self`` so calls can chain.

        A descriptor carrying a raw fragment is only checked for a collection
        name.
        """
        _check_name("collection name", self.collection)
        if self.raw_fragment is not None:
            return self
        if not self.fields:
            raise ValidationError("query selects no fields; add fields or a raw fragment")
        if self.after is not None and (self.limit is not None or self.offset is not None):
            raise ValidationError("after cursor cannot be combined with limit or offset")
        if self.group_by is not None and not isinstance(
            self.search, (NearText, NearVector, NearObject, NearMedia)
        ):
            raise ValidationError(
                "group_by requires a nearText, nearVector, nearObject or nearMedia search"
            )
        return self


@dataclass(frozen=True)
class QueryBuilder:
    """Fluent, immutable wrapper that accumulates a ``QueryDescriptor``."""

    descriptor: QueryDescriptor

    def _update(self, **changes: Any) -> "QueryBuilder":
        return QueryBuilder(replace(self.descriptor, **changes))

    def build(self) -> QueryDescriptor:
        return self.descriptor.validate()

    # --- field selection ---------------------------------------------------

    def fields(self, *names: Union[str, Sequence[str]]) -> "QueryBuilder":
        """Append fields to the selection set, skipping duplicates."""
        merged = list(self.descriptor.fields)
        for name in names:
            for item in _string_tuple("field name", name):
                _check_name("field name", item)
                if item not in merged:
                    merged.append(item)
        return self._update(fields=tuple(merged))

    def raw(self, fragment: str) -> "QueryBuilder":
        """Append a pre-formed selection fragment and skip descriptor validation."""
        if not isinstance(fragment, str):
            raise ValidationError("raw fragment must be a string")
        return self._update(raw_fragment=fragment)

    def additional(self, *keys: Union[str, Sequence[str]]) -> "QueryBuilder":
        merged = list(self.descriptor.additional)
        for key in keys:
            for item in _string_tuple("additional key", key):
                wire_name = ADDITIONAL_FIELDS.get(item)
                if wire_name is None:
                    raise ValidationError(
                        f"Unknown additional metadata key {item!r}. "
                        f"Available keys: {sorted(ADDITIONAL_FIELDS)}"
                    )
                if wire_name not in merged:
                    merged.append(wire_name)
        return self._update(additional=tuple(merged))

    # --- filtering and pagination -----------------------------------------

    def where(self, node: FilterNode) -> "QueryBuilder":
        if not isinstance(node, FILTER_NODE_TYPES):
            raise ValidationError(f"where() expects a filter node, got {type(node).__name__}")
        return self._update(filter=node)

    def limit(self, value: int) -> "QueryBuilder":
        return self._update(limit=_check_non_negative_int("limit", value))

    def offset(self, value: int) -> "QueryBuilder":
        return self._update(offset=_check_non_negative_int("offset", value))

    def after(self, cursor: str) -> "QueryBuilder":
        return self._update(after=_check_text("after cursor", cursor))

    def autocut(self, value: int) -> "QueryBuilder":
        return self._update(autocut=_check_non_negative_int("autocut", value))

    def sort(self, *specs: Any) -> "QueryBuilder":
        """Sort by ``(path, order)`` tuples, ``SortSpec`` values or bare paths.

        A list is always a path, so ``["author", "name"]`` sorts ascending on a
        nested property; pass ``(["author", "name"], "desc")`` to set an order.
        """
        parsed = []
        for spec in specs:
            if isinstance(spec, SortSpec):
                path, order = spec.path, spec.order
            elif isinstance(spec, (str, list)):
                path, order = spec, "asc"
            elif isinstance(spec, tuple) and len(spec) == 2:
                path, order = spec
            else:
                raise ValidationError(f"Invalid sort specification: {spec!r}")
            if order not in SORT_ORDERS:
                raise ValidationError(f"Sort order must be 'asc' or 'desc', got {order!r}")
            parsed.append(SortSpec(path=_path(path), order=order))
        return self._update(sort=tuple(parsed))

    def group_by(
        self,
        path: Union[str, Sequence[str]],
        *,
        groups: int = 1,
        objects_per_group: int = 10,
    ) -> "QueryBuilder":
        spec = GroupBy(
            path=_path(path),
            groups=_check_non_negative_int("groups", groups),
            objects_per_group=_check_non_negative_int("objects_per_group", objects_per_group),
        )
        return self._update(group_by=spec)

    def generate(
        self,
        *,
        single_prompt: Optional[str] = None,
        grouped_task: Optional[str] = None,
        grouped_properties: Optional[Sequence[str]] = None,
    ) -> "QueryBuilder":
        if single_prompt is None and grouped_task is None:
            raise ValidationError("generate requires single_prompt or grouped_task")
        if single_prompt is not None:
            _check_text("single_prompt", single_prompt)
        if grouped_task is not None:
            _check_text("grouped_task", grouped_task)
        spec = Generate(
            single_prompt=single_prompt,
            grouped_task=grouped_task,
            grouped_properties=_string_tuple("grouped property", grouped_properties),
        )
        return self._update(generate=spec)

    # --- search modes ------------------------------------------------------

    def _with_search(self, mode: SearchMode) -> "QueryBuilder":
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
        move_to: Union[Move, Mapping[str, Any], None] = None,
        move_away_from: Union[Move, Mapping[str, Any], None] = None,
    ) -> "QueryBuilder":
        concept_list = _string_tuple("concept", concepts)
        if not concept_list:
            raise ValidationError("nearText requires at least one concept")
        _check_threshold(certainty, distance)
        mode = NearText(
            concepts=concept_list,
            certainty=certainty,
            distance=distance,
            move_to=_move("move_to", move_to),
            move_away_from=_move("move_away_from", move_away_from),
        )
        return self._with_search(mode)

    def near_vector(
        self,
        vector: Sequence[float],
        *,
        certainty: Optional[float] = None,
        distance: Optional[float] = None,
    ) -> "QueryBuilder":
        _check_threshold(certainty, distance)
        mode = NearVector(vector=_check_vector(vector), certainty=certainty, distance=distance)
        return self._with_search(mode)

    def near_object(
        self,
        id: Optional[str] = None,
        *,
        beacon: Optional[str] = None,
        certainty: Optional[float] = None,
        distance: Optional[float] = None,
    ) -> "QueryBuilder":
        if (id is None) == (beacon is None):
            raise ValidationError("nearObject requires exactly one of id or beacon")
        if id is not None:
            _check_text("id", id)
        if beacon is not None:
            _check_text("beacon", beacon)
        _check_threshold(certainty, distance)
        mode = NearObject(id=id, beacon=beacon, certainty=certainty, distance=distance)
        return self._with_search(mode)

    def near_media(
        self,
        media_type: str,
        data: str,
        *,
        certainty: Optional[float] = None,
        distance: Optional[float] = None,
    ) -> "QueryBuilder":
        """Similarity search on base64-encoded media (image, audio, video, ...)."""
        if media_type not in MEDIA_TYPES:
            raise ValidationError(
                f"Unsupported media type {media_type!r}. Available: {sorted(MEDIA_TYPES)}"
            )
        _check_text("media data", data)
        _check_threshold(certainty, distance)
        mode = NearMedia(media_type=media_type, data=data, certainty=certainty, distance=distance)
        return self._with_search(mode)

    def bm25(self, query: str, *, properties: Optional[Sequence[str]] = None) -> "QueryBuilder":
        mode = BM25(
            query=_check_text("bm25 query", query),
            properties=_string_tuple("property", properties),
        )
        return self._with_search(mode)

    def hybrid(
        self,
        query: str,
        *,
        alpha: Optional[float] = None,
        vector: Optional[Sequence[float]] = None,
        properties: Optional[Sequence[str]] = None,
        fusion_type: Optional[str] = None,
    ) -> "QueryBuilder":
        _check_unit_interval("alpha", alpha)
        if fusion_type is not None and fusion_type not in FUSION_TYPES:
            raise ValidationError(f"fusion_type must be one of {list(FUSION_TYPES)}")
        mode = Hybrid(
            query=_check_text("hybrid query", query),
            alpha=alpha,
            vector=_check_vector(vector) if vector is not None else (),
            properties=_string_tuple("property", properties),
            fusion_type=fusion_type,
        )
        return self._with_search(mode)


def get(collection: str) -> QueryBuilder:
    """Start a ``Get`` query for ``collection``."""
    return QueryBuilder(QueryDescriptor(collection=collection))
