# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Constructors for filter expressions.

Leaf constructors classify their value once and store the resolved tag, so a
node that exists is always serializable. Combinators reject empty operand
lists at construction time.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence, Tuple, Union

from vectorql.errors import SerializationError, ValidationError
from vectorql.expr import FILTER_NODE_TYPES, And, FilterNode, Leaf, Not, Operator, Or
from vectorql.values import GeoRange, ValueTag, classify, coerce, to_geo_range

Path = Union[str, Sequence[str]]

CREATION_TIME_PATH = "_creationTimeUnix"
UPDATE_TIME_PATH = "_lastUpdateTimeUnix"

_ARRAY_TAGS = {
    ValueTag.TEXT_ARRAY,
    ValueTag.INT_ARRAY,
    ValueTag.NUMBER_ARRAY,
    ValueTag.BOOLEAN_ARRAY,
}


def _normalize_path(path: Path) -> Tuple[str, ...]:
    if isinstance(path, str):
        segments: Tuple[Any, ...] = (path,)
    elif isinstance(path, (list, tuple)):
        segments = tuple(path)
    else:
        raise ValidationError(f"Filter path must be a string or a list of strings, got {path!r}")
    if not segments:
        raise ValidationError("Filter path must not be empty")
    for segment in segments:
        if not isinstance(segment, str) or not segment.strip():
            raise ValidationError(f"Invalid filter path segment: {segment!r}")
    return segments


def _leaf(path: Path, operator: Operator, value: Any) -> Leaf:
    segments = _normalize_path(path)
    tag = classify(value)
    if tag == ValueTag.NULL:
        raise SerializationError(
            f"Cannot compare {'.'.join(segments)} to null; use is_null() instead"
        )
    return Leaf(path=segments, operator=operator, value=coerce(value, tag), value_tag=tag)


def by_property(path: Path, operator: Union[Operator, str], value: Any) -> FilterNode:
    """Build a leaf for any operator, dispatching to the typed constructor.

    ``operator`` may be an ``Operator``, its value (``"GreaterThanOrEqual"``),
    the wire name (``"GreaterThanEqual"``) or a snake-case name
    (``"greater_than_equal"``).
    """
    if isinstance(operator, Operator):
        op = operator
    else:
        op = _OPERATOR_ALIASES.get(str(operator).lower())
        if op is None:
            raise ValidationError(f"Unknown filter operator: {operator!r}")
    return _CONSTRUCTORS[op](path, value)


def equal(path: Path, value: Any) -> Leaf:
    return _leaf(path, Operator.EQUAL, value)


def not_equal(path: Path, value: Any) -> Leaf:
    return _leaf(path, Operator.NOT_EQUAL, value)


def less_than(path: Path, value: Any) -> Leaf:
    return _leaf(path, Operator.LESS_THAN, value)


def less_than_equal(path: Path, value: Any) -> Leaf:
    return _leaf(path, Operator.LESS_THAN_OR_EQUAL, value)


def greater_than(path: Path, value: Any) -> Leaf:
    return _leaf(path, Operator.GREATER_THAN, value)


def greater_than_equal(path: Path, value: Any) -> Leaf:
    return _leaf(path, Operator.GREATER_THAN_OR_EQUAL, value)


def like(path: Path, pattern: str) -> Leaf:
    """Wildcard match; ``*`` and ``?`` are passed through unchecked."""
    if not isinstance(pattern, str):
        raise ValidationError(f"Like requires a string pattern, got {type(pattern).__name__}")
    return _leaf(path, Operator.LIKE, pattern)


def _contains(path: Path, operator: Operator, values: Any) -> Leaf:
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"{operator.value} requires a list of values")
    node = _leaf(path, operator, values)
    if node.value_tag not in _ARRAY_TAGS:
        raise ValidationError(f"{operator.value} requires a list of values")
    return node


def contains_any(path: Path, values: Sequence[Any]) -> Leaf:
    return _contains(path, Operator.CONTAINS_ANY, values)


def contains_all(path: Path, values: Sequence[Any]) -> Leaf:
    return _contains(path, Operator.CONTAINS_ALL, values)


def is_null(path: Path, flag: bool = True) -> Leaf:
    if not isinstance(flag, bool):
        raise ValidationError(f"IsNull takes a boolean flag, got {flag!r}")
    return Leaf(
        path=_normalize_path(path),
        operator=Operator.IS_NULL,
        value=flag,
        value_tag=ValueTag.BOOLEAN,
    )


def within_geo_range(path: Path, coordinates: Any, distance: Any = None) -> Leaf:
    """Match geo properties within ``distance`` meters of ``coordinates``.

    ``coordinates`` may be a ``(latitude, longitude)`` pair, a mapping with
    ``latitude``/``longitude`` (or ``lat``/``lon``) keys, or a ``GeoRange``.
    """
    geo = to_geo_range(coordinates, distance)
    return Leaf(
        path=_normalize_path(path),
        operator=Operator.WITHIN_GEO_RANGE,
        value=geo,
        value_tag=ValueTag.GEO_RANGE,
    )


def by_id(operator: Union[Operator, str], uuid: str) -> FilterNode:
    if not isinstance(uuid, str) or not uuid:
        raise ValidationError("Object id filter requires a non-empty string")
    return by_property(["id"], operator, uuid)


def by_ref(
    reference: str,
    target_collection: str,
    prop: str,
    operator: Union[Operator, str],
    value: Any,
) -> FilterNode:
    """Filter on a property of a referenced object."""
    return by_property([reference, target_collection, prop], operator, value)


def by_creation_time(operator: Union[Operator, str], value: Any) -> FilterNode:
    return by_property([CREATION_TIME_PATH], operator, value)


def by_update_time(operator: Union[Operator, str], value: Any) -> FilterNode:
    return by_property([UPDATE_TIME_PATH], operator, value)


def _operands(nodes: Iterable[FilterNode]) -> Tuple[FilterNode, ...]:
    if isinstance(nodes, FILTER_NODE_TYPES):
        raise ValidationError("Combinators take a list of filters, not a single filter")
    operands = tuple(nodes)
    if not operands:
        raise ValidationError("combinator requires at least one operand")
    for operand in operands:
        if not isinstance(operand, FILTER_NODE_TYPES):
            raise ValidationError(f"Not a filter node: {operand!r}")
    return operands


def all_of(nodes: Iterable[FilterNode]) -> And:
    return And(_operands(nodes))


def any_of(nodes: Iterable[FilterNode]) -> Or:
    return Or(_operands(nodes))


def negate(node: FilterNode) -> Not:
    if not isinstance(node, FILTER_NODE_TYPES):
        raise ValidationError(f"Not a filter node: {node!r}")
    return Not(node)


_CONSTRUCTORS = {
    Operator.EQUAL: equal,
    Operator.NOT_EQUAL: not_equal,
    Operator.LESS_THAN: less_than,
    Operator.LESS_THAN_OR_EQUAL: less_than_equal,
    Operator.GREATER_THAN: greater_than,
    Operator.GREATER_THAN_OR_EQUAL: greater_than_equal,
    Operator.LIKE: like,
    Operator.CONTAINS_ANY: contains_any,
    Operator.CONTAINS_ALL: contains_all,
    Operator.IS_NULL: is_null,
    Operator.WITHIN_GEO_RANGE: within_geo_range,
}

_OPERATOR_ALIASES = {
    alias.lower(): op
    for op in Operator
    for alias in (op.value, op.wire_name, op.name, op.name.replace("_OR_", "_"))
}

__all__ = [
    "GeoRange",
    "all_of",
    "any_of",
    "by_creation_time",
    "by_id",
    "by_property",
    "by_ref",
    "by_update_time",
    "contains_all",
    "contains_any",
    "equal",
    "greater_than",
    "greater_than_equal",
    "is_null",
    "less_than",
    "less_than_equal",
    "like",
    "negate",
    "not_equal",
    "within_geo_range",
]
