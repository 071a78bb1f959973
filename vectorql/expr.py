# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Filter expression AST for where clauses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple, Union

from vectorql.values import ValueTag


class Operator(str, Enum):
    EQUAL = "Equal"
    NOT_EQUAL = "NotEqual"
    LESS_THAN = "LessThan"
    LESS_THAN_OR_EQUAL = "LessThanOrEqual"
    GREATER_THAN = "GreaterThan"
    GREATER_THAN_OR_EQUAL = "GreaterThanOrEqual"
    LIKE = "Like"
    CONTAINS_ANY = "ContainsAny"
    CONTAINS_ALL = "ContainsAll"
    IS_NULL = "IsNull"
    WITHIN_GEO_RANGE = "WithinGeoRange"

    @property
    def wire_name(self) -> str:
        return WIRE_OPERATORS[self]


# Names the service expects; the inclusive comparisons differ from the enum values.
WIRE_OPERATORS = {
    Operator.EQUAL: "Equal",
    Operator.NOT_EQUAL: "NotEqual",
    Operator.LESS_THAN: "LessThan",
    Operator.LESS_THAN_OR_EQUAL: "LessThanEqual",
    Operator.GREATER_THAN: "GreaterThan",
    Operator.GREATER_THAN_OR_EQUAL: "GreaterThanEqual",
    Operator.LIKE: "Like",
    Operator.CONTAINS_ANY: "ContainsAny",
    Operator.CONTAINS_ALL: "ContainsAll",
    Operator.IS_NULL: "IsNull",
    Operator.WITHIN_GEO_RANGE: "WithinGeoRange",
}


class _Combinable:
    """Operator shorthand shared by every filter node."""

    def __and__(self, other: "FilterNode") -> "And":
        if not isinstance(other, FILTER_NODE_TYPES):
            return NotImplemented
        return And((self, other))

    def __or__(self, other: "FilterNode") -> "Or":
        if not isinstance(other, FILTER_NODE_TYPES):
            return NotImplemented
        return Or((self, other))

    def __invert__(self) -> "Not":
        return Not(self)


@dataclass(frozen=True)
class Leaf(_Combinable):
    path: Tuple[str, ...]
    operator: Operator
    value: Any
    value_tag: ValueTag


@dataclass(frozen=True)
class And(_Combinable):
    operands: Tuple["FilterNode", ...]


@dataclass(frozen=True)
class Or(_Combinable):
    operands: Tuple["FilterNode", ...]


@dataclass(frozen=True)
class Not(_Combinable):
    operand: "FilterNode"


FilterNode = Union[Leaf, And, Or, Not]

FILTER_NODE_TYPES = (Leaf, And, Or, Not)
