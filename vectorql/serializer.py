# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Where-clause serialization."""

from __future__ import annotations

from typing import Any, Dict

from vectorql.errors import SerializationError
from vectorql.expr import And, FilterNode, Leaf, Not, Or
from vectorql.literals import GraphQLEnum, format_value
from vectorql.values import GeoRange, ValueTag

VALUE_FIELDS = {
    ValueTag.TEXT: "valueText",
    ValueTag.INTEGER: "valueInt",
    ValueTag.NUMBER: "valueNumber",
    ValueTag.BOOLEAN: "valueBoolean",
    ValueTag.DATE: "valueDate",
    ValueTag.TEXT_ARRAY: "valueTextArray",
    ValueTag.INT_ARRAY: "valueIntArray",
    ValueTag.NUMBER_ARRAY: "valueNumberArray",
    ValueTag.BOOLEAN_ARRAY: "valueBooleanArray",
    ValueTag.GEO_RANGE: "valueGeoRange",
}


def _geo_payload(geo: GeoRange) -> Dict[str, Any]:
    return {
        "geoCoordinates": {"latitude": geo.latitude, "longitude": geo.longitude},
        "distance": {"max": geo.distance},
    }


def _leaf_payload(leaf: Leaf) -> Dict[str, Any]:
    field = VALUE_FIELDS.get(leaf.value_tag)
    if field is None:
        raise SerializationError(f"No wire value field for tag {leaf.value_tag.value!r}")

    value = leaf.value
    if leaf.value_tag == ValueTag.GEO_RANGE:
        value = _geo_payload(value)
    elif isinstance(value, tuple):
        value = list(value)

    return {
        "path": list(leaf.path),
        "operator": GraphQLEnum(leaf.operator.wire_name),
        field: value,
    }


def serialize(node: FilterNode) -> Dict[str, Any]:
    """Convert a filter tree into the nested ``where`` argument structure."""
    match node:
        case Leaf():
            return _leaf_payload(node)
        case And(operands=operands):
            return {
                "operator": GraphQLEnum("And"),
                "operands": [serialize(child) for child in operands],
            }
        case Or(operands=operands):
            return {
                "operator": GraphQLEnum("Or"),
                "operands": [serialize(child) for child in operands],
            }
        case Not(operand=operand):
            return {"operator": GraphQLEnum("Not"), "operands": [serialize(operand)]}
        case _:
            raise TypeError(f"Unsupported filter node type: {type(node)!r}")


def to_graphql(node: FilterNode) -> str:
    """Serialize ``node`` and format it as a GraphQL input object literal."""
    return format_value(serialize(node))
