# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0

"""Tests for where-clause serialization."""

import pytest

from vectorql import filters
from vectorql.errors import SerializationError
from vectorql.expr import Leaf, Operator
from vectorql.literals import GraphQLEnum
from vectorql.serializer import serialize, to_graphql
from vectorql.values import ValueTag


def test_text_leaf():
    assert serialize(filters.equal("status", "published")) == {
        "path": ["status"],
        "operator": "Equal",
        "valueText": "published",
    }


def test_operator_is_enum_symbol():
    payload = serialize(filters.equal("status", "published"))
    assert isinstance(payload["operator"], GraphQLEnum)


def test_integral_float_serializes_as_int():
    payload = serialize(filters.greater_than("price", 100.0))
    assert payload == {"path": ["price"], "operator": "GreaterThan", "valueInt": 100}


def test_inclusive_operators_use_service_names():
    assert serialize(filters.less_than_equal("n", 1))["operator"] == "LessThanEqual"
    assert serialize(filters.greater_than_equal("n", 1))["operator"] == "GreaterThanEqual"


@pytest.mark.parametrize(
    "value,field",
    [
        (1.5, "valueNumber"),
        (True, "valueBoolean"),
        (["a", "b"], "valueTextArray"),
        ([1, 2], "valueIntArray"),
        ([1.5, 2], "valueNumberArray"),
        ([True], "valueBooleanArray"),
    ],
)
def test_value_fields(value, field):
    payload = serialize(filters.equal("p", value))
    assert field in payload


def test_arrays_serialize_as_lists():
    payload = serialize(filters.contains_any("tags", ("ai", "ml")))
    assert payload["valueTextArray"] == ["ai", "ml"]


def test_geo_range():
    payload = serialize(filters.within_geo_range("location", (52.37, 4.89), 5000.0))
    assert payload == {
        "path": ["location"],
        "operator": "WithinGeoRange",
        "valueGeoRange": {
            "geoCoordinates": {"latitude": 52.37, "longitude": 4.89},
            "distance": {"max": 5000.0},
        },
    }


@pytest.mark.parametrize(
    "coordinates",
    [{"latitude": 52.37, "longitude": 4.89}, {"lat": 52.37, "lon": 4.89}],
)
def test_geo_range_from_mapping(coordinates):
    node = filters.within_geo_range("location", coordinates, 5000)
    assert serialize(node)["valueGeoRange"] == {
        "geoCoordinates": {"latitude": 52.37, "longitude": 4.89},
        "distance": {"max": 5000},
    }
    assert to_graphql(node) == (
        '{path: ["location"], operator: WithinGeoRange, valueGeoRange: '
        "{geoCoordinates: {latitude: 52.37, longitude: 4.89}, distance: {max: 5000}}}"
    )


def test_combinators():
    a = filters.equal("a", 1)
    b = filters.equal("b", 2)
    payload = serialize(filters.any_of([filters.negate(a), b]))
    assert payload == {
        "operator": "Or",
        "operands": [
            {"operator": "Not", "operands": [serialize(a)]},
            serialize(b),
        ],
    }


def test_single_operand_and_is_preserved():
    a = filters.equal("a", 1)
    assert serialize(filters.all_of([a])) == {"operator": "And", "operands": [serialize(a)]}


def test_unknown_node_type():
    with pytest.raises(TypeError):
        serialize({"path": ["a"]})


def test_to_graphql_literal():
    node = filters.all_of(
        [filters.equal("status", "published"), filters.greater_than("price", 9.99)]
    )
    assert to_graphql(node) == (
        '{operator: And, operands: ['
        '{path: ["status"], operator: Equal, valueText: "published"}, '
        '{path: ["price"], operator: GreaterThan, valueNumber: 9.99}]}'
    )


def test_hand_built_leaf_without_wire_field():
    leaf = Leaf(("a",), Operator.EQUAL, None, ValueTag.NULL)
    with pytest.raises(SerializationError, match="No wire value field"):
        serialize(leaf)
