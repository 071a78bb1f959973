# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Value classification for filter operands."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Mapping, Sequence

from vectorql.errors import SerializationError


class ValueTag(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    TEXT_ARRAY = "textArray"
    INT_ARRAY = "intArray"
    NUMBER_ARRAY = "numberArray"
    BOOLEAN_ARRAY = "booleanArray"
    GEO_RANGE = "geoRange"
    NULL = "null"


ARRAY_TAGS = {
    ValueTag.TEXT: ValueTag.TEXT_ARRAY,
    ValueTag.INTEGER: ValueTag.INT_ARRAY,
    ValueTag.NUMBER: ValueTag.NUMBER_ARRAY,
    ValueTag.BOOLEAN: ValueTag.BOOLEAN_ARRAY,
}


@dataclass(frozen=True)
class GeoRange:
    """Coordinates plus a maximum distance in meters."""

    latitude: float
    longitude: float
    distance: float


def geo_range(latitude: float, longitude: float, distance: float) -> GeoRange:
    geo = GeoRange(latitude=latitude, longitude=longitude, distance=distance)
    _check_geo(geo)
    return geo


def _check_finite(value: float) -> None:
    if math.isnan(value) or math.isinf(value):
        raise SerializationError(f"Non-finite number cannot be serialized: {value!r}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_geo(geo: GeoRange) -> None:
    for name in ("latitude", "longitude", "distance"):
        component = getattr(geo, name)
        if not _is_number(component):
            raise SerializationError(f"Geo range {name} must be a number, got {component!r}")
        _check_finite(float(component))
    if not -90.0 <= geo.latitude <= 90.0:
        raise SerializationError(f"Latitude out of range [-90, 90]: {geo.latitude}")
    if not -180.0 <= geo.longitude <= 180.0:
        raise SerializationError(f"Longitude out of range [-180, 180]: {geo.longitude}")
    if geo.distance < 0:
        raise SerializationError(f"Geo range distance must be non-negative: {geo.distance}")


def _classify_scalar(value: Any) -> ValueTag:
    if value is None:
        return ValueTag.NULL
    if isinstance(value, bool):
        return ValueTag.BOOLEAN
    if isinstance(value, int):
        return ValueTag.INTEGER
    if isinstance(value, float):
        _check_finite(value)
        return ValueTag.INTEGER if value.is_integer() else ValueTag.NUMBER
    if isinstance(value, str):
        return ValueTag.TEXT
    if isinstance(value, GeoRange):
        _check_geo(value)
        return ValueTag.GEO_RANGE
    if isinstance(value, (datetime, date)):
        return ValueTag.DATE
    raise SerializationError(f"Unsupported value type: {type(value).__name__}")


def _classify_array(values: Sequence[Any]) -> ValueTag:
    if not values:
        raise SerializationError("Cannot classify an empty list")

    element_tags = set()
    for item in values:
        if isinstance(item, (list, tuple)):
            raise SerializationError("Nested lists are not supported")
        element_tags.add(_classify_scalar(item))

    if len(element_tags) == 1:
        tag = element_tags.pop()
        if tag in ARRAY_TAGS:
            return ARRAY_TAGS[tag]
    elif element_tags == {ValueTag.INTEGER, ValueTag.NUMBER}:
        return ValueTag.NUMBER_ARRAY

    names = sorted(t.value for t in element_tags)
    raise SerializationError(f"List elements have mixed or unsupported types: {names}")


def classify(value: Any) -> ValueTag:
    """Return the canonical wire value tag for ``value``.

    Booleans are checked before numbers, and floats without a fractional
    part are tagged as integers. Raises ``SerializationError`` for empty or
    mixed lists, non-finite numbers and unsupported types.
    """
    if isinstance(value, (list, tuple)):
        return _classify_array(value)
    return _classify_scalar(value)


def _format_date(value: date) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc).isoformat()


def coerce(value: Any, tag: ValueTag) -> Any:
    """Convert an already-classified value to its wire representation."""
    if tag == ValueTag.INTEGER:
        return int(value)
    if tag == ValueTag.NUMBER:
        return float(value)
    if tag == ValueTag.INT_ARRAY:
        return tuple(int(v) for v in value)
    if tag == ValueTag.NUMBER_ARRAY:
        return tuple(float(v) for v in value)
    if tag in (ValueTag.TEXT_ARRAY, ValueTag.BOOLEAN_ARRAY):
        return tuple(value)
    if tag == ValueTag.DATE:
        return _format_date(value)
    return value


def to_geo_range(coordinates: Any, distance: Any = None) -> GeoRange:
    """Build a ``GeoRange`` from a (lat, lon) pair or a coordinate mapping."""
    if isinstance(coordinates, GeoRange):
        if distance is None:
            distance = coordinates.distance
        return geo_range(coordinates.latitude, coordinates.longitude, distance)
    if distance is None:
        raise SerializationError("Geo range requires a maximum distance")
    if isinstance(coordinates, Mapping):
        lat = coordinates.get("latitude", coordinates.get("lat"))
        lon = coordinates.get("longitude", coordinates.get("lon"))
    elif isinstance(coordinates, (list, tuple)) and len(coordinates) == 2:
        lat, lon = coordinates
    else:
        raise SerializationError(f"Malformed geo coordinates: {coordinates!r}")
    if lat is None or lon is None:
        raise SerializationError(f"Malformed geo coordinates: {coordinates!r}")
    return geo_range(lat, lon, distance)
