# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""GraphQL input literal formatting.

Numbers use one canonical form: integers as plain decimals, floats as the
shortest round-trip digits in positional notation with at least one
fractional digit (``5000.0``, ``0.00001``). Exponent notation is never
emitted.
"""

from __future__ import annotations

import json
import math
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from vectorql.errors import SerializationError


class GraphQLEnum(str):
    """A string rendered as a bare enum symbol instead of a quoted string."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"GraphQLEnum({str.__repr__(self)})"


def format_number(value: Any) -> str:
    if isinstance(value, bool):
        raise SerializationError("Booleans are not numbers")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise SerializationError(f"Non-finite number cannot be serialized: {value!r}")
        text = format(Decimal(repr(value)), "f")
        if "." not in text:
            text += ".0"
        return text
    raise SerializationError(f"Not a number: {value!r}")


def format_string(value: str) -> str:
    """Quote ``value``; only quotes, backslashes and control characters are escaped."""
    return json.dumps(value, ensure_ascii=False)


def format_value(value: Any) -> str:
    """Render a Python value as a GraphQL input literal."""
    if value is None:
        return "null"
    if isinstance(value, GraphQLEnum):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, Enum):
        return format_value(value.value)
    if isinstance(value, str):
        return format_string(value)
    if isinstance(value, Mapping):
        items = ", ".join(f"{key}: {format_value(item)}" for key, item in value.items())
        return "{" + items + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    raise SerializationError(f"Cannot render value of type {type(value).__name__}")
