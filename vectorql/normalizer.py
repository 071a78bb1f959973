# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Response normalization for GraphQL query results."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Optional

from vectorql.errors import GraphQLError, SerializationError

ADDITIONAL_KEY = "_additional"


def _check_errors(raw: Mapping[str, Any]) -> None:
    errors = raw.get("errors")
    if errors is None:
        return
    if not isinstance(errors, list):
        raise SerializationError(f"Response 'errors' must be a list, got {type(errors).__name__}")
    if errors:
        raise GraphQLError(copy.deepcopy(errors))


def _operation_payload(raw: Any, operation: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise SerializationError(f"Response must be a JSON object, got {type(raw).__name__}")
    _check_errors(raw)

    data = raw.get("data")
    if not isinstance(data, Mapping):
        raise SerializationError("Response has no 'data' object")
    payload = data.get(operation)
    if not isinstance(payload, Mapping):
        raise SerializationError(f"Response data has no {operation!r} object")
    return payload


def _collection_items(payload: Mapping[str, Any], collection: Optional[str]) -> List[Any]:
    if collection is None:
        if len(payload) != 1:
            raise SerializationError(
                f"Cannot infer collection from payload keys {sorted(payload)}; pass it explicitly"
            )
        collection = next(iter(payload))
    if collection not in payload:
        raise SerializationError(f"Collection {collection!r} missing from response payload")

    items = payload[collection]
    if not isinstance(items, list):
        raise SerializationError(
            f"Collection {collection!r} payload must be a list, got {type(items).__name__}"
        )
    for item in items:
        if not isinstance(item, Mapping):
            raise SerializationError(f"Record must be an object, got {type(item).__name__}")
    return items


def flatten_additional(record: Dict[str, Any]) -> Dict[str, Any]:
    """Move ``_additional`` entries onto the record as ``_<key>``."""
    additional = record.pop(ADDITIONAL_KEY, None)
    if not isinstance(additional, Mapping):
        if additional is not None:
            record[ADDITIONAL_KEY] = additional
        return record
    for key, value in additional.items():
        record[f"_{key}"] = value
    return record


def normalize(
    raw: Any,
    collection: Optional[str] = None,
    *,
    operation: str = "Get",
    flatten: bool = False,
) -> List[Dict[str, Any]]:
    """Extract the record list for ``collection`` from a raw response.

    Any non-empty ``errors`` array raises ``GraphQLError`` without looking at
    ``data``. Unexpected shapes raise ``SerializationError``. Records are
    deep copies, so the input is never mutated. When ``collection`` is
    omitted the operation payload must contain exactly one collection.
    """
    payload = _operation_payload(raw, operation)
    records = [dict(item) for item in copy.deepcopy(_collection_items(payload, collection))]
    if flatten:
        records = [flatten_additional(record) for record in records]
    return records


def normalize_aggregate(raw: Any, collection: Optional[str] = None) -> List[Dict[str, Any]]:
    """Return the aggregation groups for ``collection``."""
    return normalize(raw, collection, operation="Aggregate")
