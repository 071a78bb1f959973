# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Query-layer exceptions."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class VectorQLError(Exception):
    """Base exception for query construction, rendering and normalization."""

    kind = "error"


class ValidationError(VectorQLError, ValueError):
    """Raised when a filter or query is constructed with invalid parameters."""

    kind = "validation_error"


class SerializationError(VectorQLError, ValueError):
    """Raised when a value or response cannot be mapped to or from the wire format."""

    kind = "serialization_error"


class GraphQLError(VectorQLError):
    """Raised when the service reports errors for a well-formed request."""

    kind = "graphql_error"

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        self.messages = [_error_message(err) for err in errors]
        super().__init__("; ".join(self.messages))


class TransportError(VectorQLError):
    """Raised by an executor when the request could not be completed."""

    kind = "transport_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        reason: str = "unknown_error",
        details: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.details = details


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    return str(error)
