# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Client configuration."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from vectorql.executor import RequestOptions

ENV_PREFIX = "VECTORQL_"


class ClientConfig(BaseModel):
    """Connection and response-shaping settings for a query client."""

    base_url: str = "http://localhost:8080"
    graphql_path: str = "/v1/graphql"
    api_key: Optional[str] = None
    timeout: float = 60.0
    headers: Dict[str, str] = Field(default_factory=dict)
    flatten_additional: bool = False

    @field_validator("base_url")
    @classmethod
    def _strip_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base_url must not be empty")
        if not value.startswith(("http://", "https://")):
            value = f"http://{value}"
        return value

    @field_validator("graphql_path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    def auth_headers(self) -> Dict[str, str]:
        headers = dict(self.headers)
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def request_options(self, **extra: Any) -> RequestOptions:
        """Build per-request options; ``extra`` overrides the config defaults."""
        extra.setdefault("timeout", self.timeout)
        return RequestOptions(**extra)


def load_config(**overrides: Any) -> ClientConfig:
    """Build a ``ClientConfig`` from ``VECTORQL_*`` environment variables."""
    values: Dict[str, Any] = {}
    env_map = {
        "URL": "base_url",
        "GRAPHQL_PATH": "graphql_path",
        "API_KEY": "api_key",
        "TIMEOUT": "timeout",
        "FLATTEN_ADDITIONAL": "flatten_additional",
    }
    for suffix, key in env_map.items():
        raw = os.environ.get(f"{ENV_PREFIX}{suffix}")
        if raw is not None and raw != "":
            values[key] = raw
    values.update(overrides)
    return ClientConfig(**values)
