# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Executors that send rendered documents to the GraphQL endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Protocol, runtime_checkable

import httpx

from vectorql.errors import SerializationError, TransportError
from vectorql.renderer import to_payload
from vectorql.utils import get_logger

if TYPE_CHECKING:
    from vectorql.config import ClientConfig

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Request-ID"

_STATUS_REASONS = {
    400: "bad_request",
    401: "authentication_failed",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
    500: "server_error",
    503: "service_unavailable",
}


@dataclass(frozen=True)
class RequestOptions:
    """Per-request settings forwarded untouched to the executor."""

    timeout: Optional[float] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    correlation_id: Optional[str] = None


@runtime_checkable
class Executor(Protocol):
    def execute(self, document: str, options: Any = None) -> Dict[str, Any]: ...


@runtime_checkable
class AsyncExecutor(Protocol):
    async def execute(self, document: str, options: Any = None) -> Dict[str, Any]: ...


def status_reason(status_code: int) -> str:
    return _STATUS_REASONS.get(status_code, "unknown_error")


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return "Request failed"


class _HttpExecutorBase:
    def __init__(
        self,
        base_url: str,
        *,
        graphql_path: str = "/v1/graphql",
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 60.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._graphql_path = graphql_path
        self._headers = dict(headers or {})
        self._timeout = timeout

    @property
    def url(self) -> str:
        return f"{self._base_url}{self._graphql_path}"

    @classmethod
    def from_config(cls, config: "ClientConfig", **kwargs: Any):
        return cls(
            config.base_url,
            graphql_path=config.graphql_path,
            headers=config.auth_headers(),
            timeout=config.timeout,
            **kwargs,
        )

    def _request_kwargs(self, document: str, options: Optional[RequestOptions]) -> Dict[str, Any]:
        if options is not None and not isinstance(options, RequestOptions):
            raise TypeError(f"HTTP executors expect RequestOptions, got {type(options).__name__}")
        options = options or RequestOptions()
        headers = dict(self._headers)
        headers.update(options.headers)
        if options.correlation_id:
            headers[CORRELATION_HEADER] = options.correlation_id
        return {
            "json": to_payload(document),
            "headers": headers,
            "params": dict(options.params) or None,
            "timeout": options.timeout if options.timeout is not None else self._timeout,
        }

    def _handle_response(self, response: httpx.Response) -> Dict[str, Any]:
        if not response.is_success:
            body = _decode_body(response)
            reason = status_reason(response.status_code)
            logger.error(
                "GraphQL request failed: status=%s reason=%s", response.status_code, reason
            )
            raise TransportError(
                _error_message(body),
                status_code=response.status_code,
                reason=reason,
                details=body,
            )
        body = _decode_body(response)
        if not isinstance(body, dict):
            raise SerializationError("GraphQL endpoint returned a non-object JSON body")
        return body


class HttpExecutor(_HttpExecutorBase):
    """Blocking executor backed by ``httpx.Client``."""

    def __init__(self, base_url: str, *, client: Optional[httpx.Client] = None, **kwargs: Any):
        super().__init__(base_url, **kwargs)
        self._owns_client = client is None
        self._client = client or httpx.Client()

    def execute(self, document: str, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        kwargs = self._request_kwargs(document, options)
        logger.debug("POST %s (%d chars)", self.url, len(document))
        try:
            response = self._client.post(self.url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("GraphQL request to %s failed: %s", self.url, e)
            raise TransportError(str(e), reason="network_error") from e
        return self._handle_response(response)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncHttpExecutor(_HttpExecutorBase):
    """Async executor backed by ``httpx.AsyncClient``."""

    def __init__(
        self, base_url: str, *, client: Optional[httpx.AsyncClient] = None, **kwargs: Any
    ):
        super().__init__(base_url, **kwargs)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def execute(
        self, document: str, options: Optional[RequestOptions] = None
    ) -> Dict[str, Any]:
        kwargs = self._request_kwargs(document, options)
        logger.debug("POST %s (%d chars)", self.url, len(document))
        try:
            response = await self._client.post(self.url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("GraphQL request to %s failed: %s", self.url, e)
            raise TransportError(str(e), reason="network_error") from e
        return self._handle_response(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpExecutor":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


_EXECUTOR_REGISTRY = {
    "sync": HttpExecutor,
    "async": AsyncHttpExecutor,
}


def create_executor(config: "ClientConfig", mode: str = "sync", **kwargs: Any):
    """Unified factory entrypoint for HTTP executors."""
    executor_cls = _EXECUTOR_REGISTRY.get(mode)
    if executor_cls is None:
        raise ValueError(
            f"Executor mode {mode} is not supported. Available modes: {sorted(_EXECUTOR_REGISTRY)}"
        )
    return executor_cls.from_config(config, **kwargs)
