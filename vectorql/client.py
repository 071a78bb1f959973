# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Query clients: render, execute and normalize in one call."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from vectorql.aggregate import AggregateBuilder, AggregateDescriptor, aggregate
from vectorql.config import ClientConfig
from vectorql.executor import AsyncExecutor, Executor, create_executor
from vectorql.normalizer import normalize, normalize_aggregate
from vectorql.query import QueryBuilder, QueryDescriptor, get
from vectorql.renderer import render, render_aggregate
from vectorql.utils import get_logger

logger = get_logger(__name__)

GetQuery = Union[QueryBuilder, QueryDescriptor]
AggregateQuery = Union[AggregateBuilder, AggregateDescriptor]


def _collection(query: Union[GetQuery, AggregateQuery]) -> str:
    if isinstance(query, (QueryBuilder, AggregateBuilder)):
        return query.descriptor.collection
    return query.collection


class QueryClient:
    """Synchronous pipeline over an ``Executor``.

    ``options`` passed to ``run``/``run_aggregate`` reach the executor as-is.
    Errors from rendering, execution and normalization propagate unchanged.
    """

    def __init__(self, executor: Executor, config: Optional[ClientConfig] = None):
        self._executor = executor
        self._config = config or ClientConfig()

    @classmethod
    def from_config(cls, config: ClientConfig) -> "QueryClient":
        return cls(create_executor(config, "sync"), config)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def get(self, collection: str) -> QueryBuilder:
        return get(collection)

    def aggregate(self, collection: str) -> AggregateBuilder:
        return aggregate(collection)

    def run(self, query: GetQuery, options: Any = None) -> List[Dict[str, Any]]:
        document = render(query)
        logger.debug("Executing Get query: %s", document)
        raw = self._executor.execute(document, options)
        return normalize(raw, _collection(query), flatten=self._config.flatten_additional)

    def run_aggregate(self, query: AggregateQuery, options: Any = None) -> List[Dict[str, Any]]:
        document = render_aggregate(query)
        logger.debug("Executing Aggregate query: %s", document)
        raw = self._executor.execute(document, options)
        return normalize_aggregate(raw, _collection(query))


class AsyncQueryClient:
    """Async counterpart of ``QueryClient`` over an ``AsyncExecutor``."""

    def __init__(self, executor: AsyncExecutor, config: Optional[ClientConfig] = None):
        self._executor = executor
        self._config = config or ClientConfig()

    @classmethod
    def from_config(cls, config: ClientConfig) -> "AsyncQueryClient":
        return cls(create_executor(config, "async"), config)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def get(self, collection: str) -> QueryBuilder:
        return get(collection)

    def aggregate(self, collection: str) -> AggregateBuilder:
        return aggregate(collection)

    async def run(self, query: GetQuery, options: Any = None) -> List[Dict[str, Any]]:
        document = render(query)
        logger.debug("Executing Get query: %s", document)
        raw = await self._executor.execute(document, options)
        return normalize(raw, _collection(query), flatten=self._config.flatten_additional)

    async def run_aggregate(
        self, query: AggregateQuery, options: Any = None
    ) -> List[Dict[str, Any]]:
        document = render_aggregate(query)
        logger.debug("Executing Aggregate query: %s", document)
        raw = await self._executor.execute(document, options)
        return normalize_aggregate(raw, _collection(query))
