# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0

"""Tests for the query clients."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from vectorql import filters
from vectorql.client import AsyncQueryClient, QueryClient
from vectorql.config import ClientConfig
from vectorql.errors import GraphQLError, TransportError, ValidationError
from vectorql.executor import AsyncHttpExecutor, HttpExecutor, RequestOptions

GET_RESPONSE = {
    "data": {"Get": {"Article": [{"title": "A", "_additional": {"id": "1", "distance": 0.2}}]}}
}


class _FakeExecutor:
    """Records every call and replays a canned response."""

    def __init__(self, response):
        self.response = response
        self.calls = []

    def execute(self, document, options=None):
        self.calls.append((document, options))
        return self.response


class TestQueryClient:
    def test_run_renders_executes_and_normalizes(self):
        executor = _FakeExecutor(GET_RESPONSE)
        client = QueryClient(executor)
        query = client.get("Article").fields("title").additional("id", "distance").limit(1)

        records = client.run(query)

        assert records == [{"title": "A", "_additional": {"id": "1", "distance": 0.2}}]
        document, options = executor.calls[0]
        assert document == (
            "{ Get { Article(limit: 1) { title _additional { id distance } } } }"
        )
        assert options is None

    def test_options_passed_untouched(self):
        executor = _FakeExecutor(GET_RESPONSE)
        options = object()
        client = QueryClient(executor)
        client.run(client.get("Article").fields("title"), options)
        assert executor.calls[0][1] is options

    def test_flatten_from_config(self):
        executor = _FakeExecutor(GET_RESPONSE)
        client = QueryClient(executor, ClientConfig(flatten_additional=True))
        records = client.run(client.get("Article").fields("title"))
        assert records == [{"title": "A", "_id": "1", "_distance": 0.2}]

    def test_validation_error_before_execute(self):
        executor = MagicMock()
        client = QueryClient(executor)
        with pytest.raises(ValidationError):
            client.run(client.get("Article"))
        executor.execute.assert_not_called()

    def test_graphql_errors_propagate(self):
        executor = _FakeExecutor({"errors": [{"message": "bad where"}], "data": None})
        client = QueryClient(executor)
        with pytest.raises(GraphQLError, match="bad where"):
            client.run(client.get("Article").fields("title"))

    def test_transport_errors_propagate(self):
        executor = MagicMock()
        executor.execute.side_effect = TransportError("down", reason="network_error")
        client = QueryClient(executor)
        with pytest.raises(TransportError):
            client.run(client.get("Article").fields("title"))

    def test_run_aggregate(self):
        executor = _FakeExecutor(
            {"data": {"Aggregate": {"Article": [{"meta": {"count": 7}}]}}}
        )
        client = QueryClient(executor)
        query = client.aggregate("Article").meta_count().where(filters.equal("status", "draft"))
        assert client.run_aggregate(query) == [{"meta": {"count": 7}}]
        assert executor.calls[0][0].startswith("{ Aggregate { Article(where: ")

    def test_from_config(self):
        client = QueryClient.from_config(ClientConfig(base_url="http://example:8080"))
        assert isinstance(client._executor, HttpExecutor)
        assert client.config.base_url == "http://example:8080"
        client._executor.close()


class TestAsyncQueryClient:
    async def test_run(self):
        executor = MagicMock()
        executor.execute = AsyncMock(return_value=GET_RESPONSE)
        client = AsyncQueryClient(executor, ClientConfig(flatten_additional=True))
        options = RequestOptions(correlation_id="c-1")

        records = await client.run(client.get("Article").fields("title"), options)

        assert records == [{"title": "A", "_id": "1", "_distance": 0.2}]
        executor.execute.assert_awaited_once_with(
            "{ Get { Article { title } } }", options
        )

    async def test_run_aggregate(self):
        executor = MagicMock()
        executor.execute = AsyncMock(
            return_value={"data": {"Aggregate": {"Article": [{"meta": {"count": 2}}]}}}
        )
        client = AsyncQueryClient(executor)
        records = await client.run_aggregate(client.aggregate("Article").meta_count())
        assert records == [{"meta": {"count": 2}}]

    async def test_errors_propagate(self):
        executor = MagicMock()
        executor.execute = AsyncMock(return_value={"errors": [{"message": "boom"}]})
        client = AsyncQueryClient(executor)
        with pytest.raises(GraphQLError):
            await client.run(client.get("Article").fields("title"))

    async def test_from_config(self):
        client = AsyncQueryClient.from_config(ClientConfig())
        assert isinstance(client._executor, AsyncHttpExecutor)
        await client._executor.aclose()
