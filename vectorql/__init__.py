# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Query construction and response normalization for GraphQL vector search."""

from vectorql import filters
from vectorql.aggregate import AggregateBuilder, AggregateDescriptor, aggregate
from vectorql.client import AsyncQueryClient, QueryClient
from vectorql.config import ClientConfig, load_config
from vectorql.errors import (
    GraphQLError,
    SerializationError,
    TransportError,
    ValidationError,
    VectorQLError,
)
from vectorql.executor import (
    AsyncExecutor,
    AsyncHttpExecutor,
    Executor,
    HttpExecutor,
    RequestOptions,
    create_executor,
)
from vectorql.expr import And, FilterNode, Leaf, Not, Operator, Or
from vectorql.normalizer import normalize, normalize_aggregate
from vectorql.query import Move, QueryBuilder, QueryDescriptor, get
from vectorql.renderer import render, render_aggregate, to_payload
from vectorql.serializer import serialize
from vectorql.values import GeoRange, ValueTag, classify, geo_range

__version__ = "0.1.0"

__all__ = [
    "AggregateBuilder",
    "AggregateDescriptor",
    "And",
    "AsyncExecutor",
    "AsyncHttpExecutor",
    "AsyncQueryClient",
    "ClientConfig",
    "Executor",
    "FilterNode",
    "GeoRange",
    "GraphQLError",
    "HttpExecutor",
    "Leaf",
    "Move",
    "Not",
    "Operator",
    "Or",
    "QueryBuilder",
    "QueryClient",
    "QueryDescriptor",
    "RequestOptions",
    "SerializationError",
    "TransportError",
    "ValidationError",
    "ValueTag",
    "VectorQLError",
    "aggregate",
    "classify",
    "create_executor",
    "filters",
    "geo_range",
    "get",
    "load_config",
    "normalize",
    "normalize_aggregate",
    "render",
    "render_aggregate",
    "serialize",
    "to_payload",
]
