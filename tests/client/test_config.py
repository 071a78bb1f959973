# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0

import logging

import pydantic
import pytest

from vectorql.config import ClientConfig, load_config
from vectorql.executor import RequestOptions
from vectorql.utils import get_logger


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()
        assert config.base_url == "http://localhost:8080"
        assert config.graphql_path == "/v1/graphql"
        assert config.flatten_additional is False

    def test_base_url_normalized(self):
        assert ClientConfig(base_url=" weaviate:8080/ ").base_url == "http://weaviate:8080"

    def test_graphql_path_gets_leading_slash(self):
        assert ClientConfig(graphql_path="graphql").graphql_path == "/graphql"

    @pytest.mark.parametrize("kwargs", [{"timeout": 0}, {"base_url": "  "}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(pydantic.ValidationError):
            ClientConfig(**kwargs)

    def test_auth_headers(self):
        config = ClientConfig(api_key="k", headers={"X-Tenant": "t"})
        assert config.auth_headers() == {"X-Tenant": "t", "Authorization": "Bearer k"}
        assert ClientConfig().auth_headers() == {}

    def test_request_options(self):
        config = ClientConfig(timeout=12)
        assert config.request_options() == RequestOptions(timeout=12)
        assert config.request_options(timeout=1, correlation_id="x") == RequestOptions(
            timeout=1, correlation_id="x"
        )


class TestLoadConfig:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("VECTORQL_URL", "https://search.example.com")
        monkeypatch.setenv("VECTORQL_API_KEY", "secret")
        monkeypatch.setenv("VECTORQL_TIMEOUT", "2.5")
        monkeypatch.setenv("VECTORQL_FLATTEN_ADDITIONAL", "true")
        config = load_config()
        assert config.base_url == "https://search.example.com"
        assert config.api_key == "secret"
        assert config.timeout == 2.5
        assert config.flatten_additional is True

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("VECTORQL_URL", "https://search.example.com")
        assert load_config(base_url="http://other:1").base_url == "http://other:1"

    def test_empty_values_ignored(self, monkeypatch):
        monkeypatch.setenv("VECTORQL_GRAPHQL_PATH", "")
        assert load_config().graphql_path == "/v1/graphql"


def test_logger_namespace():
    logger = get_logger("client")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "vectorql.client"
