# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0

"""Tests for Aggregate queries."""

import pytest

from vectorql import filters
from vectorql.aggregate import AggregateDescriptor, PropertyAggregation, aggregate
from vectorql.errors import ValidationError
from vectorql.renderer import render_aggregate


class TestAggregateBuilder:
    def test_property_replaces_same_name(self):
        builder = aggregate("Article").property("wordCount", "mean").property("wordCount", "sum")
        assert builder.descriptor.properties == (PropertyAggregation("wordCount", ("sum",)),)

    def test_duplicate_metrics_collapsed(self):
        builder = aggregate("Article").property("wordCount", "mean", "mean", "maximum")
        assert builder.descriptor.properties[0].metrics == ("mean", "maximum")

    def test_unknown_metric(self):
        with pytest.raises(ValidationError, match="Unknown aggregate metric"):
            aggregate("Article").property("wordCount", "p99")

    def test_property_requires_metric(self):
        with pytest.raises(ValidationError):
            aggregate("Article").property("wordCount")

    def test_top_occurrences_limit_needs_metric(self):
        with pytest.raises(ValidationError):
            aggregate("Article").property("category", "count", top_occurrences_limit=3)

    def test_empty_selection(self):
        with pytest.raises(ValidationError, match="selects nothing"):
            aggregate("Article").build()

    def test_object_limit_requires_search(self):
        with pytest.raises(ValidationError, match="object_limit"):
            aggregate("Article").meta_count().object_limit(10).build()

    def test_search_modes_exclusive(self):
        with pytest.raises(ValidationError, match="search mode already set"):
            aggregate("Article").near_text("ai").near_vector([0.1])

    def test_collection_must_be_graphql_name(self):
        with pytest.raises(ValidationError, match="collection name"):
            aggregate("Article { x }").meta_count().build()

    def test_property_must_be_graphql_name(self):
        with pytest.raises(ValidationError, match="property name"):
            aggregate("Article").property("wordCount } }", "mean")

    def test_builder_is_immutable(self):
        base = aggregate("Article")
        base.meta_count()
        assert base.descriptor.meta_count is False


class TestRenderAggregate:
    def test_meta_count(self):
        assert render_aggregate(aggregate("Article").meta_count()) == (
            "{ Aggregate { Article { meta { count } } } }"
        )

    def test_properties(self):
        query = (
            aggregate("Article")
            .meta_count()
            .property("wordCount", "mean", "maximum")
            .property("category", "topOccurrences", top_occurrences_limit=3)
        )
        assert render_aggregate(query) == (
            "{ Aggregate { Article { meta { count } wordCount { mean maximum } "
            "category { topOccurrences(limit: 3) { value occurs } } } } }"
        )

    def test_group_by_and_where(self):
        query = (
            aggregate("Article")
            .meta_count()
            .where(filters.equal("status", "published"))
            .group_by("category")
            .limit(5)
        )
        assert render_aggregate(query) == (
            "{ Aggregate { Article("
            'where: {path: ["status"], operator: Equal, valueText: "published"}, '
            'groupBy: ["category"], limit: 5) '
            "{ meta { count } groupedBy { path value } } } }"
        )

    def test_search_with_object_limit(self):
        query = aggregate("Article").meta_count().near_text("ai", distance=0.3).object_limit(10)
        assert render_aggregate(query) == (
            '{ Aggregate { Article(nearText: {concepts: ["ai"], distance: 0.3}, '
            "objectLimit: 10) { meta { count } } } }"
        )

    def test_accepts_descriptor(self):
        descriptor = AggregateDescriptor(collection="Article", meta_count=True)
        assert render_aggregate(descriptor) == "{ Aggregate { Article { meta { count } } } }"
