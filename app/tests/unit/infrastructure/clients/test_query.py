"""Unit tests for the backend table query builder."""

from datetime import datetime, timezone

import pytest

from infrastructure.clients.backend import TableQuery
from infrastructure.clients.backend.query import format_value, quote_value


@pytest.mark.unit
class TestFormatValue:
    def test_none_is_null(self):
        assert format_value(None) == "null"

    def test_booleans_are_lowercase(self):
        assert format_value(True) == "true"
        assert format_value(False) == "false"

    def test_datetimes_use_isoformat(self):
        value = datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc)
        assert format_value(value) == "2025-03-01T12:30:00+00:00"


@pytest.mark.unit
class TestTableQuery:
    def test_default_selects_everything(self):
        assert TableQuery().params() == [("select", "*")]

    def test_same_column_can_carry_two_filters(self):
        query = TableQuery().gte("timestamp", "2025-01-01").lte("timestamp", "2025-01-31")
        assert query.params() == [
            ("select", "*"),
            ("timestamp", "gte.2025-01-01"),
            ("timestamp", "lte.2025-01-31"),
        ]

    def test_eq_none_becomes_is_null(self):
        assert TableQuery().eq("resolved_at", None).params()[1] == ("resolved_at", "is.null")

    def test_in_and_or(self):
        query = TableQuery().in_("status", ["open", "resolved"]).or_("name.ilike.%a%,sku.ilike.%a%")
        assert query.params()[1:] == [
            ("status", "in.(open,resolved)"),
            ("or", "(name.ilike.%a%,sku.ilike.%a%)"),
        ]

    def test_order_limit_offset(self):
        query = (
            TableQuery()
            .select("id, slug")
            .order("created_at", ascending=False)
            .order("name")
            .limit(10)
            .offset(20)
        )
        assert query.params() == [
            ("select", "id, slug"),
            ("order", "created_at.desc,name.asc"),
            ("limit", "10"),
            ("offset", "20"),
        ]

    def test_mutation_params_omit_select(self):
        query = TableQuery().eq("id", 7)
        assert query.params(include_select=False) == [("id", "eq.7")]

    def test_has_filters(self):
        assert not TableQuery().order("name").has_filters
        assert TableQuery().neq("status", "archived").has_filters


@pytest.mark.unit
class TestQuoteValue:
    def test_reserved_characters_are_wrapped(self):
        assert quote_value("a,b (c)") == '"a,b (c)"'

    def test_quotes_and_backslashes_are_escaped(self):
        assert quote_value('x"y\\z') == '"x\\"y\\\\z"'
