"""
Unit tests for the joined-field resolver and its per-table column cache.
"""

import threading
import time
from unittest.mock import Mock

import pytest

from report_builder.metadata.resolver import JoinedFieldResolver, TableColumnCache


COLUMNS = {
    "customers": ["id", "name", "region"],
    "orders": ["id", "customer_id", "total"],
}


@pytest.fixture
def cache():
    return TableColumnCache()


@pytest.fixture
def lookup():
    return Mock(side_effect=lambda table: list(COLUMNS.get(table, [])))


class TestTableColumnCache:
    def test_set_and_get(self, cache):
        assert cache.get("customers") is None
        cache.set("customers", ["id"])
        assert cache.get("customers") == ["id"]
        assert "customers" in cache
        assert len(cache) == 1

    def test_returned_lists_are_copies(self, cache):
        cache.set("customers", ["id"])
        cache.get("customers").append("name")
        assert cache.get("customers") == ["id"]

    def test_invalidate_and_clear(self, cache):
        cache.set("a", ["x"])
        cache.set("b", ["y"])
        cache.invalidate("a")
        assert "a" not in cache
        cache.clear()
        assert len(cache) == 0


class TestJoinedFieldResolver:
    def test_no_tables(self, lookup, cache):
        resolved = JoinedFieldResolver(lookup, cache).resolve("")
        assert resolved.tables == []
        assert resolved.fields == []
        lookup.assert_not_called()

    def test_fields_are_combined_and_deduplicated(self, lookup, cache):
        resolver = JoinedFieldResolver(lookup, cache, max_workers=1)
        resolved = resolver.resolve("JOIN customers c ON 1=1 JOIN orders o ON o.customer_id = c.id")

        assert resolved.tables == ["customers", "orders"]
        assert resolved.fields == ["id", "name", "region", "customer_id", "total"]

    def test_lookups_are_cached(self, lookup, cache):
        resolver = JoinedFieldResolver(lookup, cache, max_workers=1)
        resolver.resolve("JOIN customers ON 1=1")
        resolver.resolve("JOIN customers ON 1=1 JOIN orders ON 1=1")

        assert [c.args[0] for c in lookup.call_args_list] == ["customers", "orders"]

    def test_empty_result_is_cached(self, lookup, cache):
        resolver = JoinedFieldResolver(lookup, cache, max_workers=1)
        assert resolver.columns_for("missing") == []
        assert resolver.columns_for("missing") == []
        assert lookup.call_count == 1

    def test_failing_table_does_not_affect_others(self, cache):
        def flaky(table):
            if table == "broken":
                raise RuntimeError("connection reset")
            return COLUMNS[table]

        resolver = JoinedFieldResolver(flaky, cache, max_workers=1)
        resolved = resolver.resolve("JOIN broken ON 1=1 JOIN orders ON 1=1")

        assert resolved.fields == COLUMNS["orders"]
        assert "broken" not in cache
        assert "orders" in cache

    def test_concurrent_lookups(self, cache):
        started = threading.Barrier(2, timeout=5)

        def slow_lookup(table):
            # Both lookups must be in flight at the same time to pass the barrier
            started.wait()
            time.sleep(0.01)
            return COLUMNS[table]

        resolver = JoinedFieldResolver(slow_lookup, cache, max_workers=4)
        resolved = resolver.resolve("JOIN customers ON 1=1 JOIN orders ON 1=1")

        assert resolved.tables == ["customers", "orders"]
        assert resolved.fields == ["id", "name", "region", "customer_id", "total"]

    def test_cached_table_skips_lookup_while_other_resolves(self, lookup, cache):
        cache.set("customers", ["cached_col"])
        resolver = JoinedFieldResolver(lookup, cache, max_workers=4)
        resolved = resolver.resolve("JOIN customers ON 1=1 JOIN orders ON 1=1")

        assert resolved.fields == ["cached_col", "id", "customer_id", "total"]
        lookup.assert_called_once_with("orders")
