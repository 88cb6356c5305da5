"""Tests for TableMutations, QueryCache and Notifier."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from permitsy.constants import CacheKeys, Tables
from permitsy.core.exceptions import BackendError
from permitsy.services import MutationConfig, NotificationLevel, Notifier, QueryCache, TableMutations


@pytest.fixture
def cache():
    return QueryCache()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def mutations(backend, cache, notifier):
    return TableMutations(backend, cache=cache, notifier=notifier)


class TestTableMutations:
    """Tests for TableMutations."""

    @pytest.mark.asyncio
    async def test_insert_success(self, backend, mutations, cache, notifier):
        cache.set(CacheKeys.TESTIMONIALS, ["stale"])
        on_success = MagicMock()
        config = MutationConfig(
            table=Tables.TESTIMONIALS,
            query_keys=CacheKeys.TESTIMONIALS,
            on_success=on_success,
            success_message="Testimonial added",
        )

        result = await mutations.insert(config, {"client_name": "Ana", "approved": True})

        assert result.success
        assert result.message == "Testimonial added"
        assert result.data["client_name"] == "Ana"
        assert CacheKeys.TESTIMONIALS not in cache
        on_success.assert_called_once_with(result.data)
        assert [n.level for n in notifier.history] == [NotificationLevel.SUCCESS]

    @pytest.mark.asyncio
    async def test_success_without_message_is_silent(self, backend, mutations, notifier):
        config = MutationConfig(table=Tables.TESTIMONIALS, query_keys=CacheKeys.TESTIMONIALS)

        result = await mutations.insert(config, {"client_name": "Ana"})

        assert result.message == "Operation completed"
        assert notifier.history == []

    @pytest.mark.asyncio
    async def test_update_invalidates_prefix(self, backend, mutations, cache):
        row = backend.seed(Tables.COUNTRIES, {"name": "France"})[0]
        cache.set((CacheKeys.COUNTRY_DETAIL, row["id"]), {"name": "France"})
        cache.set((CacheKeys.COUNTRY_DETAIL, "other"), {"name": "Spain"})
        on_success = AsyncMock()
        config = MutationConfig(
            table=Tables.COUNTRIES,
            query_keys=[CacheKeys.COUNTRY_DETAIL],
            on_success=on_success,
        )

        result = await mutations.update(config, row["id"], {"name": "République française"})

        assert result.data["name"] == "République française"
        assert len(cache) == 0
        on_success.assert_awaited_once_with(result.data)

    @pytest.mark.asyncio
    async def test_delete_returns_id(self, backend, mutations):
        row = backend.seed(Tables.ADDON_SERVICES, {"name": "Insurance", "price": 20})[0]
        config = MutationConfig(table=Tables.ADDON_SERVICES, query_keys=CacheKeys.ADDON_SERVICES)

        result = await mutations.delete(config, row["id"])

        assert result.success
        assert result.data == row["id"]
        assert backend.tables[Tables.ADDON_SERVICES] == []

    @pytest.mark.asyncio
    async def test_error_notifies_and_keeps_cache(self, backend, mutations, cache, notifier):
        error = BackendError("permission denied", code="42501")
        backend.fail(Tables.TESTIMONIALS, "insert", error)
        cache.set(CacheKeys.TESTIMONIALS, ["cached"])
        on_error = MagicMock()
        on_success = MagicMock()
        config = MutationConfig(
            table=Tables.TESTIMONIALS,
            query_keys=CacheKeys.TESTIMONIALS,
            on_success=on_success,
            on_error=on_error,
        )

        result = await mutations.insert(config, {"client_name": "Ana"})

        assert not result.success
        assert result.message == "permission denied"
        assert cache.get(CacheKeys.TESTIMONIALS) == ["cached"]
        on_error.assert_called_once_with(error)
        on_success.assert_not_called()
        assert notifier.history[0].level is NotificationLevel.ERROR
        assert notifier.history[0].description == "permission denied"

    @pytest.mark.asyncio
    async def test_configured_error_message(self, backend, mutations, notifier):
        backend.fail(Tables.TESTIMONIALS, "delete", BackendError("boom"))
        config = MutationConfig(
            table=Tables.TESTIMONIALS,
            query_keys=CacheKeys.TESTIMONIALS,
            error_message="Could not delete testimonial",
        )

        result = await mutations.delete(config, "id-1")

        assert result.message == "Could not delete testimonial"
        assert notifier.history[0].description == "Could not delete testimonial"

    @pytest.mark.asyncio
    async def test_empty_shared_cache_is_used(self, backend):
        shared = QueryCache()
        notifier = Notifier()
        mutations = TableMutations(backend, cache=shared, notifier=notifier)
        config = MutationConfig(table=Tables.TESTIMONIALS, query_keys=CacheKeys.TESTIMONIALS)

        assert mutations.cache is shared
        assert mutations.notifier is notifier

        shared.set(CacheKeys.TESTIMONIALS, ["stale"])
        await mutations.insert(config, {"client_name": "Ana"})

        assert CacheKeys.TESTIMONIALS not in shared

    @pytest.mark.asyncio
    async def test_invalidates_every_listed_key(self, backend, mutations, cache):
        row = backend.seed(Tables.COUNTRIES, {"name": "France"})[0]
        cache.set(CacheKeys.COUNTRIES, ["France"])
        cache.set((CacheKeys.COUNTRY, row["id"]), {"name": "France"})
        cache.set((CacheKeys.COUNTRY, "es"), {"name": "Spain"})
        cache.set(CacheKeys.LEGAL_PAGES, ["privacy-policy"])
        config = MutationConfig(
            table=Tables.COUNTRIES,
            query_keys=[CacheKeys.COUNTRIES, [CacheKeys.COUNTRY, row["id"]]],
        )

        await mutations.update(config, row["id"], {"popularity": 5})

        assert CacheKeys.COUNTRIES not in cache
        assert (CacheKeys.COUNTRY, row["id"]) not in cache
        assert (CacheKeys.COUNTRY, "es") in cache
        assert CacheKeys.LEGAL_PAGES in cache


class TestMutationConfig:
    """Tests for cache key normalisation."""

    def test_string_is_one_key(self):
        config = MutationConfig(table=Tables.TESTIMONIALS, query_keys="testimonials")
        assert config.cache_keys == [("testimonials",)]

    def test_tuple_is_one_hierarchical_key(self):
        config = MutationConfig(table=Tables.COUNTRIES, query_keys=("country", "fr"))
        assert config.cache_keys == [("country", "fr")]

    def test_list_holds_several_keys(self):
        config = MutationConfig(
            table=Tables.COUNTRIES, query_keys=["countries", ["country", "fr"], ("documents", "fr")]
        )
        assert config.cache_keys == [("countries",), ("country", "fr"), ("documents", "fr")]


class TestQueryCache:
    """Tests for QueryCache."""

    @pytest.mark.asyncio
    async def test_fetch_loads_once(self, cache):
        loader = AsyncMock(return_value=["France"])

        first = await cache.fetch(CacheKeys.COUNTRIES, loader)
        second = await cache.fetch((CacheKeys.COUNTRIES,), loader)

        assert first == second == ["France"]
        loader.assert_awaited_once()

    def test_invalidate_returns_count(self, cache):
        cache.set(("countryDetail", "a"), 1)
        cache.set(("countryDetail", "b"), 2)
        cache.set("countries", 3)

        assert cache.invalidate("countryDetail") == 2
        assert "countries" in cache

    def test_invalidate_country(self, cache):
        cache.set((CacheKeys.COUNTRY, "fr"), 1)
        cache.set((CacheKeys.COUNTRY, "es"), 2)
        cache.set(CacheKeys.POPULAR_DESTINATIONS, 3)
        cache.set(CacheKeys.LEGAL_PAGES, 4)

        cache.invalidate_country("fr")

        assert (CacheKeys.COUNTRY, "fr") not in cache
        assert (CacheKeys.COUNTRY, "es") in cache
        assert CacheKeys.POPULAR_DESTINATIONS not in cache
        assert CacheKeys.LEGAL_PAGES in cache

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.clear()
        assert len(cache) == 0


class TestNotifier:
    """Tests for Notifier."""

    def test_history_is_bounded(self):
        notifier = Notifier(history_size=2)

        notifier.success("one")
        notifier.success("two")
        notifier.error("three", "details")

        assert [n.title for n in notifier.history] == ["two", "three"]

    def test_to_dict(self, notifier):
        data = notifier.error("Error", "failed").to_dict()

        assert data["level"] == "error"
        assert data["description"] == "failed"
        assert data["timestamp"]
