"""Tests for FilterSession generations, debouncing and cancellation."""

import asyncio
from unittest.mock import patch

import duckdb
import pytest

from closet_filter.errors import StorageFailure
from closet_filter.models.filter_state import FilterState, FilterType
from closet_filter.models.item import Item
from closet_filter.services.session import FilterSession


def _run(coro):
    return asyncio.run(coro)


@pytest.fixture
def make_session(manager, search_service):
    def _make(debounce_seconds=0.02):
        return FilterSession(manager, search_service, debounce_seconds=debounce_seconds)

    return _make


class TestGenerations:
    """Each effective change starts a new generation."""

    def test_start_emits_current_state(self, make_session, labels):
        async def scenario():
            session = make_session()
            session.start()
            result = await session.next_result(timeout=5)
            await session.close()
            return result

        result = _run(scenario())
        assert result.generation == 1
        assert labels(result.items) == ["A", "B", "C"]

    def test_filter_change_bumps_generation(self, make_session, labels):
        async def scenario():
            session = make_session()
            session.start()
            session.update_filter(FilterType.SIZE, [100])
            session.update_filter(FilterType.COLOR, ["red"])
            result = await session.next_result(timeout=5)
            await session.close()
            return result

        result = _run(scenario())
        assert result.generation == 3
        assert result.state.color_filters == frozenset({"red"})
        assert labels(result.items) == ["A"]

    def test_noop_change_keeps_generation(self, make_session):
        async def scenario():
            session = make_session()
            session.update_filter(FilterType.SIZE, [100])
            session.update_filter(FilterType.SIZE, ["100"])
            session.clear_filter(FilterType.COLOR)
            session.remove_filter(FilterType.CATEGORY, "coat")
            generation = session.generation
            await session.close()
            return generation

        assert _run(scenario()) == 1

    def test_stale_results_dropped(self, make_session, labels):
        async def scenario():
            session = make_session()
            session.start()
            # Let generation 1 publish before moving on
            await asyncio.sleep(0.1)
            session.update_search_text("pants")
            result = await session.next_result(timeout=5)
            await session.close()
            return result

        result = _run(scenario())
        assert result.generation == 2
        assert labels(result.items) == ["C"]

    def test_restore_invalidates_in_flight(self, make_session, labels):
        async def scenario():
            session = make_session()
            session.update_filter(FilterType.SIZE, [110])
            state = session.restore_state(FilterState(color_filters=frozenset({"blue"})))
            result = await session.next_result(timeout=5)
            await session.close()
            return state, result

        state, result = _run(scenario())
        assert result.generation == 2
        assert result.state is state
        assert labels(result.items) == ["B"]

    def test_store_change_reemits(self, seeded_repository, make_session):
        async def scenario():
            session = make_session()
            session.update_filter(FilterType.COLOR, ["red"])
            first = await session.next_result(timeout=5)
            await asyncio.to_thread(
                seeded_repository.insert, Item(size=120, color="red", category="coat")
            )
            second = await session.next_result(timeout=5)
            await session.close()
            return first, second

        first, second = _run(scenario())
        assert first.generation == second.generation == 1
        assert (len(first.items), len(second.items)) == (2, 3)

    def test_clear_all_filters(self, make_session, labels):
        async def scenario():
            session = make_session()
            session.update_filter(FilterType.SIZE, [110])
            session.clear_all_filters()
            result = await session.next_result(timeout=5)
            await session.close()
            return result

        result = _run(scenario())
        assert labels(result.items) == ["A", "B", "C"]


class TestDebouncedSearch:
    """Search text is applied once the input settles."""

    def test_only_final_text_queries(self, manager, make_session, labels):
        async def scenario():
            session = make_session(debounce_seconds=0.05)
            for text in ["p", "pa", "pan", "pant", "pants"]:
                session.submit_search_text(text)
                await asyncio.sleep(0.005)
            assert session.generation == 0
            assert manager.get_current_state().search_text == ""
            result = await session.next_result(timeout=5)
            await session.close()
            return result

        result = _run(scenario())
        assert result.generation == 1
        assert result.state.search_text == "pants"
        assert labels(result.items) == ["C"]

    def test_flush(self, manager, make_session):
        async def scenario():
            session = make_session(debounce_seconds=10)
            session.submit_search_text("wool")
            assert session.has_pending_search_text
            session.flush()
            result = await session.next_result(timeout=5)
            await session.close()
            return result

        assert _run(scenario()).state.search_text == "wool"

    def test_direct_update_discards_pending_text(self, manager, make_session):
        async def scenario():
            session = make_session(debounce_seconds=0.02)
            session.submit_search_text("wool")
            session.update_search_text("linen")
            await asyncio.sleep(0.1)
            await session.close()
            return manager.get_current_state().search_text

        assert _run(scenario()) == "linen"


class TestCancellation:
    """Cancelling is silent."""

    def test_cancel_stops_query_and_pending_text(self, manager, make_session):
        async def scenario():
            session = make_session(debounce_seconds=0.02)
            session.start()
            session.submit_search_text("wool")
            session.cancel()
            await asyncio.sleep(0.1)
            text = manager.get_current_state().search_text
            await session.close()
            return text

        assert _run(scenario()) == ""

    def test_closed_session_rejects_refresh(self, make_session):
        async def scenario():
            session = make_session()
            await session.close()
            session.refresh()

        with pytest.raises(RuntimeError):
            _run(scenario())

    def test_storage_failure_reaches_consumer(self, seeded_repository, make_session):
        async def scenario():
            session = make_session()
            with patch.object(seeded_repository.db, "execute", side_effect=duckdb.Error("boom")):
                session.update_filter(FilterType.SIZE, [999])
                try:
                    await session.next_result(timeout=5)
                finally:
                    await session.close()

        with pytest.raises(StorageFailure):
            _run(scenario())
