"""Tests for push-based live queries."""

import asyncio
from datetime import datetime
from unittest.mock import patch

import duckdb
import pytest

from closet_filter.errors import StorageFailure, ValidationError
from closet_filter.models.filter_state import FilterState
from closet_filter.models.item import Item


class TestLiveQuery:
    """Tests for LiveQuery emissions."""

    def test_emits_current_then_after_change(self, seeded_repository, search_service, labels):
        state = FilterState(color_filters=frozenset({"red"}))

        async def scenario():
            live = search_service.search(state)
            iterator = live.__aiter__()
            first = await iterator.__anext__()

            await asyncio.to_thread(
                seeded_repository.insert, Item(size=120, color="red", category="coat")
            )
            second = await asyncio.wait_for(iterator.__anext__(), timeout=5)
            await live.aclose()
            return first, second

        first, second = asyncio.run(scenario())
        assert labels(first) == ["A", "C"]
        assert len(second) == 3

    def test_change_on_loop_thread(self, seeded_repository, search_service):
        async def scenario():
            live = search_service.search(FilterState())
            emissions = []
            async for items in live:
                emissions.append(len(items))
                if len(emissions) == 1:
                    seeded_repository.delete_all()
                else:
                    break
            return emissions

        assert asyncio.run(scenario()) == [3, 0]

    def test_unsubscribes_on_close(self, seeded_repository, search_service):
        async def scenario():
            live = search_service.search(FilterState())
            await live.__anext__()
            assert len(seeded_repository._listeners) == 1
            await live.aclose()
            return len(seeded_repository._listeners)

        assert asyncio.run(scenario()) == 0

    def test_unsubscribes_on_cancel(self, seeded_repository, search_service):
        async def consume(live, started):
            async for _ in live:
                started.set()

        async def scenario():
            started = asyncio.Event()
            task = asyncio.create_task(consume(search_service.search(FilterState()), started))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return len(seeded_repository._listeners)

        assert asyncio.run(scenario()) == 0

    def test_reemits_despite_failing_listener(self, seeded_repository, search_service):
        def broken(version):
            raise RuntimeError("listener gone")

        seeded_repository.subscribe(broken)

        async def scenario():
            live = search_service.search(FilterState())
            first = await live.__anext__()
            await asyncio.to_thread(seeded_repository.delete_all)
            second = await asyncio.wait_for(live.__anext__(), timeout=5)
            await live.aclose()
            return len(first), len(second)

        assert asyncio.run(scenario()) == (3, 0)

    def test_change_after_loop_closed(self, seeded_repository, search_service):
        loop = asyncio.new_event_loop()
        live = search_service.search(FilterState())
        try:
            loop.run_until_complete(live.__anext__())
        finally:
            loop.close()

        # The abandoned stream is still subscribed to a closed loop
        assert len(seeded_repository._listeners) == 1
        item = seeded_repository.insert(Item(size=120, color="red", category="coat"))
        assert seeded_repository.get_by_id(item.id) == item

    def test_paginated_live_query(self, seeded_repository, search_service, labels):
        async def scenario():
            live = search_service.search_with_pagination(FilterState(), 0, 2)
            first = await live.__anext__()
            await asyncio.to_thread(seeded_repository.delete_by_id, first[0].id)
            second = await asyncio.wait_for(live.__anext__(), timeout=5)
            await live.aclose()
            return first, second

        first, second = asyncio.run(scenario())
        assert labels(first) == ["A", "B"]
        assert labels(second) == ["B", "C"]

    def test_storage_failure_propagates(self, seeded_repository, search_service):
        async def scenario():
            live = search_service.search(FilterState(size_filters=frozenset({999})))
            with patch.object(seeded_repository.db, "execute", side_effect=duckdb.Error("boom")):
                await live.__anext__()

        with pytest.raises(StorageFailure):
            asyncio.run(scenario())


class TestRangeQueries:
    """Recent, date-range and size-range streams."""

    def test_recent_items_follow_inserts(self, seeded_repository, search_service, labels):
        async def scenario():
            live = search_service.get_recent_items(2)
            first = await live.__anext__()
            newest = await asyncio.to_thread(
                seeded_repository.insert,
                Item(size=120, color="red", category="coat", created_at=datetime(2024, 4, 1)),
            )
            second = await asyncio.wait_for(live.__anext__(), timeout=5)
            await live.aclose()
            return first, newest, second

        first, newest, second = asyncio.run(scenario())
        assert labels(first) == ["A", "B"]
        assert second[0].id == newest.id
        assert labels(second[1:]) == ["A"]

    def test_date_and_size_ranges(self, search_service, labels):
        by_date = search_service.get_items_by_date_range(datetime(2024, 3, 2), datetime(2024, 3, 4))
        by_size = search_service.get_items_by_size_range(105, 200)

        assert labels(asyncio.run(by_date.first())) == ["A", "B"]
        assert labels(asyncio.run(by_size.first())) == ["C"]

    def test_invalid_arguments_fail_fast(self, seeded_repository, search_service):
        with pytest.raises(ValidationError):
            search_service.get_recent_items(0)
        with pytest.raises(ValidationError):
            search_service.get_items_by_size_range(200, 100)
        assert seeded_repository._listeners == {}
