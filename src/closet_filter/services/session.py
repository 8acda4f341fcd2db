"""Interactive filter session.

Ties a FilterManager to an ItemSearchService for one consumer (a UI screen, an
API client). Every state change starts a new query generation; the previous
generation's live query is cancelled and anything it still produces is dropped,
so results for an older state can never replace results for a newer one.
Search text is debounced before it reaches the manager.
"""

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Any, AsyncIterator, Iterable, List, Optional

from closet_filter.config import config
from closet_filter.config.logging_config import get_logger
from closet_filter.errors import StorageFailure
from closet_filter.filters.manager import FilterManager
from closet_filter.models.filter_state import FilterState, FilterType
from closet_filter.models.item import Item
from closet_filter.services.debounce import Debouncer
from closet_filter.services.search import ItemSearchService

logger = get_logger("session")


@dataclass(frozen=True)
class SearchResult:
    """One emission of the live search for a given generation."""

    generation: int
    state: FilterState
    items: List[Item]
    error: Optional[StorageFailure] = None


class FilterSession:
    """Debounced, cancellable search driven by filter changes.

    Usage:
        session = FilterSession(FilterManager(), ItemSearchService(repo))
        session.start()
        session.submit_search_text("re")
        async for result in session.results():
            render(result.items)
    """

    def __init__(
        self,
        manager: FilterManager,
        service: ItemSearchService,
        debounce_seconds: Optional[float] = None,
    ):
        self.manager = manager
        self.service = service
        if debounce_seconds is None:
            debounce_seconds = config.filters.debounce_seconds
        self._debouncer: Debouncer[str] = Debouncer(debounce_seconds, self._apply_search_text)
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._results: "asyncio.Queue[SearchResult]" = asyncio.Queue()
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current_state(self) -> FilterState:
        return self.manager.get_current_state()

    @property
    def has_pending_search_text(self) -> bool:
        return self._debouncer.has_pending

    # -------------------------------------------------------------------------
    # Filter operations
    # -------------------------------------------------------------------------

    def start(self) -> int:
        """Begin emitting results for the current state."""
        return self.refresh()

    def update_filter(self, filter_type: FilterType, values: Iterable[Any]) -> FilterState:
        previous = self.manager.get_current_state()
        return self._after_change(previous, self.manager.update_filter(filter_type, values))

    def remove_filter(self, filter_type: FilterType, value: Any) -> FilterState:
        previous = self.manager.get_current_state()
        return self._after_change(previous, self.manager.remove_filter(filter_type, value))

    def clear_filter(self, filter_type: FilterType) -> FilterState:
        previous = self.manager.get_current_state()
        return self._after_change(previous, self.manager.clear_filter(filter_type))

    def clear_all_filters(self) -> FilterState:
        self._debouncer.cancel()
        previous = self.manager.get_current_state()
        return self._after_change(previous, self.manager.clear_all_filters())

    def restore_state(self, snapshot: FilterState) -> FilterState:
        """Replace the state wholesale and invalidate every in-flight generation."""
        self._debouncer.cancel()
        self.manager.restore_state(snapshot)
        state = self.manager.get_current_state()
        self.refresh(state)
        return state

    def submit_search_text(self, text: str) -> None:
        """Queue ``text``; only the last value within the debounce window is applied."""
        self._debouncer.submit(text)

    def update_search_text(self, text: str) -> FilterState:
        """Apply ``text`` immediately, discarding any queued search text."""
        self._debouncer.cancel()
        previous = self.manager.get_current_state()
        return self._after_change(previous, self.manager.update_search_text(text))

    def flush(self) -> None:
        """Apply queued search text now instead of waiting for the window to close."""
        self._debouncer.flush()

    # -------------------------------------------------------------------------
    # Generations
    # -------------------------------------------------------------------------

    def refresh(self, state: Optional[FilterState] = None) -> int:
        """Start a new generation for ``state`` (default: the current state).

        Cancels the previous generation's query. Requires a running event loop.
        """
        if self._closed:
            raise RuntimeError("FilterSession is closed")
        if state is None:
            state = self.manager.get_current_state()
        self._cancel_task()
        self._generation += 1
        generation = self._generation
        logger.debug("Generation %d: %s", generation, state.to_display_string() or "all items")
        self._task = asyncio.get_running_loop().create_task(self._pump(generation, state))
        return generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def results(self) -> AsyncIterator[SearchResult]:
        """Results for the current generation, in order. Stale results are skipped.

        Raises:
            StorageFailure: If the store failed while evaluating the current state.
        """
        while True:
            result = await self._results.get()
            if not self.is_current(result.generation):
                logger.debug("Dropped result for stale generation %d", result.generation)
                continue
            if result.error is not None:
                raise result.error
            yield result

    async def next_result(self, timeout: Optional[float] = None) -> SearchResult:
        """Wait for the next current-generation result."""
        iterator = self.results()
        try:
            return await asyncio.wait_for(iterator.__anext__(), timeout)
        finally:
            await iterator.aclose()

    def cancel(self) -> None:
        """Stop the running query and drop queued search text. Not an error."""
        self._debouncer.cancel()
        self._cancel_task()

    async def close(self) -> None:
        self._closed = True
        self._debouncer.cancel()
        task = self._task
        self._cancel_task()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _after_change(self, previous: FilterState, state: FilterState) -> FilterState:
        if state is not previous and not self._closed:
            self.refresh(state)
        return state

    def _apply_search_text(self, text: str) -> None:
        previous = self.manager.get_current_state()
        self._after_change(previous, self.manager.update_search_text(text))

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _pump(self, generation: int, state: FilterState) -> None:
        live = self.service.search(state)
        try:
            async for items in live:
                if not self.is_current(generation):
                    logger.debug("Generation %d superseded, stopping", generation)
                    break
                await self._results.put(SearchResult(generation, state, items))
        except StorageFailure as e:
            if self.is_current(generation):
                await self._results.put(SearchResult(generation, state, [], error=e))
        finally:
            await live.aclose()
