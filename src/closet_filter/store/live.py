"""Push-based live queries over the item store.

A LiveQuery is an async iterator. It emits the current result as soon as it is
iterated and then emits again after every store mutation, until the consumer
stops iterating, calls ``aclose()`` or cancels the task that is consuming it.

Fetches run in a worker thread so the event loop never blocks on the store.
"""

import asyncio
from typing import AsyncIterator, Callable, List, Optional

from closet_filter.config.logging_config import get_logger
from closet_filter.models.item import Item
from closet_filter.store.repository import ItemRepository

logger = get_logger("live")

Fetcher = Callable[[], List[Item]]


class LiveQuery:
    """Continuously updating query result.

    Usage:
        async for items in service.search(state):
            render(items)
    """

    def __init__(self, repository: ItemRepository, fetch: Fetcher, description: str = ""):
        self._repository = repository
        self._fetch = fetch
        self.description = description
        self._iterator: Optional[AsyncIterator[List[Item]]] = None

    def __aiter__(self) -> AsyncIterator[List[Item]]:
        if self._iterator is None:
            self._iterator = self._emissions()
        return self._iterator

    async def __anext__(self) -> List[Item]:
        return await self.__aiter__().__anext__()

    async def first(self) -> List[Item]:
        """Current result, without waiting for further changes."""
        return await asyncio.to_thread(self._fetch)

    async def aclose(self) -> None:
        """Stop emitting and detach from the store."""
        if self._iterator is not None:
            await self._iterator.aclose()

    async def _emissions(self) -> AsyncIterator[List[Item]]:
        loop = asyncio.get_running_loop()
        changed = asyncio.Event()

        def on_change(version: int) -> None:
            # Mutations may happen on any thread
            try:
                loop.call_soon_threadsafe(changed.set)
            except RuntimeError:
                # Loop already closed; nobody is waiting any more
                logger.debug("Live query loop closed: %s", self.description)

        token = self._repository.subscribe(on_change)
        logger.debug("Live query started: %s", self.description)
        try:
            while True:
                # Clear before fetching so a change during the fetch triggers another round
                changed.clear()
                items = await asyncio.to_thread(self._fetch)
                yield items
                await changed.wait()
        finally:
            self._repository.unsubscribe(token)
            logger.debug("Live query stopped: %s", self.description)
