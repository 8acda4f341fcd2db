"""Time-windowed coalescing of rapid input."""

import asyncio
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Collapse calls arriving within ``delay`` seconds into one, using the latest value.

    Each ``submit`` replaces the pending value and restarts the timer; the action
    runs once the input has been quiet for ``delay`` seconds. Superseded values
    are never passed to the action.

    Must be used from a running event loop. The action is a plain callable and
    runs on the loop thread.
    """

    def __init__(self, delay: float, action: Callable[[T], None]):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self._action = action
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[T] = None
        self._has_pending = False

    @property
    def has_pending(self) -> bool:
        return self._has_pending

    @property
    def pending(self) -> Optional[T]:
        return self._pending

    def submit(self, value: T) -> None:
        """Replace the pending value and restart the quiet-period timer."""
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._pending = value
        self._has_pending = True
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Run the action now with the pending value, if any."""
        if self._handle is not None:
            self._handle.cancel()
        self._fire()

    def cancel(self) -> None:
        """Drop the pending value without running the action."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = None
        self._has_pending = False

    def _fire(self) -> None:
        self._handle = None
        if not self._has_pending:
            return
        value = self._pending
        self._pending = None
        self._has_pending = False
        self._action(value)
