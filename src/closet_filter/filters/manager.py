"""Owner of the current filter state.

FilterManager is the only component that changes the active FilterState. Each
operation runs under one mutex, builds a new immutable state (copy-on-write) and
publishes it; readers pick up the latest published snapshot without locking.

When an operation would not change anything, the current instance is returned
as-is so observers can detect "nothing changed" with an identity check.
"""

import threading
from itertools import count
from typing import Any, Callable, Dict, Iterable

from closet_filter.config.logging_config import get_logger
from closet_filter.errors import ValidationError
from closet_filter.filters.normalize import (
    normalize_label,
    normalize_search_text,
    normalize_values,
    parse_size,
)
from closet_filter.models.filter_state import EMPTY_FILTER_STATE, FilterState, FilterType

logger = get_logger("filter_manager")

StateListener = Callable[[FilterState], None]


class FilterManager:
    """Single synchronized owner of the current FilterState.

    Usage:
        manager = FilterManager()
        state = manager.update_filter(FilterType.SIZE, ["100", "110"])
        state = manager.update_search_text("pants")
        manager.get_current_state()
    """

    def __init__(self, initial_state: FilterState = EMPTY_FILTER_STATE):
        if not isinstance(initial_state, FilterState):
            raise ValidationError("initial_state must be a FilterState", field="initial_state")
        self._lock = threading.Lock()
        self._notify_lock = threading.RLock()
        self._state = initial_state
        self._sequence = 0
        self._notified_sequence = 0
        self._listeners: Dict[int, StateListener] = {}
        self._listener_ids = count(1)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def update_filter(self, filter_type: FilterType, values: Iterable[Any]) -> FilterState:
        """Replace one axis with the normalized ``values``.

        Args:
            filter_type: Axis to replace.
            values: Raw values. Sizes may be ints or numeric strings; invalid
                entries are dropped. For SEARCH the first value is the text.

        Returns:
            The resulting state (the same instance when nothing changed).
        """
        filter_type = FilterType.parse(filter_type)
        normalized = normalize_values(filter_type, values)
        with self._lock:
            current = self._state
            if normalized == current.values_for(filter_type):
                return current
            new_state = current.with_values(filter_type, normalized)
            sequence = self._publish(new_state)
        logger.debug("Updated %s filter: %s", filter_type.value, sorted(map(str, normalized)))
        self._notify(new_state, sequence)
        return new_state

    def remove_filter(self, filter_type: FilterType, value: Any) -> FilterState:
        """Remove one value from an axis; no-op when absent.

        For SEARCH the search text is cleared regardless of ``value``.
        """
        filter_type = FilterType.parse(filter_type)
        if filter_type is FilterType.SIZE:
            target = parse_size(value)
        elif filter_type is FilterType.SEARCH:
            target = None
        else:
            target = normalize_label(value)

        with self._lock:
            current = self._state
            if filter_type is FilterType.SEARCH:
                if not current.search_text:
                    return current
                new_state = current.with_values(filter_type, ())
            else:
                selected = current.values_for(filter_type)
                if target is None or target not in selected:
                    return current
                new_state = current.with_values(filter_type, selected - {target})
            sequence = self._publish(new_state)
        logger.debug("Removed %s filter value %r", filter_type.value, value)
        self._notify(new_state, sequence)
        return new_state

    def clear_filter(self, filter_type: FilterType) -> FilterState:
        """Empty a single axis, leaving the others untouched."""
        filter_type = FilterType.parse(filter_type)
        with self._lock:
            current = self._state
            if not current.values_for(filter_type):
                return current
            new_state = current.with_values(filter_type, ())
            sequence = self._publish(new_state)
        logger.debug("Cleared %s filter", filter_type.value)
        self._notify(new_state, sequence)
        return new_state

    def clear_all_filters(self) -> FilterState:
        """Reset to the canonical empty state."""
        with self._lock:
            current = self._state
            if current == EMPTY_FILTER_STATE:
                self._state = EMPTY_FILTER_STATE
                return EMPTY_FILTER_STATE
            sequence = self._publish(EMPTY_FILTER_STATE)
        logger.debug("Cleared all filters")
        self._notify(EMPTY_FILTER_STATE, sequence)
        return EMPTY_FILTER_STATE

    def update_search_text(self, text: str) -> FilterState:
        """Set the search text (trimmed, truncated to 200 chars)."""
        normalized = normalize_search_text(text)
        with self._lock:
            current = self._state
            if normalized == current.search_text:
                return current
            new_state = current.with_values(FilterType.SEARCH, [normalized] if normalized else ())
            sequence = self._publish(new_state)
        logger.debug("Updated search text: %r", normalized)
        self._notify(new_state, sequence)
        return new_state

    def restore_state(self, snapshot: FilterState) -> None:
        """Overwrite the current state wholesale, e.g. when resuming a session."""
        if not isinstance(snapshot, FilterState):
            raise ValidationError("snapshot must be a FilterState", field="snapshot")
        with self._lock:
            current = self._state
            if current == snapshot:
                self._state = snapshot
                sequence = None
            else:
                sequence = self._publish(snapshot)
        logger.info("Restored filter state: %s", snapshot.to_display_string() or "(none)")
        if sequence is not None:
            self._notify(snapshot, sequence)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_current_state(self) -> FilterState:
        """Latest published snapshot. Safe to call without holding the lock."""
        return self._state

    def validate_current_state(self) -> bool:
        """Re-run FilterState invariant checks on the current snapshot."""
        state = self._state
        try:
            FilterState(
                size_filters=state.size_filters,
                color_filters=state.color_filters,
                category_filters=state.category_filters,
                search_text=state.search_text,
            )
        except ValidationError:
            return False
        return True

    def get_debug_info(self) -> str:
        """Multi-line description of the current state for troubleshooting."""
        state = self._state
        lines = [
            "FilterManager Debug Info:",
            f"  has_active_filters: {state.has_active_filters()}",
            f"  active_filter_count: {state.active_filter_count()}",
            f"  size_filters: {sorted(state.size_filters)}",
            f"  color_filters: {sorted(state.color_filters)}",
            f"  category_filters: {sorted(state.category_filters)}",
            f"  search_text: '{state.search_text}'",
            f"  display: '{state.to_display_string()}'",
        ]
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> int:
        """Register a callback invoked with every newly published, changed state."""
        with self._lock:
            token = next(self._listener_ids)
            self._listeners[token] = listener
        return token

    def unsubscribe(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)

    def _publish(self, state: FilterState) -> int:
        # Caller holds self._lock
        self._state = state
        self._sequence += 1
        return self._sequence

    def _notify(self, state: FilterState, sequence: int) -> None:
        """Deliver ``state`` to listeners in publish order.

        Listeners run outside the state lock, so they may call back into the
        manager. A state superseded before its turn is skipped; listeners
        always end on the latest published state. A failing listener is logged
        and does not affect the mutation or the other listeners.
        """
        with self._notify_lock:
            if sequence <= self._notified_sequence:
                logger.debug("Skipping superseded state #%d", sequence)
                return
            self._notified_sequence = sequence
            with self._lock:
                listeners = list(self._listeners.values())
            for listener in listeners:
                try:
                    listener(state)
                except Exception:
                    logger.exception("Filter state listener %r failed", listener)
