# ============================================================================
# SCOPE: APPLICATION LAYER (Prescriptions)
# Description: Observable container for immutable state snapshots.
# ============================================================================
"""
Observable state container.

Holds one immutable snapshot at a time. Every write produces a new snapshot
and notifies subscribers with ``(state, previous)``. Selector subscriptions
only fire when the selected slice changes, compared by identity unless an
equality function is given.
"""

import dataclasses
import logging
import operator
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
T = TypeVar("T")

Listener = Callable[[S, S], None]
Unsubscribe = Callable[[], None]


class StateContainer(Generic[S]):
    """
    Publish/subscribe container for a frozen dataclass state.

    Writes are synchronous and last-write-wins. Listeners run in
    subscription order; a failing listener is logged and skipped.

    Example:
        ```python
        container = StateContainer(CounterState())
        unsubscribe = container.subscribe(lambda state, previous: print(state.count))
        container.set_state(count=1)
        unsubscribe()
        ```
    """

    def __init__(self, initial_state: S):
        self._state = initial_state
        self._listeners: list[Listener[S]] = []

    def get_state(self) -> S:
        """Return the current snapshot."""
        return self._state

    def set_state(self, updater: Callable[[S], S] | None = None, **changes: Any) -> S:
        """
        Replace the current snapshot and notify subscribers.

        Args:
            updater: Function computing the next snapshot from the current one
            **changes: Field values applied with dataclasses.replace()

        Returns:
            The new snapshot
        """
        previous = self._state
        next_state = updater(previous) if updater is not None else previous
        if changes:
            next_state = dataclasses.replace(next_state, **changes)
        if next_state is previous:
            return previous

        self._state = next_state
        self._notify(next_state, previous)
        return next_state

    def replace_state(self, state: S) -> S:
        """Swap in a whole snapshot (used by resets)."""
        return self.set_state(lambda _: state)

    def subscribe(self, listener: Listener[S]) -> Unsubscribe:
        """
        Register a listener for every state change.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def subscribe_with_selector(
        self,
        selector: Callable[[S], T],
        listener: Callable[[T, T], None],
        equality: Callable[[T, T], bool] = operator.is_,
    ) -> Unsubscribe:
        """
        Register a listener for changes of one slice of the state.

        Args:
            selector: Extracts the slice from a snapshot
            listener: Receives ``(slice, previous_slice)``
            equality: Decides whether two slices are the same

        Returns:
            Callable that removes the listener
        """
        current = {"slice": selector(self._state)}

        def on_change(state: S, previous: S) -> None:
            next_slice = selector(state)
            previous_slice = current["slice"]
            if equality(next_slice, previous_slice):
                return
            current["slice"] = next_slice
            listener(next_slice, previous_slice)

        return self.subscribe(on_change)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, state: S, previous: S) -> None:
        for listener in list(self._listeners):
            try:
                listener(state, previous)
            except Exception as e:
                logger.error(f"Error in state listener {getattr(listener, '__name__', listener)!r}: {e}")
