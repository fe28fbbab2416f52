# ============================================================================
# SCOPE: APPLICATION LAYER (Prescriptions)
# Description: Detects prescription status changes between store snapshots.
# ============================================================================
"""
Prescription status notifications.

``detect_status_changes`` is a pure diff of two prescription snapshots.
``PrescriptionNotificationObserver`` subscribes it to a store, logs every
change and forwards the resulting events to handlers.
"""

import asyncio
import inspect
import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from philldesk.core.domain.events import EventHandler

from ...domain.entities import Prescription
from ...domain.events import PrescriptionStatusChanged

if TYPE_CHECKING:
    from ..store import PrescriptionStore

logger = logging.getLogger(__name__)


def detect_status_changes(
    previous: Sequence[Prescription],
    current: Sequence[Prescription],
) -> list[PrescriptionStatusChanged]:
    """
    Compare two snapshots of the prescription list by id.

    Only records present in both snapshots with different statuses are
    reported. An empty previous snapshot reports nothing.

    Args:
        previous: Earlier snapshot
        current: Later snapshot

    Returns:
        One event per changed prescription, in ``current`` order
    """
    if not previous:
        return []

    previous_by_id = {prescription.id: prescription for prescription in previous}
    changes: list[PrescriptionStatusChanged] = []
    for prescription in current:
        before = previous_by_id.get(prescription.id)
        if before is None or before.status == prescription.status:
            continue
        changes.append(
            PrescriptionStatusChanged(
                prescription_id=prescription.id,
                file_name=prescription.file_name,
                previous_status=before.status,
                new_status=prescription.status,
            )
        )
    return changes


class PrescriptionNotificationObserver:
    """
    Emits PrescriptionStatusChanged events for a store.

    Handlers may be plain functions or coroutine functions. Coroutine
    handlers are scheduled on the running loop; a failing handler is logged
    and does not affect the others or the store.
    """

    def __init__(self, handlers: Iterable[EventHandler] = ()):
        self._handlers: list[EventHandler] = list(handlers)
        self._unsubscribe = None
        self._pending: set[asyncio.Future] = set()

    def add_handler(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    @property
    def is_attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self, store: "PrescriptionStore") -> "PrescriptionNotificationObserver":
        """Start observing a store's prescription list."""
        if self._unsubscribe is not None:
            raise RuntimeError("Observer is already attached to a store")
        self._unsubscribe = store.subscribe_with_selector(
            lambda state: state.prescriptions,
            self._on_prescriptions_changed,
        )
        return self

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_for_handlers(self) -> None:
        """Wait for scheduled coroutine handlers to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_prescriptions_changed(
        self,
        prescriptions: Sequence[Prescription],
        previous: Sequence[Prescription],
    ) -> None:
        for event in detect_status_changes(previous, prescriptions):
            self._emit(event)

    def _emit(self, event: PrescriptionStatusChanged) -> None:
        if event.is_expected_transition:
            logger.info(event.describe(), extra={"event_data": event.to_dict()})
        else:
            logger.warning(f"{event.describe()} (outside review workflow)", extra={"event_data": event.to_dict()})

        for handler in self._handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    self._schedule(result)
            except Exception as e:
                logger.error(f"Error in status change handler for {event.prescription_id}: {e}")

    def _schedule(self, awaitable) -> None:
        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)
        future.add_done_callback(self._on_handler_done)

    def _on_handler_done(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.error(f"Error in status change handler: {future.exception()}")
