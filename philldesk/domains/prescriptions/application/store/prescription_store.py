# ============================================================================
# SCOPE: APPLICATION LAYER (Prescriptions)
# Description: Prescription store - state and actions for the current user's
#              prescriptions, upload progress and statistics.
# ============================================================================
"""
Prescription Store.

Single source of truth for the current user's prescriptions. Consumers hold a
reference to a store instance and observe it through subscriptions.

Error channels:
- Upload failures: ``upload_state.upload_error`` and ``error``, then re-raised
- Fetch and delete failures: ``error`` only, previous data kept

All writes are last-write-wins in the order async calls resolve. There is no
cancellation, no de-duplication and no retry at this layer.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import replace
from typing import Any

from philldesk.config.settings import Settings, get_settings

from ...domain.entities import Prescription
from ...domain.value_objects import PrescriptionStatus, UploadState
from ..dto import PrescriptionFile, UploadMetadata, UploadResponse
from ..ports import IPrescriptionUploadService, UploadProgressCallback
from .state import PrescriptionState
from .state_container import StateContainer, Unsubscribe

logger = logging.getLogger(__name__)


def error_message(error: BaseException, fallback: str) -> str:
    """Extract the human-readable message of an exception.

    Uses ``error.message`` when present, then ``str(error)``, then ``fallback``.
    """
    message = getattr(error, "message", None)
    if not isinstance(message, str) or not message:
        message = str(error)
    return message or fallback


class PrescriptionStore:
    """
    State container plus actions for prescriptions.

    Example:
        ```python
        async with PrescriptionApiClient() as client:
            store = PrescriptionStore(client)
            store.subscribe(lambda state, previous: render(state))
            await store.fetch_prescriptions()
        ```
    """

    def __init__(
        self,
        upload_service: IPrescriptionUploadService,
        settings: Settings | None = None,
        *,
        page_size: int | None = None,
        count_by_status: bool | None = None,
        discard_stale_fetches: bool | None = None,
    ):
        """
        Initialize the store.

        Args:
            upload_service: Backend port used by every remote action
            settings: Application settings (defaults to get_settings())
            page_size: Override for DEFAULT_PAGE_SIZE
            count_by_status: Override for PRESCRIPTION_COUNT_BY_STATUS
            discard_stale_fetches: Override for PRESCRIPTION_DISCARD_STALE_FETCHES
        """
        settings = settings or get_settings()
        self._service = upload_service
        self._page_size = page_size or settings.DEFAULT_PAGE_SIZE
        self._count_by_status = (
            settings.PRESCRIPTION_COUNT_BY_STATUS if count_by_status is None else count_by_status
        )
        self._discard_stale_fetches = (
            settings.PRESCRIPTION_DISCARD_STALE_FETCHES
            if discard_stale_fetches is None
            else discard_stale_fetches
        )

        self._container: StateContainer[PrescriptionState] = StateContainer(PrescriptionState())
        self._fetch_generation = 0
        self._background_tasks: set[asyncio.Task] = set()

    # =========================================================================
    # Observation
    # =========================================================================

    @property
    def state(self) -> PrescriptionState:
        """Current snapshot."""
        return self._container.get_state()

    def subscribe(self, listener: Callable[[PrescriptionState, PrescriptionState], None]) -> Unsubscribe:
        """Listen to every state change. Returns an unsubscribe callable."""
        return self._container.subscribe(listener)

    def subscribe_with_selector(
        self,
        selector: Callable[[PrescriptionState], Any],
        listener: Callable[[Any, Any], None],
        equality: Callable[[Any, Any], bool] | None = None,
    ) -> Unsubscribe:
        """Listen to changes of one slice of the state."""
        if equality is None:
            return self._container.subscribe_with_selector(selector, listener)
        return self._container.subscribe_with_selector(selector, listener, equality)

    # =========================================================================
    # Upload
    # =========================================================================

    async def upload_prescription(
        self,
        file: PrescriptionFile,
        metadata: UploadMetadata | None = None,
        on_progress: UploadProgressCallback | None = None,
    ) -> UploadResponse | None:
        """
        Upload a prescription file, then refresh stats and the list.

        Args:
            file: File to upload (validated by the upload service)
            metadata: Optional customer notes, doctor and date
            on_progress: Receives every progress percentage the store records

        Returns:
            The upload service's acknowledgement

        Raises:
            Exception: Whatever the upload service raised, after recording it
        """
        self._container.set_state(error=None, upload_state=UploadState.started())
        last_progress = {"value": 0}

        def progress_callback(progress: int) -> None:
            last_progress["value"] = progress
            self._container.set_state(
                lambda state: replace(state, upload_state=replace(state.upload_state, upload_progress=progress))
            )
            if on_progress is not None:
                on_progress(progress)

        try:
            response = await self._service.upload_prescription(
                file,
                metadata or UploadMetadata(),
                progress_callback,
            )
            # Transports that do not report the last chunk still finish at 100
            if last_progress["value"] < 100:
                progress_callback(100)

            logger.info(f"Prescription file {file.file_name!r} uploaded, refreshing prescriptions")
            await self.fetch_prescription_stats()
            await self.fetch_prescriptions()
        except Exception as e:
            message = error_message(e, "Upload failed")
            logger.error(f"Prescription upload failed for {file.file_name!r}: {message}")
            self._container.set_state(upload_state=UploadState.failed(message), error=message)
            raise

        self._container.set_state(
            lambda state: replace(
                state,
                upload_state=replace(state.upload_state, is_uploading=False, upload_progress=100),
            )
        )
        return response

    # =========================================================================
    # Fetching
    # =========================================================================

    async def fetch_prescriptions(self, status: PrescriptionStatus | str | None = None) -> None:
        """
        Replace the prescription list with the first page from the backend.

        On failure the previous list is kept and ``error`` is set.

        Args:
            status: Optional status filter
        """
        self._fetch_generation += 1
        generation = self._fetch_generation
        status_filter = status.value if isinstance(status, PrescriptionStatus) else status

        self._container.set_state(loading=True, error=None)
        try:
            page = await self._service.get_prescriptions(1, self._page_size, status_filter)
        except Exception as e:
            if self._is_stale(generation):
                logger.debug(f"Ignoring failure of superseded prescription fetch #{generation}")
                return
            message = error_message(e, "Failed to fetch prescriptions")
            logger.warning(f"Failed to fetch prescriptions: {message}")
            self._container.set_state(error=message, loading=False)
            return

        if self._is_stale(generation):
            logger.debug(f"Discarding response of superseded prescription fetch #{generation}")
            return

        self._container.set_state(prescriptions=tuple(page.data), loading=False)

    async def fetch_prescription_stats(self) -> None:
        """Replace stats with the backend's counters. Failure keeps the old ones."""
        try:
            stats = await self._service.get_prescription_stats()
        except Exception as e:
            message = error_message(e, "Failed to fetch prescription stats")
            logger.warning(f"Failed to fetch prescription stats: {message}")
            self._container.set_state(error=message)
            return

        self._container.set_state(stats=stats)

    # =========================================================================
    # Local and remote mutations
    # =========================================================================

    def add_prescription(self, prescription: Prescription) -> None:
        """
        Insert a prescription at the head of the list without a round-trip.

        Counters drift from the backend until the next fetch_prescription_stats().
        Unless count_by_status is enabled, the insert is always counted as pending.
        """
        bucket = prescription.status if self._count_by_status else PrescriptionStatus.PENDING
        self._container.set_state(
            lambda state: replace(
                state,
                prescriptions=(prescription, *state.prescriptions),
                stats=state.stats.incremented(bucket),
            )
        )

    async def update_prescription_status(
        self,
        prescription_id: str,
        status: PrescriptionStatus | str,
        notes: str | None = None,
    ) -> None:
        """
        Rewrite a loaded prescription's status and schedule a stats refresh.

        Only local state changes; no backend endpoint is called. An invalid
        status only sets ``error`` and schedules no refresh.

        Args:
            prescription_id: Prescription identifier
            status: New status
            notes: Pharmacist notes (replaces existing notes, None clears them)
        """
        try:
            new_status = PrescriptionStatus(status)

            def apply(state: PrescriptionState) -> PrescriptionState:
                if state.find(prescription_id) is None:
                    return state
                return replace(
                    state,
                    prescriptions=tuple(
                        p.with_status(new_status, notes) if p.id == prescription_id else p
                        for p in state.prescriptions
                    ),
                )

            self._container.set_state(apply)
            logger.debug(f"Prescription {prescription_id} set to {new_status.value} locally")
            self._schedule(self.fetch_prescription_stats())
        except Exception as e:
            message = error_message(e, "Failed to update prescription status")
            logger.error(f"Failed to update prescription {prescription_id}: {message}")
            self._container.set_state(error=message)

    async def delete_prescription(self, prescription_id: str) -> None:
        """
        Delete a prescription remotely, then drop it from local state.

        Decrements ``total`` and the deleted record's status counter, floored
        at zero. Failures are recorded in ``error``.

        Args:
            prescription_id: Prescription identifier
        """
        try:
            await self._service.delete_prescription(prescription_id)
        except Exception as e:
            message = error_message(e, "Failed to delete prescription")
            logger.error(f"Failed to delete prescription {prescription_id}: {message}")
            self._container.set_state(error=message)
            return

        def apply(state: PrescriptionState) -> PrescriptionState:
            deleted = state.find(prescription_id)
            if deleted is None:
                return state
            return replace(
                state,
                prescriptions=tuple(p for p in state.prescriptions if p.id != prescription_id),
                stats=state.stats.decremented(deleted.status),
            )

        self._container.set_state(apply)
        logger.info(f"Prescription {prescription_id} deleted")

    # =========================================================================
    # Resets
    # =========================================================================

    def clear_error(self) -> None:
        self._container.set_state(error=None)

    def reset_upload_state(self) -> None:
        self._container.set_state(upload_state=UploadState())

    def reset(self) -> None:
        """Return to the initial empty state. In-flight calls still land afterwards."""
        self._container.replace_state(PrescriptionState())

    # =========================================================================
    # Background work
    # =========================================================================

    async def wait_for_background_tasks(self) -> None:
        """Wait until scheduled refreshes have finished."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    def _is_stale(self, generation: int) -> bool:
        return self._discard_stale_fetches and generation != self._fetch_generation
