"""
PhillDesk Prescription API Client

Async client for the PhillDesk prescription endpoints.
Uses httpx for async HTTP with upload progress tracking and timeout handling.
"""

from __future__ import annotations

import io
import logging
from collections.abc import AsyncIterator
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from philldesk.config.settings import Settings, get_settings
from philldesk.domains.prescriptions.application.dto import (
    PrescriptionFile,
    PrescriptionPage,
    UploadMetadata,
    UploadResponse,
)
from philldesk.domains.prescriptions.application.ports import UploadProgressCallback
from philldesk.domains.prescriptions.application.services import validate_file
from philldesk.domains.prescriptions.domain import (
    PrescriptionNotFoundError,
    PrescriptionServiceError,
    PrescriptionStats,
    PrescriptionValidationError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class UploadProgressStream(httpx.AsyncByteStream):
    """
    Wraps a request body and reports the percentage of bytes handed to the
    transport. Only changes of the integer percentage are reported.
    """

    def __init__(self, stream: httpx.AsyncByteStream, total: int, on_progress: UploadProgressCallback):
        self._stream = stream
        self._total = total
        self._on_progress = on_progress

    async def __aiter__(self) -> AsyncIterator[bytes]:
        sent = 0
        last_reported = -1
        async for chunk in self._stream:
            yield chunk
            sent += len(chunk)
            progress = min(100, round(sent * 100 / self._total))
            if progress != last_reported:
                last_reported = progress
                self._on_progress(progress)

    async def aclose(self) -> None:
        await self._stream.aclose()


class PrescriptionApiClient:
    """
    Async HTTP client for the PhillDesk prescription API.

    Implements IPrescriptionUploadService for use by PrescriptionStore.
    Uses httpx with:
    - Configurable timeouts (longer timeout for uploads)
    - Bearer token authentication
    - Client-side file validation before upload
    - Upload progress reporting

    Environment Variables:
        PHILLDESK_API_BASE_URL: Base URL for the API
        PHILLDESK_API_TOKEN: Bearer token for authentication
        PHILLDESK_API_TIMEOUT: Request timeout in seconds (default: 10)
        UPLOAD_TIMEOUT: Upload timeout in seconds (default: 120)

    Example:
        async with PrescriptionApiClient() as client:
            stats = await client.get_prescription_stats()
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout_seconds: float | None = None,
        upload_timeout_seconds: float | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the prescription API client.

        Args:
            base_url: Base URL for the API (defaults to PHILLDESK_API_BASE_URL)
            api_token: Bearer token (defaults to PHILLDESK_API_TOKEN)
            timeout_seconds: Request timeout (defaults to PHILLDESK_API_TIMEOUT)
            upload_timeout_seconds: Upload timeout (defaults to UPLOAD_TIMEOUT)
            settings: Settings instance (defaults to get_settings())
            transport: Custom httpx transport (used by tests)
        """
        self._settings = settings or get_settings()
        self.base_url = (base_url or self._settings.PHILLDESK_API_BASE_URL).rstrip("/")
        self.api_token = api_token or self._settings.PHILLDESK_API_TOKEN or ""
        self.timeout = timeout_seconds or self._settings.PHILLDESK_API_TIMEOUT
        self.upload_timeout = upload_timeout_seconds or self._settings.UPLOAD_TIMEOUT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> PrescriptionApiClient:
        """Initialize async client."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            headers=self._get_headers(),
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Close async client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with authentication."""
        headers = {
            "Accept": "application/json",
            "User-Agent": f"PhillDesk-Client/{self._settings.VERSION}",
        }
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get the async client, raising error if not initialized."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with PrescriptionApiClient() as client:'")
        return self._client

    # =========================================================================
    # Upload service operations
    # =========================================================================

    async def upload_prescription(
        self,
        file: PrescriptionFile,
        metadata: UploadMetadata,
        on_progress: UploadProgressCallback | None = None,
    ) -> UploadResponse:
        """
        Validate and upload a prescription file with its metadata.

        Args:
            file: File content and descriptors
            metadata: Optional notes, doctor name and prescription date
            on_progress: Receives 0-100 as the body is sent

        Returns:
            UploadResponse from the backend

        Raises:
            PrescriptionValidationError: File rejected before sending
            PrescriptionServiceError: On API errors
        """
        validation = validate_file(file, self._settings)
        if not validation.valid:
            raise PrescriptionValidationError(validation.error or "Invalid file", field=validation.field)

        client = self._get_client()
        request = client.build_request(
            "POST",
            "/prescriptions/upload",
            data={
                "fileName": file.file_name,
                "fileType": file.file_type,
                **metadata.to_form_fields(),
            },
            files={"file": (file.file_name, io.BytesIO(file.content), file.file_type)},
            timeout=httpx.Timeout(self.upload_timeout),
        )

        if on_progress is not None:
            total = int(request.headers.get("Content-Length", "0"))
            # Without a known length there is nothing to measure against
            if total > 0:
                request.stream = UploadProgressStream(request.stream, total, on_progress)

        response = await self._send(request, "Failed to upload prescription. Please try again.")
        upload = self._parse(UploadResponse, response, "Failed to upload prescription. Please try again.")
        if not upload.success:
            raise PrescriptionServiceError(
                upload.message or "Failed to upload prescription. Please try again.",
                status_code=response.status_code,
                code="UPLOAD_REJECTED",
            )

        logger.info(f"Uploaded prescription {upload.prescription_id} ({file.file_name}, {file.file_size} bytes)")
        return upload

    async def get_prescriptions(
        self,
        page: int = 1,
        page_size: int = 10,
        status: str | None = None,
    ) -> PrescriptionPage:
        """
        Get the current user's prescriptions with pagination.

        Args:
            page: 1-based page number
            page_size: Records per page
            status: Optional status filter

        Returns:
            PrescriptionPage

        Raises:
            PrescriptionServiceError: On API errors
        """
        params: dict[str, Any] = {"page": page, "limit": page_size}
        if status:
            params["status"] = status

        request = self._get_client().build_request("GET", "/prescriptions", params=params)
        response = await self._send(request, "Failed to get prescriptions")
        return self._parse(PrescriptionPage, response, "Failed to get prescriptions")

    async def get_prescription_stats(self) -> PrescriptionStats:
        """
        Get the current user's per-status prescription counters.

        Raises:
            PrescriptionServiceError: On API errors
        """
        request = self._get_client().build_request("GET", "/prescriptions/stats")
        response = await self._send(request, "Failed to get prescription statistics")
        return self._parse(PrescriptionStats, response, "Failed to get prescription statistics")

    async def delete_prescription(self, prescription_id: str) -> None:
        """
        Delete a prescription and its stored file.

        Raises:
            PrescriptionNotFoundError: Unknown prescription
            PrescriptionServiceError: On API errors
        """
        request = self._get_client().build_request("DELETE", f"/prescriptions/{prescription_id}")
        await self._send(request, "Failed to delete prescription", prescription_id=prescription_id)
        logger.debug(f"Deleted prescription {prescription_id}")

    async def get_upload_status(self, prescription_id: str) -> dict[str, Any]:
        """
        Get the processing status of an uploaded prescription.

        Returns:
            Raw status payload from the backend

        Raises:
            PrescriptionNotFoundError: Unknown prescription
            PrescriptionServiceError: On API errors
        """
        request = self._get_client().build_request("GET", f"/prescriptions/{prescription_id}/status")
        response = await self._send(request, "Failed to get upload status", prescription_id=prescription_id)
        try:
            data = response.json()
        except ValueError as e:
            raise PrescriptionServiceError(
                "Failed to get upload status", status_code=response.status_code, code="INVALID_RESPONSE"
            ) from e
        return data if isinstance(data, dict) else {"status": data}

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _send(
        self,
        request: httpx.Request,
        fallback_message: str,
        prescription_id: str | None = None,
    ) -> httpx.Response:
        """Send a request and translate transport and HTTP errors."""
        client = self._get_client()

        try:
            response = await client.send(request)
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            self._handle_http_error(e, fallback_message, prescription_id)
        except httpx.TimeoutException as e:
            logger.error(f"{request.method} {request.url.path} timed out: {e}")
            raise PrescriptionServiceError(
                f"{fallback_message}: request timed out", code="TIMEOUT", original_error=e
            ) from e
        except httpx.RequestError as e:
            logger.error(f"{request.method} {request.url.path} failed: {e}")
            raise PrescriptionServiceError(
                f"{fallback_message}: connection error", code="CONNECTION_ERROR", original_error=e
            ) from e

        raise PrescriptionServiceError(fallback_message)  # Should not reach here

    def _parse(self, model: type[ModelT], response: httpx.Response, fallback_message: str) -> ModelT:
        """Validate a JSON response body into a model."""
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected response body from {response.request.url.path}: {e}")
            raise PrescriptionServiceError(
                fallback_message,
                status_code=response.status_code,
                code="INVALID_RESPONSE",
                original_error=e,
            ) from e

    def _handle_http_error(
        self,
        error: httpx.HTTPStatusError,
        fallback_message: str,
        prescription_id: str | None = None,
    ) -> None:
        """
        Handle HTTP errors and raise appropriate exception.

        The response body's ``message`` field wins over generic messages.

        Raises:
            PrescriptionNotFoundError: 404 for a specific prescription
            PrescriptionServiceError: Always, otherwise
        """
        status = error.response.status_code
        message = self._extract_message(error.response)
        logger.warning(f"{error.request.method} {error.request.url.path} returned {status}: {message}")

        if status == 404 and prescription_id is not None:
            raise PrescriptionNotFoundError(prescription_id, message) from error

        error_mapping = {
            401: "AUTH_ERROR",
            403: "FORBIDDEN",
            404: "NOT_FOUND",
            413: "PAYLOAD_TOO_LARGE",
            422: "VALIDATION_ERROR",
            429: "RATE_LIMIT",
        }
        if status in error_mapping:
            code = error_mapping[status]
        elif status >= 500:
            code = "SERVER_ERROR"
        else:
            code = f"HTTP_{status}"

        raise PrescriptionServiceError(message or fallback_message, status_code=status, code=code) from error

    @staticmethod
    def _extract_message(response: httpx.Response) -> str | None:
        """Read the ``message`` field of an error body, if any."""
        try:
            error_data = response.json()
        except ValueError:
            return None
        if isinstance(error_data, dict):
            message = error_data.get("message") or error_data.get("error")
            if isinstance(message, str) and message:
                return message
        return None
