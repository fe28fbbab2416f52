# ============================================================================
# Tests for PhillDesk Prescription API Client
# ============================================================================
"""
Tests for PrescriptionApiClient.

Verifies:
- Multipart upload with form fields and progress reporting
- Query parameters and response parsing for list and stats
- Error translation (404, 5xx, backend messages, timeouts)
- Client-side validation before any request is sent
"""

import json
from collections.abc import Callable

import httpx
import pytest

from philldesk.clients import PrescriptionApiClient
from philldesk.domains.prescriptions import (
    IPrescriptionUploadService,
    PrescriptionFile,
    PrescriptionNotFoundError,
    PrescriptionServiceError,
    PrescriptionStatus,
    PrescriptionValidationError,
    UploadMetadata,
)

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def requests() -> list[httpx.Request]:
    """Requests seen by the mock transport."""
    return []


@pytest.fixture
def make_client(settings, requests):
    """Build a client whose transport answers with ``handler``."""

    def _make(handler: Handler, **kwargs) -> PrescriptionApiClient:
        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        return PrescriptionApiClient(settings=settings, transport=httpx.MockTransport(record), **kwargs)

    return _make


def _upload_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        201,
        json={
            "success": True,
            "prescriptionId": 99,
            "googleDriveFileId": "drive-99",
            "fileName": "prescription.pdf",
            "message": "Prescription uploaded successfully",
        },
    )


class TestPrescriptionApiClientSetup:
    """Client construction and headers."""

    def test_implements_upload_service_port(self, settings) -> None:
        assert isinstance(PrescriptionApiClient(settings=settings), IPrescriptionUploadService)

    @pytest.mark.asyncio
    async def test_requires_context_manager(self, settings) -> None:
        client = PrescriptionApiClient(settings=settings)
        with pytest.raises(RuntimeError):
            await client.get_prescription_stats()

    @pytest.mark.asyncio
    async def test_sends_bearer_token(self, make_client, requests) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"total": 0}), api_token="secret-token")

        async with client:
            await client.get_prescription_stats()

        assert requests[0].headers["Authorization"] == "Bearer secret-token"
        assert requests[0].headers["User-Agent"].startswith("PhillDesk-Client/")

    @pytest.mark.asyncio
    async def test_no_auth_header_without_token(self, make_client, requests) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"total": 0}))

        async with client:
            await client.get_prescription_stats()

        assert "Authorization" not in requests[0].headers


class TestUploadPrescription:
    """Multipart upload with progress."""

    @pytest.mark.asyncio
    async def test_posts_file_and_metadata(self, make_client, requests, prescription_file) -> None:
        client = make_client(_upload_ok)

        async with client:
            response = await client.upload_prescription(
                prescription_file,
                UploadMetadata(patient_notes="Refill please", doctor_name="Dr. Silva"),
            )

        assert response.prescription_id == "99"
        assert response.google_drive_file_id == "drive-99"

        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/prescriptions/upload"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        body = request.content
        assert b'name="file"; filename="prescription.pdf"' in body
        assert b'name="fileType"' in body
        assert b"Refill please" in body
        assert b"Dr. Silva" in body
        assert b'name="prescriptionDate"' not in body

    @pytest.mark.asyncio
    async def test_reports_monotonic_progress_ending_at_100(self, make_client) -> None:
        client = make_client(_upload_ok)
        large_file = PrescriptionFile(
            content=b"\x89PNG" + b"0" * (300 * 1024),
            file_name="scan.png",
            file_type="image/png",
        )
        progress: list[int] = []

        async with client:
            await client.upload_prescription(large_file, UploadMetadata(), on_progress=progress.append)

        assert len(progress) > 1
        assert progress == sorted(progress)
        assert len(set(progress)) == len(progress)
        assert progress[-1] == 100
        assert all(0 <= value <= 100 for value in progress)

    @pytest.mark.asyncio
    async def test_invalid_file_is_not_sent(self, make_client, requests) -> None:
        client = make_client(_upload_ok)
        bad_file = PrescriptionFile(content=b"MZ", file_name="virus.exe", file_type="application/x-msdownload")

        async with client:
            with pytest.raises(PrescriptionValidationError) as exc_info:
                await client.upload_prescription(bad_file, UploadMetadata())

        assert exc_info.value.field == "file_type"
        assert requests == []

    @pytest.mark.asyncio
    async def test_unsuccessful_acknowledgement_raises(self, make_client, prescription_file) -> None:
        rejected = {"success": False, "message": "Drive quota exceeded"}
        client = make_client(lambda request: httpx.Response(200, json=rejected))

        async with client:
            with pytest.raises(PrescriptionServiceError) as exc_info:
                await client.upload_prescription(prescription_file, UploadMetadata())

        assert exc_info.value.message == "Drive quota exceeded"
        assert exc_info.value.code == "UPLOAD_REJECTED"

    @pytest.mark.asyncio
    async def test_backend_message_wins(self, make_client, prescription_file) -> None:
        client = make_client(lambda request: httpx.Response(413, json={"message": "File too large for storage"}))

        async with client:
            with pytest.raises(PrescriptionServiceError) as exc_info:
                await client.upload_prescription(prescription_file, UploadMetadata())

        assert exc_info.value.message == "File too large for storage"
        assert exc_info.value.status_code == 413
        assert exc_info.value.code == "PAYLOAD_TOO_LARGE"

    @pytest.mark.asyncio
    async def test_generic_message_without_body(self, make_client, prescription_file) -> None:
        client = make_client(lambda request: httpx.Response(500, text="Internal Server Error"))

        async with client:
            with pytest.raises(PrescriptionServiceError) as exc_info:
                await client.upload_prescription(prescription_file, UploadMetadata())

        assert exc_info.value.message == "Failed to upload prescription. Please try again."
        assert exc_info.value.code == "SERVER_ERROR"


class TestListAndStats:
    """GET endpoints."""

    @pytest.mark.asyncio
    async def test_get_prescriptions_sends_pagination(self, make_client, requests) -> None:
        payload = {
            "data": [{"id": 1, "fileName": "a.pdf", "status": "approved"}],
            "page": 2,
            "total": 11,
        }
        client = make_client(lambda request: httpx.Response(200, json=payload))

        async with client:
            page = await client.get_prescriptions(page=2, page_size=5, status="approved")

        params = requests[0].url.params
        assert requests[0].url.path == "/api/prescriptions"
        assert (params["page"], params["limit"], params["status"]) == ("2", "5", "approved")
        assert page.data[0].id == "1"
        assert page.data[0].status == PrescriptionStatus.APPROVED
        assert page.total == 11

    @pytest.mark.asyncio
    async def test_get_prescriptions_omits_empty_status(self, make_client, requests) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"data": []}))

        async with client:
            page = await client.get_prescriptions()

        assert "status" not in requests[0].url.params
        assert page.data == []

    @pytest.mark.asyncio
    async def test_get_prescription_stats(self, make_client) -> None:
        payload = {"total": 4, "pending": 1, "underReview": 1, "approved": 2, "rejected": None}
        client = make_client(lambda request: httpx.Response(200, json=payload))

        async with client:
            stats = await client.get_prescription_stats()

        assert (stats.total, stats.pending, stats.under_review, stats.approved, stats.rejected) == (4, 1, 1, 2, 0)

    @pytest.mark.asyncio
    async def test_malformed_body_raises_invalid_response(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        async with client:
            with pytest.raises(PrescriptionServiceError) as exc_info:
                await client.get_prescription_stats()

        assert exc_info.value.code == "INVALID_RESPONSE"
        assert exc_info.value.message == "Failed to get prescription statistics"

    @pytest.mark.asyncio
    async def test_get_upload_status(self, make_client, requests) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"status": "processing"}))

        async with client:
            status = await client.get_upload_status("rx-7")

        assert requests[0].url.path == "/api/prescriptions/rx-7/status"
        assert status == {"status": "processing"}


class TestDeletePrescription:
    """DELETE endpoint."""

    @pytest.mark.asyncio
    async def test_delete_sends_request(self, make_client, requests) -> None:
        client = make_client(lambda request: httpx.Response(204))

        async with client:
            result = await client.delete_prescription("rx-3")

        assert result is None
        assert requests[0].method == "DELETE"
        assert requests[0].url.path == "/api/prescriptions/rx-3"

    @pytest.mark.asyncio
    async def test_404_raises_not_found(self, make_client) -> None:
        body = json.dumps({"message": "No such prescription"})
        client = make_client(lambda request: httpx.Response(404, content=body))

        async with client:
            with pytest.raises(PrescriptionNotFoundError) as exc_info:
                await client.delete_prescription("rx-404")

        assert exc_info.value.prescription_id == "rx-404"
        assert exc_info.value.message == "No such prescription"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_forbidden(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(403))

        async with client:
            with pytest.raises(PrescriptionServiceError) as exc_info:
                await client.delete_prescription("rx-1")

        assert exc_info.value.code == "FORBIDDEN"
        assert exc_info.value.message == "Failed to delete prescription"


class TestTransportErrors:
    """Timeouts and connection failures."""

    @pytest.mark.asyncio
    async def test_timeout(self, make_client) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)

        async with client:
            with pytest.raises(PrescriptionServiceError) as exc_info:
                await client.get_prescriptions()

        assert exc_info.value.code == "TIMEOUT"
        assert exc_info.value.message == "Failed to get prescriptions: request timed out"
        assert isinstance(exc_info.value.original_error, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_connection_error(self, make_client) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        async with client:
            with pytest.raises(PrescriptionServiceError) as exc_info:
                await client.get_prescription_stats()

        assert exc_info.value.code == "CONNECTION_ERROR"
