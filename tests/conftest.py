"""
Shared pytest fixtures for all tests.

This module provides settings, a mocked upload service, prescription
factories and store fixtures used across the test suite.
"""

import os
from collections.abc import Callable
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from philldesk.config.settings import Settings, reset_settings
from philldesk.domains.prescriptions import (
    Prescription,
    PrescriptionFile,
    PrescriptionPage,
    PrescriptionStats,
    PrescriptionStatus,
    PrescriptionStore,
    UploadResponse,
)

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["TESTING"] = "true"


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only (no .env file)."""
    return Settings(_env_file=None, PHILLDESK_API_BASE_URL="https://api.philldesk.test/api")


@pytest.fixture(autouse=True)
def _reset_cached_settings():
    """Never leak a cached Settings instance between tests."""
    reset_settings()
    yield
    reset_settings()


# ============================================================================
# TEST DATA FIXTURES
# ============================================================================


@pytest.fixture
def make_prescription() -> Callable[..., Prescription]:
    """Factory for Prescription records."""

    def _make(
        prescription_id: str = "rx-1",
        status: PrescriptionStatus | str = PrescriptionStatus.PENDING,
        **overrides,
    ) -> Prescription:
        data = {
            "id": prescription_id,
            "file_name": f"{prescription_id}.pdf",
            "file_url": f"https://files.philldesk.test/{prescription_id}.pdf",
            "file_size": 2048,
            "file_type": "application/pdf",
            "google_drive_file_id": f"drive-{prescription_id}",
            "status": status,
            "uploaded_at": datetime(2024, 5, 1, 9, 30, tzinfo=UTC),
            "updated_at": datetime(2024, 5, 1, 9, 30, tzinfo=UTC),
        }
        data.update(overrides)
        return Prescription(**data)

    return _make


@pytest.fixture
def sample_prescriptions(make_prescription) -> list[Prescription]:
    """Three prescriptions in different review states."""
    return [
        make_prescription("rx-1", PrescriptionStatus.PENDING),
        make_prescription("rx-2", PrescriptionStatus.UNDER_REVIEW),
        make_prescription("rx-3", PrescriptionStatus.APPROVED),
    ]


@pytest.fixture
def sample_stats() -> PrescriptionStats:
    return PrescriptionStats(total=5, pending=2, under_review=0, approved=3, rejected=0, completed=0)


@pytest.fixture
def prescription_file() -> PrescriptionFile:
    """A small valid PDF upload."""
    return PrescriptionFile(
        content=b"%PDF-1.4\n" + b"0" * 4096,
        file_name="prescription.pdf",
        file_type="application/pdf",
    )


# ============================================================================
# MOCK SERVICES
# ============================================================================


@pytest.fixture
def mock_upload_service(sample_prescriptions, sample_stats) -> AsyncMock:
    """Mock IPrescriptionUploadService with successful defaults."""
    service = AsyncMock()
    service.upload_prescription.return_value = UploadResponse(
        success=True,
        prescription_id="rx-new",
        file_name="prescription.pdf",
        message="Prescription uploaded successfully",
    )
    service.get_prescriptions.return_value = PrescriptionPage(data=sample_prescriptions)
    service.get_prescription_stats.return_value = sample_stats
    service.delete_prescription.return_value = None
    return service


@pytest.fixture
def store(mock_upload_service, settings) -> PrescriptionStore:
    """Store wired to the mock upload service."""
    return PrescriptionStore(mock_upload_service, settings)
