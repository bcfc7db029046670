"""Test configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from jobboard.config import Settings
from jobboard.services.jobs.main import create_app


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing the database and uploads at a temp directory."""
    return Settings(
        db_path=str(tmp_path / "databases" / "jobPortal.db"),
        upload_dir=str(tmp_path / "uploads"),
        log_dir=None,
        log_level="WARNING",
    )


@pytest.fixture
def client(test_settings):
    """Run the app (and its lifespan) against the temp settings."""
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client


@pytest.fixture
def job_payload():
    """A complete form body for a job posting."""
    return {
        "jobTitle": "Engineer",
        "location": "Remote",
        "remote": "true",
        "employmentType": "Full-time",
        "description": "Build things",
        "applicationEmail": "a@b.com",
        "companyName": "Acme",
        "jobCategory": "Engineering",
    }
