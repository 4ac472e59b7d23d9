"""Pytest fixtures for Report Desk."""

import aiosqlite
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from reportdesk.core.config import Settings
from reportdesk.main import create_app
from reportdesk.models.database import ReportStore
from reportdesk.services.report_service import ReportService

# Keep hashing cheap in tests
TEST_ITERATIONS = 1000


@pytest.fixture
def settings(tmp_path):
    return Settings(
        sqlite_path=str(tmp_path / "reports.db"),
        password_iterations=TEST_ITERATIONS,
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def store(settings):
    async with ReportStore(settings.sqlite_path, password_iterations=TEST_ITERATIONS) as s:
        yield s


@pytest.fixture
def service(store):
    return ReportService(store)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


POTHOLE = {
    "title": "Pothole",
    "description": "Large pothole",
    "location": "Main St",
    "password": "secret123",
}


async def comment_count(store, report_id):
    """Count stored comments through a separate connection."""
    async with aiosqlite.connect(store.path) as conn:
        async with conn.execute("SELECT COUNT(*) FROM comments WHERE report_id = ?", (report_id,)) as cursor:
            row = await cursor.fetchone()
    return row[0]
