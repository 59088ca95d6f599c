"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import MagicMock, patch
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from tests.utils.fake_supabase import FakeSupabase  # noqa: E402


@pytest.fixture
def fake_store():
    """Empty in-memory task store."""
    return FakeSupabase()


@pytest.fixture
def patched_store(fake_store):
    """Route the task service's SupabaseClient to the in-memory store."""
    with patch('taskhub.services.task_service.SupabaseClient') as mock_client_class:
        mock_client_class.return_value.__aenter__.return_value = fake_store
        mock_client_class.return_value.__aexit__.return_value = None
        yield fake_store


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing."""
    client = MagicMock()
    client.table = MagicMock(return_value=MagicMock())
    return client


@pytest.fixture
def sample_task_row():
    """Store row for a task with two subtasks, as select('*, subtasks(*)') returns it."""
    return {
        "id": "7f1d2a9e-1c1b-4c7e-9a34-0c6b2f1d9a01",
        "title": "Prepare quarterly report",
        "description": "Collect numbers from finance",
        "status": "in_progress",
        "priority": "high",
        "due_date": "2024-05-01T00:00:00+00:00",
        "assigned_to": "alice",
        "created_at": "2024-04-01T09:00:00+00:00",
        "updated_at": "2024-04-01T09:00:00+00:00",
        "subtasks": [
            {
                "id": "b2a8c6f0-0000-4000-8000-000000000002",
                "task_id": "7f1d2a9e-1c1b-4c7e-9a34-0c6b2f1d9a01",
                "title": "Draft charts",
                "description": None,
                "completed": False,
                "created_at": "2024-04-01T09:00:02+00:00",
                "updated_at": "2024-04-01T09:00:02+00:00",
            },
            {
                "id": "b2a8c6f0-0000-4000-8000-000000000001",
                "task_id": "7f1d2a9e-1c1b-4c7e-9a34-0c6b2f1d9a01",
                "title": "Pull revenue figures",
                "description": "From the ledger export",
                "completed": True,
                "created_at": "2024-04-01T09:00:01+00:00",
                "updated_at": "2024-04-01T09:00:01+00:00",
            },
        ],
    }


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time

