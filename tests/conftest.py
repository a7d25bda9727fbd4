"""
Shared pytest fixtures for the Dev Events API test suite.

Each test that touches storage gets its own SQLite file under
``tmp_path``; ``settings.database_url`` is patched so every connection
opened by the services points at it.
"""

from typing import Dict

import pytest
from fastapi.testclient import TestClient

from dev_events_api.app.core.config import settings
from dev_events_api.app.core.db import init_db
from dev_events_api.app.main import app


@pytest.fixture
def database(tmp_path, monkeypatch):
    """Point the application at a fresh, migrated database file."""
    db_path = tmp_path / "events.db"
    monkeypatch.setattr(settings, "database_url", str(db_path))
    init_db()
    return db_path


@pytest.fixture
def client(database):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_submission():
    """
    Return a function that builds a valid raw submission.

    Every field is a string, as a multipart form would deliver it.
    Defaults can be overridden via keyword arguments; pass ``None`` to
    drop a field entirely.

    Example:
        raw = make_submission(title="Cloud Meetup", tags="Cloud,DevOps")
    """

    def _make_submission(**overrides) -> Dict[str, str]:
        raw = {
            "title": "PyCon Hackathon",
            "description": "A weekend of building things with Python.",
            "overview": "Teams of up to four build a project in 48 hours.",
            "venue": "Main Hall",
            "location": "Berlin, Germany",
            "date": "2024-03-15",
            "time": "2:30 PM",
            "mode": "Offline",
            "audience": "Developers of all levels",
            "agenda": '["Opening keynote", "Hacking", "Demos"]',
            "organizer": "Python Berlin",
            "tags": '["Python", "AI"]',
            "image": "https://res.cloudinary.com/demo/image/upload/hackathon.png",
        }
        for key, value in overrides.items():
            if value is None:
                raw.pop(key, None)
            else:
                raw[key] = value
        return raw

    return _make_submission
