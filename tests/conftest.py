"""
Shared pytest fixtures for failure-uploader tests.

- In-memory storage authority and notifier fakes
- Fixed clock
- AWS credentials isolation for moto
- FastAPI test client with collaborators overridden
"""

from datetime import datetime, timezone
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakeStorage, RecordingNotifier

FIXED_NOW = datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Keep boto3 away from any real account while moto is active."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def ticket_payload() -> dict:
    return {
        "project": "myapp",
        "env": "prod",
        "request": {
            "method": "POST",
            "url": "https://api.example.com/v1/orders",
            "contentType": "application/json",
            "bodyBytes": 2048,
            "files": [
                {
                    "name": "photo",
                    "filename": "photo.jpg",
                    "contentType": "image/jpeg",
                    "bytes": 1024,
                }
            ],
        },
        "client": {"appVersion": "3.2.1", "platform": "ios"},
    }


@pytest.fixture
def client(storage, notifier):
    """TestClient with storage and notifier replaced by in-memory fakes."""
    from controller.controller_dependencies import (
        get_notifier,
        get_storage_authority,
    )
    from main import app

    app.dependency_overrides[get_storage_authority] = lambda: storage
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
