"""Shared fixtures: relay settings, destinations and a TestClient bound to them.

Outbound calls to destinations are intercepted with respx (`respx_mock`).
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.models.destination import Destination

ENTRY_TOKEN = "test-entry-token"

DEST_A = Destination(url="https://live-a.wati.test/api/v1/sendTemplateMessages", token="tok-a", channel="5215550000001")
DEST_B = Destination(url="https://live-b.wati.test/api/v1/sendTemplateMessages", token="tok-b", channel="5215550000002")
DEST_C = Destination(url="https://live-c.wati.test/api/v1/sendTemplateMessages", token="tok-c", channel="5215550000003")


@pytest.fixture
def relay_settings() -> Settings:
    return Settings(_env_file=None, ENTRY_TOKEN=ENTRY_TOKEN, ENVIRONMENT="development")


@pytest.fixture
def destinations() -> list[Destination]:
    return [DEST_A, DEST_B, DEST_C]


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ENTRY_TOKEN}"}


@pytest.fixture
def client(relay_settings, destinations):
    app = create_app(config=relay_settings, destinations=destinations)
    with TestClient(app) as c:
        yield c
