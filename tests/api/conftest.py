"""Shared fixtures for API tests."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from flightops.api.app import app
from flightops.api.deps import get_current_org
from flightops.contracts.settings import FeatureSettings
from flightops.services.sessions import SessionRegistry
from tests.persistence.fake_firestore import FakeFirestoreClient

TEST_ORG_ID = "api-test-org"


@pytest.fixture
def fake_client():
    """In-memory Firestore fake, shared across all repos in a single test."""
    return FakeFirestoreClient()


@pytest.fixture
def feature_settings():
    return FeatureSettings()


@pytest.fixture
def test_app(fake_client, feature_settings):
    """FastAPI app with dependency overrides for testing."""
    # Override auth to return a fixed test organization
    app.dependency_overrides[get_current_org] = lambda: TEST_ORG_ID

    # Patch get_firestore_client everywhere it's imported
    with patch(
        "flightops.persistence.repositories.base.get_firestore_client",
        return_value=fake_client,
    ), patch(
        "flightops.persistence.repositories.flight_repo.get_firestore_client",
        return_value=fake_client,
    ):
        # The lifespan does not run under ASGITransport
        app.state.feature_settings = feature_settings
        app.state.sessions = SessionRegistry()
        yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    """httpx AsyncClient wired to the test app."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def seed(fake_client: FakeFirestoreClient, collection: str, doc_id: str, data: dict) -> None:
    """Write a document straight into the fake under the test organization."""
    fake_client.store[f"organizations/{TEST_ORG_ID}/{collection}/{doc_id}"] = dict(data)
