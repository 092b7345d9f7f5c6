"""Shared pytest fixtures for unified-api tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from unifiedapi.api.auth import TokenService  # noqa: E402
from unifiedapi.api.factory import create_app  # noqa: E402
from unifiedapi.services.rsvp_gate import RsvpGateService  # noqa: E402

from .helpers import TEST_JWT_SECRET, FakeDatabase, make_settings, sample_directory  # noqa: E402


@pytest.fixture
def directory():
    return sample_directory()


@pytest.fixture
def gate_service(directory):
    return RsvpGateService(directory, expose_debug=True)


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings, fake_db, gate_service):
    app = create_app(settings, db=fake_db, gate_service=gate_service)
    return TestClient(app)


@pytest.fixture
def auth_header():
    token = TokenService(TEST_JWT_SECRET, 3600).issue(1, "admin")
    return {"Authorization": f"Bearer {token}"}
