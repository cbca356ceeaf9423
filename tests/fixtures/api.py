"""HTTP fixtures: the FastAPI app wired to the test database and fake principals."""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from grocer.core.auth import get_principal
from grocer.database import get_db
from grocer.main import app
from grocer.schemas.principal import Principal

ALICE = Principal(uid="uid-student", role="user", email="alice@example.com", display_name="Alice Banda")
BRIAN = Principal(uid="uid-resident", role="user", email="brian@example.com", display_name="Brian Phiri")
ADMIN = Principal(uid="uid-admin", role="admin", email="admin@example.com")
GUEST = Principal(uid="uid-guest", role="guest")


class PrincipalSwitch:
    """Which principal `get_principal` resolves to; None means unauthenticated."""

    def __init__(self):
        self.current = None

    def __call__(self):
        if self.current is None:
            raise HTTPException(status_code=401, detail="Missing Authorization header.")
        return self.current

    def use(self, principal):
        self.current = principal
        return principal


@pytest.fixture
def auth_as():
    return PrincipalSwitch()


@pytest.fixture
def client(db_session, auth_as):
    """TestClient without startup events; tables come from the test engine."""

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_principal] = auth_as
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
