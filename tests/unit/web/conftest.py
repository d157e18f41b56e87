import pytest
from fastapi.testclient import TestClient

from leasing_service.app.main import app
from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db
from shared.core.schemas import UserToken


@pytest.fixture
def acting_user(requester):
    return requester


@pytest.fixture
def client(db, acting_user):
    def override_db():
        yield db

    app.dependency_overrides[get_leasing_db] = override_db
    app.dependency_overrides[validate_current_token] = lambda: UserToken(
        user_id=str(acting_user.id), name=acting_user.full_name, status="active")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
