"""Shared constants and request helpers for the unit tests."""

from backend.src.services import config as config_module
from backend.src.services.auth import AuthService

TEST_SECRET = "unit-test-identity-secret-0123456789"
TEST_BASE_URL = "http://testserver"


def bearer(user_id: str = "user-1", **claims) -> dict:
    token = AuthService(config_module.get_config()).create_jwt(user_id, **claims)
    return {"Authorization": f"Bearer {token}"}
