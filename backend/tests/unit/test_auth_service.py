from datetime import timedelta

import jwt
import pytest

from backend.src.services import config as config_module
from backend.src.services.auth import AuthError, AuthService
from backend.tests.unit.helpers import TEST_SECRET


def test_auth_service_requires_secret(monkeypatch) -> None:
    monkeypatch.delenv("IDENTITY_SECRET_KEY", raising=False)

    cfg = config_module.reload_config()
    service = AuthService(config=cfg)

    with pytest.raises(AuthError) as excinfo:
        service.create_jwt("user-123")

    assert excinfo.value.error == "missing_identity_secret"
    assert excinfo.value.status_code == 500


def test_auth_service_signs_and_validates_with_secret() -> None:
    service = AuthService(config=config_module.get_config())

    token = service.create_jwt("user-123", email="alice@example.com", name="Alice")
    payload = service.validate_jwt(token)

    assert payload.sub == "user-123"
    assert payload.email == "alice@example.com"
    assert payload.name == "Alice"


def test_expired_token_is_rejected() -> None:
    service = AuthService(config=config_module.get_config())
    token = service.create_jwt("user-123", expires_in=timedelta(seconds=-5))

    with pytest.raises(AuthError) as excinfo:
        service.validate_jwt(token)

    assert excinfo.value.error == "token_expired"


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = jwt.encode(
        {"sub": "intruder", "iat": 0, "exp": 4102444800},
        "some-other-secret-value-1234",
        algorithm="HS256",
    )

    with pytest.raises(AuthError) as excinfo:
        AuthService(config=config_module.get_config()).validate_jwt(token)

    assert excinfo.value.error == "invalid_token"


def test_token_without_subject_is_rejected() -> None:
    token = jwt.encode({"iat": 0, "exp": 4102444800}, TEST_SECRET, algorithm="HS256")

    with pytest.raises(AuthError, match="missing required claims"):
        AuthService(config=config_module.get_config()).validate_jwt(token)
