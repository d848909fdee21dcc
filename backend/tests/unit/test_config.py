from pathlib import Path

import pytest

from backend.src.services import config as config_module


def test_get_config_reads_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "store"))
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://play.example.com/")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example.com, https://b.example.com")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = config_module.reload_config()

    assert cfg.data_dir == (tmp_path / "store").resolve()
    assert cfg.data_dir.is_dir()
    assert cfg.public_base_url == "https://play.example.com"
    assert cfg.cors_origins == ["https://a.example.com", "https://b.example.com"]
    assert cfg.log_level == "DEBUG"
    assert cfg.database_path == cfg.data_dir / "documents.db"
    assert cfg.storage_path == cfg.data_dir / "storage"


def test_get_config_allows_missing_identity_secret(monkeypatch) -> None:
    monkeypatch.delenv("IDENTITY_SECRET_KEY", raising=False)

    cfg = config_module.reload_config()

    assert cfg.identity_secret_key is None


def test_get_config_rejects_short_identity_secret(monkeypatch) -> None:
    monkeypatch.setenv("IDENTITY_SECRET_KEY", "short")

    with pytest.raises(ValueError):
        config_module.reload_config()


def test_get_config_rejects_blank_identity_secret(monkeypatch) -> None:
    monkeypatch.setenv("IDENTITY_SECRET_KEY", "   ")

    with pytest.raises(ValueError):
        config_module.reload_config()


@pytest.mark.parametrize(
    "key, configured",
    [
        ("pk_live_abc", True),
        (config_module.PLACEHOLDER_PUBLISHABLE_KEY, False),
        ("", False),
    ],
)
def test_identity_configured(monkeypatch, key: str, configured: bool) -> None:
    monkeypatch.setenv("IDENTITY_PUBLISHABLE_KEY", key)

    assert config_module.reload_config().identity_configured is configured


def test_local_mode_can_be_disabled(monkeypatch) -> None:
    monkeypatch.setenv("ENABLE_LOCAL_MODE", "false")

    assert config_module.reload_config().enable_local_mode is False


def test_get_config_is_cached() -> None:
    assert config_module.get_config() is config_module.get_config()
