from __future__ import annotations

import pytest

from wardpickup.config.settings import get_logging_config, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    # `get_settings` is lru-cached; each test reads the environment it sets up.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_packaged_defaults_load(monkeypatch):
    for name in ("WARDPICKUP_CONFIG_PATH", "WARDPICKUP_STORE_BACKEND", "WARDPICKUP_LEDGER_BACKEND"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.app.name == "WardPickup"
    assert settings.app.timezone == "Asia/Kolkata"
    assert settings.ledger.award_path == "/credits/award"
    assert settings.store.backend in ("memory", "file")


def test_env_overrides_store_and_ledger(monkeypatch, tmp_path):
    monkeypatch.delenv("WARDPICKUP_CONFIG_PATH", raising=False)
    monkeypatch.setenv("WARDPICKUP_STORE_BACKEND", "file")
    monkeypatch.setenv("WARDPICKUP_STORE_DIR", str(tmp_path))
    monkeypatch.setenv("WARDPICKUP_LEDGER_BACKEND", "http")
    monkeypatch.setenv("WARDPICKUP_LEDGER_URL", "https://ledger.example.test")

    settings = get_settings()

    assert settings.store.dir == str(tmp_path)
    assert settings.ledger.backend == "http"
    assert settings.ledger.base_url == "https://ledger.example.test"


def test_external_config_file(monkeypatch, tmp_path):
    cfg = tmp_path / "wardpickup.yaml"
    cfg.write_text("store:\n  backend: memory\napp:\n  timezone: UTC\n", encoding="utf-8")
    monkeypatch.setenv("WARDPICKUP_CONFIG_PATH", str(cfg))
    monkeypatch.delenv("WARDPICKUP_STORE_BACKEND", raising=False)

    settings = get_settings()

    assert settings.store.backend == "memory"
    assert settings.app.timezone == "UTC"
    # Sections missing from the file fall back to model defaults.
    assert settings.ledger.backend == "memory"


def test_invalid_backend_is_rejected(monkeypatch):
    monkeypatch.delenv("WARDPICKUP_CONFIG_PATH", raising=False)
    monkeypatch.setenv("WARDPICKUP_STORE_BACKEND", "postgres")

    with pytest.raises(ValueError):
        get_settings()


def test_logging_config_is_a_dictconfig_mapping():
    cfg = get_logging_config()
    assert cfg["version"] == 1
    assert "root" in cfg or "loggers" in cfg
