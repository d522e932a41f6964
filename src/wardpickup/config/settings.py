# src/wardpickup/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/wardpickup/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `WARDPICKUP_CONFIG_PATH`
- environment variables (e.g., `WARDPICKUP_STORE_DIR`, `WARDPICKUP_LEDGER_URL`)

Design rule:
- Deployment knobs (storage, ledger endpoint, logging) live in YAML.
- Collection rules (proximity radius, frequency set, credit award) are fixed
  constants in `wardpickup.domain.models`, not settings.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from wardpickup.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `wardpickup.config`."""
    text = resources.files("wardpickup.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "WardPickup"
    timezone: str = "Asia/Kolkata"
    http_timeout_seconds: float = 10
    log_level: str = "INFO"


class StoreSettings(BaseModel):
    backend: Literal["memory", "file"] = "file"
    dir: str = ".data/wardpickup"


class LedgerSettings(BaseModel):
    backend: Literal["memory", "http"] = "memory"
    base_url: str | None = None
    award_path: str = "/credits/award"
    api_token: str | None = None


class ApiSettings(BaseModel):
    cors_origins: list[str] = Field(default_factory=list)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Only deployment knobs are read from the environment; everything else belongs in YAML.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("WARDPICKUP_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    store_backend = os.getenv("WARDPICKUP_STORE_BACKEND")
    if store_backend:
        data.setdefault("store", {})["backend"] = store_backend
    store_dir = os.getenv("WARDPICKUP_STORE_DIR")
    if store_dir:
        data.setdefault("store", {})["dir"] = store_dir

    ledger_backend = os.getenv("WARDPICKUP_LEDGER_BACKEND")
    if ledger_backend:
        data.setdefault("ledger", {})["backend"] = ledger_backend
    ledger_url = os.getenv("WARDPICKUP_LEDGER_URL")
    if ledger_url:
        data.setdefault("ledger", {})["base_url"] = ledger_url
    ledger_token = os.getenv("WARDPICKUP_LEDGER_TOKEN")
    if ledger_token:
        data.setdefault("ledger", {})["api_token"] = ledger_token

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("WARDPICKUP_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
