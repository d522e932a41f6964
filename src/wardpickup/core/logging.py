"""
Logging configuration.

We use a YAML logging config (`src/wardpickup/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `WARDPICKUP_LOG_LEVEL`).
"""

from __future__ import annotations

import logging.config

from wardpickup.config.settings import Settings, get_logging_config, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure the Python logging system based on packaged YAML config + settings."""
    settings = settings or get_settings()
    # dictConfig mutates nested dicts; keep the cached copy pristine.
    config = {k: (dict(v) if isinstance(v, dict) else v) for k, v in get_logging_config().items()}
    config["handlers"] = {name: dict(h) for name, h in (config.get("handlers") or {}).items()}

    level = settings.app.log_level.upper()
    config["root"] = {**(config.get("root") or {}), "level": level}
    for handler in config["handlers"].values():
        if "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)
