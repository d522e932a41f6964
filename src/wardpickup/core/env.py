"""
Deployment environment helpers.

- `load_dotenv_if_present()`: load the ledger token and store overrides from `.env`
  (never overriding variables already set in the process).
- `resolve_project_path()`: anchor a relative store directory at the deployment root
  (`WARDPICKUP_PROJECT_ROOT`, else the directory holding `WARDPICKUP_ENV_FILE`,
  else the working directory).
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


def _env_file() -> Path | None:
    explicit = os.getenv("WARDPICKUP_ENV_FILE")
    return Path(explicit).expanduser().resolve() if explicit else None


def get_project_root() -> Path:
    override = os.getenv("WARDPICKUP_PROJECT_ROOT")
    if override:
        return Path(override).expanduser().resolve()
    env_file = _env_file()
    if env_file is not None:
        return env_file.parent
    return Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `.env` once; returns the loaded path, or None when there is none."""
    env_path = _env_file() or get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_project_root() / p).resolve()
