"""
Green-credit ledger collaborator.

The ledger itself lives outside this service; the core only needs
`award_credits(user_id, amount)`. Two backends:
- `MemoryCreditLedger`: process-local balances (tests, demos)
- `HttpCreditLedger`: POSTs `{"user_id", "amount"}` to the configured ledger API

Both raise `LedgerError` on failure.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

import httpx

from wardpickup.config.settings import Settings
from wardpickup.core.errors import LedgerError
from wardpickup.core.http import build_client, post_json

logger = logging.getLogger(__name__)


class CreditLedger(ABC):
    @abstractmethod
    def award_credits(self, user_id: str, amount: int) -> None:
        ...

    def close(self) -> None:
        return None


class MemoryCreditLedger(CreditLedger):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._balances: dict[str, int] = {}

    def award_credits(self, user_id: str, amount: int) -> None:
        if amount <= 0:
            raise LedgerError(f"Credit amount must be positive, got {amount}.")
        with self._lock:
            self._balances[user_id] = self._balances.get(user_id, 0) + amount

    def balance(self, user_id: str) -> int:
        with self._lock:
            return self._balances.get(user_id, 0)


class HttpCreditLedger(CreditLedger):
    """Ledger API client holding one pooled `httpx.Client` for the app's lifetime."""

    def __init__(self, client: httpx.Client, award_path: str = "/credits/award"):
        self._client = client
        self._award_path = award_path

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpCreditLedger":
        cfg = settings.ledger
        if not cfg.base_url:
            raise RuntimeError("Ledger backend 'http' requires ledger.base_url (or WARDPICKUP_LEDGER_URL).")
        headers = {"Authorization": f"Bearer {cfg.api_token}"} if cfg.api_token else None
        client = build_client(cfg.base_url, headers=headers, timeout_seconds=settings.app.http_timeout_seconds)
        return cls(client, award_path=cfg.award_path)

    def award_credits(self, user_id: str, amount: int) -> None:
        try:
            post_json(self._client, self._award_path, payload={"user_id": user_id, "amount": amount})
        except (httpx.HTTPError, ValueError) as exc:
            raise LedgerError(f"Ledger award failed for user {user_id}: {exc}") from exc
        logger.info("Awarded %d credits to user=%s", amount, user_id)

    def close(self) -> None:
        self._client.close()


def build_ledger(settings: Settings) -> CreditLedger:
    if settings.ledger.backend == "http":
        return HttpCreditLedger.from_settings(settings)
    return MemoryCreditLedger()
