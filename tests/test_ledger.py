import json

import httpx
import pytest

from wardpickup.core.errors import LedgerError
from wardpickup.ledger.credits import HttpCreditLedger, MemoryCreditLedger


def _client(handler) -> httpx.Client:
    return httpx.Client(base_url="https://ledger.test", transport=httpx.MockTransport(handler))


def test_http_ledger_posts_award():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, json.loads(request.read())))
        return httpx.Response(200, json={"ok": True})

    ledger = HttpCreditLedger(_client(handler))
    ledger.award_credits("C1", 10)
    ledger.close()

    assert seen == [("POST", "/credits/award", {"user_id": "C1", "amount": 10})]


def test_http_ledger_wraps_errors():
    ledger = HttpCreditLedger(_client(lambda request: httpx.Response(503)))
    with pytest.raises(LedgerError):
        ledger.award_credits("C1", 10)


def test_memory_ledger_accumulates():
    ledger = MemoryCreditLedger()
    ledger.award_credits("C1", 10)
    ledger.award_credits("C1", 10)
    assert ledger.balance("C1") == 20
    with pytest.raises(LedgerError):
        ledger.award_credits("C1", 0)
