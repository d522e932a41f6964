from datetime import datetime, timedelta, timezone

import pytest

from wardpickup.core.errors import ForbiddenError, LedgerError, NotFoundError, StoreError, WardMismatchError
from wardpickup.domain.models import Caller, CollectionRecord, Household
from wardpickup.engine.collection import CollectionEngine
from wardpickup.engine.schedule import ScheduleEngine
from wardpickup.ledger.credits import CreditLedger, MemoryCreditLedger
from wardpickup.store.memory import MemoryStore

T0 = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
WORKER = Caller(id="W1", role="worker", ward_number=7)


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FailingLedger(CreditLedger):
    def award_credits(self, user_id: str, amount: int) -> None:
        raise LedgerError("ledger unavailable")


class FailingAppendStore(MemoryStore):
    def append_collection(self, record: CollectionRecord) -> CollectionRecord:
        raise StoreError("disk full")


class FailingScheduleStore(MemoryStore):
    """Accepts the log append but refuses every household write."""

    def compare_and_set(self, household, expected_version):
        raise StoreError("household table locked")


class BrokenScheduleEngine(ScheduleEngine):
    def record_pickup(self, household_id, now=None):
        raise RuntimeError("unexpected schedule bug")


def _setup(store: MemoryStore | None = None, ledger: CreditLedger | None = None, **fields):
    store = store or MemoryStore()
    payload = {
        "id": "H1",
        "user_id": "C1",
        "ward_number": 7,
        "schedule_provisioned": True,
        "waste_ready": True,
        **fields,
    }
    store.insert(Household(**payload))
    ledger = ledger or MemoryCreditLedger()
    clock = FixedClock(T0)
    engine = CollectionEngine(store, ledger, schedule=ScheduleEngine(store, clock=clock), clock=clock)
    return engine, store, ledger, clock


def test_record_collection_logs_advances_schedule_and_awards_credits():
    engine, store, ledger, _ = _setup(pickup_frequency_days=15)

    outcome = engine.record_collection(
        WORKER, "H1", waste_types=["wet", "dry"], weight_kg=3.5, worker_lat=8.891, worker_lng=76.614
    )

    records = store.list_collections(household_id="H1")
    assert [r.id for r in records] == [outcome.collection_id]
    rec = records[0]
    assert rec.worker_id == "W1"
    assert rec.citizen_id == "C1"
    assert rec.waste_types == ["wet", "dry"]
    assert rec.weight_kg == 3.5
    assert rec.collected_at == T0

    h = store.get("H1")
    assert h.last_pickup_at == T0
    assert h.next_pickup_at == T0 + timedelta(days=15)
    assert h.waste_ready is False

    assert ledger.balance("C1") == 10
    assert outcome.credits_awarded == 10
    assert outcome.warnings == []
    assert outcome.partial is False


def test_duplicate_submissions_produce_duplicate_records():
    engine, store, ledger, _ = _setup()
    engine.record_collection(WORKER, "H1")
    engine.record_collection(WORKER, "H1")
    assert len(store.list_collections(household_id="H1")) == 2
    assert ledger.balance("C1") == 20


def test_log_append_failure_aborts_everything():
    ledger = MemoryCreditLedger()
    engine, store, _, _ = _setup(store=FailingAppendStore(), ledger=ledger)

    with pytest.raises(StoreError):
        engine.record_collection(WORKER, "H1")

    h = store.get("H1")
    assert h.last_pickup_at is None
    assert h.waste_ready is True
    assert ledger.balance("C1") == 0


def test_ledger_failure_keeps_log_and_schedule_and_warns(caplog):
    engine, store, _, _ = _setup(ledger=FailingLedger())

    with caplog.at_level("WARNING"):
        outcome = engine.record_collection(WORKER, "H1")

    assert outcome.partial is True
    assert outcome.credits_awarded == 0
    assert any(w.startswith("credits_not_awarded") for w in outcome.warnings)
    assert len(store.list_collections(household_id="H1")) == 1
    assert store.get("H1").last_pickup_at == T0
    assert "credit award failed" in caplog.text


def test_schedule_failure_keeps_log_and_still_awards_credits():
    engine, store, ledger, _ = _setup(store=FailingScheduleStore())

    outcome = engine.record_collection(WORKER, "H1")

    assert outcome.partial is True
    assert outcome.schedule is None
    assert any(w.startswith("schedule_not_updated") for w in outcome.warnings)
    assert len(store.list_collections(household_id="H1")) == 1
    assert ledger.balance("C1") == 10


def test_authorization_runs_before_any_write():
    engine, store, ledger, _ = _setup()

    with pytest.raises(ForbiddenError):
        engine.record_collection(Caller(id="C1", role="citizen"), "H1")
    with pytest.raises(WardMismatchError):
        engine.record_collection(Caller(id="W2", role="worker", ward_number=8), "H1")
    with pytest.raises(NotFoundError):
        engine.record_collection(WORKER, "H404")

    assert store.list_collections() == []
    assert ledger.balance("C1") == 0


def test_wardless_worker_can_collect_anywhere():
    engine, store, _, _ = _setup()
    engine.record_collection(Caller(id="W9", role="worker"), "H1")
    assert len(store.list_collections(worker_id="W9")) == 1


def test_history_is_newest_first():
    engine, _, _, clock = _setup()
    first = engine.record_collection(WORKER, "H1")
    clock.now = T0 + timedelta(days=30)
    second = engine.record_collection(WORKER, "H1")

    assert [r.id for r in engine.collection_history("H1")] == [second.collection_id, first.collection_id]


def test_schedule_scenario_from_first_collection_to_overdue():
    engine, store, _, clock = _setup(waste_ready=False)
    schedule = ScheduleEngine(store, clock=clock)

    before = schedule.get_schedule("H1")
    assert (before.last_pickup_at, before.next_pickup_at, before.overdue) == (None, None, False)

    engine.record_collection(WORKER, "H1", waste_types=["wet", "dry"], weight_kg=3.5)
    after = schedule.get_schedule("H1")
    assert after.last_pickup_at == T0
    assert after.next_pickup_at == T0 + timedelta(days=30)
    assert after.overdue is False

    clock.now = T0 + timedelta(days=40)
    late = schedule.get_schedule("H1")
    assert late.overdue is True
    assert late.days_until_next_pickup == -10


def test_unexpected_schedule_error_is_reported_and_credits_still_awarded(caplog):
    store = MemoryStore()
    store.insert(Household(id="H1", user_id="C1", ward_number=7, schedule_provisioned=True))
    ledger = MemoryCreditLedger()
    clock = FixedClock(T0)
    engine = CollectionEngine(store, ledger, schedule=BrokenScheduleEngine(store, clock=clock), clock=clock)

    with caplog.at_level("WARNING"):
        outcome = engine.record_collection(WORKER, "H1")

    assert outcome.partial is True
    assert outcome.warnings == ["schedule_not_updated: unexpected schedule bug"]
    assert outcome.credits_awarded == 10
    assert ledger.balance("C1") == 10
    assert len(store.list_collections(household_id="H1")) == 1
    assert "schedule update failed" in caplog.text
