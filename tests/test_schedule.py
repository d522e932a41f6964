from datetime import datetime, timedelta, timezone

import pytest

from wardpickup.core.errors import InvalidArgumentError, NotFoundError, NotProvisionedError
from wardpickup.domain.models import Household
from wardpickup.engine.schedule import ScheduleEngine, derive_status
from wardpickup.store.memory import MemoryStore

T0 = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _store_with(**fields) -> MemoryStore:
    store = MemoryStore()
    payload = {"id": "H1", "user_id": "C1", "schedule_provisioned": True, **fields}
    store.insert(Household(**payload))
    return store


@pytest.mark.parametrize("freq", [15, 30, 60, 90])
def test_record_pickup_sets_next_exactly_frequency_days_later(freq):
    store = _store_with(pickup_frequency_days=freq, waste_ready=True)
    engine = ScheduleEngine(store, clock=FixedClock(T0))

    status = engine.record_pickup("H1")

    stored = store.get("H1")
    assert stored.last_pickup_at == T0
    assert stored.next_pickup_at == T0 + timedelta(days=freq)
    assert stored.waste_ready is False
    assert status.days_until_next_pickup == freq
    assert status.days_since_last_pickup == 0
    assert status.overdue is False


@pytest.mark.parametrize("bad", [45, 0, -30, 1, None, True])
def test_set_frequency_rejects_values_outside_allowed_set(bad):
    store = _store_with()
    engine = ScheduleEngine(store, clock=FixedClock(T0))
    with pytest.raises(InvalidArgumentError):
        engine.set_frequency("H1", bad)
    assert store.get("H1").pickup_frequency_days == 30


def test_set_frequency_does_not_move_existing_next_pickup():
    store = _store_with()
    engine = ScheduleEngine(store, clock=FixedClock(T0))
    engine.record_pickup("H1")

    status = engine.set_frequency("H1", 90)

    assert status.pickup_frequency_days == 90
    assert status.next_pickup_at == T0 + timedelta(days=30)
    # The new frequency applies from the next pickup on.
    later = T0 + timedelta(days=31)
    after = engine.record_pickup("H1", now=later)
    assert after.next_pickup_at == later + timedelta(days=90)


def test_set_frequency_same_value_is_a_no_op():
    store = _store_with(pickup_frequency_days=60)
    engine = ScheduleEngine(store, clock=FixedClock(T0))
    version = store.get("H1").version

    engine.set_frequency("H1", 60)

    assert store.get("H1").version == version


def test_unknown_household_is_not_found():
    engine = ScheduleEngine(MemoryStore(), clock=FixedClock(T0))
    with pytest.raises(NotFoundError):
        engine.get_schedule("nope")
    with pytest.raises(NotFoundError):
        engine.set_frequency("nope", 30)
    with pytest.raises(NotFoundError):
        engine.record_pickup("nope")


def test_unprovisioned_household_is_distinct_from_never_collected():
    store = _store_with(schedule_provisioned=False)
    engine = ScheduleEngine(store, clock=FixedClock(T0))

    with pytest.raises(NotProvisionedError) as exc:
        engine.get_schedule("H1")
    assert exc.value.extra["default_frequency_days"] == 30

    # Choosing a frequency provisions the schedule.
    engine.set_frequency("H1", 30)
    status = engine.get_schedule("H1")
    assert status.last_pickup_at is None
    assert status.next_pickup_at is None


def test_derive_status_unscheduled_is_never_overdue():
    status = derive_status(Household(id="H1", user_id="C1"), T0)
    assert status.overdue is False
    assert status.days_until_next_pickup is None
    assert status.days_since_last_pickup is None


def test_derive_status_past_next_pickup_is_overdue():
    h = Household(
        id="H1",
        user_id="C1",
        last_pickup_at=T0 - timedelta(days=33),
        next_pickup_at=T0 - timedelta(days=3),
    )
    status = derive_status(h, T0)
    assert status.overdue is True
    assert status.days_until_next_pickup == -3
    assert status.days_since_last_pickup == 33


def test_derive_status_rounds_half_days_away_from_zero():
    h = Household(id="H1", user_id="C1", next_pickup_at=T0 + timedelta(days=2, hours=12))
    assert derive_status(h, T0).days_until_next_pickup == 3

    h = Household(id="H1", user_id="C1", next_pickup_at=T0 - timedelta(hours=12))
    status = derive_status(h, T0)
    assert status.days_until_next_pickup == -1
    assert status.overdue is True

    h = Household(id="H1", user_id="C1", next_pickup_at=T0 - timedelta(hours=11))
    status = derive_status(h, T0)
    assert status.days_until_next_pickup == 0
    assert status.overdue is False
