"""
Service wiring shared by the API and the CLI.

`build_services` constructs the store and ledger handles from settings (unless
given explicitly, e.g. by tests) and the engines on top of them. The owner calls
`close()` at shutdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from wardpickup.config.settings import Settings
from wardpickup.core.time import utc_now
from wardpickup.engine.collection import CollectionEngine
from wardpickup.engine.households import HouseholdService
from wardpickup.engine.roster import RosterService
from wardpickup.engine.schedule import ScheduleEngine
from wardpickup.engine.verification import VerificationEngine
from wardpickup.ledger.credits import CreditLedger, build_ledger
from wardpickup.store import HouseholdStore, build_store


@dataclass
class Services:
    store: HouseholdStore
    ledger: CreditLedger
    households: HouseholdService
    schedule: ScheduleEngine
    verification: VerificationEngine
    collection: CollectionEngine
    roster: RosterService

    def close(self) -> None:
        self.ledger.close()
        self.store.close()


def build_services(
    settings: Settings,
    *,
    store: HouseholdStore | None = None,
    ledger: CreditLedger | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> Services:
    store = store if store is not None else build_store(settings)
    ledger = ledger if ledger is not None else build_ledger(settings)
    schedule = ScheduleEngine(store, clock=clock)
    return Services(
        store=store,
        ledger=ledger,
        households=HouseholdService(store, clock=clock),
        schedule=schedule,
        verification=VerificationEngine(store, clock=clock),
        collection=CollectionEngine(store, ledger, schedule=schedule, clock=clock),
        roster=RosterService(store, timezone=settings.app.timezone, clock=clock),
    )
