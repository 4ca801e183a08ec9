"""
Shared fixtures for the brokerage test suite.

Every fixture builds fresh, isolated state: an in-memory store, a ledger
over it and an order lifecycle driven by a deterministic clock.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.domain.brokerage.ledger import Ledger
from app.domain.brokerage.order_lifecycle import MonotonicClock, OrderLifecycle
from app.infrastructure.brokerage.memory_store import InMemoryStore

START = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class SteppingSource:
    """Clock source advancing one second per reading."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        moment = self.current
        self.current += timedelta(seconds=1)
        return moment


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def ledger(store: InMemoryStore) -> Ledger:
    return Ledger(store.unit_of_work)


@pytest.fixture
def lifecycle(ledger: Ledger) -> OrderLifecycle:
    return OrderLifecycle(ledger, clock=MonotonicClock(SteppingSource()))


@pytest.fixture
def funded_ledger(ledger: Ledger) -> Ledger:
    """CUST001 holds 10000 TRY and 50 AAPL, CUST002 holds 15000 TRY."""
    ledger.increase("CUST001", "TRY", Decimal("10000"))
    ledger.increase("CUST001", "AAPL", Decimal("50"))
    ledger.increase("CUST002", "TRY", Decimal("15000"))
    return ledger
