"""Test configuration and fixtures.

StepClock: deterministic, strictly increasing clock for ledgers
Fixtures: pytest fixtures for unit and scenario tests
"""
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from spaceproof.anchor.hash import Hasher
from spaceproof.ledger.chain import ReceiptLedger


@dataclass
class StepClock:
    """Clock that advances by a fixed step on every read."""
    start: datetime = field(default_factory=lambda: datetime(2025, 1, 1, tzinfo=timezone.utc))
    step: timedelta = timedelta(milliseconds=1)
    reads: int = 0

    def __call__(self) -> datetime:
        moment = self.start + self.step * self.reads
        self.reads += 1
        return moment


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def hasher() -> Hasher:
    return Hasher()


@pytest.fixture
def ledger(clock: StepClock) -> ReceiptLedger:
    """Fresh ledger with a deterministic clock."""
    return ReceiptLedger(tenant_id="test_tenant", clock=clock)


@pytest.fixture
def populated_ledger(ledger: ReceiptLedger) -> ReceiptLedger:
    """Ledger holding five receipts of mixed types."""
    for i, rtype in enumerate(["verification", "mode_switch", "verification", "location_proof", "verification"]):
        ledger.append(rtype, {"seq": i, "detail": {"value": i * 0.5}})
    return ledger


@pytest.fixture
def rng() -> random.Random:
    """Seeded random for deterministic tests."""
    return random.Random(42)
