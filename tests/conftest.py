from __future__ import annotations
import itertools
from datetime import datetime, timezone

import pytest

from models import Member
from service import SettlementService
from store import CollectingEventSink, InMemoryLedgerStore, InMemoryMemberRegistry

TRIP = "trip-1"
CLOCK = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def members():
    return [Member("A", "Alice"), Member("B", "Bob"), Member("C", "Carol")]


@pytest.fixture
def store():
    return InMemoryLedgerStore()


@pytest.fixture
def registry(members):
    return InMemoryMemberRegistry({TRIP: members})


@pytest.fixture
def sink():
    return CollectingEventSink()


@pytest.fixture
def service(store, registry, sink):
    ids = (f"e{i}" for i in itertools.count(1))
    return SettlementService(store, registry, sink, id_factory=lambda: next(ids), clock=lambda: CLOCK)
