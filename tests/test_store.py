from __future__ import annotations
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from errors import ExpenseNotFound, TripNotFound
from models import Expense, Ledger, Member, Split, SplitType
from store import (
    CollectingEventSink,
    InMemoryLedgerStore,
    InMemoryMemberRegistry,
    ledger_from_stores,
    stores_from_ledger,
)


def expense(expense_id, trip_id="t1", amount="10.00"):
    return Expense(
        id=expense_id,
        trip_id=trip_id,
        title="Coffee",
        amount=Decimal(amount),
        payer_id="A",
        split_type=SplitType.EQUAL,
        splits=(Split(expense_id, "A", Decimal(amount)),),
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


def test_append_list_keeps_order_per_trip():
    store = InMemoryLedgerStore()
    store.append(expense("e1"))
    store.append(expense("e2", trip_id="t2"))
    store.append(expense("e3"))
    assert [e.id for e in store.list("t1")] == ["e1", "e3"]
    assert [e.id for e in store.list("t2")] == ["e2"]
    assert store.list("unknown") == []


def test_list_is_a_snapshot():
    store = InMemoryLedgerStore()
    store.append(expense("e1"))
    snapshot = store.list("t1")
    store.append(expense("e2"))
    assert [e.id for e in snapshot] == ["e1"]


def test_duplicate_append_rejected():
    store = InMemoryLedgerStore()
    store.append(expense("e1"))
    with pytest.raises(ValueError):
        store.append(expense("e1"))


def test_replace_get_remove():
    store = InMemoryLedgerStore()
    store.append(expense("e1"))
    store.replace(expense("e1", amount="12.00"))
    assert store.get("e1").amount == Decimal("12.00")

    removed = store.remove("e1")
    assert removed.amount == Decimal("12.00")
    assert store.get("e1") is None
    with pytest.raises(ExpenseNotFound):
        store.remove("e1")
    with pytest.raises(ExpenseNotFound):
        store.replace(expense("e1"))


def test_registry_unknown_trip():
    registry = InMemoryMemberRegistry()
    with pytest.raises(TripNotFound):
        registry.members_of("t1")
    registry.add_trip("t1", [Member("A", "Alice")])
    assert registry.members_of("t1") == [Member("A", "Alice")]


def test_collecting_sink_groups_by_trip():
    sink = CollectingEventSink()
    sink.publish("t1", {"action": "delete", "id": "e1"})
    sink.publish("t2", {"action": "delete", "id": "e2"})
    assert sink.for_trip("t2") == [{"action": "delete", "id": "e2"}]


def test_stores_from_ledger_and_back():
    ledger = Ledger(trip_id="t1", members=[Member("A", "Alice")], expenses=[expense("e1"), expense("e2")])
    store, registry = stores_from_ledger(ledger)
    assert ledger_from_stores("t1", store, registry) == ledger
