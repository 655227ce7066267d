"""
Collaborator seams for SplitLedger: ledger store, member registry, event sink.

The settlement service only talks to the protocols below. The in-memory
implementations back tests and file-based tooling; a real deployment plugs in
its own database and notification transport.
"""
from __future__ import annotations
import threading
from typing import Any, Dict, List, Optional, Protocol, Tuple

from errors import ExpenseNotFound, TripNotFound
from models import Expense, Ledger, Member


class LedgerStore(Protocol):
    def append(self, expense: Expense) -> None: ...

    def replace(self, expense: Expense) -> None: ...

    def get(self, expense_id: str) -> Optional[Expense]: ...

    def list(self, trip_id: str) -> List[Expense]: ...

    def remove(self, expense_id: str) -> Expense: ...


class MemberRegistry(Protocol):
    def members_of(self, trip_id: str) -> List[Member]: ...


class EventSink(Protocol):
    def publish(self, trip_id: str, payload: Dict[str, Any]) -> None: ...


class InMemoryLedgerStore:
    """
    Expenses per trip, in insertion order.
    Writes are serialized by a lock; list() hands out a snapshot so readers
    never observe a half-applied write.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._by_trip: Dict[str, List[Expense]] = {}
        self._index: Dict[str, str] = {}  # expense id -> trip id

    def append(self, expense: Expense) -> None:
        with self._lock:
            if expense.id in self._index:
                raise ValueError(f"Expense {expense.id} already exists")
            self._by_trip.setdefault(expense.trip_id, []).append(expense)
            self._index[expense.id] = expense.trip_id

    def replace(self, expense: Expense) -> None:
        with self._lock:
            rows = self._by_trip.get(self._index.get(expense.id, ""), [])
            for i, e in enumerate(rows):
                if e.id == expense.id:
                    rows[i] = expense
                    return
        raise ExpenseNotFound(f"Expense {expense.id} not found")

    def get(self, expense_id: str) -> Optional[Expense]:
        with self._lock:
            for e in self._by_trip.get(self._index.get(expense_id, ""), []):
                if e.id == expense_id:
                    return e
        return None

    def list(self, trip_id: str) -> List[Expense]:
        with self._lock:
            return list(self._by_trip.get(trip_id, ()))

    def remove(self, expense_id: str) -> Expense:
        with self._lock:
            trip_id = self._index.pop(expense_id, None)
            rows = self._by_trip.get(trip_id, []) if trip_id is not None else []
            for i, e in enumerate(rows):
                if e.id == expense_id:
                    return rows.pop(i)
        raise ExpenseNotFound(f"Expense {expense_id} not found")


class InMemoryMemberRegistry:
    """Trip id -> members, in the order they joined"""

    def __init__(self, trips: Optional[Dict[str, List[Member]]] = None):
        self._trips: Dict[str, List[Member]] = {k: list(v) for k, v in (trips or {}).items()}

    def add_trip(self, trip_id: str, members: List[Member]) -> None:
        self._trips[trip_id] = list(members)

    def members_of(self, trip_id: str) -> List[Member]:
        try:
            return list(self._trips[trip_id])
        except KeyError:
            raise TripNotFound(f"Trip {trip_id} not found") from None


class CollectingEventSink:
    """Keeps every published (trip_id, payload) pair, oldest first"""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def publish(self, trip_id: str, payload: Dict[str, Any]) -> None:
        self.events.append((trip_id, payload))

    def for_trip(self, trip_id: str) -> List[Dict[str, Any]]:
        return [p for t, p in self.events if t == trip_id]


def stores_from_ledger(ledger: Ledger) -> Tuple[InMemoryLedgerStore, InMemoryMemberRegistry]:
    """Seed an in-memory store and registry from a saved ledger"""
    store = InMemoryLedgerStore()
    for e in ledger.expenses:
        store.append(e)
    registry = InMemoryMemberRegistry({ledger.trip_id: ledger.members})
    return store, registry


def ledger_from_stores(trip_id: str, store: LedgerStore, registry: MemberRegistry) -> Ledger:
    """Snapshot one trip back into a Ledger for saving or export"""
    return Ledger(trip_id=trip_id, members=registry.members_of(trip_id), expenses=store.list(trip_id))
