from __future__ import annotations
import csv
from datetime import datetime, timezone

from csv_handler import COLUMNS, export_expenses_to_csv, import_expenses_from_csv
from models import Member
from service import SettlementService
from store import CollectingEventSink, InMemoryLedgerStore, InMemoryMemberRegistry


def test_export_then_import(tmp_path):
    registry = InMemoryMemberRegistry({"t1": [Member("A", "Alice"), Member("B", "Bob")]})
    service = SettlementService(InMemoryLedgerStore(), registry, CollectingEventSink(),
                                clock=lambda: datetime(2024, 6, 1, 8, tzinfo=timezone.utc))
    service.create_expense("t1", "Fuel, tolls", "50.01", "equal", ["A", "B"], payer_id="A", notes="day 1")
    service.create_expense("t1", "Ferry", "20", "custom", {"B": 5, "A": 15}, payer_id="B")
    expenses = service.list_expenses("t1")

    path = tmp_path / "expenses.csv"
    export_expenses_to_csv(expenses, str(path))

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0].keys()) == COLUMNS
    assert rows[0]["splits"] == "A:25.00;B:25.01"
    assert rows[1]["splits"] == "B:5.00;A:15.00"

    assert import_expenses_from_csv(str(path)) == expenses
