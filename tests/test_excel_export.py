from __future__ import annotations
from datetime import date, datetime, timezone

from openpyxl import load_workbook

from excel_export import export_excel
from models import Member
from service import SettlementService
from store import CollectingEventSink, InMemoryLedgerStore, InMemoryMemberRegistry, ledger_from_stores


def build_ledger():
    registry = InMemoryMemberRegistry({"t1": [Member("A", "Alice"), Member("B", "Bob"), Member("C", "Carol")]})
    store = InMemoryLedgerStore()
    service = SettlementService(store, registry, CollectingEventSink())
    service.create_expense("t1", "Dinner", 90, "equal", ["A", "B", "C"], payer_id="A",
                           created_at=datetime(2024, 5, 1, 20, tzinfo=timezone.utc))
    service.create_expense("t1", "Taxi", 12, "custom", {"B": 12}, payer_id="C",
                           created_at=datetime(2024, 5, 3, 9, tzinfo=timezone.utc))
    return ledger_from_stores("t1", store, registry)


def test_export_excel_sheets(tmp_path):
    path = tmp_path / "report.xlsx"
    export_excel(build_ledger(), str(path))

    wb = load_workbook(path)
    assert wb.sheetnames == ["Expenses", "Summary", "Transfers"]

    ws = wb["Expenses"]
    assert [c.value for c in ws[1]] == ["date", "title", "paid by", "split", "amount", "Alice", "Bob", "Carol"]
    assert [c.value for c in ws[2]][:5] == ["2024-05-01", "Dinner", "Alice", "equal", 90]
    assert ws.cell(4, 1).value == "TOTALS"
    assert ws.cell(4, 5).value == "=SUM(E2:E3)"

    summary = {row[0]: row[1:] for row in wb["Summary"].iter_rows(min_row=2, values_only=True)}
    assert summary["Bob"] == (0, 42, -42)
    assert summary["Carol"] == (12, 30, -18)

    transfers = list(wb["Transfers"].iter_rows(min_row=2, values_only=True))
    assert transfers == [("Bob", "Alice", 42), ("Carol", "Alice", 18)]


def test_export_excel_date_range(tmp_path):
    path = tmp_path / "report.xlsx"
    export_excel(build_ledger(), str(path), start=date(2024, 5, 2))

    wb = load_workbook(path)
    ws = wb["Expenses"]
    assert ws.cell(2, 2).value == "Taxi"
    assert ws.cell(3, 1).value == "TOTALS"
    transfers = list(wb["Transfers"].iter_rows(min_row=2, values_only=True))
    assert transfers == [("Bob", "Carol", 12)]
