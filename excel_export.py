"""
Excel export functionality for SplitLedger
"""
from __future__ import annotations
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import Ledger
from computations import (
    filter_expenses_by_date,
    compute_summary,
    compute_transfers
)


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _money_format(ws, first_col, last_col, first_row=2):
    for r in range(first_row, ws.max_row + 1):
        for c in range(first_col, last_col + 1):
            ws.cell(r, c).number_format = "0.00"


def export_excel(
    ledger: Ledger,
    filepath: str,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> None:
    """
    Export a trip's settlement report to an Excel file with sheets:
    - Expenses: one row per expense with each member's share
    - Summary: paid, consumed and net per member
    - Transfers: suggested payments to settle up
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    members = ledger.members
    names = {m.id: m.name for m in members}
    exps = filter_expenses_by_date(ledger.expenses, start, end)
    exps.sort(key=lambda e: (e.created_at, e.title))

    # Expenses sheet
    ws = wb.create_sheet("Expenses")
    headers = ["date", "title", "paid by", "split", "amount"] + [m.name for m in members]
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in exps:
        shares = {s.member_id: s.share_amount for s in e.splits}
        row = [
            e.created_at.date().isoformat(),
            e.title,
            names.get(e.payer_id, e.payer_id),
            e.split_type.value,
            float(e.amount),
        ]
        row += [float(shares[m.id]) if m.id in shares else None for m in members]
        ws.append(row)

    # Footer totals, as formulas for transparency
    if exps:
        last_data_row = ws.max_row
        ws.append(["TOTALS"] + [""] * (len(headers) - 1))
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        for col in range(5, len(headers) + 1):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{last_data_row})"
    _money_format(ws, 5, len(headers))
    _autosize_columns(ws)

    # Summary sheet
    ws = wb.create_sheet("Summary")
    summary = compute_summary(members, exps)
    ws.append(["Member", "Paid", "Consumed", "Net (Paid-Consumed)"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for mid, s in summary.items():
        ws.append([names.get(mid, mid), float(s["paid"]), float(s["consumed"]), float(s["net"])])
    _money_format(ws, 2, 4)
    _autosize_columns(ws)

    # Transfers sheet
    ws = wb.create_sheet("Transfers")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    transfers = compute_transfers({mid: s["net"] for mid, s in summary.items()})
    for t in transfers:
        ws.append([names.get(t.from_member_id, t.from_member_id), names.get(t.to_member_id, t.to_member_id), float(t.amount)])
    _money_format(ws, 3, 3)
    _autosize_columns(ws)

    wb.save(filepath)
