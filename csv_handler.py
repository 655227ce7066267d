"""
CSV export and import functionality for SplitLedger
"""
from __future__ import annotations
import csv
from decimal import Decimal
from typing import List

from models import Expense, Split, SplitType
from utils import format_money, parse_datetime

COLUMNS = ['id', 'trip_id', 'title', 'created_at', 'payer_id', 'split_type', 'amount', 'splits', 'notes']


def export_expenses_to_csv(expenses: List[Expense], filepath: str) -> None:
    """
    Export expenses list to CSV file
    CSV columns: id, trip_id, title, created_at, payer_id, split_type, amount, splits, notes
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(COLUMNS)

        for e in expenses:
            # member:share pairs, in split order
            splits_str = ';'.join([f"{s.member_id}:{format_money(s.share_amount)}" for s in e.splits])
            writer.writerow([
                e.id,
                e.trip_id,
                e.title,
                e.created_at.isoformat(),
                e.payer_id,
                e.split_type.value,
                format_money(e.amount),
                splits_str,
                e.notes
            ])


def import_expenses_from_csv(filepath: str) -> List[Expense]:
    """
    Import expenses list from CSV file
    Returns list of Expense objects
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            expense_id = row['id']
            splits = []
            if row['splits']:
                for pair in row['splits'].split(';'):
                    if ':' in pair:
                        k, v = pair.rsplit(':', 1)
                        splits.append(Split(expense_id=expense_id, member_id=k.strip(), share_amount=Decimal(v.strip())))

            expense = Expense(
                id=expense_id,
                trip_id=row['trip_id'],
                title=row['title'],
                amount=Decimal(row['amount']),
                payer_id=row['payer_id'],
                split_type=SplitType(row['split_type']),
                splits=tuple(splits),
                created_at=parse_datetime(row['created_at']),
                notes=row.get('notes') or ''
            )
            expenses.append(expense)

    return expenses
