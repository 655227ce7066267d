"""
Configuration and data loading/saving for SplitLedger
"""
from __future__ import annotations
import json
import os
from decimal import Decimal
from typing import List

from models import Expense, Ledger, Member, Split, SplitType
from utils import app_dir, format_money, parse_datetime


def load_members(path: str) -> List[Member]:
    """Load member list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [Member(id=str(m["id"]), name=m["name"]) for m in data.get("members", [])]
    except FileNotFoundError:
        return []


def get_default_ledger(trip_id: str) -> Ledger:
    """Create an empty ledger for trip_id with members loaded from members.json"""
    members = load_members(os.path.join(app_dir(), "members.json"))
    return Ledger(trip_id=trip_id, members=members, expenses=[])


def expense_to_dict(e: Expense) -> dict:
    """Convert Expense to plain JSON types; money is kept as exact strings"""
    return {
        "id": e.id,
        "trip_id": e.trip_id,
        "title": e.title,
        "amount": format_money(e.amount),
        "payer_id": e.payer_id,
        "split_type": e.split_type.value,
        "splits": [
            {"member_id": s.member_id, "share_amount": format_money(s.share_amount)}
            for s in e.splits
        ],
        "created_at": e.created_at.isoformat(),
        "notes": e.notes,
    }


def dict_to_expense(d: dict) -> Expense:
    """Convert dictionary from JSON to Expense object"""
    expense_id = d["id"]
    splits = tuple(
        Split(expense_id=expense_id, member_id=str(s["member_id"]), share_amount=Decimal(str(s["share_amount"])))
        for s in d.get("splits", [])
    )
    return Expense(
        id=expense_id,
        trip_id=d["trip_id"],
        title=d.get("title", ""),
        amount=Decimal(str(d["amount"])),
        payer_id=str(d["payer_id"]),
        split_type=SplitType(d.get("split_type", "equal")),
        splits=splits,
        created_at=parse_datetime(d["created_at"]),
        notes=d.get("notes", ""),
    )


def ledger_to_dict(ledger: Ledger) -> dict:
    """Convert Ledger object to dictionary for JSON serialization"""
    return {
        "version": ledger.version,
        "trip_id": ledger.trip_id,
        "members": [{"id": m.id, "name": m.name} for m in ledger.members],
        "expenses": [expense_to_dict(e) for e in ledger.expenses],
    }


def dict_to_ledger(d: dict) -> Ledger:
    """Convert dictionary from JSON to Ledger object"""
    return Ledger(
        version=d.get("version", 1),
        trip_id=d["trip_id"],
        members=[Member(id=str(m["id"]), name=m["name"]) for m in d.get("members", [])],
        expenses=[dict_to_expense(e) for e in d.get("expenses", [])],
    )


def save_ledger(ledger: Ledger, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(ledger_to_dict(ledger), f, ensure_ascii=False, indent=2)


def load_ledger(path: str) -> Ledger:
    with open(path, "r", encoding="utf-8") as f:
        return dict_to_ledger(json.load(f))
