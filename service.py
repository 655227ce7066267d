"""
Settlement service: the entry point callers use to add, edit and delete
expenses and to ask a trip who owes whom.

The service owns no state. Expenses live in the injected ledger store, members
come from the member registry, and change notifications are handed to the
event sink as plain-dict payloads:

    {"action": "add",    "expense": {...}}
    {"action": "edit",   "expense": {...}}
    {"action": "delete", "id": "<expense id>"}

Splits are computed before anything is written, so a rejected expense never
leaves a trace in the store.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from computations import compute_splits, compute_summary, compute_transfers, parse_split_type
from config import expense_to_dict
from errors import (
    ExpenseNotFound,
    InvalidExpense,
    InvalidSplitInput,
    MemberNotFound,
    Unauthorized,
)
from models import Balance, Expense, Member, SettlementSummary, SplitType
from store import EventSink, LedgerStore, MemberRegistry
from utils import to_money, utc_now

logger = logging.getLogger(__name__)

SplitInput = Union[Sequence[str], Mapping[str, object]]


def _unpack_split_input(split_input: Optional[SplitInput]) -> Tuple[List[str], Optional[Dict[str, object]]]:
    """Member ids in order, plus the per-member values when a mapping is given"""
    if split_input is None:
        return [], None
    if isinstance(split_input, (str, bytes)):
        raise InvalidSplitInput("Split input must be a list of member ids or a mapping of member id to value")
    if isinstance(split_input, Mapping):
        return [str(k) for k in split_input], {str(k): v for k, v in split_input.items()}
    return [str(m) for m in split_input], None


def _derive_split_input(expense: Expense, split_type: SplitType) -> SplitInput:
    """Rebuild a split input from an existing expense, for edits that keep the split"""
    if split_type is SplitType.EQUAL:
        return [s.member_id for s in expense.splits]
    if split_type is SplitType.CUSTOM:
        return {s.member_id: s.share_amount for s in expense.splits}
    return {s.member_id: s.share_amount * 100 / expense.amount for s in expense.splits}


class SettlementService:
    def __init__(
        self,
        ledger_store: LedgerStore,
        member_registry: MemberRegistry,
        event_sink: EventSink,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = ledger_store
        self._registry = member_registry
        self._events = event_sink
        self._new_id = id_factory
        self._clock = clock

    # ---------- Membership ----------
    def _members_by_id(self, trip_id: str) -> Dict[str, Member]:
        return {m.id: m for m in self._registry.members_of(trip_id)}

    def _check_members(self, trip_id: str, members: Dict[str, Member], payer_id: str, participants: List[str]):
        if payer_id not in members:
            raise MemberNotFound(f"Payer {payer_id} is not a member of trip {trip_id}")
        missing = [m for m in participants if m not in members]
        if missing:
            raise MemberNotFound(f"Not members of trip {trip_id}: {', '.join(missing)}")

    def ensure_member(self, trip_id: str, member_id: str) -> Member:
        """Raise Unauthorized unless member_id belongs to trip_id"""
        member = self._members_by_id(trip_id).get(member_id)
        if member is None:
            raise Unauthorized(f"Member {member_id} is not part of trip {trip_id}")
        return member

    # ---------- Expenses ----------
    def create_expense(
        self,
        trip_id: str,
        title: str,
        amount,
        split_type: Union[SplitType, str],
        split_input: SplitInput,
        payer_id: str,
        notes: str = "",
        created_at: Optional[datetime] = None,
    ) -> Expense:
        members = self._members_by_id(trip_id)
        title = (title or "").strip()
        if not title:
            raise InvalidExpense("Expense title is required")
        participants, extra = _unpack_split_input(split_input)
        self._check_members(trip_id, members, payer_id, participants)

        expense_id = self._new_id()
        splits = compute_splits(amount, split_type, participants, extra, expense_id=expense_id)
        expense = Expense(
            id=expense_id,
            trip_id=trip_id,
            title=title,
            amount=to_money(amount),
            payer_id=payer_id,
            split_type=parse_split_type(split_type),
            splits=tuple(splits),
            created_at=created_at or self._clock(),
            notes=notes,
        )
        self._store.append(expense)
        logger.info("added expense %s to trip %s: %s paid by %s, %s split among %d",
                    expense.id, trip_id, expense.amount, payer_id, expense.split_type.value, len(splits))
        self._events.publish(trip_id, {"action": "add", "expense": expense_to_dict(expense)})
        return expense

    def edit_expense(
        self,
        expense_id: str,
        *,
        title: Optional[str] = None,
        amount=None,
        split_type: Optional[Union[SplitType, str]] = None,
        split_input: Optional[SplitInput] = None,
        payer_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Expense:
        """
        Replace an expense with an edited copy. Omitted fields keep their
        values; without split_input the current participants are kept (custom
        shares as-is, percentages as each share's fraction of the old amount).
        """
        current = self._store.get(expense_id)
        if current is None:
            raise ExpenseNotFound(f"Expense {expense_id} not found")
        members = self._members_by_id(current.trip_id)

        new_title = current.title if title is None else title.strip()
        if not new_title:
            raise InvalidExpense("Expense title is required")
        new_type = current.split_type if split_type is None else parse_split_type(split_type)
        new_amount = current.amount if amount is None else amount
        new_payer = current.payer_id if payer_id is None else payer_id
        if split_input is None:
            split_input = _derive_split_input(current, new_type)
        participants, extra = _unpack_split_input(split_input)
        self._check_members(current.trip_id, members, new_payer, participants)

        splits = compute_splits(new_amount, new_type, participants, extra, expense_id=expense_id)
        updated = replace(
            current,
            title=new_title,
            amount=to_money(new_amount),
            payer_id=new_payer,
            split_type=new_type,
            splits=tuple(splits),
            notes=current.notes if notes is None else notes,
        )
        self._store.replace(updated)
        logger.info("edited expense %s in trip %s: %s paid by %s", expense_id, updated.trip_id,
                    updated.amount, new_payer)
        self._events.publish(updated.trip_id, {"action": "edit", "expense": expense_to_dict(updated)})
        return updated

    def delete_expense(self, expense_id: str) -> Expense:
        removed = self._store.remove(expense_id)
        logger.info("deleted expense %s from trip %s", expense_id, removed.trip_id)
        self._events.publish(removed.trip_id, {"action": "delete", "id": expense_id})
        return removed

    def list_expenses(self, trip_id: str) -> List[Expense]:
        self._registry.members_of(trip_id)
        return self._store.list(trip_id)

    # ---------- Settlement ----------
    def get_settlement_summary(self, trip_id: str) -> SettlementSummary:
        """
        Balances and suggested transfers for the trip, recomputed from the
        current ledger snapshot with member display names filled in.
        """
        members = self._registry.members_of(trip_id)
        expenses = self._store.list(trip_id)
        names = {m.id: m.name for m in members}

        stats = compute_summary(members, expenses)
        balances = tuple(
            Balance(
                member_id=mid,
                net_amount=s["net"],
                name=names.get(mid, mid),
                paid=s["paid"],
                consumed=s["consumed"],
            ) for mid, s in stats.items()
        )
        transfers = tuple(
            replace(t, from_name=names.get(t.from_member_id, t.from_member_id),
                    to_name=names.get(t.to_member_id, t.to_member_id))
            for t in compute_transfers({b.member_id: b.net_amount for b in balances})
        )
        total = sum((e.amount for e in expenses), Decimal("0.00"))
        logger.debug("summary for trip %s: %d expense(s), %d transfer(s)", trip_id, len(expenses), len(transfers))
        return SettlementSummary(trip_id=trip_id, balances=balances, transfers=transfers, total_spent=total)
