"""
Business logic and computations for SplitLedger
"""
from __future__ import annotations
import heapq
import logging
from datetime import date
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from errors import (
    InvalidAmount,
    InvalidSplitInput,
    InvalidSplitType,
    NoParticipants,
    SplitSumMismatch,
)
from models import Expense, Member, Split, SplitType, Transfer
from utils import CENT, safe_decimal, to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
HUNDRED = Decimal(100)
PERCENT_TOLERANCE = Decimal("0.5")  # percentage points
SETTLED_EPSILON = CENT


def parse_split_type(value: Union[SplitType, str]) -> SplitType:
    """Accept a SplitType or its case-insensitive string value"""
    if isinstance(value, SplitType):
        return value
    if isinstance(value, str):
        try:
            return SplitType(value.strip().lower())
        except ValueError:
            pass
    raise InvalidSplitType(f"Unknown split type {value!r}; expected equal, percentage or custom")


def _read_values(participants: Sequence[str], extra: Optional[Mapping[str, object]], label: str) -> List[Decimal]:
    """Look up one non-negative number per participant, in participant order"""
    if not extra:
        raise InvalidSplitInput(f"A {label} is required for every participant")
    unknown = [k for k in extra if k not in participants]
    if unknown:
        raise InvalidSplitInput(f"{label.capitalize()} given for non-participant(s): {', '.join(map(str, unknown))}")
    values = []
    for m in participants:
        if m not in extra:
            raise InvalidSplitInput(f"No {label} given for member {m}")
        v = safe_decimal(extra[m])
        if v is None:
            raise InvalidSplitInput(f"{label.capitalize()} for member {m} is not a number: {extra[m]!r}")
        if v < 0:
            raise InvalidSplitInput(f"{label.capitalize()} for member {m} is negative")
        values.append(v)
    return values


def _absorb_remainder(amount: Decimal, raw: List[Decimal], rounding: str) -> List[Decimal]:
    """
    Round every raw share but the last to the cent; the last participant
    takes whatever is left so the shares add up to amount exactly.
    """
    head = [r.quantize(CENT, rounding=rounding) for r in raw[:-1]]
    last = (amount - sum(head, ZERO)).quantize(CENT)
    return head + [last]


def compute_splits(
    amount,
    split_type: Union[SplitType, str],
    participants: Iterable[str],
    extra: Optional[Mapping[str, object]] = None,
    expense_id: str = "",
) -> List[Split]:
    """
    Allocate amount across participants.

    equal:      amount / n, truncated to the cent, last participant absorbs the remainder
    percentage: extra maps member -> percent; percents must sum to 100 +/- 0.5
    custom:     extra maps member -> share; shares must sum to amount +/- 0.01

    Shares always add up to the quantized amount exactly. Participant order is
    the order supplied and decides who absorbs the remainder.
    """
    amt = to_money(amount)
    if amt <= 0:
        raise InvalidAmount(f"Amount must be positive, got {amt}")
    st = parse_split_type(split_type)

    people = list(participants)
    if not people:
        raise NoParticipants("An expense needs at least one participant")
    if len(set(people)) != len(people):
        raise InvalidSplitInput("A participant is listed more than once")

    if st is SplitType.EQUAL:
        each = amt / len(people)
        shares = _absorb_remainder(amt, [each] * len(people), ROUND_DOWN)
    elif st is SplitType.PERCENTAGE:
        percents = _read_values(people, extra, "percent")
        total = sum(percents, Decimal(0))
        if abs(total - HUNDRED) > PERCENT_TOLERANCE:
            raise SplitSumMismatch(f"Percentages add up to {total}, expected 100")
        shares = _absorb_remainder(amt, [amt * p / HUNDRED for p in percents], ROUND_DOWN)
    else:
        values = _read_values(people, extra, "share")
        total = sum(values, Decimal(0))
        if abs(total - amt) > CENT:
            raise SplitSumMismatch(f"Shares add up to {total}, expected {amt}")
        shares = _absorb_remainder(amt, values, ROUND_HALF_UP)

    if shares[-1] < 0:
        raise SplitSumMismatch(f"Shares exceed the amount {amt}")

    logger.debug("split %s %s among %d participant(s)", amt, st.value, len(people))
    return [Split(expense_id=expense_id, member_id=m, share_amount=s) for m, s in zip(people, shares)]


def filter_expenses_by_date(
    expenses: Iterable[Expense],
    start: Optional[date],
    end: Optional[date]
) -> List[Expense]:
    """Filter expenses by creation date range (inclusive)"""
    out = []
    for e in expenses:
        ed = e.created_at.date()
        if start and ed < start:
            continue
        if end and ed > end:
            continue
        out.append(e)
    return out


def aggregate_balances(members: Iterable[Member], expenses: Iterable[Expense]) -> Dict[str, Decimal]:
    """
    Fold expenses into one net balance per member.
    Positive -> should receive; negative -> should pay. Every known member is
    present, even with no expenses.
    """
    balances = {m.id: ZERO for m in members}
    for e in expenses:
        balances[e.payer_id] = balances.get(e.payer_id, ZERO) + e.amount
        for s in e.splits:
            balances[s.member_id] = balances.get(s.member_id, ZERO) - s.share_amount
    return balances


def compute_summary(members: Iterable[Member], expenses: Iterable[Expense]) -> Dict[str, dict]:
    """
    Compute summary statistics for each member.
    Returns dict mapping member id -> {paid, consumed, net}
    """
    members = list(members)
    expenses = list(expenses)
    paid = {m.id: ZERO for m in members}
    consumed = {m.id: ZERO for m in members}

    for e in expenses:
        paid[e.payer_id] = paid.get(e.payer_id, ZERO) + e.amount
        consumed.setdefault(e.payer_id, ZERO)
        for s in e.splits:
            consumed[s.member_id] = consumed.get(s.member_id, ZERO) + s.share_amount
            paid.setdefault(s.member_id, ZERO)

    net = aggregate_balances(members, expenses)
    return {
        mid: {
            "paid": paid[mid],
            "consumed": consumed[mid],
            "net": net[mid],
        } for mid in net
    }


def compute_transfers(balances: Mapping[str, object]) -> List[Transfer]:
    """
    Compute transfers to settle debts.
    Greedy settlement: the largest debtor pays the largest creditor, repeated
    until no debt or no credit of a cent or more remains.
    Ties go to the lowest member id. Produces at most N-1 transfers for N
    members with a nonzero balance, not necessarily the global minimum.
    """
    creditors = []
    debtors = []
    for member_id, value in balances.items():
        amt = to_money(value)
        if amt >= SETTLED_EPSILON:
            creditors.append((-amt, member_id))
        elif amt <= -SETTLED_EPSILON:
            debtors.append((amt, member_id))
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    # heap entries are whole cents, so a remaining top is never below one cent
    transfers = []
    while creditors and debtors:
        neg_credit, creditor = heapq.heappop(creditors)
        neg_debt, debtor = heapq.heappop(debtors)
        credit, debt = -neg_credit, -neg_debt
        x = min(credit, debt)
        transfers.append(Transfer(from_member_id=debtor, to_member_id=creditor, amount=x))
        credit -= x
        debt -= x
        if credit > 0:
            heapq.heappush(creditors, (-credit, creditor))
        if debt > 0:
            heapq.heappush(debtors, (-debt, debtor))

    logger.debug("simplified %d balance(s) into %d transfer(s)", len(balances), len(transfers))
    return transfers
