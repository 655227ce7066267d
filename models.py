"""
Data models for SplitLedger
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Tuple


class SplitType(Enum):
    """How an expense amount is divided among participants"""
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Member:
    """Trip member as known to the member registry"""
    id: str
    name: str


@dataclass(frozen=True)
class Split:
    """One participant's share of a single expense"""
    expense_id: str
    member_id: str
    share_amount: Decimal


@dataclass(frozen=True)
class Expense:
    """Single expense logged against a trip"""
    id: str
    trip_id: str
    title: str
    amount: Decimal  # positive, quantized to the cent
    payer_id: str
    split_type: SplitType
    splits: Tuple[Split, ...]
    created_at: datetime
    notes: str = ""


@dataclass(frozen=True)
class Balance:
    """Net position of a member: positive is owed money, negative owes money"""
    member_id: str
    net_amount: Decimal
    name: str = ""
    paid: Decimal = Decimal("0.00")
    consumed: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class Transfer:
    """Suggested payment from a debtor to a creditor"""
    from_member_id: str
    to_member_id: str
    amount: Decimal
    from_name: str = ""
    to_name: str = ""


@dataclass(frozen=True)
class SettlementSummary:
    """Balances and transfers computed from a trip's current ledger"""
    trip_id: str
    balances: Tuple[Balance, ...]
    transfers: Tuple[Transfer, ...]
    total_spent: Decimal = Decimal("0.00")

    def totals_for(self, member_id: str) -> Tuple[Decimal, Decimal]:
        """Return (to_receive, to_pay) for one member across the transfers"""
        to_receive = sum((t.amount for t in self.transfers if t.to_member_id == member_id), Decimal("0.00"))
        to_pay = sum((t.amount for t in self.transfers if t.from_member_id == member_id), Decimal("0.00"))
        return to_receive, to_pay


@dataclass
class Ledger:
    """Serializable snapshot of one trip: members plus all its expenses"""
    trip_id: str
    members: List[Member]
    expenses: List[Expense] = field(default_factory=list)
    version: int = 1
