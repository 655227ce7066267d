"""
Error taxonomy for SplitLedger.

Every failure is a local validation failure: nothing here is retryable. Callers
can rely on ``kind`` to map an error to a response and on ``message`` for a
human readable explanation.
"""
from __future__ import annotations
from typing import Dict


class SplitLedgerError(Exception):
    """Base class of all engine errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.kind, "message": self.message}


class InvalidAmount(SplitLedgerError):
    """Amount is not a positive finite number"""


class InvalidSplitType(SplitLedgerError):
    """Split type is not one of equal, percentage, custom"""


class NoParticipants(SplitLedgerError):
    """An expense must be split among at least one member"""


class SplitSumMismatch(SplitLedgerError):
    """Percentages or custom shares do not add up"""


class InvalidSplitInput(SplitLedgerError):
    """Split input is malformed (duplicate, missing or negative values)"""


class InvalidExpense(SplitLedgerError):
    """Expense fields other than amount and splits are invalid"""


class MemberNotFound(SplitLedgerError):
    pass


class TripNotFound(SplitLedgerError):
    pass


class ExpenseNotFound(SplitLedgerError):
    pass


class Unauthorized(SplitLedgerError):
    """Acting member does not belong to the trip"""
