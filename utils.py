"""
Utility functions for SplitLedger
"""
from __future__ import annotations
import os
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from errors import InvalidAmount

CENT = Decimal("0.01")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def parse_datetime(s: str) -> datetime:
    """Parse an ISO 8601 timestamp; bare dates become midnight"""
    s = s.strip()
    if len(s) == 10:
        return datetime.combine(parse_date(s), datetime.min.time())
    return datetime.fromisoformat(s)


def safe_decimal(x, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Convert to a finite Decimal, returning default when that is not possible"""
    if isinstance(x, bool):
        return default
    try:
        d = Decimal(str(x).strip()) if isinstance(x, (str, float)) else Decimal(x)
    except (InvalidOperation, TypeError, ValueError):
        return default
    if not d.is_finite():
        return default
    return d


def to_money(x) -> Decimal:
    """Convert a user-supplied amount to a Decimal quantized to the cent"""
    d = safe_decimal(x)
    if d is None:
        raise InvalidAmount(f"Amount {x!r} is not a finite number")
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(d: Decimal) -> str:
    return f"{d:.2f}"


def app_dir() -> str:
    """
    Get application data directory.
    $SPLIT_LEDGER_HOME wins when set, else ~/Library/Application Support/SplitLedger.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("SPLIT_LEDGER_HOME")
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "SplitLedger")
    os.makedirs(path, exist_ok=True)
    return path
