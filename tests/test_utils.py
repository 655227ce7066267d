from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
import os

import pytest

from errors import InvalidAmount
from utils import app_dir, parse_date, parse_datetime, safe_decimal, to_money


def test_to_money_quantizes_half_up():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(0.1 + 0.2) == Decimal("0.30")
    assert to_money(7) == Decimal("7.00")


@pytest.mark.parametrize("bad", ["", "ten", None, float("nan"), "Infinity", False, [1]])
def test_to_money_rejects_non_numbers(bad):
    with pytest.raises(InvalidAmount):
        to_money(bad)


def test_safe_decimal_default():
    assert safe_decimal("x", Decimal(0)) == Decimal(0)
    assert safe_decimal(" 2.5 ") == Decimal("2.5")


def test_parse_dates():
    assert parse_date(" 2024-05-01 ") == date(2024, 5, 1)
    assert parse_datetime("2024-05-01") == datetime(2024, 5, 1)
    assert parse_datetime("2024-05-01T10:30:00+00:00").hour == 10


def test_app_dir_env_override(tmp_path, monkeypatch):
    target = tmp_path / "data"
    monkeypatch.setenv("SPLIT_LEDGER_HOME", str(target))
    assert app_dir() == str(target)
    assert os.path.isdir(target)
