from datetime import date

import pytest

from quick_entry.domain.amounts import extract_amount
from quick_entry.domain.dates import clamp_to_today, resolve_date

TODAY = date(2024, 3, 10)


@pytest.mark.parametrize("text,expected", [
    ("2024/3/5 lunch 180", 180.0),
    ("lunch 180 on 2024-03-05", 180.0),
    ("3/5 lunch 180", 180.0),
    ("coffee 65.5", 65.5),
    ("coffee 180.", 180.0),
    ("午餐 １８０", 180.0),
    ("rent 12,000", 12000.0),
    ("lunch 180, cash", 180.0),
])
def test_extract_amount(text: str, expected: float) -> None:
    assert extract_amount(text) == expected


def test_extract_amount_missing() -> None:
    assert extract_amount("lunch with friends") is None
    assert extract_amount("2024/3/5") is None
    assert extract_amount("") is None


@pytest.mark.parametrize("text,expected", [
    ("lunch yesterday 120", "2024-03-09"),
    ("taxi day before yesterday", "2024-03-08"),
    ("前天 午餐 100", "2024-03-08"),
    ("昨天 計程車 250", "2024-03-09"),
    ("gift 2023/12/25 500", "2023-12-25"),
    ("rent 2024-1-5 9000", "2024-01-05"),
    ("3/5 lunch 180", "2024-03-05"),
    ("lunch 180", "2024-03-10"),
    ("lunch 180 today", "2024-03-10"),
])
def test_resolve_date(text: str, expected: str) -> None:
    assert resolve_date(text, TODAY) == expected


def test_relative_keyword_wins_over_explicit_date() -> None:
    assert resolve_date("yesterday 2024/1/5 lunch", TODAY) == "2024-03-09"


def test_impossible_date_falls_back_to_today() -> None:
    assert resolve_date("2024/2/30 lunch 80", TODAY) == "2024-03-10"


def test_clamp_to_today() -> None:
    assert clamp_to_today("2024-12-01", TODAY) == "2024-03-10"
    assert clamp_to_today("2024-03-01", TODAY) == "2024-03-01"
    assert clamp_to_today("not a date", TODAY) == "2024-03-10"
    assert clamp_to_today(None, TODAY) == "2024-03-10"
