from datetime import date

import pytest

from quick_entry.models import Account, Category
from quick_entry.parsers.local import LocalParser

TODAY = date(2024, 3, 10)

CASH = Account(id="cash", name="Cash")
BANK = Account(id="bank", name="Bank Account")
ACCOUNTS = [CASH, BANK]
CATEGORIES = [
    Category(name="Food", type="expense"),
    Category(name="Transport", type="expense"),
    Category(name="Monthly Salary", type="income"),
]


@pytest.fixture
def parser() -> LocalParser:
    return LocalParser()


def test_simple_expense(parser: LocalParser) -> None:
    result = parser.parse("lunch 180 cash, today", ACCOUNTS, CATEGORIES, TODAY)

    assert result.amount == 180
    assert result.type == "expense"
    assert result.account_name == "Cash"
    assert result.to_account_name is None
    assert result.category_name == "Food"
    assert result.date == "2024-03-10"
    assert result.description == "lunch"
    assert result.source == "local"


def test_explicit_transfer(parser: LocalParser) -> None:
    result = parser.parse("transfer 500 from Cash to Bank Account", ACCOUNTS, CATEGORIES, TODAY)

    assert result.amount == 500
    assert result.type == "transfer"
    assert result.account_name == "Cash"
    assert result.to_account_name == "Bank Account"
    assert result.category_name == "Transfer"


def test_salary_income(parser: LocalParser) -> None:
    result = parser.parse("salary 50000", ACCOUNTS, CATEGORIES, TODAY)

    assert result.amount == 50000
    assert result.type == "income"
    assert result.account_name is None
    assert result.category_name == "Monthly Salary"


def test_chinese_expense(parser: LocalParser) -> None:
    cash = Account(id="c", name="現金")
    bank = Account(id="b", name="銀行帳戶")
    categories = [Category(name="餐飲", type="expense"), Category(name="交通", type="expense")]

    result = parser.parse("午餐 180 現金", [cash, bank], categories, TODAY)

    assert result.amount == 180
    assert result.type == "expense"
    assert result.account_name == "現金"
    assert result.category_name == "餐飲"
    assert result.description == "午餐"


def test_chinese_transfer(parser: LocalParser) -> None:
    cash = Account(id="c", name="現金")
    bank = Account(id="b", name="銀行帳戶")

    result = parser.parse("從現金轉到銀行帳戶 1000", [cash, bank], [], TODAY)

    assert result.type == "transfer"
    assert result.account_name == "現金"
    assert result.to_account_name == "銀行帳戶"
    assert result.amount == 1000


def test_same_account_is_never_a_transfer(parser: LocalParser) -> None:
    result = parser.parse("from Cash to Cash 100", ACCOUNTS, CATEGORIES, TODAY)

    assert result.type != "transfer"
    assert result.to_account_name is None


def test_custom_transfer_category() -> None:
    parser = LocalParser(transfer_category="轉帳")
    result = parser.parse("transfer 500 from Cash to Bank Account", ACCOUNTS, CATEGORIES, TODAY)
    assert result.category_name == "轉帳"


@pytest.mark.parametrize("text,amount,day", [
    ("2024/3/5 lunch 180 cash", 180, "2024-03-05"),
    ("3/5 taxi 250", 250, "2024-03-05"),
    ("taxi 250 yesterday", 250, "2024-03-09"),
])
def test_dates_do_not_leak_into_amount(parser: LocalParser, text: str, amount: float, day: str) -> None:
    result = parser.parse(text, ACCOUNTS, CATEGORIES, TODAY)
    assert result.amount == amount
    assert result.date == day


def test_missing_pieces_stay_empty(parser: LocalParser) -> None:
    result = parser.parse("something with friends", ACCOUNTS, CATEGORIES, TODAY)

    assert result.amount is None
    assert result.type == "expense"
    assert result.account_name is None
    assert result.category_name is None


@pytest.mark.parametrize("text", [
    "move 500 to Bank Account from Cash",
    "deposit 500 into Bank Account, cash",
])
def test_transfer_with_target_named_first(parser: LocalParser, text: str) -> None:
    result = parser.parse(text, ACCOUNTS, CATEGORIES, TODAY)

    assert result.type == "transfer"
    assert result.amount == 500
    assert result.account_name == "Cash"
    assert result.to_account_name == "Bank Account"
