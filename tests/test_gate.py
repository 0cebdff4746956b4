from quick_entry.models import ParsedInput
from quick_entry.services.gate import has_distinct_accounts, is_resolved, should_call_remote

LONG_TEXT = "bought a new pair of running shoes at the mall 2400 card"


def _parsed(**overrides) -> ParsedInput:
    values = {
        "amount": 180.0,
        "type": "expense",
        "account_name": "Cash",
        "category_name": "Food",
        "date": "2024-03-10",
        "description": "lunch",
    }
    values.update(overrides)
    return ParsedInput(**values)


def test_short_complete_input_is_resolved() -> None:
    assert is_resolved(_parsed(description=""), "lunch 180 cash")


def test_missing_amount_is_not_resolved() -> None:
    assert not is_resolved(_parsed(amount=None), "lunch cash")
    assert not is_resolved(_parsed(amount=0), "lunch cash")


def test_missing_source_is_not_resolved() -> None:
    assert not is_resolved(_parsed(account_name=None), "lunch 180")


def test_long_input_needs_description() -> None:
    assert is_resolved(_parsed(description="running shoes"), LONG_TEXT)
    assert not is_resolved(_parsed(description="  "), LONG_TEXT)


def test_long_expense_needs_category() -> None:
    assert not is_resolved(_parsed(category_name=None, description="running shoes"), LONG_TEXT)


def test_transfer_needs_two_distinct_accounts() -> None:
    transfer = _parsed(type="transfer", to_account_name="Bank Account", description="moving money")
    assert has_distinct_accounts(transfer)
    assert is_resolved(transfer, LONG_TEXT)

    same = _parsed(type="transfer", to_account_name="Cash", description="moving money")
    assert not has_distinct_accounts(same)
    assert not is_resolved(same, LONG_TEXT)


def test_remote_skipped_when_unavailable_or_local_only() -> None:
    unresolved = _parsed(amount=None)
    assert should_call_remote(unresolved, "lunch cash", remote_available=True)
    assert not should_call_remote(unresolved, "lunch cash", remote_available=False)
    assert not should_call_remote(unresolved, "lunch cash", remote_available=True, local_only=True)


def test_remote_skipped_for_complete_input() -> None:
    assert not should_call_remote(_parsed(), "lunch 180 cash", remote_available=True)


def test_remote_skipped_for_clear_transfer() -> None:
    transfer = _parsed(type="transfer", amount=None, to_account_name="Bank Account")
    assert not should_call_remote(transfer, LONG_TEXT, remote_available=True)
