import re
from collections.abc import Sequence

from quick_entry.domain.accounts import Direction
from quick_entry.domain.text import fold_width, has_any_keyword
from quick_entry.logger import get_logger
from quick_entry.models import Account, TransactionType

logger = get_logger(__name__)

TRANSFER_KEYWORDS = (
    "轉帳", "轉賬", "转账", "轉到", "轉入", "轉出", "匯款", "匯入", "匯出", "提款", "領錢",
    "transfer", "withdraw", "withdrawal", "deposit", "top up", "move",
)
INCOME_KEYWORDS = (
    "薪水", "薪資", "薪资", "收入", "進帳", "进账", "入帳", "入账", "獎金", "奖金", "退款",
    "salary", "paycheck", "payroll", "wage", "wages", "bonus", "refund", "dividend", "income",
)
INCOME_VERB_PATTERNS = (
    re.compile(r"(?<![a-z])(?:received|receive|got paid|earned|credited|paid me)(?![a-z])"),
    re.compile(r"收到|領到|领到|拿到|賺了|赚了"),
)


def has_income_signal(text: str) -> bool:
    lowered = fold_width(text or "").lower()
    if has_any_keyword(lowered, INCOME_KEYWORDS):
        return True
    return any(pattern.search(lowered) for pattern in INCOME_VERB_PATTERNS)


def has_transfer_signal(text: str) -> bool:
    return has_any_keyword(text or "", TRANSFER_KEYWORDS)


def classify_type(
    text: str,
    mentions: Sequence[Account],
    direction: Direction,
) -> TransactionType:
    """Pick income/expense/transfer for the text.

    An explicit "A to B" split beats everything. Two distinct mentioned
    accounts make a transfer only when nothing in the text reads as income,
    since "received" and friends show up in both kinds of phrasing.
    """
    income = has_income_signal(text)
    distinct_ids = {account.id for account in mentions}

    if direction.explicit and direction.is_pair:
        return "transfer"
    if len(distinct_ids) >= 2 and not income:
        return "transfer"
    if income:
        return "income"
    if has_transfer_signal(text):
        logger.debug("Transfer wording without two distinct accounts; keeping expense")
    return "expense"
