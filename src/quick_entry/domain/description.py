import re
from collections.abc import Sequence

from quick_entry.domain.accounts import account_aliases
from quick_entry.domain.amounts import AMOUNT_RE, mask_dates
from quick_entry.domain.dates import RELATIVE_DATE_WORDS
from quick_entry.domain.text import PUNCTUATION, collapse_whitespace, fold_width, keyword_pattern
from quick_entry.models import Account

ACCOUNT_WORDS = ("現金", "现金", "cash", "帳戶", "账户", "戶頭", "户头", "銀行", "银行", "bank", "account", "acc")

_EDGE_PUNCTUATION = PUNCTUATION + " "
_PUNCTUATION_RUN_RE = re.compile(r"\s*([" + re.escape(PUNCTUATION) + r"])(?:\s*[" + re.escape(PUNCTUATION) + r"])*")


def flexible_name_pattern(name: str) -> re.Pattern[str] | None:
    """Match ``name`` with optional whitespace between its characters."""
    chars = [re.escape(char) for char in name.strip() if not char.isspace()]
    if not chars:
        return None
    pattern = r"\s*".join(chars)
    if name.isascii():
        pattern = rf"(?<![a-z0-9]){pattern}(?![a-z0-9])"
    return re.compile(pattern, re.IGNORECASE)


def _strip_words(text: str, words: Sequence[str]) -> str:
    # Longest first so "day before yesterday" goes before "yesterday".
    for word in sorted(words, key=len, reverse=True):
        text = re.sub(keyword_pattern(word.lower()), " ", text, flags=re.IGNORECASE)
    return text


def clean_description(text: str, accounts: Sequence[Account] = ()) -> str:
    """Strip amounts, dates and account mentions, leaving what the money was for."""
    if not text:
        return ""
    result = mask_dates(fold_width(text))
    result = AMOUNT_RE.sub(" ", result)
    result = _strip_words(result, RELATIVE_DATE_WORDS)

    for account in accounts:
        pattern = flexible_name_pattern(account.name)
        if pattern:
            result = pattern.sub(" ", result)
        aliases = [alias for alias in account_aliases(account.name) if len(alias) >= 2]
        result = _strip_words(result, aliases)

    result = _strip_words(result, ACCOUNT_WORDS)
    result = _PUNCTUATION_RUN_RE.sub(lambda m: m.group(1) + " ", result)
    return collapse_whitespace(result).strip(_EDGE_PUNCTUATION)
