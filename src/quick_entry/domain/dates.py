from datetime import date, timedelta

from quick_entry.domain.amounts import FULL_DATE_RE, SHORT_DATE_RE
from quick_entry.domain.text import contains_keyword, fold_width

# Checked in order; "day before yesterday" must win over "yesterday".
RELATIVE_DAY_KEYWORDS: tuple[tuple[str, int], ...] = (
    ("day before yesterday", -2),
    ("前天", -2),
    ("yesterday", -1),
    ("昨天", -1),
    ("昨日", -1),
)

RELATIVE_DATE_WORDS = ("day before yesterday", "yesterday", "today", "前天", "昨天", "昨日", "今天", "今日")


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def resolve_date(text: str, today: date) -> str:
    """Resolve the transaction date mentioned in ``text`` as an ISO string."""
    folded = fold_width(text or "")

    # 1. Relative keywords
    for keyword, offset in RELATIVE_DAY_KEYWORDS:
        if contains_keyword(folded, keyword):
            return (today + timedelta(days=offset)).isoformat()

    # 2. Explicit year/month/day
    for match in FULL_DATE_RE.finditer(folded):
        year, month, day = (int(part) for part in match.groups())
        parsed = _safe_date(year, month, day)
        if parsed:
            return parsed.isoformat()

    # 3. Month/day in the current year
    for match in SHORT_DATE_RE.finditer(folded):
        month, day = (int(part) for part in match.groups())
        parsed = _safe_date(today.year, month, day)
        if parsed:
            return parsed.isoformat()

    return today.isoformat()


def clamp_to_today(value: str | None, today: date) -> str:
    if not value:
        return today.isoformat()
    try:
        parsed = date.fromisoformat(value.strip()[:10])
    except ValueError:
        return today.isoformat()
    return min(parsed, today).isoformat()


def is_iso_date(value: str | None) -> bool:
    if not value:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
