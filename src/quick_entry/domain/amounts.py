import re

from quick_entry.domain.text import fold_width

FULL_DATE_RE = re.compile(r"(?<!\d)(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})(?!\d)")
SHORT_DATE_RE = re.compile(r"(?<![\d/\-])(\d{1,2})/(\d{1,2})(?![\d/])")
AMOUNT_RE = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?")


def mask_dates(text: str) -> str:
    masked = FULL_DATE_RE.sub(" ", text)
    return SHORT_DATE_RE.sub(" ", masked)


def extract_amount(text: str) -> float | None:
    if not text:
        return None
    match = AMOUNT_RE.search(mask_dates(fold_width(text)))
    if not match:
        return None
    return float(match.group(0).replace(",", ""))
