import re
from collections.abc import Iterable

# Latin and CJK punctuation stripped by normalize().
PUNCTUATION = ".,!?，。！？、:;：；'\"`~@#$%^&*()_+=-[]{}<>\\/|「」『』（）【】《》〈〉・…"

_PUNCTUATION_RE = re.compile("[" + re.escape(PUNCTUATION) + "]")
_WHITESPACE_RE = re.compile(r"\s+")
_FULL_WIDTH_OFFSET = 0xFEE0


def fold_width(text: str) -> str:
    """Map full-width ASCII forms (IME input) and the ideographic space to half-width."""
    chars = []
    for char in text:
        code = ord(char)
        if 0xFF01 <= code <= 0xFF5E:
            chars.append(chr(code - _FULL_WIDTH_OFFSET))
        elif code == 0x3000:
            chars.append(" ")
        else:
            chars.append(char)
    return "".join(chars)


def normalize(text: str) -> str:
    if not text:
        return ""
    folded = fold_width(text).lower()
    folded = _WHITESPACE_RE.sub("", folded)
    return _PUNCTUATION_RE.sub("", folded)


def is_ascii_word(token: str) -> bool:
    return token.isascii() and any(char.isalnum() for char in token)


def keyword_pattern(keyword: str) -> str:
    escaped = re.escape(keyword)
    if is_ascii_word(keyword):
        # Latin keywords must not match inside longer words ("tea" in "steak").
        return rf"(?<![a-z]){escaped}(?![a-z])"
    return escaped


def contains_keyword(text: str, keyword: str) -> bool:
    lowered = fold_width(text).lower()
    if is_ascii_word(keyword):
        return re.search(keyword_pattern(keyword.lower()), lowered) is not None
    return keyword in lowered


def has_any_keyword(text: str, keywords: Iterable[str]) -> bool:
    return any(contains_keyword(text, keyword) for keyword in keywords)


def has_any_token(normalized: str, tokens: Iterable[str]) -> bool:
    """Plain substring test on already-normalized text."""
    return any(token in normalized for token in tokens)


def char_overlap(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    a_set = set(a)
    b_set = set(b)
    overlap = len(a_set & b_set)
    return overlap / (max(len(a_set), len(b_set)) or 1)


def description_similarity(a: str, b: str) -> float:
    """Character Jaccard similarity with a bonus when one string contains the other."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    a_set = set(a)
    b_set = set(b)
    jaccard = len(a_set & b_set) / (len(a_set | b_set) or 1)
    contains_bonus = 0.3 if a in b or b in a else 0.0
    return min(1.0, jaccard + contains_bonus)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()
