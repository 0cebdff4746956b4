import pytest

from quick_entry.domain.text import (
    char_overlap,
    contains_keyword,
    description_similarity,
    fold_width,
    normalize,
)


@pytest.mark.parametrize("text", [
    "Lunch 180 Cash, today!",
    "  Bank   Account  ",
    "午餐，１８０元　現金。",
    "E.Sun Bank (Main) - card",
    "「晚餐」！？",
    "",
    "ÀÉÎ Ünïcode",
])
def test_normalize_is_idempotent(text: str) -> None:
    once = normalize(text)
    assert normalize(once) == once


def test_normalize_strips_case_space_and_punctuation() -> None:
    assert normalize("Bank  Account!") == "bankaccount"
    assert normalize("午餐，現金。") == "午餐現金"
    assert normalize("ＣＡＳＨ") == "cash"


def test_fold_width_converts_ime_digits() -> None:
    assert fold_width("午餐 １８０．５") == "午餐 180.5"
    assert fold_width("a　b") == "a b"


def test_contains_keyword_respects_latin_word_edges() -> None:
    assert contains_keyword("Bubble tea 60", "tea")
    assert not contains_keyword("steak 300", "tea")
    assert contains_keyword("便當80", "便當")


def test_char_overlap_uses_larger_set() -> None:
    assert char_overlap("abcd", "ab") == 0.5
    assert char_overlap("abc", "abc") == 1.0
    assert char_overlap("", "abc") == 0.0


def test_description_similarity_containment_bonus() -> None:
    plain = description_similarity("coffeebeans", "coffeeshop")
    assert plain == pytest.approx(0.5)
    assert description_similarity("starbucks", "starbuckslatte") == 1.0
