import re
from collections.abc import Sequence
from dataclasses import dataclass

from quick_entry.domain.text import (
    char_overlap,
    fold_width,
    has_any_keyword,
    has_any_token,
    normalize,
)
from quick_entry.logger import get_logger
from quick_entry.models import Account

logger = get_logger(__name__)

ACCOUNT_MATCH_THRESHOLD = 0.55

ACCOUNT_SUFFIXES = (
    "帳戶", "账户", "戶頭", "户头", "銀行", "银行",
    "account", "wallet", "bank", "card", "acc", "卡",
)
CASH_HINT_KEYWORDS = ("現金", "现金", "cash", "wallet", "錢包", "钱包")
BANK_HINT_KEYWORDS = ("帳戶", "账户", "戶頭", "户头", "銀行", "银行", "bank", "account", "acc")

CASH_HINT_BOOST = 1.2
BANK_HINT_BOOST = 0.8
CASH_BANK_PENALTY = 0.4

_SUFFIX_RE = re.compile("(?:" + "|".join(re.escape(s) for s in ACCOUNT_SUFFIXES) + ")$")
_SEPARATOR_RE = re.compile(r"[\s_\-/·]+")
_CONNECTOR_RE = re.compile(
    r"(?<![a-z])(?:given to|into|onto|to)(?![a-z])"
    r"|轉到|转到|轉入|转入|轉給|转给|存入|存到|匯入|汇入|匯到|汇到|到|給|给",
)


@dataclass(frozen=True)
class ScoredAccount:
    account: Account
    score: float
    position: int


@dataclass(frozen=True)
class Direction:
    source: Account | None = None
    target: Account | None = None
    explicit: bool = False

    @property
    def is_pair(self) -> bool:
        return (
            self.source is not None
            and self.target is not None
            and self.source.id != self.target.id
        )


def strip_suffix(normalized: str) -> str:
    return _SUFFIX_RE.sub("", normalized)


def account_aliases(name: str) -> set[str]:
    normalized = normalize(name)
    no_suffix = strip_suffix(normalized)
    aliases: set[str] = set()
    if normalized:
        aliases.add(normalized)
    if no_suffix:
        aliases.add(no_suffix)

    # Meaningful fragments of multi-word names ("E.Sun Bank" -> "esun").
    for part in _SEPARATOR_RE.split(fold_width(name).lower()):
        fragment = strip_suffix(normalize(part))
        if len(fragment) >= 2:
            aliases.add(fragment)

    # Short prefixes so shorthand input can still find a longer formal name.
    base = no_suffix or normalized
    for size in (2, 3, 4):
        if len(base) >= size:
            aliases.add(base[:size])

    return aliases


def hint_boost(input_normalized: str, account_normalized: str) -> float:
    input_cash = has_any_token(input_normalized, CASH_HINT_KEYWORDS)
    input_bank = has_any_token(input_normalized, BANK_HINT_KEYWORDS)
    account_cash = has_any_token(account_normalized, CASH_HINT_KEYWORDS)
    account_bank = has_any_token(account_normalized, BANK_HINT_KEYWORDS)
    boost = 0.0
    if input_cash and account_cash:
        boost += CASH_HINT_BOOST
    if input_bank and account_bank and not account_cash:
        boost += BANK_HINT_BOOST
    if input_bank and account_cash:
        boost -= CASH_BANK_PENALTY
    return boost


def is_cash_like(account: Account) -> bool:
    return has_any_token(normalize(account.name), CASH_HINT_KEYWORDS)


class AccountResolver:
    def __init__(self, threshold: float = ACCOUNT_MATCH_THRESHOLD):
        self.threshold = threshold

    def score(self, text: str, name: str) -> float:
        normalized_text = normalize(text)
        if not normalized_text:
            return 0.0
        score = hint_boost(normalized_text, normalize(name))
        for alias in account_aliases(name):
            if alias in normalized_text:
                score = max(score, len(alias) + 1)
            score = max(score, char_overlap(normalized_text, alias))
        return score

    def _position(self, text: str, name: str) -> int:
        normalized_text = normalize(text)
        positions = [
            normalized_text.find(alias)
            for alias in account_aliases(name)
            if alias and alias in normalized_text
        ]
        return min(positions) if positions else len(normalized_text)

    def scored_mentions(self, text: str, accounts: Sequence[Account]) -> list[ScoredAccount]:
        scored: list[ScoredAccount] = []
        seen: set[str] = set()
        for account in accounts:
            if account.id in seen:
                continue
            seen.add(account.id)
            score = self.score(text, account.name)
            if score >= self.threshold:
                scored.append(ScoredAccount(account, score, self._position(text, account.name)))
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored

    def mentions(self, text: str, accounts: Sequence[Account]) -> list[Account]:
        """Accounts mentioned in ``text``, most confident first."""
        return [item.account for item in self.scored_mentions(text, accounts)]

    def best_match(self, text: str, accounts: Sequence[Account]) -> Account | None:
        found = self.mentions(text, accounts)
        return found[0] if found else None

    def resolve_name(self, name: str | None, accounts: Sequence[Account]) -> Account | None:
        """Map a free-form account name (e.g. a remote guess) onto a known account."""
        if not name:
            return None
        for account in accounts:
            if account.name == name:
                return account

        target = normalize(name)
        if not target:
            return None
        best: Account | None = None
        best_score = 0.0
        for account in accounts:
            boost = hint_boost(target, normalize(account.name))
            for alias in account_aliases(account.name):
                score = boost
                if alias in target or target in alias:
                    score = max(score, min(len(target), len(alias)) + 1)
                score = max(score, char_overlap(target, alias))
                if score > best_score:
                    best_score = score
                    best = account
        return best if best_score >= self.threshold else None

    def resolve_direction(
        self,
        text: str,
        accounts: Sequence[Account],
        transfer_signal: bool = False,
    ) -> Direction:
        """Work out which mentioned account is the source and which the target."""
        lowered = fold_width(text or "").lower()
        source: Account | None = None
        target: Account | None = None
        explicit = False

        connectors = list(_CONNECTOR_RE.finditer(lowered))
        if connectors:
            last = connectors[-1]
            left = lowered[: last.start()]
            right = lowered[last.end():]
            source = self.best_match(left, accounts)
            target = next(
                (a for a in self.mentions(right, accounts) if source is None or a.id != source.id),
                None,
            )
            if source is None and target is not None:
                # "to B from A": the source sits after the connector too.
                source = next(
                    (a for a in self.mentions(text, accounts) if a.id != target.id),
                    None,
                )
            explicit = source is not None and target is not None

        if source is None and target is None:
            top_two = self.scored_mentions(text, accounts)[:2]
            ordered = sorted(top_two, key=lambda item: item.position)
            if ordered:
                source = ordered[0].account
            if len(ordered) > 1:
                target = ordered[1].account

        if source is not None and target is None and transfer_signal:
            if has_any_keyword(lowered, CASH_HINT_KEYWORDS):
                target = next(
                    (a for a in accounts if is_cash_like(a) and a.id != source.id),
                    None,
                )
                if target is not None:
                    logger.debug(f"Using '{target.name}' as implicit cash target")

        if source is not None and target is not None and source.id == target.id:
            target = None
        return Direction(source=source, target=target, explicit=explicit)
