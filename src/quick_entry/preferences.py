import json
import os
from datetime import datetime, timezone

from pydantic import TypeAdapter, ValidationError

from quick_entry.domain.text import description_similarity, normalize
from quick_entry.logger import get_logger
from quick_entry.models import LearnedPref, TransactionType

logger = get_logger(__name__)

PREF_MATCH_THRESHOLD = 0.55
SIMILARITY_WEIGHT = 0.7
RECENCY_WEIGHT = 0.2
USAGE_WEIGHT = 0.1
RECENCY_WINDOW_DAYS = 45
USAGE_SATURATION = 8

_PREFS_ADAPTER = TypeAdapter(dict[str, LearnedPref])


def make_pref_key(tx_type: TransactionType, description: str) -> str:
    return f"{tx_type}::{normalize(description)}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class LearnedPreferenceStore:
    def __init__(self, data_path: str = "learned_prefs.json", threshold: float = PREF_MATCH_THRESHOLD):
        self.data_path = data_path
        self.threshold = threshold
        self.prefs: dict[str, LearnedPref] = {} # "type::normalized description" -> pref
        self.load()

    def load(self) -> None:
        if not os.path.exists(self.data_path):
            return
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                self.prefs = _PREFS_ADAPTER.validate_python(json.load(f))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable preference file {self.data_path}: {e}")
            self.prefs = {}

    def save(self) -> None:
        with open(self.data_path, "wb") as f:
            f.write(_PREFS_ADAPTER.dump_json(self.prefs, indent=2))

    def score(self, normalized: str, key: str, pref: LearnedPref, now: datetime) -> float:
        saved_normalized = key.split("::", 1)[1]
        similarity = description_similarity(normalized, saved_normalized)
        age_days = (now - _as_aware(pref.updated_at)).total_seconds() / 86400
        recency = max(0.0, 1 - age_days / RECENCY_WINDOW_DAYS)
        usage = min(pref.use_count / USAGE_SATURATION, 1.0)
        return similarity * SIMILARITY_WEIGHT + recency * RECENCY_WEIGHT + usage * USAGE_WEIGHT

    def lookup(
        self,
        tx_type: TransactionType,
        description: str,
        now: datetime | None = None,
    ) -> LearnedPref | None:
        if not self.prefs:
            return None

        # 1. Exact match
        exact = self.prefs.get(make_pref_key(tx_type, description))
        if exact:
            return exact

        # 2. Fuzzy match over the same transaction type
        normalized = normalize(description)
        if not normalized:
            return None
        now = _as_aware(now or _utcnow())
        prefix = f"{tx_type}::"
        best: LearnedPref | None = None
        best_score = 0.0
        for key, pref in self.prefs.items():
            if not key.startswith(prefix) or len(key) == len(prefix):
                continue
            score = self.score(normalized, key, pref, now)
            if score > best_score:
                best_score = score
                best = pref

        if best is not None and best_score >= self.threshold:
            logger.debug(f"Learned preference fuzzy hit for '{description}' (score: {best_score:.2f})")
            return best
        return None

    def upsert(self, key: str, pref: LearnedPref) -> LearnedPref:
        previous = self.prefs.get(key)
        updated_at = pref.updated_at
        if previous and _as_aware(previous.updated_at) > _as_aware(updated_at):
            updated_at = previous.updated_at
        stored = pref.model_copy(update={
            "use_count": (previous.use_count if previous else 0) + 1,
            "updated_at": updated_at,
        })
        self.prefs[key] = stored
        self.save()
        return stored

    def learn(
        self,
        tx_type: TransactionType,
        description: str,
        *,
        account_id: str | None = None,
        to_account_id: str | None = None,
        category: str | None = None,
        now: datetime | None = None,
    ) -> LearnedPref | None:
        if not description.strip():
            return None
        pref = LearnedPref(
            type=tx_type,
            account_id=account_id,
            to_account_id=to_account_id if tx_type == "transfer" else None,
            category=category,
            updated_at=now or _utcnow(),
        )
        return self.upsert(make_pref_key(tx_type, description), pref)

    def clear(self) -> None:
        self.prefs = {}
        self.save()
