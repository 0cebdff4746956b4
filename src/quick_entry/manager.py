import asyncio
import os
from collections.abc import Awaitable, Collection, Sequence
from datetime import date
from time import perf_counter
from typing import TypeVar

from quick_entry.core import settings
from quick_entry.domain.accounts import ACCOUNT_MATCH_THRESHOLD, AccountResolver
from quick_entry.domain.categories import (
    TRANSFER_CATEGORY,
    allowed_categories,
    coerce_category,
    default_category,
    infer_category,
)
from quick_entry.domain.dates import clamp_to_today
from quick_entry.domain.description import clean_description
from quick_entry.logger import get_logger
from quick_entry.models import (
    Account,
    Category,
    ParsedInput,
    Prefill,
    Submission,
    TransactionDraft,
    TransactionType,
)
from quick_entry.parsers.base import RemoteParser
from quick_entry.parsers.llm import LLMParser
from quick_entry.parsers.local import LocalParser
from quick_entry.preferences import PREF_MATCH_THRESHOLD, LearnedPreferenceStore
from quick_entry.services.gate import should_call_remote
from quick_entry.services.reconcile import reconcile

logger = get_logger(__name__)

T = TypeVar("T")

PARSE_TIMEOUT = settings.DEFAULT_PARSE_TIMEOUT
CATEGORIZE_TIMEOUT = settings.DEFAULT_CATEGORIZE_TIMEOUT
MIN_PREFILL_LENGTH = 2
TRANSFER_DESCRIPTION = "Account transfer"


class RemoteTimeout(Exception):
    pass


class EntryParserService:
    def __init__(self,
                 data_dir: str = ".",
                 remote: RemoteParser | None = None,
                 store: LearnedPreferenceStore | None = None,
                 parse_timeout: float | None = None,
                 categorize_timeout: float | None = None,
                 account_threshold: float | None = None,
                 pref_threshold: float | None = None,
                 transfer_category: str | None = None,
                 local_only: bool | None = None):

        self.parse_timeout = parse_timeout if parse_timeout is not None else settings.get_env_float(
            "PARSE_TIMEOUT", PARSE_TIMEOUT, min_value=0.0
        )
        self.categorize_timeout = categorize_timeout if categorize_timeout is not None else settings.get_env_float(
            "CATEGORIZE_TIMEOUT", CATEGORIZE_TIMEOUT, min_value=0.0
        )
        self.local_only = local_only if local_only is not None else settings.get_env_bool("LOCAL_ONLY")
        self.transfer_category = transfer_category or os.getenv("TRANSFER_CATEGORY") or TRANSFER_CATEGORY

        threshold = account_threshold if account_threshold is not None else settings.get_env_float(
            "ACCOUNT_MATCH_THRESHOLD", ACCOUNT_MATCH_THRESHOLD, min_value=0.0
        )
        self.resolver = AccountResolver(threshold=threshold)
        self.local = LocalParser(resolver=self.resolver, transfer_category=self.transfer_category)

        # 1. Learned preferences (read before parsing, written after submission)
        self.store = store or LearnedPreferenceStore(
            data_path=os.path.join(data_dir, settings.PREFS_FILENAME),
            threshold=pref_threshold if pref_threshold is not None else settings.get_env_float(
                "PREF_MATCH_THRESHOLD", PREF_MATCH_THRESHOLD, min_value=0.0, max_value=1.0
            ),
        )

        # 2. Remote language service (optional)
        self.remote = remote
        if self.remote is None:
            api_key = os.getenv("OPENAI_API_KEY")
            if api_key:
                model = os.getenv("OPENAI_MODEL", settings.DEFAULT_OPENAI_MODEL)
                base_url = os.getenv("OPENAI_BASE_URL")
                self.remote = LLMParser(api_key=api_key, model=model, base_url=base_url)
                logger.info(f"LLM parser enabled: model={model}, base_url={base_url or 'default'}")
            else:
                logger.warning("OPENAI_API_KEY not found. Remote parsing disabled.")

        self._detached: set[asyncio.Task] = set()

    async def _race(self, awaitable: Awaitable[T], timeout: float, label: str) -> T:
        """Await ``awaitable`` for at most ``timeout`` seconds.

        On timeout the task is left running in the background and its
        outcome is ignored; RemoteTimeout is raised to the caller.
        """
        task = asyncio.ensure_future(awaitable)
        started = perf_counter()
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if task in done:
            logger.debug(f"[REMOTE] {label} settled in {(perf_counter() - started) * 1000:.0f} ms")
            return task.result()

        self._detached.add(task)
        task.add_done_callback(self._forget)
        raise RemoteTimeout(f"{label} exceeded {timeout:.1f}s")

    def _forget(self, task: asyncio.Task) -> None:
        self._detached.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"[REMOTE] Abandoned call finished with error: {error}")

    async def parse(
        self,
        text: str,
        accounts: Sequence[Account],
        categories: Sequence[Category],
        today: date | None = None,
        local_only: bool = False,
    ) -> ParsedInput | None:
        if not text or not text.strip():
            return None
        today = today or date.today()

        try:
            fallback = self.local.parse(text, accounts, categories, today)
        except Exception:
            logger.exception(f"Local parse failed for: '{text[:50]}'")
            return ParsedInput(date=today.isoformat(), description=text.strip())
        fallback = fallback.model_copy(update={"date": clamp_to_today(fallback.date, today)})

        if not should_call_remote(
            fallback,
            text,
            remote_available=self.remote is not None,
            local_only=local_only or self.local_only,
        ):
            return fallback

        remote_parser = self.remote
        if remote_parser is None:
            return fallback
        try:
            remote = await self._race(
                remote_parser.parse_entry(text, [a.name for a in accounts], categories, today),
                self.parse_timeout,
                "parse_entry",
            )
            return reconcile(
                fallback,
                remote,
                text,
                accounts,
                categories,
                today,
                resolver=self.resolver,
                transfer_category=self.transfer_category,
            )
        except RemoteTimeout as e:
            logger.warning(f"[REMOTE] {e}; using local parse.")
        except Exception as e:
            logger.error(f"[REMOTE] Parsing error: {e}")
        return fallback

    async def suggest_category(
        self,
        description: str,
        tx_type: TransactionType,
        categories: Sequence[Category],
        local_only: bool = False,
    ) -> str:
        if tx_type == "transfer":
            return self.transfer_category
        description = description.strip()
        if not description:
            return default_category(tx_type)

        candidates = allowed_categories(categories, tx_type)
        local = infer_category(description, candidates, tx_type)
        if local or not candidates or self.remote is None or local_only or self.local_only:
            return local or default_category(tx_type)

        try:
            suggested = await self._race(
                self.remote.suggest_category(description, candidates, tx_type),
                self.categorize_timeout,
                "suggest_category",
            )
        except RemoteTimeout as e:
            logger.warning(f"[REMOTE] {e}; using default category.")
            suggested = None
        except Exception as e:
            logger.error(f"[REMOTE] Category suggestion error: {e}")
            suggested = None
        return suggested if suggested in candidates else default_category(tx_type)

    async def prefill(
        self,
        description: str,
        tx_type: TransactionType,
        accounts: Sequence[Account],
        categories: Sequence[Category],
        touched: Collection[str] = (),
        today: date | None = None,
        local_only: bool = False,
    ) -> Prefill:
        """Suggest category/accounts for a form, leaving ``touched`` fields alone."""
        description = description.strip()
        if len(description) < MIN_PREFILL_LENGTH or not accounts:
            return Prefill()

        learned = self.store.lookup(tx_type, description)
        if learned:
            return Prefill(
                category=(
                    coerce_category(tx_type, learned.category, categories, self.transfer_category)
                    if learned.category and "category" not in touched else None
                ),
                account_id=learned.account_id if "account_id" not in touched else None,
                to_account_id=learned.to_account_id if "to_account_id" not in touched else None,
                source="learned",
            )

        parsed = await self.parse(description, accounts, categories, today=today, local_only=local_only)
        if parsed is None:
            return Prefill()
        source = self.resolver.resolve_name(parsed.account_name, accounts)
        target = self.resolver.resolve_name(parsed.to_account_name, accounts)
        return Prefill(
            category=(
                coerce_category(tx_type, parsed.category_name, categories, self.transfer_category)
                if parsed.category_name and "category" not in touched else None
            ),
            account_id=source.id if source and "account_id" not in touched else None,
            to_account_id=target.id if target and "to_account_id" not in touched else None,
            source="parsed",
        )

    def learn(
        self,
        submission: Submission,
        accounts: Sequence[Account],
        today: date | None = None,
    ) -> TransactionDraft:
        """Finalize a confirmed entry and remember its field choices."""
        today = today or date.today()
        if submission.type == "transfer":
            category = self.transfer_category
        else:
            category = submission.category or default_category(submission.type)

        raw_description = submission.description.strip()
        description = clean_description(raw_description, accounts) or (
            TRANSFER_DESCRIPTION if submission.type == "transfer" else category
        )
        draft = TransactionDraft(
            type=submission.type,
            amount=submission.amount,
            description=description,
            category=category,
            account_id=submission.account_id,
            to_account_id=submission.to_account_id if submission.type == "transfer" else None,
            date=clamp_to_today(submission.date, today),
        )

        if raw_description:
            self.store.learn(
                submission.type,
                raw_description,
                account_id=submission.account_id,
                to_account_id=draft.to_account_id,
                category=category,
            )
        return draft
