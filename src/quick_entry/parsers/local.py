from collections.abc import Sequence
from datetime import date

from quick_entry.domain.accounts import AccountResolver
from quick_entry.domain.amounts import extract_amount
from quick_entry.domain.categories import TRANSFER_CATEGORY, allowed_categories, infer_category
from quick_entry.domain.dates import resolve_date
from quick_entry.domain.description import clean_description
from quick_entry.domain.transaction_type import classify_type, has_transfer_signal
from quick_entry.logger import get_logger
from quick_entry.models import Account, Category, ParsedInput

logger = get_logger(__name__)


class LocalParser:
    """Deterministic heuristic parse; always safe to return."""

    def __init__(
        self,
        resolver: AccountResolver | None = None,
        transfer_category: str = TRANSFER_CATEGORY,
    ):
        self.resolver = resolver or AccountResolver()
        self.transfer_category = transfer_category

    def parse(
        self,
        text: str,
        accounts: Sequence[Account],
        categories: Sequence[Category],
        today: date,
    ) -> ParsedInput:
        text = text.strip()
        amount = extract_amount(text)
        tx_date = resolve_date(text, today)

        mentions = self.resolver.mentions(text, accounts)
        direction = self.resolver.resolve_direction(
            text, accounts, transfer_signal=has_transfer_signal(text)
        )
        tx_type = classify_type(text, mentions, direction)

        if tx_type == "transfer":
            to_account = direction.target
            account = direction.source or next(
                (a for a in mentions if to_account is None or a.id != to_account.id),
                None,
            )
            if account is not None and (to_account is None or to_account.id == account.id):
                to_account = next((a for a in mentions if a.id != account.id), None)
            category_name = self.transfer_category
        else:
            account = mentions[0] if mentions else None
            to_account = None
            category_name = infer_category(text, allowed_categories(categories, tx_type), tx_type)

        result = ParsedInput(
            amount=amount,
            type=tx_type,
            account_name=account.name if account else None,
            to_account_name=to_account.name if to_account else None,
            category_name=category_name,
            date=tx_date,
            description=clean_description(text, accounts),
            source="local",
        )
        logger.debug(
            f"Local parse of '{text[:50]}': type={result.type} amount={result.amount} "
            f"account={result.account_name} to={result.to_account_name} category={result.category_name}"
        )
        return result
