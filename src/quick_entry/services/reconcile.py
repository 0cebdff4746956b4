from collections.abc import Sequence
from datetime import date

from quick_entry.domain.accounts import AccountResolver
from quick_entry.domain.categories import (
    TRANSFER_CATEGORY,
    allowed_categories,
    coerce_category,
    infer_category,
    strong_rule,
)
from quick_entry.domain.dates import clamp_to_today, is_iso_date
from quick_entry.domain.description import clean_description
from quick_entry.domain.transaction_type import has_transfer_signal
from quick_entry.logger import get_logger
from quick_entry.models import Account, Category, ParsedInput, RemoteParse, TransactionType

logger = get_logger(__name__)


def _explicit_accounts(
    text: str,
    accounts: Sequence[Account],
    tx_type: TransactionType,
    resolver: AccountResolver,
) -> tuple[Account | None, Account | None]:
    """Accounts the user literally typed; these beat any remote guess."""
    mentions = resolver.mentions(text, accounts)
    if tx_type != "transfer":
        return (mentions[0] if mentions else None), None

    direction = resolver.resolve_direction(text, accounts, transfer_signal=has_transfer_signal(text))
    if direction.is_pair:
        return direction.source, direction.target

    target = direction.target
    source = direction.source or next(
        (a for a in mentions if target is None or a.id != target.id),
        None,
    )
    if source is not None and (target is None or target.id == source.id):
        target = next((a for a in mentions if a.id != source.id), None)
    return source, target


def _pick_category(
    fallback: ParsedInput,
    remote: RemoteParse,
    text: str,
    tx_type: TransactionType,
    categories: Sequence[Category],
) -> str | None:
    candidates = allowed_categories(categories, tx_type)
    if remote.category_name:
        candidate: str | None = remote.category_name
    elif fallback.type == tx_type:
        candidate = fallback.category_name
    else:
        candidate = infer_category(text, candidates, tx_type)

    # Unambiguous local keyword evidence beats the remote pick.
    rule = strong_rule(text, tx_type)
    if (
        rule is not None
        and fallback.type == tx_type
        and fallback.category_name
        and rule.pick([fallback.category_name])
        and candidate != fallback.category_name
    ):
        logger.debug(
            f"Keeping local category '{fallback.category_name}' over remote '{candidate}' ({rule.name} keywords)"
        )
        candidate = fallback.category_name

    if candidate is None:
        return None
    return coerce_category(tx_type, candidate, categories)


def reconcile(
    fallback: ParsedInput,
    remote: RemoteParse,
    text: str,
    accounts: Sequence[Account],
    categories: Sequence[Category],
    today: date,
    resolver: AccountResolver | None = None,
    transfer_category: str = TRANSFER_CATEGORY,
) -> ParsedInput:
    """Merge a remote parse over the local fallback."""
    resolver = resolver or AccountResolver()
    merged = fallback.model_copy(update=remote.model_dump(exclude_none=True))
    tx_type: TransactionType = merged.type or "expense"

    # Accounts: typed mentions, then remote guesses mapped onto real accounts, then the fallback.
    forced_source, forced_target = _explicit_accounts(text, accounts, tx_type, resolver)
    remote_source = resolver.resolve_name(remote.account_name, accounts)
    remote_target = resolver.resolve_name(remote.to_account_name, accounts)
    if remote.account_name and remote_source is None:
        logger.debug(f"Dropping unknown remote account '{remote.account_name}'")

    source = forced_source or remote_source
    account_name = source.name if source else fallback.account_name
    to_account_name: str | None = None
    if tx_type == "transfer":
        target = forced_target or remote_target
        to_account_name = target.name if target else fallback.to_account_name
        if not to_account_name or to_account_name == account_name:
            alternative = next(
                (a for a in resolver.mentions(text, accounts) if a.name != account_name),
                None,
            )
            to_account_name = alternative.name if alternative else None
        if not account_name or not to_account_name:
            logger.debug("Transfer without two distinct accounts; treating as expense")
            tx_type = "expense"
            to_account_name = None

    if tx_type == "transfer":
        category_name: str | None = transfer_category
    else:
        category_name = _pick_category(fallback, remote, text, tx_type, categories)

    tx_date = remote.date if is_iso_date(remote.date) else fallback.date
    description = clean_description(remote.description or text, accounts) or fallback.description

    return ParsedInput(
        amount=merged.amount,
        type=tx_type,
        account_name=account_name,
        to_account_name=to_account_name,
        category_name=category_name,
        date=clamp_to_today(tx_date, today),
        description=description,
        source="remote",
    )
