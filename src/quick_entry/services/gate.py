from quick_entry.models import ParsedInput

SHORT_INPUT_LENGTH = 28


def has_distinct_accounts(parsed: ParsedInput) -> bool:
    return bool(
        parsed.account_name
        and parsed.to_account_name
        and parsed.account_name != parsed.to_account_name
    )


def is_resolved(parsed: ParsedInput, text: str) -> bool:
    """Whether the local parse is complete enough to skip the remote service."""
    has_amount = parsed.amount is not None and parsed.amount > 0
    has_source = bool(parsed.account_name)
    has_category = bool(parsed.category_name)

    if len(text.strip()) <= SHORT_INPUT_LENGTH and has_amount and has_source and has_category:
        return True

    if not (has_amount and has_source):
        return False
    if parsed.type == "transfer":
        if not has_distinct_accounts(parsed):
            return False
    elif not has_category:
        return False
    return bool(parsed.description.strip())


def should_call_remote(
    fallback: ParsedInput,
    text: str,
    *,
    remote_available: bool,
    local_only: bool = False,
) -> bool:
    if not remote_available or local_only:
        return False
    if fallback.type == "transfer" and has_distinct_accounts(fallback):
        return False
    return not is_resolved(fallback, text)
