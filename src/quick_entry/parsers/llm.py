import json
import os
import re
from collections.abc import Sequence
from datetime import date

from openai import AsyncOpenAI

from quick_entry.domain.categories import allowed_categories
from quick_entry.logger import get_logger
from quick_entry.models import Category, RemoteParse, TransactionType

from .base import RemoteParser

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

ENTRY_SCHEMA = {
    "type": "object",
    "properties": {
        "amount": {"type": ["number", "null"]},
        "description": {"type": ["string", "null"]},
        "type": {"type": ["string", "null"], "enum": ["income", "expense", "transfer", None]},
        "accountName": {
            "type": ["string", "null"],
            "description": "Source account, or the account used for income/expense.",
        },
        "toAccountName": {
            "type": ["string", "null"],
            "description": "Target account; transfers only.",
        },
        "categoryName": {"type": ["string", "null"]},
        "date": {"type": ["string", "null"], "description": "YYYY-MM-DD"},
    },
    "required": ["amount", "description", "type", "accountName", "toAccountName", "categoryName", "date"],
    "additionalProperties": False,
}


def extract_json_object(raw: str) -> dict:
    """Pull the JSON object out of a reply that may carry code fences or chatter."""
    cleaned = _FENCE_RE.sub("", raw).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        raise ValueError(f"No JSON object in model output: {raw[:80]!r}")
    payload = json.loads(cleaned[start:end + 1])
    if not isinstance(payload, dict):
        raise ValueError("Model output is not a JSON object")
    return payload


def build_entry_prompt(
    text: str,
    account_names: Sequence[str],
    categories: Sequence[Category],
    today: date,
) -> str:
    all_names = ", ".join(c.name for c in categories)
    income_names = ", ".join(allowed_categories(categories, "income"))
    expense_names = ", ".join(allowed_categories(categories, "expense"))
    return f"""
    Parse this bookkeeping note: "{text}"

    Rules:
    - Today is {today.isoformat()} ({today.strftime("%A")})
    - Available accounts: [{", ".join(account_names)}]
    - Available categories: [{all_names}]
    - Income categories: [{income_names}]
    - Expense categories: [{expense_names}]
    - Infer amount / description / type / accountName / toAccountName / categoryName / date
    - type must be one of income, expense, transfer
    - For a transfer fill both accountName (source) and toAccountName (target)
    - For income pick categoryName from the income categories only
    - For expense pick categoryName from the expense categories only
    - If no date is mentioned use {today.isoformat()}
    - description keeps only what the money was for, without amount or date
    - Output JSON only, no other text
    """


class LLMParser(RemoteParser):
    def __init__(self, api_key: str | None = None, model: str = "gpt-4o-mini", base_url: str | None = None):
        self.client = AsyncOpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or None
        )
        self.model = model

    async def parse_entry(
        self,
        text: str,
        account_names: Sequence[str],
        categories: Sequence[Category],
        today: date,
    ) -> RemoteParse:
        response = await self.client.responses.create(
            model=self.model,
            instructions="You are a careful bookkeeping assistant.",
            input=build_entry_prompt(text, account_names, categories, today),
            temperature=0.0,
            text={
                "format": {
                    "type": "json_schema",
                    "name": "parsed_entry",
                    "schema": ENTRY_SCHEMA,
                    "strict": True,
                }
            },
        )
        output = self._extract_output_text(response)
        if output is None:
            raise ValueError("Empty response from language model")
        return RemoteParse.model_validate(extract_json_object(output))

    async def suggest_category(
        self,
        description: str,
        candidates: Sequence[str],
        tx_type: TransactionType,
    ) -> str | None:
        if not candidates:
            return None
        response = await self.client.responses.create(
            model=self.model,
            instructions="You are a helpful financial assistant.",
            input=(
                f"From [{', '.join(candidates)}] pick the single {tx_type} category that best fits "
                f"\"{description}\". Return ONLY the category name."
            ),
            temperature=0.0,
        )
        output = self._extract_output_text(response)
        if output is None:
            return None
        category_name = output.strip().strip('"')
        if category_name not in candidates:
            logger.debug(f"LLM suggested unknown category '{category_name}'")
            return None
        return category_name

    @staticmethod
    def _extract_output_text(response: object) -> str | None:
        output_text = getattr(response, "output_text", None)
        if output_text:
            return output_text

        output = getattr(response, "output", None)
        if not output:
            return None

        parts: list[str] = []
        for item in output:
            content = getattr(item, "content", None)
            if not content:
                continue
            for block in content:
                if getattr(block, "type", None) in {"output_text", "text"}:
                    text = getattr(block, "text", None)
                    if text:
                        parts.append(text)

        return "".join(parts) or None
