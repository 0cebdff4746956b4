from collections.abc import Generator
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from quick_entry.models import Category
from quick_entry.parsers.llm import LLMParser, build_entry_prompt, extract_json_object

CATEGORIES = [
    Category(name="Food", type="expense"),
    Category(name="Salary", type="income"),
]


@pytest.fixture
def mock_openai_client() -> Generator[MagicMock, None, None]:
    with patch("quick_entry.parsers.llm.AsyncOpenAI") as mock:
        yield mock


@pytest.mark.anyio
async def test_parse_entry(mock_openai_client: MagicMock) -> None:
    mock_instance = mock_openai_client.return_value
    mock_instance.responses.create = AsyncMock(return_value=MagicMock(
        output_text='```json\n{"amount": 180, "type": "Expense", "accountName": "Cash", '
                    '"toAccountName": "", "categoryName": "Food", "date": "2024-03-10", '
                    '"description": "lunch"}\n```'
    ))

    parser = LLMParser(api_key="sk-fake", model="gpt-4o-mini")
    result = await parser.parse_entry("lunch 180 cash", ["Cash", "Bank"], CATEGORIES, date(2024, 3, 10))

    assert result.amount == 180
    assert result.type == "expense"
    assert result.account_name == "Cash"
    assert result.to_account_name is None
    assert result.category_name == "Food"

    mock_instance.responses.create.assert_awaited_once()
    kwargs = mock_instance.responses.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["text"]["format"]["type"] == "json_schema"


@pytest.mark.anyio
async def test_parse_entry_rejects_garbage(mock_openai_client: MagicMock) -> None:
    mock_instance = mock_openai_client.return_value
    mock_instance.responses.create = AsyncMock(return_value=MagicMock(output_text="sorry, no idea"))

    parser = LLMParser(api_key="sk-fake")
    with pytest.raises(ValueError):
        await parser.parse_entry("???", [], CATEGORIES, date(2024, 3, 10))


@pytest.mark.anyio
async def test_suggest_category(mock_openai_client: MagicMock) -> None:
    mock_instance = mock_openai_client.return_value
    mock_instance.responses.create = AsyncMock(return_value=MagicMock(output_text=' "Food" '))

    parser = LLMParser(api_key="sk-fake")
    assert await parser.suggest_category("ramen", ["Food", "Transport"], "expense") == "Food"


@pytest.mark.anyio
async def test_suggest_category_outside_candidates(mock_openai_client: MagicMock) -> None:
    mock_instance = mock_openai_client.return_value
    mock_instance.responses.create = AsyncMock(return_value=MagicMock(output_text="Groceries"))

    parser = LLMParser(api_key="sk-fake")
    assert await parser.suggest_category("ramen", ["Food", "Transport"], "expense") is None
    assert await parser.suggest_category("ramen", [], "expense") is None
    mock_instance.responses.create.assert_awaited_once()


def test_extract_output_text_from_blocks() -> None:
    response = SimpleNamespace(
        output_text=None,
        output=[SimpleNamespace(content=[
            SimpleNamespace(type="output_text", text='{"amount": '),
            SimpleNamespace(type="output_text", text="5}"),
        ])],
    )
    assert LLMParser._extract_output_text(response) == '{"amount": 5}'


def test_extract_json_object() -> None:
    assert extract_json_object('{"amount": 1}') == {"amount": 1}
    assert extract_json_object('Here you go:\n```json\n{"amount": 2}\n```') == {"amount": 2}
    with pytest.raises(ValueError):
        extract_json_object("no braces here")
    with pytest.raises(ValueError):
        extract_json_object("{broken")


def test_prompt_lists_accounts_and_categories() -> None:
    prompt = build_entry_prompt("lunch", ["Cash", "Bank"], CATEGORIES, date(2024, 3, 10))

    assert "2024-03-10 (Sunday)" in prompt
    assert "[Cash, Bank]" in prompt
    assert "Income categories: [Salary]" in prompt
    assert "Expense categories: [Food]" in prompt
