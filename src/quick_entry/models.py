from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TransactionType = Literal["income", "expense", "transfer"]


class Account(BaseModel):
    id: str
    name: str


class Category(BaseModel):
    name: str
    type: Optional[TransactionType] = None # None = usable for any type
    id: Optional[str] = None


class ParsedInput(BaseModel):
    amount: Optional[float] = None
    type: Optional[TransactionType] = None
    account_name: Optional[str] = None
    to_account_name: Optional[str] = None
    category_name: Optional[str] = None
    date: str
    description: str = ""
    source: Literal["local", "remote"] = "local"


class RemoteParse(BaseModel):
    """Structured payload returned by the remote language service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    amount: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    type: Optional[TransactionType] = None
    account_name: Optional[str] = Field(default=None, alias="accountName")
    to_account_name: Optional[str] = Field(default=None, alias="toAccountName")
    category_name: Optional[str] = Field(default=None, alias="categoryName")
    date: Optional[str] = None

    @field_validator(
        "description", "account_name", "to_account_name", "category_name", "date",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value


class LearnedPref(BaseModel):
    type: TransactionType
    account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    category: Optional[str] = None
    updated_at: datetime
    use_count: int = Field(default=0, ge=0)


class Prefill(BaseModel):
    category: Optional[str] = None
    account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    source: Optional[Literal["learned", "parsed"]] = None


class Submission(BaseModel):
    type: TransactionType
    amount: float = Field(gt=0)
    description: str = ""
    category: Optional[str] = None
    account_id: str
    to_account_id: Optional[str] = None
    date: Optional[str] = None


class TransactionDraft(BaseModel):
    type: TransactionType
    amount: float
    description: str
    category: str
    account_id: str
    to_account_id: Optional[str] = None
    date: str
