from datetime import date

from pydantic import BaseModel, Field

from quick_entry.models import Account, Category, Submission, TransactionType


class ParseRequest(BaseModel):
    text: str
    accounts: list[Account] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    today: date | None = None
    local_only: bool = False


class CategorizeRequest(BaseModel):
    description: str
    type: TransactionType = "expense"
    categories: list[Category] = Field(default_factory=list)
    local_only: bool = False


class CategorizeResponse(BaseModel):
    category: str


class PrefillRequest(BaseModel):
    description: str
    type: TransactionType = "expense"
    accounts: list[Account] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    touched: list[str] = Field(default_factory=list)
    today: date | None = None
    local_only: bool = False


class LearnRequest(BaseModel):
    submission: Submission
    accounts: list[Account] = Field(default_factory=list)
    today: date | None = None
