from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date

from quick_entry.models import Category, RemoteParse, TransactionType


class RemoteParser(ABC):
    @abstractmethod
    async def parse_entry(
        self,
        text: str,
        account_names: Sequence[str],
        categories: Sequence[Category],
        today: date,
    ) -> RemoteParse:
        """Parse free-form bookkeeping text. Raises on transport or format errors."""
        pass

    @abstractmethod
    async def suggest_category(
        self,
        description: str,
        candidates: Sequence[str],
        tx_type: TransactionType,
    ) -> str | None:
        """Pick one of ``candidates`` for the description, or None."""
        pass
