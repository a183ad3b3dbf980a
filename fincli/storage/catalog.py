"""Predefined expenses offered when creating an accounting."""

import json
import logging
from pathlib import Path
from typing import List, Sequence

from fincli.core.errors import PersistenceError, ValidationError
from .models import Expense

logger = logging.getLogger(__name__)


class ExpenseCatalog:
    """JSON list of ``{name, priority, tags}`` entries."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[Expense]:
        """Load expenses sorted by ascending priority.

        A missing or unreadable catalog yields an empty list.
        """
        if not self.path.exists():
            logger.debug("No expense catalog at %s", self.path)
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            if not isinstance(raw, list):
                raise ValidationError("expense catalog must be a list")
            expenses = [Expense.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("Error loading expenses from %s: %s", self.path, e)
            return []
        return sorted(expenses, key=lambda e: e.priority)

    def save(self, expenses: Sequence[Expense]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump([e.to_dict() for e in expenses], f, indent=2, ensure_ascii=False)
                f.write("\n")
        except OSError as e:
            raise PersistenceError(f"Error saving expenses: {e}", str(self.path)) from e

    def add(self, expenses: Sequence[Expense], new_expense: Expense) -> List[Expense]:
        """Append ``new_expense`` and persist the catalog.

        Names already in the catalog are not added twice.
        """
        if any(e.name == new_expense.name for e in expenses):
            return list(expenses)
        updated = [*expenses, new_expense]
        self.save(updated)
        return updated
