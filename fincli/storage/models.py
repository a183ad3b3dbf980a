"""
Data models for storage layer.

Defines expenses, allocation results and the versioned accounting record.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Sequence, Tuple

from fincli.core.errors import ValidationError

MIN_PRIORITY = 1
MAX_PRIORITY = 5


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _clean_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("expense name cannot be empty")
    return name.strip()


def _check_priority(priority: Any) -> None:
    if not _is_int(priority) or not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        raise ValidationError(
            f"priority must be an integer between {MIN_PRIORITY} and {MAX_PRIORITY}, got {priority!r}"
        )


def _clean_tags(tags: Iterable[Any]) -> Tuple[str, ...]:
    if isinstance(tags, str):
        raise ValidationError("tags must be a list of strings")
    cleaned = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError(f"tag must be a string, got {tag!r}")
        if tag.strip():
            cleaned.append(tag.strip())
    return tuple(cleaned)


def parse_tags(text: str) -> Tuple[str, ...]:
    """Split a comma-separated tag string, dropping blanks."""
    return tuple(tag.strip() for tag in text.split(",") if tag.strip())


@dataclass(frozen=True)
class Expense:
    """A known kind of expense, without an amount."""
    name: str
    priority: int
    tags: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'name', _clean_name(self.name))
        _check_priority(self.priority)
        object.__setattr__(self, 'tags', _clean_tags(self.tags))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "priority": self.priority, "tags": list(self.tags)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        return cls(name=data["name"], priority=data["priority"], tags=data.get("tags") or ())


@dataclass(frozen=True)
class ExpenseWithAmount:
    """An expense confirmed for this month, with its amount in tomans.

    Only constructed once the amount is known.
    """
    name: str
    priority: int
    amount: int
    tags: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'name', _clean_name(self.name))
        _check_priority(self.priority)
        if not _is_int(self.amount) or self.amount < 0:
            raise ValidationError(f"amount must be a non-negative integer, got {self.amount!r}")
        object.__setattr__(self, 'tags', _clean_tags(self.tags))

    @classmethod
    def from_expense(cls, expense: Expense, amount: int) -> "ExpenseWithAmount":
        return cls(name=expense.name, priority=expense.priority, amount=amount, tags=expense.tags)

    @property
    def expense(self) -> Expense:
        return Expense(name=self.name, priority=self.priority, tags=self.tags)

    def with_amount(self, amount: int) -> "ExpenseWithAmount":
        return ExpenseWithAmount.from_expense(self.expense, amount)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "priority": self.priority,
            "tags": list(self.tags),
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpenseWithAmount":
        return cls(
            name=data["name"],
            priority=data["priority"],
            amount=data["amount"],
            tags=data.get("tags") or (),
        )


@dataclass(frozen=True)
class AllocationBreakdown:
    """Result of splitting the remaining budget.

    Values may be negative when expenses exceed the budget.
    """
    investments: int
    savings: int
    daily_expenses: int
    daily_expenses_remaining: int

    @classmethod
    def zero(cls) -> "AllocationBreakdown":
        return cls(0, 0, 0, 0)

    @property
    def is_overspent(self) -> bool:
        return self.daily_expenses_remaining < 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "investments": self.investments,
            "savings": self.savings,
            "dailyExpenses": self.daily_expenses,
            "dailyExpensesRemaining": self.daily_expenses_remaining,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AllocationBreakdown":
        values = [data[key] for key in ("investments", "savings", "dailyExpenses", "dailyExpensesRemaining")]
        if not all(_is_int(v) for v in values):
            raise ValidationError("allocation values must be integers")
        return cls(*values)


class Provenance(Enum):
    """Where an AccountingRecord came from."""
    PRECISE = "precise"  # Structured copy or freshly computed
    RECONSTRUCTED = "reconstructed"  # Parsed from the human-readable report


@dataclass(frozen=True)
class AccountingRecord:
    """One version of a monthly accounting.

    Records are never mutated; an edit produces a new record under the
    next version name.
    """
    filename: str
    total_budget: int
    expenses: Tuple[ExpenseWithAmount, ...]
    allocation: AllocationBreakdown
    provenance: Provenance = field(default=Provenance.PRECISE, compare=False)

    def __post_init__(self):
        if not isinstance(self.filename, str) or not self.filename.strip():
            raise ValidationError("filename cannot be empty")
        if not _is_int(self.total_budget):
            raise ValidationError(f"total budget must be an integer, got {self.total_budget!r}")
        object.__setattr__(self, 'expenses', tuple(self.expenses))

    @property
    def is_reconstructed(self) -> bool:
        return self.provenance is Provenance.RECONSTRUCTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "totalBudget": self.total_budget,
            "expenses": [expense.to_dict() for expense in self.expenses],
            "allocation": self.allocation.to_dict(),
        }

    @classmethod
    def from_structured(cls, data: Dict[str, Any]) -> "AccountingRecord":
        """Canonical constructor from the structured (JSON) copy."""
        try:
            return cls(
                filename=data["filename"],
                total_budget=data["totalBudget"],
                expenses=tuple(ExpenseWithAmount.from_dict(e) for e in data["expenses"]),
                allocation=AllocationBreakdown.from_dict(data["allocation"]),
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"malformed structured report: {e}") from e

    @classmethod
    def from_human_readable(cls, text: str, filename: str) -> "AccountingRecord":
        """Approximate record parsed from the text report.

        Priorities collapse to 2 (critical) or 3 (discretionary), tags are
        empty and the allocation is all zeros. Recompute before use.
        """
        # Imported here; report_format depends on this module
        from .report_format import parse_report
        return parse_report(text, filename)


def total_amount(expenses: Sequence[ExpenseWithAmount]) -> int:
    return sum(expense.amount for expense in expenses)
