"""
Budget allocation calculations.

Splits what is left of the monthly budget after critical expenses into
investments, savings and daily spending.

Calculation Order:
1. Critical expenses (priority 1-2) are taken off the total budget
2. Each percentage is applied to the remainder independently, rounding down
3. Discretionary expenses (priority 3-5) are taken off the daily share
"""

from typing import List, Sequence, Tuple

from fincli.config.loader import AllocationConfig
from fincli.storage.models import AllocationBreakdown, ExpenseWithAmount, total_amount

CRITICAL_MAX_PRIORITY = 2


def is_critical(expense: ExpenseWithAmount) -> bool:
    return expense.priority <= CRITICAL_MAX_PRIORITY


def split_by_priority(
    expenses: Sequence[ExpenseWithAmount]
) -> Tuple[List[ExpenseWithAmount], List[ExpenseWithAmount]]:
    """Partition expenses into (critical, discretionary), keeping input order."""
    critical = [e for e in expenses if is_critical(e)]
    discretionary = [e for e in expenses if not is_critical(e)]
    return critical, discretionary


def _percent_of(amount: int, percentage: int) -> int:
    # Integer floor division matches floor() for negative amounts too
    return (amount * percentage) // 100


def remaining_after_critical(total_budget: int, expenses: Sequence[ExpenseWithAmount]) -> int:
    """Budget left once critical expenses are paid. May be negative."""
    critical, _ = split_by_priority(expenses)
    return total_budget - total_amount(critical)


def compute_allocation(
    total_budget: int,
    expenses: Sequence[ExpenseWithAmount],
    config: AllocationConfig
) -> AllocationBreakdown:
    """Compute the allocation breakdown for a month.

    Inputs are trusted; validation happens before this is called. The three
    shares are floored independently, so they can differ from the remainder
    by a few units. Negative remainders propagate instead of being rejected.

    Args:
        total_budget: Total monthly budget in tomans
        expenses: Expenses with amounts, in any order
        config: Allocation percentages

    Returns:
        AllocationBreakdown for the given inputs
    """
    _, discretionary = split_by_priority(expenses)
    remaining = remaining_after_critical(total_budget, expenses)

    investments = _percent_of(remaining, config.investments)
    savings = _percent_of(remaining, config.savings)
    daily_expenses = _percent_of(remaining, config.daily_expenses)

    return AllocationBreakdown(
        investments=investments,
        savings=savings,
        daily_expenses=daily_expenses,
        daily_expenses_remaining=daily_expenses - total_amount(discretionary),
    )
