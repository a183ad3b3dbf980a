"""
Accounting create and revise flows.

Ties the allocation engine, version naming and report storage together.
Every write recomputes the allocation from the record's own budget and
expenses, so a stored allocation always matches its inputs.
"""

import logging
import os
from typing import List, Optional, Sequence

from fincli.config.loader import AllocationConfig
from fincli.storage.models import AccountingRecord, AllocationBreakdown, ExpenseWithAmount
from fincli.storage.repository import ReportStore
from fincli.storage.versioning import VersionResolver
from .allocation import compute_allocation, remaining_after_critical
from .errors import ValidationError

logger = logging.getLogger(__name__)

# The base name becomes a file name in both report directories
_PATH_SEPARATORS = {"/", "\\", os.sep} | ({os.altsep} if os.altsep else set())


def _check_budget(total_budget: int) -> None:
    if not isinstance(total_budget, int) or isinstance(total_budget, bool) or total_budget <= 0:
        raise ValidationError("total budget must be a positive integer")


def build_record(
    filename: str,
    total_budget: int,
    expenses: Sequence[ExpenseWithAmount],
    allocation_config: AllocationConfig
) -> AccountingRecord:
    """Create a record with a freshly computed allocation."""
    return AccountingRecord(
        filename=filename,
        total_budget=total_budget,
        expenses=tuple(expenses),
        allocation=compute_allocation(total_budget, expenses, allocation_config),
    )


def allocation_warnings(
    total_budget: int,
    expenses: Sequence[ExpenseWithAmount],
    allocation: AllocationBreakdown
) -> List[str]:
    """Describe negative results; the numbers themselves are left as computed."""
    warnings = []
    remaining = remaining_after_critical(total_budget, expenses)
    if remaining < 0:
        warnings.append(
            f"Critical expenses exceed the budget by {-remaining:,} tomans"
        )
    if allocation.is_overspent:
        warnings.append(
            f"Other expenses exceed the daily-use share by {-allocation.daily_expenses_remaining:,} tomans"
        )
    return warnings


def _write(
    record: AccountingRecord,
    allocation_config: AllocationConfig,
    store: ReportStore
) -> AccountingRecord:
    for message in allocation_warnings(record.total_budget, record.expenses, record.allocation):
        logger.warning("%s: %s", record.filename, message)
    store.write(record, allocation_config)
    return record


def create_accounting(
    base: str,
    total_budget: int,
    expenses: Sequence[ExpenseWithAmount],
    allocation_config: AllocationConfig,
    store: ReportStore,
    resolver: VersionResolver
) -> AccountingRecord:
    """Create and persist the first free version of a new accounting.

    Args:
        base: Report name chosen by the user, without version suffix
        total_budget: Total monthly budget in tomans
        expenses: Expenses that apply this month
        allocation_config: Percentages to allocate with
        store: Report store to write to
        resolver: Version resolver over the same directories

    Returns:
        The written AccountingRecord

    Raises:
        ValidationError: If the name or budget is invalid
        PersistenceError: If the report cannot be written
    """
    if not base or not base.strip():
        raise ValidationError("report name cannot be empty")
    if any(sep in base for sep in _PATH_SEPARATORS):
        raise ValidationError(f"report name cannot contain a path separator: {base!r}")
    _check_budget(total_budget)

    filename = resolver.next_version_name(base.strip())
    record = build_record(filename, total_budget, expenses, allocation_config)
    return _write(record, allocation_config, store)


def revise_accounting(
    previous: AccountingRecord,
    allocation_config: AllocationConfig,
    store: ReportStore,
    resolver: VersionResolver,
    total_budget: Optional[int] = None,
    expenses: Optional[Sequence[ExpenseWithAmount]] = None
) -> AccountingRecord:
    """Write an edited copy of ``previous`` as the next free version.

    The previous version's files are not touched. The allocation is
    always recomputed, which also repairs the zeroed allocation of a
    reconstructed record.

    Raises:
        ValidationError: If the resulting budget is not positive
        PersistenceError: If the report cannot be written
    """
    new_budget = previous.total_budget if total_budget is None else total_budget
    new_expenses = previous.expenses if expenses is None else tuple(expenses)
    _check_budget(new_budget)

    filename = resolver.bump_version_name(previous.filename)
    record = build_record(filename, new_budget, new_expenses, allocation_config)
    return _write(record, allocation_config, store)
