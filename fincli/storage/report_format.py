"""
Human-readable report layout.

Renders an AccountingRecord as the plain-text monthly report and parses
such a report back into an approximate record.
"""

import logging
import re
from typing import List, Optional, Sequence

from fincli.config.loader import AllocationConfig
from fincli.core.allocation import split_by_priority
from .models import AccountingRecord, AllocationBreakdown, ExpenseWithAmount, Provenance

logger = logging.getLogger(__name__)

TITLE_PREFIX = "Monthly Accounting – "
BUDGET_PREFIX = "Total budget:"
CRITICAL_HEADER = "Priority 1 & 2 (Critical / Essential)"
DISCRETIONARY_HEADER = "Priority 3–5 (Postponable / Comfort / Luxury)"
SUMMARY_HEADER = "Allocation Summary"

# Priorities assigned to parsed lines; the text keeps only the section
RECONSTRUCTED_CRITICAL_PRIORITY = 2
RECONSTRUCTED_DISCRETIONARY_PRIORITY = 3

_BULLET_LINE = re.compile(r"^\s*•\s*(?P<name>.+)\s+–\s+(?P<amount>[^–]+?)\s*$")
_NON_DIGITS = re.compile(r"\D")


def format_amount(amount: int) -> str:
    """Thousands-grouped integer, e.g. 1,460,000."""
    return f"{amount:,}"


def _underline(header: str) -> str:
    return "-" * len(header)


def _expense_lines(expenses: Sequence[ExpenseWithAmount]) -> List[str]:
    return [f"• {e.name} – {format_amount(e.amount)}" for e in expenses]


def render_report(record: AccountingRecord, config: AllocationConfig) -> str:
    """Render the human-readable report for a record.

    Args:
        record: Accounting record to render
        config: Percentages shown in the allocation summary

    Returns:
        Report text, newline terminated
    """
    critical, discretionary = split_by_priority(record.expenses)
    allocation = record.allocation

    lines = [
        f"{TITLE_PREFIX}{record.filename}",
        f"{BUDGET_PREFIX} {format_amount(record.total_budget)} tomans",
        "",
        CRITICAL_HEADER,
        _underline(CRITICAL_HEADER),
        *_expense_lines(critical),
        "",
        DISCRETIONARY_HEADER,
        _underline(DISCRETIONARY_HEADER),
        *_expense_lines(discretionary),
        "",
        SUMMARY_HEADER,
        _underline(SUMMARY_HEADER),
        f"Investments ({config.investments}%): {format_amount(allocation.investments)}",
        f"Savings      ({config.savings}%): {format_amount(allocation.savings)}",
        f"Daily use    ({config.daily_expenses}%): {format_amount(allocation.daily_expenses)}"
        f"  (after other expenses → {format_amount(allocation.daily_expenses_remaining)})",
    ]
    return "\n".join(lines) + "\n"


def parse_digits(text: str) -> int:
    """Integer from the digits in ``text``; 0 if there are none."""
    digits = _NON_DIGITS.sub("", text)
    return int(digits) if digits else 0


def parse_report(text: str, filename: str) -> AccountingRecord:
    """Reconstruct an approximate AccountingRecord from report text.

    Always succeeds. Priorities are inferred from the section (2 or 3),
    tags are empty and the allocation is zeroed; callers must recompute
    the allocation before showing or saving it.

    Args:
        text: Human-readable report content
        filename: Version-qualified name of the report

    Returns:
        AccountingRecord with RECONSTRUCTED provenance
    """
    total_budget = 0
    expenses = []
    section_priority: Optional[int] = None

    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith(BUDGET_PREFIX):
            total_budget = parse_digits(stripped[len(BUDGET_PREFIX):])
        elif stripped.startswith("Priority 1"):
            section_priority = RECONSTRUCTED_CRITICAL_PRIORITY
        elif stripped.startswith("Priority 3"):
            section_priority = RECONSTRUCTED_DISCRETIONARY_PRIORITY
        elif stripped.startswith(SUMMARY_HEADER):
            section_priority = None
        elif section_priority is not None:
            match = _BULLET_LINE.match(line)
            if match and match.group("name").strip():
                expenses.append(ExpenseWithAmount(
                    name=match.group("name"),
                    priority=section_priority,
                    amount=parse_digits(match.group("amount")),
                ))

    logger.warning("Reconstructed %s from its text report; values are approximate", filename)
    return AccountingRecord(
        filename=filename,
        total_budget=total_budget,
        expenses=tuple(expenses),
        allocation=AllocationBreakdown.zero(),
        provenance=Provenance.RECONSTRUCTED,
    )
