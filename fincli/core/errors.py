"""
Exception types shared across FinCLI.

Validation and persistence failures are raised loudly; configuration
problems are recoverable and only carried as warnings.
"""

from typing import Optional


class FinCliError(Exception):
    """Base class for all FinCLI errors."""


class ValidationError(FinCliError, ValueError):
    """Raised when input is rejected at an API boundary."""


class PersistenceError(FinCliError):
    """Raised when a report, catalog or config file cannot be written."""
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RecoverableConfigError(FinCliError):
    """Configuration was missing or invalid and defaults were substituted.

    Never raised by ConfigStore.load(); it is attached to the store as
    a warning so callers can report it.
    """
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ReportNotFoundError(FinCliError):
    """Neither representation of a requested report exists."""
    def __init__(self, identifier: str):
        super().__init__(f"Report not found: {identifier}")
        self.identifier = identifier
