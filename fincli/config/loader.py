"""
Configuration management and loading.

Handles the budget allocation percentages persisted in the YAML config file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from fincli.core.errors import PersistenceError, RecoverableConfigError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocationConfig:
    """Percentages of the remaining budget sent to each bucket."""
    investments: int
    savings: int
    daily_expenses: int

    @property
    def total(self) -> int:
        return self.investments + self.savings + self.daily_expenses

    def to_dict(self) -> Dict[str, int]:
        return {
            "investments": self.investments,
            "savings": self.savings,
            "dailyExpenses": self.daily_expenses,
        }


DEFAULT_ALLOCATION = AllocationConfig(investments=30, savings=20, daily_expenses=50)
DEFAULT_VERSION = "1.0.0"
DEFAULT_DESCRIPTION = "Budget allocation percentages for FinCLI"


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration.

    ``version`` and ``description`` are passed through untouched.
    """
    budget_allocation: AllocationConfig = DEFAULT_ALLOCATION
    version: str = DEFAULT_VERSION
    description: str = DEFAULT_DESCRIPTION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "budgetAllocation": self.budget_allocation.to_dict(),
            "version": self.version,
            "description": self.description,
        }


def default_config() -> AppConfig:
    """Return the built-in configuration (30% / 20% / 50%)."""
    return AppConfig()


def _is_percentage(value: Any) -> bool:
    # bool is a subclass of int; YAML "yes" must not count as 1%
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_allocation(allocation: AllocationConfig) -> bool:
    """Return True iff all percentages are non-negative integers summing to 100."""
    values = (allocation.investments, allocation.savings, allocation.daily_expenses)
    return all(_is_percentage(v) for v in values) and sum(values) == 100


def _metadata(raw_config: dict, key: str, default: str) -> str:
    # "version:" with no value loads as None
    value = raw_config.get(key)
    return default if value is None else str(value)


def parse_app_config(raw_config: Any) -> AppConfig:
    """Build an AppConfig from a decoded YAML/JSON mapping.

    Args:
        raw_config: Decoded configuration document

    Returns:
        Validated AppConfig

    Raises:
        ValidationError: If the document shape or percentages are invalid
    """
    if not raw_config:
        raise ValidationError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValidationError("Configuration must be a mapping")

    if 'budgetAllocation' not in raw_config:
        raise ValidationError("Missing required 'budgetAllocation' section")

    allocation_data = raw_config['budgetAllocation']
    if not isinstance(allocation_data, dict):
        raise ValidationError("'budgetAllocation' must be a dictionary")

    for key in ('investments', 'savings', 'dailyExpenses'):
        if key not in allocation_data:
            raise ValidationError(f"Missing required 'budgetAllocation.{key}'")
        if not _is_percentage(allocation_data[key]):
            raise ValidationError(f"'budgetAllocation.{key}' must be a non-negative integer")

    allocation = AllocationConfig(
        investments=allocation_data['investments'],
        savings=allocation_data['savings'],
        daily_expenses=allocation_data['dailyExpenses'],
    )
    if allocation.total != 100:
        raise ValidationError(
            f"Budget allocation percentages sum to {allocation.total}%, not 100%"
        )

    return AppConfig(
        budget_allocation=allocation,
        version=_metadata(raw_config, 'version', DEFAULT_VERSION),
        description=_metadata(raw_config, 'description', DEFAULT_DESCRIPTION),
    )


@dataclass
class ConfigStore:
    """Loads and saves the allocation configuration file.

    A broken or missing file never stops the program: ``load`` falls back
    to the defaults and leaves the reason in ``warning``.
    """
    path: Path
    warning: Optional[RecoverableConfigError] = field(default=None, init=False)

    def __post_init__(self):
        self.path = Path(self.path)

    def load(self) -> AppConfig:
        """Load configuration, substituting defaults when it is unusable.

        Returns:
            The persisted AppConfig, or the default one
        """
        self.warning = None
        if not self.path.exists():
            return self._fallback("Config file not found, using default configuration")

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw_config = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            return self._fallback(f"Config file {self.path} is unreadable ({e}), using default configuration")

        try:
            return parse_app_config(raw_config)
        except ValidationError as e:
            return self._fallback(f"{e}. Using default values")

    def save(self, config: AppConfig) -> None:
        """Persist configuration.

        Raises:
            ValidationError: If the allocation does not sum to 100
            PersistenceError: If the file cannot be written
        """
        if not self.validate(config.budget_allocation):
            raise ValidationError(
                "Budget allocation percentages must be non-negative integers summing to 100"
            )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config.to_dict(), f, sort_keys=False, allow_unicode=True)
        except OSError as e:
            raise PersistenceError(f"Error saving configuration: {e}", str(self.path)) from e
        logger.info("Configuration saved to %s", self.path)

    @staticmethod
    def validate(allocation: AllocationConfig) -> bool:
        return validate_allocation(allocation)

    def _fallback(self, message: str) -> AppConfig:
        self.warning = RecoverableConfigError(message, str(self.path))
        logger.warning(message)
        return default_config()
