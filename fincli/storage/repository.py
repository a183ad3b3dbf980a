"""
Repository for accounting reports.

Every report version is stored twice: an exact JSON copy and the
human-readable text report rendered from it.
"""

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from fincli.config.loader import AllocationConfig, DEFAULT_ALLOCATION
from fincli.core.errors import PersistenceError, ReportNotFoundError, ValidationError
from .layout import StorageLayout, get_layout
from .models import AccountingRecord
from .report_format import render_report

logger = logging.getLogger(__name__)


class ReportStore:
    """Repository for reading and writing accounting reports.

    Writes are all-or-nothing across the two copies: if either file fails,
    whatever was written for that version is removed again.
    """

    def __init__(self, layout: StorageLayout, allocation_config: AllocationConfig = DEFAULT_ALLOCATION):
        """Initialize the store.

        Args:
            layout: Locations of the text and JSON directories
            allocation_config: Percentages printed in the text reports
        """
        self.layout = layout
        self.allocation_config = allocation_config

    def write(self, record: AccountingRecord, config: Optional[AllocationConfig] = None) -> Path:
        """Persist a record in both formats under ``record.filename``.

        Args:
            record: Record whose allocation is already computed
            config: Percentages for the text summary (defaults to the store's)

        Returns:
            Path of the human-readable report

        Raises:
            ValidationError: If the budget is not positive or the version exists
            PersistenceError: If either file cannot be written
        """
        if record.total_budget <= 0:
            raise ValidationError("total budget must be > 0")

        stem = record.filename
        data_path = self.layout.data_path(stem)
        report_path = self.layout.report_path(stem)
        if data_path.exists() or report_path.exists():
            raise ValidationError(f"Report version already exists: {stem}")

        contents = [
            (data_path, json.dumps(record.to_dict(), indent=2, ensure_ascii=False) + "\n"),
            (report_path, render_report(record, config or self.allocation_config)),
        ]

        staged = []
        published = []
        try:
            self.layout.ensure()
            for path, content in contents:
                temp_path = path.with_name(f".{path.name}.tmp")
                staged.append((temp_path, path))
                with open(temp_path, 'w', encoding='utf-8', newline='') as f:
                    f.write(content)
            for temp_path, path in staged:
                os.replace(temp_path, path)
                published.append(path)
        except OSError as e:
            self._discard([temp for temp, _ in staged] + published)
            raise PersistenceError(f"Error saving report {stem}: {e}", str(report_path)) from e
        except Exception:
            self._discard([temp for temp, _ in staged] + published)
            raise

        logger.info("Report saved to %s and %s", report_path, data_path)
        return report_path

    @staticmethod
    def _discard(paths: List[Path]) -> None:
        for path in paths:
            with contextlib.suppress(OSError):
                path.unlink()

    def list(self) -> List[str]:
        """List human-readable report file names."""
        directory = self.layout.reports_dir
        if not directory.is_dir():
            return []
        return sorted(
            entry.name for entry in directory.iterdir()
            if entry.is_file()
            and entry.name.endswith(self.layout.report_extension)
            and not entry.name.startswith(".")
        )

    def read_raw(self, identifier: str) -> str:
        """Return the human-readable report exactly as stored.

        Raises:
            ReportNotFoundError: If the text report does not exist
        """
        path = self.layout.report_path(self._stem(identifier))
        if not path.is_file():
            raise ReportNotFoundError(identifier)
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()

    def load(self, identifier: str) -> AccountingRecord:
        """Load a record, preferring the structured copy.

        When the JSON copy is missing or unreadable the record is rebuilt
        from the text report. Such records are approximate (see
        ``AccountingRecord.from_human_readable``) and carry
        ``Provenance.RECONSTRUCTED``.

        Raises:
            ReportNotFoundError: If neither copy exists
        """
        stem = self._stem(identifier)
        data_path = self.layout.data_path(stem)
        if data_path.is_file():
            try:
                with open(data_path, 'r', encoding='utf-8') as f:
                    return AccountingRecord.from_structured(json.load(f))
            except (OSError, ValueError) as e:
                logger.warning("Structured copy %s is unreadable (%s), falling back to text", data_path, e)

        return AccountingRecord.from_human_readable(self.read_raw(stem), stem)

    def update(self, identifier: str, raw_content: str) -> None:
        """Overwrite the human-readable copy only.

        The structured copy is left alone, so the two may disagree
        afterwards.

        Raises:
            ReportNotFoundError: If the text report does not exist
            PersistenceError: If the file cannot be written
        """
        path = self.layout.report_path(self._stem(identifier))
        if not path.is_file():
            raise ReportNotFoundError(identifier)
        try:
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(raw_content)
        except OSError as e:
            raise PersistenceError(f"Error updating report: {e}", str(path)) from e
        logger.info("Report updated: %s", path)

    def _stem(self, identifier: str) -> str:
        for extension in (self.layout.report_extension, self.layout.data_extension):
            if identifier.endswith(extension):
                return identifier[:-len(extension)]
        return identifier


def get_report_store(
    reports_dir: Path,
    data_dir: Path,
    allocation_config: AllocationConfig = DEFAULT_ALLOCATION
) -> ReportStore:
    """Create a ReportStore over the given directories, creating them if needed.

    Args:
        reports_dir: Directory for human-readable reports
        data_dir: Directory for structured reports
        allocation_config: Percentages printed in the text reports

    Returns:
        An instance of ReportStore
    """
    return ReportStore(get_layout(reports_dir, data_dir), allocation_config)
