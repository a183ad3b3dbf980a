"""
Storage directory management.

Reports are kept twice: a human-readable copy and a structured copy,
in two parallel directories sharing the same ``<base>-v<N>`` stems.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Tuple

from fincli.config import settings


@dataclass(frozen=True)
class StorageLayout:
    """Locations of the two report directories."""
    reports_dir: Path = settings.REPORTS_DIR
    data_dir: Path = settings.DATA_DIR
    report_extension: str = settings.REPORT_EXTENSION
    data_extension: str = settings.DATA_EXTENSION

    def __post_init__(self):
        object.__setattr__(self, 'reports_dir', Path(self.reports_dir))
        object.__setattr__(self, 'data_dir', Path(self.data_dir))

    def ensure(self) -> None:
        """Create both directories if they don't exist."""
        for directory in self.directories():
            directory.mkdir(parents=True, exist_ok=True)

    def directories(self) -> Tuple[Path, Path]:
        return self.reports_dir, self.data_dir

    def report_path(self, stem: str) -> Path:
        return self.reports_dir / f"{stem}{self.report_extension}"

    def data_path(self, stem: str) -> Path:
        return self.data_dir / f"{stem}{self.data_extension}"

    def iter_names(self) -> Iterator[str]:
        """Yield every file name in both directories."""
        for directory in self.directories():
            if not directory.is_dir():
                continue
            for entry in directory.iterdir():
                if entry.is_file():
                    yield entry.name


def get_layout(reports_dir: Path = settings.REPORTS_DIR, data_dir: Path = settings.DATA_DIR) -> StorageLayout:
    """Create a StorageLayout with both directories present.

    Args:
        reports_dir: Directory for human-readable reports
        data_dir: Directory for structured reports

    Returns:
        StorageLayout whose directories exist
    """
    layout = StorageLayout(reports_dir=Path(reports_dir), data_dir=Path(data_dir))
    layout.ensure()
    return layout
