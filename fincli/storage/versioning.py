"""
Version naming for reports.

A version is taken when ``<base>-v<N>.<ext>`` exists in either report
directory, so names stay unique across both copies even after a
partial write.
"""

import re
from typing import Optional, Set, Tuple

from .layout import StorageLayout

_VERSIONED_NAME = re.compile(r"^(?P<base>.+)-v(?P<version>\d+)$")


def split_version(name: str) -> Optional[Tuple[str, int]]:
    """Return (base, version) for ``<base>-v<N>`` names, else None."""
    match = _VERSIONED_NAME.match(name)
    if not match:
        return None
    return match.group("base"), int(match.group("version"))


def format_version(base: str, version: int) -> str:
    return f"{base}-v{version}"


class VersionResolver:
    """Computes unused version names for a report base name.

    Only reads the directories (creating them if missing); nothing is
    reserved, so the caller must write before resolving again.
    """

    def __init__(self, layout: StorageLayout):
        self.layout = layout

    def existing_versions(self, base: str) -> Set[int]:
        """Versions of ``base`` present in either directory."""
        self.layout.ensure()
        pattern = re.compile(rf"^{re.escape(base)}-v(\d+)\.[^.]+$")
        versions = set()
        for name in self.layout.iter_names():
            match = pattern.match(name)
            if match:
                versions.add(int(match.group(1)))
        return versions

    def next_version_name(self, base: str) -> str:
        """Return ``base-v<max+1>``, or ``base-v1`` when none exist."""
        versions = self.existing_versions(base)
        return format_version(base, max(versions, default=0) + 1)

    def bump_version_name(self, current: str) -> str:
        """Return the first free version after ``current``.

        Non-versioned names are treated as a base name.
        """
        parsed = split_version(current)
        if parsed is None:
            return self.next_version_name(current)

        base, version = parsed
        taken = self.existing_versions(base)
        candidate = version + 1
        while candidate in taken:
            candidate += 1
        return format_version(base, candidate)
