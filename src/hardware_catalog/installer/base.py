"""
Extractor Protocol — Base interface for archive formats.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


class ArchiveExtractionError(RuntimeError):
    """Raised when a bundle cannot be extracted safely."""


@runtime_checkable
class Extractor(Protocol):
    """
    Protocol that all archive extractors must implement.

    Extractors unpack a module bundle into a destination directory and
    return the files written. Any failure is raised as ArchiveExtractionError.
    """

    def extract(self, archive_path: Path, dest_dir: Path) -> list[Path]:
        """Extract ``archive_path`` into ``dest_dir``."""
        ...
