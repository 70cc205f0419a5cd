"""
On-disk descriptor loading.

Each ``*.json`` file in a directory holds one module descriptor. Files are
read one at a time and a broken file is skipped on its own, so one bad
descriptor never hides the rest of the directory.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles

from hardware_catalog.models.descriptor import (
    AvailableType,
    HardwareModuleDescriptor,
    InvalidDescriptorError,
)

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Descriptors loaded from a directory plus the files that failed."""

    descriptors: list[HardwareModuleDescriptor] = field(default_factory=list)
    failures: dict[Path, str] = field(default_factory=dict)  # path -> error


class DescriptorLoader:
    """Loads module descriptors from a single directory."""

    def __init__(self, directory: Path, label: str = "modules"):
        self.directory = directory
        self.label = label

    def _list_descriptor_files(self) -> list[Path]:
        """Create the directory if needed and list its JSON files in name order."""
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"[{self.label}] Created missing directory {self.directory}")
            return []
        return sorted(p for p in self.directory.glob("*.json") if p.is_file())

    async def _load_file(self, path: Path) -> HardwareModuleDescriptor:
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
        return HardwareModuleDescriptor.from_dict(
            json.loads(content), available_type=AvailableType.AVAILABLE
        )

    async def load(self) -> LoadResult:
        """
        Read every descriptor file in the directory.

        Returns:
            A LoadResult. An unreadable directory yields an empty result.
        """
        result = LoadResult()
        try:
            paths = self._list_descriptor_files()
        except OSError as e:
            logger.warning(f"[{self.label}] Cannot read {self.directory}: {e}")
            return result

        for path in paths:
            try:
                result.descriptors.append(await self._load_file(path))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError, InvalidDescriptorError) as e:
                result.failures[path] = str(e)
                logger.warning(f"[{self.label}] Skipping malformed descriptor {path.name}: {e}")

        logger.debug(
            f"[{self.label}] Loaded {len(result.descriptors)} descriptors "
            f"({len(result.failures)} skipped) from {self.directory}"
        )
        return result


def clean_invalid_descriptors(directories: list[Path]) -> int:
    """Remove empty or corrupted JSON descriptor files; return how many were removed."""
    count = 0
    for directory in directories:
        if not directory.is_dir():
            continue
        for path in directory.glob("*.json"):
            try:
                if path.stat().st_size == 0:
                    path.unlink()
                    logger.info(f"Removed empty file: {path}")
                    count += 1
                    continue

                try:
                    HardwareModuleDescriptor.from_dict(
                        json.loads(path.read_text(encoding="utf-8")),
                        available_type=AvailableType.AVAILABLE,
                    )
                except (json.JSONDecodeError, UnicodeDecodeError, InvalidDescriptorError):
                    path.unlink()
                    logger.info(f"Removed corrupted descriptor: {path}")
                    count += 1
            except OSError as e:
                logger.warning(f"Error checking {path}: {e}")
    logger.info(f"Cleanup complete. Removed {count} files.")
    return count
