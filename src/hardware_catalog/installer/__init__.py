"""Bundle installation: archive extractors and the installer."""

from pathlib import Path

from hardware_catalog.installer.archives import TarExtractor, ZipExtractor
from hardware_catalog.installer.base import ArchiveExtractionError, Extractor
from hardware_catalog.installer.installer import ArchiveInstaller

_TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.xz", ".tar.bz2")


def get_extractor(archive_path: Path) -> Extractor:
    """Factory function to pick an extractor from the bundle's file name."""
    name = archive_path.name.lower()
    match name:
        case _ if name.endswith(".zip"):
            return ZipExtractor()
        case _ if name.endswith(_TAR_SUFFIXES):
            return TarExtractor()
        case _:
            raise ValueError(f"Unknown bundle format: {archive_path.name!r}. Use .zip or .tar(.gz|.xz).")


__all__ = [
    "ArchiveExtractionError",
    "ArchiveInstaller",
    "Extractor",
    "TarExtractor",
    "ZipExtractor",
    "get_extractor",
]
