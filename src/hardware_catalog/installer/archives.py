"""
ZIP and TAR extractors for module bundles.

Members are validated before anything is written: absolute paths, ``..``
traversal and links are rejected.
"""

import logging
import lzma
import shutil
import stat
import tarfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath

from hardware_catalog.installer.base import ArchiveExtractionError

logger = logging.getLogger(__name__)


def _member_path(name: str) -> Path:
    """Validate an archive member name and return it as a relative path."""
    posix = PurePosixPath(name.replace("\\", "/"))
    if posix.is_absolute() or ".." in posix.parts or (posix.parts and ":" in posix.parts[0]):
        raise ArchiveExtractionError(f"Unsafe path in archive: {name}")
    return Path(*posix.parts)


class ZipExtractor:
    """Extracts ``.zip`` bundles."""

    def extract(self, archive_path: Path, dest_dir: Path) -> list[Path]:
        if not archive_path.exists():
            raise ArchiveExtractionError(f"Bundle not found: {archive_path}")

        extracted: list[Path] = []
        try:
            with zipfile.ZipFile(archive_path) as archive:
                members = []
                for member in archive.infolist():
                    mode = (member.external_attr >> 16) & 0xFFFF
                    if stat.S_IFMT(mode) == stat.S_IFLNK:
                        raise ArchiveExtractionError(f"Unsafe link in archive: {member.filename}")
                    members.append((member, _member_path(member.filename)))

                dest_dir.mkdir(parents=True, exist_ok=True)
                for member, member_path in members:
                    target = dest_dir / member_path
                    if member.is_dir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with archive.open(member) as source, target.open("wb") as out:
                        shutil.copyfileobj(source, out)
                    extracted.append(target)
        except ArchiveExtractionError:
            raise
        except (zipfile.BadZipFile, zlib.error, RuntimeError, EOFError, OSError) as e:
            raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

        logger.debug(f"[ZIP] Extracted {len(extracted)} files from {archive_path.name}")
        return extracted


class TarExtractor:
    """Extracts ``.tar``, ``.tar.gz``/``.tgz`` and ``.tar.xz`` bundles."""

    def extract(self, archive_path: Path, dest_dir: Path) -> list[Path]:
        if not archive_path.exists():
            raise ArchiveExtractionError(f"Bundle not found: {archive_path}")

        extracted: list[Path] = []
        try:
            with tarfile.open(archive_path, mode="r:*") as archive:
                members = []
                for member in archive.getmembers():
                    member_path = _member_path(member.name)
                    if member.issym() or member.islnk():
                        raise ArchiveExtractionError(f"Unsafe link in archive: {member.name}")
                    if not (member.isdir() or member.isfile()):
                        raise ArchiveExtractionError(f"Unsupported member type: {member.name}")
                    members.append((member, member_path))

                dest_dir.mkdir(parents=True, exist_ok=True)
                for member, member_path in members:
                    target = dest_dir / member_path
                    if member.isdir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue
                    source = archive.extractfile(member)
                    if source is None:
                        raise ArchiveExtractionError(f"Failed to read member: {member.name}")
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with source, target.open("wb") as out:
                        shutil.copyfileobj(source, out)
                    extracted.append(target)
        except ArchiveExtractionError:
            raise
        except (tarfile.TarError, zlib.error, lzma.LZMAError, EOFError, OSError) as e:
            raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

        logger.debug(f"[TAR] Extracted {len(extracted)} files from {archive_path.name}")
        return extracted
