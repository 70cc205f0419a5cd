"""
Archive Installer — unpacks module bundles and triggers a catalog refresh.
"""

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from hardware_catalog.installer.base import ArchiveExtractionError, Extractor

if TYPE_CHECKING:
    from hardware_catalog.core.reconciler import CatalogReconciler

logger = logging.getLogger(__name__)


class ArchiveInstaller:
    """
    Extracts bundles into the module directory.

    A successful extraction schedules a full reconciliation in the
    background; ``install`` does not wait for it or look at its result.
    """

    def __init__(
        self,
        reconciler: "CatalogReconciler",
        module_dir: Path,
        extractor: Extractor | None = None,
    ):
        self.reconciler = reconciler
        self.module_dir = module_dir
        self.extractor = extractor
        self._pending: set[asyncio.Task] = set()

    async def install(self, archive_path: Path) -> None:
        """Extract ``archive_path`` and schedule reconciliation on success."""
        from hardware_catalog.installer import get_extractor

        logger.info(f"Extracting {archive_path} into {self.module_dir}")
        try:
            extractor = self.extractor or get_extractor(archive_path)
            files = await asyncio.to_thread(extractor.extract, archive_path, self.module_dir)
        except (ArchiveExtractionError, ValueError) as e:
            logger.error(f"Hardware list update from bundle failed, path: {archive_path}: {e}")
            return

        logger.info(f"Extracted {len(files)} files from {archive_path.name}")
        task = asyncio.create_task(self.reconciler.reconcile())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for reconciliations scheduled by earlier installs."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
