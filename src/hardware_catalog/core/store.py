"""
Catalog Store — holds the latest published catalog.

The catalog is kept as a tuple and replaced in a single assignment, so a
reader sees either the previous catalog or the new one, never a mix.
"""

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from hardware_catalog.models.descriptor import HardwareModuleDescriptor

if TYPE_CHECKING:
    from hardware_catalog.sources.registry import RegistrySnapshot

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Owner of the only long-lived reference to the merged catalog.

    A single listener may be registered; it is called with no arguments after
    every publish and is expected to re-read the catalog through the store.
    """

    def __init__(self) -> None:
        self._catalog: tuple[HardwareModuleDescriptor, ...] = ()
        self._listener: Callable[[], None] | None = None
        self.last_online_snapshot: "RegistrySnapshot | None" = None

    @property
    def catalog(self) -> tuple[HardwareModuleDescriptor, ...]:
        """The current catalog."""
        return self._catalog

    def set_listener(self, listener: Callable[[], None] | None) -> None:
        """Register the change observer, replacing any previous one."""
        self._listener = listener

    def publish(self, descriptors: Iterable[HardwareModuleDescriptor]) -> None:
        """Replace the catalog wholesale and notify the listener once."""
        catalog = tuple(descriptors)
        logger.info(
            f"Hardware catalog updated: {len(self._catalog)} -> {len(catalog)} modules"
        )
        self._catalog = catalog

        if self._listener is not None:
            try:
                self._listener()
            except Exception as e:
                logger.error(f"Catalog change listener failed: {e}")

    def record_snapshot(self, snapshot: "RegistrySnapshot") -> None:
        """Keep the most recent registry snapshot."""
        self.last_online_snapshot = snapshot

    def by_id(self, module_id: str) -> HardwareModuleDescriptor | None:
        """Find a descriptor in the current catalog."""
        return next((d for d in self._catalog if d.id == module_id), None)
