"""
Catalog Reconciler — three-pass merge of local and online module descriptors.

Orchestrates one reconciliation run:
- legacy and current descriptor directories merged (Stage A)
- caller-supplied prior catalog merged in (Stage B), then published
- online registry merged in (Stage C), then published again

Every source failure degrades to an empty list for that source. Nothing
raised during a run escapes ``reconcile``; the store keeps its last
published catalog instead.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace

from hardware_catalog.core.config import CatalogConfig
from hardware_catalog.core.merge import (
    accumulate_registry_versions,
    merge_with_legacy,
    merge_with_online,
    merge_with_prior,
)
from hardware_catalog.core.ordering import current_platform, effective_version
from hardware_catalog.core.store import CatalogStore
from hardware_catalog.models.descriptor import HardwareModuleDescriptor
from hardware_catalog.sources.disk import DescriptorLoader
from hardware_catalog.sources.registry import (
    ModuleRegistry,
    RegistryClient,
    RegistrySnapshot,
    RegistryUnavailableError,
    build_snapshot,
)

logger = logging.getLogger(__name__)


def _with_defined_versions(
    descriptors: list[HardwareModuleDescriptor],
) -> list[HardwareModuleDescriptor]:
    """Published descriptors always carry a valid version."""
    return [
        d if d.version == effective_version(d.version)
        else replace(d, version=effective_version(d.version))
        for d in descriptors
    ]


class CatalogReconciler:
    """
    Builds the hardware module catalog and publishes it to a CatalogStore.

    Concurrent calls to ``reconcile`` are not serialized; callers needing
    strict ordering must keep one run in flight at a time.
    """

    def __init__(
        self,
        legacy_loader: DescriptorLoader,
        current_loader: DescriptorLoader,
        registry: ModuleRegistry | None = None,
        store: CatalogStore | None = None,
        platform: str | None = None,
    ):
        self.legacy_loader = legacy_loader
        self.current_loader = current_loader
        self.registry = registry
        self.store = store or CatalogStore()
        self.platform = platform or current_platform()

    @classmethod
    def from_config(
        cls, config: CatalogConfig, store: CatalogStore | None = None
    ) -> "CatalogReconciler":
        """Wire loaders and the registry client from a config."""
        registry = (
            RegistryClient(config.registry_url, timeout=config.request_timeout)
            if config.registry_url
            else None
        )
        return cls(
            legacy_loader=DescriptorLoader(config.legacy_dir, label="legacy"),
            current_loader=DescriptorLoader(config.modules_dir, label="modules"),
            registry=registry,
            store=store,
            platform=config.platform,
        )

    @property
    def catalog(self) -> tuple[HardwareModuleDescriptor, ...]:
        return self.store.catalog

    def get_by_id(self, module_id: str) -> HardwareModuleDescriptor | None:
        """Look up a module in the latest published catalog."""
        return self.store.by_id(module_id)

    # ──────────────────────────────────────────────
    # Sources
    # ──────────────────────────────────────────────

    async def _load_local(self) -> tuple[list, list]:
        """Load the legacy and current descriptor directories, in that order."""
        legacy = await self.legacy_loader.load()
        current = await self.current_loader.load()
        return legacy.descriptors, current.descriptors

    async def _fetch_online(self) -> RegistrySnapshot:
        """Fetch the registry snapshot; an unreachable registry yields an empty one."""
        if self.registry is None:
            logger.debug("No registry configured, skipping online modules")
            return RegistrySnapshot()

        logger.debug("Fetching hardware modules from the online registry...")
        try:
            raw_schemas = await self.registry.fetch()
        except RegistryUnavailableError as e:
            logger.warning(f"Online hardware list update failed: {e}")
            return RegistrySnapshot()

        snapshot = build_snapshot(raw_schemas)
        if snapshot.modules:
            logger.info(
                "Online hardware list received: "
                + ", ".join(f"{m.id}|{m.module_name}" for m in snapshot.modules)
            )
        return snapshot

    # ──────────────────────────────────────────────
    # Main Run
    # ──────────────────────────────────────────────

    async def reconcile(
        self, prior: Iterable[HardwareModuleDescriptor] = ()
    ) -> tuple[HardwareModuleDescriptor, ...]:
        """
        Run the full reconciliation pipeline.

        Args:
            prior: Catalog carried over from a previous run; empty on first run.

        Returns:
            The store's catalog after the run.
        """
        logger.debug("Hardware list update from file system...")
        try:
            # --- 1. LOCAL SOURCES ---
            legacy, current = await self._load_local()

            # --- 2. LEGACY + BASE MERGE ---
            available = merge_with_legacy(legacy, current, self.platform)
            local = _with_defined_versions(merge_with_prior(available, list(prior), self.platform))
            self.store.publish(local)

            # --- 3. ONLINE MERGE ---
            snapshot = await self._fetch_online()
            self.store.record_snapshot(snapshot)

            online = merge_with_online(local, snapshot.modules, self.platform)
            complete = accumulate_registry_versions(online, snapshot.duplicates, self.platform)
            self.store.publish(_with_defined_versions(complete))
        except Exception as e:
            logger.error(f"Hardware list update failed: {e}", exc_info=True)

        return self.store.catalog
