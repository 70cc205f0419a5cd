"""
Example: Build the hardware catalog and watch it change.

Usage:
    export HWCATALOG_REGISTRY_URL=https://example.org/api/modules
    python examples/reconcile_catalog.py
"""

import asyncio
from pathlib import Path

from hardware_catalog import CatalogReconciler
from hardware_catalog.core.config import CatalogConfig


async def main():
    config = CatalogConfig.from_env(
        modules_dir=Path("./data/modules"),
        legacy_dir=Path("./data/static_modules"),
    )
    reconciler = CatalogReconciler.from_config(config)

    # Called once after the local publish and once after the online merge
    reconciler.store.set_listener(
        lambda: print(f"catalog changed: {len(reconciler.catalog)} modules")
    )

    catalog = await reconciler.reconcile()

    for module in catalog:
        print(f"{module.id:<12} {module.version:<8} {module.available_type.value}")


if __name__ == "__main__":
    asyncio.run(main())
