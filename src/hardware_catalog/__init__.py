"""
Hardware Catalog - Hardware module catalog reconciliation engine.

Merges legacy and current on-disk module descriptors with the online module
registry into a single, de-duplicated, platform-filtered catalog.
"""

__version__ = "1.0.0"


def __getattr__(name: str):
    """Lazy import for heavy dependencies."""
    if name == "CatalogReconciler":
        from hardware_catalog.core.reconciler import CatalogReconciler

        return CatalogReconciler
    if name == "CatalogStore":
        from hardware_catalog.core.store import CatalogStore

        return CatalogStore
    if name == "HardwareModuleDescriptor":
        from hardware_catalog.models.descriptor import HardwareModuleDescriptor

        return HardwareModuleDescriptor
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["CatalogReconciler", "CatalogStore", "HardwareModuleDescriptor", "__version__"]
