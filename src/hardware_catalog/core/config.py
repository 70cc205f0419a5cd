"""
Runtime configuration for the catalog engine.

Values default to a local ``data/`` layout and can be overridden through
``HWCATALOG_*`` environment variables or CLI options.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from hardware_catalog.core.ordering import current_platform


@dataclass
class CatalogConfig:
    """Locations and settings used to build a reconciler."""

    modules_dir: Path = Path("data/modules")
    legacy_dir: Path = Path("data/static_modules")
    registry_url: str | None = None  # None disables the online stage's fetch
    platform: str = field(default_factory=current_platform)
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls, **overrides) -> "CatalogConfig":
        """
        Build a config from the environment.

        Keyword overrides that are not ``None`` take precedence over the
        environment.
        """
        config = cls()
        if value := os.environ.get("HWCATALOG_MODULES_DIR"):
            config.modules_dir = Path(value)
        if value := os.environ.get("HWCATALOG_LEGACY_DIR"):
            config.legacy_dir = Path(value)
        if value := os.environ.get("HWCATALOG_REGISTRY_URL"):
            config.registry_url = value
        if value := os.environ.get("HWCATALOG_PLATFORM"):
            config.platform = value
        if value := os.environ.get("HWCATALOG_TIMEOUT"):
            config.request_timeout = float(value)

        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(config, key):
                raise TypeError(f"Unknown config option: {key!r}")
            if key in ("modules_dir", "legacy_dir"):
                value = Path(value)
            setattr(config, key, value)
        return config
