"""
Hardware Module Descriptor — the catalog's central record.

Descriptors are read from on-disk JSON files and from the online registry,
and are rebuilt on every reconciliation run. They are immutable: the merge
stages produce new descriptors with ``dataclasses.replace`` instead of
editing shared instances.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class InvalidDescriptorError(ValueError):
    """Raised when raw descriptor data does not have a descriptor's shape."""


class AvailableType(str, Enum):
    """Lifecycle state of a module relative to the local installation."""

    AVAILABLE = "available"
    NEED_DOWNLOAD = "needDownload"
    NEED_UPDATE = "needUpdate"


# JSON keys mapped onto typed fields; everything else lands in ``extra``.
_KNOWN_KEYS = {
    "id",
    "moduleName",
    "version",
    "platform",
    "platforms",
    "availableType",
    "availableVersions",
    "name",
}


@dataclass(frozen=True)
class HardwareModuleDescriptor:
    """
    Metadata for a single hardware module.

    ``platforms`` holds operating-system identifiers as reported by
    ``sys.platform`` (``win32``, ``darwin``, ``linux``). ``name`` is either a
    plain string or a localized mapping such as ``{"ko": ..., "en": ...}``.
    """

    id: str
    name: str | dict = ""
    module_name: str | None = None
    version: str | None = None
    platforms: tuple[str, ...] = ()
    available_type: AvailableType = AvailableType.AVAILABLE
    available_versions: tuple[str, ...] = ()
    extra: dict = field(default_factory=dict)  # Module-specific properties

    def to_dict(self) -> dict:
        """Serialize to the camelCase JSON shape used on disk."""
        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "id": self.id,
                "name": self.name,
                "platform": list(self.platforms),
                "availableType": self.available_type.value,
                "availableVersions": list(self.available_versions),
            }
        )
        if self.module_name is not None:
            data["moduleName"] = self.module_name
        if self.version is not None:
            data["version"] = self.version
        return data

    @classmethod
    def from_dict(
        cls, data: dict, available_type: AvailableType | None = None
    ) -> "HardwareModuleDescriptor":
        """
        Build a descriptor from raw JSON data.

        Args:
            data: Parsed descriptor file or normalized registry schema.
            available_type: Forces the lifecycle state, ignoring the data's own.

        Raises:
            InvalidDescriptorError: If ``data`` is not a mapping with a string ``id``.
        """
        if not isinstance(data, dict):
            raise InvalidDescriptorError(f"Descriptor must be an object, got {type(data).__name__}")

        module_id = data.get("id")
        if not isinstance(module_id, str) or not module_id:
            raise InvalidDescriptorError("Descriptor has no string 'id'")

        if available_type is None:
            try:
                available_type = AvailableType(data.get("availableType", AvailableType.AVAILABLE))
            except ValueError:
                raise InvalidDescriptorError(
                    f"Descriptor {module_id!r} has unknown availableType {data['availableType']!r}"
                ) from None

        platforms = data.get("platform", data.get("platforms")) or []
        if isinstance(platforms, str):
            platforms = [platforms]
        if not isinstance(platforms, list):
            raise InvalidDescriptorError(
                f"Descriptor {module_id!r} has non-list platform {platforms!r}"
            )

        available_versions = data.get("availableVersions") or []
        if not isinstance(available_versions, list):
            raise InvalidDescriptorError(
                f"Descriptor {module_id!r} has non-list availableVersions {available_versions!r}"
            )

        version = data.get("version")
        module_name = data.get("moduleName")

        return cls(
            id=module_id,
            name=data.get("name", ""),
            module_name=module_name if isinstance(module_name, str) else None,
            version=str(version) if version not in (None, "") else None,
            platforms=tuple(str(p) for p in platforms),
            available_type=available_type,
            available_versions=tuple(str(v) for v in available_versions),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )
