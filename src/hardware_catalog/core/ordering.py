"""
Ordering utilities shared by every merge stage.

Covers semantic-version comparison with a safe default, the running-platform
filter, and the display-name sort used to give catalogs a stable order.
"""

import sys

from packaging.version import InvalidVersion, Version

from hardware_catalog.models.descriptor import HardwareModuleDescriptor

DEFAULT_VERSION = "1.0.0"

_DEFAULT = Version(DEFAULT_VERSION)


def current_platform() -> str:
    """Return the identifier of the running operating system."""
    return sys.platform


def parse_version(value: str | None) -> Version:
    """Parse a version string; missing or invalid values compare as 1.0.0."""
    if not value:
        return _DEFAULT
    try:
        return Version(value)
    except InvalidVersion:
        return _DEFAULT


def effective_version(value: str | None) -> str:
    """Return ``value`` if it parses as a version, else the default version."""
    if not value:
        return DEFAULT_VERSION
    try:
        Version(value)
    except InvalidVersion:
        return DEFAULT_VERSION
    return value


def supports_platform(descriptor: HardwareModuleDescriptor, platform: str) -> bool:
    """Descriptors with no platforms at all never pass the filter."""
    return bool(descriptor.platforms) and platform in descriptor.platforms


def display_name(descriptor: HardwareModuleDescriptor) -> str:
    """
    Resolve the name a descriptor is sorted by.

    The trimmed Korean name wins when present; otherwise a plain string name
    is used as-is. A localized mapping without a Korean entry falls back to
    its English entry. Any other name, such as a JSON null, sorts as "".
    """
    name = descriptor.name
    if isinstance(name, dict):
        korean = name.get("ko")
        if isinstance(korean, str) and korean.strip():
            return korean.strip()
        english = name.get("en")
        return english.strip() if isinstance(english, str) else ""
    return name if isinstance(name, str) else ""


def sort_by_name(descriptors: list[HardwareModuleDescriptor]) -> list[HardwareModuleDescriptor]:
    """Sort by display name; equal names keep their input order."""
    return sorted(descriptors, key=display_name)


def filter_and_sort(
    descriptors: list[HardwareModuleDescriptor], platform: str
) -> list[HardwareModuleDescriptor]:
    """Drop descriptors unsupported on ``platform`` and sort the remainder."""
    return sort_by_name([d for d in descriptors if supports_platform(d, platform)])
