"""
Merge Stages — typed union-with-resolver passes over descriptor lists.

Each stage matches descriptors by ``id``. Unmatched incoming descriptors are
appended, matched pairs are folded by a stage-specific resolver, and the
result is filtered to the running platform and sorted by display name.

Stages never mutate their inputs. Resolvers build new descriptors with
``dataclasses.replace``.
"""

from collections.abc import Callable, Iterable
from dataclasses import replace

from hardware_catalog.core.ordering import effective_version, filter_and_sort, parse_version
from hardware_catalog.models.descriptor import AvailableType, HardwareModuleDescriptor

Resolver = Callable[[HardwareModuleDescriptor, HardwareModuleDescriptor], HardwareModuleDescriptor]


def union_with(
    base: Iterable[HardwareModuleDescriptor],
    incoming: Iterable[HardwareModuleDescriptor],
    resolve: Resolver,
    on_new: Callable[[HardwareModuleDescriptor], HardwareModuleDescriptor] | None = None,
) -> list[HardwareModuleDescriptor]:
    """
    Union two descriptor lists keyed by ``id``.

    The first descriptor seen for an id takes a slot in the result. Any later
    descriptor with the same id, whether from ``base`` or ``incoming``, is
    folded into that slot as ``resolve(existing, later)``. Incoming
    descriptors that open a new slot pass through ``on_new`` first.

    Args:
        base: Descriptors that keep their relative position.
        incoming: Descriptors merged into ``base``.
        resolve: Resolver for a matched pair.
        on_new: Optional transform for unmatched incoming descriptors.

    Returns:
        A new list; neither input is modified.
    """
    merged: list[HardwareModuleDescriptor] = []
    slots: dict[str, int] = {}

    def fold(descriptor: HardwareModuleDescriptor, is_incoming: bool) -> None:
        slot = slots.get(descriptor.id)
        if slot is not None:
            merged[slot] = resolve(merged[slot], descriptor)
            return
        if is_incoming and on_new is not None:
            descriptor = on_new(descriptor)
        slots[descriptor.id] = len(merged)
        merged.append(descriptor)

    for descriptor in base:
        fold(descriptor, is_incoming=False)
    for descriptor in incoming:
        fold(descriptor, is_incoming=True)

    return merged


# ──────────────────────────────────────────────
# Stage A — legacy reconciliation
# ──────────────────────────────────────────────


def resolve_legacy(
    legacy: HardwareModuleDescriptor, current: HardwareModuleDescriptor
) -> HardwareModuleDescriptor:
    """
    Promote legacy addressing data onto the current descriptor.

    When the legacy entry is at least as new, the current descriptor takes its
    version and module name and becomes locally available.
    """
    if current.version and parse_version(legacy.version) < parse_version(current.version):
        return current

    return replace(
        current,
        version=effective_version(legacy.version),
        module_name=legacy.module_name or current.module_name,
        available_type=AvailableType.AVAILABLE,
    )


def merge_with_legacy(
    legacy: list[HardwareModuleDescriptor],
    current: list[HardwareModuleDescriptor],
    platform: str,
) -> list[HardwareModuleDescriptor]:
    """Stage A: merge the current on-disk set into the legacy set."""
    return filter_and_sort(union_with(legacy, current, resolve_legacy), platform)


# ──────────────────────────────────────────────
# Stage B — merge with a previously published catalog
# ──────────────────────────────────────────────


def resolve_prior(
    base: HardwareModuleDescriptor, prior: HardwareModuleDescriptor
) -> HardwareModuleDescriptor:
    """Let a newer prior entry supply its module name and wider platform list."""
    if base.version and parse_version(base.version) >= parse_version(prior.version):
        return base

    platforms = prior.platforms if len(prior.platforms) > len(base.platforms) else base.platforms
    return replace(
        base,
        version=effective_version(base.version),
        module_name=prior.module_name or base.module_name,
        platforms=platforms,
    )


def merge_with_prior(
    base: list[HardwareModuleDescriptor],
    prior: Iterable[HardwareModuleDescriptor],
    platform: str,
) -> list[HardwareModuleDescriptor]:
    """Stage B: merge a prior catalog into the local result, keeping local-only entries."""
    return filter_and_sort(union_with(base, prior, resolve_prior), platform)


# ──────────────────────────────────────────────
# Stage C — merge with the online registry
# ──────────────────────────────────────────────


def resolve_online(
    base: HardwareModuleDescriptor, online: HardwareModuleDescriptor
) -> HardwareModuleDescriptor:
    """Flag newer registry versions as updates and record every observed version."""
    resolved = base
    if not base.version or parse_version(base.version) < parse_version(online.version):
        resolved = replace(
            resolved,
            version=effective_version(base.version),
            module_name=online.module_name or base.module_name,
            available_type=AvailableType.NEED_UPDATE,
        )

    if online.version:
        resolved = replace(
            resolved, available_versions=resolved.available_versions + (online.version,)
        )
    return resolved


def mark_downloadable(online: HardwareModuleDescriptor) -> HardwareModuleDescriptor:
    """Registry-only modules must be downloaded before use."""
    return replace(
        online,
        available_type=AvailableType.NEED_DOWNLOAD,
        available_versions=(online.version,) if online.version else (),
    )


def merge_with_online(
    base: list[HardwareModuleDescriptor],
    online: list[HardwareModuleDescriptor],
    platform: str,
) -> list[HardwareModuleDescriptor]:
    """Stage C: merge registry descriptors into the local catalog."""
    return filter_and_sort(
        union_with(base, online, resolve_online, on_new=mark_downloadable), platform
    )


def _append_version(
    kept: HardwareModuleDescriptor, duplicate: HardwareModuleDescriptor
) -> HardwareModuleDescriptor:
    if not duplicate.version:
        return kept
    return replace(kept, available_versions=kept.available_versions + (duplicate.version,))


def accumulate_registry_versions(
    catalog: list[HardwareModuleDescriptor],
    duplicates: Iterable[HardwareModuleDescriptor],
    platform: str,
) -> list[HardwareModuleDescriptor]:
    """
    Fold registry entries dropped by module-name deduplication into the catalog.

    A duplicate sharing an id with a catalog entry appends its version there.
    A duplicate with an id the catalog has not seen becomes a new downloadable
    entry, and the result is filtered and sorted like every other stage.
    """
    return filter_and_sort(
        union_with(catalog, duplicates, _append_version, on_new=mark_downloadable), platform
    )
