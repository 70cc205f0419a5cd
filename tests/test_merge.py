"""Tests for the union primitive and the three merge stages."""

import pytest

from hardware_catalog.core.merge import (
    accumulate_registry_versions,
    merge_with_legacy,
    merge_with_online,
    merge_with_prior,
    union_with,
)
from hardware_catalog.models.descriptor import AvailableType, HardwareModuleDescriptor

PLATFORM = "win32"


def module(id, version=None, module_name=None, name=None, platforms=(PLATFORM,), **kwargs):
    return HardwareModuleDescriptor(
        id=id,
        name=name if name is not None else id,
        version=version,
        module_name=module_name,
        platforms=tuple(platforms),
        **kwargs,
    )


def by_id(descriptors):
    return {d.id: d for d in descriptors}


# ═══════════════════════════════════════════
# Union Primitive
# ═══════════════════════════════════════════


class TestUnionWith:
    def test_disjoint_lists_keep_every_entry(self):
        base = [module("a"), module("b")]
        incoming = [module("c"), module("d"), module("e")]
        merged = union_with(base, incoming, lambda existing, later: existing)
        assert [d.id for d in merged] == ["a", "b", "c", "d", "e"]

    def test_matched_pair_resolved_in_place(self):
        merged = union_with(
            [module("a", version="1.0.0"), module("b")],
            [module("a", version="2.0.0")],
            lambda existing, later: later,
        )
        assert [d.id for d in merged] == ["a", "b"]
        assert merged[0].version == "2.0.0"

    def test_on_new_only_applies_to_unmatched_incoming(self):
        seen = []

        def on_new(d):
            seen.append(d.id)
            return d

        union_with([module("a")], [module("a"), module("b")], lambda e, l: e, on_new=on_new)
        assert seen == ["b"]

    def test_inputs_not_modified(self):
        base = [module("a", version="1.0.0")]
        incoming = [module("a", version="2.0.0"), module("b")]
        union_with(base, incoming, lambda existing, later: later)
        assert [d.version for d in base] == ["1.0.0"]
        assert len(incoming) == 2

    def test_duplicate_ids_collapse_to_one(self):
        merged = union_with([module("a"), module("a")], [module("a")], lambda e, l: e)
        assert len(merged) == 1


# ═══════════════════════════════════════════
# Stage A — Legacy
# ═══════════════════════════════════════════


class TestMergeWithLegacy:
    def test_newer_legacy_promotes_addressing(self):
        legacy = [module("x", version="1.0.0", module_name="m")]
        current = [module("x", version="0.9.0")]
        result = merge_with_legacy(legacy, current, PLATFORM)
        assert len(result) == 1
        assert result[0].version == "1.0.0"
        assert result[0].module_name == "m"
        assert result[0].available_type == AvailableType.AVAILABLE

    def test_equal_versions_promote_legacy(self):
        legacy = [module("x", version="1.0.0", module_name="m")]
        current = [module("x", version="1.0.0", module_name="other")]
        assert merge_with_legacy(legacy, current, PLATFORM)[0].module_name == "m"

    def test_current_without_version_inherits(self):
        legacy = [module("x", version="1.3.0", module_name="m")]
        current = [module("x")]
        result = merge_with_legacy(legacy, current, PLATFORM)[0]
        assert result.version == "1.3.0"
        assert result.module_name == "m"

    def test_newer_current_kept(self):
        legacy = [module("x", version="1.0.0", module_name="m")]
        current = [module("x", version="2.0.0", module_name="new", extra={"k": 1})]
        result = merge_with_legacy(legacy, current, PLATFORM)[0]
        assert result.version == "2.0.0"
        assert result.module_name == "new"
        assert result.extra == {"k": 1}

    def test_invalid_legacy_version_never_copied(self):
        legacy = [module("x", version="bogus", module_name="m")]
        current = [module("x", version="0.5.0")]
        assert merge_with_legacy(legacy, current, PLATFORM)[0].version == "1.0.0"

    def test_legacy_without_module_name_keeps_current_one(self):
        legacy = [module("x", version="1.0.0")]
        current = [module("x", version="1.0.0", module_name="cur")]
        assert merge_with_legacy(legacy, current, PLATFORM)[0].module_name == "cur"

    def test_unsupported_platform_dropped(self):
        result = merge_with_legacy(
            [module("mac", platforms=["darwin"])], [module("win")], PLATFORM
        )
        assert [d.id for d in result] == ["win"]


# ═══════════════════════════════════════════
# Stage B — Prior Catalog
# ═══════════════════════════════════════════


class TestMergeWithPrior:
    def test_newer_prior_propagates_module_name_and_platforms(self):
        base = [module("x", version="1.0.0", module_name="old", platforms=[PLATFORM])]
        prior = [module("x", version="1.5.0", module_name="new", platforms=[PLATFORM, "darwin"])]
        result = merge_with_prior(base, prior, PLATFORM)[0]
        assert result.module_name == "new"
        assert result.platforms == (PLATFORM, "darwin")
        assert result.version == "1.0.0"

    def test_missing_base_version_defaulted(self):
        base = [module("x")]
        prior = [module("x", version="1.0.0", module_name="m")]
        result = merge_with_prior(base, prior, PLATFORM)[0]
        assert result.version == "1.0.0"
        assert result.module_name == "m"

    def test_platforms_never_narrowed(self):
        base = [module("x", version="1.0.0", platforms=[PLATFORM, "darwin", "linux"])]
        prior = [module("x", version="2.0.0", platforms=[PLATFORM])]
        assert merge_with_prior(base, prior, PLATFORM)[0].platforms == (PLATFORM, "darwin", "linux")

    def test_equal_versions_keep_base(self):
        base = [module("x", version="1.0.0", module_name="local")]
        prior = [module("x", version="1.0.0", module_name="prior")]
        assert merge_with_prior(base, prior, PLATFORM)[0].module_name == "local"

    def test_local_only_descriptors_kept(self):
        result = merge_with_prior([module("local")], [module("prior")], PLATFORM)
        assert {d.id for d in result} == {"local", "prior"}

    def test_empty_prior(self):
        base = [module("b", name="B"), module("a", name="A")]
        assert [d.id for d in merge_with_prior(base, [], PLATFORM)] == ["a", "b"]


# ═══════════════════════════════════════════
# Stage C — Online
# ═══════════════════════════════════════════


class TestMergeWithOnline:
    def test_registry_only_module_needs_download(self):
        online = [module("y", version="1.0.0", module_name="y-mod")]
        result = by_id(merge_with_online([module("x", version="1.0.0")], online, PLATFORM))
        assert result["y"].available_type == AvailableType.NEED_DOWNLOAD
        assert result["y"].available_versions == ("1.0.0",)
        assert result["x"].available_type == AvailableType.AVAILABLE

    def test_newer_online_version_needs_update(self):
        local = [module("x", version="1.0.0", module_name="old")]
        online = [module("x", version="2.0.0", module_name="x-mod")]
        result = merge_with_online(local, online, PLATFORM)[0]
        assert result.available_type == AvailableType.NEED_UPDATE
        assert "2.0.0" in result.available_versions
        assert result.module_name == "x-mod"
        assert result.version == "1.0.0"

    def test_same_version_records_version_only(self):
        local = [module("x", version="2.0.0")]
        online = [module("x", version="2.0.0", module_name="x-mod")]
        result = merge_with_online(local, online, PLATFORM)[0]
        assert result.available_type == AvailableType.AVAILABLE
        assert result.available_versions == ("2.0.0",)

    def test_versions_accumulate_without_dedup(self):
        local = [module("x", version="1.0.0", available_versions=("1.0.0",))]
        online = [module("x", version="1.0.0")]
        assert merge_with_online(local, online, PLATFORM)[0].available_versions == ("1.0.0", "1.0.0")

    def test_online_module_for_other_platform_dropped(self):
        online = [module("mac", version="1.0.0", platforms=["darwin"])]
        assert merge_with_online([], online, PLATFORM) == []


class TestAccumulateRegistryVersions:
    def test_duplicate_versions_appended(self):
        catalog = [module("x", available_versions=("2.0.0",)), module("y")]
        duplicates = [module("x", version="1.5.0"), module("x", version="1.0.0")]
        result = by_id(accumulate_registry_versions(catalog, duplicates, PLATFORM))
        assert result["x"].available_versions == ("2.0.0", "1.5.0", "1.0.0")
        assert result["y"].available_versions == ()

    def test_unknown_id_added_as_download(self):
        duplicates = [module("z", version="1.0.0"), module("z", version="0.9.0")]
        result = accumulate_registry_versions([module("x")], duplicates, PLATFORM)
        assert [d.id for d in result] == ["x", "z"]
        z = result[1]
        assert z.available_type == AvailableType.NEED_DOWNLOAD
        assert z.available_versions == ("1.0.0", "0.9.0")

    def test_unknown_id_for_other_platform_dropped(self):
        duplicates = [module("mac", version="1.0.0", platforms=["darwin"])]
        result = accumulate_registry_versions([module("x")], duplicates, PLATFORM)
        assert [d.id for d in result] == ["x"]


@pytest.mark.parametrize("stage", [merge_with_legacy, merge_with_prior, merge_with_online])
def test_disjoint_inputs_sum_to_union(stage):
    base = [module(f"b{i}") for i in range(3)]
    incoming = [module(f"i{i}") for i in range(4)]
    result = stage(base, incoming, PLATFORM)
    assert len(result) == 7
    assert len({d.id for d in result}) == 7
