"""Tests for the HardwareModuleDescriptor model."""

import pytest

from hardware_catalog.models.descriptor import (
    AvailableType,
    HardwareModuleDescriptor,
    InvalidDescriptorError,
)


@pytest.fixture
def raw_descriptor():
    return {
        "id": "010101",
        "moduleName": "arduino",
        "version": "1.2.0",
        "platform": ["win32", "darwin"],
        "name": {"ko": "아두이노", "en": "Arduino"},
        "category": "board",
        "entry": {"protocol": "json"},
    }


class TestFromDict:
    def test_maps_known_fields(self, raw_descriptor):
        d = HardwareModuleDescriptor.from_dict(raw_descriptor)
        assert d.id == "010101"
        assert d.module_name == "arduino"
        assert d.version == "1.2.0"
        assert d.platforms == ("win32", "darwin")
        assert d.name == {"ko": "아두이노", "en": "Arduino"}

    def test_unknown_fields_kept_in_extra(self, raw_descriptor):
        d = HardwareModuleDescriptor.from_dict(raw_descriptor)
        assert d.extra == {"category": "board", "entry": {"protocol": "json"}}

    def test_forced_available_type_overrides_data(self, raw_descriptor):
        raw_descriptor["availableType"] = "needUpdate"
        d = HardwareModuleDescriptor.from_dict(raw_descriptor, available_type=AvailableType.AVAILABLE)
        assert d.available_type == AvailableType.AVAILABLE

    def test_reads_available_type_from_data(self, raw_descriptor):
        raw_descriptor["availableType"] = "needDownload"
        d = HardwareModuleDescriptor.from_dict(raw_descriptor)
        assert d.available_type == AvailableType.NEED_DOWNLOAD

    def test_missing_version_is_none(self):
        d = HardwareModuleDescriptor.from_dict({"id": "x", "version": ""})
        assert d.version is None

    def test_platforms_alias(self):
        d = HardwareModuleDescriptor.from_dict({"id": "x", "platforms": ["linux"]})
        assert d.platforms == ("linux",)

    def test_missing_id_rejected(self):
        with pytest.raises(InvalidDescriptorError):
            HardwareModuleDescriptor.from_dict({"name": "no id"})

    def test_non_object_rejected(self):
        with pytest.raises(InvalidDescriptorError):
            HardwareModuleDescriptor.from_dict(["id", "x"])

    @pytest.mark.parametrize(
        "field, value",
        [("platform", 1), ("platform", True), ("platforms", {"os": "win32"}), ("availableVersions", 2)],
    )
    def test_non_list_fields_rejected(self, field, value):
        with pytest.raises(InvalidDescriptorError):
            HardwareModuleDescriptor.from_dict({"id": "x", field: value})

    def test_unknown_available_type_rejected(self):
        with pytest.raises(InvalidDescriptorError):
            HardwareModuleDescriptor.from_dict({"id": "x", "availableType": "broken"})


class TestToDict:
    def test_camel_case_shape(self, raw_descriptor):
        data = HardwareModuleDescriptor.from_dict(raw_descriptor).to_dict()
        assert data["moduleName"] == "arduino"
        assert data["platform"] == ["win32", "darwin"]
        assert data["availableType"] == "available"
        assert data["availableVersions"] == []
        assert data["category"] == "board"

    def test_absent_optional_fields_omitted(self):
        data = HardwareModuleDescriptor(id="x").to_dict()
        assert "moduleName" not in data
        assert "version" not in data

    def test_from_dict_restores_descriptor(self, raw_descriptor):
        original = HardwareModuleDescriptor.from_dict(raw_descriptor)
        assert HardwareModuleDescriptor.from_dict(original.to_dict()) == original
