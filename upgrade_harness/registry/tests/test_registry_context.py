"""
Tests for ResourceHandle and RegistrySnapshot.
"""
import pytest

from upgrade_harness.core.errors import UnknownResource
from upgrade_harness.registry.registry_context import RegistrySnapshot, ResourceHandle
from upgrade_harness.registry.registry_types import ResourceKind


class TestResourceHandle:
    """Test handle immutability."""

    def test_handle_is_frozen(self):
        handle = ResourceHandle("oracleA", "0x1")
        with pytest.raises(AttributeError):
            handle.address = "0x2"

    def test_default_kind_is_contract(self):
        assert ResourceHandle("oracleA", "0x1").kind == ResourceKind.CONTRACT

    def test_to_dict(self):
        handle = ResourceHandle("poolId", "0xabc", ResourceKind.ARTIFACT)
        assert handle.to_dict() == {"name": "poolId", "address": "0xabc", "kind": "ARTIFACT"}


class TestRegistrySnapshot:
    """Test the read-only view."""

    def setup_method(self):
        self.entries = {"core": ResourceHandle("core", "0xc0")}
        self.snapshot = RegistrySnapshot(entries=self.entries, deprecated=frozenset({"old"}))

    def test_mapping_access(self):
        assert self.snapshot["core"].address == "0xc0"
        assert list(self.snapshot) == ["core"]
        assert dict(self.snapshot.items()) == self.entries

    def test_cannot_mutate(self):
        """Snapshots expose no mutation path."""
        with pytest.raises(TypeError):
            self.snapshot.entries["x"] = ResourceHandle("x", "0x")
        with pytest.raises(TypeError):
            self.snapshot["x"] = ResourceHandle("x", "0x")

    def test_detached_from_source_dict(self):
        self.entries["later"] = ResourceHandle("later", "0x9")
        assert "later" not in self.snapshot

    def test_get_unknown_raises(self):
        with pytest.raises(UnknownResource):
            self.snapshot.get("missing")

    def test_get_deprecated_reports_reason(self):
        with pytest.raises(UnknownResource) as info:
            self.snapshot.get("old")
        assert info.value.deprecated is True

    def test_addresses(self):
        assert self.snapshot.addresses() == {"core": "0xc0"}
        assert self.snapshot.address_of("core") == "0xc0"

    def test_equal_snapshots(self):
        other = RegistrySnapshot(entries=dict(self.entries), deprecated=frozenset({"old"}))
        assert other == self.snapshot
        assert hash(other) == hash(self.snapshot)
