"""
Tests for environment loading.

Tests:
- Baseline from addresses file
- Required name enforcement
- Per-config caching with fresh registries
- Custom state factories
"""
import json

import pytest

from upgrade_harness.core.errors import ConfigurationError
from upgrade_harness.environment.environment_config import EnvironmentConfig
from upgrade_harness.environment.environment_loader import load_environment, reset_environment_cache
from upgrade_harness.environment.live_state import SimulatedLiveState
from upgrade_harness.registry.registry_types import ResourceKind


@pytest.fixture(autouse=True)
def fresh_cache():
    reset_environment_cache()
    yield
    reset_environment_cache()


def _write_addresses(tmp_path, document):
    path = tmp_path / "addresses.json"
    path.write_text(json.dumps(document))
    return str(path)


class TestLoadFromFile:
    """Test loading from an addresses file."""

    def test_registry_and_state(self, tmp_path):
        path = _write_addresses(tmp_path, {
            "addresses": {
                "core": "0xc0",
                "fei": {"address": "0xfe1", "kind": "CONTRACT"},
                "deployerKey": {"address": "0xd", "kind": "ACCOUNT"},
            },
            "roles": {"GOVERNOR": ["core"]},
        })
        config = EnvironmentConfig(deployer_identity="0xd", addresses_path=path)
        registry, live_state = load_environment(config)

        assert registry.get("core").address == "0xc0"
        assert registry.get("deployerKey").kind == ResourceKind.ACCOUNT
        assert live_state.resolve("fei") == "0xfe1"
        assert live_state.has_role("GOVERNOR", "0xc0")

    def test_missing_required_name(self, tmp_path):
        path = _write_addresses(tmp_path, {"addresses": {"fei": "0xfe1"}})
        config = EnvironmentConfig(deployer_identity="0xd", addresses_path=path)
        with pytest.raises(ConfigurationError, match="contract address is not set: core"):
            load_environment(config)

    def test_missing_file(self, tmp_path):
        config = EnvironmentConfig(deployer_identity="0xd",
                                   addresses_path=str(tmp_path / "nope.json"))
        with pytest.raises(ConfigurationError, match="not found"):
            load_environment(config)

    def test_malformed_document(self, tmp_path):
        path = _write_addresses(tmp_path, {"core": "0xc0"})
        config = EnvironmentConfig(deployer_identity="0xd", addresses_path=path)
        with pytest.raises(ConfigurationError, match="'addresses' mapping"):
            load_environment(config)

    def test_entry_without_address(self, tmp_path):
        path = _write_addresses(tmp_path, {"addresses": {"core": {"kind": "CONTRACT"}}})
        config = EnvironmentConfig(deployer_identity="0xd", addresses_path=path)
        with pytest.raises(ConfigurationError, match="has no address"):
            load_environment(config)

    @pytest.mark.parametrize("sections", [
        {"balances": [{"token": "fei", "holder": "core"}]},
        {"balances": [{"token": "fei", "holder": "core", "amount": "lots"}]},
        {"roles": ["GOVERNOR"]},
        {"storage": {"core": "paused"}},
    ])
    def test_malformed_state_sections(self, tmp_path, sections):
        path = _write_addresses(tmp_path, {"addresses": {"core": "0xc0"}, **sections})
        config = EnvironmentConfig(deployer_identity="0xd", addresses_path=path)
        with pytest.raises(ConfigurationError, match="Invalid state sections"):
            load_environment(config)

    def test_invalid_config_loads_nothing(self, tmp_path):
        calls = []
        with pytest.raises(ConfigurationError):
            load_environment(EnvironmentConfig(), state_factory=lambda c: calls.append(c))
        assert calls == []


class TestStateFactory:
    """Test custom live state factories."""

    def test_required_name_resolved_through_state(self):
        config = EnvironmentConfig(deployer_identity="0xd")
        registry, live_state = load_environment(
            config, state_factory=lambda c: SimulatedLiveState({"core": "0xc0", "fei": "0xfe1"}))
        assert registry.get("core").address == "0xc0"
        assert registry.get("fei").address == "0xfe1"

    def test_empty_state_fails_requirements(self):
        with pytest.raises(ConfigurationError):
            load_environment(EnvironmentConfig(deployer_identity="0xd"))

    def test_no_requirements(self):
        config = EnvironmentConfig(deployer_identity="0xd", required_resource_names=frozenset())
        registry, _ = load_environment(config)
        assert len(registry) == 0


class TestCaching:
    """Test per-config reuse."""

    def test_state_bootstrapped_once(self):
        config = EnvironmentConfig(deployer_identity="0xd")
        calls = []

        def factory(c):
            calls.append(c)
            return SimulatedLiveState({"core": "0xc0"})

        _, first_state = load_environment(config, factory)
        _, second_state = load_environment(config, factory)
        assert len(calls) == 1
        assert first_state is second_state

    def test_different_factory_gets_own_baseline(self):
        config = EnvironmentConfig(deployer_identity="0xd")
        first, first_state = load_environment(config, lambda c: SimulatedLiveState({"core": "0xA"}))
        second, second_state = load_environment(config, lambda c: SimulatedLiveState({"core": "0xB"}))
        assert first.get("core").address == "0xA"
        assert second.get("core").address == "0xB"
        assert first_state is not second_state

    def test_registry_is_fresh_per_call(self):
        config = EnvironmentConfig(deployer_identity="0xd")
        factory = lambda c: SimulatedLiveState({"core": "0xc0"})
        first, _ = load_environment(config, factory)
        first.put("oracleA", "0x1")
        second, _ = load_environment(config, factory)
        assert "oracleA" not in second
        assert "core" in second
