"""
Tests for environment configuration and harness settings.
"""
import pytest

from upgrade_harness.core.errors import ConfigurationError
from upgrade_harness.environment.environment_config import EnvironmentConfig, HarnessSettings
from upgrade_harness.proposal.proposal_types import ProposalCategory


class TestValidate:
    """Test fail-fast validation."""

    def test_valid(self):
        EnvironmentConfig(deployer_identity="0xdeployer").validate()

    def test_empty_deployer(self):
        with pytest.raises(ConfigurationError, match="No deploy address"):
            EnvironmentConfig().validate()

    def test_unsupported_version(self):
        config = EnvironmentConfig(deployer_identity="0xdeployer", state_version=7)
        with pytest.raises(ConfigurationError, match="Unsupported state version 7"):
            config.validate()

    def test_custom_supported_versions(self):
        EnvironmentConfig(deployer_identity="0xdeployer", state_version=2,
                          supported_state_versions=frozenset({1, 2})).validate()


class TestFromEnv:
    """Test reading configuration from the environment."""

    def test_defaults(self):
        config = EnvironmentConfig.from_env({})
        assert config.logging_enabled is False
        assert config.deployer_identity == ""
        assert config.state_version == 1
        assert config.addresses_path is None
        assert config.required_resource_names == frozenset({"core"})

    def test_all_variables(self):
        config = EnvironmentConfig.from_env({
            "HARNESS_LOGGING": "true",
            "HARNESS_DEPLOYER": "0xdeployer",
            "HARNESS_STATE_VERSION": "1",
            "HARNESS_ADDRESSES_FILE": "addresses.json",
            "HARNESS_REQUIRED_NAMES": "core, fei ,,tribe",
        })
        assert config.logging_enabled is True
        assert config.deployer_identity == "0xdeployer"
        assert config.addresses_path == "addresses.json"
        assert config.required_resource_names == frozenset({"core", "fei", "tribe"})

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off", ""])
    def test_falsy_logging(self, raw):
        assert EnvironmentConfig.from_env({"HARNESS_LOGGING": raw}).logging_enabled is False

    def test_bad_version(self):
        with pytest.raises(ConfigurationError, match="HARNESS_STATE_VERSION"):
            EnvironmentConfig.from_env({"HARNESS_STATE_VERSION": "v2"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("HARNESS_DEPLOYER", "0xfromenv")
        assert EnvironmentConfig.from_env().deployer_identity == "0xfromenv"

    def test_config_is_hashable(self):
        assert hash(EnvironmentConfig.from_env({})) == hash(EnvironmentConfig.from_env({}))


class TestHarnessSettings:
    """Test governance routing settings."""

    def test_default_routes(self):
        settings = HarnessSettings()
        assert settings.executor_for(ProposalCategory.DAO) == "feiDAOTimelock"
        assert settings.executor_for(ProposalCategory.TRIBAL_COUNCIL) == "tribalCouncilTimelock"
        assert settings.executor_for(ProposalCategory.OPTIMISTIC_APPROVAL) == "optimisticTimelock"
        assert settings.executor_for(ProposalCategory.NONE) is None

    def test_signoff_enforced_by_default(self):
        assert HarnessSettings.from_env({}).enforce_signoff is True

    def test_signoff_disabled(self):
        assert HarnessSettings.from_env({"HARNESS_ENFORCE_SIGNOFF": "0"}).enforce_signoff is False
