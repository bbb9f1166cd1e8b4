"""
Tests for the harness error taxonomy.

Tests:
- Message rendering
- Hierarchy (what is fatal, what is recoverable)
- AssertionFailure value semantics
"""
import pytest

from upgrade_harness.core.errors import (
    AssertionFailure,
    CatalogueError,
    ConfigurationError,
    HarnessError,
    PhaseExecutionError,
    RunAbortedError,
    UnknownResource,
)


class TestHierarchy:
    """Which errors abort a run."""

    def test_catalogue_error_is_configuration_error(self):
        assert issubclass(CatalogueError, ConfigurationError)

    def test_run_aborted_is_configuration_error(self):
        assert issubclass(RunAbortedError, ConfigurationError)

    def test_unknown_resource_is_not_fatal(self):
        assert not issubclass(UnknownResource, ConfigurationError)
        assert issubclass(UnknownResource, HarnessError)

    def test_unknown_resource_is_key_error(self):
        """Mapping lookups can be caught as KeyError."""
        with pytest.raises(KeyError):
            raise UnknownResource("oracleA")


class TestRendering:
    """String forms carry a bracketed tag."""

    def test_configuration_error_str(self):
        assert str(ConfigurationError("core missing")) == "[CONFIGURATION ERROR] core missing"

    def test_unknown_resource_str(self):
        e = UnknownResource("oracleA")
        assert str(e) == "[UNKNOWN RESOURCE] 'oracleA' is not registered"
        assert e.name == "oracleA"
        assert e.deprecated is False

    def test_unknown_resource_deprecated_str(self):
        e = UnknownResource("lensOld", deprecated=True)
        assert "deprecated" in str(e)

    def test_phase_error_includes_location(self):
        e = PhaseExecutionError("reverted", phase="setup", proposal_id="fip_45")
        assert str(e) == "[PHASE EXECUTION ERROR] fip_45/setup: reverted"

    def test_run_aborted_carries_results(self):
        e = RunAbortedError("stop", proposal_id="p1", results=("r",))
        assert e.proposal_id == "p1"
        assert e.results == ("r",)


class TestAssertionFailure:
    """AssertionFailure is both a value and an exception."""

    def test_equality_by_content(self):
        a = AssertionFailure("price", "too low", "p1")
        b = AssertionFailure("price", "too low", "p1")
        assert a == b
        assert len({a, b}) == 1

    def test_to_dict(self):
        f = AssertionFailure("price", "too low", "p1")
        assert f.to_dict() == {"assertion": "price", "message": "too low", "proposal_id": "p1"}

    def test_can_be_raised(self):
        with pytest.raises(AssertionFailure, match="too low"):
            raise AssertionFailure("price", "too low")
