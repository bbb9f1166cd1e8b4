"""
Tests for the proposal catalogue.

Tests:
- Order preservation and duplicate rejection
- Placeholder entries
- Replay flag
- Static dependency checks
- Persisted format loading (pydantic validation, module import)
"""
import json
import textwrap
import types

import pytest

from upgrade_harness.core.errors import CatalogueError
from upgrade_harness.proposal.catalogue import Catalogue
from upgrade_harness.proposal.proposal_context import ProposalDescriptor
from upgrade_harness.proposal.proposal_types import ProposalCategory


def _descriptor(pid, **kwargs):
    return ProposalDescriptor(id=pid, **kwargs)


class TestOrdering:
    """Test catalogue construction."""

    def test_order_preserved(self):
        catalogue = Catalogue([_descriptor("c"), _descriptor("a"), _descriptor("b")])
        assert catalogue.ids == ["c", "a", "b"]
        assert [d.id for d in catalogue.descriptors()] == ["c", "a", "b"]

    def test_duplicate_id_rejected(self):
        with pytest.raises(CatalogueError, match="Duplicate"):
            Catalogue([_descriptor("a"), _descriptor("a")])

    def test_mismatched_id_rejected(self):
        with pytest.raises(CatalogueError):
            Catalogue([("a", _descriptor("b"))])

    def test_placeholders_excluded_from_descriptors(self):
        catalogue = Catalogue([("fip_x", None), _descriptor("fip_1")])
        assert catalogue.placeholders() == ["fip_x"]
        assert [d.id for d in catalogue.descriptors()] == ["fip_1"]
        assert len(catalogue) == 2
        assert "fip_x" in catalogue

    def test_get_unknown(self):
        with pytest.raises(CatalogueError):
            Catalogue().get("nope")


class TestReplay:
    """Test the replay flag."""

    def test_own_flag_used_without_replay(self):
        catalogue = Catalogue([_descriptor("a", deploy=True), _descriptor("b", deploy=False)])
        assert catalogue.should_deploy(catalogue.get("a")) is True
        assert catalogue.should_deploy(catalogue.get("b")) is False

    def test_replay_forces_resolution(self):
        catalogue = Catalogue([_descriptor("a", deploy=True)], replay=True)
        assert catalogue.should_deploy(catalogue.get("a")) is False


class TestDependencies:
    """Test static dependency checking."""

    def test_requirement_met_by_earlier_proposal(self):
        catalogue = Catalogue([
            _descriptor("p1", provides={"oracleA"}),
            _descriptor("p2", requires={"oracleA", "core"}),
        ])
        assert catalogue.dependency_issues({"core"}) == []

    def test_requirement_provided_later_is_an_issue(self):
        catalogue = Catalogue([
            _descriptor("p1", requires={"oracleA"}),
            _descriptor("p2", provides={"oracleA"}),
        ])
        issues = catalogue.dependency_issues(set())
        assert len(issues) == 1
        assert "p1 requires 'oracleA'" in issues[0]

    def test_deprecated_name_no_longer_available(self):
        catalogue = Catalogue([
            _descriptor("p1", deprecated_resource_names={"lensOld"}),
            _descriptor("p2", requires={"lensOld"}),
        ])
        with pytest.raises(CatalogueError, match="lensOld"):
            catalogue.check_dependencies({"lensOld"})


class TestFromConfig:
    """Test loading the persisted format."""

    def test_placeholder_entry(self):
        catalogue = Catalogue.from_config({
            "fip_x": {
                "deploy": False,
                "totalValue": 0,
                "proposal": None,
                "proposalId": None,
                "affectedContractSignoff": [],
                "deprecatedContractSignoff": [],
                "category": "DAO",
            }
        })
        assert catalogue.placeholders() == ["fip_x"]
        assert catalogue.descriptors() == []

    def test_descriptor_entry_takes_config_values(self):
        base = _descriptor("ignored", provides={"oracleA"})
        catalogue = Catalogue.from_config({
            "balancer_gauge_fix": {
                "deploy": False,
                "totalValue": 5,
                "proposal": base,
                "proposalId": "0xabc",
                "affectedContractSignoff": ["core", "pcvGuardianNew", "pcvGuardianNew"],
                "deprecatedContractSignoff": ["balancerLensBpt30Fei70WethOld"],
                "category": "TC",
            }
        })
        descriptor = catalogue.get("balancer_gauge_fix")
        assert descriptor.id == "balancer_gauge_fix"
        assert descriptor.deploy is False
        assert descriptor.total_value == 5
        assert descriptor.category == ProposalCategory.TRIBAL_COUNCIL
        assert descriptor.affected_resource_names == frozenset({"core", "pcvGuardianNew"})
        assert descriptor.deprecated_resource_names == frozenset({"balancerLensBpt30Fei70WethOld"})
        assert descriptor.proposal_ref == "0xabc"
        assert descriptor.provides == frozenset({"oracleA"})

    def test_module_entry(self):
        module = types.ModuleType("fip_module")
        module.deploy = lambda deployer, addresses, logging=False: ()
        module.PROVIDES = ["oracleA"]
        module.REQUIRES = ["core"]

        catalogue = Catalogue.from_config(
            {"fip_1": {"deploy": True, "proposal": "fip_module", "category": "DAO"}},
            importer=lambda path: module,
        )
        descriptor = catalogue.get("fip_1")
        assert descriptor.lifecycle.deploy is module.deploy
        assert descriptor.provides == frozenset({"oracleA"})
        assert descriptor.requires == frozenset({"core"})
        assert descriptor.payload is None

    def test_invalid_entry(self):
        with pytest.raises(CatalogueError, match="fip_1"):
            Catalogue.from_config({"fip_1": {"totalValue": 0}})

    def test_negative_value_rejected(self):
        with pytest.raises(CatalogueError):
            Catalogue.from_config({"fip_1": {"deploy": True, "totalValue": -1}})

    def test_unknown_category_rejected(self):
        with pytest.raises(CatalogueError):
            Catalogue.from_config({"fip_1": {"deploy": True, "category": "Multisig"}})

    def test_unknown_field_rejected(self):
        with pytest.raises(CatalogueError):
            Catalogue.from_config({"fip_1": {"deploy": True, "surprise": 1}})

    def test_missing_module(self):
        with pytest.raises(CatalogueError, match="Cannot import"):
            Catalogue.from_config({"fip_1": {"deploy": True, "proposal": "no_such_module_xyz"}})

    @pytest.mark.parametrize("raw", [None, [1, 2], "fip_module"])
    def test_non_object_entry(self, raw):
        with pytest.raises(CatalogueError, match="expected an object"):
            Catalogue.from_config({"fip_1": raw})

    def test_module_failing_at_import(self, tmp_path, monkeypatch):
        (tmp_path / "fip_broken_proposal.py").write_text("def deploy(:\n")
        (tmp_path / "fip_raising_proposal.py").write_text("raise AttributeError('no such thing')\n")
        monkeypatch.syspath_prepend(str(tmp_path))
        for module in ("fip_broken_proposal", "fip_raising_proposal"):
            with pytest.raises(CatalogueError, match="Cannot import"):
                Catalogue.from_config({"fip_1": {"deploy": True, "proposal": module}})


class TestLoad:
    """Test loading from disk with real module imports."""

    def test_load_json_with_module(self, tmp_path, monkeypatch):
        (tmp_path / "fip_disk_proposal.py").write_text(textwrap.dedent('''
            from upgrade_harness.registry.registry_context import ResourceHandle

            PROVIDES = ["oracleA"]

            def deploy(deployer, addresses, logging=False):
                return [ResourceHandle("oracleA", "0x1")]
        '''))
        monkeypatch.syspath_prepend(str(tmp_path))
        path = tmp_path / "proposals.json"
        path.write_text(json.dumps({
            "fip_disk": {"deploy": True, "proposal": "fip_disk_proposal", "category": "None"},
            "fip_x": {"deploy": False, "proposal": None},
        }))

        catalogue = Catalogue.load(path)
        assert catalogue.ids == ["fip_disk", "fip_x"]
        assert catalogue.get("fip_disk").provides == frozenset({"oracleA"})
        assert catalogue.placeholders() == ["fip_x"]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(CatalogueError, match="not found"):
            Catalogue.load(tmp_path / "missing.json")

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(CatalogueError):
            Catalogue.load(path)

    def test_load_list_entry(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps({"fip_1": [1, 2]}))
        with pytest.raises(CatalogueError, match="fip_1"):
            Catalogue.load(path)
