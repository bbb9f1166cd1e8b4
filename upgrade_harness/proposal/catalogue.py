"""
Proposal Catalogue.

An explicit, ordered catalogue of proposals built by the caller. The order
is the application order. Entries without a descriptor are inert
placeholders and are skipped by the orchestrator.

Persisted format (JSON):
    {
      "<proposal id>": {
        "deploy": false,
        "totalValue": 0,
        "proposal": "proposals.dao.fip_45",   # dotted module path, or null
        "proposalId": "",
        "affectedContractSignoff": ["core"],
        "deprecatedContractSignoff": [],
        "category": "DAO"
      }
    }
"""
import dataclasses
import importlib
import json
import logging
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from upgrade_harness.core.errors import CatalogueError
from .proposal_context import Lifecycle, ProposalDescriptor
from .proposal_types import ProposalCategory

logger = logging.getLogger("harness.catalogue")

CatalogueEntry = Tuple[str, Optional[ProposalDescriptor]]


# =============================================================================
# PERSISTED FORMAT
# =============================================================================

class CatalogueEntryModel(BaseModel):
    """One entry of the persisted catalogue mapping."""
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    deploy: bool
    totalValue: int = Field(default=0, ge=0)
    proposal: Any = None
    proposalId: Optional[str] = None
    affectedContractSignoff: List[str] = Field(default_factory=list)
    deprecatedContractSignoff: List[str] = Field(default_factory=list)
    category: str = ProposalCategory.NONE.value

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str) -> str:
        return ProposalCategory.parse(value).value


def _import_proposal(path: str) -> ModuleType:
    try:
        return importlib.import_module(path)
    except Exception as e:
        raise CatalogueError(f"Cannot import proposal module '{path}': {e}") from e


def _descriptor_from_entry(proposal_id: str, entry: CatalogueEntryModel,
                           importer: Callable[[str], ModuleType]) -> Optional[ProposalDescriptor]:
    proposal = entry.proposal
    if proposal is None:
        return None

    overrides = dict(
        id=proposal_id,
        category=ProposalCategory.parse(entry.category),
        deploy=entry.deploy,
        total_value=entry.totalValue,
        affected_resource_names=frozenset(entry.affectedContractSignoff),
        deprecated_resource_names=frozenset(entry.deprecatedContractSignoff),
        proposal_ref=entry.proposalId or "",
    )

    if isinstance(proposal, ProposalDescriptor):
        return dataclasses.replace(proposal, **overrides)

    if isinstance(proposal, str):
        proposal = importer(proposal)
    if not isinstance(proposal, ModuleType):
        raise CatalogueError(
            f"{proposal_id}: 'proposal' must be a module path, module or descriptor, "
            f"got {type(proposal).__name__}"
        )

    return ProposalDescriptor(
        lifecycle=Lifecycle.from_module(proposal),
        payload=getattr(proposal, "PAYLOAD", None),
        assertions=tuple(getattr(proposal, "ASSERTIONS", ())),
        requires=frozenset(getattr(proposal, "REQUIRES", ())),
        provides=frozenset(getattr(proposal, "PROVIDES", ())),
        **overrides,
    )


# =============================================================================
# CATALOGUE
# =============================================================================

class Catalogue:
    """Ordered proposal id -> descriptor mapping.

    Attributes:
        replay: True replays every proposal against live state, resolving
            resources by name instead of deploying, whatever each
            descriptor's own deploy flag says.
    """

    def __init__(self, entries: Iterable[Union[CatalogueEntry, ProposalDescriptor]] = (),
                 replay: bool = False):
        self.replay = replay
        self._entries: Dict[str, Optional[ProposalDescriptor]] = {}
        for entry in entries:
            if isinstance(entry, ProposalDescriptor):
                proposal_id, descriptor = entry.id, entry
            else:
                proposal_id, descriptor = entry
            if proposal_id in self._entries:
                raise CatalogueError(f"Duplicate proposal id '{proposal_id}'")
            if descriptor is not None and descriptor.id != proposal_id:
                raise CatalogueError(
                    f"Entry '{proposal_id}' holds descriptor for '{descriptor.id}'"
                )
            self._entries[proposal_id] = descriptor

    def __iter__(self) -> Iterator[CatalogueEntry]:
        return iter(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, proposal_id: object) -> bool:
        return proposal_id in self._entries

    @property
    def ids(self) -> List[str]:
        return list(self._entries)

    def get(self, proposal_id: str) -> Optional[ProposalDescriptor]:
        if proposal_id not in self._entries:
            raise CatalogueError(f"Unknown proposal id '{proposal_id}'")
        return self._entries[proposal_id]

    def descriptors(self) -> List[ProposalDescriptor]:
        """Runnable descriptors in application order (placeholders removed)."""
        return [d for d in self._entries.values() if d is not None]

    def placeholders(self) -> List[str]:
        return [pid for pid, d in self._entries.items() if d is None]

    def should_deploy(self, descriptor: ProposalDescriptor) -> bool:
        """Whether the deploy phase runs for ``descriptor`` in this catalogue."""
        return descriptor.deploy and not self.replay

    # ---------------------------------------------------------
    # STATIC DEPENDENCY CHECK
    # ---------------------------------------------------------
    def dependency_issues(self, available: Iterable[str]) -> List[str]:
        """Find required names that nothing before the proposal provides.

        Args:
            available: Names present in the initial registry

        Returns:
            Human-readable issues, empty when every requirement is met
        """
        known: Set[str] = set(available)
        issues: List[str] = []
        for descriptor in self.descriptors():
            missing = sorted(descriptor.requires - known)
            for name in missing:
                issues.append(f"{descriptor.id} requires '{name}' which no earlier proposal provides")
            known |= descriptor.provides
            known -= descriptor.deprecated_resource_names
        return issues

    def check_dependencies(self, available: Iterable[str]) -> None:
        """Raise CatalogueError listing every unmet requirement."""
        issues = self.dependency_issues(available)
        if issues:
            raise CatalogueError("; ".join(issues))

    # ---------------------------------------------------------
    # CONSTRUCTION FROM PERSISTED FORMAT
    # ---------------------------------------------------------
    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Any]], replay: bool = False,
                    importer: Callable[[str], ModuleType] = _import_proposal) -> "Catalogue":
        """Build a catalogue from the persisted mapping format.

        Raises:
            CatalogueError: an entry fails validation or its module cannot load
        """
        entries: List[CatalogueEntry] = []
        for proposal_id, raw in config.items():
            if not isinstance(raw, Mapping):
                raise CatalogueError(
                    f"Invalid catalogue entry '{proposal_id}': expected an object, got {type(raw).__name__}"
                )
            try:
                entry = CatalogueEntryModel.model_validate(dict(raw))
            except ValidationError as e:
                raise CatalogueError(f"Invalid catalogue entry '{proposal_id}': {e}") from e
            descriptor = _descriptor_from_entry(proposal_id, entry, importer)
            if descriptor is None:
                logger.info(f"[CATALOGUE] '{proposal_id}' has no proposal, kept as placeholder")
            entries.append((proposal_id, descriptor))
        return cls(entries, replay=replay)

    @classmethod
    def load(cls, path: Union[str, Path], replay: bool = False) -> "Catalogue":
        """Load a persisted JSON catalogue from disk."""
        path = Path(path)
        if not path.exists():
            raise CatalogueError(f"Catalogue file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CatalogueError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise CatalogueError(f"{path} is not a JSON object: {type(data).__name__}")
        return cls.from_config(data, replay=replay)
