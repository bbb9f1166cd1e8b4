"""
Orchestrator Context.

Immutable per-proposal results and the run report.
"""
import json
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from upgrade_harness.core.errors import AssertionFailure, HarnessError
from upgrade_harness.governance.governance_types import ExecutionReceipt
from upgrade_harness.proposal.proposal_types import LifecycleState, Phase, ProposalCategory
from upgrade_harness.registry.registry_context import RegistrySnapshot, ResourceHandle


@dataclass(frozen=True)
class ProposalResult:
    """Outcome of driving one proposal through its lifecycle.

    Attributes:
        proposal_id: Catalogue identifier
        category: Governance route
        deployed: True if the deploy phase ran, False if resources were
            resolved from live state
        state: Furthest state reached before teardown
        torn_down: Whether teardown completed without error
        history: Every state entered, in order
        resources: Handles introduced by deploy/resolution
        errors: Captured phase errors
        assertion_failures: Collected validation failures
        failed_phase: First phase that failed, if any
        receipt: Governance execution receipt, if a payload ran
    """

    proposal_id: str
    category: ProposalCategory
    deployed: bool
    state: LifecycleState
    torn_down: bool
    history: Tuple[LifecycleState, ...] = ()
    resources: Tuple[ResourceHandle, ...] = ()
    errors: Tuple[HarnessError, ...] = ()
    assertion_failures: Tuple[AssertionFailure, ...] = ()
    failed_phase: Optional[Phase] = None
    receipt: Optional[ExecutionReceipt] = None

    @property
    def passed(self) -> bool:
        return (self.state == LifecycleState.VALIDATED and self.torn_down
                and not self.errors and not self.assertion_failures)

    @property
    def failure_count(self) -> int:
        return len(self.errors) + len(self.assertion_failures)

    def to_dict(self) -> dict:
        return {
            "proposal_id": self.proposal_id,
            "category": self.category.value,
            "deployed": self.deployed,
            "state": self.state.value,
            "torn_down": self.torn_down,
            "passed": self.passed,
            "history": [s.value for s in self.history],
            "resources": [r.to_dict() for r in self.resources],
            "errors": [str(e) for e in self.errors],
            "assertion_failures": [f.to_dict() for f in self.assertion_failures],
            "failed_phase": self.failed_phase.value if self.failed_phase else None,
            "receipt": self.receipt.to_dict() if self.receipt else None,
        }


@dataclass(frozen=True)
class RunReport:
    """Final registry and per-proposal results of one run.

    A non-zero failure_count means the upgrade is not safe to ship.
    """

    registry: RegistrySnapshot
    results: Tuple[ProposalResult, ...] = ()
    skipped: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def safe_to_ship(self) -> bool:
        return self.failure_count == 0

    def result(self, proposal_id: str) -> ProposalResult:
        for r in self.results:
            if r.proposal_id == proposal_id:
                return r
        raise KeyError(proposal_id)

    def failed(self) -> List[ProposalResult]:
        return [r for r in self.results if not r.passed]

    def to_dict(self) -> dict:
        return {
            "safe_to_ship": self.safe_to_ship,
            "failure_count": self.failure_count,
            "proposals": [r.to_dict() for r in self.results],
            "skipped": list(self.skipped),
            "registry": {name: h.to_dict() for name, h in self.registry.items()},
            "deprecated": sorted(self.registry.deprecated),
        }

    def write_json(self, path: str) -> None:
        """Atomic persistence of the report."""
        tmp = path + ".tmp"
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
