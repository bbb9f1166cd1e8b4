"""
Upgrade Harness: protocol-upgrade orchestration and validation.

Reconstructs a snapshot of a live system, applies a catalogue of proposals
through a fixed deploy → setup → validate → teardown lifecycle, tracks every
resource in a shared registry and reports post-condition failures.

NO signing. NO scheduling beyond catalogue order. NO retries.
"""
from upgrade_harness.core.errors import (
    HarnessError,
    ConfigurationError,
    CatalogueError,
    RunAbortedError,
    UnknownResource,
    PhaseExecutionError,
    AssertionFailure,
    LifecycleViolation,
)
from upgrade_harness.registry import Registry, RegistrySnapshot, ResourceHandle, ResourceKind
from upgrade_harness.proposal import (
    Catalogue,
    GovernanceCommand,
    Lifecycle,
    LifecycleState,
    Phase,
    ProposalCategory,
    ProposalDescriptor,
    ProposalPayload,
)
from upgrade_harness.environment import (
    EnvironmentConfig,
    HarnessSettings,
    LiveStateView,
    SimulatedLiveState,
    load_environment,
)
from upgrade_harness.governance import GovernanceExecutor, SimulatedGovernanceExecutor
from upgrade_harness.validation import Assertion, Validator
from upgrade_harness.orchestrator import EndToEndCoordinator, Orchestrator, ProposalResult, RunReport

__version__ = "0.1.0"

__all__ = [
    "HarnessError",
    "ConfigurationError",
    "CatalogueError",
    "RunAbortedError",
    "UnknownResource",
    "PhaseExecutionError",
    "AssertionFailure",
    "LifecycleViolation",
    "Registry",
    "RegistrySnapshot",
    "ResourceHandle",
    "ResourceKind",
    "Catalogue",
    "GovernanceCommand",
    "Lifecycle",
    "LifecycleState",
    "Phase",
    "ProposalCategory",
    "ProposalDescriptor",
    "ProposalPayload",
    "EnvironmentConfig",
    "HarnessSettings",
    "LiveStateView",
    "SimulatedLiveState",
    "load_environment",
    "GovernanceExecutor",
    "SimulatedGovernanceExecutor",
    "Assertion",
    "Validator",
    "EndToEndCoordinator",
    "Orchestrator",
    "ProposalResult",
    "RunReport",
]
