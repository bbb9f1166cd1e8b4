"""
Proposals.

Proposal descriptors, the lifecycle state machine and the catalogue.

Exports:
    - ProposalCategory: Enum for governance routes
    - LifecycleState: Enum for per-proposal lifecycle states
    - Phase: Enum for orchestrated steps
    - Lifecycle: Bundle of lifecycle callbacks
    - GovernanceCommand / ProposalPayload: On-chain proposal body
    - ProposalDescriptor: Immutable proposal record
    - Catalogue: Ordered proposal catalogue
    - advance / is_valid_transition: Lifecycle transition checks
"""
from .proposal_types import ProposalCategory, LifecycleState, Phase
from .proposal_context import (
    Lifecycle,
    GovernanceCommand,
    ProposalPayload,
    ProposalDescriptor,
    make_command,
    make_payload,
)
from .lifecycle import advance, is_valid_transition, state_rank
from .catalogue import Catalogue, CatalogueEntryModel

__all__ = [
    "ProposalCategory",
    "LifecycleState",
    "Phase",
    "Lifecycle",
    "GovernanceCommand",
    "ProposalPayload",
    "ProposalDescriptor",
    "make_command",
    "make_payload",
    "advance",
    "is_valid_transition",
    "state_rank",
    "Catalogue",
    "CatalogueEntryModel",
]
