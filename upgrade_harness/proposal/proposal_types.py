"""
Proposal Types.

Defines closed enums for proposal categories, lifecycle states and phases.
"""
from enum import Enum


class ProposalCategory(Enum):
    """Governance route a proposal is executed through.

    CLOSED ENUM - No new members may be added.

    Members:
        DAO: Full DAO vote, executed by the DAO timelock
        TRIBAL_COUNCIL: Council multisig, executed by the council timelock
        OPTIMISTIC_APPROVAL: Optimistic timelock, vetoable
        NONE: No governance payload is executed
    """

    DAO = "DAO"
    TRIBAL_COUNCIL = "TribalCouncil"
    OPTIMISTIC_APPROVAL = "OptimisticApproval"
    NONE = "None"

    @classmethod
    def parse(cls, value: str) -> "ProposalCategory":
        """Accept the value, the member name, or the short aliases TC / OA."""
        aliases = {"TC": cls.TRIBAL_COUNCIL, "OA": cls.OPTIMISTIC_APPROVAL}
        if value in aliases:
            return aliases[value]
        for member in cls:
            if value in (member.value, member.name):
                return member
        raise ValueError(f"Unknown proposal category: {value!r}")


class LifecycleState(Enum):
    """Per-proposal lifecycle state.

    CLOSED ENUM - No new members may be added.

    Order: PENDING -> DEPLOYED -> CONFIGURED -> VALIDATED -> TORN_DOWN
    TORN_DOWN may also be entered from any earlier state after a failure.
    """

    PENDING = "PENDING"
    DEPLOYED = "DEPLOYED"
    CONFIGURED = "CONFIGURED"
    VALIDATED = "VALIDATED"
    TORN_DOWN = "TORN_DOWN"


class Phase(Enum):
    """Steps the orchestrator executes for each proposal.

    CLOSED ENUM - No new members may be added.
    """

    DEPLOY = "deploy"
    RESOLVE = "resolve"
    SETUP = "setup"
    GOVERNANCE = "governance"
    VALIDATE = "validate"
    TEARDOWN = "teardown"
