"""
Proposal Lifecycle State Machine.

Explicit transition table; anything not listed is a LifecycleViolation.
"""
from typing import Dict, FrozenSet, Tuple

from upgrade_harness.core.errors import LifecycleViolation
from .proposal_types import LifecycleState, Phase


# Valid transitions: happy path plus teardown from any non-terminal state
VALID_TRANSITIONS: FrozenSet[Tuple[LifecycleState, LifecycleState]] = frozenset({
    (LifecycleState.PENDING, LifecycleState.DEPLOYED),
    (LifecycleState.DEPLOYED, LifecycleState.CONFIGURED),
    (LifecycleState.CONFIGURED, LifecycleState.VALIDATED),
    (LifecycleState.VALIDATED, LifecycleState.TORN_DOWN),
    # Failure paths
    (LifecycleState.PENDING, LifecycleState.TORN_DOWN),
    (LifecycleState.DEPLOYED, LifecycleState.TORN_DOWN),
    (LifecycleState.CONFIGURED, LifecycleState.TORN_DOWN),
})

TERMINAL_STATES: FrozenSet[LifecycleState] = frozenset({LifecycleState.TORN_DOWN})

# State each phase moves the proposal into on success
PHASE_TARGETS: Dict[Phase, LifecycleState] = {
    Phase.DEPLOY: LifecycleState.DEPLOYED,
    Phase.RESOLVE: LifecycleState.DEPLOYED,
    Phase.SETUP: LifecycleState.CONFIGURED,
    Phase.VALIDATE: LifecycleState.VALIDATED,
    Phase.TEARDOWN: LifecycleState.TORN_DOWN,
}

_ORDER = (
    LifecycleState.PENDING,
    LifecycleState.DEPLOYED,
    LifecycleState.CONFIGURED,
    LifecycleState.VALIDATED,
    LifecycleState.TORN_DOWN,
)


def is_valid_transition(from_state: LifecycleState, to_state: LifecycleState) -> bool:
    """Check if a lifecycle transition is in the table."""
    if from_state in TERMINAL_STATES:
        return False
    return (from_state, to_state) in VALID_TRANSITIONS


def advance(from_state: LifecycleState, to_state: LifecycleState) -> LifecycleState:
    """Return ``to_state`` if the transition is legal, else raise.

    Raises:
        LifecycleViolation: transition not in the table
    """
    if not is_valid_transition(from_state, to_state):
        raise LifecycleViolation(
            f"Transition {from_state.name} -> {to_state.name} is not allowed"
        )
    return to_state


def state_rank(state: LifecycleState) -> int:
    """Position of ``state`` in the lifecycle order."""
    return _ORDER.index(state)
