"""
Governance Executor - Applying Payloads Under Governance Rules

The orchestrator never applies a proposal payload itself; it builds an
ExecutionRequest and hands it to a GovernanceExecutor. Real executors talk
to the target system's timelocks. SimulatedGovernanceExecutor applies the
commands to a SimulatedLiveState, all or nothing.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Tuple

from upgrade_harness.core.errors import HarnessError
from upgrade_harness.environment.live_state import SimulatedLiveState
from .governance_types import ExecutionReceipt, ExecutionRequest, ResolvedCommand
from upgrade_harness.proposal.proposal_context import ProposalPayload
from upgrade_harness.registry.registry_context import RegistrySnapshot

logger = logging.getLogger("harness.governance")

_TEMPLATE = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")


def _resolve_argument(argument: Any, snapshot: RegistrySnapshot) -> Any:
    if isinstance(argument, str):
        match = _TEMPLATE.match(argument)
        if match:
            return snapshot.address_of(match.group(1))
        return argument
    if isinstance(argument, (list, tuple)):
        return type(argument)(_resolve_argument(a, snapshot) for a in argument)
    return argument


def render_payload(payload: ProposalPayload, snapshot: RegistrySnapshot) -> Tuple[ResolvedCommand, ...]:
    """Resolve targets and ``{name}`` argument templates against the registry.

    Raises:
        UnknownResource: a target or template names an unregistered resource
    """
    return tuple(
        ResolvedCommand(
            target_name=command.target,
            target=snapshot.address_of(command.target),
            method=command.method,
            arguments=tuple(_resolve_argument(a, snapshot) for a in command.arguments),
            value=command.value,
            description=command.description,
        )
        for command in payload.commands
    )


class GovernanceExecutor(ABC):
    """Boundary to the target system's governance machinery."""

    @abstractmethod
    async def execute(self, request: ExecutionRequest) -> ExecutionReceipt:
        """Apply ``request`` under governance rules and report the outcome."""


class SimulatedGovernanceExecutor(GovernanceExecutor):
    """Applies payloads to a SimulatedLiveState.

    The executing timelock is credited with ``total_value`` first (as a
    forked chain would be funded), then every command runs as the timelock.
    Any failing command rolls back the whole payload.
    """

    def __init__(self, state: SimulatedLiveState):
        self._state = state
        self.executed: list = []

    async def execute(self, request: ExecutionRequest) -> ExecutionReceipt:
        working = self._state.fork()
        if request.total_value:
            working.fund(request.executor, request.total_value)

        events = []
        for index, command in enumerate(request.commands):
            try:
                event = working.call(
                    caller=request.executor,
                    target=command.target,
                    method=command.method,
                    arguments=command.arguments,
                    value=command.value,
                )
            except (HarnessError, ValueError, TypeError) as e:
                logger.warning(
                    f"[GOVERNANCE] {request.proposal_id}: command {index} "
                    f"{command.target_name}.{command.method} reverted: {e}"
                )
                return ExecutionReceipt(success=False, events=tuple(events),
                                        error=str(e), failed_index=index)
            if event is not None:
                events.append({**event, "address": command.target})

        self._state.adopt(working)
        self.executed.append(request.proposal_id)
        return ExecutionReceipt(success=True, events=tuple(events))
