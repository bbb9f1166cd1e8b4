"""
Governance Types.

Immutable requests and receipts for the governance execution boundary.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from upgrade_harness.proposal.proposal_types import ProposalCategory


@dataclass(frozen=True)
class ResolvedCommand:
    """A governance command with its target and templates resolved.

    Attributes:
        target_name: Registry name of the target
        target: Resolved target address
        method: Method name
        arguments: Arguments with ``{name}`` templates replaced by addresses
        value: Native currency sent with the call
        description: Human-readable description
    """

    target_name: str
    target: str
    method: str
    arguments: Tuple[Any, ...] = ()
    value: int = 0
    description: str = ""


@dataclass(frozen=True)
class ExecutionRequest:
    """Everything the governance boundary needs to apply one payload."""

    proposal_id: str
    category: ProposalCategory
    executor: str
    commands: Tuple[ResolvedCommand, ...]
    total_value: int = 0
    title: str = ""


@dataclass(frozen=True)
class ExecutionReceipt:
    """Outcome of applying a payload.

    Attributes:
        success: Whether every command applied
        events: Emitted event data, in order
        error: Failure description when success is False
        failed_index: Index of the command that failed, if any
    """

    success: bool
    events: Tuple[Dict[str, Any], ...] = ()
    error: Optional[str] = None
    failed_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "events": list(self.events),
            "error": self.error,
            "failed_index": self.failed_index,
        }
