"""
Governance Execution Boundary.

Exports:
    - ResolvedCommand / ExecutionRequest / ExecutionReceipt: Boundary types
    - GovernanceExecutor: Abstract executor
    - SimulatedGovernanceExecutor: In-memory executor
    - render_payload: Resolve payload templates against a registry snapshot
"""
from .governance_types import ResolvedCommand, ExecutionRequest, ExecutionReceipt
from .governance_executor import (
    GovernanceExecutor,
    SimulatedGovernanceExecutor,
    render_payload,
)

__all__ = [
    "ResolvedCommand",
    "ExecutionRequest",
    "ExecutionReceipt",
    "GovernanceExecutor",
    "SimulatedGovernanceExecutor",
    "render_payload",
]
