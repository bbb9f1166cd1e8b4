"""
Orchestrator.

Exports:
    - Orchestrator: Drives a catalogue through the proposal lifecycle
    - ProposalResult: Immutable per-proposal outcome
    - RunReport: Final registry plus all results
    - EndToEndCoordinator: Loads an environment and runs a catalogue
"""
from .orchestrator_context import ProposalResult, RunReport
from .orchestrator_engine import Orchestrator
from .coordinator import EndToEndCoordinator

__all__ = [
    "Orchestrator",
    "EndToEndCoordinator",
    "ProposalResult",
    "RunReport",
]
