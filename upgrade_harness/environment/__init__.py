"""
Environment.

Configuration, live state access and the environment loader.

Exports:
    - EnvironmentConfig: Immutable loader configuration
    - HarnessSettings: Orchestration settings
    - LiveStateView: Read-only state interface
    - SimulatedLiveState: In-memory target state
    - load_environment: Bootstrap registry + live state
    - reset_environment_cache: Forget loaded environments
"""
from .environment_config import EnvironmentConfig, HarnessSettings
from .live_state import LiveStateView, SimulatedLiveState, seed_state
from .environment_loader import load_environment, reset_environment_cache

__all__ = [
    "EnvironmentConfig",
    "HarnessSettings",
    "LiveStateView",
    "SimulatedLiveState",
    "seed_state",
    "load_environment",
    "reset_environment_cache",
]
