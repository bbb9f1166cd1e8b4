"""
End-to-End Coordinator.

Wires the pieces of one run together:
    load_environment → Registry + live state → Orchestrator → RunReport
"""
import logging
from typing import Callable, Optional, Tuple

from upgrade_harness.environment.environment_config import EnvironmentConfig, HarnessSettings
from upgrade_harness.environment.environment_loader import StateFactory, load_environment
from upgrade_harness.environment.live_state import LiveStateView, SimulatedLiveState
from upgrade_harness.governance.governance_executor import GovernanceExecutor, SimulatedGovernanceExecutor
from .orchestrator_context import RunReport
from .orchestrator_engine import Orchestrator
from upgrade_harness.proposal.catalogue import Catalogue
from upgrade_harness.registry.registry_engine import Registry

logger = logging.getLogger("harness.coordinator")

ExecutorFactory = Callable[[LiveStateView], GovernanceExecutor]


def _default_executor(live_state: LiveStateView) -> Optional[GovernanceExecutor]:
    if isinstance(live_state, SimulatedLiveState):
        return SimulatedGovernanceExecutor(live_state)
    return None


class EndToEndCoordinator:
    """Loads an environment and applies a catalogue to it."""

    def __init__(self, config: EnvironmentConfig, catalogue: Catalogue,
                 settings: Optional[HarnessSettings] = None,
                 state_factory: Optional[StateFactory] = None,
                 executor_factory: Optional[ExecutorFactory] = None):
        self.config = config
        self.catalogue = catalogue
        self.settings = settings or HarnessSettings()
        self._state_factory = state_factory
        self._executor_factory = executor_factory or _default_executor
        self._registry: Optional[Registry] = None
        self._live_state: Optional[LiveStateView] = None

    def load_environment(self) -> Tuple[Registry, LiveStateView]:
        if self.config.logging_enabled:
            logger.info("[COORDINATOR] Loading environment...")
        self._registry, self._live_state = load_environment(self.config, self._state_factory)
        return self._registry, self._live_state

    async def apply_upgrades(self) -> RunReport:
        """Run the whole catalogue; loads the environment first if needed."""
        if self._registry is None or self._live_state is None:
            self.load_environment()
        orchestrator = Orchestrator(
            live_state=self._live_state,
            executor=self._executor_factory(self._live_state),
            deployer_identity=self.config.deployer_identity,
            settings=self.settings,
            logging_enabled=self.config.logging_enabled,
        )
        return await orchestrator.run(self.catalogue, self._registry)
