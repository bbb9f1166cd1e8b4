"""
Orchestrator - Proposal Lifecycle Driver

For each proposal, in catalogue order:
  1. DEPLOY   deploy(deployer, addresses, logging) → new resources
     or RESOLVE  (deploy=False / replay) names in `provides` from live state
  2. merge new resources into the registry
  3. SETUP    setup(addresses, previous, current, logging)
  4. GOVERNANCE  apply the payload through the governance executor
  5. VALIDATE validate(addresses, previous, current), then the Validator
  6. TEARDOWN teardown(addresses, previous, current, logging), ALWAYS runs

Failure policy:
  - ConfigurationError before the run → raised, nothing runs
  - ConfigurationError inside a phase → teardown, then RunAbortedError
  - Anything else → recorded on that proposal's result, run continues

Proposals run strictly one after another; every phase is awaited before
the next starts. Callbacks only ever receive snapshots, never the Registry.
No phase is retried.
"""
import asyncio
import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from upgrade_harness.core.errors import (
    AssertionFailure,
    ConfigurationError,
    HarnessError,
    LifecycleViolation,
    PhaseExecutionError,
    RunAbortedError,
    UnknownResource,
)
from upgrade_harness.environment.environment_config import HarnessSettings
from upgrade_harness.environment.live_state import LiveStateView
from upgrade_harness.governance.governance_executor import GovernanceExecutor, render_payload
from upgrade_harness.governance.governance_types import ExecutionReceipt, ExecutionRequest
from .orchestrator_context import ProposalResult, RunReport
from upgrade_harness.proposal.catalogue import Catalogue
from upgrade_harness.proposal.lifecycle import PHASE_TARGETS, advance, state_rank
from upgrade_harness.proposal.proposal_context import ProposalDescriptor
from upgrade_harness.proposal.proposal_types import LifecycleState, Phase
from upgrade_harness.registry.registry_context import RegistrySnapshot, ResourceHandle
from upgrade_harness.registry.registry_engine import Registry
from upgrade_harness.validation.validator import Validator

logger = logging.getLogger("harness.orchestrator")


async def _invoke(callback, *args) -> Any:
    """Call a lifecycle callback, awaiting it if it is a coroutine."""
    result = callback(*args)
    if asyncio.iscoroutine(result):
        result = await result
    return result


def _normalise_resources(proposal_id: str, produced: Any) -> Tuple[ResourceHandle, ...]:
    """Turn a deploy return value into a tuple of uniquely named handles."""
    if produced is None:
        return ()
    if isinstance(produced, Mapping):
        items: Iterable = (
            value if isinstance(value, ResourceHandle) else ResourceHandle(name=name, address=str(value))
            for name, value in produced.items()
        )
    else:
        items = produced

    handles: List[ResourceHandle] = []
    names = set()
    for handle in items:
        if not isinstance(handle, ResourceHandle):
            raise PhaseExecutionError(
                f"deploy returned {type(handle).__name__}, expected ResourceHandle",
                phase=Phase.DEPLOY.value, proposal_id=proposal_id,
            )
        if handle.name in names:
            raise PhaseExecutionError(
                f"deploy returned '{handle.name}' more than once",
                phase=Phase.DEPLOY.value, proposal_id=proposal_id,
            )
        names.add(handle.name)
        handles.append(handle)
    return tuple(handles)


class _ProposalRun:
    """Mutable bookkeeping for one proposal while it is being driven."""

    def __init__(self, descriptor: ProposalDescriptor, deployed: bool):
        self.descriptor = descriptor
        self.deployed = deployed
        self.state = LifecycleState.PENDING
        self.reached = LifecycleState.PENDING
        self.history: List[LifecycleState] = [LifecycleState.PENDING]
        self.resources: Tuple[ResourceHandle, ...] = ()
        self.errors: List[HarnessError] = []
        self.failures: List[AssertionFailure] = []
        self.failed_phase: Optional[Phase] = None
        self.receipt: Optional[ExecutionReceipt] = None
        self.torn_down = False

    def enter(self, phase: Phase) -> None:
        self.state = advance(self.state, PHASE_TARGETS[phase])
        self.history.append(self.state)
        if self.state != LifecycleState.TORN_DOWN and state_rank(self.state) > state_rank(self.reached):
            self.reached = self.state

    def fail(self, phase: Phase, error: HarnessError) -> None:
        if self.failed_phase is None:
            self.failed_phase = phase
        if isinstance(error, AssertionFailure):
            self.failures.append(error)
        else:
            self.errors.append(error)

    def result(self) -> ProposalResult:
        return ProposalResult(
            proposal_id=self.descriptor.id,
            category=self.descriptor.category,
            deployed=self.deployed,
            state=self.reached,
            torn_down=self.torn_down,
            history=tuple(self.history),
            resources=self.resources,
            errors=tuple(self.errors),
            assertion_failures=tuple(self.failures),
            failed_phase=self.failed_phase,
            receipt=self.receipt,
        )


class Orchestrator:
    """Drives a catalogue of proposals against one live state.

    Args:
        live_state: View of the target system's state
        executor: Governance execution boundary; required when any
            proposal carries a payload under a governed category
        deployer_identity: Address passed to deploy callbacks
        settings: Governance routing and sign-off settings
        validator: Post-condition harness
        logging_enabled: Threaded to every callback; gates INFO output only
    """

    def __init__(self, live_state: LiveStateView,
                 executor: Optional[GovernanceExecutor] = None,
                 deployer_identity: str = "",
                 settings: Optional[HarnessSettings] = None,
                 validator: Optional[Validator] = None,
                 logging_enabled: bool = False):
        self._live_state = live_state
        self._executor = executor
        self._deployer = deployer_identity
        self._settings = settings or HarnessSettings()
        self._validator = validator or Validator(self._settings)
        self._logging = logging_enabled

    def _info(self, message: str) -> None:
        if self._logging:
            logger.info(message)

    # ---------------------------------------------------------
    # PRE-RUN CHECKS
    # ---------------------------------------------------------
    def _preflight(self, catalogue: Catalogue, registry: Registry) -> None:
        """Fail fast before any phase runs."""
        catalogue.check_dependencies(registry.snapshot().names())
        if self._executor is None:
            governed = [d.id for d in catalogue.descriptors()
                        if d.executes_governance and self._settings.executor_for(d.category)]
            if governed:
                raise ConfigurationError(
                    f"No governance executor configured for proposals: {', '.join(governed)}"
                )

    # ---------------------------------------------------------
    # PHASES
    # ---------------------------------------------------------
    async def _deploy(self, descriptor: ProposalDescriptor,
                      previous: RegistrySnapshot) -> Tuple[ResourceHandle, ...]:
        produced = await _invoke(descriptor.lifecycle.deploy, self._deployer,
                                 previous.addresses(), self._logging)
        return _normalise_resources(descriptor.id, produced)

    def _resolve(self, descriptor: ProposalDescriptor) -> Tuple[ResourceHandle, ...]:
        handles = []
        for name in sorted(descriptor.provides):
            address = self._live_state.resolve(name)
            if not address:
                raise UnknownResource(name)
            handles.append(ResourceHandle(name=name, address=address))
        return tuple(handles)

    def _check_provides(self, descriptor: ProposalDescriptor,
                        handles: Tuple[ResourceHandle, ...]) -> None:
        missing = sorted(descriptor.provides - {h.name for h in handles})
        if missing:
            raise PhaseExecutionError(
                f"declared resources not produced: {', '.join(missing)}",
                phase=Phase.DEPLOY.value, proposal_id=descriptor.id,
            )

    async def _govern(self, descriptor: ProposalDescriptor,
                      current: RegistrySnapshot) -> Optional[ExecutionReceipt]:
        executor_name = self._settings.executor_for(descriptor.category)
        if not descriptor.executes_governance or executor_name is None:
            return None

        request = ExecutionRequest(
            proposal_id=descriptor.id,
            category=descriptor.category,
            executor=current.address_of(executor_name),
            commands=render_payload(descriptor.payload, current),
            total_value=descriptor.total_value,
            title=descriptor.payload.title,
        )
        self._info(f"[ORCHESTRATOR] {descriptor.id}: executing {len(request.commands)} "
                   f"command(s) via {executor_name}")
        receipt = await self._executor.execute(request)
        if not receipt.success:
            raise PhaseExecutionError(
                f"governance execution failed at command {receipt.failed_index}: {receipt.error}",
                phase=Phase.GOVERNANCE.value, proposal_id=descriptor.id,
            )
        return receipt

    async def _teardown(self, run: _ProposalRun, registry: Registry,
                        previous: RegistrySnapshot) -> Optional[ConfigurationError]:
        descriptor = run.descriptor
        current = registry.snapshot()
        try:
            await _invoke(descriptor.lifecycle.teardown, current.addresses(),
                          previous, current, self._logging)
        except ConfigurationError as e:
            logger.warning(f"[ORCHESTRATOR] {descriptor.id}: teardown configuration error: {e}")
            run.fail(Phase.TEARDOWN, e)
            return e
        except Exception as e:
            logger.warning(f"[ORCHESTRATOR] {descriptor.id}: teardown failed: {e}")
            run.fail(Phase.TEARDOWN, PhaseExecutionError(
                str(e), phase=Phase.TEARDOWN.value, proposal_id=descriptor.id, cause=e))
            return None
        run.enter(Phase.TEARDOWN)
        run.torn_down = True
        return None

    # ---------------------------------------------------------
    # ONE PROPOSAL
    # ---------------------------------------------------------
    async def _apply(self, descriptor: ProposalDescriptor, catalogue: Catalogue,
                     registry: Registry) -> Tuple[ProposalResult, Optional[ConfigurationError]]:
        deploying = catalogue.should_deploy(descriptor)
        run = _ProposalRun(descriptor, deployed=deploying)
        previous = registry.snapshot()
        phase = Phase.DEPLOY if deploying else Phase.RESOLVE
        abort: Optional[ConfigurationError] = None

        self._info(f"[ORCHESTRATOR] {descriptor.id}: starting ({phase.value})")
        try:
            if deploying:
                handles = await self._deploy(descriptor, previous)
            else:
                handles = self._resolve(descriptor)
            self._check_provides(descriptor, handles)
            registry.merge(handles, source=descriptor.id)
            run.resources = handles
            run.enter(phase)
            current = registry.snapshot()

            phase = Phase.SETUP
            await _invoke(descriptor.lifecycle.setup, current.addresses(),
                          previous, current, self._logging)
            run.enter(Phase.SETUP)

            phase = Phase.GOVERNANCE
            run.receipt = await self._govern(descriptor, current)

            phase = Phase.VALIDATE
            await _invoke(descriptor.lifecycle.validate, current.addresses(), previous, current)
            failures = self._validator.validate(descriptor, current, self._live_state, previous)
            for failure in failures:
                run.fail(Phase.VALIDATE, failure)
            if not failures:
                run.enter(Phase.VALIDATE)

        except ConfigurationError as e:
            logger.error(f"[ORCHESTRATOR] {descriptor.id}: configuration error in {phase.value}: {e}")
            run.fail(phase, e)
            abort = e
        except AssertionFailure as e:
            run.fail(phase, AssertionFailure(e.assertion, e.message, descriptor.id))
        except AssertionError as e:
            run.fail(phase, AssertionFailure(f"{descriptor.id}.validate", str(e) or "assertion failed",
                                             descriptor.id))
        except (UnknownResource, PhaseExecutionError) as e:
            run.fail(phase, e)
        except LifecycleViolation:
            raise
        except Exception as e:
            run.fail(phase, PhaseExecutionError(
                f"{type(e).__name__}: {e}", phase=phase.value, proposal_id=descriptor.id, cause=e))

        if run.failed_phase is not None:
            logger.warning(f"[ORCHESTRATOR] {descriptor.id}: failed in {run.failed_phase.value}")

        teardown_abort = await self._teardown(run, registry, previous)
        abort = abort or teardown_abort

        result = run.result()
        if result.passed:
            for name in sorted(descriptor.deprecated_resource_names):
                if name in registry:
                    registry.deprecate(name)
                else:
                    logger.warning(f"[ORCHESTRATOR] {descriptor.id}: cannot deprecate unknown '{name}'")

        self._info(f"[ORCHESTRATOR] {descriptor.id}: {result.state.value} "
                   f"({'passed' if result.passed else 'FAILED'})")
        return result, abort

    # ---------------------------------------------------------
    # RUN
    # ---------------------------------------------------------
    async def run(self, catalogue: Catalogue, initial_registry: Registry) -> RunReport:
        """Apply every proposal in catalogue order.

        Args:
            catalogue: Ordered proposals; placeholders are skipped
            initial_registry: Baseline registry (copied, never mutated)

        Returns:
            RunReport with the final registry snapshot and per-proposal results

        Raises:
            ConfigurationError: pre-run checks failed; no phase ran
            RunAbortedError: a phase raised ConfigurationError mid-run
        """
        registry = initial_registry.copy()
        self._preflight(catalogue, registry)

        skipped = tuple(catalogue.placeholders())
        for proposal_id in skipped:
            self._info(f"[ORCHESTRATOR] {proposal_id}: no proposal attached, skipping")

        results: List[ProposalResult] = []
        for descriptor in catalogue.descriptors():
            result, abort = await self._apply(descriptor, catalogue, registry)
            results.append(result)
            if abort is not None:
                raise RunAbortedError(
                    f"{descriptor.id}: {abort.message}",
                    proposal_id=descriptor.id,
                    results=tuple(results),
                ) from abort

        report = RunReport(registry=registry.snapshot(), results=tuple(results), skipped=skipped)
        if report.safe_to_ship:
            self._info(f"[ORCHESTRATOR] All {len(results)} proposal(s) passed")
        else:
            logger.warning(f"[ORCHESTRATOR] {report.failure_count} of {len(results)} proposal(s) failed")
        return report

    def run_sync(self, catalogue: Catalogue, initial_registry: Registry) -> RunReport:
        """Blocking wrapper around run()."""
        return asyncio.run(self.run(catalogue, initial_registry))
