"""
Validator - Post-Condition Harness

Evaluates a proposal's declared assertions against the final registry
snapshot and live state.

RULES:
  - Assertions are evaluated independently, in declared order
  - Every failure is collected, not only the first
  - An assertion whose dependency failed is skipped and reported
  - Sign-off: payload targets must be signed off as affected, deprecated
    names must exist before the proposal
"""
import logging
from typing import List, Optional, Set

from upgrade_harness.core.errors import AssertionFailure, HarnessError
from upgrade_harness.environment.environment_config import HarnessSettings
from upgrade_harness.environment.live_state import LiveStateView
from upgrade_harness.proposal.proposal_context import ProposalDescriptor
from upgrade_harness.registry.registry_context import RegistrySnapshot
from .assertions import Assertion

logger = logging.getLogger("harness.validator")


def check_signoff(proposal: ProposalDescriptor,
                  previous: Optional[RegistrySnapshot]) -> List[AssertionFailure]:
    """Check the proposal's sign-off lists against its payload and the registry.

    Args:
        proposal: Proposal being validated
        previous: Registry snapshot taken before the proposal ran

    Returns:
        One failure per unsigned target or unknown deprecated name
    """
    failures: List[AssertionFailure] = []

    if proposal.payload is not None:
        for target in sorted(proposal.payload.targets() - proposal.affected_resource_names):
            failures.append(AssertionFailure(
                f"signoff:{target}",
                f"payload calls '{target}' which is not in affected_resource_names",
                proposal.id,
            ))

    if previous is not None:
        for name in sorted(proposal.deprecated_resource_names):
            if name not in previous:
                failures.append(AssertionFailure(
                    f"deprecation:{name}",
                    f"'{name}' is deprecated but was not registered before {proposal.id}",
                    proposal.id,
                ))

    return failures


class Validator:
    """Runs declarative assertions and sign-off checks for one proposal."""

    def __init__(self, settings: Optional[HarnessSettings] = None):
        self._settings = settings or HarnessSettings()

    def _evaluate(self, assertion: Assertion, proposal_id: str,
                  snapshot: RegistrySnapshot, live_state: LiveStateView) -> Optional[AssertionFailure]:
        try:
            outcome = assertion.check(snapshot, live_state)
        except AssertionFailure as e:
            return AssertionFailure(assertion.name, e.message, proposal_id)
        except AssertionError as e:
            return AssertionFailure(assertion.name, str(e) or assertion.description, proposal_id)
        except HarnessError as e:
            return AssertionFailure(assertion.name, str(e), proposal_id)
        except Exception as e:
            return AssertionFailure(assertion.name, f"raised {type(e).__name__}: {e}", proposal_id)

        if outcome is False:
            return AssertionFailure(assertion.name, assertion.description or "predicate returned False",
                                    proposal_id)
        return None

    def validate(self, proposal: ProposalDescriptor, snapshot: RegistrySnapshot,
                 live_state: LiveStateView,
                 previous: Optional[RegistrySnapshot] = None) -> List[AssertionFailure]:
        """Evaluate every assertion of ``proposal``.

        Args:
            proposal: Proposal whose post-conditions are checked
            snapshot: Registry snapshot after the proposal applied
            live_state: Live state view
            previous: Snapshot before the proposal (enables deprecation sign-off)

        Returns:
            All failures, empty when the proposal holds
        """
        failures: List[AssertionFailure] = []
        if self._settings.enforce_signoff:
            failures.extend(check_signoff(proposal, previous))

        seen: Set[str] = set()
        failed: Set[str] = set()
        for assertion in proposal.assertions:
            if assertion.name in seen:
                failures.append(AssertionFailure(assertion.name, "duplicate assertion name", proposal.id))
                continue
            seen.add(assertion.name)

            unknown = [d for d in assertion.depends_on if d not in seen]
            if unknown:
                failures.append(AssertionFailure(
                    assertion.name, f"depends on undeclared assertion(s) {unknown}", proposal.id))
                failed.add(assertion.name)
                continue

            blocked = [d for d in assertion.depends_on if d in failed]
            if blocked:
                failures.append(AssertionFailure(
                    assertion.name, f"skipped: dependency failed {blocked}", proposal.id))
                failed.add(assertion.name)
                continue

            failure = self._evaluate(assertion, proposal.id, snapshot, live_state)
            if failure is not None:
                failures.append(failure)
                failed.add(assertion.name)

        if failures:
            logger.warning(f"[VALIDATOR] {proposal.id}: {len(failures)} assertion failure(s)")
        return failures
