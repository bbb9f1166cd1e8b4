"""
Harness Errors

Explicit error types for the upgrade harness.

Propagation:
    ConfigurationError (and subclasses) -> fatal, halts the whole run
    UnknownResource / PhaseExecutionError / AssertionFailure
        -> caught at the proposal boundary, attached to its result
    LifecycleViolation -> programming error, always propagates
"""

from typing import Any, Optional, Tuple


class HarnessError(Exception):
    """Base error for all harness failures."""

    tag = "HARNESS ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.tag}] {self.message}"


class ConfigurationError(HarnessError):
    """
    Raised when a required address, resource or setting is absent.

    Configuration errors are FATAL and abort the run before (or instead of)
    any further phase.
    """

    tag = "CONFIGURATION ERROR"


class CatalogueError(ConfigurationError):
    """Raised when a catalogue is malformed or its dependencies cannot be met."""

    tag = "CATALOGUE ERROR"


class RunAbortedError(ConfigurationError):
    """
    Raised when a phase hit a ConfigurationError mid-run.

    Carries the results of every proposal processed so far, including the
    one that aborted (after its teardown was attempted).
    """

    tag = "RUN ABORTED"

    def __init__(self, message: str, proposal_id: str = "",
                 results: Tuple[Any, ...] = ()):
        super().__init__(message)
        self.proposal_id = proposal_id
        self.results = results


class UnknownResource(HarnessError, KeyError):
    """
    Raised when a registry name does not exist (or is deprecated).

    Recoverable at the proposal level.
    """

    tag = "UNKNOWN RESOURCE"

    def __init__(self, name: str, deprecated: bool = False):
        reason = "deprecated" if deprecated else "not registered"
        super().__init__(f"'{name}' is {reason}")
        self.name = name
        self.deprecated = deprecated

    def __str__(self) -> str:
        return HarnessError.__str__(self)


class PhaseExecutionError(HarnessError):
    """Raised when a deploy/setup/governance/teardown step itself failed."""

    tag = "PHASE EXECUTION ERROR"

    def __init__(self, message: str, phase: str = "", proposal_id: str = "",
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.phase = phase
        self.proposal_id = proposal_id
        self.cause = cause

    def __str__(self) -> str:
        where = "/".join(part for part in (self.proposal_id, self.phase) if part)
        return f"[{self.tag}] {where}: {self.message}" if where else super().__str__()


class AssertionFailure(HarnessError):
    """
    A validation predicate that did not hold.

    Used both as a collected value and as an exception a validate callback
    may raise to fail fast.
    """

    tag = "ASSERTION FAILURE"

    def __init__(self, assertion: str, message: str, proposal_id: str = ""):
        super().__init__(message)
        self.assertion = assertion
        self.proposal_id = proposal_id

    def __str__(self) -> str:
        return f"[{self.tag}] {self.assertion}: {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssertionFailure):
            return NotImplemented
        return (self.assertion, self.message, self.proposal_id) == (
            other.assertion, other.message, other.proposal_id)

    def __hash__(self) -> int:
        return hash((self.assertion, self.message, self.proposal_id))

    def to_dict(self) -> dict:
        return {
            "assertion": self.assertion,
            "message": self.message,
            "proposal_id": self.proposal_id,
        }


class LifecycleViolation(HarnessError):
    """Raised when a proposal is driven through an illegal state transition."""

    tag = "LIFECYCLE VIOLATION"
