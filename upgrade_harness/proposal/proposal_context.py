"""
Proposal Context.

Immutable proposal descriptors, lifecycle callback bundles and governance
payload definitions.
"""
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Optional, Tuple, Union

from .proposal_types import ProposalCategory


# Lifecycle callbacks may be plain functions or coroutines.
#   deploy(deployer, addresses, logging) -> Iterable[ResourceHandle]
#   setup(addresses, previous, current, logging) -> None
#   validate(addresses, previous, current) -> None
#   teardown(addresses, previous, current, logging) -> None
PhaseCallback = Callable[..., Union[Any, Awaitable[Any]]]


def _no_deploy(deployer, addresses, logging=False):
    return ()


def _no_op(addresses, previous, current, logging=False):
    return None


def _no_validate(addresses, previous, current):
    return None


@dataclass(frozen=True)
class Lifecycle:
    """The four lifecycle callbacks of one proposal.

    Missing callbacks default to no-ops.
    """

    deploy: PhaseCallback = _no_deploy
    setup: PhaseCallback = _no_op
    validate: PhaseCallback = _no_validate
    teardown: PhaseCallback = _no_op

    @classmethod
    def from_module(cls, module: ModuleType) -> "Lifecycle":
        """Collect deploy/setup/validate/teardown from a proposal module."""
        defaults = cls()
        return cls(
            deploy=getattr(module, "deploy", defaults.deploy),
            setup=getattr(module, "setup", defaults.setup),
            validate=getattr(module, "validate", defaults.validate),
            teardown=getattr(module, "teardown", defaults.teardown),
        )


@dataclass(frozen=True)
class GovernanceCommand:
    """One call in a governance payload.

    Attributes:
        target: Registry name of the called resource
        method: Method name
        arguments: Positional arguments; ``"{name}"`` strings are
            resolved to registry addresses at execution time
        value: Native currency sent with the call
        description: Human-readable description
    """

    target: str
    method: str
    arguments: Tuple[Any, ...] = ()
    value: int = 0
    description: str = ""


@dataclass(frozen=True)
class ProposalPayload:
    """The on-chain body of a proposal."""

    title: str
    commands: Tuple[GovernanceCommand, ...] = ()
    description: str = ""

    def targets(self) -> FrozenSet[str]:
        return frozenset(command.target for command in self.commands)


@dataclass(frozen=True)
class ProposalDescriptor:
    """Immutable description of one upgrade unit.

    Attributes:
        id: Catalogue identifier
        category: Governance route
        deploy: False means the effects already exist in the live state;
            the deploy phase is replaced by name resolution of ``provides``
        total_value: Native currency sent with governance execution
        affected_resource_names: Names the proposal signs off as touched
        deprecated_resource_names: Names retired once the proposal passes
        lifecycle: deploy/setup/validate/teardown callbacks
        payload: Governance payload, None when nothing is executed
        assertions: Declarative post-conditions run by the Validator
        requires: Names that must exist before this proposal runs
        provides: Names this proposal introduces
        proposal_ref: Identifier of the on-chain proposal, if any
    """

    id: str
    category: ProposalCategory = ProposalCategory.NONE
    deploy: bool = True
    total_value: int = 0
    affected_resource_names: FrozenSet[str] = frozenset()
    deprecated_resource_names: FrozenSet[str] = frozenset()
    lifecycle: Lifecycle = field(default_factory=Lifecycle)
    payload: Optional[ProposalPayload] = None
    assertions: Tuple[Any, ...] = ()
    requires: FrozenSet[str] = frozenset()
    provides: FrozenSet[str] = frozenset()
    proposal_ref: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("ProposalDescriptor requires an id")
        if self.total_value < 0:
            raise ValueError(f"{self.id}: total_value must be >= 0")
        # Normalise iterables to frozensets so descriptors stay hashable
        for name in ("affected_resource_names", "deprecated_resource_names",
                     "requires", "provides"):
            value = getattr(self, name)
            if not isinstance(value, frozenset):
                object.__setattr__(self, name, frozenset(value))
        if not isinstance(self.assertions, tuple):
            object.__setattr__(self, "assertions", tuple(self.assertions))

    @property
    def executes_governance(self) -> bool:
        return self.payload is not None and self.category != ProposalCategory.NONE


def make_command(target: str, method: str, *arguments: Any,
                 value: int = 0, description: str = "") -> GovernanceCommand:
    """Shorthand for building a GovernanceCommand."""
    return GovernanceCommand(target=target, method=method, arguments=tuple(arguments),
                             value=value, description=description)


def make_payload(title: str, commands: Iterable[GovernanceCommand],
                 description: str = "") -> ProposalPayload:
    return ProposalPayload(title=title, commands=tuple(commands), description=description)
