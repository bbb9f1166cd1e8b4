"""
Live State.

Read access to the target system's state (LiveStateView) and an in-memory
simulation of it used for forked/test environments.

The real ledger runtime is an external collaborator; SimulatedLiveState
models just enough of it (named addresses, storage, token balances, roles,
pause flags) for proposals to be applied and validated.
"""
import copy
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from upgrade_harness.core import constants
from upgrade_harness.core.errors import ConfigurationError, PhaseExecutionError

logger = logging.getLogger("harness.live_state")

# handler(state, caller, target_address, value, *arguments) -> event dict or None
MethodHandler = Callable[..., Optional[Dict[str, Any]]]


class LiveStateView(ABC):
    """Read-only interface over the target system's state."""

    @abstractmethod
    def resolve(self, name: str) -> Optional[str]:
        """Address registered under ``name`` in the target system, or None."""

    @abstractmethod
    def read(self, address: str, key: str, default: Any = None) -> Any:
        """Read a storage value of a resource."""

    @abstractmethod
    def balance_of(self, token: str, holder: str) -> int:
        """Token balance of ``holder``."""

    @abstractmethod
    def has_role(self, role: str, holder: str) -> bool:
        """Whether ``holder`` holds ``role``."""

    @abstractmethod
    def role_members(self, role: str) -> Set[str]:
        """All holders of ``role``."""

    @abstractmethod
    def native_balance(self, address: str) -> int:
        """Native currency balance of ``address``."""

    def is_paused(self, address: str) -> bool:
        return bool(self.read(address, "paused", False))


class SimulatedLiveState(LiveStateView):
    """In-memory target state.

    Mutations are plain methods; ``call`` dispatches a method by name to a
    built-in or registered handler and is what governance execution uses.
    """

    def __init__(self, named_addresses: Optional[Dict[str, str]] = None):
        self._named: Dict[str, str] = dict(named_addresses or {})
        self._storage: Dict[str, Dict[str, Any]] = defaultdict(dict)
        self._balances: Dict[Tuple[str, str], int] = defaultdict(int)
        self._roles: Dict[str, Set[str]] = defaultdict(set)
        self._native: Dict[str, int] = defaultdict(int)
        self._handlers: Dict[Tuple[Optional[str], str], MethodHandler] = {}
        self._install_builtin_handlers()

    # ---------------------------------------------------------
    # VIEW
    # ---------------------------------------------------------
    def resolve(self, name: str) -> Optional[str]:
        return self._named.get(name)

    def read(self, address: str, key: str, default: Any = None) -> Any:
        return self._storage.get(address, {}).get(key, default)

    def balance_of(self, token: str, holder: str) -> int:
        return self._balances.get((token, holder), 0)

    def has_role(self, role: str, holder: str) -> bool:
        return holder in self._roles.get(role, set())

    def role_members(self, role: str) -> Set[str]:
        return set(self._roles.get(role, set()))

    def native_balance(self, address: str) -> int:
        return self._native.get(address, 0)

    @property
    def named_addresses(self) -> Dict[str, str]:
        return dict(self._named)

    # ---------------------------------------------------------
    # MUTATION
    # ---------------------------------------------------------
    def register(self, name: str, address: str) -> None:
        self._named[name] = address

    def write(self, address: str, key: str, value: Any) -> None:
        self._storage[address][key] = value

    def set_balance(self, token: str, holder: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Negative balance for {holder} in {token}")
        self._balances[(token, holder)] = amount

    def grant_role(self, role: str, holder: str) -> None:
        self._roles[role].add(holder)

    def revoke_role(self, role: str, holder: str) -> None:
        self._roles[role].discard(holder)

    def fund(self, address: str, amount: int) -> None:
        """Credit native currency (forceEth in a forked chain)."""
        self._native[address] += amount

    def transfer_native(self, sender: str, recipient: str, amount: int) -> None:
        if self._native[sender] < amount:
            raise PhaseExecutionError(
                f"Insufficient native balance: {sender} has {self._native[sender]}, needs {amount}",
                phase="governance",
            )
        self._native[sender] -= amount
        self._native[recipient] += amount

    # ---------------------------------------------------------
    # METHOD DISPATCH
    # ---------------------------------------------------------
    def register_method(self, method: str, handler: MethodHandler,
                        address: Optional[str] = None) -> None:
        """Register a handler for ``method``, optionally for one address only."""
        self._handlers[(address, method)] = handler

    def call(self, caller: str, target: str, method: str,
             arguments: Iterable[Any] = (), value: int = 0) -> Optional[Dict[str, Any]]:
        """Invoke ``method`` on ``target`` as ``caller``.

        Raises:
            PhaseExecutionError: unknown method or the handler reverted
        """
        handler = self._handlers.get((target, method)) or self._handlers.get((None, method))
        if handler is None:
            raise PhaseExecutionError(f"{target} has no method '{method}'", phase="governance")
        if value:
            self.transfer_native(caller, target, value)
        return handler(self, caller, target, value, *tuple(arguments))

    def fork(self) -> "SimulatedLiveState":
        """Deep copy used to apply a batch of calls atomically."""
        return copy.deepcopy(self)

    def adopt(self, other: "SimulatedLiveState") -> None:
        """Replace this state's contents with ``other``'s."""
        self.__dict__.update(other.__dict__)

    def _install_builtin_handlers(self) -> None:
        for method, handler in _BUILTIN_HANDLERS.items():
            self._handlers[(None, method)] = handler


# =============================================================================
# BUILT-IN METHODS
# =============================================================================

def _grant_role(state, caller, target, value, role, holder):
    state.grant_role(role, holder)
    return {"event": "RoleGranted", "role": role, "account": holder}


def _revoke_role(state, caller, target, value, role, holder):
    if not state.has_role(role, holder):
        raise PhaseExecutionError(f"{holder} does not hold {role}", phase="governance")
    state.revoke_role(role, holder)
    return {"event": "RoleRevoked", "role": role, "account": holder}


def _transfer(state, caller, target, value, recipient, amount):
    # target is the token; tokens move out of the caller
    balance = state.balance_of(target, caller)
    if balance < amount:
        raise PhaseExecutionError(
            f"transfer amount {amount} exceeds balance {balance}", phase="governance")
    state.set_balance(target, caller, balance - amount)
    state.set_balance(target, recipient, state.balance_of(target, recipient) + amount)
    return {"event": "Transfer", "from": caller, "to": recipient, "amount": amount}


def _mint(state, caller, target, value, recipient, amount):
    state.set_balance(target, recipient, state.balance_of(target, recipient) + amount)
    return {"event": "Transfer", "from": constants.ZERO_ADDRESS, "to": recipient, "amount": amount}


def _set_value(state, caller, target, value, key, new_value):
    state.write(target, key, new_value)
    return {"event": "ValueSet", "key": key, "value": new_value}


def _pause(state, caller, target, value):
    state.write(target, "paused", True)
    return {"event": "Paused", "account": caller}


def _unpause(state, caller, target, value):
    state.write(target, "paused", False)
    return {"event": "Unpaused", "account": caller}


_BUILTIN_HANDLERS: Dict[str, MethodHandler] = {
    "grantRole": _grant_role,
    "revokeRole": _revoke_role,
    "transfer": _transfer,
    "mint": _mint,
    "setValue": _set_value,
    "pause": _pause,
    "unpause": _unpause,
}


class BalanceSeed(BaseModel):
    """One ``balances`` entry of an addresses document."""
    model_config = ConfigDict(extra="forbid")

    token: str
    holder: str
    amount: int = Field(ge=0)


class SeedDocument(BaseModel):
    """Optional state sections of an addresses document."""
    model_config = ConfigDict(extra="allow")

    balances: List[BalanceSeed] = Field(default_factory=list)
    roles: Dict[str, List[str]] = Field(default_factory=dict)
    storage: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


def seed_state(state: SimulatedLiveState, data: Dict[str, Any]) -> List[str]:
    """Apply optional ``balances`` / ``roles`` / ``storage`` sections.

    Names in the sections are resolved through the state's named addresses;
    unresolvable names are used verbatim. Returns the sections applied.

    Raises:
        ConfigurationError: a section or entry is malformed; nothing is applied
    """
    try:
        document = SeedDocument.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid state sections in addresses document: {e}") from e

    applied: List[str] = []

    def addr(ref: str) -> str:
        return state.resolve(ref) or ref

    for entry in document.balances:
        state.set_balance(addr(entry.token), addr(entry.holder), entry.amount)
    if document.balances:
        applied.append("balances")

    for role, holders in document.roles.items():
        for holder in holders:
            state.grant_role(role, addr(holder))
    if document.roles:
        applied.append("roles")

    for name, values in document.storage.items():
        for key, value in values.items():
            state.write(addr(name), key, value)
    if document.storage:
        applied.append("storage")

    return applied
