"""
Assertions.

Named predicates over the registry snapshot and live state, plus helpers
for the common post-conditions (roles, balances, bounded values).
"""
from dataclasses import dataclass
from numbers import Number
from typing import Any, Callable, Optional, Tuple, Union

from upgrade_harness.core.errors import AssertionFailure
from upgrade_harness.environment.live_state import LiveStateView
from upgrade_harness.registry.registry_context import RegistrySnapshot

# check(snapshot, live_state) -> None/True on success, False on failure;
# may also raise AssertionFailure or AssertionError
AssertionCheck = Callable[[RegistrySnapshot, LiveStateView], Optional[bool]]


@dataclass(frozen=True)
class Assertion:
    """A named post-condition.

    Attributes:
        name: Unique name within a proposal
        check: Predicate over (snapshot, live_state)
        description: Message used when the predicate returns False
        depends_on: Names of earlier assertions that must hold first
    """

    name: str
    check: AssertionCheck
    description: str = ""
    depends_on: Tuple[str, ...] = ()


def expect_approx(actual: Union[int, float, str], expected: Union[int, float, str],
                  tolerance: Union[int, float, str] = 1000, name: str = "approx") -> None:
    """Raise AssertionFailure unless ``|actual - expected| <= tolerance``.

    String inputs are parsed as integers so large fixed-point values keep
    full precision.
    """
    def num(value):
        return int(value) if isinstance(value, str) else value

    a, e, t = num(actual), num(expected), num(tolerance)
    if abs(a - e) > t:
        raise AssertionFailure(name, f"{a} not within {t} of {e}")


def _address(snapshot: RegistrySnapshot, ref: str) -> str:
    return snapshot.address_of(ref) if ref in snapshot else ref


def role_held_by(role: str, resource: str, exclusive: bool = True) -> Assertion:
    """Role ``role`` is held by ``resource`` (and nobody else if exclusive)."""

    def check(snapshot: RegistrySnapshot, live: LiveStateView) -> None:
        holder = snapshot.address_of(resource)
        members = live.role_members(role)
        if holder not in members:
            raise AssertionFailure(f"role:{role}", f"{resource} ({holder}) does not hold {role}")
        if exclusive and members != {holder}:
            others = sorted(members - {holder})
            raise AssertionFailure(f"role:{role}", f"{role} also held by {others}")

    qualifier = "exactly " if exclusive else ""
    return Assertion(name=f"role:{role}:{resource}", check=check,
                     description=f"{role} held by {qualifier}{resource}")


def balance_within(token: str, holder: str, lo: int, hi: int) -> Assertion:
    """Balance of ``token`` at ``holder`` is within ``[lo, hi]``."""

    def check(snapshot: RegistrySnapshot, live: LiveStateView) -> None:
        balance = live.balance_of(_address(snapshot, token), _address(snapshot, holder))
        if not lo <= balance <= hi:
            raise AssertionFailure(f"balance:{token}:{holder}",
                                   f"balance {balance} outside [{lo}, {hi}]")

    return Assertion(name=f"balance:{token}:{holder}", check=check,
                     description=f"{token} balance of {holder} in [{lo}, {hi}]")


def value_within(name: str, reader: Callable[[RegistrySnapshot, LiveStateView], Number],
                 lo: Number, hi: Number, depends_on: Tuple[str, ...] = ()) -> Assertion:
    """A value read from state (e.g. an oracle price) is within ``[lo, hi]``."""

    def check(snapshot: RegistrySnapshot, live: LiveStateView) -> None:
        value = reader(snapshot, live)
        if value is None or not lo <= value <= hi:
            raise AssertionFailure(name, f"{value} outside [{lo}, {hi}]")

    return Assertion(name=name, check=check, description=f"{name} in [{lo}, {hi}]",
                     depends_on=depends_on)


def storage_equals(resource: str, key: str, expected: Any) -> Assertion:
    """Storage ``key`` of ``resource`` equals ``expected``.

    ``expected`` given as ``"{name}"`` is compared with that name's address.
    """

    def check(snapshot: RegistrySnapshot, live: LiveStateView) -> None:
        want = expected
        if isinstance(want, str) and want.startswith("{") and want.endswith("}"):
            want = snapshot.address_of(want[1:-1])
        actual = live.read(snapshot.address_of(resource), key)
        if actual != want:
            raise AssertionFailure(f"storage:{resource}.{key}", f"expected {want!r}, got {actual!r}")

    return Assertion(name=f"storage:{resource}.{key}", check=check,
                     description=f"{resource}.{key} == {expected!r}")


def is_paused(resource: str, expected: bool = True) -> Assertion:
    state = "paused" if expected else "unpaused"

    def check(snapshot: RegistrySnapshot, live: LiveStateView) -> bool:
        return live.is_paused(snapshot.address_of(resource)) == expected

    return Assertion(name=f"paused:{resource}", check=check, description=f"{resource} is {state}")
