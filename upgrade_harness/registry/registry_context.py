"""
Registry Context.

Immutable resource handles and read-only registry snapshots.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, Mapping

from upgrade_harness.core.errors import UnknownResource
from .registry_types import ResourceKind


@dataclass(frozen=True)
class ResourceHandle:
    """Immutable handle for one tracked resource.

    Attributes:
        name: Symbolic name, unique within a registry
        address: Opaque identifier in the target system
        kind: Resource kind tag
    """

    name: str
    address: str
    kind: ResourceKind = ResourceKind.CONTRACT

    def to_dict(self) -> dict:
        return {"name": self.name, "address": self.address, "kind": self.kind.value}


@dataclass(frozen=True)
class RegistrySnapshot(Mapping):
    """Read-only view of a registry at a point in time.

    Behaves as a ``Mapping[str, ResourceHandle]`` over live entries only.
    Deprecated names are remembered so lookups can report why they fail.
    """

    entries: Mapping[str, ResourceHandle] = field(default_factory=dict)
    deprecated: FrozenSet[str] = frozenset()

    def __post_init__(self):
        # Detach from the caller's dict so the owner cannot mutate us later
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __getitem__(self, name: str) -> ResourceHandle:
        try:
            return self.entries[name]
        except KeyError:
            raise UnknownResource(name, deprecated=name in self.deprecated) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __hash__(self) -> int:
        return hash((frozenset(self.entries.items()), self.deprecated))

    def get(self, name: str) -> ResourceHandle:  # type: ignore[override]
        """Return the handle for ``name``; never returns a default."""
        return self[name]

    def address_of(self, name: str) -> str:
        return self[name].address

    def addresses(self) -> Dict[str, str]:
        """Name -> address book for all live entries."""
        return {name: handle.address for name, handle in self.entries.items()}

    def names(self) -> FrozenSet[str]:
        return frozenset(self.entries)

    def is_deprecated(self, name: str) -> bool:
        return name in self.deprecated


EMPTY_SNAPSHOT = RegistrySnapshot()
