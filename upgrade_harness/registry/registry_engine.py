"""
Registry Engine.

The mutable name -> resource registry owned by the orchestrator for the
duration of one run. Callbacks only ever see RegistrySnapshot values.

Rules:
    - get() never returns a default; absent or deprecated names raise
    - put() over a live name is allowed but logged and recorded
    - merge() lets the incoming entry win on collision
    - deprecate() hides a name from lookups until it is put() again
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Union

from upgrade_harness.core.errors import UnknownResource
from .registry_context import ResourceHandle, RegistrySnapshot
from .registry_types import EntryStatus

logger = logging.getLogger("harness.registry")


@dataclass(frozen=True)
class OverwriteRecord:
    """An address that was replaced while its name was still live."""
    name: str
    previous: ResourceHandle
    replacement: ResourceHandle
    source: str


class Registry:
    """Name -> ResourceHandle mapping with deprecation and overwrite history."""

    def __init__(self, handles: Optional[Iterable[ResourceHandle]] = None):
        self._entries: Dict[str, ResourceHandle] = {}
        self._deprecated: Dict[str, ResourceHandle] = {}
        self._overwrites: List[OverwriteRecord] = []
        for handle in handles or ():
            self._entries[handle.name] = handle

    # ---------------------------------------------------------
    # LOOKUP
    # ---------------------------------------------------------
    def get(self, name: str) -> ResourceHandle:
        """Return the live handle for ``name`` or raise UnknownResource."""
        handle = self._entries.get(name)
        if handle is None:
            raise UnknownResource(name, deprecated=name in self._deprecated)
        return handle

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def status(self, name: str) -> EntryStatus:
        if name in self._entries:
            return EntryStatus.LIVE
        if name in self._deprecated:
            return EntryStatus.DEPRECATED
        raise UnknownResource(name)

    @property
    def overwrites(self) -> List[OverwriteRecord]:
        return list(self._overwrites)

    # ---------------------------------------------------------
    # MUTATION
    # ---------------------------------------------------------
    def put(self, name: str, handle: Union[ResourceHandle, str],
            source: str = "put") -> ResourceHandle:
        """Insert or overwrite ``name``.

        A bare address string is wrapped in a CONTRACT handle. Overwriting a
        live name with a different address is recorded and logged.
        """
        if isinstance(handle, str):
            handle = ResourceHandle(name=name, address=handle)
        elif handle.name != name:
            handle = ResourceHandle(name=name, address=handle.address, kind=handle.kind)

        previous = self._entries.get(name)
        if previous is not None and previous != handle:
            self._overwrites.append(OverwriteRecord(name, previous, handle, source))
            logger.warning(
                f"[REGISTRY] {source}: live entry '{name}' overwritten "
                f"{previous.address} -> {handle.address}"
            )

        # Explicit re-add clears deprecation
        self._deprecated.pop(name, None)
        self._entries[name] = handle
        return handle

    def merge(self, other: Union["Registry", RegistrySnapshot, Iterable[ResourceHandle]],
              source: str = "merge") -> Set[str]:
        """Insert every entry of ``other``; incoming entries win.

        Returns the set of names that were added or changed.
        """
        if isinstance(other, Registry):
            incoming = list(other._entries.values())
        elif isinstance(other, RegistrySnapshot):
            incoming = list(other.values())
        else:
            incoming = list(other)

        changed: Set[str] = set()
        for handle in incoming:
            if self._entries.get(handle.name) == handle:
                continue
            self.put(handle.name, handle, source=source)
            changed.add(handle.name)
        return changed

    def deprecate(self, name: str) -> ResourceHandle:
        """Hide a live name from lookups. Raises if it is not live."""
        handle = self.get(name)
        del self._entries[name]
        self._deprecated[name] = handle
        logger.info(f"[REGISTRY] '{name}' deprecated ({handle.address})")
        return handle

    # ---------------------------------------------------------
    # SNAPSHOT
    # ---------------------------------------------------------
    def snapshot(self) -> RegistrySnapshot:
        """Freeze the current live entries into a read-only view."""
        return RegistrySnapshot(
            entries=dict(self._entries),
            deprecated=frozenset(self._deprecated),
        )

    def copy(self) -> "Registry":
        clone = Registry(self._entries.values())
        clone._deprecated = dict(self._deprecated)
        return clone

    @classmethod
    def from_addresses(cls, addresses: Dict[str, str]) -> "Registry":
        return cls(ResourceHandle(name=n, address=a) for n, a in addresses.items())
