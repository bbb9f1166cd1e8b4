"""
Resource Registry.

Tracks every resource created or mutated during a run by symbolic name.

Exports:
    - ResourceKind: Enum for resource kinds
    - EntryStatus: Enum for entry status
    - ResourceHandle: Immutable resource handle
    - RegistrySnapshot: Read-only registry view
    - Registry: Mutable registry owned by the orchestrator
    - OverwriteRecord: Record of a live entry being replaced
"""
from .registry_types import ResourceKind, EntryStatus
from .registry_context import ResourceHandle, RegistrySnapshot
from .registry_engine import Registry, OverwriteRecord

__all__ = [
    "ResourceKind",
    "EntryStatus",
    "ResourceHandle",
    "RegistrySnapshot",
    "Registry",
    "OverwriteRecord",
]
