"""
Environment Loader - Baseline State Bootstrap

Builds the starting point of a run:
  1. Validate configuration (deployer identity, state version)
  2. Load baseline named addresses (JSON file and/or live state factory)
  3. Seed the simulated state (balances, roles, storage) when present
  4. Verify every required resource resolves

On any missing requirement → ConfigurationError, nothing runs.

Loading is idempotent per process: the live state for a given config and
state factory is bootstrapped once and reused; a different factory gets its
own baseline. Every call returns a FRESH Registry so no run inherits another
run's bookkeeping.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from upgrade_harness.core.errors import ConfigurationError
from .environment_config import EnvironmentConfig
from .live_state import LiveStateView, SimulatedLiveState, seed_state
from upgrade_harness.registry.registry_context import ResourceHandle
from upgrade_harness.registry.registry_engine import Registry
from upgrade_harness.registry.registry_types import ResourceKind

logger = logging.getLogger("harness.environment")

StateFactory = Callable[[EnvironmentConfig], LiveStateView]


@dataclass(frozen=True)
class _Baseline:
    handles: Tuple[ResourceHandle, ...]
    live_state: LiveStateView


# Module-level cache: one bootstrapped baseline per (configuration, state factory)
_environments: Dict[Tuple[EnvironmentConfig, Optional[StateFactory]], _Baseline] = {}


def reset_environment_cache() -> None:
    """Forget every loaded environment. Used in tests to simulate a new process."""
    _environments.clear()


def _parse_handle(name: str, raw: Any) -> ResourceHandle:
    if isinstance(raw, str):
        return ResourceHandle(name=name, address=raw)
    if isinstance(raw, dict) and raw.get("address"):
        try:
            kind = ResourceKind(raw.get("kind", ResourceKind.CONTRACT.value))
        except ValueError:
            raise ConfigurationError(f"Unknown resource kind for '{name}': {raw.get('kind')}") from None
        return ResourceHandle(name=name, address=str(raw["address"]), kind=kind)
    raise ConfigurationError(f"Address entry '{name}' has no address: {raw!r}")


def _read_addresses_file(path: str) -> Dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Addresses file not found: {file_path}")
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {file_path}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("addresses"), dict):
        raise ConfigurationError(f"{file_path} must be an object with an 'addresses' mapping")
    return data


def _bootstrap(config: EnvironmentConfig, state_factory: Optional[StateFactory]) -> _Baseline:
    handles: Dict[str, ResourceHandle] = {}
    file_data: Dict[str, Any] = {}

    if config.addresses_path:
        file_data = _read_addresses_file(config.addresses_path)
        for name, raw in file_data["addresses"].items():
            handles[name] = _parse_handle(name, raw)

    if state_factory is not None:
        live_state = state_factory(config)
    else:
        live_state = SimulatedLiveState()

    if isinstance(live_state, SimulatedLiveState):
        for handle in handles.values():
            if live_state.resolve(handle.name) is None:
                live_state.register(handle.name, handle.address)
        for name, address in live_state.named_addresses.items():
            handles.setdefault(name, ResourceHandle(name=name, address=address))
        applied = seed_state(live_state, file_data)
        if applied and config.logging_enabled:
            logger.info(f"[ENVIRONMENT] Seeded simulated state: {', '.join(applied)}")

    # Required names not yet known may still resolve through the live state
    missing = []
    for name in sorted(config.required_resource_names):
        if name in handles:
            continue
        address = live_state.resolve(name)
        if address:
            handles[name] = ResourceHandle(name=name, address=address)
        else:
            missing.append(name)

    if missing:
        logger.error(f"[ENVIRONMENT] Missing required addresses: {missing}")
        raise ConfigurationError(
            f"An environment variable contract address is not set: {', '.join(missing)}"
        )

    return _Baseline(handles=tuple(handles.values()), live_state=live_state)


def load_environment(config: EnvironmentConfig,
                     state_factory: Optional[StateFactory] = None) -> Tuple[Registry, LiveStateView]:
    """Bootstrap (or reuse) the environment for ``config`` and ``state_factory``.

    Args:
        config: Environment configuration
        state_factory: Builds the live state view; defaults to an empty
            SimulatedLiveState seeded from the addresses file

    Returns:
        (fresh Registry of baseline resources, live state view)

    Raises:
        ConfigurationError: invalid config, malformed addresses document,
            or a required address is absent
    """
    config.validate()

    key = (config, state_factory)
    baseline = _environments.get(key)
    if baseline is None:
        if config.logging_enabled:
            logger.info(f"[ENVIRONMENT] Loading environment (version={config.state_version})")
        baseline = _bootstrap(config, state_factory)
        _environments[key] = baseline
        if config.logging_enabled:
            logger.info(f"[ENVIRONMENT] Environment loaded: {len(baseline.handles)} resources")

    return Registry(baseline.handles), baseline.live_state
