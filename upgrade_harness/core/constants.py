"""
Core Constants

Defaults and environment variable names used across the harness.
This module contains NO execution logic.
"""

from typing import Final, FrozenSet

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_LOGGING: Final[str] = "HARNESS_LOGGING"
ENV_DEPLOYER: Final[str] = "HARNESS_DEPLOYER"
ENV_STATE_VERSION: Final[str] = "HARNESS_STATE_VERSION"
ENV_ADDRESSES_FILE: Final[str] = "HARNESS_ADDRESSES_FILE"
ENV_REQUIRED_NAMES: Final[str] = "HARNESS_REQUIRED_NAMES"
ENV_ENFORCE_SIGNOFF: Final[str] = "HARNESS_ENFORCE_SIGNOFF"

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_STATE_VERSION: Final[int] = 1
SUPPORTED_STATE_VERSIONS: Final[FrozenSet[int]] = frozenset({1})

# The core resource must be present before any proposal runs.
DEFAULT_REQUIRED_NAMES: Final[FrozenSet[str]] = frozenset({"core"})

FALSY_FLAGS: Final[FrozenSet[str]] = frozenset({"", "0", "false", "no", "off"})

# =============================================================================
# GOVERNANCE ROUTING
# =============================================================================

DAO_EXECUTOR: Final[str] = "feiDAOTimelock"
TRIBAL_COUNCIL_EXECUTOR: Final[str] = "tribalCouncilTimelock"
OPTIMISTIC_EXECUTOR: Final[str] = "optimisticTimelock"

ZERO_ADDRESS: Final[str] = "0x" + "0" * 40
