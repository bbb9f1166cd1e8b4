"""
Environment Configuration.

Startup settings for loading the target system, read from the process
environment with explicit defaults. Fail-fast on invalid values.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from upgrade_harness.core import constants
from upgrade_harness.core.errors import ConfigurationError
from upgrade_harness.proposal.proposal_types import ProposalCategory


def _flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in constants.FALSY_FLAGS


def _names(value: Optional[str], default: FrozenSet[str]) -> FrozenSet[str]:
    if value is None:
        return default
    return frozenset(n.strip() for n in value.split(",") if n.strip())


@dataclass(frozen=True)
class EnvironmentConfig:
    """Immutable configuration for loading an environment.

    Attributes:
        logging_enabled: Whether phases produce diagnostic output
        deployer_identity: Address that deploys new resources
        state_version: Version of the target state layout
        addresses_path: JSON file with baseline named addresses
        required_resource_names: Names that must resolve before a run
        supported_state_versions: Accepted values of ``state_version``
    """

    logging_enabled: bool = False
    deployer_identity: str = ""
    state_version: int = constants.DEFAULT_STATE_VERSION
    addresses_path: Optional[str] = None
    required_resource_names: FrozenSet[str] = constants.DEFAULT_REQUIRED_NAMES
    supported_state_versions: FrozenSet[int] = constants.SUPPORTED_STATE_VERSIONS

    def validate(self) -> None:
        """Raise ConfigurationError if the configuration cannot be used."""
        if not self.deployer_identity:
            raise ConfigurationError("No deploy address! deployer_identity is empty")
        if self.state_version not in self.supported_state_versions:
            raise ConfigurationError(
                f"Unsupported state version {self.state_version} "
                f"(supported: {sorted(self.supported_state_versions)})"
            )

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "EnvironmentConfig":
        """Read configuration from environment variables."""
        env = os.environ if environ is None else environ
        raw_version = env.get(constants.ENV_STATE_VERSION)
        try:
            version = int(raw_version) if raw_version else constants.DEFAULT_STATE_VERSION
        except ValueError:
            raise ConfigurationError(
                f"{constants.ENV_STATE_VERSION} must be an integer, got {raw_version!r}"
            ) from None
        return cls(
            logging_enabled=_flag(env.get(constants.ENV_LOGGING)),
            deployer_identity=env.get(constants.ENV_DEPLOYER, ""),
            state_version=version,
            addresses_path=env.get(constants.ENV_ADDRESSES_FILE) or None,
            required_resource_names=_names(env.get(constants.ENV_REQUIRED_NAMES),
                                           constants.DEFAULT_REQUIRED_NAMES),
        )


def _default_routes() -> Dict[ProposalCategory, Optional[str]]:
    return {
        ProposalCategory.DAO: constants.DAO_EXECUTOR,
        ProposalCategory.TRIBAL_COUNCIL: constants.TRIBAL_COUNCIL_EXECUTOR,
        ProposalCategory.OPTIMISTIC_APPROVAL: constants.OPTIMISTIC_EXECUTOR,
        ProposalCategory.NONE: None,
    }


@dataclass(frozen=True)
class HarnessSettings:
    """Orchestration settings.

    Attributes:
        governance_routes: Category -> registry name of the executing
            resource (None = no governance execution)
        enforce_signoff: Collect sign-off violations as assertion failures
    """

    governance_routes: Dict[ProposalCategory, Optional[str]] = field(default_factory=_default_routes)
    enforce_signoff: bool = True

    def executor_for(self, category: ProposalCategory) -> Optional[str]:
        return self.governance_routes.get(category)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "HarnessSettings":
        env = os.environ if environ is None else environ
        return cls(enforce_signoff=_flag(env.get(constants.ENV_ENFORCE_SIGNOFF), default=True))
