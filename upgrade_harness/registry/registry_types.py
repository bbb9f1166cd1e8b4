"""
Registry Types.

Defines closed enums for tracked resources.
"""
from enum import Enum


class ResourceKind(Enum):
    """Kind of a tracked resource.

    CLOSED ENUM - No new members may be added.

    Members:
        CONTRACT: Deployed contract instance
        ACCOUNT: Externally owned account or multisig
        ARTIFACT: Value produced by deploy for later phases (pool id, tx hash)
    """

    CONTRACT = "CONTRACT"
    ACCOUNT = "ACCOUNT"
    ARTIFACT = "ARTIFACT"


class EntryStatus(Enum):
    """Registry entry status.

    CLOSED ENUM - No new members may be added.
    """

    LIVE = "LIVE"
    DEPRECATED = "DEPRECATED"
