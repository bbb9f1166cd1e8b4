"""
Core: constants and the error taxonomy shared by every component.
"""
from .errors import (
    HarnessError,
    ConfigurationError,
    CatalogueError,
    RunAbortedError,
    UnknownResource,
    PhaseExecutionError,
    AssertionFailure,
    LifecycleViolation,
)

__all__ = [
    "HarnessError",
    "ConfigurationError",
    "CatalogueError",
    "RunAbortedError",
    "UnknownResource",
    "PhaseExecutionError",
    "AssertionFailure",
    "LifecycleViolation",
]
