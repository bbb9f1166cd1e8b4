"""
Validation.

Exports:
    - Assertion: Named post-condition
    - Validator: Collects assertion failures per proposal
    - check_signoff: Sign-off list checks
    - expect_approx / role_held_by / balance_within / value_within /
      storage_equals / is_paused: Assertion helpers
"""
from .assertions import (
    Assertion,
    expect_approx,
    role_held_by,
    balance_within,
    value_within,
    storage_equals,
    is_paused,
)
from .validator import Validator, check_signoff

__all__ = [
    "Assertion",
    "expect_approx",
    "role_held_by",
    "balance_within",
    "value_within",
    "storage_equals",
    "is_paused",
    "Validator",
    "check_signoff",
]
