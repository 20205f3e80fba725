"""
Guards module - Checks run before the ledger writes anything.

- RequiredFieldsGuard: Agent, amount and reference must be filled in
- ReferenceLengthGuard: References have a minimum length
- DuplicateReferenceGuard: References are unique (self excluded while editing)
- AmountGuard: Amounts must be numbers
- ConfirmGuard: Destructive actions need explicit confirmation

Example:
    >>> from dailyledger.guards import EntryContext, default_entry_guards
    >>>
    >>> chain = default_entry_guards()
    >>> result = chain.check(
    ...     EntryContext(agent="A", amount="100", reference="123", business_date="2024-05-01")
    ... )
    >>> result.guard_name
    'reference_length'
"""

from dailyledger.guards.base import (
    EntryContext,
    Guard,
    GuardChain,
    GuardResult,
)
from dailyledger.guards.confirm import ActionContext, ConfirmCallback, ConfirmGuard, ConfirmResult
from dailyledger.guards.entry import (
    AmountGuard,
    DuplicateReferenceGuard,
    ReferenceLengthGuard,
    RequiredFieldsGuard,
    default_entry_guards,
    parse_amount,
)

__all__ = [
    # Base classes
    "Guard",
    "GuardChain",
    "GuardResult",
    "EntryContext",
    # Entry guards
    "RequiredFieldsGuard",
    "ReferenceLengthGuard",
    "DuplicateReferenceGuard",
    "AmountGuard",
    "default_entry_guards",
    "parse_amount",
    # Confirmation
    "ActionContext",
    "ConfirmCallback",
    "ConfirmGuard",
    "ConfirmResult",
]
