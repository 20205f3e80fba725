"""
Entry guards - the checks a payment entry passes before it is written.

Run in this order by `default_entry_guards`:
1. RequiredFieldsGuard
2. ReferenceLengthGuard
3. DuplicateReferenceGuard
4. AmountGuard
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from dailyledger.core.config import BUSINESS_UTC_OFFSET_HOURS, MIN_REFERENCE_LENGTH
from dailyledger.core.exceptions import (
    DuplicateReferenceError,
    InvalidAmountError,
    MissingFieldsError,
    ReferenceTooShortError,
)
from dailyledger.core.types import DuplicateScope
from dailyledger.guards.base import EntryContext, Guard, GuardChain, GuardResult
from dailyledger.ledger.aggregation import find_duplicate
from dailyledger.ledger.business_day import business_date


def parse_amount(value: str) -> Decimal:
    """
    Parse a user-typed amount.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    try:
        amount = Decimal(value.strip())
    except (InvalidOperation, AttributeError):
        raise InvalidAmountError(str(value)) from None
    if not amount.is_finite():
        raise InvalidAmountError(str(value))
    return amount


class RequiredFieldsGuard(Guard):
    """Agent, amount and reference must all be filled in."""

    name = "required_fields"

    def check(self, context: EntryContext) -> GuardResult:
        missing = [
            field_name
            for field_name in ("agent", "amount", "reference")
            if not getattr(context, field_name).strip()
        ]
        if missing:
            return GuardResult.block(self.name, MissingFieldsError(missing))
        return GuardResult(allowed=True, guard_name=self.name)


class ReferenceLengthGuard(Guard):
    """The reference must be at least `min_length` characters."""

    name = "reference_length"

    def __init__(self, min_length: int = MIN_REFERENCE_LENGTH) -> None:
        self.min_length = min_length

    def check(self, context: EntryContext) -> GuardResult:
        if len(context.reference) < self.min_length:
            return GuardResult.block(
                self.name, ReferenceTooShortError(context.reference, self.min_length)
            )
        return GuardResult(allowed=True, guard_name=self.name)


class DuplicateReferenceGuard(Guard):
    """
    The reference must not already belong to another payment.

    While editing, the payment being edited may keep its own reference.
    """

    name = "duplicate_reference"

    def __init__(
        self,
        scope: DuplicateScope = DuplicateScope.GLOBAL,
        offset_hours: int = BUSINESS_UTC_OFFSET_HOURS,
    ) -> None:
        self.scope = scope
        self.offset_hours = offset_hours

    def check(self, context: EntryContext) -> GuardResult:
        existing = find_duplicate(
            context.payments,
            context.reference,
            exclude_id=context.editing_id,
            scope=self.scope,
            on_date=context.business_date,
            offset_hours=self.offset_hours,
        )
        if existing is not None:
            return GuardResult.block(
                self.name,
                DuplicateReferenceError(
                    reference=context.reference,
                    existing_id=existing.id,
                    agent=existing.agent,
                    business_date=business_date(existing.timestamp, self.offset_hours),
                ),
            )
        return GuardResult(allowed=True, guard_name=self.name)


class AmountGuard(Guard):
    """The amount must parse as a finite number."""

    name = "amount"

    def check(self, context: EntryContext) -> GuardResult:
        try:
            amount = parse_amount(context.amount)
        except InvalidAmountError as e:
            return GuardResult.block(self.name, e)
        return GuardResult(allowed=True, guard_name=self.name, metadata={"amount": str(amount)})


def default_entry_guards(
    min_reference_length: int = MIN_REFERENCE_LENGTH,
    scope: DuplicateScope = DuplicateScope.GLOBAL,
    offset_hours: int = BUSINESS_UTC_OFFSET_HOURS,
) -> GuardChain:
    """The standard validation chain for submitted and edited entries."""
    return GuardChain(
        [
            RequiredFieldsGuard(),
            ReferenceLengthGuard(min_reference_length),
            DuplicateReferenceGuard(scope, offset_hours),
            AmountGuard(),
        ]
    )
