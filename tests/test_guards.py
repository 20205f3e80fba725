"""
Unit tests for the entry guards and the confirmation guard.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from dailyledger.core.exceptions import (
    DuplicateReferenceError,
    InvalidAmountError,
    MissingFieldsError,
    ReferenceTooShortError,
    ValidationError,
)
from dailyledger.core.types import DuplicateScope
from dailyledger.guards import (
    ActionContext,
    AmountGuard,
    ConfirmGuard,
    DuplicateReferenceGuard,
    EntryContext,
    GuardChain,
    GuardResult,
    ReferenceLengthGuard,
    RequiredFieldsGuard,
    default_entry_guards,
    parse_amount,
)

from factories import DAY, make_payment

SNAPSHOT = (make_payment("p1", "Agente 2", "120", "4821"),)


def entry(agent="Agente 1", amount="100", reference="7777", payments=SNAPSHOT, editing_id=None):
    return EntryContext(
        agent=agent,
        amount=amount,
        reference=reference,
        business_date=DAY,
        payments=payments,
        editing_id=editing_id,
    )


class TestParseAmount:
    @pytest.mark.parametrize(
        "value,expected",
        [("100", "100"), (" 12.50 ", "12.50"), ("-5", "-5"), ("0", "0"), ("1e3", "1E+3")],
    )
    def test_valid(self, value, expected):
        assert parse_amount(value) == Decimal(expected)

    @pytest.mark.parametrize("value", ["abc", "12,50", "NaN", "Infinity", ""])
    def test_invalid(self, value):
        with pytest.raises(InvalidAmountError):
            parse_amount(value)


class TestRequiredFieldsGuard:
    """Tests for RequiredFieldsGuard."""

    def test_allows_complete_entry(self):
        assert RequiredFieldsGuard().check(entry())

    def test_lists_missing_fields(self):
        result = RequiredFieldsGuard().check(entry(agent="", reference="  "))

        assert not result
        assert result.guard_name == "required_fields"
        assert isinstance(result.error, MissingFieldsError)
        assert result.error.missing == ["agent", "reference"]
        assert result.reason == "All fields are required"


class TestReferenceLengthGuard:
    def test_blocks_short_reference(self):
        result = ReferenceLengthGuard().check(entry(reference="123"))

        assert not result
        assert isinstance(result.error, ReferenceTooShortError)
        assert result.metadata == {"reference": "123", "min_length": 4}

    def test_allows_minimum_length(self):
        assert ReferenceLengthGuard().check(entry(reference="1234"))

    def test_custom_minimum(self):
        assert not ReferenceLengthGuard(min_length=6).check(entry(reference="12345"))


class TestDuplicateReferenceGuard:
    """Tests for DuplicateReferenceGuard."""

    def test_blocks_existing_reference(self):
        result = DuplicateReferenceGuard().check(entry(reference="4821"))

        assert not result
        error = result.error
        assert isinstance(error, DuplicateReferenceError)
        assert error.agent == "Agente 2"
        assert error.business_date == DAY
        assert error.existing_id == "p1"
        assert error.code == "duplicate"

    def test_edit_may_keep_own_reference(self):
        assert DuplicateReferenceGuard().check(entry(reference="4821", editing_id="p1"))

    def test_edit_onto_other_reference_blocked(self):
        payments = SNAPSHOT + (make_payment("p2", "Agente 4", "80", "9100"),)
        result = DuplicateReferenceGuard().check(
            entry(reference="4821", payments=payments, editing_id="p2")
        )
        assert not result

    def test_business_day_scope_ignores_other_days(self):
        guard = DuplicateReferenceGuard(scope=DuplicateScope.BUSINESS_DAY)
        context = entry(reference="4821")
        context.business_date = "2024-05-02"

        assert guard.check(context)


class TestAmountGuard:
    def test_blocks_non_numeric(self):
        result = AmountGuard().check(entry(amount="abc"))

        assert not result
        assert isinstance(result.error, InvalidAmountError)

    @pytest.mark.parametrize("amount", ["0", "-20"])
    def test_allows_non_positive_numbers(self, amount):
        assert AmountGuard().check(entry(amount=amount))


class TestGuardChain:
    """Tests for GuardChain."""

    def test_default_order(self):
        chain = default_entry_guards()

        assert [guard.name for guard in chain] == [
            "required_fields",
            "reference_length",
            "duplicate_reference",
            "amount",
        ]

    def test_all_pass(self):
        result = default_entry_guards().check(entry())

        assert result.allowed
        assert result.guard_name == "chain"

    def test_first_failure_wins(self):
        # short and non-numeric: the length check runs first
        result = default_entry_guards().check(entry(amount="abc", reference="12"))
        assert result.guard_name == "reference_length"

    def test_duplicate_checked_before_amount(self):
        result = default_entry_guards().check(entry(amount="abc", reference="4821"))
        assert result.guard_name == "duplicate_reference"

    def test_enforce_raises_guard_error(self):
        with pytest.raises(MissingFieldsError):
            default_entry_guards().enforce(entry(amount=""))

    def test_enforce_passes_silently(self):
        default_entry_guards().enforce(entry())

    def test_enforce_without_error_uses_reason(self):
        class Closed(RequiredFieldsGuard):
            name = "closed"

            def check(self, context):
                return GuardResult(allowed=False, reason="Closed for the day", guard_name=self.name)

        with pytest.raises(ValidationError, match="Closed for the day"):
            GuardChain([Closed()]).enforce(entry())


class TestConfirmGuard:
    """Tests for ConfirmGuard."""

    @pytest.fixture
    def action(self):
        return ActionContext(action="delete_payment", description="Deleting payment 4821")

    @pytest.mark.asyncio
    async def test_caller_confirmed(self, action):
        assert await ConfirmGuard().check(action, confirmed=True)

    @pytest.mark.asyncio
    async def test_no_callback_requires_confirmation(self, action):
        result = await ConfirmGuard().check(action)

        assert not result
        assert "requires confirmation" in result.reason

    @pytest.mark.asyncio
    async def test_callback_accepts(self, action):
        callback = AsyncMock(return_value=True)

        assert await ConfirmGuard(callback).check(action)
        callback.assert_awaited_once_with(action)

    @pytest.mark.asyncio
    async def test_callback_declines(self, action):
        result = await ConfirmGuard(AsyncMock(return_value=False)).check(action)

        assert not result
        assert result.reason == "Action not confirmed by user"

    @pytest.mark.asyncio
    async def test_callback_failure_is_not_confirmation(self, action):
        result = await ConfirmGuard(AsyncMock(side_effect=RuntimeError("dialog closed"))).check(action)

        assert not result
        assert "dialog closed" in result.reason

    @pytest.mark.asyncio
    async def test_set_callback(self, action):
        guard = ConfirmGuard()
        guard.set_callback(AsyncMock(return_value=True))

        assert await guard.check(action)
