"""Unit tests for exceptions module."""

import pytest

from dailyledger.core.exceptions import (
    ConfigurationError,
    ConfirmationError,
    DailyLedgerError,
    DuplicateReferenceError,
    InvalidAmountError,
    MissingFieldsError,
    NetworkError,
    OfflineError,
    PaymentNotFoundError,
    ReferenceTooShortError,
    ReportError,
    StoreError,
    ValidationError,
)


class TestDailyLedgerError:
    """Tests for base exception."""

    def test_basic_error(self) -> None:
        """Test basic error creation."""
        error = DailyLedgerError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details == {}

    def test_error_with_details(self) -> None:
        """Test error with details dict."""
        error = DailyLedgerError("Write failed", details={"collection": "payments"})

        assert "Write failed" in str(error)
        assert "Details:" in str(error)
        assert error.details["collection"] == "payments"

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad backend"),
            MissingFieldsError(["agent"]),
            PaymentNotFoundError("k1"),
            StoreError(),
            ConfirmationError("close_day", "declined"),
            NetworkError("timeout"),
            ReportError("disk full"),
        ],
    )
    def test_is_catchable_as_base_type(self, error) -> None:
        """Test that specific errors can be caught as base type."""
        with pytest.raises(DailyLedgerError):
            raise error


class TestValidationErrors:
    """Tests for the entry validation errors."""

    def test_str_is_message_only(self) -> None:
        error = MissingFieldsError(["agent", "amount"])

        assert str(error) == "All fields are required"
        assert error.details == {"missing": ["agent", "amount"]}
        assert error.code == "missing_fields"

    def test_reference_too_short(self) -> None:
        error = ReferenceTooShortError("123", 4)

        assert isinstance(error, ValidationError)
        assert error.code == "reference_too_short"
        assert "at least 4 characters" in str(error)

    def test_duplicate_names_holder_and_date(self) -> None:
        error = DuplicateReferenceError(
            reference="4821", existing_id="k1", agent="Agente 2", business_date="2024-05-01"
        )

        assert str(error) == "Duplicate reference 4821: recorded on 2024-05-01 by Agente 2"
        assert error.details["existing_id"] == "k1"
        assert error.code == "duplicate"

    def test_invalid_amount(self) -> None:
        error = InvalidAmountError("abc")

        assert error.code == "invalid_amount"
        assert "'abc'" in str(error)


class TestStoreErrors:
    """Tests for store failures."""

    def test_generic_message(self) -> None:
        error = StoreError(operation="create", collection="payments")

        assert "Check your connection" in str(error)
        assert error.operation == "create"
        assert error.collection == "payments"

    def test_offline_is_store_error(self) -> None:
        error = OfflineError("create")

        assert isinstance(error, StoreError)
        assert str(error) == "You are offline. The entry was not sent."


class TestConfirmationError:
    def test_str_includes_action(self) -> None:
        error = ConfirmationError("delete_payment", "Action not confirmed by user")

        assert str(error) == "[delete_payment] Action not confirmed by user"
        assert error.reason == "Action not confirmed by user"


class TestNetworkError:
    """Tests for NetworkError."""

    def test_server_error(self) -> None:
        assert NetworkError("failed", status_code=502).is_server_error()

    def test_client_error(self) -> None:
        assert not NetworkError("failed", status_code=404).is_server_error()

    def test_no_status(self) -> None:
        error = NetworkError("timeout", url="https://rates.test")

        assert not error.is_server_error()
        assert error.url == "https://rates.test"
