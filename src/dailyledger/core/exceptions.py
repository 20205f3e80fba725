"""
Exception hierarchy for dailyledger.

All library exceptions inherit from DailyLedgerError for easy catching.
"""

from __future__ import annotations

from typing import Any


class DailyLedgerError(Exception):
    """
    Base exception for all dailyledger errors.

    Example:
        >>> try:
        ...     await ledger.submit(agent="A", amount="100", reference="9999")
        ... except DailyLedgerError as e:
        ...     print(f"Ledger error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(DailyLedgerError):
    """
    Configuration is missing or invalid for the requested operation.

    Raised when:
    - An unknown storage backend is requested
    - A legacy-only operation is attempted against a shared record store
    - The JSON ledger file cannot be read
    """

    pass


class ValidationError(DailyLedgerError):
    """
    A payment entry failed validation.

    Validation errors are recoverable: they block the submission and are
    meant to be shown next to the form that produced them.
    """

    code = "invalid"

    def __str__(self) -> str:
        return self.message


class MissingFieldsError(ValidationError):
    """Agent, amount or reference was left empty."""

    code = "missing_fields"

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "All fields are required",
            details={"missing": missing},
        )
        self.missing = missing


class ReferenceTooShortError(ValidationError):
    """The reference is shorter than the configured minimum length."""

    code = "reference_too_short"

    def __init__(self, reference: str, min_length: int) -> None:
        super().__init__(
            f"Reference must have at least {min_length} characters",
            details={"reference": reference, "min_length": min_length},
        )
        self.reference = reference
        self.min_length = min_length


class DuplicateReferenceError(ValidationError):
    """
    The reference is already used by another payment.

    Carries the conflicting payment's agent and business date so the
    caller can show where the reference was first recorded.
    """

    code = "duplicate"

    def __init__(
        self,
        reference: str,
        existing_id: str,
        agent: str,
        business_date: str,
    ) -> None:
        super().__init__(
            f"Duplicate reference {reference}: recorded on {business_date} by {agent}",
            details={
                "reference": reference,
                "existing_id": existing_id,
                "agent": agent,
                "business_date": business_date,
            },
        )
        self.reference = reference
        self.existing_id = existing_id
        self.agent = agent
        self.business_date = business_date


class InvalidAmountError(ValidationError):
    """The amount is not a finite number."""

    code = "invalid_amount"

    def __init__(self, value: str) -> None:
        super().__init__(f"Amount is not a valid number: {value!r}", details={"value": value})
        self.value = value


class PaymentNotFoundError(DailyLedgerError):
    """No payment with the given id is present in the current snapshot."""

    def __init__(self, payment_id: str) -> None:
        super().__init__(f"Payment not found: {payment_id}", details={"payment_id": payment_id})
        self.payment_id = payment_id


class StoreError(DailyLedgerError):
    """
    A write to the record store failed.

    The message is generic and can be shown to the user as a
    connectivity problem. The underlying exception is chained as __cause__.
    """

    def __init__(
        self,
        message: str = "Could not reach the record store. Check your connection and retry.",
        operation: str | None = None,
        collection: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.collection = collection

    def __str__(self) -> str:
        return self.message


class OfflineError(StoreError):
    """Submission was not attempted because the ledger is marked offline."""

    def __init__(self, operation: str | None = None) -> None:
        super().__init__(
            "You are offline. The entry was not sent.",
            operation=operation,
        )


class ConfirmationError(DailyLedgerError):
    """
    A destructive action was not confirmed.

    Raised when:
    - The confirmation callback declined the action
    - No confirmation callback is configured and the caller did not confirm
    """

    def __init__(self, action: str, reason: str) -> None:
        super().__init__(reason, details={"action": action})
        self.action = action
        self.reason = reason

    def __str__(self) -> str:
        return f"[{self.action}] {self.reason}"


class NetworkError(DailyLedgerError):
    """
    Network or API communication error.

    Raised when:
    - HTTP request fails (timeout, connection error)
    - API returns an unexpected response
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url

    def is_server_error(self) -> bool:
        """Check if this is a server-side error."""
        return self.status_code is not None and 500 <= self.status_code < 600


class ReportError(DailyLedgerError):
    """Rendering or writing a report failed."""

    pass
