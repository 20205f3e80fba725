"""
EntryForm - editable state behind the "record payment" form.

Holds the raw field values, the inline error and the success message, and
dispatches to the ledger on submit. Field values survive any failure so
the user can correct or retry; they are cleared only after a successful
write.
"""

from __future__ import annotations

from datetime import datetime

from dailyledger.core.exceptions import PaymentNotFoundError, StoreError, ValidationError
from dailyledger.core.types import Payment
from dailyledger.ledger.ledger import PaymentLedger


class EntryForm:
    """Form state for creating or editing one payment."""

    def __init__(self, ledger: PaymentLedger) -> None:
        self._ledger = ledger
        self.agent = ""
        self.amount = ""
        self.reference = ""
        self.business_date = ledger.today()
        self.editing_id: str | None = None
        self.error: str | None = None
        self.error_code: str | None = None
        self.success_message: str | None = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def suggestions(self) -> tuple[str, ...]:
        """Agent names to offer while typing."""
        return self._ledger.agents

    def _clear_feedback(self) -> None:
        self.error = None
        self.error_code = None
        self.success_message = None

    def set_agent(self, value: str) -> None:
        self._clear_feedback()
        self.agent = value

    def set_amount(self, value: str) -> None:
        self._clear_feedback()
        self.amount = value

    def set_business_date(self, value: str) -> None:
        self._clear_feedback()
        self.business_date = value

    def set_reference(self, value: str) -> Payment | None:
        """
        Update the reference and run the as-you-type duplicate check.

        Returns:
            The payment already holding this reference, if any
        """
        self._clear_feedback()
        self.reference = value
        existing = self._ledger.check_reference(
            value.strip(), exclude_id=self.editing_id, on_date=self.business_date
        )
        if existing is not None:
            self.error = f"Reference {value.strip()} already exists"
            self.error_code = "duplicate"
        return existing

    def start_edit(self, payment: Payment) -> None:
        """Load a payment into the form for editing."""
        self._clear_feedback()
        self.editing_id = payment.id
        self.agent = payment.agent
        self.amount = str(payment.amount)
        self.reference = payment.reference
        self.business_date = self._ledger.business_date_of(payment)

    def reset(self) -> None:
        """Clear every field and leave edit mode."""
        self.agent = ""
        self.amount = ""
        self.reference = ""
        self.business_date = self._ledger.today()
        self.editing_id = None

    def cancel_edit(self) -> None:
        self._clear_feedback()
        self.reset()

    async def submit(self, now: datetime | None = None) -> Payment | None:
        """
        Create or update the payment described by the form.

        Returns:
            The stored payment, or None if it was rejected (see `error`)
        """
        self._clear_feedback()
        try:
            if self.editing_id is not None:
                payment = await self._ledger.update(
                    self.editing_id,
                    self.agent,
                    self.amount,
                    self.reference,
                    business_date=self.business_date,
                    now=now,
                )
            else:
                payment = await self._ledger.submit(
                    self.agent,
                    self.amount,
                    self.reference,
                    business_date=self.business_date,
                    now=now,
                )
        except ValidationError as e:
            self.error = e.message
            self.error_code = e.code
            return None
        except StoreError as e:
            self.error = e.message
            self.error_code = "store"
            return None
        except PaymentNotFoundError:
            # Deleted elsewhere while being edited; the values can be saved as a new payment
            self.editing_id = None
            self.error = "This payment no longer exists. Submit again to record it as new."
            self.error_code = "not_found"
            return None

        verb = "updated" if self.editing_id is not None else "recorded"
        self.reset()
        self.success_message = f"Payment from {payment.agent} {verb}."
        return payment
