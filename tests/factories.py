"""Shared test data."""

from datetime import datetime, timezone
from decimal import Decimal

from dailyledger.core.types import Payment

# 14:30 on 2024-05-01 on the business clock (UTC-4)
NOW = datetime(2024, 5, 1, 18, 30, tzinfo=timezone.utc)
DAY = "2024-05-01"


def make_payment(
    payment_id: str,
    agent: str = "Agente 1",
    amount: str = "100",
    reference: str = "0001",
    timestamp: datetime = NOW,
) -> Payment:
    return Payment(
        id=payment_id,
        agent=agent,
        amount=Decimal(amount),
        reference=reference,
        timestamp=timestamp,
    )
