"""
Guard base classes and chain.

Entry guards inspect a payment entry against the current snapshot and
decide whether it may be written.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from dailyledger.core.exceptions import ValidationError
from dailyledger.core.types import Payment


@dataclass
class GuardResult:
    """
    Result of a guard check.

    Attributes:
        allowed: Whether the entry is allowed
        reason: Human-readable reason (especially when blocked)
        guard_name: Name of the guard that produced this result
        error: Exception describing the rejection, raised by GuardChain.enforce
        metadata: Additional context data
    """

    allowed: bool
    reason: str | None = None
    guard_name: str = ""
    error: ValidationError | None = None
    metadata: dict[str, Any] | None = None

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.allowed

    @classmethod
    def block(cls, guard_name: str, error: ValidationError) -> GuardResult:
        return cls(
            allowed=False,
            reason=error.message,
            guard_name=guard_name,
            error=error,
            metadata=dict(error.details),
        )


@dataclass
class EntryContext:
    """
    A payment entry being checked by guards.

    Raw form values are kept as strings; `payments` is the snapshot the
    entry is checked against.
    """

    agent: str
    amount: str
    reference: str
    business_date: str
    payments: Sequence[Payment] = field(default_factory=tuple)
    editing_id: str | None = None

    @property
    def is_edit(self) -> bool:
        return self.editing_id is not None


class Guard(ABC):
    """Abstract base class for entry guards."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this guard."""
        ...

    @abstractmethod
    def check(self, context: EntryContext) -> GuardResult:
        """Check if the entry should be allowed."""
        ...


class GuardChain:
    """
    Chain of guards executed in sequence.

    Returns the first failure, or success if all pass.
    """

    def __init__(self, guards: list[Guard] | None = None) -> None:
        self._guards: list[Guard] = guards or []

    def check(self, context: EntryContext) -> GuardResult:
        """Run guards in order, stopping at the first rejection."""
        for guard in self._guards:
            result = guard.check(context)
            if not result.allowed:
                return result
        return GuardResult(allowed=True, guard_name="chain")

    def enforce(self, context: EntryContext) -> None:
        """
        Run the chain and raise the first rejection.

        Raises:
            ValidationError: The error carried by the failing guard
        """
        result = self.check(context)
        if not result.allowed:
            raise result.error or ValidationError(result.reason or "Entry rejected")

    def __iter__(self):
        return iter(self._guards)
