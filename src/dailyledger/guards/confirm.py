"""
ConfirmGuard - Requires explicit confirmation for destructive actions.

Deleting a payment and closing the day cannot be undone, so the ledger
asks this guard before issuing either one.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from dailyledger.core.logging import get_logger

logger = get_logger("guards.confirm")


@dataclass
class ActionContext:
    """A destructive action awaiting confirmation."""

    action: str
    description: str
    target_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ConfirmResult:
    """Outcome of a confirmation request."""

    confirmed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.confirmed


# Type for confirmation callback
ConfirmCallback = Callable[[ActionContext], Awaitable[bool]]


class ConfirmGuard:
    """
    Guard that requires explicit confirmation before a destructive action.

    Two modes of operation:
    1. **Callback mode**: Provide a callback that asks the user
    2. **Caller mode**: No callback; the caller must pass `confirmed=True`
    """

    def __init__(
        self,
        confirm_callback: ConfirmCallback | None = None,
        name: str = "confirm",
    ) -> None:
        """
        Initialize ConfirmGuard.

        Args:
            confirm_callback: Async function asked for confirmation
            name: Guard name for identification
        """
        self._name = name
        self._callback = confirm_callback

    @property
    def name(self) -> str:
        return self._name

    def set_callback(self, confirm_callback: ConfirmCallback | None) -> None:
        self._callback = confirm_callback

    async def check(self, context: ActionContext, confirmed: bool = False) -> ConfirmResult:
        """Check if the action is confirmed."""
        if confirmed:
            return ConfirmResult(confirmed=True)

        if self._callback is not None:
            try:
                if await self._callback(context):
                    return ConfirmResult(confirmed=True)
                return ConfirmResult(confirmed=False, reason="Action not confirmed by user")
            except Exception as e:
                logger.error(f"Confirmation callback failed for {context.action}: {e}")
                return ConfirmResult(
                    confirmed=False, reason=f"Confirmation callback failed: {e}"
                )

        return ConfirmResult(
            confirmed=False,
            reason=(
                f"{context.description} requires confirmation. "
                "Set a confirm_callback or pass confirmed=True."
            ),
        )
