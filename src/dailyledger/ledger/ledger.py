"""
PaymentLedger - in-memory projection of the payment and agent collections.

The ledger subscribes to the record store, keeps the latest pushed snapshot
as an immutable tuple, and derives every view (date filter, statistics,
searches) from it on demand. Writes go to the store; the resulting
snapshot comes back through the subscription.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, TypeVar

from dailyledger.core.config import Config
from dailyledger.core.events import EventListener, LedgerEvent, LedgerEventType
from dailyledger.core.exceptions import (
    ConfigurationError,
    ConfirmationError,
    DailyLedgerError,
    OfflineError,
    PaymentNotFoundError,
    StoreError,
)
from dailyledger.core.logging import get_logger
from dailyledger.core.types import (
    AgentSummary,
    AmountType,
    LedgerStats,
    OrderBy,
    Payment,
    RangeStats,
)
from dailyledger.guards.base import EntryContext, GuardChain
from dailyledger.guards.confirm import ActionContext, ConfirmGuard
from dailyledger.guards.entry import default_entry_guards, parse_amount
from dailyledger.ledger import aggregation
from dailyledger.ledger.business_day import (
    business_date,
    business_today,
    parse_business_date,
    stamp_for_business_date,
)
from dailyledger.reports.closing import build_closing_report
from dailyledger.storage.base import StorageBackend, Subscription

logger = get_logger("ledger")

T = TypeVar("T")

PAYMENTS_ORDER = OrderBy("timestamp", descending=True)
AGENTS_ORDER = OrderBy("name")


class PaymentLedger:
    """
    Owns the current payment/agent snapshot and every operation on it.

    Lifecycle:
        >>> ledger = PaymentLedger(InMemoryStorage())
        >>> await ledger.start()     # subscribe, receive first snapshot
        >>> await ledger.submit(agent="A", amount="100", reference="9999")
        >>> ledger.stats().total
        Decimal('100')
        >>> await ledger.stop()      # unsubscribe
    """

    def __init__(
        self,
        storage: StorageBackend,
        config: Config | None = None,
        guards: GuardChain | None = None,
        confirm_guard: ConfirmGuard | None = None,
    ) -> None:
        """
        Initialize the ledger.

        Args:
            storage: Record store holding the payment and agent collections
            config: Ledger configuration (defaults to Config())
            guards: Entry validation chain (defaults to default_entry_guards)
            confirm_guard: Confirmation for delete and close-day
        """
        self._storage = storage
        self._config = config or Config()
        self._guards = guards or default_entry_guards(
            min_reference_length=self._config.min_reference_length,
            scope=self._config.duplicate_scope,
            offset_hours=self._config.business_utc_offset_hours,
        )
        self._confirm = confirm_guard or ConfirmGuard()

        self._payments: tuple[Payment, ...] = ()
        self._agents: tuple[str, ...] = ()
        self._filter_date: str | None = self.today()
        self._online = True

        self._subscriptions: list[Subscription] = []
        self._listeners: list[EventListener] = []

    # ─── Lifecycle ───────────────────────────────────────────────────

    @property
    def config(self) -> Config:
        return self._config

    @property
    def started(self) -> bool:
        return bool(self._subscriptions)

    async def start(self) -> None:
        """Subscribe to both collections; the first snapshots arrive immediately."""
        if self.started:
            return
        self._subscriptions.append(
            await self._storage.subscribe(
                self._config.payments_collection, self.apply_payments_snapshot, PAYMENTS_ORDER
            )
        )
        self._subscriptions.append(
            await self._storage.subscribe(
                self._config.agents_collection, self.apply_agents_snapshot, AGENTS_ORDER
            )
        )
        logger.info(
            f"Ledger started with {len(self._payments)} payments and {len(self._agents)} agents"
        )

    async def stop(self) -> None:
        """Cancel the store subscriptions. The last snapshot stays readable."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            await subscription.unsubscribe()
        logger.info("Ledger stopped")

    # ─── Snapshots ───────────────────────────────────────────────────

    def apply_payments_snapshot(self, documents: list[dict[str, Any]]) -> None:
        """Replace the payment snapshot with a freshly pushed one (last one wins)."""
        payments = []
        for document in documents:
            try:
                payments.append(Payment.from_dict(document))
            except (KeyError, ValueError, ArithmeticError) as e:
                logger.warning(f"Skipping malformed payment document {document.get('_key')}: {e}")
        self._payments = tuple(payments)
        logger.debug(f"Applied payments snapshot ({len(payments)} documents)")
        self._emit(LedgerEventType.SNAPSHOT_APPLIED, collection="payments", count=len(payments))

    def apply_agents_snapshot(self, documents: list[dict[str, Any]]) -> None:
        """Replace the agent-name set with a freshly pushed one."""
        names: list[str] = []
        for document in documents:
            name = document.get("name")
            if isinstance(name, str) and name and name not in names:
                names.append(name)
        self._agents = tuple(names)
        logger.debug(f"Applied agents snapshot ({len(names)} names)")
        self._emit(LedgerEventType.SNAPSHOT_APPLIED, collection="agents", count=len(names))

    @property
    def payments(self) -> tuple[Payment, ...]:
        """Current snapshot in store order (most recent first)."""
        return self._payments

    @property
    def agents(self) -> tuple[str, ...]:
        """Known agent names, for input suggestions."""
        return self._agents

    def get(self, payment_id: str) -> Payment | None:
        for payment in self._payments:
            if payment.id == payment_id:
                return payment
        return None

    # ─── Date filter ─────────────────────────────────────────────────

    def today(self, now: datetime | None = None) -> str:
        return business_today(self._config.business_utc_offset_hours, now)

    def business_date_of(self, payment: Payment) -> str:
        return business_date(payment.timestamp, self._config.business_utc_offset_hours)

    @property
    def filter_date(self) -> str | None:
        """Selected business date; None shows every payment."""
        return self._filter_date

    @filter_date.setter
    def filter_date(self, value: str | None) -> None:
        if value:
            parse_business_date(value)
        self._filter_date = value or None

    def reset_filter(self) -> None:
        """Select today's business date again."""
        self._filter_date = self.today()

    # ─── Views ───────────────────────────────────────────────────────

    def payments_by_date(self) -> list[Payment]:
        return aggregation.filter_by_date(
            self._payments, self._filter_date, self._config.business_utc_offset_hours
        )

    def stats(self) -> LedgerStats:
        """Statistics for the selected date."""
        return aggregation.compute_stats(self.payments_by_date(), self._config.fee_rate)

    def history(self, search: str = "") -> list[Payment]:
        """Detailed history view of the selected date."""
        return aggregation.filter_history(self.payments_by_date(), search)

    def summary(self, search: str = "") -> list[Payment]:
        """Summary search over individual payments of the selected date."""
        return aggregation.filter_summary(self.payments_by_date(), search)

    def agent_summary(self, search: str = "") -> list[tuple[str, AgentSummary]]:
        """Per-agent rows of the selected date, highest total first."""
        return aggregation.summarize_agents(self.stats().per_agent, search)

    def range_stats(self, start_date: str, end_date: str) -> RangeStats:
        """Statistics for an inclusive business-date range, ignoring the date filter."""
        return aggregation.range_stats(
            self._payments,
            start_date,
            end_date,
            fee_rate=self._config.fee_rate,
            offset_hours=self._config.business_utc_offset_hours,
        )

    def find_duplicate(
        self,
        reference: str,
        exclude_id: str | None = None,
        on_date: str | None = None,
    ) -> Payment | None:
        """First payment already holding `reference`, other than `exclude_id`."""
        return aggregation.find_duplicate(
            self._payments,
            reference,
            exclude_id=exclude_id,
            scope=self._config.duplicate_scope,
            on_date=on_date or self.today(),
            offset_hours=self._config.business_utc_offset_hours,
        )

    def check_reference(
        self,
        reference: str,
        exclude_id: str | None = None,
        on_date: str | None = None,
    ) -> Payment | None:
        """As-you-type duplicate lookup; silent until the reference is long enough."""
        if len(reference) < self._config.min_reference_length:
            return None
        return self.find_duplicate(reference, exclude_id, on_date)

    # ─── Validation ──────────────────────────────────────────────────

    def validate(
        self,
        agent: str,
        amount: AmountType | None,
        reference: str,
        on_date: str | None = None,
        editing_id: str | None = None,
    ) -> Decimal:
        """
        Run the entry guards against the current snapshot.

        Returns:
            The parsed amount

        Raises:
            ValidationError: First failing check, in guard order
        """
        context = EntryContext(
            agent=agent,
            amount="" if amount is None else str(amount),
            reference=reference,
            business_date=on_date or self.today(),
            payments=self._payments,
            editing_id=editing_id,
        )
        self._guards.enforce(context)
        return parse_amount(context.amount)

    # ─── Connectivity ────────────────────────────────────────────────

    @property
    def online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> None:
        """Advisory connectivity flag; writes are not attempted while offline."""
        if online != self._online:
            logger.info(f"Ledger is now {'online' if online else 'offline'}")
        self._online = online

    # ─── Writes ──────────────────────────────────────────────────────

    async def _write(
        self,
        operation: str,
        collection: str,
        call: Callable[[], Awaitable[T]],
    ) -> T:
        if not self._online:
            raise OfflineError(operation)
        try:
            return await call()
        except DailyLedgerError:
            raise
        except Exception as e:
            logger.error(f"Store {operation} on '{collection}' failed: {e}")
            raise StoreError(operation=operation, collection=collection) from e

    async def register_agent(self, name: str) -> bool:
        """
        Add an agent name to the suggestion set if it is new.

        Returns:
            True if the name was added
        """
        name = name.strip()
        if not name or name in self._agents:
            return False
        collection = self._config.agents_collection
        await self._write(
            "create", collection, lambda: self._storage.create(collection, {"name": name})
        )
        if name not in self._agents:
            self._agents = tuple(sorted((*self._agents, name)))
        logger.info(f"Registered agent {name}")
        self._emit(LedgerEventType.AGENT_REGISTERED, agent=name)
        return True

    async def _register_after_write(self, name: str) -> None:
        # The payment is already stored at this point
        try:
            await self.register_agent(name)
        except StoreError as e:
            logger.warning(f"Payment stored but agent {name} was not registered: {e}")

    async def submit(
        self,
        agent: str,
        amount: AmountType | None,
        reference: str,
        business_date: str | None = None,
        now: datetime | None = None,
    ) -> Payment:
        """
        Validate and record a new payment.

        Args:
            agent: Collecting agent
            amount: Amount as typed (string) or a number
            reference: Bank reference
            business_date: Business date to book on (defaults to today)
            now: Clock override for the time of day

        Returns:
            The stored payment

        Raises:
            ValidationError: Entry rejected by a guard
            OfflineError: Ledger is marked offline
            StoreError: The store write failed
        """
        agent, reference = agent.strip(), reference.strip()
        on_date = business_date or self.today(now)
        value = self.validate(agent, amount, reference, on_date)
        offset = self._config.business_utc_offset_hours

        draft = Payment(
            id="",
            agent=agent,
            amount=value,
            reference=reference,
            timestamp=stamp_for_business_date(on_date, offset, now),
        )
        collection = self._config.payments_collection
        payment_id = await self._write(
            "create", collection, lambda: self._storage.create(collection, draft.to_dict())
        )
        payment = replace(draft, id=payment_id)

        await self._register_after_write(agent)
        logger.info(f"Recorded payment {reference} from {agent} ({value}) on {on_date}")
        self._emit(LedgerEventType.PAYMENT_CREATED, payment_id=payment_id, agent=agent)
        return payment

    async def update(
        self,
        payment_id: str,
        agent: str,
        amount: AmountType | None,
        reference: str,
        business_date: str | None = None,
        now: datetime | None = None,
    ) -> Payment:
        """
        Validate and rewrite an existing payment, keeping its id.

        The payment may keep its own reference. Its timestamp moves to the
        chosen business date at the current time of day.

        Raises:
            PaymentNotFoundError: No such payment in the snapshot or store
            ValidationError: Entry rejected by a guard
            OfflineError: Ledger is marked offline
            StoreError: The store write failed
        """
        existing = self.get(payment_id)
        if existing is None:
            raise PaymentNotFoundError(payment_id)

        agent, reference = agent.strip(), reference.strip()
        on_date = business_date or self.business_date_of(existing)
        value = self.validate(agent, amount, reference, on_date, editing_id=payment_id)

        payment = Payment(
            id=payment_id,
            agent=agent,
            amount=value,
            reference=reference,
            timestamp=stamp_for_business_date(
                on_date, self._config.business_utc_offset_hours, now
            ),
        )
        collection = self._config.payments_collection
        updated = await self._write(
            "update",
            collection,
            lambda: self._storage.update(collection, payment_id, payment.to_dict()),
        )
        if not updated:
            raise PaymentNotFoundError(payment_id)

        await self._register_after_write(agent)
        logger.info(f"Updated payment {payment_id} ({reference}) on {on_date}")
        self._emit(LedgerEventType.PAYMENT_UPDATED, payment_id=payment_id, agent=agent)
        return payment

    async def _require_confirmation(self, context: ActionContext, confirmed: bool) -> None:
        result = await self._confirm.check(context, confirmed=confirmed)
        if not result:
            logger.info(f"{context.action} cancelled: {result.reason}")
            raise ConfirmationError(context.action, result.reason or "Not confirmed")

    async def delete(self, payment_id: str, confirmed: bool = False) -> Payment:
        """
        Permanently delete a payment after confirmation.

        Raises:
            PaymentNotFoundError: No such payment
            ConfirmationError: The deletion was not confirmed
            OfflineError / StoreError: The store write was not made
        """
        existing = self.get(payment_id)
        if existing is None:
            raise PaymentNotFoundError(payment_id)

        await self._require_confirmation(
            ActionContext(
                action="delete_payment",
                description=f"Deleting payment {existing.reference} from {existing.agent}",
                target_id=payment_id,
            ),
            confirmed,
        )

        collection = self._config.payments_collection
        deleted = await self._write(
            "delete", collection, lambda: self._storage.delete(collection, payment_id)
        )
        if not deleted:
            raise PaymentNotFoundError(payment_id)

        logger.info(f"Deleted payment {payment_id} ({existing.reference})")
        self._emit(LedgerEventType.PAYMENT_DELETED, payment_id=payment_id, agent=existing.agent)
        return existing

    async def close_day(self, confirmed: bool = False, search: str = "") -> str:
        """
        Produce the closing report and wipe every payment.

        Only available on single-device stores; shared stores keep their
        history.

        Args:
            confirmed: Caller already confirmed the reset
            search: Summary search; the report details the agent rows it matches

        Returns:
            The closing report text

        Raises:
            ConfigurationError: The store is shared
            ConfirmationError: The reset was not confirmed
            OfflineError / StoreError: The store was not cleared
        """
        if self._storage.shared:
            raise ConfigurationError(
                "Closing the day is only available with a single-device store",
                details={"storage": type(self._storage).__name__},
            )

        await self._require_confirmation(
            ActionContext(
                action="close_day",
                description="Closing the day erases every stored payment",
                metadata={"payments": len(self._payments)},
            ),
            confirmed,
        )

        report = build_closing_report(
            self._filter_date,
            self.stats(),
            self.agent_summary(search),
            fee_rate=self._config.fee_rate,
            currency_symbol=self._config.currency_symbol,
        )
        collection = self._config.payments_collection
        cleared = await self._write("clear", collection, lambda: self._storage.clear(collection))

        logger.info(f"Day closed; {cleared} payments cleared")
        self._emit(LedgerEventType.DAY_CLOSED, report=report, cleared=cleared)
        return report

    # ─── Events ──────────────────────────────────────────────────────

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    def _emit(self, event_type: LedgerEventType, **data: Any) -> None:
        event = LedgerEvent(type=event_type, data=data)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener failed on {event_type.value}")
