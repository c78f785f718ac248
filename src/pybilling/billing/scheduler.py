"""
BillingScheduler - arms and runs the monthly billing pass.

The scheduler owns one ScheduleState and at most one outstanding deferred
execution. When that execution fires it fetches eligible invoices from the
store and charges each one through InvoiceCharger, one at a time.

State machine:
    IDLE --schedule_billing--> ARMED --fires--> FIRING --pass done--> IDLE
    ARMED --cancel--> IDLE                      (cancel returns True)
    FIRING --cancel--> IDLE                     (cancel returns False, pass continues)
    ARMED|FIRING --schedule_billing--> ARMED    (new handle replaces the old one)

Concurrency:
All reads and writes of the state happen under one asyncio.Lock. That lock
is never held across a billing pass. A cancel racing a firing is settled by
whoever takes the lock first: the firing claims its handle with
ARMED -> FIRING, and cancel only cancels the task while the state is ARMED.

Passes never overlap. A second lock, held for the whole pass, is taken by
the firing task before it claims its handle. An execution armed while a
pass is running and already due waits ARMED (still cancellable) until that
pass finishes, then fetches what the first pass left pending.

The firing handler never re-arms itself. Hosts call schedule_billing()
again, typically after wait_for_run() returns.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime

from uuid_extensions import uuid7

from pybilling.billing.calendar import first_of_next_month
from pybilling.billing.charger import InvoiceCharger
from pybilling.billing.config import BillingConfig
from pybilling.models import (
    BillingHandle,
    BillingRun,
    Invoice,
    ScheduleState,
    ScheduleStatus,
)
from pybilling.payment.base import PaymentProvider
from pybilling.storage.base import InvoiceStore

logger = logging.getLogger(__name__)

# Upper bound on one sleep so long waits re-read the wall clock
MAX_SLEEP_SECONDS = 3600.0


def _utc_now() -> datetime:
    return datetime.now(UTC)


class BillingScheduler:
    """Schedules billing of pending invoices on the first of each month.

    Builder methods configure the scheduler before use:
    - with_config(config) to choose which invoices a pass picks up
    - with_clock(clock) to replace the wall clock (tests, replays)

    Usage:
        store = SqliteInvoiceStore("billing.db")
        await store.connect()

        scheduler = BillingScheduler(provider, store).with_config(BillingConfig.from_env())

        fire_at = await scheduler.schedule_billing()
        print(f"Next billing: {fire_at}")

        run = await scheduler.wait_for_run()
        await scheduler.schedule_billing()  # re-arm for the following month
    """

    def __init__(
        self,
        provider: PaymentProvider,
        store: InvoiceStore,
        config: BillingConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize scheduler in the IDLE state.

        All dependencies passed explicitly, no globals.

        Args:
            provider: Payment capability used for every charge
            store: Invoice store to fetch from and persist to
            config: Billing configuration (defaults to BillingConfig())
            clock: Returns the current aware UTC datetime
        """
        self._store = store
        self._charger = InvoiceCharger(provider, store)
        self._config = config or BillingConfig()
        self._clock = clock or _utc_now

        self._lock = asyncio.Lock()
        self._pass_lock = asyncio.Lock()
        self._state = ScheduleState.idle()
        self._last_run: BillingRun | None = None

        # Keep references to firing tasks until they finish
        self._tasks: set[asyncio.Task] = set()

    def with_config(self, config: BillingConfig) -> "BillingScheduler":
        """Set billing configuration (builder pattern).

        Returns:
            self for method chaining
        """
        self._config = config
        return self

    def with_clock(self, clock: Callable[[], datetime]) -> "BillingScheduler":
        """Set the clock used for default reference dates and sleeps (builder pattern).

        Args:
            clock: Zero-argument callable returning an aware UTC datetime

        Returns:
            self for method chaining
        """
        self._clock = clock
        return self

    # ========================================================================
    # Scheduling
    # ========================================================================

    async def schedule_billing(self, reference_date: date | None = None) -> datetime:
        """
        Arm a billing pass for the first day of the month after reference_date.

        An execution that is already armed is cancelled and replaced. A pass
        that is already running is left to finish; the new execution does not
        start its own pass before that one ends.

        Args:
            reference_date: Date to compute from (defaults to today, per clock)

        Returns:
            Instant the pass will fire (00:00:00 UTC)
        """
        if reference_date is None:
            reference_date = self._clock().date()

        fire_at = first_of_next_month(reference_date)
        run_id = str(uuid7())

        async with self._lock:
            previous = self._state
            if previous.status == ScheduleStatus.ARMED:
                previous.handle.task.cancel()
                logger.info(
                    f"Replacing billing scheduled for {previous.handle.fire_at.isoformat()}"
                )

            task = asyncio.create_task(self._fire(run_id, fire_at), name=f"billing-{run_id}")
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

            self._state = ScheduleState.armed(
                BillingHandle(run_id=run_id, fire_at=fire_at, task=task)
            )

        logger.info(f"Billing scheduled for {fire_at.isoformat()} (run {run_id})")
        return fire_at

    async def get_next_billing_date(self) -> datetime:
        """
        Return the instant the armed billing pass fires.

        Raises:
            NotScheduledError: If no billing is scheduled
        """
        async with self._lock:
            if not self._state.is_scheduled:
                raise NotScheduledError("No billing is scheduled")
            return self._state.handle.fire_at

    async def is_scheduled(self) -> bool:
        """Return True while a pass is armed or running."""
        async with self._lock:
            return self._state.is_scheduled

    async def cancel(self) -> bool:
        """
        Cancel the armed billing pass.

        Returns:
            True if the pass was cancelled before it fired, False if nothing
            was scheduled or the pass had already fired. In every case the
            scheduler is IDLE afterwards.
        """
        async with self._lock:
            state = self._state
            if not state.is_scheduled:
                return False

            self._state = ScheduleState.idle()
            run_id = state.handle.run_id

            if state.status == ScheduleStatus.FIRING:
                logger.info(f"Billing run {run_id} already fired, letting it finish")
                return False

            cancelled = state.handle.task.cancel()

        logger.info(f"Cancelled billing run {run_id}")
        return cancelled

    async def wait_for_run(self) -> BillingRun | None:
        """
        Wait for the currently armed (or running) pass to finish.

        A pass disarmed by cancel() while firing is no longer tracked: this
        returns None immediately although that pass is still running.

        Returns:
            The BillingRun it produced, or None if nothing is scheduled or the
            pass is cancelled before it fires

        Raises:
            Exception: Whatever aborted the pass
        """
        async with self._lock:
            handle = self._state.handle

        if handle is None:
            return None

        try:
            return await asyncio.shield(handle.task)
        except asyncio.CancelledError:
            if handle.task.cancelled():
                return None
            raise

    async def shutdown(self) -> None:
        """Cancel an armed pass and wait for a running one to finish."""
        await self.cancel()

        if self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} billing tasks to complete...")
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # ========================================================================
    # Billing pass
    # ========================================================================

    async def process_pending_invoices(self, invoices: Iterable[Invoice]) -> list[Invoice]:
        """
        Charge every invoice, one at a time, in the given order.

        A classified failure on one invoice never stops the batch: it shows up
        as that invoice's status. Unclassified errors propagate and abort the
        rest of the batch.

        Args:
            invoices: Invoices to charge

        Returns:
            Resulting invoices, in input order
        """
        processed = []
        for invoice in invoices:
            processed.append(await self._charger.charge(invoice))

        logger.info(f"{len(processed)} invoices were processed")
        return processed

    async def _fire(self, run_id: str, fire_at: datetime) -> BillingRun | None:
        """Sleep until fire_at, claim the handle, run one billing pass."""
        while (delay := (fire_at - self._clock()).total_seconds()) > 0:
            await asyncio.sleep(min(delay, MAX_SLEEP_SECONDS))

        if self._pass_lock.locked():
            logger.info(f"Billing run {run_id} due, waiting for the running pass to finish")

        async with self._pass_lock:
            async with self._lock:
                if not self._is_current(run_id, ScheduleStatus.ARMED):
                    return None
                self._state = self._state.firing()

            logger.info(f"Billing run {run_id} fired")

            try:
                return await self._run_pass(run_id)
            except Exception as e:
                logger.error(f"Billing run {run_id} aborted: {type(e).__name__}: {e}")
                raise
            finally:
                async with self._lock:
                    if self._is_current(run_id):
                        self._state = ScheduleState.idle()

    def _on_task_done(self, task: asyncio.Task) -> None:
        """Forget a finished firing task.

        An aborted pass is already logged by _fire; its exception is marked
        retrieved here so asyncio does not report it again when the task is
        collected.
        """
        self._tasks.discard(task)
        if not task.cancelled():
            task.exception()

    async def _run_pass(self, run_id: str) -> BillingRun:
        started_at = self._clock()

        if self._config.retry_failed_invoices:
            invoices = await self._store.fetch_invoices_by_status(
                self._config.eligible_statuses()
            )
        else:
            invoices = await self._store.fetch_pending_invoices()

        logger.debug(f"Billing run {run_id}: fetched {len(invoices)} invoices")

        processed = await self.process_pending_invoices(invoices)

        run = BillingRun(
            run_id=run_id,
            started_at=started_at,
            finished_at=self._clock(),
            invoices=tuple(processed),
        )
        self._last_run = run
        return run

    def _is_current(self, run_id: str, status: ScheduleStatus | None = None) -> bool:
        """Check (under the lock) that run_id still owns the state."""
        handle = self._state.handle
        if handle is None or handle.run_id != run_id:
            return False
        return status is None or self._state.status == status

    # ========================================================================
    # Inspection
    # ========================================================================

    @property
    def state(self) -> ScheduleState:
        """Current state snapshot (immutable)."""
        return self._state

    @property
    def last_run(self) -> BillingRun | None:
        """Most recent completed billing pass, None before the first one."""
        return self._last_run

    @property
    def config(self) -> BillingConfig:
        return self._config

    @property
    def store(self) -> InvoiceStore:
        """Get storage backend (for testing/inspection)."""
        return self._store


class SchedulerError(Exception):
    """
    Billing scheduling failed.

    Custom exception with context, not generic Exception.
    """

    pass


class NotScheduledError(SchedulerError):
    """No billing pass is armed."""

    pass
