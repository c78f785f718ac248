"""
Monthly Billing Example - SQLite Version

This example runs three monthly billing passes against a SQLite store.

## Pattern Shown: Host-driven re-arming

The scheduler never re-arms itself. The host loop:
- Schedules the next pass with schedule_billing()
- Waits for it with wait_for_run()
- Adds the next month's invoices and schedules again

A simulated clock jumps straight to each fire time so the example finishes
immediately instead of waiting for the first of the month.

## Run with:
```bash
PYTHONPATH=src python examples/monthly_billing.py
```
"""

import asyncio
import logging
from datetime import UTC, datetime
from decimal import Decimal

from pybilling import (
    BillingConfig,
    BillingScheduler,
    Currency,
    Invoice,
    MockPaymentProvider,
    Money,
    SqliteInvoiceStore,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CUSTOMERS = 4


class SimulatedClock:
    """Wall clock the example can move forward by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


async def add_invoices(store: SqliteInvoiceStore, first_id: int) -> int:
    """Create one pending invoice per customer, returning the next free id."""
    for offset in range(CUSTOMERS):
        await store.create_invoice(
            Invoice(
                id=first_id + offset,
                customer_id=offset + 1,
                amount=Money(Decimal("49.90"), Currency.EUR),
            )
        )
    return first_id + CUSTOMERS


async def main():
    """Run three monthly billing passes."""
    store = SqliteInvoiceStore("data/monthly_billing.db")
    await store.connect()
    await store.reset()

    clock = SimulatedClock(datetime(2021, 11, 20, 9, 0, tzinfo=UTC))
    provider = MockPaymentProvider(success_rate=0.7, seed=7)
    scheduler = (
        BillingScheduler(provider, store)
        .with_config(BillingConfig(retry_failed_invoices=True))
        .with_clock(clock)
    )

    next_id = await add_invoices(store, first_id=1)

    try:
        for _ in range(3):
            fire_at = await scheduler.schedule_billing()
            logger.info(f"Next billing: {await scheduler.get_next_billing_date()}")

            clock.now = fire_at
            run = await scheduler.wait_for_run()

            summary = ", ".join(f"{status}={count}" for status, count in run.summary().items())
            logger.info(f"Run {run.run_id} processed {run.processed} invoices: {summary}")

            next_id = await add_invoices(store, first_id=next_id)
            clock.now = fire_at.replace(day=15)
    finally:
        await scheduler.shutdown()
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
