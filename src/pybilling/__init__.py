"""
pybilling: Recurring invoice billing for Python

Charges every pending invoice once a month and records the outcome of each
attempt.

Design Pattern: Façade Pattern
This module provides a simplified interface to the package, hiding the
split between models, payment providers, storage and the billing loop.

Example:
    ```python
    import asyncio
    from pybilling import BillingScheduler, MockPaymentProvider, SqliteInvoiceStore

    async def main():
        store = SqliteInvoiceStore("billing.db")
        await store.connect()

        scheduler = BillingScheduler(MockPaymentProvider(), store)
        fire_at = await scheduler.schedule_billing()
        print(f"Billing scheduled for {fire_at}")

        run = await scheduler.wait_for_run()
        print(run.summary())

        await store.close()

    asyncio.run(main())
    ```
"""

# Models
from pybilling.models import (
    BillingRun,
    ChargeOutcome,
    Charged,
    Currency,
    CurrencyMismatch,
    CustomerNotFound,
    Invoice,
    InvoiceStatus,
    Money,
    NetworkFault,
    ScheduleState,
    ScheduleStatus,
)

# Payment (Adapter pattern)
from pybilling.payment import (
    CurrencyMismatchError,
    CustomerNotFoundError,
    MockPaymentProvider,
    NetworkError,
    PaymentError,
    PaymentProvider,
    RaisingPaymentProvider,
)

# Storage (Adapter pattern)
from pybilling.storage import InMemoryInvoiceStore, InvoiceStore, SqliteInvoiceStore, StorageError

# Billing
from pybilling.billing import (
    BillingConfig,
    BillingScheduler,
    ChargeError,
    InvoiceCharger,
    NotScheduledError,
    SchedulerError,
    first_of_next_month,
)

# Version
__version__ = "0.1.0"

__all__ = [
    # Models
    "Currency",
    "Money",
    "Invoice",
    "InvoiceStatus",
    "ScheduleStatus",
    "ScheduleState",
    "BillingRun",
    "ChargeOutcome",
    "Charged",
    "CustomerNotFound",
    "CurrencyMismatch",
    "NetworkFault",

    # Payment
    "PaymentProvider",
    "PaymentError",
    "CustomerNotFoundError",
    "CurrencyMismatchError",
    "NetworkError",
    "RaisingPaymentProvider",
    "MockPaymentProvider",

    # Storage
    "InvoiceStore",
    "StorageError",
    "InMemoryInvoiceStore",
    "SqliteInvoiceStore",

    # Billing
    "BillingConfig",
    "BillingScheduler",
    "SchedulerError",
    "NotScheduledError",
    "InvoiceCharger",
    "ChargeError",
    "first_of_next_month",

    # Metadata
    "__version__",
]
