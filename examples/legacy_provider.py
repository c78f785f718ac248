"""
Legacy Provider Example

Shows how to bill through a payment client that signals failures by raising
exceptions instead of returning a ChargeOutcome.

## Pattern Shown: Adapter

RaisingPaymentProvider wraps the client and turns its
CustomerNotFoundError, CurrencyMismatchError and NetworkError into charge
outcomes. Anything else it raises aborts the billing pass.

## Run with:
```bash
PYTHONPATH=src python examples/legacy_provider.py
```
"""

import asyncio
import logging

from pybilling import (
    BillingScheduler,
    Currency,
    CurrencyMismatchError,
    CustomerNotFoundError,
    InMemoryInvoiceStore,
    Invoice,
    Money,
    NetworkError,
    RaisingPaymentProvider,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")


class LegacyPaymentClient:
    """Synchronous client with exception-based error reporting."""

    BALANCES = {1: 500, 2: 10}
    CURRENCIES = {1: Currency.DKK, 2: Currency.DKK, 3: Currency.EUR}

    def charge(self, invoice: Invoice) -> bool:
        if invoice.customer_id not in self.CURRENCIES:
            raise CustomerNotFoundError(invoice.customer_id)
        if self.CURRENCIES[invoice.customer_id] != invoice.amount.currency:
            raise CurrencyMismatchError(invoice.id, invoice.customer_id)
        if invoice.customer_id == 2 and invoice.id % 2:
            raise NetworkError()
        return self.BALANCES.get(invoice.customer_id, 0) >= invoice.amount.value


async def main():
    money = Money(100, Currency.DKK)
    store = InMemoryInvoiceStore(
        [
            Invoice(id=1, customer_id=1, amount=money),
            Invoice(id=2, customer_id=2, amount=money),
            Invoice(id=3, customer_id=2, amount=money),
            Invoice(id=4, customer_id=3, amount=money),
            Invoice(id=5, customer_id=404, amount=money),
        ]
    )

    scheduler = BillingScheduler(RaisingPaymentProvider(LegacyPaymentClient()), store)
    processed = await scheduler.process_pending_invoices(await store.fetch_pending_invoices())

    for invoice in processed:
        print(f"Invoice {invoice.id}: {invoice.status}")


if __name__ == "__main__":
    asyncio.run(main())
