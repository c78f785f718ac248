"""
Pytest configuration and fixtures for pybilling tests.

Provides reusable fixtures for stores, providers, schedulers and the sample
invoice batch used across tests.
"""

from collections.abc import AsyncGenerator

import pytest
from hypothesis import strategies as st

from pybilling.billing import BillingScheduler
from pybilling.models import (
    Charged,
    Currency,
    CurrencyMismatch,
    CustomerNotFound,
    Invoice,
    InvoiceStatus,
    Money,
    NetworkFault,
)
from pybilling.payment import MockPaymentProvider
from pybilling.storage import InMemoryInvoiceStore, SqliteInvoiceStore

MONEY = Money(100, Currency.DKK)


def make_invoice(
    invoice_id: int,
    customer_id: int | None = None,
    status: InvoiceStatus = InvoiceStatus.PENDING,
    amount: Money = MONEY,
) -> Invoice:
    """Build an invoice; customer id defaults to the invoice id."""
    return Invoice(
        id=invoice_id,
        customer_id=invoice_id if customer_id is None else customer_id,
        amount=amount,
        status=status,
    )


# Five pending invoices, one per charge outcome:
# success, unknown customer, currency mismatch, network fault, decline
SAMPLE_INVOICES = [
    make_invoice(1),
    make_invoice(2, customer_id=404),
    make_invoice(3),
    make_invoice(4),
    make_invoice(5),
]

SAMPLE_SCRIPT = {
    1: Charged(success=True),
    2: CustomerNotFound(customer_id=404),
    3: CurrencyMismatch(invoice_id=3, customer_id=3),
    4: NetworkFault(),
    5: Charged(success=False),
}

SAMPLE_STATUSES = [
    InvoiceStatus.PAID,
    InvoiceStatus.CUSTOMER_NOT_FOUND,
    InvoiceStatus.CURRENCY_MISMATCH,
    InvoiceStatus.NETWORK_EXCEPTION,
    InvoiceStatus.INSUFFICIENT_BALANCE,
]


@pytest.fixture
def sample_invoices() -> list[Invoice]:
    return list(SAMPLE_INVOICES)


@pytest.fixture
def scripted_provider() -> MockPaymentProvider:
    """Provider answering the sample batch with one outcome of each kind."""
    return MockPaymentProvider(script=SAMPLE_SCRIPT)


@pytest.fixture
async def in_memory_store() -> AsyncGenerator[InMemoryInvoiceStore, None]:
    """In-memory store pre-loaded with the sample invoices."""
    store = InMemoryInvoiceStore(SAMPLE_INVOICES)
    yield store
    await store.reset()


@pytest.fixture
async def sqlite_memory_store() -> AsyncGenerator[SqliteInvoiceStore, None]:
    """SQLite in-memory store pre-loaded with the sample invoices."""
    store = await SqliteInvoiceStore.in_memory()
    for invoice in SAMPLE_INVOICES:
        await store.create_invoice(invoice)
    yield store
    await store.close()


@pytest.fixture
async def scheduler(
    scripted_provider: MockPaymentProvider, in_memory_store: InMemoryInvoiceStore
) -> AsyncGenerator[BillingScheduler, None]:
    """Scheduler over the sample store; armed tasks are cancelled on teardown."""
    scheduler = BillingScheduler(scripted_provider, in_memory_store)
    yield scheduler
    await scheduler.shutdown()


# Hypothesis strategies


@st.composite
def outcome_strategy(draw):
    """Strategy for generating any ChargeOutcome."""
    kind = draw(st.sampled_from(["charged", "customer", "currency", "network"]))
    customer_id = draw(st.integers(min_value=1, max_value=10_000))
    if kind == "charged":
        return Charged(success=draw(st.booleans()))
    if kind == "customer":
        return CustomerNotFound(customer_id=customer_id)
    if kind == "currency":
        return CurrencyMismatch(invoice_id=draw(st.integers(min_value=1)), customer_id=customer_id)
    return NetworkFault(message=draw(st.text(max_size=40)))
