"""Tests for the charge-and-classify step."""

import logging

import pytest
from hypothesis import given

from pybilling.billing.charger import ChargeError, InvoiceCharger, status_for_outcome
from pybilling.models import (
    Charged,
    CurrencyMismatch,
    CustomerNotFound,
    InvoiceStatus,
    NetworkFault,
)
from pybilling.payment import MockPaymentProvider, PaymentProvider
from pybilling.storage import InMemoryInvoiceStore, StorageError

from conftest import SAMPLE_INVOICES, SAMPLE_STATUSES, make_invoice, outcome_strategy


class RaisingProvider(PaymentProvider):
    """Provider that fails outside the outcome union."""

    def __init__(self, error: Exception):
        self._error = error

    async def charge(self, invoice):
        raise self._error


class BrokenProvider(PaymentProvider):
    """Provider that returns a raw bool instead of an outcome."""

    async def charge(self, invoice):
        return True


@pytest.mark.parametrize(
    "outcome, expected",
    [
        (Charged(success=True), InvoiceStatus.PAID),
        (Charged(success=False), InvoiceStatus.INSUFFICIENT_BALANCE),
        (CustomerNotFound(customer_id=1), InvoiceStatus.CUSTOMER_NOT_FOUND),
        (CurrencyMismatch(invoice_id=1, customer_id=1), InvoiceStatus.CURRENCY_MISMATCH),
        (NetworkFault(), InvoiceStatus.NETWORK_EXCEPTION),
    ],
)
def test_status_for_outcome(outcome, expected):
    assert status_for_outcome(outcome) == expected


@pytest.mark.property
@given(outcome=outcome_strategy())
def test_every_outcome_maps_to_an_exit_status(outcome):
    """Property: no outcome leaves an invoice PENDING."""
    assert status_for_outcome(outcome) != InvoiceStatus.PENDING


def test_status_for_unknown_outcome():
    with pytest.raises(ChargeError, match="unknown outcome"):
        status_for_outcome(True)


@pytest.mark.asyncio
@pytest.mark.parametrize("invoice, expected", list(zip(SAMPLE_INVOICES, SAMPLE_STATUSES)))
async def test_charge_persists_status(scripted_provider, in_memory_store, invoice, expected):
    charger = InvoiceCharger(scripted_provider, in_memory_store)

    result = await charger.charge(invoice)

    assert result == invoice.with_status(expected)
    assert await in_memory_store.fetch_invoice(invoice.id) == result
    assert in_memory_store.updates == [result]


@pytest.mark.asyncio
async def test_charge_does_not_recheck_status(in_memory_store):
    """Invoices already PAID are charged again if a caller passes them in."""
    provider = MockPaymentProvider(success_rate=0.0)
    charger = InvoiceCharger(provider, in_memory_store)

    paid = make_invoice(1, status=InvoiceStatus.PAID)
    result = await charger.charge(paid)

    assert provider.charged == [1]
    assert result.status == InvoiceStatus.INSUFFICIENT_BALANCE


@pytest.mark.asyncio
async def test_charge_logs_customer_and_invoice(scripted_provider, in_memory_store, caplog):
    caplog.set_level(logging.INFO, logger="pybilling")
    charger = InvoiceCharger(scripted_provider, in_memory_store)

    for invoice in SAMPLE_INVOICES:
        await charger.charge(invoice)

    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 4
    assert any("Invoice 2" in msg and "404" in msg for msg in errors)
    assert any("Customer 5 account balance" in msg for msg in errors)
    assert any("Charged Invoice 1" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_unclassified_provider_error_propagates(in_memory_store):
    charger = InvoiceCharger(RaisingProvider(RuntimeError("socket closed")), in_memory_store)

    with pytest.raises(RuntimeError, match="socket closed"):
        await charger.charge(SAMPLE_INVOICES[0])

    assert in_memory_store.updates == []


@pytest.mark.asyncio
async def test_contract_violation_is_not_persisted(in_memory_store):
    charger = InvoiceCharger(BrokenProvider(), in_memory_store)

    with pytest.raises(ChargeError):
        await charger.charge(SAMPLE_INVOICES[0])

    assert in_memory_store.updates == []


@pytest.mark.asyncio
async def test_store_failure_propagates(scripted_provider):
    charger = InvoiceCharger(scripted_provider, InMemoryInvoiceStore())

    with pytest.raises(StorageError, match="not found"):
        await charger.charge(SAMPLE_INVOICES[0])
