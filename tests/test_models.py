"""Tests for invoice, outcome and schedule state models."""

import asyncio
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from pybilling.models import (
    BillingHandle,
    BillingRun,
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
    is_charged,
    is_fault,
)

from conftest import make_invoice


def test_money_normalises_to_decimal():
    money = Money(100, Currency.DKK)
    assert money.value == Decimal("100")
    assert isinstance(money.value, Decimal)
    assert str(money) == "100 DKK"


def test_invoice_defaults_to_pending():
    invoice = Invoice(id=1, customer_id=7, amount=Money("9.99", Currency.EUR))
    assert invoice.status == InvoiceStatus.PENDING
    assert invoice.status.is_pending


def test_with_status_keeps_identity_and_amount():
    invoice = make_invoice(3, customer_id=9)
    paid = invoice.with_status(InvoiceStatus.PAID)

    assert paid.status == InvoiceStatus.PAID
    assert (paid.id, paid.customer_id, paid.amount) == (3, 9, invoice.amount)
    # Original copy untouched
    assert invoice.status == InvoiceStatus.PENDING


def test_invoice_status_failure_flags():
    assert not InvoiceStatus.PENDING.is_failure
    assert not InvoiceStatus.PAID.is_failure
    for status in (
        InvoiceStatus.CUSTOMER_NOT_FOUND,
        InvoiceStatus.CURRENCY_MISMATCH,
        InvoiceStatus.NETWORK_EXCEPTION,
        InvoiceStatus.INSUFFICIENT_BALANCE,
    ):
        assert status.is_failure
    assert str(InvoiceStatus.PAID) == "PAID"


def test_outcome_helpers():
    assert is_charged(Charged(success=True))
    assert is_charged(Charged(success=False))
    assert not is_fault(Charged(success=True))

    for fault in (CustomerNotFound(1), CurrencyMismatch(2, 3), NetworkFault()):
        assert is_fault(fault)
        assert not is_charged(fault)


def test_outcome_messages():
    assert str(Charged(True)) == "Charged(captured)"
    assert str(Charged(False)) == "Charged(declined)"
    assert "404" in str(CustomerNotFound(404))
    assert "'7'" in str(CurrencyMismatch(invoice_id=7, customer_id=8))
    assert str(NetworkFault("timeout")) == "timeout"


def test_schedule_state_starts_idle():
    state = ScheduleState.idle()
    assert state.status == ScheduleStatus.IDLE
    assert state.handle is None
    assert not state.is_scheduled


def test_schedule_state_rejects_armed_without_handle():
    with pytest.raises(ValueError, match="handle must be set"):
        ScheduleState(status=ScheduleStatus.ARMED)

    with pytest.raises(ValueError, match="handle must be set"):
        ScheduleState(status=ScheduleStatus.FIRING)


@pytest.mark.asyncio
async def test_schedule_state_transitions_keep_handle():
    task = asyncio.create_task(asyncio.sleep(0))
    handle = BillingHandle(run_id="run-1", fire_at=datetime(2022, 1, 1, tzinfo=UTC), task=task)

    armed = ScheduleState.armed(handle)
    firing = armed.firing()

    assert armed.is_scheduled and firing.is_scheduled
    assert firing.status == ScheduleStatus.FIRING
    assert firing.handle is handle

    with pytest.raises(ValueError, match="handle must be None"):
        ScheduleState(status=ScheduleStatus.IDLE, handle=handle)

    await task


def test_billing_run_summary():
    now = datetime.now(UTC)
    run = BillingRun(
        run_id="run-1",
        started_at=now,
        finished_at=now,
        invoices=(
            make_invoice(1, status=InvoiceStatus.PAID),
            make_invoice(2, status=InvoiceStatus.PAID),
            make_invoice(3, status=InvoiceStatus.NETWORK_EXCEPTION),
        ),
    )

    assert run.processed == 3
    assert run.summary() == {InvoiceStatus.PAID: 2, InvoiceStatus.NETWORK_EXCEPTION: 1}
    assert "processed=3" in repr(run)
