"""Charge-and-classify step for a single invoice.

One call to InvoiceCharger.charge() makes exactly one charge attempt,
maps the provider's ChargeOutcome to an InvoiceStatus, persists the invoice
with that status and returns it.

Classified outcomes never raise. Anything the provider or store raises
propagates to the caller untouched.
"""

import logging

from pybilling.models import (
    ChargeOutcome,
    Charged,
    CurrencyMismatch,
    CustomerNotFound,
    Invoice,
    InvoiceStatus,
    NetworkFault,
)
from pybilling.payment.base import PaymentProvider
from pybilling.storage.base import InvoiceStore

logger = logging.getLogger(__name__)


def status_for_outcome(outcome: ChargeOutcome) -> InvoiceStatus:
    """
    Map one charge outcome to the invoice status it produces.

    Args:
        outcome: Result of a charge attempt

    Returns:
        The resulting InvoiceStatus

    Raises:
        ChargeError: If outcome is not a ChargeOutcome
    """
    match outcome:
        case Charged(success=True):
            return InvoiceStatus.PAID
        case Charged(success=False):
            return InvoiceStatus.INSUFFICIENT_BALANCE
        case CustomerNotFound():
            return InvoiceStatus.CUSTOMER_NOT_FOUND
        case CurrencyMismatch():
            return InvoiceStatus.CURRENCY_MISMATCH
        case NetworkFault():
            return InvoiceStatus.NETWORK_EXCEPTION
        case _:
            raise ChargeError(f"Payment provider returned an unknown outcome: {outcome!r}")


class InvoiceCharger:
    """Attempts one charge for one invoice and records the result.

    Usage:
        charger = InvoiceCharger(provider, store)
        invoice = await charger.charge(invoice)
        print(invoice.status)
    """

    def __init__(self, provider: PaymentProvider, store: InvoiceStore):
        """
        Args:
            provider: Payment capability used for the charge
            store: Invoice store that receives the resulting status
        """
        self._provider = provider
        self._store = store

    async def charge(self, invoice: Invoice) -> Invoice:
        """
        Charge an invoice and persist its resulting status.

        The invoice's current status is not checked; callers pass PENDING
        (or configured retryable) invoices only.

        Args:
            invoice: Invoice to charge

        Returns:
            Copy of the invoice with its status for this attempt, already
            written to the store

        Raises:
            ChargeError: If the provider returns something outside ChargeOutcome
            StorageError: If the store update fails
        """
        outcome = await self._provider.charge(invoice)
        status = status_for_outcome(outcome)

        self._log_outcome(invoice, outcome, status)

        result = invoice.with_status(status)
        await self._store.update_invoice(result)
        return result

    @staticmethod
    def _log_outcome(invoice: Invoice, outcome: ChargeOutcome, status: InvoiceStatus) -> None:
        if status == InvoiceStatus.PAID:
            logger.info(f"Charged Invoice {invoice.id} for customer {invoice.customer_id}")
        elif status == InvoiceStatus.INSUFFICIENT_BALANCE:
            logger.error(
                f"Customer {invoice.customer_id} account balance did not allow the charge, "
                f"when attempting to charge Invoice {invoice.id}"
            )
        else:
            logger.error(
                f"{outcome} when attempting to charge Invoice {invoice.id} "
                f"(customer {invoice.customer_id}) -> {status}"
            )

    @property
    def provider(self) -> PaymentProvider:
        return self._provider

    @property
    def store(self) -> InvoiceStore:
        return self._store


class ChargeError(Exception):
    """
    Payment provider broke its contract.

    Raised when a provider returns a value outside the ChargeOutcome union.
    Not recovered by the billing loop: it aborts the pass.
    """

    pass
