"""
PaymentProvider interface - abstract charge capability.

Design Pattern: Adapter Pattern
PaymentProvider defines the target interface that every payment backend
adapts to. The billing core depends on this abstraction only.

A provider reports the result of a charge as a ChargeOutcome value instead
of raising. Legacy providers that signal faults with exceptions are wrapped
by RaisingPaymentProvider, which is the only place those exceptions are
caught.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pybilling.models import ChargeOutcome, Invoice


class PaymentProvider(ABC):
    """
    Abstract external payment capability.

    Implementations perform exactly one charge per call. They must not retry
    on their own: retry policy belongs to the surrounding system.
    """

    @abstractmethod
    async def charge(self, invoice: Invoice) -> ChargeOutcome:
        """
        Charge a customer's account the amount of the invoice.

        Args:
            invoice: Invoice to charge

        Returns:
            Charged(True) when funds were captured, Charged(False) when the
            balance did not allow the charge, or one of the fault outcomes

        Raises:
            Exception: Any failure outside the outcome union is a contract
                violation and propagates to the caller unchanged
        """
        pass


# ============================================================================
# Fault exceptions raised by legacy providers
# ============================================================================


class PaymentError(Exception):
    """
    Charge attempt failed in a way the provider classified.

    Custom exception with context, not generic Exception.
    """

    pass


class CustomerNotFoundError(PaymentError):
    """Provider has no customer with the given id."""

    def __init__(self, customer_id: int):
        super().__init__(f"Customer '{customer_id}' was not found")
        self.customer_id = customer_id


class CurrencyMismatchError(PaymentError):
    """Invoice currency does not match the customer's currency."""

    def __init__(self, invoice_id: int, customer_id: int):
        super().__init__(
            f"Currency of invoice '{invoice_id}' does not match currency "
            f"of customer '{customer_id}'"
        )
        self.invoice_id = invoice_id
        self.customer_id = customer_id


class NetworkError(PaymentError):
    """Transport to the provider failed."""

    def __init__(self, message: str = "A network error happened please try again."):
        super().__init__(message)
