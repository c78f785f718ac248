"""
Charge outcomes returned by a payment provider.

This module defines the ChargeOutcome union for one charge attempt.

**Design Pattern**: State Machine using Union types

A provider reports what happened instead of raising. The charger then maps
the outcome to an InvoiceStatus with a single exhaustive match.

Example:
    ```python
    outcome = await provider.charge(invoice)

    match outcome:
        case Charged(success=True):
            print("Funds captured")
        case Charged(success=False):
            print("Declined")
        case CustomerNotFound() | CurrencyMismatch() | NetworkFault():
            print(f"Fault: {outcome}")
    ```
"""

from dataclasses import dataclass

__all__ = [
    "Charged",
    "CustomerNotFound",
    "CurrencyMismatch",
    "NetworkFault",
    "ChargeOutcome",
    "is_charged",
    "is_fault",
]


@dataclass(frozen=True)
class Charged:
    """
    The provider processed the charge.

    Attributes:
        success: True if funds were captured, False if the charge was
            declined because the account balance did not allow it
    """

    success: bool

    def __str__(self) -> str:
        """Human-readable string representation."""
        return "Charged(captured)" if self.success else "Charged(declined)"


@dataclass(frozen=True)
class CustomerNotFound:
    """
    The provider has no customer matching the invoice.

    Attributes:
        customer_id: Customer the provider could not find
    """

    customer_id: int

    def __str__(self) -> str:
        return f"Customer '{self.customer_id}' was not found"


@dataclass(frozen=True)
class CurrencyMismatch:
    """
    Invoice currency does not match the customer's account currency.

    Attributes:
        invoice_id: Invoice that was charged
        customer_id: Customer whose currency differs
    """

    invoice_id: int
    customer_id: int

    def __str__(self) -> str:
        return (
            f"Currency of invoice '{self.invoice_id}' does not match "
            f"currency of customer '{self.customer_id}'"
        )


@dataclass(frozen=True)
class NetworkFault:
    """
    Transport to the payment provider failed.

    Attributes:
        message: Description of the transport failure
    """

    message: str = "A network error happened please try again."

    def __str__(self) -> str:
        return self.message


# ChargeOutcome is the closed set of results of one charge attempt.
#
# Pattern matching:
#     match outcome:
#         case Charged(success):
#             ...
#         case CustomerNotFound(customer_id):
#             ...
#
ChargeOutcome = Charged | CustomerNotFound | CurrencyMismatch | NetworkFault


def is_charged(outcome: ChargeOutcome) -> bool:
    """
    Check if the provider processed the charge (captured or declined).

    Args:
        outcome: Result of one charge attempt

    Returns:
        True if outcome is Charged, False for any fault
    """
    return isinstance(outcome, Charged)


def is_fault(outcome: ChargeOutcome) -> bool:
    """Check if the charge attempt ended in a classified fault."""
    return isinstance(outcome, (CustomerNotFound, CurrencyMismatch, NetworkFault))
