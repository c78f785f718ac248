"""Invoice value objects."""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from pybilling.models.status import InvoiceStatus

__all__ = ["Currency", "Money", "Invoice"]


class Currency(Enum):
    """Currencies an invoice can be issued in."""

    EUR = "EUR"
    USD = "USD"
    DKK = "DKK"
    SEK = "SEK"
    GBP = "GBP"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """An amount in a single currency."""

    value: Decimal
    currency: Currency

    def __post_init__(self):
        """Normalise ints and strings to Decimal."""
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))

    def __str__(self) -> str:
        return f"{self.value} {self.currency}"


@dataclass(frozen=True)
class Invoice:
    """An invoice owned by the invoice store.

    The billing core only ever receives copies and hands a copy with a new
    status back to the store. Identity and amount never change.
    """

    id: int
    """Invoice identifier, unique within the store."""

    customer_id: int
    """Customer the invoice is billed to."""

    amount: Money
    """Amount due."""

    status: InvoiceStatus = InvoiceStatus.PENDING
    """Current status."""

    def with_status(self, status: InvoiceStatus) -> "Invoice":
        """Return a copy of this invoice with only the status replaced."""
        return replace(self, status=status)

    def __repr__(self) -> str:
        """Readable representation for debugging."""
        return (
            f"Invoice(id={self.id}, customer_id={self.customer_id}, "
            f"amount={self.amount}, status={self.status})"
        )
