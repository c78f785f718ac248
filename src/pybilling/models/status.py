"""Status enumerations for invoices and the billing schedule.

Defines the lifecycle states of a single invoice and of the
scheduler's one outstanding deferred execution.
"""

from enum import Enum


class InvoiceStatus(Enum):
    """Status of a single invoice.

    Lifecycle:
        PENDING → PAID | CUSTOMER_NOT_FOUND | CURRENCY_MISMATCH
                | NETWORK_EXCEPTION | INSUFFICIENT_BALANCE

    Design: One Attempt Per Pass
        Every status other than PENDING is written by exactly one charge
        attempt. Whether a failed invoice is picked up again on the next
        pass is decided by BillingConfig, not by the status itself.
    """

    PENDING = "PENDING"
    """Invoice has not been charged successfully yet."""

    PAID = "PAID"
    """Funds were captured."""

    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    """Payment provider does not know the invoice's customer."""

    CURRENCY_MISMATCH = "CURRENCY_MISMATCH"
    """Invoice currency differs from the customer's account currency."""

    NETWORK_EXCEPTION = "NETWORK_EXCEPTION"
    """Transport to the payment provider failed."""

    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    """Provider declined the charge for lack of funds."""

    @property
    def is_pending(self) -> bool:
        """Check if this invoice still awaits a charge attempt."""
        return self == InvoiceStatus.PENDING

    @property
    def is_failure(self) -> bool:
        """Check if this status records a failed charge attempt."""
        return self not in (InvoiceStatus.PENDING, InvoiceStatus.PAID)

    def __str__(self) -> str:
        return self.value


class ScheduleStatus(Enum):
    """Status of the scheduler's deferred execution.

    Lifecycle:
        IDLE → ARMED → FIRING → IDLE
        ARMED → IDLE (cancelled before firing)
    """

    IDLE = "IDLE"
    """Nothing is armed."""

    ARMED = "ARMED"
    """One billing pass is queued to fire at a known instant."""

    FIRING = "FIRING"
    """The armed execution fired and its billing pass is running."""

    @property
    def is_scheduled(self) -> bool:
        """Check if this status counts as scheduled."""
        return self != ScheduleStatus.IDLE

    def __str__(self) -> str:
        return self.value
