"""Core data models for recurring billing.

Defines invoices, their statuses, charge outcomes, and the scheduler's
state snapshot.

Design: Dependency-Free Models
These types have no dependencies on payment, storage or billing modules to
prevent circular imports and enable clean layering.
"""

from pybilling.models.invoice import Currency, Invoice, Money
from pybilling.models.outcome import (
    ChargeOutcome,
    Charged,
    CurrencyMismatch,
    CustomerNotFound,
    NetworkFault,
    is_charged,
    is_fault,
)
from pybilling.models.schedule import BillingHandle, BillingRun, ScheduleState
from pybilling.models.status import InvoiceStatus, ScheduleStatus

__all__ = [
    "Currency",
    "Money",
    "Invoice",
    "InvoiceStatus",
    "ScheduleStatus",
    "ChargeOutcome",
    "Charged",
    "CustomerNotFound",
    "CurrencyMismatch",
    "NetworkFault",
    "is_charged",
    "is_fault",
    "BillingHandle",
    "BillingRun",
    "ScheduleState",
]
