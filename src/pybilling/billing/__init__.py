"""
Billing module - the charge loop and its monthly trigger.

This module contains the billing components:
- calendar: first-of-next-month arithmetic
- config: which invoices a scheduled pass picks up
- charger: one charge attempt per invoice, classified and persisted
- scheduler: arm/query/cancel the monthly pass and run it when it fires
"""

from pybilling.billing.calendar import first_of_next_month
from pybilling.billing.charger import ChargeError, InvoiceCharger, status_for_outcome
from pybilling.billing.config import BillingConfig
from pybilling.billing.scheduler import BillingScheduler, NotScheduledError, SchedulerError

__all__ = [
    "first_of_next_month",
    "BillingConfig",
    "InvoiceCharger",
    "ChargeError",
    "status_for_outcome",
    "BillingScheduler",
    "SchedulerError",
    "NotScheduledError",
]
