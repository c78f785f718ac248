"""
Billing configuration.

Controls which invoices a scheduled billing pass picks up.

Configuration can be built explicitly or read from the environment:
- `BillingConfig(retry_failed_invoices=True)`
- `BillingConfig.from_env()` reads BILLING_RETRY_FAILED_INVOICES
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from pybilling.models import InvoiceStatus

RETRY_FAILED_ENV = "BILLING_RETRY_FAILED_INVOICES"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class BillingConfig:
    """
    Configuration for scheduled billing passes.

    Examples:
        # Default: only PENDING invoices are charged
        config = BillingConfig()

        # Also retry invoices that failed for transient reasons last month
        config = BillingConfig(retry_failed_invoices=True)
    """

    retry_failed_invoices: bool = False
    """Fetch invoices in ``retryable_statuses`` again on the next pass.

    When False, every status other than PENDING is an exit state that needs
    manual intervention.
    """

    retryable_statuses: tuple[InvoiceStatus, ...] = (
        InvoiceStatus.NETWORK_EXCEPTION,
        InvoiceStatus.INSUFFICIENT_BALANCE,
    )
    """Statuses treated as still pending when ``retry_failed_invoices`` is set."""

    def __post_init__(self):
        """Validate invariants after creation."""
        if InvoiceStatus.PAID in self.retryable_statuses:
            raise ValueError("PAID invoices can never be retried")

    def eligible_statuses(self) -> tuple[InvoiceStatus, ...]:
        """
        Statuses a scheduled billing pass fetches from the store.

        Returns:
            (PENDING,) by default, plus the retryable statuses when
            retry_failed_invoices is set
        """
        if not self.retry_failed_invoices:
            return (InvoiceStatus.PENDING,)
        return (InvoiceStatus.PENDING, *self.retryable_statuses)

    @classmethod
    def from_env(cls) -> BillingConfig:
        """
        Build configuration from environment variables.

        If BILLING_RETRY_FAILED_INVOICES is unset, failed invoices are not
        retried.

        Example:
            # $ export BILLING_RETRY_FAILED_INVOICES=true
            config = BillingConfig.from_env()
        """
        raw = os.getenv(RETRY_FAILED_ENV, "")
        return cls(retry_failed_invoices=raw.strip().lower() in _TRUTHY)
