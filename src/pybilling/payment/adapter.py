"""Adapter for providers that signal faults with exceptions.

Older payment integrations expose ``charge(invoice) -> bool`` and raise
CustomerNotFoundError, CurrencyMismatchError or NetworkError. This adapter
turns those exceptions into ChargeOutcome values at the boundary so the
billing loop never uses exceptions to pick a status.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Protocol

from pybilling.models import (
    ChargeOutcome,
    Charged,
    CurrencyMismatch,
    CustomerNotFound,
    Invoice,
    NetworkFault,
)
from pybilling.payment.base import (
    CurrencyMismatchError,
    CustomerNotFoundError,
    NetworkError,
    PaymentProvider,
)

logger = logging.getLogger(__name__)


class LegacyProvider(Protocol):
    """Provider whose charge returns a bool (or an awaitable of one)."""

    def charge(self, invoice: Invoice) -> Any: ...


class RaisingPaymentProvider(PaymentProvider):
    """Wrap a legacy provider and convert its fault exceptions to outcomes.

    Usage:
        provider = RaisingPaymentProvider(legacy_client)
        outcome = await provider.charge(invoice)

    Exceptions other than the three classified faults propagate unchanged.
    """

    def __init__(self, legacy: LegacyProvider):
        self._legacy = legacy

    async def charge(self, invoice: Invoice) -> ChargeOutcome:
        try:
            result = self._legacy.charge(invoice)
            if inspect.isawaitable(result):
                result = await result
        except CustomerNotFoundError as e:
            logger.debug(f"Legacy provider raised {type(e).__name__} for invoice {invoice.id}")
            return CustomerNotFound(customer_id=e.customer_id)
        except CurrencyMismatchError as e:
            logger.debug(f"Legacy provider raised {type(e).__name__} for invoice {invoice.id}")
            return CurrencyMismatch(invoice_id=e.invoice_id, customer_id=e.customer_id)
        except NetworkError as e:
            logger.debug(f"Legacy provider raised {type(e).__name__} for invoice {invoice.id}")
            return NetworkFault(message=str(e))

        return Charged(success=bool(result))

    @property
    def legacy(self) -> LegacyProvider:
        """Get the wrapped provider (for testing/inspection)."""
        return self._legacy
