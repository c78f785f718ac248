"""Payment capability consumed by the billing core.

Provides the provider interface, the classified fault exceptions, and
adapters:
    - PaymentProvider: Abstract interface returning ChargeOutcome values
    - RaisingPaymentProvider: Adapter for exception-based providers
    - MockPaymentProvider: Seeded random provider for demos and tests
"""

from pybilling.payment.adapter import RaisingPaymentProvider
from pybilling.payment.base import (
    CurrencyMismatchError,
    CustomerNotFoundError,
    NetworkError,
    PaymentError,
    PaymentProvider,
)
from pybilling.payment.mock import MockPaymentProvider

__all__ = [
    "PaymentProvider",
    "PaymentError",
    "CustomerNotFoundError",
    "CurrencyMismatchError",
    "NetworkError",
    "RaisingPaymentProvider",
    "MockPaymentProvider",
]
