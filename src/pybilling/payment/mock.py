"""Mock payment provider for demos and tests.

Returns a seeded random Charged outcome, or a scripted outcome for invoices
listed in ``script``.
"""

from __future__ import annotations

import random

from pybilling.models import ChargeOutcome, Charged, Invoice
from pybilling.payment.base import PaymentProvider


class MockPaymentProvider(PaymentProvider):
    """In-process provider that never touches a network.

    Usage:
        provider = MockPaymentProvider(success_rate=0.8, seed=42)
        provider = MockPaymentProvider(script={2: CustomerNotFound(404)})
    """

    def __init__(
        self,
        success_rate: float = 0.5,
        seed: int | None = None,
        script: dict[int, ChargeOutcome] | None = None,
    ):
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError(f"success_rate must be between 0 and 1, got {success_rate}")

        self._success_rate = success_rate
        self._random = random.Random(seed)
        self._script = dict(script or {})
        self.charged: list[int] = []

    def __repr__(self) -> str:
        return f"MockPaymentProvider(success_rate={self._success_rate})"

    async def charge(self, invoice: Invoice) -> ChargeOutcome:
        self.charged.append(invoice.id)

        scripted = self._script.get(invoice.id)
        if scripted is not None:
            return scripted

        return Charged(success=self._random.random() < self._success_rate)
