"""In-memory storage implementation for pybilling.

Design Pattern: Adapter Pattern
InMemoryInvoiceStore adapts an in-memory dictionary to the InvoiceStore
interface.

Instance is immediately usable after __init__.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from pybilling.models import Invoice, InvoiceStatus
from pybilling.storage.base import InvoiceStore, StorageError


class InMemoryInvoiceStore(InvoiceStore):
    """In-memory storage for testing.

    Can be substituted for SqliteInvoiceStore without changing client code.

    Usage:
        store = InMemoryInvoiceStore()
        await store.create_invoice(invoice)
    """

    def __init__(self, invoices: Iterable[Invoice] = ()):
        # Storage: {invoice_id: Invoice}
        self._invoices: dict[int, Invoice] = {invoice.id: invoice for invoice in invoices}

        # Every successful update, in write order
        self.updates: list[Invoice] = []

        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        """Return string representation of storage instance."""
        return "InMemoryInvoiceStore"

    async def fetch_invoice(self, invoice_id: int) -> Invoice | None:
        async with self._lock:
            return self._invoices.get(invoice_id)

    async def fetch_invoices(self) -> list[Invoice]:
        async with self._lock:
            return [self._invoices[key] for key in sorted(self._invoices)]

    async def fetch_invoices_by_status(self, statuses: Iterable[InvoiceStatus]) -> list[Invoice]:
        wanted = set(statuses)
        async with self._lock:
            return [
                self._invoices[key]
                for key in sorted(self._invoices)
                if self._invoices[key].status in wanted
            ]

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        async with self._lock:
            if invoice.id in self._invoices:
                raise StorageError(f"Invoice already exists: id={invoice.id}")
            self._invoices[invoice.id] = invoice
            return invoice

    async def update_invoice(self, invoice: Invoice) -> None:
        async with self._lock:
            if invoice.id not in self._invoices:
                raise StorageError(f"Invoice not found: id={invoice.id}")
            self._invoices[invoice.id] = invoice
            self.updates.append(invoice)

    async def reset(self) -> None:
        async with self._lock:
            self._invoices.clear()
            self.updates.clear()
