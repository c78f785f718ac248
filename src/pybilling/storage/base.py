"""
InvoiceStore - Abstract interface for invoice persistence backends.

Design Pattern: Adapter Pattern
InvoiceStore defines the target interface that all storage adapters implement.
Different storage backends (SQLite, Redis, Memory) adapt to this common interface.

Design Principle: Dependency Inversion (SOLID)
The billing core (InvoiceCharger, BillingScheduler) depends on this
abstraction, not on concrete storage implementations.

Each call is expected to be independently atomic. The billing core never
coordinates transactions across a batch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from pybilling.models import Invoice, InvoiceStatus


class StorageError(Exception):
    """
    Storage operation failed.

    Custom exception with context, not generic Exception.
    """

    pass


class InvoiceStore(ABC):
    """
    Abstract storage interface for invoices.

    All fetch operations return invoices ordered by id, so a billing pass
    charges invoices in a stable order.
    """

    # ========================================================================
    # Reads
    # ========================================================================

    @abstractmethod
    async def fetch_invoice(self, invoice_id: int) -> Invoice | None:
        """
        Retrieve one invoice.

        Args:
            invoice_id: Invoice identifier

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def fetch_invoices(self) -> list[Invoice]:
        """Retrieve all invoices."""
        pass

    @abstractmethod
    async def fetch_invoices_by_status(self, statuses: Iterable[InvoiceStatus]) -> list[Invoice]:
        """
        Retrieve all invoices whose status is one of ``statuses``.

        Args:
            statuses: Statuses to match

        Returns:
            Matching invoices (may be empty)
        """
        pass

    async def fetch_pending_invoices(self) -> list[Invoice]:
        """Retrieve all invoices currently in PENDING state."""
        return await self.fetch_invoices_by_status((InvoiceStatus.PENDING,))

    # ========================================================================
    # Writes
    # ========================================================================

    @abstractmethod
    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """
        Insert a new invoice.

        Raises:
            StorageError: If an invoice with the same id already exists
        """
        pass

    @abstractmethod
    async def update_invoice(self, invoice: Invoice) -> None:
        """
        Overwrite the stored invoice with the same id.

        Idempotent: writing the same invoice twice leaves the same state.

        Raises:
            StorageError: If no invoice with this id exists or the write fails
        """
        pass

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def reset(self) -> None:
        """Clear all data (for testing/demos)."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        pass
