"""SQLite-backed storage implementation for pybilling.

Design Pattern: Adapter Pattern
SqliteInvoiceStore adapts a SQLite database to the InvoiceStore interface.

Implementation details:
- aiosqlite for async operations
- WAL mode for concurrent reads
- Amounts stored as decimal TEXT to avoid float rounding
- Index on status for the pending-invoice query
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path

import aiosqlite

from pybilling.models import Currency, Invoice, InvoiceStatus, Money
from pybilling.storage.base import InvoiceStore, StorageError

_COLUMNS = "id, customer_id, amount_value, currency, status"


class SqliteInvoiceStore(InvoiceStore):
    """SQLite-backed durable storage.

    After __init__, the instance is not yet usable. Call connect() first.

    Usage:
        store = SqliteInvoiceStore("billing.db")
        await store.connect()
        try:
            pending = await store.fetch_pending_invoices()
        finally:
            await store.close()
    """

    def __init__(self, db_path: str):
        """Initialize storage (connection not opened yet).

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()  # Serialize writes on the shared connection

    @classmethod
    async def in_memory(cls) -> SqliteInvoiceStore:
        """
        Create an in-memory SQLite store for testing.

        Returns:
            Connected in-memory store instance

        Example:
            store = await SqliteInvoiceStore.in_memory()
        """
        instance = cls(":memory:")
        await instance.connect()
        return instance

    def __repr__(self) -> str:
        """Return string representation of storage instance."""
        if self.db_path == ":memory:":
            return "SqliteInvoiceStore(in-memory)"
        return f"SqliteInvoiceStore({self.db_path})"

    async def connect(self) -> None:
        """Open database connection and initialize schema.

        Fixed initialization sequence:
        1. Open connection
        2. Enable WAL mode
        3. Create tables and indexes
        """
        if self._connection is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(
            self.db_path,
            timeout=5.0,
            isolation_level=None,  # Autocommit: every update is its own transaction
        )

        # In-memory databases return "memory" and don't support WAL
        cursor = await self._connection.execute("PRAGMA journal_mode=WAL")
        result = await cursor.fetchone()
        await cursor.close()

        if result:
            mode = result[0].upper()
            if mode not in ("WAL", "MEMORY"):
                raise StorageError(f"Failed to enable WAL mode, got: {result[0]}")

        await self._connection.execute("PRAGMA synchronous=NORMAL")
        await self._connection.execute("PRAGMA busy_timeout=5000")

        await self._create_schema()
        await self._connection.commit()

    async def _create_schema(self) -> None:
        """Create the invoices table and its status index."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS invoices (
                id INTEGER PRIMARY KEY,
                customer_id INTEGER NOT NULL,
                amount_value TEXT NOT NULL,
                currency TEXT NOT NULL,
                status TEXT CHECK( status IN (
                    'PENDING','PAID','CUSTOMER_NOT_FOUND','CURRENCY_MISMATCH',
                    'NETWORK_EXCEPTION','INSUFFICIENT_BALANCE'
                ) ) NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_invoices_status
            ON invoices(status, id)
        """)

    async def fetch_invoice(self, invoice_id: int) -> Invoice | None:
        self._check_connected()

        cursor = await self._connection.execute(
            f"SELECT {_COLUMNS} FROM invoices WHERE id = ?",
            (invoice_id,),
        )
        row = await cursor.fetchone()
        await cursor.close()

        if row is None:
            return None
        return self._row_to_invoice(row)

    async def fetch_invoices(self) -> list[Invoice]:
        self._check_connected()

        cursor = await self._connection.execute(f"SELECT {_COLUMNS} FROM invoices ORDER BY id")
        rows = await cursor.fetchall()
        await cursor.close()

        return [self._row_to_invoice(row) for row in rows]

    async def fetch_invoices_by_status(self, statuses: Iterable[InvoiceStatus]) -> list[Invoice]:
        self._check_connected()

        values = [status.value for status in statuses]
        if not values:
            return []

        placeholders = ",".join("?" for _ in values)
        cursor = await self._connection.execute(
            f"SELECT {_COLUMNS} FROM invoices WHERE status IN ({placeholders}) ORDER BY id",
            values,
        )
        rows = await cursor.fetchall()
        await cursor.close()

        return [self._row_to_invoice(row) for row in rows]

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        self._check_connected()

        async with self._lock:
            try:
                await self._connection.execute(
                    f"INSERT INTO invoices ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                    (
                        invoice.id,
                        invoice.customer_id,
                        str(invoice.amount.value),
                        invoice.amount.currency.value,
                        invoice.status.value,
                    ),
                )
            except aiosqlite.IntegrityError as e:
                raise StorageError(f"Invoice already exists: id={invoice.id}") from e

        return invoice

    async def update_invoice(self, invoice: Invoice) -> None:
        self._check_connected()

        async with self._lock:
            cursor = await self._connection.execute(
                """
                UPDATE invoices
                SET customer_id = ?,
                    amount_value = ?,
                    currency = ?,
                    status = ?
                WHERE id = ?
            """,
                (
                    invoice.customer_id,
                    str(invoice.amount.value),
                    invoice.amount.currency.value,
                    invoice.status.value,
                    invoice.id,
                ),
            )
            updated = cursor.rowcount
            await cursor.close()

        if updated == 0:
            raise StorageError(f"Invoice not found: id={invoice.id}")

    async def reset(self) -> None:
        """Clear all data (for testing/demos)."""
        self._check_connected()

        await self._connection.execute("DELETE FROM invoices")
        await self._connection.commit()

    async def close(self) -> None:
        """Close storage connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    def _check_connected(self) -> None:
        """Guard clause: Ensure connection is open."""
        if self._connection is None:
            raise StorageError("Not connected. Call connect() first.")

    @staticmethod
    def _row_to_invoice(row: tuple) -> Invoice:
        """Convert database row to Invoice.

        Row format (matches _COLUMNS):
        0:id, 1:customer_id, 2:amount_value, 3:currency, 4:status
        """
        return Invoice(
            id=row[0],
            customer_id=row[1],
            amount=Money(value=Decimal(row[2]), currency=Currency(row[3])),
            status=InvoiceStatus(row[4]),
        )
