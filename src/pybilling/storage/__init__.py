"""Storage backends for invoice persistence.

Provides multiple storage implementations behind a common interface:
    - InvoiceStore: Abstract interface
    - SqliteInvoiceStore: SQLite-backed storage
    - RedisInvoiceStore: Redis-backed shared storage
    - InMemoryInvoiceStore: In-memory storage for testing

Design: Adapter Pattern + Dependency Inversion (SOLID)
    All storage implementations adapt to the InvoiceStore interface.
    The billing core depends on the abstraction, not on concrete backends.
"""

from pybilling.storage.base import InvoiceStore, StorageError

# Lazy imports so optional backends (redis) are only imported when used


def __getattr__(name: str):
    """Lazy import storage implementations."""
    if name == "InMemoryInvoiceStore":
        from pybilling.storage.memory import InMemoryInvoiceStore

        return InMemoryInvoiceStore
    elif name == "RedisInvoiceStore":
        from pybilling.storage.redis import RedisInvoiceStore

        return RedisInvoiceStore
    elif name == "SqliteInvoiceStore":
        from pybilling.storage.sqlite import SqliteInvoiceStore

        return SqliteInvoiceStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "InvoiceStore",
    "StorageError",
    "SqliteInvoiceStore",
    "RedisInvoiceStore",
    "InMemoryInvoiceStore",
]
