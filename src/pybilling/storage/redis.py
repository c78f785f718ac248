"""Redis-based invoice store implementation.

Provides a Redis backend so billing hosts on separate machines can share
invoice state.

Data Structures:
- pybilling:invoice:{id} (HASH): Invoice fields
- pybilling:invoices (ZSET): All invoice ids (score = id)
- pybilling:status:{STATUS} (ZSET): Invoice ids per status (score = id)

Key Features:
- Atomic operations: One Lua script checks existence and writes the invoice
  and its status index together
- Ordered reads: ZSET scores keep invoices sorted by id

Design: Adapter Pattern
Implements InvoiceStore for Redis, adapting the key-value store to the
InvoiceStore interface.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

try:
    import redis.asyncio as redis
except ImportError:
    raise ImportError("redis-py is required for RedisInvoiceStore. Install with: pip install redis")

from pybilling.models import Currency, Invoice, InvoiceStatus, Money
from pybilling.storage.base import InvoiceStore, StorageError

_INDEX_KEY = "pybilling:invoices"


class RedisInvoiceStore(InvoiceStore):
    """Redis invoice store using connection pooling.

    Usage:
        store = RedisInvoiceStore("redis://localhost:6379")
        await store.connect()

        pending = await store.fetch_pending_invoices()
    """

    def __init__(self, redis_url: str = "redis://localhost:6379", max_connections: int = 16):
        """Initialize Redis invoice store.

        Default redis_url works for local development.

        Args:
            redis_url: Redis connection URL
            max_connections: Maximum pool size
        """
        self._redis_url = redis_url
        self._max_connections = max_connections
        self._redis: redis.Redis | None = None

    def __repr__(self) -> str:
        return f"RedisInvoiceStore({self._redis_url})"

    async def connect(self) -> None:
        """Establish Redis connection pool."""
        self._redis = redis.from_url(
            self._redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=self._max_connections,
        )

    async def close(self) -> None:
        """Close Redis connection pool."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    def _check_connected(self) -> None:
        """Ensure connection established.

        Raises immediately if not connected.
        """
        if self._redis is None:
            raise StorageError("Not connected. Call connect() first.")

    @staticmethod
    def _invoice_key(invoice_id: int) -> str:
        """Build Redis key for invoice fields."""
        return f"pybilling:invoice:{invoice_id}"

    @staticmethod
    def _status_key(status: InvoiceStatus) -> str:
        """Build Redis key for a status index."""
        return f"pybilling:status:{status.value}"

    async def fetch_invoice(self, invoice_id: int) -> Invoice | None:
        self._check_connected()

        data = await self._redis.hgetall(self._invoice_key(invoice_id))
        if not data:
            return None
        return self._parse_invoice(data)

    async def fetch_invoices(self) -> list[Invoice]:
        self._check_connected()

        ids = await self._redis.zrange(_INDEX_KEY, 0, -1)
        return await self._fetch_many(ids)

    async def fetch_invoices_by_status(self, statuses: Iterable[InvoiceStatus]) -> list[Invoice]:
        self._check_connected()

        ids: set[int] = set()
        for status in statuses:
            members = await self._redis.zrange(self._status_key(status), 0, -1)
            ids.update(int(member) for member in members)

        return await self._fetch_many(sorted(ids))

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        self._check_connected()

        if not await self._write(invoice, mode="create"):
            raise StorageError(f"Invoice already exists: id={invoice.id}")
        return invoice

    async def update_invoice(self, invoice: Invoice) -> None:
        self._check_connected()

        if not await self._write(invoice, mode="update"):
            raise StorageError(f"Invoice not found: id={invoice.id}")
    async def reset(self) -> None:
        """Delete all pybilling:* keys, leaving other Redis data alone."""
        self._check_connected()

        keys = []
        async for key in self._redis.scan_iter(match="pybilling:*"):
            keys.append(key)

        if keys:
            await self._redis.delete(*keys)

    async def _write(self, invoice: Invoice, mode: str) -> bool:
        """Atomically store invoice fields and move its id to the right status index.

        Uses Lua script so the existence check and the write cannot be
        interleaved with another client's delete or create.

        Args:
            invoice: Invoice to write
            mode: "create" (key must be absent) or "update" (key must exist)

        Returns:
            True if written, False if the existence check failed
        """
        script = """
        local invoice_key = KEYS[1]
        local index_key = KEYS[2]
        local status_key = KEYS[3]
        local mode = ARGV[1]
        local id = ARGV[2]

        local exists = redis.call('EXISTS', invoice_key)
        if (mode == 'create' and exists == 1) or (mode == 'update' and exists == 0) then
            return 0
        end

        redis.call('HSET', invoice_key,
            'id', id,
            'customer_id', ARGV[3],
            'amount_value', ARGV[4],
            'currency', ARGV[5],
            'status', ARGV[6])

        for i = 4, #KEYS do
            redis.call('ZREM', KEYS[i], id)
        end
        redis.call('ZADD', status_key, id, id)
        redis.call('ZADD', index_key, id, id)
        return 1
        """

        other_status_keys = [
            self._status_key(status) for status in InvoiceStatus if status != invoice.status
        ]

        written = await self._redis.eval(
            script,
            3 + len(other_status_keys),
            self._invoice_key(invoice.id),
            _INDEX_KEY,
            self._status_key(invoice.status),
            *other_status_keys,
            mode,
            invoice.id,
            invoice.customer_id,
            str(invoice.amount.value),
            invoice.amount.currency.value,
            invoice.status.value,
        )
        return written == 1
    async def _fetch_many(self, ids: Iterable) -> list[Invoice]:
        invoices = []
        for invoice_id in ids:
            invoice = await self.fetch_invoice(int(invoice_id))
            if invoice is not None:
                invoices.append(invoice)
        return invoices

    @staticmethod
    def _parse_invoice(data: dict) -> Invoice:
        """Parse invoice from Redis HASH data.

        Raises:
            StorageError: If a field is missing or malformed
        """
        try:
            return Invoice(
                id=int(data["id"]),
                customer_id=int(data["customer_id"]),
                amount=Money(
                    value=Decimal(data["amount_value"]),
                    currency=Currency(data["currency"]),
                ),
                status=InvoiceStatus(data["status"]),
            )
        except (KeyError, ValueError) as e:
            raise StorageError(f"Malformed invoice hash: {e}") from e
