"""Scheduler state and billing run records.

ScheduleState is the single piece of mutable state a BillingScheduler owns.
BillingRun is the immutable record a firing leaves behind.
"""

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from pybilling.models.invoice import Invoice
from pybilling.models.status import InvoiceStatus, ScheduleStatus

__all__ = ["BillingHandle", "ScheduleState", "BillingRun"]


@dataclass(eq=False)
class BillingHandle:
    """Handle to one armed deferred execution.

    Compared by identity: a firing only touches scheduler state while its
    own handle is still the current one.
    """

    run_id: str
    """Identifier of the billing run this execution will produce (uuid7)."""

    fire_at: datetime
    """Instant the execution fires (aware, UTC)."""

    task: asyncio.Task
    """Task sleeping until fire_at and then running the billing pass."""

    def __repr__(self) -> str:
        """Readable representation for debugging."""
        return f"BillingHandle(run_id={self.run_id!r}, fire_at={self.fire_at.isoformat()})"


@dataclass(frozen=True)
class ScheduleState:
    """Snapshot of the scheduler's armed/idle state.

    Immutable: transitions replace the whole snapshot under the scheduler
    lock, so a reader never sees a status without its matching handle.
    """

    status: ScheduleStatus = ScheduleStatus.IDLE
    handle: BillingHandle | None = None

    def __post_init__(self):
        """Validate invariants after creation."""
        if self.status.is_scheduled and self.handle is None:
            raise ValueError(f"handle must be set when status is {self.status}")

        if not self.status.is_scheduled and self.handle is not None:
            raise ValueError("handle must be None when status is IDLE")

    @property
    def is_scheduled(self) -> bool:
        """True while an execution is armed or its pass is running."""
        return self.status.is_scheduled

    @classmethod
    def idle(cls) -> "ScheduleState":
        return cls()

    @classmethod
    def armed(cls, handle: BillingHandle) -> "ScheduleState":
        return cls(status=ScheduleStatus.ARMED, handle=handle)

    def firing(self) -> "ScheduleState":
        """Return the FIRING state for the same handle."""
        return ScheduleState(status=ScheduleStatus.FIRING, handle=self.handle)


@dataclass(frozen=True)
class BillingRun:
    """Record of one completed billing pass."""

    run_id: str
    started_at: datetime
    finished_at: datetime
    invoices: tuple[Invoice, ...] = field(default_factory=tuple)
    """Resulting invoices, in the order they were charged."""

    def summary(self) -> dict[InvoiceStatus, int]:
        """Count resulting invoices per status."""
        return dict(Counter(invoice.status for invoice in self.invoices))

    @property
    def processed(self) -> int:
        return len(self.invoices)

    def __repr__(self) -> str:
        """Readable representation for debugging."""
        return (
            f"BillingRun(run_id={self.run_id!r}, processed={self.processed}, "
            f"started_at={self.started_at.isoformat()})"
        )
