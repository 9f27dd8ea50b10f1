# Snapshot Cache & Alert State Machine
# Owns the in-memory dataset and the critical-customer count seen by the
# previous load. Loads and clears run one at a time and publish under a short
# lock; readers take an immutable view and never wait on a load in progress.

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple, Union

from config import ALERT_TOP_CUSTOMERS, CURRENCY, SEVERITY_RED_THRESHOLD
from reconciliation.aggregator import compute_customer_stats, critical_customers, normalize_customer_stats
from reconciliation.models import CustomerStat, LoadResult, OrderRecord, PreAggregated, RawRows
from reconciliation.normalizer import normalize_rows

EMPTY = "EMPTY"
LOADED = "LOADED"


@dataclass(frozen=True)
class SnapshotView:
    """An immutable, internally consistent picture of the loaded data."""

    records: Tuple[OrderRecord, ...] = ()
    # Aggregates over the full record set, or as supplied by a pre-aggregated upload
    customer_stats: Tuple[CustomerStat, ...] = ()
    total_rows: int = 0
    source: Optional[str] = None
    loaded_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.total_rows == 0 and not self.records and not self.customer_stats


@dataclass(frozen=True)
class CriticalAlert:
    """Owner notification for an increase in red-severity customers."""

    title: str
    content: str
    critical_count: int
    previous_count: int
    customers: Tuple[CustomerStat, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LoadOutcome:
    result: LoadResult
    alert: Optional[CriticalAlert] = None


def build_critical_alert(
    critical: List[CustomerStat],
    previous_count: int,
    source: str,
    loaded_at: datetime,
) -> CriticalAlert:
    """Format the alert for the top red customers (already sorted by magnitude)."""
    count = len(critical)
    top = critical[:ALERT_TOP_CUSTOMERS]
    noun = "Discrepancy" if count == 1 else "Discrepancies"
    lines = "\n".join(
        f"• {c['customer']}: ${c['total_discrepancy']:.2f} {CURRENCY} ({c['orders']} orders)"
        for c in top
    )
    content = (
        f"The latest load ({source}) found {count} customer(s) with critical billing "
        f"discrepancies (>${SEVERITY_RED_THRESHOLD:.0f} {CURRENCY}), up from {previous_count}.\n\n"
        f"Top offenders:\n{lines}\n\n"
        f"Loaded at: {loaded_at.isoformat()}"
    )
    return CriticalAlert(
        title=f"⚠ {count} Critical Billing {noun} Detected",
        content=content,
        critical_count=count,
        previous_count=previous_count,
        customers=tuple(top),
    )


class Snapshot:
    """
    Process-wide cached dataset with an explicit lifecycle.

    EMPTY --load--> LOADED --load--> LOADED --clear--> EMPTY
    """

    def __init__(self):
        self._lock = threading.Lock()
        # Held for a whole load or clear, so they apply in arrival order
        self._load_lock = threading.Lock()
        self._view = SnapshotView()
        self._last_critical_count = 0
        self._generation = 0

    @property
    def state(self) -> str:
        return EMPTY if self.view().is_empty else LOADED

    @property
    def last_critical_count(self) -> int:
        with self._lock:
            return self._last_critical_count

    @property
    def generation(self) -> int:
        """Number of loads and clears applied since construction."""
        with self._lock:
            return self._generation

    def view(self) -> SnapshotView:
        with self._lock:
            return self._view

    def load(self, payload: Union[RawRows, PreAggregated], source_label: str) -> LoadOutcome:
        """
        Replace the dataset wholesale and decide whether to alert.

        The alert fires only when the red-customer count rises above the
        count stored by the previous load; the stored count is always
        overwritten, so decreases pass silently.
        """
        with self._load_lock:
            view, stats = self._build_view(payload, source_label)
            critical = critical_customers(stats)

            with self._lock:
                previous = self._last_critical_count
                should_alert = len(critical) > previous
                self._view = view
                self._last_critical_count = len(critical)
                self._generation += 1

        alert = None
        if should_alert:
            alert = build_critical_alert(critical, previous, source_label, view.loaded_at)

        result = LoadResult(
            success=True,
            rows=view.total_rows,
            customers=len(stats),
            loaded_at=view.loaded_at.isoformat(),
            source=source_label,
            alert_sent=False,
        )
        return LoadOutcome(result=result, alert=alert)

    def clear(self) -> None:
        """Drop the dataset and re-arm the alert trigger."""
        with self._load_lock, self._lock:
            self._view = SnapshotView()
            self._last_critical_count = 0
            self._generation += 1

    def _build_view(self, payload, source_label: str):
        loaded_at = datetime.now(timezone.utc)

        if isinstance(payload, PreAggregated):
            records = tuple(normalize_rows(payload.orders, source_label))
            stats = normalize_customer_stats(payload.stats)
            total_rows = payload.total_rows if payload.total_rows is not None else len(records)
            view = SnapshotView(
                records=records,
                customer_stats=tuple(stats),
                total_rows=total_rows,
                source=source_label,
                loaded_at=loaded_at,
            )
            return view, stats

        if isinstance(payload, RawRows):
            records = tuple(normalize_rows(payload.rows, source_label))
            stats = compute_customer_stats(records)
            view = SnapshotView(
                records=records,
                customer_stats=tuple(stats),
                total_rows=len(records),
                source=source_label,
                loaded_at=loaded_at,
            )
            return view, stats

        raise TypeError(f"Unsupported load payload: {type(payload).__name__}")
