# Reconciliation Models
# Canonical order records, per-customer aggregates and load payloads

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, TypedDict

from reconciliation.errors import InvalidQueryError


# Order flags
OVERCHARGE = "overcharge"
UNDERCHARGE = "undercharge"
MATCH = "match"

# Severity tiers
GREEN = "green"
YELLOW = "yellow"
RED = "red"


class OrderRecord(TypedDict):
    """One order after normalization. Amounts are in CAD."""

    order_number: str
    customer: str
    date: str
    transport_type: str
    service_type: str
    carrier: str
    lane: str
    origin_country: str
    dest_country: str
    selling_price: float
    billed_price: float
    discrepancy: float
    margin: float
    margin_pct: float
    flag: str


class CustomerStat(TypedDict):
    """Aggregated discrepancy statistics for one customer."""

    customer: str
    orders: int
    total_selling: float
    total_billed: float
    total_discrepancy: float
    overcharges: int
    undercharges: int
    matches: int
    discrepancy_rate: float
    severity: str


class StatsSummary(TypedDict):
    total_customers: int
    total_orders: int
    total_discrepancy: float
    total_overcharges: int
    total_undercharges: int
    avg_discrepancy_rate: float
    critical_count: int
    last_fetched: Optional[str]
    source: Optional[str]
    has_data: bool


class LoadResult(TypedDict):
    success: bool
    rows: int
    customers: int
    loaded_at: str
    source: str
    alert_sent: bool


@dataclass(frozen=True)
class RawRows:
    """Flat rows from the database or a parsed CSV, keyed by display-style column names."""

    rows: Sequence[Mapping[str, Any]]


@dataclass(frozen=True)
class PreAggregated:
    """Client-side aggregated upload: customer stats, flat orders and the original row count."""

    stats: Sequence[Mapping[str, Any]]
    orders: Sequence[Mapping[str, Any]] = field(default_factory=list)
    total_rows: Optional[int] = None


_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class DateRange(NamedTuple):
    """Inclusive ``YYYY-MM-DD`` bounds; ``None`` leaves a side open."""

    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return not self.start and not self.end

    def describe(self) -> str:
        if self.is_open:
            return "all loaded data"
        return f"{self.start or 'start'} to {self.end or 'today'}"


def _check_bound(name: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidQueryError(f"'{name}' must be a YYYY-MM-DD string")
    value = value.strip()
    if not value:
        return None
    if not _ISO_DATE.match(value):
        raise InvalidQueryError(f"'{name}' must be a YYYY-MM-DD date, got {value!r}")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError as e:
        raise InvalidQueryError(f"'{name}' is not a valid date: {value!r}") from e
    return value


def parse_date_range(value: Any = None) -> DateRange:
    """
    Build a DateRange from a caller-supplied value.

    Accepts None, a DateRange, or a mapping with optional ``from``/``to``
    (``start``/``end`` are accepted as aliases).
    """
    if value is None:
        return DateRange()
    if isinstance(value, DateRange):
        start, end = value
    elif isinstance(value, Mapping):
        start = value.get("from", value.get("start"))
        end = value.get("to", value.get("end"))
    else:
        raise InvalidQueryError("date range must be a mapping with 'from'/'to' keys")
    return DateRange(_check_bound("from", start), _check_bound("to", end))


def as_dicts(items: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Shallow-copy records so callers never hold references into the snapshot."""
    return [dict(item) for item in items]
