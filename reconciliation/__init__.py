# Reconciliation core: normalization, aggregation and date filtering

from reconciliation.aggregator import classify_severity, compute_customer_stats, summarize
from reconciliation.date_filter import filter_by_date_range
from reconciliation.errors import DiscrepancyError, InvalidQueryError, SourceUnavailableError
from reconciliation.models import DateRange, PreAggregated, RawRows, parse_date_range
from reconciliation.normalizer import classify_flag, normalize_row, normalize_rows

__all__ = [
    "classify_flag",
    "classify_severity",
    "compute_customer_stats",
    "summarize",
    "filter_by_date_range",
    "normalize_row",
    "normalize_rows",
    "DateRange",
    "PreAggregated",
    "RawRows",
    "parse_date_range",
    "DiscrepancyError",
    "InvalidQueryError",
    "SourceUnavailableError",
]
