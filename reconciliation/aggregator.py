# Customer Aggregator
# Groups order records by customer and classifies discrepancy severity.
# Pure functions: no I/O, no shared state.

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from config import SEVERITY_RED_THRESHOLD, SEVERITY_YELLOW_THRESHOLD
from reconciliation.models import (
    GREEN, MATCH, OVERCHARGE, RED, UNDERCHARGE, YELLOW,
    CustomerStat, OrderRecord,
)
from reconciliation.normalizer import UNKNOWN_CUSTOMER, parse_amount

SEVERITIES = (RED, YELLOW, GREEN)


def classify_severity(total_discrepancy: float) -> str:
    magnitude = abs(total_discrepancy)
    if magnitude < SEVERITY_YELLOW_THRESHOLD:
        return GREEN
    if magnitude < SEVERITY_RED_THRESHOLD:
        return YELLOW
    return RED


def discrepancy_rate(total_discrepancy: float, total_selling: float) -> float:
    if total_selling > 0:
        return total_discrepancy / total_selling * 100
    return 0.0


def _sort_by_magnitude(stats: List[CustomerStat]) -> List[CustomerStat]:
    # sorted() is stable, so ties keep first-appearance order
    return sorted(stats, key=lambda s: abs(s["total_discrepancy"]), reverse=True)


def compute_customer_stats(records: Iterable[OrderRecord]) -> List[CustomerStat]:
    """
    Aggregate order records into one CustomerStat per distinct customer.

    Per-order discrepancies are summed unrounded and the total is rounded
    once at the end. The result is sorted by absolute total discrepancy,
    largest first.
    """
    totals: Dict[str, Dict[str, Any]] = {}

    for record in records:
        customer = record["customer"] or UNKNOWN_CUSTOMER
        entry = totals.get(customer)
        if entry is None:
            entry = totals[customer] = {
                "orders": 0,
                "total_selling": 0.0,
                "total_billed": 0.0,
                "total_discrepancy": 0.0,
                OVERCHARGE: 0,
                UNDERCHARGE: 0,
                MATCH: 0,
            }
        selling = record["selling_price"]
        billed = record["billed_price"]
        entry["orders"] += 1
        entry["total_selling"] += selling
        entry["total_billed"] += billed
        entry["total_discrepancy"] += billed - selling
        entry[record["flag"]] += 1

    stats = []
    for customer, entry in totals.items():
        raw_total = entry["total_discrepancy"]
        total = round(raw_total, 2)
        stats.append(CustomerStat(
            customer=customer,
            orders=entry["orders"],
            total_selling=entry["total_selling"],
            total_billed=entry["total_billed"],
            total_discrepancy=total,
            overcharges=entry[OVERCHARGE],
            undercharges=entry[UNDERCHARGE],
            matches=entry[MATCH],
            discrepancy_rate=discrepancy_rate(raw_total, entry["total_selling"]),
            severity=classify_severity(total),
        ))

    return _sort_by_magnitude(stats)


def normalize_customer_stats(stats: Iterable[Mapping[str, Any]]) -> List[CustomerStat]:
    """
    Coerce client-supplied aggregates into CustomerStat rows.

    Numbers are parsed the same way order amounts are, severity is derived
    from the total so the tiers stay consistent, and the list is re-sorted.
    """
    def pick(row: Mapping[str, Any], *keys: str) -> Any:
        for key in keys:
            if row.get(key) is not None:
                return row[key]
        return None

    coerced = []
    for row in stats:
        total = round(parse_amount(pick(row, "total_discrepancy", "totalDiscrepancy")), 2)
        selling = parse_amount(pick(row, "total_selling", "totalSelling"))
        coerced.append(CustomerStat(
            customer=str(row.get("customer") or UNKNOWN_CUSTOMER),
            orders=int(parse_amount(row.get("orders"))),
            total_selling=selling,
            total_billed=parse_amount(pick(row, "total_billed", "totalBilled")),
            total_discrepancy=total,
            overcharges=int(parse_amount(row.get("overcharges"))),
            undercharges=int(parse_amount(row.get("undercharges"))),
            matches=int(parse_amount(row.get("matches"))),
            discrepancy_rate=discrepancy_rate(total, selling),
            severity=classify_severity(total),
        ))
    return _sort_by_magnitude(coerced)


def count_by_severity(stats: Iterable[CustomerStat]) -> Dict[str, int]:
    counts = {severity: 0 for severity in SEVERITIES}
    for stat in stats:
        counts[stat["severity"]] += 1
    return counts


def critical_customers(stats: Iterable[CustomerStat]) -> List[CustomerStat]:
    return [stat for stat in stats if stat["severity"] == RED]


def summarize(order_count: int, stats: Sequence[CustomerStat]) -> Dict[str, Any]:
    """Global totals over a set of customer aggregates."""
    net = sum(stat["total_discrepancy"] for stat in stats)
    total_selling = sum(stat["total_selling"] for stat in stats)
    return {
        "total_customers": len(stats),
        "total_orders": order_count,
        "total_discrepancy": round(net, 2),
        "total_overcharges": sum(stat["overcharges"] for stat in stats),
        "total_undercharges": sum(stat["undercharges"] for stat in stats),
        "avg_discrepancy_rate": round(net / total_selling * 100, 2) if total_selling > 0 else 0,
        "critical_count": len(critical_customers(stats)),
        "severity_counts": count_by_severity(stats),
    }
