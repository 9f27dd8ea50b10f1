# Order Record Normalizer
# Converts database rows, parsed CSV rows or client-supplied order records
# into the canonical OrderRecord shape.

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from config import FLAG_TOLERANCE
from reconciliation.models import MATCH, OVERCHARGE, UNDERCHARGE, OrderRecord
from utils.logger import logger

UNKNOWN_CUSTOMER = "Unknown"

# Canonical field -> accepted input keys, display-style column first
FIELD_ALIASES = {
    "order_number": ("Order Number", "order_number", "orderNumber"),
    "customer": ("Organization Name", "customer"),
    "date": ("Origin Pickup Date", "date"),
    "transport_type": ("Transport Type", "transport_type", "transportType"),
    "service_type": ("Service Type", "service_type", "serviceType"),
    "carrier": ("Carrier Name", "carrier"),
    "lane": ("Lane (Origin -> Destination Province)", "lane"),
    "origin_country": ("Origin Country", "origin_country", "originCountry"),
    "dest_country": ("Destination Country", "dest_country", "destCountry"),
    "selling_price": ("Selling Price (CAD)", "selling_price", "sellingPrice"),
    "billed_price": ("Billed Selling Price (CAD)", "billed_price", "billedPrice"),
    "margin": ("Margin (CAD $)", "margin"),
    "margin_pct": ("Margin (%)", "margin_pct", "marginPct"),
}

TEXT_FIELDS = (
    "order_number", "transport_type", "service_type",
    "carrier", "lane", "origin_country", "dest_country",
)
AMOUNT_FIELDS = ("selling_price", "billed_price", "margin", "margin_pct")

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_amount(value: Any) -> float:
    """
    Parse a currency or percentage value, defaulting to 0.0.

    Text is read by its leading decimal number, so "12.50 CAD" gives 12.5
    while "", "n/a" and "$12" give 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def classify_flag(discrepancy: float) -> str:
    if discrepancy > FLAG_TOLERANCE:
        return OVERCHARGE
    if discrepancy < -FLAG_TOLERANCE:
        return UNDERCHARGE
    return MATCH


def _lookup(row: Mapping[str, Any], field: str) -> Any:
    for key in FIELD_ALIASES[field]:
        if key in row and row[key] is not None:
            return row[key]
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_customer(value: Any) -> str:
    # Names are matched exactly, so surrounding whitespace is kept
    name = "" if value is None else str(value)
    return name if name.strip() else UNKNOWN_CUSTOMER


def _as_date(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()[:10]
    return _as_text(value)[:10]


def is_blank_row(row: Mapping[str, Any]) -> bool:
    return all(_as_text(value) == "" for value in row.values())


def normalize_row(row: Mapping[str, Any]) -> OrderRecord:
    """Convert one raw row into an OrderRecord. Never raises on bad field values."""
    text = {name: _as_text(_lookup(row, name)) for name in TEXT_FIELDS}
    amounts = {name: parse_amount(_lookup(row, name)) for name in AMOUNT_FIELDS}

    discrepancy = round(amounts["billed_price"] - amounts["selling_price"], 2)

    return OrderRecord(
        order_number=text["order_number"],
        customer=_as_customer(_lookup(row, "customer")),
        date=_as_date(_lookup(row, "date")),
        transport_type=text["transport_type"],
        service_type=text["service_type"],
        carrier=text["carrier"],
        lane=text["lane"],
        origin_country=text["origin_country"],
        dest_country=text["dest_country"],
        selling_price=amounts["selling_price"],
        billed_price=amounts["billed_price"],
        discrepancy=discrepancy,
        margin=amounts["margin"],
        margin_pct=amounts["margin_pct"],
        flag=classify_flag(discrepancy),
    )


def normalize_rows(rows: Iterable[Mapping[str, Any]], source_label: Optional[str] = None) -> List[OrderRecord]:
    """Normalize a batch of rows, dropping rows where every field is empty."""
    records = []
    skipped = 0
    for row in rows:
        if not row or is_blank_row(row):
            skipped += 1
            continue
        records.append(normalize_row(row))

    if skipped:
        logger.debug(f"   └─ skipped {skipped} blank row(s) from {source_label or 'input'}")
    return records
