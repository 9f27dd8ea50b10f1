# Date-Range Filter
# ISO dates sort lexicographically, so string comparison on the first ten
# characters is an inclusive calendar comparison.

from typing import Optional


def filter_by_date_range(records, start: Optional[str] = None, end: Optional[str] = None):
    """
    Keep records whose date falls within [start, end].

    Records with no date always pass. With neither bound the input is
    returned as-is.
    """
    if not start and not end:
        return records

    kept = []
    for record in records:
        day = (record.get("date") or "")[:10]
        if not day:
            kept.append(record)
            continue
        if start and day < start:
            continue
        if end and day > end:
            continue
        kept.append(record)
    return kept
