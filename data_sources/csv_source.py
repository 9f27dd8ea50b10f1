# CSV Row Source
# Parses an exported discrepancy CSV into the same flat row shape the
# warehouse query returns.

import csv
import io
from typing import Dict, List

from reconciliation.errors import InvalidQueryError
from utils.logger import logger

BOM = "\ufeff"


def parse_csv_text(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text into rows keyed by the header row.

    Quoted fields may contain commas, newlines and doubled quotes. Both
    line-ending styles are accepted. Short rows are padded with empty
    strings; rows with every cell blank are dropped. Text the csv module
    cannot tokenize raises InvalidQueryError.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]

    reader = csv.reader(io.StringIO(text, newline=""))
    rows = []
    try:
        header = next(reader, None)
        if not header:
            return []
        header = [name.strip() for name in header]

        for cells in reader:
            if not any(cell.strip() for cell in cells):
                continue
            padded = cells + [""] * (len(header) - len(cells))
            rows.append(dict(zip(header, padded)))
    except csv.Error as e:
        raise InvalidQueryError(f"Malformed CSV at line {reader.line_num}: {e}") from e

    logger.debug(f"   └─ parsed {len(rows)} CSV row(s), {len(header)} column(s)")
    return rows


def read_csv_file(path: str) -> List[Dict[str, str]]:
    """Read and parse a CSV export from disk."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return parse_csv_text(f.read())
