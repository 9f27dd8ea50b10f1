# Data Sources Module
# Producers of flat discrepancy rows: the warehouse query and CSV exports

from data_sources.csv_source import parse_csv_text, read_csv_file
from data_sources.postgres_source import PostgresRowSource, create_row_source

__all__ = [
    "parse_csv_text",
    "read_csv_file",
    "PostgresRowSource",
    "create_row_source",
]
