# Graph State Definition
# Defines the TypedDict for the shared state across all nodes in the ingest graph

from typing import Any, Optional, TypedDict, Union

from reconciliation.models import LoadResult, PreAggregated, RawRows


class IngestState(TypedDict):
    """Shared state across all nodes in the snapshot ingest graph."""

    # Input: a payload to load, or None to pull from the row source
    payload: Optional[Union[RawRows, PreAggregated]]
    source_label: str

    # Load output
    load_result: Optional[LoadResult]
    alert: Optional[Any]  # cache.snapshot.CriticalAlert
    alert_sent: bool

    # Error handling
    error: Optional[str]


def initial_ingest_state(payload, source_label: str) -> IngestState:
    return {
        "payload": payload,
        "source_label": source_label,
        "load_result": None,
        "alert": None,
        "alert_sent": False,
        "error": None,
    }
