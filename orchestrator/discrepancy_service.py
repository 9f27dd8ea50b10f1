# DiscrepancyService
# Query façade over the snapshot: stats, customers, order drill-down,
# loads, clearing and the billing assistant.
# Every load converges on one ingest graph; every query works on one
# immutable snapshot view.

import threading
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence

from agents.assistant_agent import AssistantAgent, build_assistant_context
from cache.snapshot import Snapshot, SnapshotView
from config import CHAT_MESSAGE_MAX_LENGTH, DATABASE_SOURCE_LABEL, UPLOAD_SOURCE_LABEL
from data_sources.csv_source import parse_csv_text
from graph.state import initial_ingest_state
from graph.workflow import compile_workflow
from notifications.notifier import create_notifier
from reconciliation.aggregator import compute_customer_stats, summarize
from reconciliation.date_filter import filter_by_date_range
from reconciliation.errors import InvalidQueryError, SourceUnavailableError
from reconciliation.models import (
    CustomerStat, DateRange, LoadResult, OrderRecord, PreAggregated, RawRows,
    StatsSummary, as_dicts, parse_date_range,
)
from utils.logger import logger


class _Selection(NamedTuple):
    view: SnapshotView
    date_range: DateRange
    records: Sequence[OrderRecord]
    stats: List[CustomerStat]
    order_count: int


class DiscrepancyService:
    """
    Stateless read operations plus load/clear over a single owned Snapshot.
    """

    def __init__(self, snapshot: Snapshot = None, source=None, notifier=None, assistant: AssistantAgent = None):
        self.snapshot = snapshot or Snapshot()
        self.source = source
        self.notifier = notifier if notifier is not None else create_notifier()
        self.assistant = assistant or AssistantAgent()
        self.workflow = compile_workflow(self.snapshot, self.source, self.notifier)
        self._warmup_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_stats(self, date_range: Any = None) -> StatsSummary:
        """Global KPIs; ``has_data`` reflects the unfiltered snapshot."""
        sel = self._select(date_range)
        totals = summarize(sel.order_count, sel.stats)
        loaded_at = sel.view.loaded_at
        return StatsSummary(
            total_customers=totals["total_customers"],
            total_orders=totals["total_orders"],
            total_discrepancy=totals["total_discrepancy"],
            total_overcharges=totals["total_overcharges"],
            total_undercharges=totals["total_undercharges"],
            avg_discrepancy_rate=totals["avg_discrepancy_rate"],
            critical_count=totals["critical_count"],
            last_fetched=loaded_at.isoformat() if loaded_at else None,
            source=sel.view.source,
            has_data=not sel.view.is_empty,
        )

    def get_customers(self, date_range: Any = None) -> List[CustomerStat]:
        """Per-customer aggregates, largest absolute discrepancy first."""
        return as_dicts(self._select(date_range).stats)

    def get_orders_by_customer(self, customer: str, date_range: Any = None) -> List[OrderRecord]:
        """Orders for one customer (exact name), largest absolute discrepancy first."""
        if not isinstance(customer, str) or not customer.strip():
            raise InvalidQueryError("customer is required")
        sel = self._select(date_range)
        orders = [r for r in sel.records if r["customer"] == customer]
        orders.sort(key=lambda r: abs(r["discrepancy"]), reverse=True)
        return as_dicts(orders)

    def build_assistant_context(self, message: str, date_range: Any = None) -> List[Dict[str, str]]:
        """
        Build the ordered turns for the assistant: the data context as a
        system turn followed by the user's message.
        """
        message = self._check_message(message)
        sel = self._select(date_range)
        context = build_assistant_context(sel.order_count, sel.stats, sel.date_range)
        return [
            {"role": "system", "content": context},
            {"role": "user", "content": message},
        ]

    def chat(self, message: str, date_range: Any = None) -> Dict[str, str]:
        # Context is fully captured before the outbound LLM call
        turns = self.build_assistant_context(message, date_range)
        return {"answer": self.assistant.answer(turns)}

    # ------------------------------------------------------------------
    # Loads
    # ------------------------------------------------------------------

    def load_snapshot(self, payload, source_label: str) -> LoadResult:
        """Single load entry point for raw rows and pre-aggregated uploads."""
        if not isinstance(payload, (RawRows, PreAggregated)):
            raise InvalidQueryError(f"Unsupported load payload: {type(payload).__name__}")
        return self._run_ingest(payload, source_label)

    def upload_data(self, data: Any, source_label: Optional[str] = None) -> LoadResult:
        """
        Load client-supplied data.

        Accepts a list of raw rows, CSV text (a string, or a mapping with
        ``csv_text`` and optional ``filename``), a pre-aggregated mapping with
        ``stats``/``orders``/``total_rows``, or a RawRows/PreAggregated payload.
        """
        payload, default_label = self._to_payload(data)
        return self.load_snapshot(payload, source_label or default_label)

    def refresh(self) -> LoadResult:
        """Re-pull from the row source. Raises SourceUnavailableError on failure."""
        return self._run_ingest(None, DATABASE_SOURCE_LABEL)

    def clear_data(self) -> Dict[str, bool]:
        self.snapshot.clear()
        logger.info("Snapshot cleared")
        return {"success": True}

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run_ingest(self, payload, source_label: str) -> LoadResult:
        final_state = self.workflow.invoke(initial_ingest_state(payload, source_label))
        if final_state.get("error"):
            raise SourceUnavailableError(final_state["error"])
        result = dict(final_state["load_result"])
        result["alert_sent"] = final_state.get("alert_sent", False)
        return result

    def _ensure_loaded(self):
        """Pull once on first use when backed by a row source."""
        if self.source is None or self.snapshot.generation > 0:
            return
        with self._warmup_lock:
            if self.snapshot.generation > 0:
                return
            try:
                self.refresh()
            except SourceUnavailableError:
                logger.warning("Initial refresh failed; serving empty snapshot")

    def _select(self, date_range: Any) -> _Selection:
        rng = parse_date_range(date_range)
        self._ensure_loaded()
        view = self.snapshot.view()
        if rng.is_open:
            return _Selection(view, rng, view.records, list(view.customer_stats), view.total_rows)
        records = filter_by_date_range(view.records, rng.start, rng.end)
        return _Selection(view, rng, records, compute_customer_stats(records), len(records))

    def _check_message(self, message: Any) -> str:
        if not isinstance(message, str) or not message.strip():
            raise InvalidQueryError("message is required")
        message = message.strip()
        if len(message) > CHAT_MESSAGE_MAX_LENGTH:
            raise InvalidQueryError(f"message exceeds {CHAT_MESSAGE_MAX_LENGTH} characters")
        return message

    def _to_payload(self, data: Any):
        if isinstance(data, (RawRows, PreAggregated)):
            return data, UPLOAD_SOURCE_LABEL

        if isinstance(data, str):
            return RawRows(parse_csv_text(data)), UPLOAD_SOURCE_LABEL

        if isinstance(data, Mapping):
            if "stats" in data:
                return self._pre_aggregated(data), UPLOAD_SOURCE_LABEL
            csv_text = data.get("csv_text", data.get("csvText"))
            if isinstance(csv_text, str):
                label = data.get("filename") or UPLOAD_SOURCE_LABEL
                return RawRows(parse_csv_text(csv_text)), label
            raise InvalidQueryError("upload mapping needs 'stats' or 'csv_text'")

        if isinstance(data, Sequence):
            rows = list(data)
            if not all(isinstance(row, Mapping) for row in rows):
                raise InvalidQueryError("every uploaded row must be a mapping")
            return RawRows(rows), UPLOAD_SOURCE_LABEL

        raise InvalidQueryError(f"Unsupported upload type: {type(data).__name__}")

    def _pre_aggregated(self, data: Mapping[str, Any]) -> PreAggregated:
        stats = data.get("stats") or []
        orders = data.get("orders") or []
        if not isinstance(stats, Sequence) or not isinstance(orders, Sequence):
            raise InvalidQueryError("'stats' and 'orders' must be lists")
        if not all(isinstance(stat, Mapping) for stat in stats):
            raise InvalidQueryError("every customer stat must be a mapping")
        if not all(isinstance(order, Mapping) for order in orders):
            raise InvalidQueryError("every order must be a mapping")

        total_rows = data.get("total_rows", data.get("totalRows"))
        if total_rows is not None:
            try:
                total_rows = int(total_rows)
            except (TypeError, ValueError) as e:
                raise InvalidQueryError(f"total_rows must be an integer, got {total_rows!r}") from e
            if total_rows < 0:
                raise InvalidQueryError("total_rows must not be negative")

        return PreAggregated(stats=list(stats), orders=list(orders), total_rows=total_rows)
