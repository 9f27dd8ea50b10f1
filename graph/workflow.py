# LangGraph Workflow
# Defines the StateGraph every snapshot load runs through:
# optional source pull -> snapshot swap -> optional owner alert

from typing import Literal

from langgraph.graph import END, START, StateGraph

from cache.snapshot import Snapshot
from graph.state import IngestState
from reconciliation.errors import SourceUnavailableError
from reconciliation.models import RawRows
from utils.logger import log_alert, log_error, log_load_end, log_load_start, log_node_end, log_node_start


def create_ingest_workflow(snapshot: Snapshot, source=None, notifier=None) -> StateGraph:
    """
    Create the ingest graph bound to one snapshot, row source and notifier.

    Flow:
    1. START → fetch_rows when no payload was supplied (a refresh),
       otherwise straight to load_snapshot
    2. fetch_rows → END on source failure (snapshot untouched)
    3. load_snapshot → send_alert when the red-customer count rose
    4. send_alert → END
    """

    def route_input(state: IngestState) -> Literal["fetch", "load"]:
        log_load_start(state["source_label"])
        return "load" if state.get("payload") is not None else "fetch"

    def fetch_rows(state: IngestState) -> dict:
        log_node_start("fetch_rows")
        if source is None:
            log_error("No row source configured")
            log_load_end(False)
            return {"error": "No row source configured"}

        try:
            rows = source.fetch_rows()
        except SourceUnavailableError as e:
            log_error("Row source unavailable", e)
            log_load_end(False)
            return {"error": str(e)}

        log_node_end("fetch_rows", {"rows": len(rows)})
        return {"payload": RawRows(rows)}

    def load_snapshot(state: IngestState) -> dict:
        log_node_start("load_snapshot", source=state["source_label"])
        outcome = snapshot.load(state["payload"], state["source_label"])
        result = outcome.result
        log_load_end(True, result["rows"], result["customers"])
        log_node_end("load_snapshot", {"critical_alert": outcome.alert is not None})
        return {"load_result": result, "alert": outcome.alert}

    def send_alert(state: IngestState) -> dict:
        alert = state["alert"]
        log_node_start("send_alert", critical=alert.critical_count)
        log_alert(alert.title, alert.critical_count)

        sent = False
        if notifier is not None:
            try:
                sent = bool(notifier.send(alert.title, alert.content))
            except Exception as e:
                # Delivery failures never roll back the load
                log_error("Critical alert delivery failed", e)

        log_node_end("send_alert", {"alert_sent": sent})
        return {"alert_sent": sent}

    def after_fetch(state: IngestState) -> Literal["load", "end"]:
        return "end" if state.get("error") else "load"

    def should_alert(state: IngestState) -> Literal["alert", "end"]:
        return "alert" if state.get("alert") is not None else "end"

    workflow = StateGraph(IngestState)

    workflow.add_node("fetch_rows", fetch_rows)
    workflow.add_node("load_snapshot", load_snapshot)
    workflow.add_node("send_alert", send_alert)

    workflow.add_conditional_edges(
        START,
        route_input,
        {"fetch": "fetch_rows", "load": "load_snapshot"},
    )
    workflow.add_conditional_edges(
        "fetch_rows",
        after_fetch,
        {"load": "load_snapshot", "end": END},
    )
    workflow.add_conditional_edges(
        "load_snapshot",
        should_alert,
        {"alert": "send_alert", "end": END},
    )
    workflow.add_edge("send_alert", END)

    return workflow


def compile_workflow(snapshot: Snapshot, source=None, notifier=None):
    """Compile the ingest graph into a runnable."""
    return create_ingest_workflow(snapshot, source, notifier).compile()
