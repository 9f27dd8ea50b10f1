"""Tests for the ingest graph routing."""

from cache.snapshot import Snapshot
from graph.state import initial_ingest_state
from graph.workflow import compile_workflow
from reconciliation.models import RawRows
from tests.conftest import MOCK_ROWS, FakeSource, RecordingNotifier, red_rows


class TestIngestWorkflow:
    def test_payload_skips_fetch(self):
        source = FakeSource(red_rows("X"))
        snapshot = Snapshot()
        app = compile_workflow(snapshot, source, RecordingNotifier())

        final = app.invoke(initial_ingest_state(RawRows(MOCK_ROWS), "upload"))

        assert source.calls == 0
        assert final["error"] is None
        assert final["load_result"]["rows"] == 3
        assert final["alert"] is None
        assert final["alert_sent"] is False

    def test_refresh_fetches_then_alerts(self):
        source = FakeSource(red_rows("X", "Y"))
        notifier = RecordingNotifier()
        snapshot = Snapshot()
        app = compile_workflow(snapshot, source, notifier)

        final = app.invoke(initial_ingest_state(None, "refreshed from database"))

        assert source.calls == 1
        assert final["load_result"]["customers"] == 2
        assert final["alert"].critical_count == 2
        assert final["alert_sent"] is True
        assert notifier.sent[0]["title"] == final["alert"].title

    def test_source_failure_ends_without_load(self):
        snapshot = Snapshot()
        snapshot.load(RawRows(MOCK_ROWS), "previous")
        app = compile_workflow(snapshot, FakeSource(fail=True), RecordingNotifier())

        final = app.invoke(initial_ingest_state(None, "refreshed from database"))

        assert "connection refused" in final["error"]
        assert final["load_result"] is None
        assert snapshot.view().source == "previous"

    def test_alert_without_notifier(self):
        app = compile_workflow(Snapshot(), None, None)
        final = app.invoke(initial_ingest_state(RawRows(red_rows("X")), "upload"))
        assert final["alert"] is not None
        assert final["alert_sent"] is False
