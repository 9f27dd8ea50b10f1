"""Shared fixtures for the discrepancy analyser tests."""

from types import SimpleNamespace

import pytest

from cache.snapshot import Snapshot
from orchestrator.discrepancy_service import DiscrepancyService
from reconciliation.errors import SourceUnavailableError


def make_row(order, customer, selling, billed, date="2025-10-01", **extra):
    """Build a warehouse-style row with display column names."""
    row = {
        "Order Number": str(order),
        "Order Status": "DISPATCHED",
        "Organization Name": customer,
        "Transport Type": "PARCEL",
        "Service Type": "Ground",
        "Carrier Name": "UPS",
        "Origin Pickup Date": date,
        "Origin Country": "CA",
        "Destination Country": "CA",
        "Lane (Origin -> Destination Province)": "QC -> ON",
        "Selling Price (CAD)": str(selling),
        "Billed Selling Price (CAD)": str(billed),
        "Margin (CAD $)": "0.00",
        "Margin (%)": "0.00",
    }
    row.update(extra)
    return row


MOCK_ROWS = [
    make_row(1001, "ACME CORP", "100.00", "150.00", "2025-10-01",
             **{"Margin (CAD $)": "50.00", "Margin (%)": "33.33"}),
    make_row(1002, "ACME CORP", "200.00", "200.00", "2025-10-02",
             **{"Margin (CAD $)": "40.00", "Margin (%)": "20.00"}),
    make_row(1003, "BETA INC", "500.00", "450.00", "2025-10-03",
             **{"Transport Type": "LTL", "Carrier Name": "FedEx",
                "Destination Country": "US", "Lane (Origin -> Destination Province)": "ON -> NY"}),
]


def red_rows(*customers, start=2000):
    """One order per customer with a $600 overcharge (red severity)."""
    return [make_row(start + i, name, "100.00", "700.00") for i, name in enumerate(customers)]


class FakeSource:
    """Row source returning canned rows, or raising when told to fail."""

    name = "fake"

    def __init__(self, rows=None, fail=False):
        self.rows = list(rows or [])
        self.fail = fail
        self.calls = 0

    def fetch_rows(self):
        self.calls += 1
        if self.fail:
            raise SourceUnavailableError("connection refused")
        return [dict(r) for r in self.rows]


class RecordingNotifier:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, title, content):
        if self.fail:
            raise RuntimeError("webhook down")
        self.sent.append({"title": title, "content": content})
        return True


class RecordingLLM:
    """Chat model stand-in that records the messages it was given."""

    def __init__(self, content="ACME CORP has the largest overcharge.", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def invoke(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return SimpleNamespace(content=self.content)


@pytest.fixture
def mock_rows():
    return [dict(r) for r in MOCK_ROWS]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def llm():
    return RecordingLLM()


@pytest.fixture
def service(notifier, llm):
    from agents.assistant_agent import AssistantAgent

    return DiscrepancyService(snapshot=Snapshot(), notifier=notifier, assistant=AssistantAgent(llm=llm))


@pytest.fixture
def loaded_service(service, mock_rows):
    service.upload_data(mock_rows, "orders.csv")
    return service
