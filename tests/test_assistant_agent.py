"""Tests for the assistant context builder and LLM wrapper."""

from langchain_core.language_models.fake_chat_models import FakeListChatModel

from agents.assistant_agent import AssistantAgent, build_assistant_context
from config import ASSISTANT_FALLBACK_ANSWER
from reconciliation.aggregator import compute_customer_stats
from reconciliation.models import DateRange
from reconciliation.normalizer import normalize_rows
from tests.conftest import MOCK_ROWS, make_row


def stats_for(rows):
    return compute_customer_stats(normalize_rows(rows))


class TestBuildAssistantContext:
    def test_summary_sections(self):
        context = build_assistant_context(3, stats_for(MOCK_ROWS))
        assert "Date range: all loaded data" in context
        assert "- Total customers: 2" in context
        assert "- Total orders: 3" in context
        assert "- Net discrepancy: $0.00 CAD" in context
        assert "- Critical (>$500): 0 customers" in context
        assert "- Moderate ($50-500): 2 customers" in context
        assert "- Minor (<$50): 0 customers" in context
        assert "- Total overcharged orders: 1" in context
        assert "- Total undercharged orders: 1" in context

    def test_top_lists_split_by_sign(self):
        context = build_assistant_context(3, stats_for(MOCK_ROWS))
        over = context.split("TOP 5 BY OVERCHARGE:")[1].split("TOP 5 BY UNDERCHARGE:")[0]
        under = context.split("TOP 5 BY UNDERCHARGE:")[1].split("CUSTOMERS (")[0]
        assert "ACME CORP: $50.00 CAD over 2 orders (16.7% rate)" in over
        assert "BETA INC" not in over
        assert "BETA INC: $-50.00 CAD over 1 orders" in under
        assert "ACME CORP" not in under

    def test_empty_sections(self):
        context = build_assistant_context(0, [])
        assert "TOP 5 BY OVERCHARGE:\n- none" in context
        assert "CUSTOMERS (0 of 0 shown" in context

    def test_caps_customer_list(self):
        rows = [make_row(i, f"CUST{i:03d}", "100", str(100 + i)) for i in range(60)]
        context = build_assistant_context(60, stats_for(rows))
        listing = context.split("largest discrepancy first):\n")[1]
        assert "CUSTOMERS (40 of 60 shown" in context
        assert listing.count("severity=") == 40
        # largest magnitudes are listed, smallest dropped
        assert "CUST059:" in listing
        assert "CUST001:" not in listing

    def test_date_range_line(self):
        context = build_assistant_context(0, [], DateRange("2025-10-01", None))
        assert "Date range: 2025-10-01 to today" in context


class TestAssistantAgent:
    def test_answers_with_fake_model(self):
        agent = AssistantAgent(llm=FakeListChatModel(responses=["BETA INC is undercharged."]))
        turns = [{"role": "system", "content": "ctx"}, {"role": "user", "content": "who?"}]
        assert agent.answer(turns) == "BETA INC is undercharged."

    def test_list_content_flattened(self):
        agent = AssistantAgent()
        assert agent._extract_text([{"type": "text", "text": "a"}, "b"]) == "ab"
        assert agent._extract_text(None) == ""

    def test_whitespace_answer_falls_back(self):
        agent = AssistantAgent(llm=FakeListChatModel(responses=["   "]))
        assert agent.answer([{"role": "user", "content": "q"}]) == ASSISTANT_FALLBACK_ANSWER
