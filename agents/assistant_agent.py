# AssistantAgent
# Answers free-form questions about the loaded discrepancy data.
# The context is built from aggregates captured before the LLM is called.

from typing import Any, List, Mapping, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from config import (
    ASSISTANT_FALLBACK_ANSWER, ASSISTANT_MAX_CUSTOMERS, ASSISTANT_TOP_N, CURRENCY,
    GOOGLE_API_KEY, LLM_MODEL, LLM_TEMPERATURE,
    SEVERITY_RED_THRESHOLD, SEVERITY_YELLOW_THRESHOLD,
)
from prompts.prompts import (
    ASSISTANT_CONTEXT_PROMPT, CUSTOMER_LINE, EMPTY_SECTION,
    OVERCHARGE_LINE, UNDERCHARGE_LINE,
)
from reconciliation.aggregator import summarize
from reconciliation.models import GREEN, RED, YELLOW, CustomerStat, DateRange
from utils.logger import log_error, log_llm_call, log_llm_result


def _format_lines(template: str, stats: Sequence[CustomerStat]) -> str:
    if not stats:
        return EMPTY_SECTION
    return "\n".join(template.format(currency=CURRENCY, **stat) for stat in stats)


def build_assistant_context(
    order_count: int,
    stats: Sequence[CustomerStat],
    date_range: Optional[DateRange] = None,
) -> str:
    """
    Build the fixed-structure system context for the assistant.

    ``stats`` must already be in aggregate order (largest absolute
    discrepancy first). Overcharged and undercharged customers are chosen
    by the sign of their total, not its magnitude.
    """
    date_range = date_range or DateRange()
    totals = summarize(order_count, stats)
    severity_counts = totals["severity_counts"]

    top_overcharged = [s for s in stats if s["total_discrepancy"] > 0][:ASSISTANT_TOP_N]
    top_undercharged = [s for s in stats if s["total_discrepancy"] < 0][:ASSISTANT_TOP_N]
    shown = list(stats[:ASSISTANT_MAX_CUSTOMERS])

    return ASSISTANT_CONTEXT_PROMPT.format(
        date_range=date_range.describe(),
        total_customers=totals["total_customers"],
        total_orders=totals["total_orders"],
        net_discrepancy=totals["total_discrepancy"],
        currency=CURRENCY,
        red_threshold=SEVERITY_RED_THRESHOLD,
        yellow_threshold=SEVERITY_YELLOW_THRESHOLD,
        red_count=severity_counts[RED],
        yellow_count=severity_counts[YELLOW],
        green_count=severity_counts[GREEN],
        total_overcharges=totals["total_overcharges"],
        total_undercharges=totals["total_undercharges"],
        top_n=ASSISTANT_TOP_N,
        top_overcharged=_format_lines(OVERCHARGE_LINE, top_overcharged),
        top_undercharged=_format_lines(UNDERCHARGE_LINE, top_undercharged),
        shown_customers=len(shown),
        customer_lines=_format_lines(CUSTOMER_LINE, shown),
    )


class AssistantAgent:
    """
    Agent responsible for answering billing questions.
    Uses an LLM over a pre-built data context; never reads the snapshot itself.
    """

    def __init__(self, llm: Any = None):
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = ChatGoogleGenerativeAI(
                model=LLM_MODEL,
                google_api_key=GOOGLE_API_KEY,
                temperature=LLM_TEMPERATURE,
            )
        return self._llm

    def answer(self, turns: Sequence[Mapping[str, str]]) -> str:
        """
        Send ordered {role, content} turns to the LLM and return its answer.

        Returns the fallback answer when the model fails or returns nothing usable.
        """
        messages = [self._to_message(turn) for turn in turns]
        log_llm_call("assistant", turns[-1]["content"] if turns else None)

        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            log_error("Assistant LLM call failed", e)
            return ASSISTANT_FALLBACK_ANSWER

        answer = self._extract_text(getattr(response, "content", None))
        if not answer:
            log_llm_result("assistant", "(empty response, using fallback)")
            return ASSISTANT_FALLBACK_ANSWER

        log_llm_result("assistant", answer)
        return answer

    def _to_message(self, turn: Mapping[str, str]) -> BaseMessage:
        role = turn.get("role")
        if role == "system":
            return SystemMessage(content=turn["content"])
        if role == "assistant":
            return AIMessage(content=turn["content"])
        return HumanMessage(content=turn["content"])

    def _extract_text(self, content: Any) -> str:
        """Flatten message content, which may be a string or a list of parts."""
        if isinstance(content, str):
            return content.strip()
        if isinstance(content, list):
            parts: List[str] = []
            for part in content:
                if isinstance(part, str):
                    parts.append(part)
                elif isinstance(part, dict) and isinstance(part.get("text"), str):
                    parts.append(part["text"])
            return "".join(parts).strip()
        return ""
