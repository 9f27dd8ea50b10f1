# Billing Discrepancy Agents

from agents.assistant_agent import AssistantAgent, build_assistant_context

__all__ = [
    "AssistantAgent",
    "build_assistant_context",
]
