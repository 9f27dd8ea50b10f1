# LangGraph Workflow Definition

from graph.state import IngestState
from graph.workflow import create_ingest_workflow, compile_workflow

__all__ = ["IngestState", "create_ingest_workflow", "compile_workflow"]
