# Orchestrator Module

from orchestrator.discrepancy_service import DiscrepancyService
from orchestrator.refresh_scheduler import RefreshScheduler

__all__ = ["DiscrepancyService", "RefreshScheduler"]
