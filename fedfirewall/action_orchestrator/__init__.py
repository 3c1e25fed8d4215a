"""Action Orchestrator module."""

from fedfirewall.action_orchestrator.orchestrator_service import OrchestratorService
from fedfirewall.action_orchestrator.ports.logger_port import ILogger

__all__ = [
    "OrchestratorService",
    "ILogger",
]
