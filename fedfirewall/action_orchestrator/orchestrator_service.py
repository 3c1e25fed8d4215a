"""Action orchestrator service - reports inbox decisions."""

from typing import Dict, Any, Optional

from fedfirewall.action_orchestrator.ports.logger_port import ILogger
from fedfirewall.policy_engine.policy_service import PolicyDecision


class OrchestratorService:
    """Service for reporting decisions taken on inbound activities."""

    def __init__(self, logger: ILogger):
        """
        Initialize orchestrator service with injected dependencies.

        Args:
            logger: Logger implementation
        """
        self.logger = logger

    def execute(
        self,
        decision: PolicyDecision,
        activity_id: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Report a decision.

        Args:
            decision: Policy decision
            activity_id: IRI of the evaluated activity
            context: Additional context (target user, activity type, etc.)
        """
        context = context or {}

        log_data = {
            "activity_id": activity_id,
            "blocked": decision.blocked,
            "outcome": decision.outcome.value,
            "reason": decision.reason,
            "resolutions": len(decision.resolutions),
            **context,
        }

        if decision.blocked:
            self.logger.log("warning", f"Activity blocked: {decision.reason}", **log_data)
            self.logger.log_structured({"event": "activity_blocked", **log_data})
        else:
            self.logger.log("info", "Activity accepted", **log_data)
            self.logger.log_structured({"event": "activity_accepted", **log_data})

    def reject(self, error: Exception, activity_id: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Report an activity rejected because no decision could be taken.

        Args:
            error: The error raised while evaluating
            activity_id: IRI of the activity
            context: Additional context
        """
        log_data = {
            "activity_id": activity_id,
            "error": str(error),
            "error_type": type(error).__name__,
            **(context or {}),
        }
        self.logger.log("error", f"Activity rejected: {error}", **log_data)
        self.logger.log_structured({"event": "activity_rejected", **log_data})
