"""Structlog logger adapter."""

from typing import Dict, Any

import structlog

from fedfirewall.action_orchestrator.ports.logger_port import ILogger


class StructlogLogger(ILogger):
    """Structlog implementation for logging."""

    def __init__(self, name: str = "fedfirewall.decisions"):
        """
        Initialize structlog logger.

        Args:
            name: Logger name
        """
        self._logger = structlog.get_logger(name)

    def log(self, level: str, message: str, **kwargs) -> None:
        getattr(self._logger, level)(message, **kwargs)

    def log_structured(self, data: Dict[str, Any]) -> None:
        data = dict(data)
        event = data.pop("event", "structured_log")
        self._logger.info(event, **data)
