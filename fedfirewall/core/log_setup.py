"""Logging configuration for the firewall."""

import logging
import sys
from typing import Any, Dict

import structlog


def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add the service name to log events."""
    event_dict.setdefault("service", "fedfirewall")
    return event_dict


def configure_logging(log_level: str = "info", json_logs: bool = True) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        log_level: Minimum level ("debug", "info", "warning", "error")
        json_logs: Render structlog events as JSON instead of console output
    """
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s" if not json_logs else "%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )
