"""Adapters (implementations) for action orchestrator module."""

from fedfirewall.action_orchestrator.adapters.structlog_logger import StructlogLogger

__all__ = [
    "StructlogLogger",
]
