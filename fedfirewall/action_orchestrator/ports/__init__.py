"""Ports (interfaces) for action orchestrator module."""

from fedfirewall.action_orchestrator.ports.logger_port import ILogger

__all__ = [
    "ILogger",
]
