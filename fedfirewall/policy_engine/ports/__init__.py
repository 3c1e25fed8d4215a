"""Ports (interfaces) for policy engine module."""

from fedfirewall.policy_engine.ports.policy_store_port import IPolicyStore
from fedfirewall.policy_engine.ports.resolution_sink_port import IResolutionSink
from fedfirewall.policy_engine.ports.unit_of_work_port import IDatabase, IUnitOfWork

__all__ = [
    "IDatabase",
    "IPolicyStore",
    "IResolutionSink",
    "IUnitOfWork",
]
