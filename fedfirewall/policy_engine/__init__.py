"""Policy Engine module."""

from fedfirewall.policy_engine.evaluator import Evaluation, evaluate_policy_set
from fedfirewall.policy_engine.permit import Permit, compose
from fedfirewall.policy_engine.policies import (
    FEDERATED_BLOCK_PURPOSE,
    Policy,
    PolicyKind,
    PolicyScope,
    build_rule,
)
from fedfirewall.policy_engine.policy_service import PolicyDecision, PolicyService
from fedfirewall.policy_engine.ports.policy_store_port import IPolicyStore
from fedfirewall.policy_engine.ports.resolution_sink_port import IResolutionSink
from fedfirewall.policy_engine.ports.unit_of_work_port import IDatabase, IUnitOfWork
from fedfirewall.policy_engine.resolution import Resolution

__all__ = [
    "FEDERATED_BLOCK_PURPOSE",
    "Evaluation",
    "IDatabase",
    "IPolicyStore",
    "IResolutionSink",
    "IUnitOfWork",
    "Permit",
    "Policy",
    "PolicyDecision",
    "PolicyKind",
    "PolicyScope",
    "PolicyService",
    "Resolution",
    "build_rule",
    "compose",
    "evaluate_policy_set",
]
