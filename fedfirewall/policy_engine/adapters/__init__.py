"""Adapters (implementations) for policy engine module."""

from fedfirewall.policy_engine.adapters.memory_store import (
    MemoryDatabase,
    MemoryPolicyStore,
    MemoryResolutionSink,
    MemoryUnitOfWork,
)
from fedfirewall.policy_engine.adapters.sqlite_store import (
    SQLiteDatabase,
    SQLitePolicyStore,
    SQLiteResolutionSink,
    SQLiteUnitOfWork,
)
from fedfirewall.policy_engine.adapters.yaml_policy_loader import YAMLPolicyLoader

__all__ = [
    "MemoryDatabase",
    "MemoryPolicyStore",
    "MemoryResolutionSink",
    "MemoryUnitOfWork",
    "SQLiteDatabase",
    "SQLitePolicyStore",
    "SQLiteResolutionSink",
    "SQLiteUnitOfWork",
    "YAMLPolicyLoader",
]
