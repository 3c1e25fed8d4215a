"""Dependency injection container for firewall components."""

from dependency_injector import containers, providers

from fedfirewall.action_orchestrator.adapters.structlog_logger import StructlogLogger
from fedfirewall.action_orchestrator.orchestrator_service import OrchestratorService
from fedfirewall.config import FirewallConfig

# Policy Engine
from fedfirewall.policy_engine.adapters.memory_store import (
    MemoryDatabase,
    MemoryPolicyStore,
    MemoryResolutionSink,
)
from fedfirewall.policy_engine.adapters.sqlite_store import (
    SQLiteDatabase,
    SQLitePolicyStore,
    SQLiteResolutionSink,
)
from fedfirewall.policy_engine.adapters.yaml_policy_loader import YAMLPolicyLoader
from fedfirewall.policy_engine.policy_service import PolicyService


class FirewallContainer(containers.DeclarativeContainer):
    """Dependency injection container for firewall components."""

    # Configuration
    config = providers.Singleton(FirewallConfig)

    # Storage backend, selected by FEDFIREWALL_DB_BACKEND
    database = providers.Selector(
        config.provided.database.backend,
        sqlite=providers.Singleton(SQLiteDatabase, db_path=config.provided.database.path),
        memory=providers.Singleton(MemoryDatabase),
    )

    policy_store = providers.Selector(
        config.provided.database.backend,
        sqlite=providers.Factory(SQLitePolicyStore),
        memory=providers.Factory(MemoryPolicyStore),
    )

    resolution_sink = providers.Selector(
        config.provided.database.backend,
        sqlite=providers.Factory(SQLiteResolutionSink),
        memory=providers.Factory(MemoryResolutionSink),
    )

    policy_loader = providers.Factory(YAMLPolicyLoader, policies_path=config.provided.policy.policies_path)

    # Policy Engine Service
    policy_service = providers.Factory(
        PolicyService,
        database=database,
        policy_store=policy_store,
        resolution_sink=resolution_sink,
        purpose=config.provided.policy.purpose,
    )

    # Action Orchestrator
    logger = providers.Singleton(StructlogLogger)

    orchestrator_service = providers.Factory(
        OrchestratorService,
        logger=logger,
    )
