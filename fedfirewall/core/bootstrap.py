import logging

from fastapi import FastAPI

from fedfirewall.container import FirewallContainer
from fedfirewall.core.log_setup import configure_logging


logger = logging.getLogger(__name__)


def register_startup_events(app: FastAPI, container: FirewallContainer) -> None:
    """
    Register startup handlers in the FastAPI app.

    Centralize the initialization of infrastructure services
    (logging, storage, policy seeding) to keep the endpoint module
    cleaner.
    """

    @app.on_event("startup")
    async def _on_startup() -> None:  # pragma: no cover - framework hook
        await initialize_services(container)


async def initialize_services(container: FirewallContainer) -> None:
    """
    Configure logging, create tables and synchronize policies from YAML.

    Args:
        container: Dependency injection container
    """
    config = container.config()
    configure_logging(config.logging.level, config.logging.json_logs)

    await container.database().initialize()
    logger.info(f"Storage initialized ({config.database.backend})")

    if config.policy.policies_path:
        policies = container.policy_loader().load()
        count = await container.policy_service().sync_policies(policies)
        logger.info(f"Loaded {count} policies from {config.policy.policies_path}")
