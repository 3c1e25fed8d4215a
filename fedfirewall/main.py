import uvicorn
from fastapi import FastAPI

from fedfirewall.api import create_app
from fedfirewall.config import FirewallConfig
from fedfirewall.container import FirewallContainer
from fedfirewall.core.bootstrap import register_startup_events


def create_application() -> tuple[FastAPI, FirewallConfig]:
    """
    Create the FastAPI application and the associated configuration.

    Returns:
        Tuple containing the FastAPI application and the configuration
    """
    container = FirewallContainer()
    app = create_app(container)
    register_startup_events(app, container)
    return app, container.config()


app, app_config = create_application()


def run_application() -> None:
    """Run the FastAPI application with uvicorn."""
    environment = app_config.server.environment.lower()

    uvicorn.run(
        "fedfirewall.main:app",
        host=app_config.server.host,
        port=app_config.server.port,
        log_level=app_config.logging.level.lower(),
        access_log=environment == "development",
        reload=environment == "development",
    )


if __name__ == "__main__":
    run_application()
