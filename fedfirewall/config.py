"""Configuration classes using Pydantic BaseSettings."""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from fedfirewall.policy_engine.policies import FEDERATED_BLOCK_PURPOSE


class DatabaseConfig(BaseSettings):
    """Policy and resolution storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FEDFIREWALL_DB_", case_sensitive=False
    )

    backend: Literal["sqlite", "memory"] = "sqlite"
    path: str = "fedfirewall.db"


class PolicyConfig(BaseSettings):
    """Policy engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FEDFIREWALL_POLICY_", case_sensitive=False
    )

    policies_path: Optional[str] = None  # YAML file synchronized into the store at startup
    purpose: str = FEDERATED_BLOCK_PURPOSE


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FEDFIREWALL_LOGGING_", case_sensitive=False
    )

    level: str = "info"
    json_logs: bool = True


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FEDFIREWALL_SERVER_", case_sensitive=False
    )

    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "production"


class FirewallConfig(BaseSettings):
    """Main firewall configuration."""

    model_config = SettingsConfigDict(
        env_prefix="",
    )

    database: DatabaseConfig = DatabaseConfig()
    policy: PolicyConfig = PolicyConfig()
    logging: LoggingConfig = LoggingConfig()
    server: ServerConfig = ServerConfig()
