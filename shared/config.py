"""
Shared configuration management for the OIDC Access Layer.
"""

from typing import List

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderConfig(BaseModel):
    """A registered OpenID provider as read from settings."""

    issuer: str
    client_ids: List[str] = Field(default_factory=list)


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="OIDC_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Trusted identity providers, e.g.
    # OIDC_PROVIDERS='[{"issuer": "https://idp.example", "client_ids": ["client-1"]}]'
    providers: List[ProviderConfig] = Field(default_factory=list)

    # Token verification
    algorithms: List[str] = Field(default_factory=lambda: ["RS256"])
    clock_leeway_seconds: int = 0

    # Signing key retrieval
    http_timeout_seconds: float = 5.0


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
