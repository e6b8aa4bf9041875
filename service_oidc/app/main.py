"""
OIDC service for the Access Layer.
"""

from dataclasses import asdict
from typing import Dict, Optional

import httpx
from fastapi import Depends, Request
from pydantic import BaseModel

from shared.base_service import SERVICE_VERSION, BaseService
from shared.config import ServiceConfig
from shared.errors import SetupError

from .jwks import SigningKeyCache, pem_to_rsa_public_key
from .middleware import OpenIDAuthenticator, User
from .providers import StaticProviderSource, validate_providers
from .tokens import TokenParser
from .validation import IDTokenValidator

SERVICE_NAME = "oidc"
SERVICE_PORT = 8010


class TokenVerificationRequest(BaseModel):
    """Request model for token verification."""
    token: str


class OIDCService(BaseService):
    """Validates ID tokens issued by the configured OpenID providers."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        key_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config)

        self.provider_source = StaticProviderSource.from_config(self.config)
        self.key_cache = SigningKeyCache(
            self.config.http_timeout_seconds,
            transport=key_transport,
            metrics=self.metrics
        )
        self.validator = IDTokenValidator(
            self.provider_source,
            TokenParser(self.config.algorithms, self.config.clock_leeway_seconds),
            self.key_cache,
            pem_to_rsa_public_key,
            metrics=self.metrics
        )
        self.authenticator = OpenIDAuthenticator(self.validator)

        self._setup_oidc_routes()

    def _setup_oidc_routes(self):
        """Set up token validation routes."""
        authenticator = self.authenticator

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "OIDC Access Layer - ID Token Validation Service",
                "version": SERVICE_VERSION
            }

        @self.app.post("/auth/verify")
        async def verify_token(body: TokenVerificationRequest, request: Request):
            """Validate an ID token passed in the request body."""
            user = await authenticator.authenticate_token(request, body.token)
            return {"valid": True, "user": asdict(user)}

        @self.app.get("/auth/me")
        async def current_user(user: User = Depends(authenticator)):
            """Return the user authenticated by the bearer ID token."""
            return asdict(user)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report whether the provider registry is usable."""
        try:
            validate_providers(self.provider_source())
        except SetupError as exc:
            self.logger.warning("Provider registry misconfigured", code=exc.code.value, error=exc.message)
            return {"providers": "error"}
        return {"providers": "ok"}

    async def _shutdown(self) -> None:
        await self.key_cache.close()


def create_app(config: Optional[ServiceConfig] = None, **kwargs):
    """Create FastAPI application."""
    service = OIDCService(config, **kwargs)
    return service.app


if __name__ == "__main__":
    service = OIDCService()
    service.run()
