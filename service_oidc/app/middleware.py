"""
Request authentication with OpenID Connect ID tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from fastapi import Request

from shared.errors import ErrorCode, ValidationError
from shared.logging import get_logger, set_user_context

from .tokens import Token
from .validation import IDTokenValidator

BEARER_SCHEME = "Bearer"


@dataclass(frozen=True)
class User:
    """Identity established by a validated ID token."""

    issuer: str
    id: str
    claims: Dict[str, Any]

    @classmethod
    def from_token(cls, token: Token) -> "User":
        return cls(issuer=token.claims["iss"], id=token.claims["sub"], claims=dict(token.claims))


def get_id_token_from_authorization_header(request: Request) -> str:
    """Extract the ID token from an ``Authorization: Bearer <token>`` header."""
    header = request.headers.get("Authorization")
    if not header:
        raise ValidationError(
            ErrorCode.AUTHORIZATION_HEADER_NOT_FOUND,
            "The 'Authorization' header was not found or was empty.",
            http_status=400
        )

    parts = header.split(" ")
    if len(parts) != 2:
        raise ValidationError(
            ErrorCode.AUTHORIZATION_HEADER_WRONG_FORMAT,
            "The 'Authorization' header did not have the correct format.",
            http_status=400
        )

    if parts[0] != BEARER_SCHEME:
        raise ValidationError(
            ErrorCode.AUTHORIZATION_HEADER_WRONG_SCHEME_NAME,
            "The 'Authorization' header scheme name was not 'Bearer'",
            http_status=400
        )

    return parts[1]


class OpenIDAuthenticator:
    """Authenticate requests carrying an ID token as bearer credential.

    Instances are callable so they can be used directly as a FastAPI
    dependency::

        @app.get("/me")
        async def me(user: User = Depends(authenticator)):
            ...
    """

    def __init__(self, validator: IDTokenValidator):
        self.validator = validator
        self.logger = get_logger("oidc.middleware")

    async def __call__(self, request: Request) -> User:
        return await self.authenticate(request)

    async def authenticate(self, request: Request) -> User:
        """Validate the request's bearer ID token and return its user."""
        raw_token = get_id_token_from_authorization_header(request)
        return await self.authenticate_token(request, raw_token)

    async def authenticate_token(self, request: Request, raw_token: str) -> User:
        """Validate an ID token supplied outside the Authorization header."""
        token = await self.validator.validate(request, raw_token)
        user = User.from_token(token)

        set_user_context(subject=user.id, issuer=user.issuer)
        request.state.user = user
        self.logger.info("Request authenticated with ID token")
        return user
