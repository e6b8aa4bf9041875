"""
ID token validation with one-shot signing key renewal.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

import jwt

from shared.errors import ErrorCode, OpenIDError, ValidationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..providers import ProviderSource, validate_providers
from ..tokens import Token, TokenParser
from .claims import issuer_claim, key_id
from .matchers import match_audience, match_issuer, validate_subject


class SigningKeyGetter(Protocol):
    """Source of raw signing key material, cached per issuer."""

    async def get_signing_key(self, request: Any, issuer: str, kid: str) -> bytes:
        ...

    async def flush_cached_signing_keys(self, issuer: str) -> None:
        ...


KeyDecoder = Callable[[bytes], Any]


def jwt_error_to_openid_error(exc: jwt.PyJWTError) -> ValidationError:
    """Translate a PyJWT failure into a ValidationError with an HTTP status."""
    details = {"reason": str(exc), "error_type": type(exc).__name__}

    if isinstance(exc, jwt.InvalidSignatureError):
        return ValidationError(ErrorCode.JWT_VALIDATION_FAILURE, "Jwt token validation failed.", 401, details)

    if isinstance(exc, jwt.DecodeError):
        # Malformed token
        return ValidationError(ErrorCode.JWT_VALIDATION_FAILURE, "Jwt token validation failed.", 400, details)

    if isinstance(exc, jwt.InvalidTokenError):
        return ValidationError(ErrorCode.JWT_VALIDATION_FAILURE, "Jwt token validation failed.", 401, details)

    return ValidationError(
        ErrorCode.JWT_VALIDATION_UNKNOWN_FAILURE,
        "Jwt token validation failed with unknown error.",
        500,
        details
    )


class ClaimValidatingKeyResolver:
    """Key resolver for the first pass: validate claims, then fetch the key."""

    def __init__(self, validator: "IDTokenValidator", request: Any):
        self._validator = validator
        self._request = request

    async def resolve_key(self, token: Token) -> Any:
        providers = self._validator.get_providers()
        validate_providers(providers)

        provider = match_issuer(token.claims, providers)
        match_audience(token.claims, provider)
        validate_subject(token.claims)

        return await self._validator.signing_key(self._request, provider.issuer, key_id(token.header))


class RenewingKeyResolver:
    """Key resolver for the retry: flush the issuer's keys and fetch afresh.

    Claims were validated on the first pass of the same token, so they are
    not matched again.
    """

    def __init__(self, validator: "IDTokenValidator", request: Any):
        self._validator = validator
        self._request = request

    async def resolve_key(self, token: Token) -> Any:
        issuer = issuer_claim(token.claims).value

        await self._validator.key_getter.flush_cached_signing_keys(issuer)
        self._validator.record_key_renewal(issuer)

        return await self._validator.signing_key(self._request, issuer, key_id(token.header))


class IDTokenValidator:
    """Validate ID tokens against registered providers and their signing keys.

    The validator holds no per-request state and may be shared by concurrent
    requests. A token whose signature does not match the cached key is
    retried exactly once after the issuer's cached keys are flushed.
    """

    def __init__(
        self,
        get_providers: ProviderSource,
        parser: TokenParser,
        key_getter: SigningKeyGetter,
        key_decoder: KeyDecoder,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.get_providers = get_providers
        self.parser = parser
        self.key_getter = key_getter
        self.key_decoder = key_decoder
        self.metrics = metrics
        self.logger = get_logger("oidc.validator")

    async def validate(self, request: Any, raw_token: str) -> Token:
        """Return the verified token or raise.

        Claim and parser failures raise ValidationError. Provider setup and
        key retrieval failures propagate as raised by their collaborators.
        """
        try:
            token = await self._parse_with_key_renewal(request, raw_token)
        except OpenIDError as exc:
            self._record_validation("rejected", exc.code.value)
            self.logger.warning(
                "ID token rejected",
                code=exc.code.value,
                error=exc.message,
                status_code=exc.http_status
            )
            raise

        self._record_validation("accepted")
        self.logger.debug(
            "ID token accepted",
            issuer=token.claims.get("iss"),
            sub=token.claims.get("sub")
        )
        return token

    async def signing_key(self, request: Any, issuer: str, kid: str) -> Any:
        """Fetch the raw key of ``issuer`` and decode it into a verification key."""
        raw = await self.key_getter.get_signing_key(request, issuer, kid)
        return self.key_decoder(raw)

    def record_key_renewal(self, issuer: str) -> None:
        if self.metrics is not None:
            self.metrics.record_key_renewal(issuer)

    async def _parse_with_key_renewal(self, request: Any, raw_token: str) -> Token:
        try:
            return await self.parser.parse(raw_token, ClaimValidatingKeyResolver(self, request))
        except jwt.InvalidSignatureError:
            # The provider may have rotated its keys since they were cached.
            self.logger.info("Token signature does not match cached signing key, renewing keys")
        except jwt.PyJWTError as exc:
            raise jwt_error_to_openid_error(exc) from exc

        try:
            return await self.parser.parse(raw_token, RenewingKeyResolver(self, request))
        except jwt.PyJWTError as exc:
            raise jwt_error_to_openid_error(exc) from exc

    def _record_validation(self, outcome: str, code: str = "") -> None:
        if self.metrics is not None:
            self.metrics.record_token_validation(outcome, code)
