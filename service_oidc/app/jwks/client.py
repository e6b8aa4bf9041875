"""
Signing key cache for registered OpenID providers.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
from jose import jwk
from jose.exceptions import JWKError

from shared.errors import ErrorCode, KeyResolutionError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..providers import canonical_issuer

OPENID_CONFIGURATION_PATH = "/.well-known/openid-configuration"


class SigningKeyCache:
    """Fetch and cache PEM encoded signing keys, keyed by issuer then kid.

    Issuers are cached under their canonical form so the URL and bare forms
    of the Google issuer share one entry. A flush and a following get for the
    same issuer are serialized on that issuer's lock, so the get always
    observes the flush.
    """

    def __init__(
        self,
        http_timeout: float = 5.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.logger = get_logger("oidc.jwks")
        self.metrics = metrics

        self._keys: Dict[str, Dict[str, bytes]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._client = httpx.AsyncClient(timeout=http_timeout, transport=transport)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def get_signing_key(self, request: Any, issuer: str, kid: str) -> bytes:
        """Return the PEM encoded key ``kid`` published by ``issuer``.

        ``request`` is the originating request; the cache does not read it.
        An empty ``kid`` selects the issuer's only key.
        """
        issuer = canonical_issuer(issuer)

        async with self._lock_for(issuer):
            keys = self._keys.get(issuer)
            if keys is None:
                keys = await self._fetch_keys(issuer)
                self._keys[issuer] = keys

        return self._select_key(issuer, keys, kid)

    async def flush_cached_signing_keys(self, issuer: str) -> None:
        """Drop every cached key of ``issuer`` so the next get refetches."""
        issuer = canonical_issuer(issuer)

        async with self._lock_for(issuer):
            removed = self._keys.pop(issuer, None)

        self.logger.info(
            "Signing key cache flushed",
            issuer=issuer,
            keys_count=len(removed or {})
        )

    def _lock_for(self, issuer: str) -> asyncio.Lock:
        lock = self._locks.get(issuer)
        if lock is None:
            lock = self._locks[issuer] = asyncio.Lock()
        return lock

    def _select_key(self, issuer: str, keys: Dict[str, bytes], kid: str) -> bytes:
        if not kid and len(keys) == 1:
            return next(iter(keys.values()))

        key = keys.get(kid) if kid else None
        if key is None:
            self.logger.warning("Key not found", issuer=issuer, kid=kid)
            raise KeyResolutionError(
                ErrorCode.KID_NOT_FOUND,
                f"The jwk set retrieved for the issuer {issuer} does not contain a key "
                f"identifier {kid!r}.",
                http_status=401,
                details={"issuer": issuer, "kid": kid}
            )
        return key

    async def _fetch_keys(self, issuer: str) -> Dict[str, bytes]:
        try:
            keys = await self._fetch_keys_from_provider(issuer)
        except KeyResolutionError as exc:
            self._record_fetch("error")
            self.logger.error(
                "Failed to fetch signing keys",
                issuer=issuer,
                code=exc.code.value,
                error=exc.message
            )
            raise

        self._record_fetch("success")
        self.logger.info("Signing keys refreshed", issuer=issuer, keys_count=len(keys))
        return keys

    async def _fetch_keys_from_provider(self, issuer: str) -> Dict[str, bytes]:
        configuration_url = issuer.rstrip("/") + OPENID_CONFIGURATION_PATH
        configuration = await self._get_json(
            configuration_url,
            ErrorCode.GET_OPENID_CONFIGURATION_FAILURE,
            ErrorCode.DECODE_OPENID_CONFIGURATION_FAILURE,
        )

        jwks_uri = configuration.get("jwks_uri")
        if not isinstance(jwks_uri, str) or not jwks_uri:
            raise KeyResolutionError(
                ErrorCode.DECODE_OPENID_CONFIGURATION_FAILURE,
                f"The OpenID configuration of {issuer} has no 'jwks_uri'.",
                details={"url": configuration_url}
            )

        jwks = await self._get_json(
            jwks_uri,
            ErrorCode.GET_JWKS_FAILURE,
            ErrorCode.DECODE_JWKS_FAILURE,
        )

        key_set = jwks.get("keys")
        if not isinstance(key_set, list):
            raise KeyResolutionError(
                ErrorCode.DECODE_JWKS_FAILURE,
                "JWKS response missing 'keys' array",
                details={"url": jwks_uri}
            )

        keys: Dict[str, bytes] = {}
        for key_data in key_set:
            if not isinstance(key_data, dict) or not key_data:
                raise KeyResolutionError(
                    ErrorCode.EMPTY_JWK_KEY,
                    f"The jwk set retrieved for the issuer {issuer} contains an empty key.",
                    details={"url": jwks_uri}
                )
            # Only RSA signature keys can verify tokens here
            if key_data.get("kty") != "RSA" or key_data.get("use", "sig") != "sig":
                continue
            keys[str(key_data.get("kid", ""))] = self._to_pem(issuer, key_data)

        if not keys:
            raise KeyResolutionError(
                ErrorCode.EMPTY_JWK,
                f"The jwk set retrieved for the issuer {issuer} has no RSA signing keys.",
                details={"url": jwks_uri}
            )

        return keys

    async def _get_json(self, url: str, get_error: ErrorCode, decode_error: ErrorCode) -> Dict[str, Any]:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise KeyResolutionError(
                get_error,
                f"Failure while contacting the identity provider: {exc}",
                details={"url": url}
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise KeyResolutionError(
                decode_error,
                f"Failure while decoding the response from {url}: {exc}",
                details={"url": url}
            ) from exc

        if not isinstance(payload, dict):
            raise KeyResolutionError(
                decode_error,
                f"The response from {url} is not a JSON object.",
                details={"url": url}
            )
        return payload

    def _to_pem(self, issuer: str, key_data: Dict[str, Any]) -> bytes:
        try:
            return jwk.construct(key_data, algorithm=key_data.get("alg", "RS256")).to_pem()
        except (JWKError, KeyError, ValueError, TypeError, AttributeError) as exc:
            raise KeyResolutionError(
                ErrorCode.MARSHALLING_KEY,
                f"Unable to convert the jwk of {issuer} to PEM: {exc}",
                details={"issuer": issuer, "kid": key_data.get("kid")}
            ) from exc

    def _record_fetch(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.record_key_fetch(outcome)
