"""
Fixtures for OIDC service unit tests.
"""

from typing import List, Optional, Tuple

import pytest
from unittest.mock import MagicMock

from fastapi import Request

from service_oidc.app.jwks import pem_to_rsa_public_key
from service_oidc.app.providers import Provider
from service_oidc.app.tokens import TokenParser
from service_oidc.app.validation import IDTokenValidator
from shared.test_helpers import MockTokenGenerator, SigningKeyPair

ISSUER = "https://idp.example"
CLIENT_ID = "client-1"


class RecordingKeyGetter:
    """Signing key getter serving one cached PEM and a fresh one after a flush."""

    def __init__(self, cached: bytes, after_flush: Optional[bytes] = None):
        self.current = cached
        self.after_flush = after_flush
        self.get_calls: List[Tuple[str, str]] = []
        self.flush_calls: List[str] = []

    async def get_signing_key(self, request, issuer: str, kid: str) -> bytes:
        self.get_calls.append((issuer, kid))
        return self.current

    async def flush_cached_signing_keys(self, issuer: str) -> None:
        self.flush_calls.append(issuer)
        if self.after_flush is not None:
            self.current = self.after_flush


@pytest.fixture(scope="session")
def signing_key():
    """Key the provider currently signs with."""
    return SigningKeyPair.generate("kid-1")


@pytest.fixture(scope="session")
def rotated_key():
    """Key the provider rotates to, published under the same kid."""
    return SigningKeyPair.generate("kid-1")


@pytest.fixture(scope="session")
def unrelated_key():
    """Key nobody publishes."""
    return SigningKeyPair.generate("kid-x")


@pytest.fixture
def provider():
    return Provider(issuer=ISSUER, client_ids=(CLIENT_ID,))


@pytest.fixture
def token_generator():
    return MockTokenGenerator(issuer=ISSUER, audience=CLIENT_ID)


@pytest.fixture
def mock_request():
    """Create mock request."""
    request = MagicMock(spec=Request)
    request.headers = {}
    return request


@pytest.fixture
def make_key_getter():
    def _make(cached: SigningKeyPair, after_flush: Optional[SigningKeyPair] = None) -> RecordingKeyGetter:
        return RecordingKeyGetter(
            cached.public_pem(),
            after_flush.public_pem() if after_flush is not None else None,
        )
    return _make


@pytest.fixture
def make_validator(provider):
    def _make(key_getter, providers=None, metrics=None) -> IDTokenValidator:
        provider_list = [provider] if providers is None else list(providers)
        return IDTokenValidator(
            lambda: provider_list,
            TokenParser(["RS256"]),
            key_getter,
            pem_to_rsa_public_key,
            metrics=metrics,
        )
    return _make
