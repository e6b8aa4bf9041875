"""
Unit tests for TokenParser.
"""

import jwt
import pytest
from unittest.mock import AsyncMock, MagicMock

from service_oidc.app.tokens import TokenParser


def _resolver(key):
    resolver = MagicMock()
    resolver.resolve_key = AsyncMock(return_value=key)
    return resolver


class TestTokenParser:
    """Test cases for TokenParser."""

    @pytest.mark.asyncio
    async def test_parse_success(self, token_generator, signing_key):
        resolver = _resolver(signing_key.public_key)
        raw = token_generator.generate_id_token(signing_key)

        token = await TokenParser().parse(raw, resolver)

        assert token.valid is True
        assert token.raw == raw
        assert token.header["kid"] == "kid-1"
        assert token.claims["sub"] == "user-42"

    @pytest.mark.asyncio
    async def test_resolver_sees_unverified_token_once(self, token_generator, signing_key):
        resolver = _resolver(signing_key.public_key)
        raw = token_generator.generate_id_token(signing_key)

        await TokenParser().parse(raw, resolver)

        resolver.resolve_key.assert_awaited_once()
        unverified = resolver.resolve_key.await_args.args[0]
        assert unverified.valid is False
        assert unverified.claims["iss"] == "https://idp.example"
        assert unverified.header["kid"] == "kid-1"

    @pytest.mark.asyncio
    async def test_signature_mismatch(self, token_generator, signing_key, rotated_key):
        raw = token_generator.generate_id_token(rotated_key)

        with pytest.raises(jwt.InvalidSignatureError):
            await TokenParser().parse(raw, _resolver(signing_key.public_key))

    @pytest.mark.asyncio
    async def test_expired_token(self, token_generator, signing_key):
        resolver = _resolver(signing_key.public_key)
        raw = token_generator.generate_id_token(signing_key, expires_in=-60)

        with pytest.raises(jwt.ExpiredSignatureError):
            await TokenParser().parse(raw, resolver)

        resolver.resolve_key.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_leeway_accepts_recently_expired_token(self, token_generator, signing_key):
        raw = token_generator.generate_id_token(signing_key, expires_in=-10)

        token = await TokenParser(leeway=60).parse(raw, _resolver(signing_key.public_key))

        assert token.valid is True

    @pytest.mark.asyncio
    async def test_malformed_token_never_reaches_resolver(self):
        resolver = _resolver(None)

        with pytest.raises(jwt.DecodeError) as exc_info:
            await TokenParser().parse("definitely.not.a-token", resolver)

        assert not isinstance(exc_info.value, jwt.InvalidSignatureError)
        resolver.resolve_key.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disallowed_algorithm(self, signing_key):
        raw = jwt.encode({"iss": "https://idp.example", "sub": "user-42"}, "secret", algorithm="HS256")

        with pytest.raises(jwt.InvalidAlgorithmError):
            await TokenParser(["RS256"]).parse(raw, _resolver(signing_key.public_key))

    @pytest.mark.asyncio
    async def test_resolver_error_propagates(self, token_generator, signing_key):
        resolver = MagicMock()
        resolver.resolve_key = AsyncMock(side_effect=LookupError("no key"))

        with pytest.raises(LookupError):
            await TokenParser().parse(token_generator.generate_id_token(signing_key), resolver)
