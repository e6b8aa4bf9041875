"""
ID token parser backed by PyJWT.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Sequence

import jwt

from shared.logging import get_logger


@dataclass(frozen=True)
class Token:
    """A parsed ID token.

    ``valid`` is False while the token is handed to a key resolver: at that
    point header and claims are unverified input.
    """

    raw: str
    header: Dict[str, Any] = field(default_factory=dict)
    claims: Dict[str, Any] = field(default_factory=dict)
    valid: bool = False


class KeyResolver(Protocol):
    """Supplies the verification key for a token about to be verified."""

    async def resolve_key(self, token: Token) -> Any:
        ...


class TokenParser:
    """Parse and verify signed JWTs, asking a resolver for the key.

    The resolver is called exactly once per ``parse`` call, after the token
    structure is decoded and before the signature is verified. Audience and
    issuer are left to the resolver; expiry, not-before and issued-at are
    enforced here.
    """

    def __init__(self, algorithms: Optional[Sequence[str]] = None, leeway: int = 0):
        self.algorithms = list(algorithms or ["RS256"])
        self.leeway = leeway
        self.logger = get_logger("oidc.parser")

    async def parse(self, raw: str, resolver: KeyResolver) -> Token:
        """Return the verified token or raise a ``jwt.PyJWTError``.

        ``jwt.InvalidSignatureError`` is raised only when the token is well
        formed and the resolved key does not verify its signature. Exceptions
        raised by the resolver propagate unchanged.
        """
        header = jwt.get_unverified_header(raw)
        unverified = jwt.decode(raw, options={"verify_signature": False})

        key = await resolver.resolve_key(Token(raw=raw, header=header, claims=unverified))

        claims = jwt.decode(
            raw,
            key,
            algorithms=self.algorithms,
            options={"verify_aud": False},
            leeway=self.leeway,
        )

        self.logger.debug("Token signature verified", alg=header.get("alg"), kid=header.get("kid"))
        return Token(raw=raw, header=header, claims=claims, valid=True)
