"""
Token validation package.

Validates OpenID Connect ID tokens issued by registered providers:

- The 'iss' claim must name a registered provider.
- The 'aud' claim must contain one of that provider's client ids.
- The 'sub' claim must be a non-empty string.
- The signature must verify against the issuer's signing key; on a mismatch
  the issuer's cached keys are flushed and the token is verified once more.
"""

from .token_validator import (
    ClaimValidatingKeyResolver,
    IDTokenValidator,
    RenewingKeyResolver,
    jwt_error_to_openid_error,
)

__all__ = [
    "ClaimValidatingKeyResolver",
    "IDTokenValidator",
    "RenewingKeyResolver",
    "jwt_error_to_openid_error",
]
