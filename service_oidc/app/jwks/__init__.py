"""
Signing key package.

Contains logic for retrieving and caching the public keys identity
providers sign ID tokens with, and for decoding them into verification keys.

Key points:
- Keys are discovered through each issuer's OpenID configuration document.
- Keys are cached per issuer until explicitly flushed; the validator flushes
  an issuer when a token signature no longer matches the cached key.
- Key id (kid) selects among several keys; a token without kid is accepted
  only when the issuer publishes exactly one signing key.
"""

from .client import SigningKeyCache
from .pem import pem_to_rsa_public_key

__all__ = ["SigningKeyCache", "pem_to_rsa_public_key"]
