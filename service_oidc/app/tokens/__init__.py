"""
Token parsing package.

Wraps PyJWT so that a key resolver sees the token's unverified header and
claims before the signature is checked, and so that a signature mismatch
surfaces as ``jwt.InvalidSignatureError`` distinct from every other failure.
"""

from .parser import KeyResolver, Token, TokenParser

__all__ = ["KeyResolver", "Token", "TokenParser"]
