"""
Typed access to the claims and header of a parsed ID token.

Claim values arrive as unverified JSON. Every read goes through this module
and comes back as a tagged ``Claim`` so the matchers never inspect raw types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

ISSUER_CLAIM = "iss"
AUDIENCE_CLAIM = "aud"
SUBJECT_CLAIM = "sub"
KEY_ID_HEADER = "kid"


class ClaimKind(Enum):
    """Shape of a claim value."""

    ABSENT = "absent"
    STRING = "string"
    STRING_LIST = "string_list"
    WRONG_TYPE = "wrong_type"


@dataclass(frozen=True)
class Claim:
    """A claim read from a token, tagged with its shape.

    ``value`` is a ``str`` for STRING, a tuple of ``str`` for STRING_LIST,
    ``None`` for ABSENT and the raw value for WRONG_TYPE.
    """

    name: str
    kind: ClaimKind
    value: Any = None

    @property
    def type_name(self) -> str:
        """Python type name of the raw value, for error messages."""
        if self.kind is ClaimKind.ABSENT:
            return "None"
        if self.kind is ClaimKind.STRING_LIST:
            return "list"
        return type(self.value).__name__


def string_claim(claims: Mapping[str, Any], name: str) -> Claim:
    """Read a claim that must be a single string."""
    if name not in claims or claims[name] is None:
        return Claim(name, ClaimKind.ABSENT)

    value = claims[name]
    if isinstance(value, str):
        return Claim(name, ClaimKind.STRING, value)
    return Claim(name, ClaimKind.WRONG_TYPE, value)


def string_or_list_claim(claims: Mapping[str, Any], name: str) -> Claim:
    """Read a claim that may be a string or a list of strings.

    A scalar string is returned as a one-element STRING_LIST. A list holding
    any non-string element is WRONG_TYPE.
    """
    if name not in claims or claims[name] is None:
        return Claim(name, ClaimKind.ABSENT)

    value = claims[name]
    if isinstance(value, str):
        return Claim(name, ClaimKind.STRING_LIST, (value,))
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, str) for item in value):
            return Claim(name, ClaimKind.STRING_LIST, tuple(value))
    return Claim(name, ClaimKind.WRONG_TYPE, value)


def issuer_claim(claims: Mapping[str, Any]) -> Claim:
    return string_claim(claims, ISSUER_CLAIM)


def audience_claim(claims: Mapping[str, Any]) -> Claim:
    return string_or_list_claim(claims, AUDIENCE_CLAIM)


def subject_claim(claims: Mapping[str, Any]) -> Claim:
    return string_claim(claims, SUBJECT_CLAIM)


def key_id(header: Optional[Mapping[str, Any]]) -> str:
    """Return the ``kid`` header, or an empty string when absent or not a string."""
    if not header:
        return ""
    kid = header.get(KEY_ID_HEADER)
    return kid if isinstance(kid, str) else ""
