"""
Claim matchers for ID token validation.

Each matcher reads one claim through the typed access layer and either
returns the validated value or raises a ValidationError with HTTP 401.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from shared.errors import ErrorCode, ValidationError

from ..providers import Provider, canonical_issuer
from .claims import ClaimKind, audience_claim, issuer_claim, subject_claim


def match_issuer(claims: Mapping[str, Any], providers: Sequence[Provider]) -> Provider:
    """Return the first registered provider whose issuer matches the 'iss' claim.

    The claim is compared verbatim and, for the Google issuer which is sent
    without a scheme, also in its URL form.
    """
    claim = issuer_claim(claims)

    if claim.kind is ClaimKind.WRONG_TYPE:
        raise ValidationError(
            ErrorCode.INVALID_ISSUER_TYPE,
            f"Invalid Issuer type: {claim.type_name}"
        )

    if claim.kind is ClaimKind.ABSENT or claim.value == "":
        raise ValidationError(
            ErrorCode.INVALID_ISSUER,
            "The token 'iss' claim was not found or was empty."
        )

    issuer = claim.value
    alias = canonical_issuer(issuer)

    for provider in providers:
        if issuer == provider.issuer or alias == provider.issuer:
            return provider

    raise ValidationError(
        ErrorCode.ISSUER_NOT_FOUND,
        f"No provider was registered with issuer: {issuer}",
        details={"issuer": issuer}
    )


def match_audience(claims: Mapping[str, Any], provider: Provider) -> str:
    """Return the audience matching one of the provider's client ids.

    Client ids are tried in configured order and, for each, audiences in
    claim order, so the first configured client id with any match wins.
    """
    claim = audience_claim(claims)

    if claim.kind is not ClaimKind.STRING_LIST:
        raise ValidationError(
            ErrorCode.INVALID_AUDIENCE_TYPE,
            f"Invalid Audiences type: {claim.type_name}"
        )

    audiences = claim.value
    for client_id in provider.client_ids:
        for audience in audiences:
            if audience == "":
                raise ValidationError(
                    ErrorCode.INVALID_AUDIENCE,
                    "The token 'aud' claim was not found or was empty."
                )
            if audience == client_id:
                return audience

    raise ValidationError(
        ErrorCode.AUDIENCE_NOT_FOUND,
        f"The provider {provider.issuer} does not have a client id matching "
        f"any of the token audiences {list(audiences)}",
        details={"issuer": provider.issuer, "audiences": list(audiences)}
    )


def validate_subject(claims: Mapping[str, Any]) -> str:
    """Return the 'sub' claim, which must be a non-empty string."""
    claim = subject_claim(claims)

    if claim.kind is ClaimKind.WRONG_TYPE:
        raise ValidationError(
            ErrorCode.INVALID_SUBJECT_TYPE,
            f"Invalid subject type: {claim.type_name}"
        )

    if claim.kind is ClaimKind.ABSENT or claim.value == "":
        raise ValidationError(
            ErrorCode.INVALID_SUBJECT,
            "The token 'sub' claim was not found or was empty."
        )

    return claim.value
