"""
Registered OpenID providers and the static provider source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence, Tuple

from shared.config import BaseConfig
from shared.errors import ErrorCode, SetupError
from shared.logging import get_logger

# Google issues tokens whose 'iss' claim omits the scheme.
GOOGLE_ISSUER = "accounts.google.com"
GOOGLE_ISSUER_URL = "https://" + GOOGLE_ISSUER


@dataclass(frozen=True)
class Provider:
    """A trusted issuer and the client ids it issues tokens for."""

    issuer: str
    client_ids: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable of client ids but store an immutable tuple.
        object.__setattr__(self, "client_ids", tuple(self.client_ids))


ProviderSource = Callable[[], Sequence[Provider]]


def canonical_issuer(issuer: str) -> str:
    """Return the URL form of the one issuer known to be sent without a scheme."""
    if issuer == GOOGLE_ISSUER:
        return GOOGLE_ISSUER_URL
    return issuer


def validate_providers(providers: Sequence[Provider]) -> None:
    """Raise SetupError unless the provider list is usable for validation."""
    if not providers:
        raise SetupError(
            ErrorCode.SETUP_ERROR_EMPTY_PROVIDER_COLLECTION,
            "The collection of providers must contain at least one element."
        )

    for provider in providers:
        if not provider.issuer:
            raise SetupError(
                ErrorCode.SETUP_ERROR_INVALID_ISSUER,
                "Empty string issuer not allowed.",
                details={"provider": repr(provider)}
            )

        if not provider.client_ids or any(not cid for cid in provider.client_ids):
            raise SetupError(
                ErrorCode.SETUP_ERROR_INVALID_CLIENT_IDS,
                f"The provider {provider.issuer} must have at least one non-empty client id.",
                details={"issuer": provider.issuer}
            )


class StaticProviderSource:
    """Provider source serving a fixed list, typically loaded from settings."""

    def __init__(self, providers: Iterable[Provider]):
        self._providers: Tuple[Provider, ...] = tuple(providers)
        self.logger = get_logger("oidc.providers")

    def __call__(self) -> List[Provider]:
        return list(self._providers)

    @classmethod
    def from_config(cls, config: BaseConfig) -> "StaticProviderSource":
        """Build the source from the ``providers`` setting."""
        providers = [
            Provider(issuer=p.issuer, client_ids=tuple(p.client_ids))
            for p in config.providers
        ]
        source = cls(providers)
        source.logger.info(
            "Loaded OpenID providers",
            issuers=[p.issuer for p in providers]
        )
        return source
