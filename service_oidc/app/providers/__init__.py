"""
Provider registry package.

A provider is a trust anchor: an issuer plus the client identifiers it
issues ID tokens for. The validator reads providers through a zero-argument
source callable and checks the list is well formed before every use, so the
source may be swapped for a dynamic one without touching validation code.
"""

from .registry import (
    Provider,
    ProviderSource,
    StaticProviderSource,
    canonical_issuer,
    validate_providers,
)

__all__ = [
    "Provider",
    "ProviderSource",
    "StaticProviderSource",
    "canonical_issuer",
    "validate_providers",
]
