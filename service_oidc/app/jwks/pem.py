"""
PEM decoding for RSA verification keys.
"""

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from shared.errors import ErrorCode, KeyResolutionError


def pem_to_rsa_public_key(pem: bytes) -> RSAPublicKey:
    """Decode PEM encoded key material into an RSA public key."""
    try:
        key = load_pem_public_key(pem)
    except (ValueError, TypeError) as exc:
        raise KeyResolutionError(
            ErrorCode.MARSHALLING_KEY,
            f"Unable to decode PEM signing key: {exc}"
        ) from exc

    if not isinstance(key, RSAPublicKey):
        raise KeyResolutionError(
            ErrorCode.MARSHALLING_KEY,
            f"Signing key is not an RSA public key: {type(key).__name__}"
        )

    return key
