"""
Shared error handling for the OIDC Access Layer.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ErrorCode(str, Enum):
    """Stable error codes surfaced to API callers."""

    # Authorization header
    AUTHORIZATION_HEADER_NOT_FOUND = "AUTHORIZATION_HEADER_NOT_FOUND"
    AUTHORIZATION_HEADER_WRONG_FORMAT = "AUTHORIZATION_HEADER_WRONG_FORMAT"
    AUTHORIZATION_HEADER_WRONG_SCHEME_NAME = "AUTHORIZATION_HEADER_WRONG_SCHEME_NAME"

    # Token parsing and verification
    JWT_VALIDATION_FAILURE = "JWT_VALIDATION_FAILURE"
    JWT_VALIDATION_UNKNOWN_FAILURE = "JWT_VALIDATION_UNKNOWN_FAILURE"

    # Claims
    INVALID_ISSUER_TYPE = "INVALID_ISSUER_TYPE"
    INVALID_ISSUER = "INVALID_ISSUER"
    ISSUER_NOT_FOUND = "ISSUER_NOT_FOUND"
    INVALID_AUDIENCE_TYPE = "INVALID_AUDIENCE_TYPE"
    INVALID_AUDIENCE = "INVALID_AUDIENCE"
    AUDIENCE_NOT_FOUND = "AUDIENCE_NOT_FOUND"
    INVALID_SUBJECT_TYPE = "INVALID_SUBJECT_TYPE"
    INVALID_SUBJECT = "INVALID_SUBJECT"

    # Signing key retrieval
    GET_OPENID_CONFIGURATION_FAILURE = "GET_OPENID_CONFIGURATION_FAILURE"
    DECODE_OPENID_CONFIGURATION_FAILURE = "DECODE_OPENID_CONFIGURATION_FAILURE"
    GET_JWKS_FAILURE = "GET_JWKS_FAILURE"
    DECODE_JWKS_FAILURE = "DECODE_JWKS_FAILURE"
    EMPTY_JWK = "EMPTY_JWK"
    EMPTY_JWK_KEY = "EMPTY_JWK_KEY"
    MARSHALLING_KEY = "MARSHALLING_KEY"
    KID_NOT_FOUND = "KID_NOT_FOUND"

    # Provider setup
    SETUP_ERROR_INVALID_ISSUER = "SETUP_ERROR_INVALID_ISSUER"
    SETUP_ERROR_INVALID_CLIENT_IDS = "SETUP_ERROR_INVALID_CLIENT_IDS"
    SETUP_ERROR_EMPTY_PROVIDER_COLLECTION = "SETUP_ERROR_EMPTY_PROVIDER_COLLECTION"


class OpenIDError(Exception):
    """Base exception for OpenID token validation.

    Every instance carries a stable ``code`` and the HTTP status a handler
    should answer with.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        http_status: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=request_id_var.get(),
            code=self.code.value,
            message=self.message,
            details=self.details
        )


class ValidationError(OpenIDError):
    """The token or the request carrying it failed validation."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        http_status: int = 401,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, http_status, details)


class SetupError(OpenIDError):
    """The provider registry is misconfigured."""

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, 500, details)


class KeyResolutionError(OpenIDError):
    """Signing key material could not be retrieved or prepared."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        http_status: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, http_status, details)
