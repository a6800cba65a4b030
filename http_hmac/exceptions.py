"""
HMAC Auth Exceptions
====================
Exception classes raised by the signing and verification helpers.
"""

from typing import Optional


class HmacAuthError(Exception):
    """Base exception for all http-hmac errors."""
    pass


class ConfigurationError(HmacAuthError):
    """Raised when host-supplied configuration cannot be used."""
    pass


class AuthorizationHeaderError(HmacAuthError):
    """Raised when an Authorization header value cannot be parsed."""

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message)
        self.value = value


class TimestampError(HmacAuthError):
    """Raised when a timestamp header value is missing or unparseable."""

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message)
        self.value = value


class KeyLookupError(HmacAuthError):
    """Raised by key stores when the backing storage cannot be queried."""

    def __init__(self, message: str, key_id: str = "", cause: Optional[Exception] = None):
        self.key_id = key_id
        self.cause = cause
        super().__init__(f"[{key_id}] {message}" if key_id else message)
