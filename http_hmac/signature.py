"""
Signature Functions
===================
HMAC computation and Authorization header handling.
"""

import base64
import binascii
import hmac

from .exceptions import AuthorizationHeaderError, ConfigurationError
from .models import AuthorizationValue

# Configuration
SIGNATURE_ALGORITHM = "sha1"


def sign(message: str, secret: bytes, algorithm: str = SIGNATURE_ALGORITHM) -> bytes:
    """
    Compute the raw HMAC digest of a canonical message.

    Args:
        message: Canonical message
        secret: Shared secret
        algorithm: hashlib algorithm name (SHA-1 for wire compatibility)

    Returns:
        Raw digest bytes
    """
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    try:
        return hmac.new(secret, message.encode("utf-8"), algorithm.lower()).digest()
    except ValueError:
        raise ConfigurationError(f"Unsupported digest algorithm: {algorithm!r}")


def encode(digest: bytes) -> str:
    """Base64-encode a raw digest."""
    return base64.b64encode(digest).decode("ascii")


def verify_signature(expected: bytes, provided: bytes) -> bool:
    """Compare two digests in constant time."""
    return hmac.compare_digest(expected, provided)


def build_authorization_header(provider: str, key_id: str, signature: str) -> str:
    """Assemble ``"<provider> <id>:<base64 signature>"``."""
    return f"{provider} {key_id}:{signature}"


def parse_authorization_header(value: str, provider: str) -> AuthorizationValue:
    """
    Parse an Authorization header value.

    The provider is everything before the first space; the id is everything
    up to the first colon after that, and the signature is the rest. Ids
    containing a colon therefore cannot be represented.

    Raises:
        AuthorizationHeaderError: if the shape, the provider or the base64
            signature is invalid
    """
    if not value:
        raise AuthorizationHeaderError("Missing Authorization header", value)

    found_provider, sep, credentials = value.strip().partition(" ")
    if not sep:
        raise AuthorizationHeaderError("Authorization header has no credentials", value)
    if found_provider != provider:
        raise AuthorizationHeaderError(
            f"Unexpected authorization provider {found_provider!r}", value
        )

    key_id, sep, encoded = credentials.partition(":")
    if not sep or not key_id or not encoded:
        raise AuthorizationHeaderError("Expected '<id>:<signature>' credentials", value)

    try:
        signature = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise AuthorizationHeaderError("Signature is not valid base64", value)

    return AuthorizationValue(provider=found_provider, id=key_id, signature=signature)
