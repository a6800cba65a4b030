"""
http-hmac
=========
Shared-secret HMAC signing and verification for HTTP requests.
"""

__version__ = "0.1.0"

# Models
from http_hmac.models import (
    ApiKey,
    Authenticated,
    AuthorizationValue,
    Rejected,
    RejectionKind,
    Verdict,
)

# Configuration
from http_hmac.config import SigningConfig, parse_skew

# Errors
from http_hmac.exceptions import (
    HmacAuthError,
    ConfigurationError,
    AuthorizationHeaderError,
    TimestampError,
    KeyLookupError,
)

# Requests
from http_hmac.request import RequestView, RequestData, from_httpx, from_starlette

# Canonical message / signatures
from http_hmac.canonical import build_message, hash_body
from http_hmac.signature import (
    sign,
    encode,
    verify_signature,
    build_authorization_header,
    parse_authorization_header,
    SIGNATURE_ALGORITHM,
)
from http_hmac.timestamps import format_http_date, parse_timestamp

# Key stores
from http_hmac.key_store import KeyStore, AsyncKeyStore, InMemoryKeyStore, VaultKeyStore

# Signing / verification
from http_hmac.signer import RequestSigner
from http_hmac.authenticator import Authenticator, authenticate, authenticate_async

__all__ = [
    # Models
    "ApiKey",
    "Authenticated",
    "AuthorizationValue",
    "Rejected",
    "RejectionKind",
    "Verdict",
    # Configuration
    "SigningConfig",
    "parse_skew",
    # Errors
    "HmacAuthError",
    "ConfigurationError",
    "AuthorizationHeaderError",
    "TimestampError",
    "KeyLookupError",
    # Requests
    "RequestView",
    "RequestData",
    "from_httpx",
    "from_starlette",
    # Canonical message / signatures
    "build_message",
    "hash_body",
    "sign",
    "encode",
    "verify_signature",
    "build_authorization_header",
    "parse_authorization_header",
    "SIGNATURE_ALGORITHM",
    "format_http_date",
    "parse_timestamp",
    # Key stores
    "KeyStore",
    "AsyncKeyStore",
    "InMemoryKeyStore",
    "VaultKeyStore",
    # Signing / verification
    "RequestSigner",
    "Authenticator",
    "authenticate",
    "authenticate_async",
]
