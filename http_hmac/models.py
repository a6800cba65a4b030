"""
HMAC Auth Models
================
Data models and enums for request signing and verification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class RejectionKind(str, Enum):
    """Reasons a request fails authentication."""
    MALFORMED_HEADER = "malformed_header"
    UNKNOWN_KEY = "unknown_key"
    KEY_LOOKUP_FAILED = "key_lookup_failed"
    SIGNATURE_MISMATCH = "signature_mismatch"
    MALFORMED_TIMESTAMP = "malformed_timestamp"
    EXPIRED = "expired"


@dataclass(frozen=True)
class ApiKey:
    """A shared-secret credential, owned by the host's key store."""
    id: str
    secret: bytes

    def __repr__(self) -> str:
        return f"ApiKey(id={self.id!r}, secret=<redacted>)"


@dataclass(frozen=True)
class AuthorizationValue:
    """Parsed form of ``<provider> <id>:<base64 signature>``."""
    provider: str
    id: str
    signature: bytes


@dataclass(frozen=True)
class Authenticated:
    """Verdict for a request whose signature and timestamp checked out."""
    key: ApiKey

    @property
    def is_authenticated(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """Verdict for a request that failed one of the verification steps."""
    reason: RejectionKind

    @property
    def is_authenticated(self) -> bool:
        return False


Verdict = Union[Authenticated, Rejected]
