"""
HMAC Auth Configuration
=======================
Signing configuration and environment-driven defaults.
"""

import hashlib
import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterable, Tuple, Union

from .exceptions import ConfigurationError

# Configuration from environment
DEFAULT_PROVIDER = os.getenv("HMAC_PROVIDER", "Acquia")
DEFAULT_CUSTOM_HEADERS = os.getenv("HMAC_CUSTOM_HEADERS", "")
DEFAULT_TIMESTAMP_HEADER = os.getenv("HMAC_TIMESTAMP_HEADER", "Date")
DEFAULT_ALLOWED_SKEW = os.getenv("HMAC_ALLOWED_SKEW", "+15 minutes")
DEFAULT_DIGEST_ALGORITHM = os.getenv("HMAC_DIGEST_ALGORITHM", "sha1")

SkewLike = Union[timedelta, int, float, str]

_UNIT_SECONDS = {
    "s": 1, "sec": 1, "second": 1,
    "m": 60, "min": 60, "minute": 60,
    "h": 3600, "hour": 3600,
    "d": 86400, "day": 86400,
}

_SKEW_PATTERN = re.compile(r"^\+?\s*(\d+(?:\.\d+)?)\s*([a-z]*?)s?$")


def parse_skew(value: SkewLike) -> timedelta:
    """
    Normalize an allowed clock skew to a timedelta.

    Accepts a timedelta, a number of seconds, or a relative time string
    such as ``"+15 minutes"``, ``"1 hour"`` or ``"900"``.

    Raises:
        ConfigurationError: if the value is negative or not understood
    """
    if isinstance(value, timedelta):
        skew = value
    elif isinstance(value, bool):
        raise ConfigurationError(f"Invalid allowed skew: {value!r}")
    elif isinstance(value, (int, float)):
        skew = timedelta(seconds=value)
    elif isinstance(value, str):
        match = _SKEW_PATTERN.match(value.strip().lower())
        if not match:
            raise ConfigurationError(f"Invalid allowed skew: {value!r}")
        amount, unit = match.groups()
        multiplier = _UNIT_SECONDS.get(unit or "s")
        if multiplier is None:
            raise ConfigurationError(f"Unknown time unit in allowed skew: {value!r}")
        skew = timedelta(seconds=float(amount) * multiplier)
    else:
        raise ConfigurationError(f"Invalid allowed skew: {value!r}")

    if skew < timedelta(0):
        raise ConfigurationError(f"Allowed skew must not be negative: {value!r}")
    return skew


def split_header_names(value: str) -> Tuple[str, ...]:
    """Split a comma-separated list of header names, keeping order."""
    return tuple(name.strip() for name in value.split(",") if name.strip())


@dataclass(frozen=True)
class SigningConfig:
    """
    Settings shared by the signer and the verifier.

    Header names are lower-cased on construction. The order of
    ``custom_header_names`` is part of the signed message, so both sides
    must configure the same sequence.
    """
    provider: str = DEFAULT_PROVIDER
    custom_header_names: Tuple[str, ...] = field(default_factory=tuple)
    timestamp_header_name: str = DEFAULT_TIMESTAMP_HEADER
    allowed_skew: timedelta = field(default_factory=lambda: parse_skew(DEFAULT_ALLOWED_SKEW))
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM

    def __post_init__(self):
        if not self.provider or " " in self.provider:
            raise ConfigurationError(f"Invalid provider token: {self.provider!r}")
        if not self.timestamp_header_name:
            raise ConfigurationError("Timestamp header name must not be empty")

        names: Iterable[str] = self.custom_header_names
        if isinstance(names, str):
            names = split_header_names(names)
        object.__setattr__(
            self, "custom_header_names", tuple(name.strip().lower() for name in names)
        )
        object.__setattr__(
            self, "timestamp_header_name", self.timestamp_header_name.strip().lower()
        )
        object.__setattr__(self, "allowed_skew", parse_skew(self.allowed_skew))

        algorithm = (self.digest_algorithm or "").strip().lower()
        try:
            hashlib.new(algorithm)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Unsupported digest algorithm: {self.digest_algorithm!r}")
        object.__setattr__(self, "digest_algorithm", algorithm)

    @classmethod
    def from_env(cls) -> "SigningConfig":
        """Build a config from the ``HMAC_*`` environment variables."""
        return cls(
            provider=os.getenv("HMAC_PROVIDER", DEFAULT_PROVIDER),
            custom_header_names=split_header_names(
                os.getenv("HMAC_CUSTOM_HEADERS", DEFAULT_CUSTOM_HEADERS)
            ),
            timestamp_header_name=os.getenv("HMAC_TIMESTAMP_HEADER", DEFAULT_TIMESTAMP_HEADER),
            allowed_skew=os.getenv("HMAC_ALLOWED_SKEW", DEFAULT_ALLOWED_SKEW),
            digest_algorithm=os.getenv("HMAC_DIGEST_ALGORITHM", DEFAULT_DIGEST_ALGORITHM),
        )
