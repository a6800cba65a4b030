"""
Canonical Message
=================
Deterministic message construction for request signing.

The message is the newline-joined sequence:

    METHOD
    md5(body) hex digest
    content-type (lower-cased)
    timestamp header value
    custom headers block ("name: v1, v2" lines, in configured order)
    path[?query]
"""

import hashlib

from .config import SigningConfig
from .request import RequestView

SEPARATOR = "\n"


def hash_body(body: bytes) -> str:
    """MD5 hex digest of the raw request body."""
    return hashlib.md5(body or b"").hexdigest()


def header_value(request: RequestView, name: str) -> str:
    """All values of a header joined with ``", "``; empty string if absent."""
    return ", ".join(request.header(name))


def canonicalize_headers(request: RequestView, names) -> str:
    """
    Render the configured custom headers as ``name: value`` lines.

    Absent headers keep their line with an empty value.
    """
    return SEPARATOR.join(
        f"{name.lower()}: {header_value(request, name)}" for name in names
    )


def build_message(request: RequestView, config: SigningConfig) -> str:
    """
    Build the canonical message for a request.

    Args:
        request: The request to describe
        config: Signing configuration (timestamp header, custom headers)

    Returns:
        The message string the HMAC is computed over
    """
    return SEPARATOR.join([
        request.method.upper(),
        hash_body(request.body),
        header_value(request, "content-type").lower(),
        header_value(request, config.timestamp_header_name),
        canonicalize_headers(request, config.custom_header_names),
        request.path_and_query,
    ])
