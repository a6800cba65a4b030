"""
Request Authenticator
=====================
Verifies signed requests against a key store.

Steps, in order: parse the Authorization header, look up the key,
recompute and compare the signature, then check the timestamp window.
Every failure is returned as a ``Rejected`` verdict; nothing here raises
for client-controlled input.
"""

import asyncio
import inspect
from datetime import datetime
from typing import Callable, Optional, Union

import structlog

from .canonical import build_message, header_value
from .config import SigningConfig
from .exceptions import AuthorizationHeaderError, TimestampError
from .key_store import AnyKeyStore
from .models import ApiKey, Authenticated, AuthorizationValue, Rejected, RejectionKind, Verdict
from .request import RequestView
from .signature import parse_authorization_header, sign, verify_signature
from .timestamps import is_within_skew, parse_timestamp, utcnow

logger = structlog.get_logger(__name__)


class Authenticator:
    """
    Authenticates requests signed with a shared secret.

    Args:
        key_store: Object with ``find(key_id)``, sync or async
        config: Signing configuration shared with the signer
        algorithm: HMAC digest algorithm, defaults to the config's
        clock: Returns the current aware datetime
        lookup_timeout: Seconds to wait for an async lookup before giving up
    """

    def __init__(
        self,
        key_store: AnyKeyStore,
        config: Optional[SigningConfig] = None,
        algorithm: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
        lookup_timeout: Optional[float] = None,
    ):
        self.key_store = key_store
        self.config = config or SigningConfig()
        self.algorithm = algorithm or self.config.digest_algorithm
        self.clock = clock
        self.lookup_timeout = lookup_timeout

    def authenticate(self, request: RequestView, authorization: Optional[str]) -> Verdict:
        """Authenticate a request using a synchronous key store."""
        parsed = self._parse(authorization)
        if isinstance(parsed, Rejected):
            return parsed

        try:
            key = self.key_store.find(parsed.id)
        except Exception as e:
            logger.error("hmac_key_lookup_failed", key_id=parsed.id, error=str(e))
            return self._reject(RejectionKind.KEY_LOOKUP_FAILED, parsed.id)

        if inspect.isawaitable(key):
            if inspect.iscoroutine(key):
                key.close()
            raise TypeError("Key store is asynchronous; use authenticate_async()")

        return self._verify(request, parsed, key)

    async def authenticate_async(self, request: RequestView, authorization: Optional[str]) -> Verdict:
        """
        Authenticate a request, awaiting the key store lookup.

        Synchronous stores are run in a worker thread so a slow backend does
        not block the event loop. ``lookup_timeout`` applies to both.
        """
        parsed = self._parse(authorization)
        if isinstance(parsed, Rejected):
            return parsed

        try:
            key = await asyncio.wait_for(self._lookup(parsed.id), timeout=self.lookup_timeout)
        except asyncio.TimeoutError:
            logger.error("hmac_key_lookup_timeout", key_id=parsed.id, timeout=self.lookup_timeout)
            return self._reject(RejectionKind.KEY_LOOKUP_FAILED, parsed.id)
        except Exception as e:
            logger.error("hmac_key_lookup_failed", key_id=parsed.id, error=str(e))
            return self._reject(RejectionKind.KEY_LOOKUP_FAILED, parsed.id)

        return self._verify(request, parsed, key)

    async def _lookup(self, key_id: str) -> Optional[ApiKey]:
        find = self.key_store.find
        if inspect.iscoroutinefunction(find):
            result = find(key_id)
        else:
            result = await asyncio.to_thread(find, key_id)
        # sync wrappers may still hand back an awaitable
        if inspect.isawaitable(result):
            result = await result
        return result

    def _parse(self, authorization: Optional[str]) -> Union[AuthorizationValue, Rejected]:
        try:
            return parse_authorization_header(authorization or "", self.config.provider)
        except AuthorizationHeaderError as e:
            logger.warning("hmac_malformed_header", error=str(e))
            return Rejected(RejectionKind.MALFORMED_HEADER)

    def _verify(self, request: RequestView, parsed: AuthorizationValue, key: Optional[ApiKey]) -> Verdict:
        if key is None:
            return self._reject(RejectionKind.UNKNOWN_KEY, parsed.id)

        expected = sign(build_message(request, self.config), key.secret, self.algorithm)
        if not verify_signature(expected, parsed.signature):
            return self._reject(RejectionKind.SIGNATURE_MISMATCH, parsed.id)

        try:
            timestamp = parse_timestamp(header_value(request, self.config.timestamp_header_name))
        except TimestampError:
            return self._reject(RejectionKind.MALFORMED_TIMESTAMP, parsed.id)

        if not is_within_skew(timestamp, self.config.allowed_skew, now=self.clock()):
            return self._reject(RejectionKind.EXPIRED, parsed.id)

        logger.debug("hmac_request_authenticated", key_id=key.id)
        return Authenticated(key)

    def _reject(self, reason: RejectionKind, key_id: str) -> Rejected:
        logger.warning("hmac_request_rejected", reason=reason.value, key_id=key_id)
        return Rejected(reason)


def authenticate(
    request: RequestView,
    authorization: Optional[str],
    key_store: AnyKeyStore,
    config: SigningConfig,
    algorithm: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Verdict:
    """
    One-shot verification of a request.

    Args:
        request: The inbound request
        authorization: Raw Authorization header value
        key_store: Synchronous key store
        config: Signing configuration
        algorithm: HMAC digest algorithm, defaults to the config's
        now: Current time override

    Returns:
        ``Authenticated(key)`` or ``Rejected(reason)``
    """
    clock = (lambda: now) if now is not None else utcnow
    return Authenticator(key_store, config, algorithm, clock).authenticate(request, authorization)


async def authenticate_async(
    request: RequestView,
    authorization: Optional[str],
    key_store: AnyKeyStore,
    config: SigningConfig,
    algorithm: Optional[str] = None,
    now: Optional[datetime] = None,
    lookup_timeout: Optional[float] = None,
) -> Verdict:
    """Async counterpart of ``authenticate``."""
    clock = (lambda: now) if now is not None else utcnow
    authenticator = Authenticator(key_store, config, algorithm, clock, lookup_timeout)
    return await authenticator.authenticate_async(request, authorization)
