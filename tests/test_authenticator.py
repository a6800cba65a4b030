"""
Authenticator Tests
===================
"""

import asyncio
import base64
from datetime import timedelta

import pytest

from http_hmac import (
    ApiKey,
    Authenticated,
    Authenticator,
    KeyLookupError,
    Rejected,
    RejectionKind,
    RequestData,
    RequestSigner,
    SigningConfig,
    authenticate,
    authenticate_async,
    format_http_date,
)
from tests.helpers import FIXED_NOW


def _with_date(request, date_value):
    headers = [(n, v) for n, v in request.headers if n != "date"] + [("date", date_value)]
    return RequestData(
        method=request.method,
        path=request.path,
        query=request.query,
        body=request.body,
        headers=headers,
    )


class FailingKeyStore:
    def find(self, key_id):
        raise KeyLookupError("backend down", key_id=key_id)


class AsyncKeyStore:
    def __init__(self, keys, delay=0.0):
        self.keys = keys
        self.delay = delay

    async def find(self, key_id):
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.keys.get(key_id)


class TestAuthenticate:
    """Tests for the verification pipeline."""

    def test_valid_request(self, api_key, key_store, config, request_data):
        """Valid signature within the window should authenticate."""
        authorization = RequestSigner(config).get_authorization(request_data, api_key)

        verdict = authenticate(request_data, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Authenticated(api_key)
        assert verdict.is_authenticated is True
        assert verdict.key.secret == b"super-secret"

    def test_malformed_header(self, key_store, config, request_data):
        verdict = authenticate(request_data, "Basic dXNlcjpwYXNz", key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.MALFORMED_HEADER)
        assert verdict.is_authenticated is False

    def test_missing_header(self, key_store, config, request_data):
        verdict = authenticate(request_data, None, key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.MALFORMED_HEADER)

    def test_unknown_key(self, key_store, config, request_data):
        """Unknown ids are reported as such, never as a signature mismatch."""
        stranger = ApiKey(id="nobody", secret=b"super-secret")
        authorization = RequestSigner(config).get_authorization(request_data, stranger)

        verdict = authenticate(request_data, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.UNKNOWN_KEY)

    def test_key_lookup_failure(self, api_key, config, request_data):
        """Backend errors are distinct from unknown keys."""
        authorization = RequestSigner(config).get_authorization(request_data, api_key)

        verdict = authenticate(request_data, authorization, FailingKeyStore(), config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.KEY_LOOKUP_FAILED)

    def test_wrong_secret(self, key_store, config, request_data):
        wrong = ApiKey(id="abc123", secret=b"not-the-secret")
        authorization = RequestSigner(config).get_authorization(request_data, wrong)

        verdict = authenticate(request_data, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.SIGNATURE_MISMATCH)

    def test_tampered_body(self, api_key, key_store, config, request_data):
        authorization = RequestSigner(config).get_authorization(request_data, api_key)
        tampered = RequestData(
            method=request_data.method,
            path=request_data.path,
            query=request_data.query,
            body=b"{}",
            headers=request_data.headers,
        )

        verdict = authenticate(tampered, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.SIGNATURE_MISMATCH)

    def test_expired_timestamp(self, api_key, key_store, config, request_data):
        """A timestamp 20 minutes old is outside a 15 minute window."""
        request = _with_date(request_data, format_http_date(FIXED_NOW - timedelta(minutes=20)))
        authorization = RequestSigner(config).get_authorization(request, api_key)

        verdict = authenticate(request, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.EXPIRED)

    def test_future_timestamp(self, api_key, key_store, config, request_data):
        """Skew applies in both directions."""
        request = _with_date(request_data, format_http_date(FIXED_NOW + timedelta(minutes=16)))
        authorization = RequestSigner(config).get_authorization(request, api_key)

        verdict = authenticate(request, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.EXPIRED)

    def test_timestamp_within_window(self, api_key, key_store, config, request_data):
        request = _with_date(request_data, format_http_date(FIXED_NOW - timedelta(minutes=14)))
        authorization = RequestSigner(config).get_authorization(request, api_key)

        verdict = authenticate(request, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Authenticated(api_key)

    def test_malformed_timestamp(self, api_key, key_store, config, request_data):
        """A signed but unparseable timestamp is its own rejection."""
        request = _with_date(request_data, "yesterday-ish")
        authorization = RequestSigner(config).get_authorization(request, api_key)

        verdict = authenticate(request, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.MALFORMED_TIMESTAMP)

    def test_signature_checked_before_timestamp(self, key_store, config, request_data):
        """A forged request with a bad timestamp reports the signature first."""
        request = _with_date(request_data, "garbage")
        forged = ApiKey(id="abc123", secret=b"guess")
        authorization = RequestSigner(config).get_authorization(request, forged)

        verdict = authenticate(request, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.SIGNATURE_MISMATCH)

    def test_authenticator_uses_clock(self, api_key, key_store, config, request_data):
        authorization = RequestSigner(config).get_authorization(request_data, api_key)
        authenticator = Authenticator(
            key_store, config, clock=lambda: FIXED_NOW + timedelta(hours=1)
        )

        assert authenticator.authenticate(request_data, authorization) == Rejected(RejectionKind.EXPIRED)

    def test_sync_call_with_async_store(self, api_key, config, request_data):
        """Async key stores need the async entry point."""
        authorization = RequestSigner(config).get_authorization(request_data, api_key)
        authenticator = Authenticator(AsyncKeyStore({}), config, clock=lambda: FIXED_NOW)

        with pytest.raises(TypeError):
            authenticator.authenticate(request_data, authorization)


class TestAuthenticateAsync:
    """Tests for the async verification entry point."""

    @pytest.mark.asyncio
    async def test_async_store(self, api_key, config, request_data):
        authorization = RequestSigner(config).get_authorization(request_data, api_key)
        store = AsyncKeyStore({api_key.id: api_key})

        verdict = await authenticate_async(request_data, authorization, store, config, now=FIXED_NOW)

        assert verdict == Authenticated(api_key)

    @pytest.mark.asyncio
    async def test_sync_store(self, api_key, key_store, config, request_data):
        """Synchronous stores also work from async code."""
        authorization = RequestSigner(config).get_authorization(request_data, api_key)

        verdict = await authenticate_async(request_data, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Authenticated(api_key)

    @pytest.mark.asyncio
    async def test_unknown_key(self, api_key, config, request_data):
        authorization = RequestSigner(config).get_authorization(request_data, api_key)

        verdict = await authenticate_async(
            request_data, authorization, AsyncKeyStore({}), config, now=FIXED_NOW
        )

        assert verdict == Rejected(RejectionKind.UNKNOWN_KEY)

    @pytest.mark.asyncio
    async def test_lookup_timeout(self, api_key, config, request_data):
        """A slow store past the timeout is a lookup failure."""
        authorization = RequestSigner(config).get_authorization(request_data, api_key)
        store = AsyncKeyStore({api_key.id: api_key}, delay=1.0)

        verdict = await authenticate_async(
            request_data, authorization, store, config, now=FIXED_NOW, lookup_timeout=0.01
        )

        assert verdict == Rejected(RejectionKind.KEY_LOOKUP_FAILED)

    @pytest.mark.asyncio
    async def test_lookup_error(self, api_key, config, request_data):
        authorization = RequestSigner(config).get_authorization(request_data, api_key)

        verdict = await authenticate_async(
            request_data, authorization, FailingKeyStore(), config, now=FIXED_NOW
        )

        assert verdict == Rejected(RejectionKind.KEY_LOOKUP_FAILED)

    @pytest.mark.asyncio
    async def test_sync_find_returning_awaitable(self, api_key, config, request_data):
        """A plain ``find`` that delegates to a coroutine is still awaited."""

        class DelegatingKeyStore:
            def __init__(self, keys):
                self._store = AsyncKeyStore(keys)

            def find(self, key_id):
                return self._store.find(key_id)

        authorization = RequestSigner(config).get_authorization(request_data, api_key)

        verdict = await authenticate_async(
            request_data, authorization, DelegatingKeyStore({api_key.id: api_key}), config, now=FIXED_NOW
        )

        assert verdict == Authenticated(api_key)


class TestDigestAlgorithm:
    """The configured digest is shared by signer and verifier."""

    def test_config_algorithm_used_by_signer(self, api_key, request_data):
        config = SigningConfig(digest_algorithm="sha256")
        authorization = RequestSigner(config).get_authorization(request_data, api_key)

        signature = base64.b64decode(authorization.split(":", 1)[1])

        assert len(signature) == 32

    def test_matching_algorithm_authenticates(self, api_key, key_store, request_data):
        config = SigningConfig(digest_algorithm="sha256")
        authorization = RequestSigner(config).get_authorization(request_data, api_key)

        verdict = authenticate(request_data, authorization, key_store, config, now=FIXED_NOW)

        assert verdict == Authenticated(api_key)

    def test_mismatched_algorithm_rejected(self, api_key, key_store, request_data):
        signer_config = SigningConfig(digest_algorithm="sha256")
        authorization = RequestSigner(signer_config).get_authorization(request_data, api_key)

        verdict = authenticate(request_data, authorization, key_store, SigningConfig(), now=FIXED_NOW)

        assert verdict == Rejected(RejectionKind.SIGNATURE_MISMATCH)
