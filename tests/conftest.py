"""Shared fixtures for http-hmac tests."""

import pytest

from http_hmac import ApiKey, InMemoryKeyStore, RequestData, SigningConfig
from tests.helpers import FIXED_DATE


@pytest.fixture
def api_key():
    return ApiKey(id="abc123", secret=b"super-secret")


@pytest.fixture
def key_store(api_key):
    return InMemoryKeyStore({api_key.id: api_key.secret})


@pytest.fixture
def config():
    return SigningConfig(
        provider="Acquia",
        custom_header_names=["X-Custom-One", "X-Custom-Two"],
        timestamp_header_name="Date",
        allowed_skew="+15 minutes",
    )


@pytest.fixture
def request_data():
    return RequestData(
        method="post",
        path="/v1/items",
        query="page=2&sort=name",
        body=b'{"name": "widget"}',
        headers={
            "Content-Type": "Application/JSON",
            "Date": FIXED_DATE,
            "X-Custom-One": ["first", "second"],
            "X-Custom-Two": "only",
        },
    )
