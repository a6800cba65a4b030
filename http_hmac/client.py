"""
httpx Integration
=================
Signs outgoing httpx requests.

Usage:
    auth = HmacAuth(ApiKey("abc123", b"secret"), SigningConfig())
    async with httpx.AsyncClient(base_url=url, auth=auth) as client:
        await client.post("/v1/items", json={"name": "x"})
"""

from typing import Generator, Optional

import httpx
import structlog

from .config import SigningConfig
from .models import ApiKey
from .request import from_httpx
from .signer import RequestSigner
from .timestamps import format_http_date

logger = structlog.get_logger(__name__)


class HmacAuth(httpx.Auth):
    """httpx auth flow adding the timestamp and Authorization headers."""

    requires_request_body = True

    def __init__(
        self,
        key: ApiKey,
        config: Optional[SigningConfig] = None,
        algorithm: Optional[str] = None,
    ):
        self.key = key
        self.signer = RequestSigner(config, algorithm)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        timestamp_name = self.signer.config.timestamp_header_name
        if timestamp_name not in request.headers:
            request.headers[timestamp_name] = format_http_date()

        request.headers["Authorization"] = self.signer.get_authorization(
            from_httpx(request), self.key
        )
        logger.debug(
            "hmac_request_signed",
            key_id=self.key.id,
            method=request.method,
            path=request.url.path,
        )
        yield request
