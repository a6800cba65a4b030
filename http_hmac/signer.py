"""
Request Signer
==============
Client-side signing of outgoing requests.
"""

from dataclasses import replace
from typing import Dict, Optional

from .canonical import build_message, header_value
from .config import SigningConfig
from .models import ApiKey
from .request import HeaderInput, RequestData, RequestView
from .signature import build_authorization_header, encode, sign
from .timestamps import format_http_date


class RequestSigner:
    """
    Signs requests for a given signing configuration.

    Usage:
        signer = RequestSigner(SigningConfig(custom_header_names=["x-custom"]))
        headers = signer.sign_headers(key, "POST", "/v1/items", body=b"{}",
                                      headers={"Content-Type": "application/json"})
    """

    def __init__(self, config: Optional[SigningConfig] = None, algorithm: Optional[str] = None):
        self.config = config or SigningConfig()
        self.algorithm = algorithm or self.config.digest_algorithm

    def get_message(self, request: RequestView) -> str:
        """Canonical message for a request."""
        return build_message(request, self.config)

    def get_signature(self, request: RequestView, secret: bytes) -> str:
        """Base64 signature of a request."""
        return encode(sign(self.get_message(request), secret, self.algorithm))

    def get_authorization(self, request: RequestView, key: ApiKey) -> str:
        """Full Authorization header value for a request."""
        return build_authorization_header(
            self.config.provider, key.id, self.get_signature(request, key.secret)
        )

    def sign_headers(
        self,
        key: ApiKey,
        method: str,
        path: str,
        query: str = "",
        body: bytes = b"",
        headers: HeaderInput = (),
    ) -> Dict[str, str]:
        """
        Create the headers to add to a request.

        The timestamp header is set to the current HTTP-date when the caller
        did not provide one.

        Returns:
            Dictionary with the timestamp and Authorization headers
        """
        request = RequestData(method=method, path=path, query=query, body=body, headers=headers)
        timestamp_name = self.config.timestamp_header_name
        timestamp = header_value(request, timestamp_name)
        if not timestamp:
            timestamp = format_http_date()
            request = replace(
                request, headers=request.headers + ((timestamp_name, timestamp),)
            )

        return {
            timestamp_name: timestamp,
            "Authorization": self.get_authorization(request, key),
        }
