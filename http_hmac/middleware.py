"""
Starlette / FastAPI Integration
===============================
Middleware that rejects requests without a valid HMAC signature.

Usage:
    app.add_middleware(
        HmacAuthMiddleware,
        key_store=InMemoryKeyStore({"abc123": "secret"}),
        config=SigningConfig(custom_header_names=["x-custom"]),
    )

    @app.get("/v1/items")
    async def list_items(api_key: ApiKey = Depends(get_api_key)):
        ...
"""

from typing import Optional, Set

from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
import structlog

from .authenticator import Authenticator
from .config import SigningConfig
from .key_store import AnyKeyStore
from .models import ApiKey, RejectionKind
from .request import from_starlette

logger = structlog.get_logger(__name__)

# Default excluded paths (health checks, metrics)
DEFAULT_EXCLUDED_PATHS = {"/health", "/ready", "/metrics"}


class HmacAuthMiddleware(BaseHTTPMiddleware):
    """
    Verifies the Authorization header of every request.

    On success the matched key is stored on ``request.state.api_key``.
    Failures get a 401; the rejection reason is only included in the body
    when ``expose_reason`` is set, so by default callers cannot tell a bad
    signature from an expired one.
    """

    def __init__(
        self,
        app,
        key_store: AnyKeyStore,
        config: Optional[SigningConfig] = None,
        algorithm: Optional[str] = None,
        excluded_paths: Optional[Set[str]] = None,
        expose_reason: bool = False,
        lookup_timeout: Optional[float] = None,
    ):
        super().__init__(app)
        self.authenticator = Authenticator(
            key_store,
            config=config,
            algorithm=algorithm,
            lookup_timeout=lookup_timeout,
        )
        self.excluded_paths = (
            excluded_paths if excluded_paths is not None else DEFAULT_EXCLUDED_PATHS
        )
        self.expose_reason = expose_reason

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        view = await from_starlette(request)
        verdict = await self.authenticator.authenticate_async(
            view, request.headers.get("authorization")
        )
        if not verdict.is_authenticated:
            return self._unauthorized_response(verdict.reason)

        request.state.api_key = verdict.key
        return await call_next(request)

    def _unauthorized_response(self, reason: RejectionKind) -> JSONResponse:
        content = {
            "error": "unauthorized",
            "message": "Request signature could not be verified.",
        }
        if self.expose_reason:
            content["code"] = reason.value
        return JSONResponse(
            status_code=401,
            content=content,
            headers={"WWW-Authenticate": self.authenticator.config.provider},
        )


def get_api_key(request: Request) -> ApiKey:
    """FastAPI dependency returning the key that signed the request."""
    api_key = getattr(request.state, "api_key", None)
    if api_key is None:
        logger.warning("hmac_api_key_missing", path=request.url.path)
        raise HTTPException(status_code=401, detail="Not authenticated")
    return api_key
