"""
Key Stores
==========
Lookup contracts for shared secrets, with in-memory and HashiCorp Vault
backed implementations.

Usage:
    from http_hmac.key_store import VaultKeyStore

    store = VaultKeyStore(mount_point="secret", path_template="hmac/{key_id}")
    key = store.find("abc123")
"""

import os
import re
from typing import Awaitable, Dict, Mapping, Optional, Protocol, Union

import hvac
import structlog

from .exceptions import KeyLookupError
from .models import ApiKey

logger = structlog.get_logger(__name__)

# ids are interpolated into a Vault path
_SAFE_KEY_ID = re.compile(r"[A-Za-z0-9._-]+")


class KeyStore(Protocol):
    """Synchronous secret lookup. Returns None for unknown ids."""

    def find(self, key_id: str) -> Optional[ApiKey]:
        ...


class AsyncKeyStore(Protocol):
    """Asynchronous secret lookup. Returns None for unknown ids."""

    def find(self, key_id: str) -> Awaitable[Optional[ApiKey]]:
        ...


AnyKeyStore = Union[KeyStore, AsyncKeyStore]


def _as_bytes(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, bytes):
        return secret
    return secret.encode("utf-8")


class InMemoryKeyStore:
    """
    Key store over a host-owned ``{id: secret}`` mapping.

    The mapping is read on every lookup, never copied.
    """

    def __init__(self, secrets: Mapping[str, Union[str, bytes]]):
        self._secrets = secrets

    def find(self, key_id: str) -> Optional[ApiKey]:
        secret = self._secrets.get(key_id)
        if secret is None:
            return None
        return ApiKey(id=key_id, secret=_as_bytes(secret))


class VaultKeyStore:
    """
    Key store reading secrets from Vault KV v2.

    Each key lives at ``path_template.format(key_id=...)`` under
    ``mount_point``, with the secret in the ``secret_field`` entry.
    """

    def __init__(
        self,
        client: Optional[hvac.Client] = None,
        url: Optional[str] = None,
        token: Optional[str] = None,
        mount_point: str = "secret",
        path_template: str = "hmac-keys/{key_id}",
        secret_field: str = "secret",
    ):
        self.url = url or os.environ.get("VAULT_ADDR", "http://127.0.0.1:8200")
        self.token = token or os.environ.get("VAULT_TOKEN")
        self.mount_point = mount_point
        self.path_template = path_template
        self.secret_field = secret_field
        self._client = client

    @property
    def client(self) -> hvac.Client:
        """Lazy-loaded Vault client."""
        if self._client is None:
            self._client = hvac.Client(url=self.url, token=self.token)
        return self._client

    def find(self, key_id: str) -> Optional[ApiKey]:
        if not _SAFE_KEY_ID.fullmatch(key_id or "") or key_id in (".", ".."):
            logger.warning("vault_key_id_rejected", key_id=key_id)
            return None
        path = self.path_template.format(key_id=key_id)
        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=path,
                mount_point=self.mount_point,
                raise_on_deleted_version=True,
            )
        except hvac.exceptions.InvalidPath:
            logger.info("vault_key_not_found", key_id=key_id, mount_point=self.mount_point)
            return None
        except Exception as e:
            logger.error("vault_key_lookup_failed", key_id=key_id, error=str(e))
            raise KeyLookupError("Vault lookup failed", key_id=key_id, cause=e) from e

        data: Dict[str, object] = response["data"]["data"]
        secret = data.get(self.secret_field)
        if not isinstance(secret, (str, bytes)) or not secret:
            raise KeyLookupError(
                f"Vault secret has no {self.secret_field!r} field", key_id=key_id
            )
        return ApiKey(id=key_id, secret=_as_bytes(secret))
