"""
Request Views
=============
The read-only request surface the canonicalizer consumes, plus adapters
for plain values, Starlette requests and httpx requests.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Protocol, Sequence, Tuple, Union

HeaderInput = Union[
    Mapping[str, Union[str, Sequence[str]]],
    Iterable[Tuple[str, str]],
]


class RequestView(Protocol):
    """Anything exposing method, body, headers and resource of a request."""

    method: str
    body: bytes
    path_and_query: str

    def header(self, name: str) -> List[str]:
        """Return every value of ``name`` (case-insensitive), in order."""
        ...


def _normalize_headers(headers: HeaderInput) -> Tuple[Tuple[str, str], ...]:
    if isinstance(headers, Mapping):
        items = []
        for name, value in headers.items():
            if isinstance(value, (list, tuple)):
                items.extend((name, v) for v in value)
            else:
                items.append((name, value))
    else:
        items = list(headers)
    return tuple((name.lower(), str(value)) for name, value in items)


@dataclass(frozen=True)
class RequestData:
    """
    A plain request value.

    Headers may be given as a mapping (values may be lists for repeated
    headers) or as a sequence of ``(name, value)`` pairs.
    """
    method: str
    path: str
    query: str = ""
    body: bytes = b""
    headers: HeaderInput = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "headers", _normalize_headers(self.headers))
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))

    @property
    def path_and_query(self) -> str:
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    def header(self, name: str) -> List[str]:
        name = name.lower()
        return [value for key, value in self.headers if key == name]


async def from_starlette(request) -> RequestData:
    """
    Snapshot a ``starlette.requests.Request``.

    Reads the body, which Starlette caches on the request so downstream
    handlers can still read it. The undecoded path is used so the resource
    matches what the client signed.
    """
    body = await request.body()
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return RequestData(
        method=request.method,
        path=path,
        query=query,
        body=body,
        headers=request.headers.items(),
    )


def from_httpx(request) -> RequestData:
    """
    Snapshot an ``httpx.Request``.

    The request body must already be read (``httpx.Auth`` flows get this by
    setting ``requires_request_body``).
    """
    raw_path = request.url.raw_path.decode("ascii")
    path, _, query = raw_path.partition("?")
    return RequestData(
        method=request.method,
        path=path,
        query=query,
        body=request.content,
        headers=request.headers.multi_items(),
    )
