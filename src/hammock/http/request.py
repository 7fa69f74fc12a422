"""Immutable HTTP request.

A read-only view handed to handlers. The body is parsed once, when the
request is built, into the per-verb data mapping that matches the
method: ``post_data`` for POST, ``put_data`` for PUT.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from hammock.http.body import parse_body, parse_query
from hammock.http.headers import Headers

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` carries no leading slash, matching how masks are written::

        Request(method="GET", path="items/7")
    """

    method: str
    path: str
    protocol: str = "HTTP/1.1"
    get_data: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    post_data: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    put_data: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    headers: Headers = field(default_factory=Headers)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "path", self.path.strip("/"))

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def origin(self) -> str | None:
        """The Origin header value."""
        return self.headers.get("origin")

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], body: bytes = b"") -> Request:
        """Create a Request from an ASGI HTTP scope and the full body.

        Raises ``BadRequest`` if the body is malformed.
        """
        headers = Headers.from_raw(scope.get("headers", ()))
        method = scope["method"].upper()
        data = parse_body(body, headers.get("content-type"))
        return cls(
            method=method,
            path=scope["path"],
            protocol=f"HTTP/{scope.get('http_version', '1.1')}",
            get_data=MappingProxyType(parse_query(scope.get("query_string", b""))),
            post_data=MappingProxyType(data) if method == "POST" else _EMPTY,
            put_data=MappingProxyType(data) if method == "PUT" else _EMPTY,
            headers=headers,
        )
