"""Hammock exception hierarchy.

Shared across Router, App, the request pipeline, and the data layer so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class HammockError(Exception):
    """Base for all hammock-specific errors."""


class ConfigurationError(HammockError):
    """Raised when app configuration is invalid."""


class RouteRegistrationError(HammockError):
    """Raised when a route cannot be registered.

    Surfaces immediately at registration time; never reaches dispatch.
    """


class InvalidRouteError(RouteRegistrationError):
    """Unsupported method, non-string mask, or non-callable handler."""


class MissingRouteError(HammockError):
    """No registered route matches the request."""

    def __init__(self, method: str = "", path: str = "") -> None:
        self.method = method
        self.path = path
        super().__init__(f"No route matches {method} {path!r}")


@dataclass(frozen=True, slots=True)
class HTTPError(HammockError):
    """An error that maps directly to an HTTP status code.

    Handlers may raise these; the error mapper uses ``status`` as-is.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400: the request could not be understood, e.g. a malformed body."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404: the requested thing does not exist."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class InternalServerError(HTTPError):  # noqa: N818
    """500: generic failure."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)
