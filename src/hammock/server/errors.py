"""Error handling pipeline for hammock requests.

Every failure raised during dispatch lands here exactly once. It is
logged, mapped to a status code, and rendered as the HTTP status line::

    HTTP/1.1 404 Not Found
"""

import logging
from collections.abc import Mapping
from http import HTTPStatus

from hammock.errors import HTTPError
from hammock.http.request import Request
from hammock.http.response import Response

logger = logging.getLogger("hammock.server")


def reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def status_line(protocol: str, status: int) -> str:
    """``"HTTP/1.1 404 Not Found"``."""
    return f"{protocol} {status} {reason_phrase(status)}".rstrip()


def status_for(exc: BaseException, exception_map: Mapping[type[Exception], int]) -> int:
    """Resolve the status for *exc*.

    The exception map is consulted along the MRO, most specific class
    first. ``HTTPError`` carries its own status. Anything else is 500.
    """
    for cls in type(exc).__mro__:
        status = exception_map.get(cls)  # type: ignore[call-overload]
        if status is not None:
            return status
    if isinstance(exc, HTTPError):
        return exc.status
    return 500


def handle_error(
    exc: Exception,
    request: Request,
    exception_map: Mapping[type[Exception], int],
) -> Response:
    """Log *exc* and render it as a status-line response."""
    status = status_for(exc, exception_map)
    logger.exception(
        "%s %s -> %d (%s)",
        request.method,
        request.path,
        status,
        type(exc).__name__,
        exc_info=exc,
    )
    line = status_line(request.protocol, status)
    return Response(
        body=line,
        status=status,
        content_type="text/html",
        headers=(("Status", line),),
    )
