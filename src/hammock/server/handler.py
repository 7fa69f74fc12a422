"""Synchronous request pipeline.

One request is routed, handled and rendered before the next begins::

    Request -> Router.dispatch -> negotiate -> Response
                     |  (any exception)
                     +-> handle_error -> status-line Response

Every response, including error responses, gets the cache and CORS
headers from ``AppConfig``.
"""

import logging

from hammock.config import AppConfig
from hammock.http.request import Request
from hammock.http.response import Response
from hammock.routing.route import SUPPORTED_METHODS
from hammock.routing.router import Router
from hammock.server.errors import handle_error
from hammock.server.negotiation import negotiate

logger = logging.getLogger("hammock.server")

ALLOWED_METHODS = ", ".join(SUPPORTED_METHODS)


def common_headers(config: AppConfig) -> dict[str, str]:
    """Cache-control and CORS headers added to every response."""
    headers: dict[str, str] = {}
    if config.cache_control:
        headers["Cache-Control"] = config.cache_control
    headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
    headers["Access-Control-Allow-Headers"] = "Content-Type"
    if config.allow_origin:
        headers["Access-Control-Allow-Origin"] = config.allow_origin
    return headers


def options_handler(request: Request) -> Response:
    """Answer any OPTIONS request with the supported methods."""
    return Response(body="").with_header("Allow", ALLOWED_METHODS)


def handle_request(request: Request, router: Router, config: AppConfig) -> Response:
    """Process a single request through the full pipeline.

    Never raises: failures are mapped by ``handle_error``.
    """
    try:
        response = negotiate(router.dispatch(request))
    except Exception as exc:
        response = handle_error(exc, request, config.status_map)
    logger.debug("%s %s -> %d", request.method, request.path, response.status)
    return response.with_headers(common_headers(config))
