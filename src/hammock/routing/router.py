"""Ordered route registry with first-match dispatch.

Routes are tried in the order they were registered. The first route
whose method equals the request method and whose mask matches the path
wins. There is no specificity ranking, so register literal routes such
as ``posts/new`` before ``posts/:id`` if both should be reachable::

    router = Router()
    router.add("GET", "posts/new", new_post_form)
    router.add("GET", "posts/:id", show_post)
    router.dispatch(request)  # calls show_post("7", request) for GET posts/7
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from hammock.errors import InvalidRouteError, MissingRouteError
from hammock.routing.mask import MaskCache
from hammock.routing.route import SUPPORTED_METHODS, Route, RouteMatch

if TYPE_CHECKING:
    from hammock.http.request import Request

logger = logging.getLogger("hammock.routing")


def normalize_path(path: str) -> str:
    """Strip the leading and trailing slash: ``"/posts/7/"`` -> ``"posts/7"``."""
    return path.strip("/")


class Router:
    """Ordered route registry.

    Owns the ``MaskCache`` its routes are compiled through, so two
    routers never share compiled state.
    """

    __slots__ = ("_routes", "masks")

    def __init__(self, masks: MaskCache | None = None) -> None:
        self._routes: list[Route] = []
        self.masks = masks if masks is not None else MaskCache()

    def add(self, method: str, mask: str, handler: Callable[..., Any]) -> Route:
        """Append a route. Raises ``InvalidRouteError`` on bad arguments."""
        if not isinstance(method, str) or method.upper() not in SUPPORTED_METHODS:
            msg = (
                f"Unsupported HTTP method {method!r}. "
                f"Supported: {', '.join(SUPPORTED_METHODS)}"
            )
            raise InvalidRouteError(msg)
        if not isinstance(mask, str):
            msg = f"Route path must be a string, got {type(mask).__name__}"
            raise InvalidRouteError(msg)
        if not callable(handler):
            msg = f"Route handler for {mask!r} must be callable, got {type(handler).__name__}"
            raise InvalidRouteError(msg)

        route = Route(method=method.upper(), mask=normalize_path(mask), handler=handler)
        # Compile eagerly so malformed masks fail at registration.
        self.masks.compile(route.mask)
        self._routes.append(route)
        logger.debug("Registered %s %r", route.method, route.mask)
        return route

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def match(self, method: str, path: str) -> RouteMatch:
        """Return the first route matching *method* and *path*.

        Raises ``MissingRouteError`` if no route matches.
        """
        method = method.upper()
        path = normalize_path(path)
        for route in self._routes:
            if route.method != method:
                continue
            compiled = self.masks.compile(route.mask)
            values = compiled.match(path)
            if values is not None:
                params = tuple(zip(compiled.param_names, values, strict=True))
                return RouteMatch(route=route, params=params)
        raise MissingRouteError(method, path)

    def dispatch(self, request: Request) -> Any:
        """Invoke the matching handler as ``handler(*params, request)``.

        Returns whatever the handler returns.
        """
        match = self.match(request.method, request.path)
        logger.debug(
            "%s %s -> %r %s",
            request.method,
            request.path,
            match.route.mask,
            match.path_params,
        )
        return match.route.handler(*match.values, request)
