"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# Registration order of the automatic ``Allow`` / CORS method lists.
SUPPORTED_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "OPTIONS")


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route. Immutable once added to a router."""

    method: str
    mask: str
    handler: Callable[..., Any]


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``params`` keeps placeholder order; handlers receive the values
    positionally.
    """

    route: Route
    params: tuple[tuple[str, str], ...] = ()

    @property
    def path_params(self) -> dict[str, str]:
        return dict(self.params)

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(value for _, value in self.params)
