"""Application configuration.

AppConfig is a frozen dataclass. The exception map, storage binding and
CORS origin live here; ``App`` reads them when it freezes.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from hammock.data.errors import RecordNotFoundError
from hammock.errors import MissingRouteError

if TYPE_CHECKING:
    from hammock.data.database import Database
    from hammock.data.model import Model

DEFAULT_EXCEPTION_MAP: Mapping[type[Exception], int] = MappingProxyType(
    {
        RecordNotFoundError: 404,
        MissingRouteError: 404,
    }
)

DEFAULT_CACHE_CONTROL = "no-cache, no-store, must-revalidate"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(
            storage="sqlite:///app.db",
            resources={"posts": Post},
            allow_origin="https://example.com",
            exception_map={PermissionError: 403},
        )

    ``exception_map`` entries are merged over ``DEFAULT_EXCEPTION_MAP``.
    """

    debug: bool = False

    # Exception class -> HTTP status. Unmapped failures become 500.
    exception_map: Mapping[type[Exception], int] = field(
        default_factory=lambda: MappingProxyType({})
    )

    # Storage: a Database, a connection URL, or None for no persistence.
    storage: "Database | str | None" = None
    echo: bool = False

    # Model classes bound to storage at startup.
    models: tuple["type[Model]", ...] = ()

    # Base path -> model class; each gets the standard REST routes.
    resources: Mapping[str, "type[Model]"] = field(default_factory=lambda: MappingProxyType({}))

    # CORS
    allow_origin: str | None = None

    # Sent with every response. Empty string disables the header.
    cache_control: str = DEFAULT_CACHE_CONTROL

    # Level applied to the "hammock" logger when the app freezes.
    log_level: str | None = None

    @property
    def status_map(self) -> dict[type[Exception], int]:
        """Defaults merged with ``exception_map``."""
        merged: dict[type[Exception], Any] = dict(DEFAULT_EXCEPTION_MAP)
        merged.update(self.exception_map)
        return merged
