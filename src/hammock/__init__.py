"""Hammock: a minimal REST micro-framework.

A path-mask router with plain-callable handlers, paired with a thin
active-record layer over SQLite.

Basic usage::

    from hammock import App

    app = App()

    @app.get("items/:id")
    def show_item(id, request):
        return {"id": id}

Persistence::

    from hammock import App, AppConfig, Field, Model

    class Post(Model):
        fields = (Field("title", "string"),)

    app = App(AppConfig(storage="sqlite:///app.db", resources={"posts": Post}))
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "Database",
    "Field",
    "HTTPError",
    "HammockError",
    "InvalidRouteError",
    "MissingRouteError",
    "Model",
    "NotFound",
    "RecordNotFoundError",
    "Request",
    "Response",
    "accessor",
    "mutator",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import hammock`` fast while providing a clean top-level API.
    """
    if name == "App":
        from hammock.app import App

        return App

    if name == "AppConfig":
        from hammock.config import AppConfig

        return AppConfig

    if name in ("Request", "Response"):
        from hammock import http as _http

        return getattr(_http, name)

    if name in ("Database", "Field", "Model", "RecordNotFoundError", "accessor", "mutator"):
        from hammock import data as _data

        return getattr(_data, name)

    if name in (
        "BadRequest",
        "ConfigurationError",
        "HTTPError",
        "HammockError",
        "InvalidRouteError",
        "MissingRouteError",
        "NotFound",
    ):
        from hammock import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
