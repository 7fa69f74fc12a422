"""Hammock application: registration, resources, and the ASGI entry point.

Mutable during setup, frozen on first use. Registering after the app
has frozen raises ``RuntimeError``::

    app = App(AppConfig(storage="sqlite:///app.db", resources={"posts": Post}))

    @app.get("items/:id")
    def show_item(id, request):
        return {"id": id}

    app.handle(Request("GET", "items/7")).json()  # {"id": "7"}
"""

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any, TypeAlias

import anyio
import anyio.to_thread

from hammock._internal.asgi import Receive, Scope, Send, read_body
from hammock.config import AppConfig
from hammock.data.database import Database
from hammock.data.model import Model
from hammock.errors import ConfigurationError
from hammock.http.request import Request
from hammock.http.response import Response
from hammock.routing.router import Router
from hammock.server.errors import handle_error
from hammock.server.handler import common_headers, handle_request, options_handler
from hammock.server.sender import send_response

logger = logging.getLogger("hammock.server")

Handler: TypeAlias = Callable[..., Any]


def _int_param(data: Any, name: str, default: int) -> int:
    try:
        value = int(data.get(name, default))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _without_id(data: Any) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key != "id"}


class App:
    """The hammock application.

    Routes are tried in registration order and the first match wins.
    The automatic ``OPTIONS *`` route is appended at freeze, after every
    user route and resource.
    """

    __slots__ = (
        "_db",
        "_freeze_lock",
        "_frozen",
        "_limiter",
        "_models",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router()
        self._models: list[type[Model]] = list(self.config.models)
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._limiter: anyio.CapacityLimiter | None = None

        storage = self.config.storage
        if isinstance(storage, str):
            self._db: Database | None = Database(storage, echo=self.config.echo)
        else:
            self._db = storage

    # -- Route registration --

    def register(self, method: str, mask: str, handler: Handler) -> Handler:
        """Append a route. Raises ``InvalidRouteError`` immediately on bad input."""
        self._check_not_frozen()
        self._router.add(method, mask, handler)
        return handler

    def _verb(self, method: str, mask: str, handler: Handler | None) -> Any:
        if handler is not None:
            return self.register(method, mask, handler)

        def decorator(func: Handler) -> Handler:
            return self.register(method, mask, func)

        return decorator

    def get(self, mask: str, handler: Handler | None = None) -> Any:
        """Register a GET route, directly or as a decorator."""
        return self._verb("GET", mask, handler)

    def post(self, mask: str, handler: Handler | None = None) -> Any:
        return self._verb("POST", mask, handler)

    def put(self, mask: str, handler: Handler | None = None) -> Any:
        return self._verb("PUT", mask, handler)

    def delete(self, mask: str, handler: Handler | None = None) -> Any:
        return self._verb("DELETE", mask, handler)

    def options(self, mask: str, handler: Handler | None = None) -> Any:
        return self._verb("OPTIONS", mask, handler)

    def resource(self, path: str, model_cls: type[Model]) -> None:
        """Register the standard REST routes for *model_cls* under *path*.

        ``POST path``, ``GET path/:id``, ``PUT path/:id``,
        ``DELETE path/:id`` and the paginated ``GET path`` listing.

        The listing's ``total`` is the row count of the whole table, not
        the number of entities on the returned page.
        """
        self._check_not_frozen()
        path = path.strip("/")
        key = path.rsplit("/", 1)[-1]

        def create(request: Request) -> dict[str, Any]:
            return model_cls.create(_without_id(request.post_data)).attributes

        def show(id: str, request: Request) -> dict[str, Any]:  # noqa: A002
            return model_cls.find_or_fail(id).attributes

        def update(id: str, request: Request) -> dict[str, Any]:  # noqa: A002
            entity = model_cls.find_or_fail(id)
            return entity.update_attributes(_without_id(request.put_data)).save_if_changed().attributes

        def destroy(id: str, request: Request) -> dict[str, Any]:  # noqa: A002
            return model_cls.find_or_fail(id).delete().attributes

        def listing(request: Request) -> dict[str, Any]:
            page = _int_param(request.get_data, "page", 1)
            per_page = _int_param(request.get_data, "per_page", 10)
            return {
                "total": model_cls.count(),
                "page": page,
                "per_page": per_page,
                key: [entity.attributes for entity in model_cls.all(page, per_page)],
            }

        self.register("POST", path, create)
        self.register("GET", f"{path}/:id", show)
        self.register("PUT", f"{path}/:id", update)
        self.register("DELETE", f"{path}/:id", destroy)
        self.register("GET", path, listing)
        if model_cls not in self._models:
            self._models.append(model_cls)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after the database connects::

            @app.on_startup
            def create_tables():
                app.db.execute_script(SCHEMA)
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Storage --

    @property
    def db(self) -> Database:
        """The configured database. Raises ``ConfigurationError`` if none."""
        if self._db is None:
            msg = "No storage configured. Set AppConfig(storage='sqlite:///app.db')."
            raise ConfigurationError(msg)
        return self._db

    @property
    def router(self) -> Router:
        return self._router

    # -- Request handling --

    def dispatch(self, request: Request) -> Any:
        """Route *request* and return the handler's raw result."""
        self._ensure_frozen()
        return self._router.dispatch(request)

    def handle(self, request: Request) -> Response:
        """Route, run and render *request*.

        Handler failures become error responses. Only a failed freeze
        (for example ``ConfigurationError`` when models are bound but no
        storage is configured) propagates.
        """
        self._ensure_frozen()
        return handle_request(request, self._router, self.config)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return
        if scope["type"] != "http":
            return

        self._ensure_frozen()
        body = await read_body(receive)
        try:
            request = Request.from_asgi(scope, body)
        except Exception as exc:
            fallback = Request(method=scope["method"], path=scope["path"])
            response = handle_error(exc, fallback, self.config.status_map).with_headers(
                common_headers(self.config)
            )
        else:
            if self._limiter is None:
                self._limiter = anyio.CapacityLimiter(1)
            response = await anyio.to_thread.run_sync(
                self.handle, request, limiter=self._limiter
            )
        await send_response(response, send)

    async def startup(self) -> None:
        """Freeze, connect the database, and run startup hooks."""
        self._ensure_frozen()
        if self._db is not None:
            self._db.connect()
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        """Run shutdown hooks, then disconnect the database."""
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result
        if self._db is not None:
            self._db.disconnect()

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        if self.config.log_level:
            logging.getLogger("hammock").setLevel(self.config.log_level.upper())

        # Before any route is added; a failed freeze leaves the router untouched.
        if self._models or self.config.resources:
            db = self.db

        # 1. Resources from config, after routes registered in code
        for path, model_cls in self.config.resources.items():
            self.resource(path, model_cls)

        # 2. Bind models to storage
        if self._models:
            db.register(*self._models)

        # 3. Catch-all preflight, last so user OPTIONS routes win
        self._router.add("OPTIONS", "*", options_handler)

        self._frozen = True
        logger.debug("App frozen with %d routes", len(self._router))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started handling requests. "
                "Register routes, resources and hooks before the first request."
            )
            raise RuntimeError(msg)
