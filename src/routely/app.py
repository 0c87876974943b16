"""ASGI adapter that serves a :class:`RouteTable`."""

from __future__ import annotations

import asyncio
import inspect
import logging
import sys
import traceback
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from routely.errors import UnknownVerb
from routely.request import Request
from routely.response import JSONResponse, Response
from routely.verbs import Verb

if TYPE_CHECKING:
    from routely._types import ContextFactory, Receive, Scope, Send
    from routely.routing import RouteTable

logger = logging.getLogger("routely.app")


class RoutelyApp:
    """ASGI 3.0 application dispatching every HTTP request through *table*.

    Parameters
    ----------
    context_factory:
        Called as ``context_factory(scope, receive)`` to build the context
        passed to handlers. Defaults to :class:`Request`.
    debug:
        When ``True``, 500 responses include the full traceback.
    """

    def __init__(
        self,
        table: RouteTable,
        *,
        context_factory: ContextFactory | None = None,
        debug: bool = False,
    ) -> None:
        self.table = table
        self.context_factory: ContextFactory = context_factory or Request
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        context = self.context_factory(scope, receive)
        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, self._dispatch, context, scope["method"], scope["path"])
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.exception("handler failed for %s %s", scope["method"], scope["path"])
            body: dict[str, Any] = {"detail": "Internal Server Error"}
            if self.debug:
                body["traceback"] = traceback.format_exc()
            await JSONResponse(body, status_code=500).send(send)
            return

        await _send_response(result, send)

    def _dispatch(self, context: Any, method: str, path: str) -> Any:
        """Resolve and call the handler. Runs in the default executor.

        An async handler only creates its coroutine here; the caller awaits
        it on the event loop.
        """
        try:
            verb = Verb.parse(method)
        except UnknownVerb:
            return self.table.fallback(context)
        return self.table.dispatch(context, verb, path)

    # ------------------------------------------------------------------
    # Granian convenience
    # ------------------------------------------------------------------

    def run(
        self,
        host: str = "127.0.0.1",
        port: int = 8000,
        *,
        workers: int = 1,
        reload: bool = False,
        log_level: str = "info",
        **granian_kwargs: Any,
    ) -> None:
        """Start the app with Granian."""
        from routely._server import serve

        serve(
            _resolve_target(self),
            host=host,
            port=port,
            workers=workers,
            reload=reload,
            log_level=log_level,
            granian_kwargs=granian_kwargs or None,
        )


# ------------------------------------------------------------------
# Module-level helpers
# ------------------------------------------------------------------


def _resolve_target(app: RoutelyApp) -> str:
    """Derive a ``"module:var"`` string for the given app instance.

    Searches ``__main__`` for a module-level variable whose value *is* the
    app, so Granian workers can import it.
    """
    main = sys.modules.get("__main__")
    var_name = next((name for name, val in vars(main).items() if val is app), None) if main else None
    if var_name is None:
        raise RuntimeError(
            "Cannot auto-detect Granian target: no module-level variable in "
            "__main__ references this RoutelyApp instance."
        )

    spec = getattr(main, "__spec__", None)
    module_name: str | None = spec.name if spec else None
    if not module_name:
        main_file = getattr(main, "__file__", None)
        module_name = Path(main_file).stem if main_file else None
    return f"{module_name}:{var_name}"


async def _handle_lifespan(receive: Receive, send: Send) -> None:
    """Minimal lifespan responder: accept startup and shutdown with no-ops."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return


async def _send_response(response: Any, send: Send) -> None:
    if isinstance(response, Response):
        await response.send(send)
    elif isinstance(response, dict | list | BaseModel):
        await JSONResponse(response).send(send)
    elif response is None:
        await Response(status_code=204).send(send)
    else:
        await Response(str(response)).send(send)
