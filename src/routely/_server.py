"""Granian integration."""

from __future__ import annotations

import os
import sys
from typing import Any

CONFIG_ENV = "ROUTELY_CONFIG"


def config_app() -> Any:
    """Granian factory: build an app from the route file named in ``ROUTELY_CONFIG``."""
    from routely.app import RoutelyApp
    from routely.config import load_table

    return RoutelyApp(load_table(os.environ[CONFIG_ENV]))


def serve(
    target: str,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    workers: int = 1,
    reload: bool = False,
    log_level: str = "info",
    factory: bool = False,
    granian_kwargs: dict[str, Any] | None = None,
) -> None:
    """Start an ASGI Granian server for *target*.

    *target* is a ``"module:var"`` import path, or with ``factory=True`` a
    ``"module:func"`` returning the app. Extra Granian options go in
    *granian_kwargs*.
    """
    from granian import Granian

    _print_banner(target, host=host, port=port, workers=workers, reload=reload)
    Granian(
        target=target,
        address=host,
        port=port,
        interface="asgi",
        workers=workers,
        reload=reload,
        log_level=log_level,
        factory=factory,
        **(granian_kwargs or {}),
    ).serve()


_BOLD_CYAN = "\033[1m\033[36m"
_GREEN = "\033[32m"
_RESET = "\033[0m"


def _print_banner(target: str, *, host: str, port: int, workers: int, reload: bool) -> None:
    def label(text: str) -> str:
        text = f"{text:<10}"
        return f"{_GREEN}{text}{_RESET}" if sys.stdout.isatty() else text

    rows = [("app", target)]
    if routes := os.environ.get(CONFIG_ENV):
        rows.append(("routes", routes))
    rows += [
        ("server", f"Granian on http://{host}:{port}"),
        ("workers", str(workers)),
        ("reload", "on" if reload else "off"),
    ]
    title = "routely" if not sys.stdout.isatty() else f"{_BOLD_CYAN}routely{_RESET}"
    print(title, *(f"  {label(name)} {value}" for name, value in rows), sep="\n", flush=True)
