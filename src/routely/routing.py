"""Ordered route table with first-match-wins dispatch.

Declarations are compiled once into an immutable :class:`RouteTable`.
Dispatch walks the table in declaration order: a route whose verb differs
is skipped without touching its pattern, a route whose pattern does not
match or whose captures fail to parse is skipped, and the first route
that fully matches has its handler called. When nothing matches the
fallback is called with the context alone.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from routely.cache import PatternCache, compile_template
from routely.errors import BuildError, DuplicateHome, MissingFallback
from routely.params import ParamType, parse_value
from routely.template import RoutePattern
from routely.validation import (
    validate_fallback,
    validate_handler_signature,
    validate_return_types,
)
from routely.verbs import Verb

logger = logging.getLogger("routely.routing")


class RouteDecl(BaseModel):
    """One route declaration: ``{verb, path template, handler}``."""

    model_config = ConfigDict(frozen=True)

    verb: Verb
    path: str
    handler: Callable[..., Any]
    name: str | None = None

    @field_validator("verb", mode="before")
    @classmethod
    def parse_verb(cls, value: Any) -> Verb:
        return Verb.parse(value)


@dataclass(frozen=True, slots=True)
class Route:
    """A compiled route table entry."""

    verb: Verb
    pattern: RoutePattern
    param_types: tuple[ParamType, ...]
    handler: Callable[..., Any]
    name: str | None = None

    @property
    def path(self) -> str:
        return self.pattern.template

    def parse(self, path: str) -> tuple[Any, ...] | None:
        """Return the typed path values if *path* fully matches, else ``None``."""
        raw = self.pattern.match(path)
        if raw is None:
            return None
        values = []
        for param_type, text in zip(self.param_types, raw, strict=True):
            value, ok = parse_value(param_type, text)
            if not ok:
                return None
            values.append(value)
        return tuple(values)

    def __repr__(self) -> str:
        return f"Route({self.verb.value!r}, {self.path!r})"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of resolving a request against a table."""

    route: Route
    values: tuple[Any, ...]

    @property
    def params(self) -> dict[str, Any]:
        return dict(zip(self.route.pattern.param_names, self.values, strict=True))


class RouteTable:
    """Frozen, ordered routes plus the fallback handler.

    Safe to share between threads: nothing is mutated after construction.
    Calling the table is the same as calling :meth:`dispatch`.
    """

    __slots__ = ("_fallback", "_routes")

    def __init__(self, routes: Iterable[Route], fallback: Callable[..., Any]) -> None:
        self._routes: tuple[Route, ...] = tuple(routes)
        self._fallback = fallback

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    @property
    def fallback(self) -> Callable[..., Any]:
        return self._fallback

    @property
    def home(self) -> Route | None:
        if self._routes and self._routes[0].pattern.is_home:
            return self._routes[0]
        return None

    def resolve(self, verb: Verb | str, path: str) -> RouteMatch | None:
        """Return the route that would handle the request, without calling it."""
        for route in self._routes:
            if route.verb != verb:
                continue
            values = route.parse(path)
            if values is not None:
                return RouteMatch(route, values)
        return None

    def dispatch(self, context: Any, verb: Verb | str, path: str) -> Any:
        """Call the first fully matching handler, or the fallback.

        Handlers receive ``(context, *values)``, the fallback receives
        ``(context)``. The result is returned unchanged, so an async handler
        yields its coroutine. Handler exceptions propagate.
        """
        match = self.resolve(verb, path)
        if match is None:
            return self._fallback(context)
        return match.route.handler(context, *match.values)

    __call__ = dispatch

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({len(self._routes)} routes, fallback={_handler_name(self._fallback)})"


def _handler_name(handler: Callable[..., Any]) -> str:
    return getattr(handler, "__name__", repr(handler))


def _coerce_decl(decl: RouteDecl | Mapping[str, Any] | tuple[Any, ...]) -> RouteDecl:
    if isinstance(decl, RouteDecl):
        return decl
    try:
        if isinstance(decl, Mapping):
            return RouteDecl.model_validate(decl)
        verb, path, handler = decl
        return RouteDecl(verb=verb, path=path, handler=handler)
    except ValidationError as exc:
        msg = f"Invalid route declaration {decl!r}:\n{exc}"
        raise BuildError(msg) from exc
    except (TypeError, ValueError) as exc:
        msg = f"Route declaration must be (verb, path, handler), got {decl!r}"
        raise BuildError(msg) from exc


def build(
    declarations: Iterable[RouteDecl | Mapping[str, Any] | tuple[Any, ...]],
    fallback: Callable[..., Any] | None,
    *,
    strict: bool = False,
    cache: PatternCache | None = None,
) -> RouteTable:
    """Compile *declarations* into a :class:`RouteTable`.

    Declaration order is preserved except that the home route (the
    template ``/``) is always evaluated first. Any problem raises a
    :class:`BuildError` subclass (or ``TypeError`` for handler signatures)
    and no table is produced.
    """
    if fallback is None or not callable(fallback):
        msg = f"A callable fallback handler is required, got {fallback!r}"
        raise MissingFallback(msg)
    validate_fallback(fallback)

    home: Route | None = None
    routes: list[Route] = []
    for decl in map(_coerce_decl, declarations):
        pattern = compile_template(decl.path, cache)
        validate_handler_signature(decl.handler, pattern, decl.verb.value, strict=strict)
        route = Route(
            verb=decl.verb,
            pattern=pattern,
            param_types=pattern.param_types,
            handler=decl.handler,
            name=decl.name or _handler_name(decl.handler),
        )
        if not pattern.is_home:
            routes.append(route)
        elif home is not None:
            msg = f"Home route declared twice: {home!r} and {route!r}"
            raise DuplicateHome(msg)
        else:
            home = route

    if home is not None:
        routes.insert(0, home)

    if strict:
        validate_return_types([*(r.handler for r in routes), fallback])

    table = RouteTable(routes, fallback)
    logger.info("built route table with %d routes (home=%s)", len(table), home is not None)
    return table


class Router:
    """Collects declarations in order and builds a :class:`RouteTable`.

    Usage::

        router = Router()

        @router.get("/users/{id:uint}")
        def get_user(ctx, id): ...

        @router.fallback
        def not_found(ctx): ...

        table = router.build()
        table(ctx, Verb.GET, "/users/42")
    """

    __slots__ = ("_declarations", "_fallback")

    def __init__(self) -> None:
        self._declarations: list[RouteDecl] = []
        self._fallback: Callable[..., Any] | None = None

    @property
    def declarations(self) -> tuple[RouteDecl, ...]:
        return tuple(self._declarations)

    def add_route(
        self,
        verb: Verb | str,
        path: str,
        handler: Callable[..., Any],
        *,
        name: str | None = None,
    ) -> RouteDecl:
        try:
            decl = RouteDecl(verb=verb, path=path, handler=handler, name=name)
        except ValidationError as exc:
            msg = f"Invalid route declaration {verb!r} {path!r}:\n{exc}"
            raise BuildError(msg) from exc
        self._declarations.append(decl)
        return decl

    def route(self, verb: Verb | str, path: str, *, name: str | None = None) -> Callable[..., Any]:
        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            self.add_route(verb, path, handler, name=name)
            return handler

        return decorator

    def get(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.GET, path)

    def post(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.POST, path)

    def put(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.PUT, path)

    def patch(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.PATCH, path)

    def delete(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.DELETE, path)

    def options(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.OPTIONS, path)

    def head(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.HEAD, path)

    def trace(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.TRACE, path)

    def connect(self, path: str) -> Callable[..., Any]:
        return self.route(Verb.CONNECT, path)

    def fallback(self, handler: Callable[..., Any]) -> Callable[..., Any]:
        """Set the handler called when no route matches. Usable as a decorator."""
        self._fallback = handler
        return handler

    def build(self, *, strict: bool = False, cache: PatternCache | None = None) -> RouteTable:
        return build(self._declarations, self._fallback, strict=strict, cache=cache)
