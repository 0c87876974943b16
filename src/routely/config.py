"""Declarative route files.

A route file is TOML::

    fallback = "myapp.handlers:not_found"
    strict = false

    [[routes]]
    verb = "GET"
    path = "/"
    handler = "myapp.handlers:home"

    [[routes]]
    verb = "PATCH"
    path = "/users/{id:uint}"
    handler = "myapp.handlers:update_user"

Routes are evaluated in file order, home route first.
"""

from __future__ import annotations

import importlib
import sys
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from routely.errors import ConfigError
from routely.routing import RouteDecl, RouteTable, build
from routely.verbs import Verb


def import_handler(target: str) -> Callable[..., Any]:
    """Resolve a ``"module:attr"`` string to a callable."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        msg = f"Handler target must look like 'module:attr', got {target!r}"
        raise ConfigError(msg)

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import module {module_name!r} for handler {target!r}: {exc}"
        raise ConfigError(msg) from exc

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            msg = f"Module {module_name!r} has no attribute {attr_path!r}"
            raise ConfigError(msg) from None

    if not callable(obj):
        msg = f"Handler {target!r} is not callable"
        raise ConfigError(msg)
    return obj


class RouteConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    verb: Verb
    path: str
    handler: str
    name: str | None = None

    @field_validator("verb", mode="before")
    @classmethod
    def parse_verb(cls, value: Any) -> Verb:
        return Verb.parse(value)

    def to_decl(self) -> RouteDecl:
        return RouteDecl(
            verb=self.verb,
            path=self.path,
            handler=import_handler(self.handler),
            name=self.name or self.handler,
        )


class RouterConfig(BaseModel):
    """Validated contents of a route file."""

    model_config = ConfigDict(extra="forbid")

    routes: list[RouteConfig] = Field(default_factory=list)
    fallback: str
    strict: bool = False

    def build(self) -> RouteTable:
        decls = [route.to_decl() for route in self.routes]
        return build(decls, import_handler(self.fallback), strict=self.strict)


def load_config(path: str | Path, *, import_root: str | Path | None = None) -> RouterConfig:
    """Read and validate a TOML route file.

    *import_root* (default: the file's directory) is put on ``sys.path``
    so handler modules next to the file can be imported.
    """
    file = Path(path)
    try:
        data = tomllib.loads(file.read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"Cannot read route file {str(file)!r}: {exc}"
        raise ConfigError(msg) from exc
    except tomllib.TOMLDecodeError as exc:
        msg = f"Route file {str(file)!r} is not valid TOML: {exc}"
        raise ConfigError(msg) from exc

    try:
        config = RouterConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid route file {str(file)!r}:\n{exc}"
        raise ConfigError(msg) from exc

    root = str(Path(import_root or file.resolve().parent).resolve())
    if root not in sys.path:
        sys.path.insert(0, root)
    return config


def load_table(path: str | Path) -> RouteTable:
    """Load a route file and build its table in one step."""
    return load_config(path).build()
