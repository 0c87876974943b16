"""Typed, first-match-wins request dispatch for small route tables."""

__version__ = "0.1.0"

from routely.app import RoutelyApp
from routely.cache import PATTERN_CACHE, PatternCache, compile_template
from routely.errors import (
    BuildError,
    ConfigError,
    DuplicateHome,
    MissingFallback,
    RouterError,
    TemplateError,
    UnknownParamType,
    UnknownVerb,
)
from routely.params import ParamType, register_param_type
from routely.request import Request
from routely.response import JSONResponse, Response
from routely.routing import Route, RouteDecl, RouteMatch, Router, RouteTable, build
from routely.template import Literal, Param, RoutePattern, parse_template
from routely.verbs import Verb

__all__ = [
    "PATTERN_CACHE",
    "BuildError",
    "ConfigError",
    "DuplicateHome",
    "JSONResponse",
    "Literal",
    "MissingFallback",
    "Param",
    "ParamType",
    "PatternCache",
    "Request",
    "Response",
    "Route",
    "RouteDecl",
    "RouteMatch",
    "RoutePattern",
    "RouteTable",
    "Router",
    "RouterError",
    "RoutelyApp",
    "TemplateError",
    "UnknownParamType",
    "UnknownVerb",
    "Verb",
    "build",
    "compile_template",
    "parse_template",
    "register_param_type",
]
