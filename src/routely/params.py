"""Placeholder target types and value parsing.

Each placeholder in a template carries a type tag such as ``{id:uint}``.
A tag resolves to a :class:`ParamType`, which knows the regex run the
placeholder may capture and how to turn the captured text into a value.
A value that fails to parse makes the whole route a non-match.
"""

from __future__ import annotations

import datetime
import re
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import TypeAdapter
from pydantic.errors import PydanticSchemaGenerationError

from routely.errors import TemplateError, UnknownParamType

# One non-empty run of word characters or hyphens; never crosses a "/".
DEFAULT_PATTERN = r"[\w-]+"

_UINT_RE = re.compile(r"[0-9]+")
_INT_RE = re.compile(r"-?[0-9]+")


@dataclass(frozen=True, slots=True)
class ParamType:
    """A placeholder type tag.

    ``parse`` raises when the captured string is not a valid value; any
    exception it raises counts as a failed parse. ``pattern`` narrows the
    ``[\\w-]+`` run a placeholder captures. ``python_type`` is what strict mode
    expects the handler to annotate the parameter with.
    """

    name: str
    parse: Callable[[str], Any]
    pattern: str = DEFAULT_PATTERN
    python_type: Any = None

    def __repr__(self) -> str:
        return f"ParamType({self.name!r})"


def _parse_uint(value: str) -> int:
    if _UINT_RE.fullmatch(value) is None:
        msg = f"not an unsigned integer: {value!r}"
        raise ValueError(msg)
    return int(value)


def _parse_int(value: str) -> int:
    if _INT_RE.fullmatch(value) is None:
        msg = f"not an integer: {value!r}"
        raise ValueError(msg)
    return int(value)


def _bounded(bits: int, *, signed: bool) -> Callable[[str], int]:
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        base = _parse_int
    else:
        low, high = 0, (1 << bits) - 1
        base = _parse_uint

    def parse(value: str) -> int:
        number = base(value)
        if not low <= number <= high:
            msg = f"{number} out of range [{low}, {high}]"
            raise ValueError(msg)
        return number

    return parse


def _parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    msg = f"not a boolean: {value!r}"
    raise ValueError(msg)


def _parse_str(value: str) -> str:
    return value


def _from_python_type(tp: Any) -> Callable[[str], Any]:
    """Build a string parser for *tp* backed by a pydantic ``TypeAdapter``."""
    try:
        adapter = TypeAdapter(tp)
    except PydanticSchemaGenerationError as exc:
        name = getattr(tp, "__name__", repr(tp))
        msg = f"Cannot parse path parameters into {name}: {exc}"
        raise TemplateError(msg) from exc
    return adapter.validate_strings


_PARAM_TYPES: dict[str, ParamType] = {
    "str": ParamType("str", _parse_str, python_type=str),
    "uint": ParamType("uint", _parse_uint, python_type=int),
    "int": ParamType("int", _parse_int, python_type=int),
    "bool": ParamType("bool", _parse_bool, python_type=bool),
    "uuid": ParamType("uuid", uuid.UUID, python_type=uuid.UUID),
    "date": ParamType("date", _from_python_type(datetime.date), python_type=datetime.date),
}
for _bits in (8, 16, 32, 64):
    _PARAM_TYPES[f"u{_bits}"] = ParamType(f"u{_bits}", _bounded(_bits, signed=False), python_type=int)
    _PARAM_TYPES[f"i{_bits}"] = ParamType(f"i{_bits}", _bounded(_bits, signed=True), python_type=int)
_PARAM_TYPES["usize"] = ParamType("usize", _bounded(64, signed=False), python_type=int)
_PARAM_TYPES["isize"] = ParamType("isize", _bounded(64, signed=True), python_type=int)

_BUILTIN_NAMES = frozenset(_PARAM_TYPES)

_ALIASES: dict[str, str] = {
    "string": "str",
    "unsigned-int": "uint",
    "signed-int": "int",
}

_registry_lock = threading.Lock()


def register_param_type(
    name: str,
    parse: Callable[[str], Any] | None = None,
    pattern: str | None = None,
    *,
    python_type: Any = None,
) -> ParamType:
    """Register a caller-supplied type tag usable as ``{name:<tag>}``.

    Give either *parse* or *python_type*. With only *python_type*, values
    are validated by pydantic, so enums, ``Annotated`` constraints and
    the like work out of the box.

    Must run before any template using the tag is compiled. *pattern*
    narrows what the placeholder captures: the captured text is always one
    ``[\\w-]+`` run and must also match *pattern* in full.
    """
    if parse is None:
        if python_type is None:
            msg = f"Parameter type {name!r} needs a parse function or a python_type"
            raise TypeError(msg)
        parse = _from_python_type(python_type)

    pattern = pattern or DEFAULT_PATTERN
    try:
        re.compile(pattern)
    except re.error as exc:
        msg = f"Invalid pattern for parameter type {name!r}: {exc}"
        raise TemplateError(msg) from exc

    param_type = ParamType(name, parse, pattern, python_type)
    with _registry_lock:
        if name in _PARAM_TYPES or name in _ALIASES:
            msg = f"Parameter type {name!r} is already registered"
            raise ValueError(msg)
        _PARAM_TYPES[name] = param_type
    return param_type


def unregister_param_type(name: str) -> None:
    """Remove a caller-supplied tag. Built-in tags cannot be removed."""
    if name in _BUILTIN_NAMES:
        msg = f"Cannot unregister built-in parameter type {name!r}"
        raise ValueError(msg)
    with _registry_lock:
        _PARAM_TYPES.pop(name, None)


def get_param_type(tag: str) -> ParamType:
    """Look up a tag by name, aliases included."""
    name = _ALIASES.get(tag, tag)
    try:
        return _PARAM_TYPES[name]
    except KeyError:
        raise UnknownParamType(tag) from None


def parse_value(param_type: ParamType, raw: str) -> tuple[Any, bool]:
    """Parse *raw* into *param_type*, returning ``(value, ok)``.

    Never raises for a bad value: whatever the parser raises, a failed
    parse is ``(None, False)``.
    """
    try:
        return param_type.parse(raw), True
    except Exception:
        return None, False
