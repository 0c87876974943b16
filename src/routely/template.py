"""Path template parsing and pattern compilation.

A template such as ``/users/{id:uint}/tx/{hash}`` is split into literal
and placeholder segments, then compiled into an anchored regex where each
segment contributes ``/`` followed by either the escaped literal or one
capturing ``[\\w-]+`` run, so a placeholder never spans a ``/``. The root
template ``/`` has no segments and matches only the root path.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from routely.errors import TemplateError, UnknownParamType
from routely.params import DEFAULT_PATTERN, ParamType, get_param_type

logger = logging.getLogger("routely.template")

_PARAM_RE = re.compile(r"\{\s*(?P<name>[A-Za-z_]\w*)\s*(?::\s*(?P<type>[\w-]+)\s*)?\}")


@dataclass(frozen=True, slots=True)
class Literal:
    """A segment matched verbatim."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Param:
    """A named, typed placeholder segment."""

    name: str
    type: ParamType

    def __str__(self) -> str:
        return f"{{{self.name}:{self.type.name}}}"


PathSegment = Literal | Param


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """The compiled, matchable form of a path template."""

    template: str
    source: str
    segments: tuple[PathSegment, ...]
    _regex: re.Pattern[str] = field(repr=False, compare=False)
    _groups: tuple[str, ...] = field(repr=False, compare=False)
    _checks: tuple[re.Pattern[str] | None, ...] = field(default=(), repr=False, compare=False)

    @property
    def params(self) -> tuple[Param, ...]:
        return tuple(seg for seg in self.segments if isinstance(seg, Param))

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.params)

    @property
    def param_types(self) -> tuple[ParamType, ...]:
        return tuple(p.type for p in self.params)

    @property
    def is_home(self) -> bool:
        return not self.segments

    def match(self, path: str) -> list[str] | None:
        """Return the raw captures in declaration order, or ``None``.

        Every capture is one ``[\\w-]+`` run. A placeholder whose type
        narrows the run must also match it in full.
        """
        m = self._regex.match(path)
        if m is None:
            return None
        captures = [m.group(name) for name in self._groups]
        for check, text in zip(self._checks, captures):
            if check is not None and check.fullmatch(text) is None:
                return None
        return captures

    def __str__(self) -> str:
        return format_segments(self.segments)


def parse_template(template: str) -> tuple[PathSegment, ...]:
    """Split *template* into segments.

    Examples::

        "/"                  -> ()
        "/users"             -> (Literal("users"),)
        "/users/{id: uint}"  -> (Literal("users"), Param("id", uint))
        "/tx/{hash}"         -> (Literal("tx"), Param("hash", str))
    """
    if not template.startswith("/"):
        msg = f"Path template must start with '/': {template!r}"
        raise TemplateError(msg)
    if template == "/":
        return ()

    segments: list[PathSegment] = []
    seen: set[str] = set()
    for token in template[1:].split("/"):
        if not token:
            msg = f"Empty segment in path template {template!r}"
            raise TemplateError(msg)

        if token.startswith("{"):
            m = _PARAM_RE.fullmatch(token)
            if m is None:
                msg = f"Malformed placeholder {token!r} in {template!r}"
                raise TemplateError(msg)
            name = m.group("name")
            if name in seen:
                msg = f"Duplicate placeholder {name!r} in {template!r}"
                raise TemplateError(msg)
            seen.add(name)
            tag = m.group("type") or "str"
            try:
                param_type = get_param_type(tag)
            except UnknownParamType:
                raise UnknownParamType(tag, template) from None
            segments.append(Param(name, param_type))
        elif "{" in token or "}" in token:
            msg = f"Literal segment {token!r} in {template!r} contains a brace"
            raise TemplateError(msg)
        else:
            segments.append(Literal(token))
    return tuple(segments)


def compile_segments(
    segments: tuple[PathSegment, ...],
    template: str | None = None,
) -> RoutePattern:
    """Compile *segments* into an anchored :class:`RoutePattern`."""
    if template is None:
        template = format_segments(segments)

    groups: list[str] = []
    checks: list[re.Pattern[str] | None] = []
    parts: list[str] = []
    for seg in segments:
        parts.append("/")
        if isinstance(seg, Param):
            group = f"p{len(groups)}"
            groups.append(group)
            checks.append(None if seg.type.pattern == DEFAULT_PATTERN else _compile_check(seg, template))
            parts.append(f"(?P<{group}>{DEFAULT_PATTERN})")
        else:
            parts.append(re.escape(seg.text))
    body = "".join(parts) or "/"
    source = f"^{body}\\Z"

    try:
        regex = re.compile(source)
    except re.error as exc:
        msg = f"Cannot compile path template {template!r}: {exc}"
        raise TemplateError(msg) from exc

    logger.debug("compiled %s -> %s", template, source)
    return RoutePattern(template, source, segments, regex, tuple(groups), tuple(checks))


def _compile_check(param: Param, template: str) -> re.Pattern[str]:
    try:
        return re.compile(param.type.pattern)
    except re.error as exc:
        msg = f"Cannot compile placeholder {param} in {template!r}: {exc}"
        raise TemplateError(msg) from exc


def compile_pattern(template: str) -> RoutePattern:
    """Parse and compile *template* without consulting the pattern cache."""
    return compile_segments(parse_template(template), template)


def format_segments(segments: tuple[PathSegment, ...]) -> str:
    """Render segments back into canonical template text."""
    if not segments:
        return "/"
    return "".join(f"/{seg}" for seg in segments)
