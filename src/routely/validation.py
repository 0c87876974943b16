"""Handler signature validation, run once while a route table is built."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable
from typing import Any, get_type_hints

from routely.template import RoutePattern

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _name(func: Any) -> str:
    return getattr(func, "__name__", repr(func))


def _signature(func: Callable[..., Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(func)
    except (TypeError, ValueError):
        # Some builtins expose no signature; they are checked at call time.
        return None


def _hints(func: Callable[..., Any]) -> dict[str, Any]:
    try:
        return get_type_hints(func)
    except (NameError, TypeError):
        return {}


def _compatible(hint: Any, expected: Any) -> bool:
    if hint is Any or hint == expected:
        return True
    return isinstance(hint, type) and isinstance(expected, type) and issubclass(expected, hint)


def validate_handler_signature(
    func: Callable[..., Any],
    pattern: RoutePattern,
    verb: str,
    *,
    strict: bool = False,
) -> None:
    """Check that *func* can be called as ``func(context, *path_values)``.

    In strict mode every path parameter must also be annotated with a type
    compatible with its placeholder tag, and a return type is required.

    Raises :class:`TypeError` with an actionable message.
    """
    name = _name(func)
    sig = _signature(func)
    if sig is None:
        return

    params = pattern.params
    # --- Rule 1: arity ---
    try:
        sig.bind(None, *(None for _ in params))
    except TypeError as exc:
        raise TypeError(
            f"\n\nInvalid handler '{name}' [{verb} {pattern.template}]\n"
            f"  Problem: Cannot be called with a context and {len(params)} "
            f"path parameter(s): {exc}.\n"
            f"  Fix:     Accept the context first, then "
            f"{', '.join(pattern.param_names) or 'nothing else'}, in that order.\n"
        ) from None

    if not strict:
        return

    hints = _hints(func)

    # --- Rule 2: Return type annotation must exist ---
    if hints.get("return") is None:
        raise TypeError(
            f"\n\nStrict-mode violation in handler '{name}' "
            f"[{verb} {pattern.template}]\n"
            f"  Problem: Missing return type annotation.\n"
            f"  Fix:     Annotate the return type shared by every handler of the table.\n"
        )

    positional = [p for p in sig.parameters.values() if p.kind in _POSITIONAL]
    for segment, param in zip(params, positional[1:], strict=False):
        hint = hints.get(param.name)

        # --- Rule 3: All path params must be typed ---
        if hint is None:
            raise TypeError(
                f"\n\nStrict-mode violation in handler '{name}' "
                f"[{verb} {pattern.template}]\n"
                f"  Problem: Parameter '{param.name}' has no type annotation.\n"
                f"  Fix:     Annotate it to match the placeholder, e.g. "
                f"{param.name}: {_name(segment.type.python_type or str)}.\n"
            )

        # --- Rule 4: Annotation must agree with the placeholder tag ---
        expected = segment.type.python_type
        if expected is not None and not _compatible(hint, expected):
            raise TypeError(
                f"\n\nStrict-mode violation in handler '{name}' "
                f"[{verb} {pattern.template}]\n"
                f"  Current: {param.name}: {_name(hint)}\n"
                f"  Problem: Placeholder '{{{segment.name}:{segment.type.name}}}' "
                f"produces {_name(expected)}.\n"
                f"  Fix:     Use {param.name}: {_name(expected)}.\n"
            )


def validate_fallback(func: Callable[..., Any]) -> None:
    """The fallback is called with the context only."""
    sig = _signature(func)
    if sig is None:
        return
    try:
        sig.bind(None)
    except TypeError as exc:
        msg = f"Fallback handler {_name(func)!r} must accept exactly the context: {exc}"
        raise TypeError(msg) from None


def validate_return_types(handlers: Iterable[Callable[..., Any]]) -> None:
    """Strict mode: every handler of one table must declare the same return type."""
    seen: dict[Any, str] = {}
    for func in handlers:
        ret = _hints(func).get("return")
        if ret is None:
            continue
        seen.setdefault(ret, _name(func))
        if len(seen) > 1:
            found = ", ".join(f"{_name(tp)} ({owner})" for tp, owner in seen.items())
            msg = f"Handlers of one route table must share a return type, found: {found}"
            raise TypeError(msg)
