"""Tests for handler signature validation."""

from __future__ import annotations

import datetime
import uuid
from typing import Any

import pytest

from routely.template import compile_pattern
from routely.validation import (
    validate_fallback,
    validate_handler_signature,
    validate_return_types,
)

USER = compile_pattern("/users/{user_id:uint}")
TX = compile_pattern("/users/{user_id:uint}/tx/{hash:string}")
HOME = compile_pattern("/")


# -- Rule 1: arity (always checked) ---------------------------------------


def test_context_only_handler_ok() -> None:
    def handler(ctx): ...

    validate_handler_signature(handler, HOME, "GET")


def test_missing_path_param_raises() -> None:
    def handler(ctx): ...

    with pytest.raises(TypeError, match="Cannot be called with a context and 1"):
        validate_handler_signature(handler, USER, "GET")


def test_too_many_params_raises() -> None:
    def handler(ctx, user_id, extra): ...

    with pytest.raises(TypeError, match=r"\[GET /users/\{user_id:uint\}\]"):
        validate_handler_signature(handler, USER, "GET")


def test_missing_context_raises() -> None:
    def handler(): ...

    with pytest.raises(TypeError, match="Accept the context first"):
        validate_handler_signature(handler, HOME, "GET")


def test_defaults_and_varargs_ok() -> None:
    def with_default(ctx, user_id, hash, page=1): ...

    def varargs(ctx, *values): ...

    validate_handler_signature(with_default, TX, "DELETE")
    validate_handler_signature(varargs, TX, "DELETE")


def test_builtin_without_signature_is_skipped() -> None:
    validate_handler_signature(print, HOME, "GET")


def test_non_strict_ignores_annotations() -> None:
    def handler(ctx, user_id: str): ...

    validate_handler_signature(handler, USER, "GET")


# -- Rule 2: Return type annotation must exist (strict) -------------------


def test_missing_return_type_raises() -> None:
    def handler(ctx: Any, user_id: int): ...

    with pytest.raises(TypeError, match="Missing return type annotation"):
        validate_handler_signature(handler, USER, "GET", strict=True)


# -- Rule 3: All path params must be typed (strict) -----------------------


def test_untyped_path_param_raises() -> None:
    def handler(ctx, user_id) -> str: ...

    with pytest.raises(TypeError, match="no type annotation"):
        validate_handler_signature(handler, USER, "GET", strict=True)


def test_context_needs_no_annotation() -> None:
    def handler(ctx, user_id: int) -> str: ...

    validate_handler_signature(handler, USER, "GET", strict=True)


# -- Rule 4: Annotation must agree with the tag (strict) ------------------


def test_mismatched_annotation_raises() -> None:
    def handler(ctx, user_id: int, hash: int) -> str: ...

    with pytest.raises(TypeError, match=r"Placeholder '\{hash:str\}' produces str"):
        validate_handler_signature(handler, TX, "DELETE", strict=True)


@pytest.mark.parametrize(
    ("template", "annotation"),
    [
        ("/{v:uint}", int),
        ("/{v:i64}", int),
        ("/{v:str}", str),
        ("/{v:bool}", bool),
        ("/{v:uuid}", uuid.UUID),
        ("/{v:date}", datetime.date),
        ("/{v:uint}", object),
        ("/{v:uint}", Any),
    ],
)
def test_compatible_annotations(template: str, annotation: Any) -> None:
    def handler(ctx, v) -> str: ...

    handler.__annotations__["v"] = annotation
    validate_handler_signature(handler, compile_pattern(template), "GET", strict=True)


# -- Fallback and shared return type ---------------------------------------


def test_fallback_ok() -> None:
    validate_fallback(lambda ctx: None)


def test_fallback_with_params_raises() -> None:
    with pytest.raises(TypeError, match="must accept exactly the context"):
        validate_fallback(lambda ctx, user_id: None)


def test_shared_return_type_ok() -> None:
    def a(ctx) -> str: ...

    def b(ctx, user_id: int) -> str: ...

    def unannotated(ctx): ...

    validate_return_types([a, b, unannotated])


def test_mixed_return_types_raise() -> None:
    def a(ctx) -> str: ...

    def b(ctx) -> bytes: ...

    with pytest.raises(TypeError, match=r"str \(a\), bytes \(b\)"):
        validate_return_types([a, b])
