"""Shared fixtures: a handlers module and a TOML route file on disk."""

from __future__ import annotations

import sys
import uuid
from pathlib import Path

import pytest

HANDLERS = '''
def home(ctx):
    return "home"


def list_users(ctx):
    return "list"


def create_user(ctx):
    return "create"


def update_user(ctx, id):
    return f"update({id})"


def remove_tx(ctx, id, hash):
    return f"removeTx({id}, {hash})"


def not_found(ctx):
    return "404"
'''

ROUTES = '''
fallback = "{mod}:not_found"

[[routes]]
verb = "GET"
path = "/users"
handler = "{mod}:list_users"

[[routes]]
verb = "POST"
path = "/users"
handler = "{mod}:create_user"

[[routes]]
verb = "PATCH"
path = "/users/{{id: uint}}"
handler = "{mod}:update_user"

[[routes]]
verb = "DELETE"
path = "/users/{{id: uint}}/tx/{{hash: string}}"
handler = "{mod}:remove_tx"

# Declared last on purpose: the home route is still evaluated first.
[[routes]]
verb = "GET"
path = "/"
handler = "{mod}:home"
'''


@pytest.fixture
def handlers_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Write a uniquely named handlers module into *tmp_path*."""
    monkeypatch.setattr(sys, "path", list(sys.path))
    name = f"handlers_{uuid.uuid4().hex}"
    (tmp_path / f"{name}.py").write_text(HANDLERS, encoding="utf-8")
    return name


@pytest.fixture
def route_file(tmp_path: Path, handlers_module: str) -> Path:
    path = tmp_path / "routes.toml"
    path.write_text(ROUTES.format(mod=handlers_module), encoding="utf-8")
    return path
