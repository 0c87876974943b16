"""Tests for routely.config: TOML route files."""

from __future__ import annotations

from pathlib import Path

import pytest

from routely.config import RouterConfig, import_handler, load_config, load_table
from routely.errors import ConfigError, TemplateError
from routely.verbs import Verb


def test_load_config(route_file: Path) -> None:
    config = load_config(route_file)
    assert isinstance(config, RouterConfig)
    assert [r.verb for r in config.routes] == [Verb.GET, Verb.POST, Verb.PATCH, Verb.DELETE, Verb.GET]
    assert config.strict is False


@pytest.mark.parametrize(
    ("verb", "path", "expected"),
    [
        (Verb.GET, "/", "home"),
        (Verb.GET, "/users", "list"),
        (Verb.POST, "/users", "create"),
        (Verb.PATCH, "/users/12", "update(12)"),
        (Verb.PATCH, "/users/5d34", "404"),
        (Verb.DELETE, "/users/534/tx/0x234", "removeTx(534, 0x234)"),
        (Verb.GET, "/u", "404"),
    ],
)
def test_table_from_file(route_file: Path, verb: Verb, path: str, expected: str) -> None:
    assert load_table(route_file)(None, verb, path) == expected


def test_home_declared_last_is_evaluated_first(route_file: Path) -> None:
    table = load_table(route_file)
    assert table.home is not None
    assert table.routes[0].path == "/"
    assert table.routes[0].name is not None
    assert table.routes[0].name.endswith(":home")


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read route file"):
        load_config(tmp_path / "nope.toml")


def test_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "routes.toml"
    path.write_text("routes = [", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid TOML"):
        load_config(path)


def test_missing_fallback(tmp_path: Path) -> None:
    path = tmp_path / "routes.toml"
    path.write_text('[[routes]]\nverb = "GET"\npath = "/"\nhandler = "m:h"\n', encoding="utf-8")
    with pytest.raises(ConfigError, match="fallback"):
        load_config(path)


def test_unknown_verb(tmp_path: Path) -> None:
    path = tmp_path / "routes.toml"
    path.write_text(
        'fallback = "m:h"\n[[routes]]\nverb = "FETCH"\npath = "/"\nhandler = "m:h"\n',
        encoding="utf-8",
    )
    with pytest.raises(ConfigError, match="Unsupported HTTP verb"):
        load_config(path)


def test_unknown_key(tmp_path: Path) -> None:
    path = tmp_path / "routes.toml"
    path.write_text('fallback = "m:h"\nfallbak = "m:h"\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_bad_template_fails_build(tmp_path: Path, handlers_module: str) -> None:
    path = tmp_path / "routes.toml"
    path.write_text(
        f'fallback = "{handlers_module}:not_found"\n'
        f'[[routes]]\nverb = "GET"\npath = "/users/{{id:bogus}}"\nhandler = "{handlers_module}:update_user"\n',
        encoding="utf-8",
    )
    with pytest.raises(TemplateError):
        load_table(path)


def test_strict_flag(tmp_path: Path, handlers_module: str) -> None:
    path = tmp_path / "routes.toml"
    path.write_text(
        f'fallback = "{handlers_module}:not_found"\nstrict = true\n'
        f'[[routes]]\nverb = "GET"\npath = "/users"\nhandler = "{handlers_module}:list_users"\n',
        encoding="utf-8",
    )
    with pytest.raises(TypeError, match="Missing return type annotation"):
        load_table(path)


class TestImportHandler:
    def test_resolves(self) -> None:
        assert import_handler("routely.verbs:Verb.parse")("get") is Verb.GET

    @pytest.mark.parametrize("target", ["routely.verbs", ":parse", "routely.verbs:"])
    def test_malformed(self, target: str) -> None:
        with pytest.raises(ConfigError, match="module:attr"):
            import_handler(target)

    def test_missing_module(self) -> None:
        with pytest.raises(ConfigError, match="Cannot import module"):
            import_handler("routely_no_such_module:handler")

    def test_missing_attribute(self) -> None:
        with pytest.raises(ConfigError, match="has no attribute"):
            import_handler("routely.verbs:nope")

    def test_not_callable(self) -> None:
        with pytest.raises(ConfigError, match="not callable"):
            import_handler("routely.params:DEFAULT_PATTERN")
