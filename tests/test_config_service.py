"""Tests for the layered configuration service."""

import pytest

from nextport.core import ConversionOptions
from nextport.core.config_service import (
    ConfigService,
    _coerce,
    _deep_merge,
    _get_nested,
    _read_toml,
    _set_nested,
    _write_toml,
    get_config_service,
    reset_config_service,
)
from nextport.errors import ConfigError

# ─── Helper utilities ───


class TestDeepMerge:
    def test_simple_merge(self):
        assert _deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        base = {"conversion": {"max_workers": 1, "app_name": "next-app"}}
        result = _deep_merge(base, {"conversion": {"max_workers": 8}})
        assert result["conversion"] == {"max_workers": 8, "app_name": "next-app"}

    def test_override_replaces_non_dict(self):
        assert _deep_merge({"a": {"nested": 1}}, {"a": "flat"})["a"] == "flat"

    def test_does_not_mutate_base(self):
        base = {"a": 1}
        _deep_merge(base, {"b": 2})
        assert "b" not in base


class TestGetSetNested:
    def test_get_dotted(self):
        assert _get_nested({"resolver": {"aliases": {"@": "src"}}}, "resolver.aliases") == {"@": "src"}

    def test_get_missing_returns_default(self):
        assert _get_nested({"a": 1}, "b.c", "fallback") == "fallback"

    def test_get_through_scalar_returns_default(self):
        assert _get_nested({"a": 1}, "a.b", "fallback") == "fallback"

    def test_get_false_value(self):
        assert _get_nested({"ui": {"plain_output": False}}, "ui.plain_output", True) is False

    def test_set_dotted_creates_intermediates(self):
        data = {}
        _set_nested(data, "conversion.app_name", "shop")
        assert data == {"conversion": {"app_name": "shop"}}

    def test_set_replaces_scalar_parent(self):
        data = {"conversion": 1}
        _set_nested(data, "conversion.max_workers", 2)
        assert data == {"conversion": {"max_workers": 2}}


# ─── TOML read/write ───


class TestTomlReadWrite:
    def test_write_and_read(self, tmp_path):
        path = tmp_path / "deep" / "config.toml"
        _write_toml({"conversion": {"max_workers": 4, "client_directive": False}}, path)
        assert _read_toml(path) == {"conversion": {"max_workers": 4, "client_directive": False}}

    def test_read_missing_file(self, tmp_path):
        assert _read_toml(tmp_path / "nonexistent.toml") == {}

    def test_read_invalid_file(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("not = [valid")
        assert _read_toml(path) == {}


# ─── Env coercion ───


class TestCoerce:
    @pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False)])
    def test_booleans(self, raw, expected):
        assert _coerce("NEXTPORT_PLAIN", raw, False) is expected

    def test_integer(self):
        assert _coerce("NEXTPORT_MAX_WORKERS", "8", 1) == 8

    def test_string(self):
        assert _coerce("NEXTPORT_APP_NAME", "shop", "next-app") == "shop"

    def test_bad_integer(self):
        with pytest.raises(ConfigError, match="NEXTPORT_MAX_WORKERS must be an integer"):
            _coerce("NEXTPORT_MAX_WORKERS", "many", 1)

    def test_bad_boolean(self):
        with pytest.raises(ConfigError, match="must be a boolean"):
            _coerce("NEXTPORT_PLAIN", "maybe", False)


# ─── ConfigService ───


class TestConfigService:
    def test_defaults_loaded(self):
        resolved = ConfigService().resolve()
        assert resolved.get("conversion.max_workers") == 1
        assert resolved.get("conversion.client_directive") is True
        assert resolved.get("resolver.extensions") == [".js", ".jsx", ".ts", ".tsx", ".json"]
        assert resolved.global_config_path is None
        assert resolved.project_config_path is None

    def test_layers(self, nextport_home, monkeypatch):
        _write_toml(
            {"conversion": {"max_workers": 2, "app_name": "global-app"}},
            nextport_home / ".config" / "nextport" / "config.toml",
        )
        _write_toml({"conversion": {"max_workers": 4}}, nextport_home.parent / "work" / ".nextport.toml")
        svc = ConfigService()
        assert svc.get("conversion.max_workers") == 4
        assert svc.get("conversion.app_name") == "global-app"

        monkeypatch.setenv("NEXTPORT_MAX_WORKERS", "6")
        assert svc.resolve(force=True).get("conversion.max_workers") == 6

    def test_resolve_is_cached(self):
        svc = ConfigService()
        assert svc.resolve() is svc.resolve()

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("NEXTPORT_CLIENT_DIRECTIVE", "sometimes")
        with pytest.raises(ConfigError):
            ConfigService().resolve()

    def test_set_global(self, nextport_home):
        svc = ConfigService()
        svc.set_global("conversion.app_name", "shop")
        assert svc.get("conversion.app_name") == "shop"
        saved = _read_toml(nextport_home / ".config" / "nextport" / "config.toml")
        assert saved == {"conversion": {"app_name": "shop"}}

    def test_init_project_config(self):
        svc = ConfigService()
        path = svc.init_project_config()
        assert path.name == ".nextport.toml"
        assert svc.resolve(force=True).get("resolver.aliases") == {"@": "src"}
        with pytest.raises(FileExistsError):
            svc.init_project_config()

    def test_show_and_paths(self):
        svc = ConfigService()
        info = svc.show()
        assert info["sources"] == {"global_config": None, "project_config": None}
        assert info["resolved"]["loader"]["max_file_bytes"] == 2_000_000
        paths = svc.config_paths()
        assert paths["project_config"].endswith(".nextport.toml (not found)")

    def test_singleton(self):
        assert get_config_service() is get_config_service()
        first = get_config_service()
        reset_config_service()
        assert get_config_service() is not first


class TestConversionOptions:
    def test_from_config(self, monkeypatch):
        monkeypatch.setenv("NEXTPORT_MAX_WORKERS", "3")
        monkeypatch.setenv("NEXTPORT_APP_NAME", "shop")
        options = ConversionOptions.from_config()
        assert options.max_workers == 3
        assert options.app_name == "shop"
        assert options.extensions == (".js", ".jsx", ".ts", ".tsx", ".json")

    def test_overrides_win_unless_none(self):
        options = ConversionOptions.from_config(ConfigService(), max_workers=5, app_name=None)
        assert options.max_workers == 5
        assert options.app_name == "next-app"
