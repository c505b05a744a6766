# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for the configuration system."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from pyhoc.core.config import Config, config_properties, env_key_for
from pyhoc.cors import CorsSettings, resolve
from pyhoc.kernel.exceptions import ConfigurationException


class TestConfig:
    def test_load_from_dict(self):
        config = Config({"app": {"name": "test-service", "port": 8080}})
        assert config.get("app.name") == "test-service"
        assert config.get("app.port") == 8080

    def test_get_with_default(self):
        assert Config({}).get("missing.key", "default") == "default"

    def test_get_through_scalar_returns_default(self):
        assert Config({"app": "flat"}).get("app.name", "x") == "x"

    def test_get_section(self):
        config = Config({"pyhoc": {"cors": {"enabled": True}}})
        assert config.get_section("pyhoc.cors") == {"enabled": True}
        assert config.get_section("pyhoc.missing") == {}

    def test_get_section_returns_copy(self):
        config = Config({"pyhoc": {"cors": {"enabled": True}}})
        config.get_section("pyhoc.cors")["enabled"] = False
        assert config.get("pyhoc.cors.enabled") is True


class TestEnvOverrides:
    def test_env_key_mapping(self):
        assert env_key_for("pyhoc.cors.allowed-origins") == "PYHOC_CORS_ALLOWED_ORIGINS"
        assert env_key_for("app.name") == "PYHOC_APP_NAME"

    def test_env_var_wins(self, monkeypatch):
        monkeypatch.setenv("PYHOC_APP_NAME", "env-service")
        config = Config({"pyhoc": {"app": {"name": "file-service"}}})
        assert config.get("pyhoc.app.name") == "env-service"


class TestDefaults:
    def test_packaged_defaults(self):
        config = Config.defaults()
        assert config.get("pyhoc.cors.enabled") is True
        assert config.get("pyhoc.cors.allowed-origins") == []
        assert config.get("pyhoc.logging.level.root") == "INFO"
        assert config.loaded_sources == ["pyhoc-defaults.yaml (packaged defaults)"]


class TestFromSources:
    def test_yaml_in_project_root(self, tmp_path: Path):
        (tmp_path / "pyhoc.yaml").write_text("pyhoc:\n  app:\n    name: my-service\n")
        config = Config.from_sources(tmp_path)
        assert config.get("pyhoc.app.name") == "my-service"
        assert config.get("pyhoc.cors.enabled") is True

    def test_toml_file(self, tmp_path: Path):
        (tmp_path / "pyhoc.toml").write_text('[pyhoc.cors]\nallowed-origins = ["https://app.example.com"]\n')
        config = Config.from_sources(tmp_path)
        assert config.get("pyhoc.cors.allowed-origins") == ["https://app.example.com"]

    def test_root_file_overrides_config_dir(self, tmp_path: Path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "pyhoc.yaml").write_text("pyhoc:\n  app:\n    name: from-config-dir\n    debug: true\n")
        (tmp_path / "pyhoc.yaml").write_text("pyhoc:\n  app:\n    name: from-root\n")

        config = Config.from_sources(tmp_path)
        assert config.get("pyhoc.app.name") == "from-root"
        assert config.get("pyhoc.app.debug") is True

    def test_without_defaults(self, tmp_path: Path):
        config = Config.from_sources(tmp_path, load_defaults=False)
        assert config.get("pyhoc.cors.enabled") is None
        assert config.loaded_sources == []

    def test_loaded_sources_in_merge_order(self, tmp_path: Path):
        (tmp_path / "pyhoc.yaml").write_text("a: 1\n")
        (tmp_path / "pyhoc-dev.yaml").write_text("a: 2\n")
        config = Config.from_sources(tmp_path, active_profiles=["dev"])
        assert config.loaded_sources == [
            "pyhoc-defaults.yaml (packaged defaults)",
            str(tmp_path / "pyhoc.yaml"),
            f"{tmp_path / 'pyhoc-dev.yaml'} (profile: dev)",
        ]


class TestProfileConfigMerging:
    def test_merge_profile_config(self, tmp_path: Path):
        (tmp_path / "pyhoc.yaml").write_text("server:\n  port: 8080\n  host: localhost\n")
        (tmp_path / "pyhoc-dev.yaml").write_text("server:\n  port: 9090\n  debug: true\n")

        config = Config.from_sources(tmp_path, active_profiles=["dev"])
        assert config.get("server.port") == 9090
        assert config.get("server.host") == "localhost"
        assert config.get("server.debug") is True

    def test_later_profile_wins(self, tmp_path: Path):
        (tmp_path / "pyhoc.yaml").write_text("db:\n  url: base\n")
        (tmp_path / "pyhoc-dev.yaml").write_text("db:\n  url: dev-url\n")
        (tmp_path / "pyhoc-local.yaml").write_text("db:\n  url: local-url\n")

        config = Config.from_sources(tmp_path, active_profiles=["dev", "local"])
        assert config.get("db.url") == "local-url"

    def test_profile_replaces_lists(self, tmp_path: Path):
        (tmp_path / "pyhoc.yaml").write_text("pyhoc:\n  cors:\n    allowed-origins: [https://a.example.com]\n")
        (tmp_path / "pyhoc-prod.yaml").write_text("pyhoc:\n  cors:\n    allowed-origins: [https://b.example.com]\n")

        config = Config.from_sources(tmp_path, active_profiles=["prod"])
        assert config.get("pyhoc.cors.allowed-origins") == ["https://b.example.com"]

    def test_missing_profile_file_is_skipped(self, tmp_path: Path):
        (tmp_path / "pyhoc.yaml").write_text("app:\n  name: test\n")
        config = Config.from_sources(tmp_path, active_profiles=["nonexistent"])
        assert config.get("app.name") == "test"


class TestMalformedFiles:
    def test_malformed_yaml(self, tmp_path: Path):
        (tmp_path / "pyhoc.yaml").write_text("pyhoc: [unclosed\n")
        with pytest.raises(ConfigurationException) as exc_info:
            Config.from_sources(tmp_path)
        assert exc_info.value.code == "CONFIG_PARSE_ERROR"

    def test_top_level_must_be_mapping(self, tmp_path: Path):
        (tmp_path / "pyhoc.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigurationException) as exc_info:
            Config.from_sources(tmp_path)
        assert exc_info.value.context == {"path": str(tmp_path / "pyhoc.yaml")}


class TestConfigProperties:
    def test_bind_to_dataclass(self):
        @config_properties(prefix="database")
        @dataclass
        class DatabaseConfig:
            url: str = "sqlite:///test.db"
            pool_size: int = 5

        config = Config({"database": {"url": "postgresql://localhost/mydb", "pool_size": 20}})
        db_config = config.bind(DatabaseConfig)
        assert db_config.url == "postgresql://localhost/mydb"
        assert db_config.pool_size == 20

    def test_bind_uses_defaults(self):
        @config_properties(prefix="database")
        @dataclass
        class DatabaseConfig:
            url: str = "sqlite:///default.db"
            pool_size: int = 5

        db_config = Config({}).bind(DatabaseConfig)
        assert db_config.url == "sqlite:///default.db"
        assert db_config.pool_size == 5

    def test_bind_dataclass_coerces_env_values(self, monkeypatch):
        @config_properties(prefix="pyhoc.app")
        @dataclass
        class AppConfig:
            debug: bool = False
            workers: int = 1

        monkeypatch.setenv("PYHOC_APP_DEBUG", "yes")
        monkeypatch.setenv("PYHOC_APP_WORKERS", "4")
        app_config = Config({}).bind(AppConfig)
        assert app_config.debug is True
        assert app_config.workers == 4

    def test_bind_requires_decorator(self):
        @dataclass
        class Plain:
            x: int = 1

        with pytest.raises(ConfigurationException) as exc_info:
            Config({}).bind(Plain)
        assert exc_info.value.code == "CONFIG_NOT_BINDABLE"


class TestBindResolvesPlaceholders:
    def test_placeholder_inside_list(self, tmp_path: Path, monkeypatch):
        (tmp_path / "pyhoc.yaml").write_text("pyhoc:\n  cors:\n    allowed-origins:\n      - ${FRONTEND_ORIGIN}\n")
        monkeypatch.setenv("FRONTEND_ORIGIN", "https://app.example.com")

        settings = Config.from_sources(tmp_path).bind(CorsSettings)
        assert resolve(settings).allowed_origins == ("https://app.example.com",)

    def test_placeholder_in_scalar_field(self):
        @config_properties(prefix="database")
        @dataclass
        class DatabaseConfig:
            url: str = ""

        config = Config({"db": {"host": "db.internal"}, "database": {"url": "postgresql://${db.host}/orders"}})
        assert config.bind(DatabaseConfig).url == "postgresql://db.internal/orders"

    def test_placeholder_default(self):
        @config_properties(prefix="database")
        @dataclass
        class DatabaseConfig:
            url: str = ""

        config = Config({"database": {"url": "${DATABASE_URL_UNSET_FOR_TEST:sqlite:///local.db}"}})
        assert config.bind(DatabaseConfig).url == "sqlite:///local.db"

    def test_unresolvable_placeholder_fails_binding(self):
        config = Config({"pyhoc": {"cors": {"allowed-origins": ["${NO_SUCH_ORIGIN_FOR_TEST}"]}}})
        with pytest.raises(ConfigurationException) as exc_info:
            config.bind(CorsSettings)
        assert exc_info.value.code == "CONFIG_PLACEHOLDER"
        assert exc_info.value.context == {"prefix": "pyhoc.cors"}
