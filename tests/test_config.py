"""Tests for the Configer facade and the new() builder."""

import logging
import pytest
from datetime import datetime, timedelta, timezone

import configer
from configer import Configer, Settings
from configer.exceptions import ConfigLoadError, EnvBindError
from configer.store import ZERO_DURATION, ZERO_TIME


class TestSettings:
    """Test cases for option handling."""

    def test_defaults(self):
        """Test default settings."""
        settings = Settings()
        assert settings.config_file_type == "toml"
        assert settings.config_file_prefix == "config/"
        assert settings.env_var_name == "ENV"
        assert settings.auto_env is True
        assert settings.env_prefix == ""
        assert settings.bind_env_keys == []
        assert settings.custom_store is None
        assert settings.default_config_file == "config/default.toml"
        assert settings.env_config_file("PROD") == "config/prod.toml"

    def test_options_apply_in_order(self):
        """Test that later options win and bind keys are replaced."""
        settings = Settings()
        options = [
            configer.with_config_file_type("yaml"),
            configer.with_config_file_type("json"),
            configer.with_env_config_file_prefix("etc/"),
            configer.with_env_var_name("APP_ENV"),
            configer.with_automatic_env(False),
            configer.with_env_prefix("APP"),
            configer.with_bind_env("a", "b"),
            configer.with_bind_env("c"),
            configer.with_environ({"X": "1"}),
        ]
        for option in options:
            option(settings)

        assert settings.config_file_type == "json"
        assert settings.default_config_file == "etc/default.json"
        assert settings.env_var_name == "APP_ENV"
        assert settings.auto_env is False
        assert settings.env_prefix == "APP"
        assert settings.bind_env_keys == ["c"]
        assert settings.environ == {"X": "1"}


class TestNew:
    """Test cases for building a Configer."""

    def test_default_file(self, build):
        """Test that every key of the default file is readable."""
        cfg = build()
        assert isinstance(cfg, Configer)
        assert cfg.string("name") == "example"
        assert cfg.bool("debug") is False
        assert cfg.float64("ratio") == 0.75
        assert cfg.strings("tags") == ["api", "worker"]
        assert cfg.time("started") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert cfg.string("server.host") == "localhost"
        assert cfg.int("server.port") == 8080
        assert cfg.int64("server.port") == 8080
        assert cfg.uint("server.port") == 8080
        assert cfg.duration("server.timeout") == timedelta(seconds=30)
        assert cfg.string_map("database.options") == {"sslmode": "disable"}

    def test_missing_default_file(self, temp_dir):
        """Test that a missing default file aborts construction."""
        with pytest.raises(ConfigLoadError) as exc_info:
            configer.new(
                configer.with_env_config_file_prefix(f"{temp_dir}/"),
                configer.with_environ({})
            )
        assert f"{temp_dir}/default.toml" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    def test_invalid_default_file(self, config_prefix, write_config):
        """Test that an unparseable default file aborts construction."""
        write_config("default.toml", "[server\nport = 8080\n")
        with pytest.raises(ConfigLoadError) as exc_info:
            configer.new(
                configer.with_env_config_file_prefix(config_prefix),
                configer.with_environ({})
            )
        assert "default.toml" in str(exc_info.value)

    def test_unsupported_type(self, config_prefix, write_config):
        """Test that an unknown file type aborts construction."""
        write_config("default.xml", "<config/>")
        with pytest.raises(ConfigLoadError):
            configer.new(
                configer.with_env_config_file_prefix(config_prefix),
                configer.with_config_file_type("xml"),
                configer.with_environ({})
            )

    def test_overlay_unset(self, build, config_prefix):
        """Test that no overlay is merged when the selector is unset."""
        cfg = build({})
        assert cfg.int("server.port") == 8080
        assert cfg.string("database.host") == "db.local"

    def test_overlay_merged(self, build):
        """Test that the selected overlay wins and other defaults are kept."""
        cfg = build({"ENV": "PROD"})
        assert cfg.int("server.port") == 9090
        assert cfg.string("database.host") == "db.prod"
        assert cfg.string("server.host") == "localhost"
        assert cfg.int("database.pool_size") == 10

    def test_overlay_missing(self, build):
        """Test that a selector without a matching file is ignored."""
        assert build({"ENV": "staging"}).all_settings() == build({}).all_settings()

    def test_overlay_invalid(self, build, write_config):
        """Test that a malformed overlay aborts construction."""
        write_config("broken.toml", "port = = 1\n")
        with pytest.raises(ConfigLoadError) as exc_info:
            build({"ENV": "Broken"})
        assert "broken.toml" in str(exc_info.value)

    def test_custom_env_var_name(self, build):
        """Test a custom selector variable."""
        cfg = build({"ENV": "missing", "APP_ENV": "prod"}, configer.with_env_var_name("APP_ENV"))
        assert cfg.int("server.port") == 9090

    def test_overlay_unreadable(self, build, temp_dir):
        """Test that an overlay path that exists but cannot be read aborts construction."""
        (temp_dir / "config" / "direnv.toml").mkdir()
        with pytest.raises(ConfigLoadError) as exc_info:
            build({"ENV": "direnv"})
        assert "direnv.toml" in str(exc_info.value)

    def test_yaml_files(self, temp_dir, write_config):
        """Test loading YAML files."""
        write_config("default.yaml", "server:\n  port: 8080\n")
        write_config("dev.yaml", "server:\n  port: 3000\n")
        cfg = configer.new(
            configer.with_config_file_type("yaml"),
            configer.with_env_config_file_prefix(f"{temp_dir / 'config'}/"),
            configer.with_environ({"ENV": "dev"})
        )
        assert cfg.int("server.port") == 3000

    def test_automatic_env_precedence(self, build):
        """Test that env beats both files with automatic capture."""
        environ = {"ENV": "prod", "APP_SERVER_PORT": "7070"}
        cfg = build(environ, configer.with_env_prefix("APP"))
        assert cfg.int("server.port") == 7070
        assert cfg.string("database.host") == "db.prod"

    def test_automatic_env_disabled(self, build):
        """Test that env is ignored when automatic capture is off."""
        environ = {"SERVER_PORT": "7070"}
        cfg = build(environ, configer.with_automatic_env(False))
        assert cfg.int("server.port") == 8080
        assert not cfg.exists("server.missing")

    def test_bind_env(self, build):
        """Test explicit bindings with automatic capture off."""
        environ = {"APP_DATABASE_HOST": "db.env", "APP_SERVER_PORT": "7070"}
        cfg = build(
            environ,
            configer.with_automatic_env(False),
            configer.with_env_prefix("APP"),
            configer.with_bind_env("database.host")
        )
        assert cfg.string("database.host") == "db.env"
        assert cfg.int("server.port") == 8080

    def test_bind_env_failure(self, build):
        """Test that an invalid bind key aborts construction."""
        with pytest.raises(EnvBindError) as exc_info:
            build({}, configer.with_bind_env("database.host", ""))
        assert "'key': ''" in str(exc_info.value)

    def test_custom_store_hook(self, build):
        """Test that the hook runs before files are read."""
        seen = []

        def hook(store):
            seen.append(store.config_file)
            store.set_default("server.workers", 4)
            store.set_default("server.port", 1)

        cfg = build({}, configer.with_custom_store(hook))
        assert seen == [""]
        assert cfg.int("server.workers") == 4
        assert cfg.int("server.port") == 8080

    def test_live_os_environ(self, config_prefix, monkeypatch):
        """Test that the default environment is the live os.environ."""
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.setenv("CONFIGER_TEST_SERVER_PORT", "6060")
        cfg = configer.new(
            configer.with_env_config_file_prefix(config_prefix),
            configer.with_env_prefix("CONFIGER_TEST")
        )
        assert cfg.int("server.port") == 6060

        monkeypatch.setenv("CONFIGER_TEST_SERVER_PORT", "6161")
        assert cfg.int("server.port") == 6161


class TestConfigerScenario:
    """End-to-end scenario across default, overlay and environment."""

    def test_precedence_chain(self, build):
        """Test 8080 from defaults, 9090 from prod overlay, 7070 from env."""
        assert build({}).int("server.port") == 8080
        assert build({"ENV": "PROD"}).int("server.port") == 9090

        environ = {"ENV": "PROD", "APP_SERVER_PORT": "7070"}
        cfg = build(environ, configer.with_automatic_env(), configer.with_env_prefix("APP"))
        assert cfg.int("server.port") == 7070


class TestConfigerGetters:
    """Test cases for zero values and existence checks."""

    def test_missing_key_zero_values(self, build):
        """Test that missing keys give zero values without raising."""
        cfg = build()
        assert cfg.string("missing.key") == ""
        assert cfg.int("missing.key") == 0
        assert cfg.int64("missing.key") == 0
        assert cfg.uint("missing.key") == 0
        assert cfg.float64("missing.key") == 0.0
        assert cfg.bool("missing.key") is False
        assert cfg.strings("missing.key") == []
        assert cfg.string_map("missing.key") == {}
        assert cfg.duration("missing.key") == ZERO_DURATION
        assert cfg.time("missing.key") == ZERO_TIME
        assert not cfg.exists("missing.key")

    def test_mistyped_values(self, build):
        """Test that values of the wrong shape give zero values."""
        cfg = build()
        assert cfg.int("server.host") == 0
        assert cfg.string_map("server.port") == {}
        assert cfg.string("database") == ""
        assert cfg.time("server.host") == ZERO_TIME

    def test_exists(self, build):
        """Test existence across file and environment sources."""
        cfg = build({"NEW_FEATURE": "on"})
        assert cfg.exists("server.port")
        assert cfg.exists("server")
        assert cfg.exists("new.feature")
        assert not cfg.exists("old.feature")

    def test_leading_zero_is_octal(self, build):
        """Test that env integers with a leading zero are read as octal."""
        cfg = build({"SERVER_PORT": "010"})
        assert cfg.int("server.port") == 8

    def test_env_values_are_coerced(self, build):
        """Test typed getters over string env values."""
        environ = {"DEBUG": "true", "RATIO": "0.5", "TAGS": "a b", "SERVER_TIMEOUT": "1m30s"}
        cfg = build(environ)
        assert cfg.bool("debug") is True
        assert cfg.float64("ratio") == 0.5
        assert cfg.strings("tags") == ["a", "b"]
        assert cfg.duration("server.timeout") == timedelta(seconds=90)


class TestConfigerViews:
    """Test cases for sub-trees and snapshots."""

    def test_sub(self, build):
        """Test scoping to a nested map."""
        cfg = build({"ENV": "prod"})
        database = cfg.sub("database")
        assert isinstance(database, Configer)
        assert database.string("host") == "db.prod"
        assert database.int("pool_size") == 10
        assert database.string("options.sslmode") == "disable"
        assert not database.exists("server.port")

    def test_sub_keeps_env_names(self, build):
        """Test that env overrides use the full key path inside a sub-tree."""
        cfg = build({"APP_SERVER_PORT": "7070"}, configer.with_env_prefix("APP"))
        assert cfg.sub("server").int("port") == 7070

    def test_sub_missing_or_scalar(self, build):
        """Test that non-map keys give an empty Configer."""
        cfg = build()
        for key in ("missing", "server.port"):
            scoped = cfg.sub(key)
            assert isinstance(scoped, Configer)
            assert scoped.all_settings() == {}
            assert not scoped.exists("port")

    def test_empty_configer(self):
        """Test a Configer without a store."""
        cfg = Configer()
        assert cfg.all_settings() == {}
        assert cfg.string("anything") == ""

    def test_sub_and_string_map_include_defaults(self, build):
        """Test that defaults and overrides below a key reach sub-trees and maps."""
        def hook(store):
            store.set_default("server.workers", 4)
            store.set("server.region", "eu")

        cfg = build({}, configer.with_custom_store(hook))
        assert cfg.int("server.workers") == 4

        server = cfg.sub("server")
        assert server.int("workers") == 4
        assert server.string("region") == "eu"
        assert server.int("port") == 8080
        assert server.all_settings() == cfg.all_settings()["server"]

        assert cfg.string_map("server") == {
            "host": "localhost",
            "port": 8080,
            "timeout": "30s",
            "workers": 4,
            "region": "eu",
        }

    def test_all_settings(self, build):
        """Test the merged snapshot."""
        settings = build({"ENV": "prod", "SERVER_HOST": "0.0.0.0"}).all_settings()
        assert settings["server"] == {"host": "0.0.0.0", "port": 9090, "timeout": "30s"}
        assert settings["database"]["options"] == {"sslmode": "disable"}
        assert settings["tags"] == ["api", "worker"]


class TestSetupLogging:
    """Test cases for logging configuration from config files."""

    def test_setup_logging(self, build, temp_dir):
        """Test level and log file from the logging section."""
        log_file = temp_dir / "logs" / "app.log"
        cfg = build({"LOGGING_FILE": str(log_file)})
        cfg.setup_logging()
        try:
            assert logging.getLogger().level == logging.DEBUG
            assert log_file.parent.exists()
        finally:
            logging.getLogger().setLevel(logging.WARNING)
            for handler in logging.getLogger().handlers[:]:
                handler.close()
                logging.getLogger().removeHandler(handler)

    def test_unknown_level_falls_back_to_info(self, build):
        """Test that a level name that is not a logging level gives INFO."""
        cfg = build({"LOGGING_LEVEL": "basic_format"})
        cfg.setup_logging()
        try:
            assert logging.getLogger().level == logging.INFO
        finally:
            logging.getLogger().setLevel(logging.WARNING)
            for handler in logging.getLogger().handlers[:]:
                handler.close()
                logging.getLogger().removeHandler(handler)
