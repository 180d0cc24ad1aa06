"""Tests for configuration loading and runtime building."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from gauntlet.config import PLUGIN_DIRS_ENV, Config, build_runtime
from gauntlet.exceptions import ConfigurationError, PluginConflictError, PluginLoadError


def _write_settings(config_dir: Path, text: str) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "settings.yaml").write_text(text)


def _write_plugin(path: Path, namespace: str) -> Path:
    path.mkdir(parents=True)
    (path / "plugin.yaml").write_text(f"namespace: {namespace}\n")
    return path


@pytest.fixture(autouse=True)
def _clear_plugin_dirs_env():
    with patch.dict(os.environ, {}, clear=False):
        os.environ.pop(PLUGIN_DIRS_ENV, None)
        yield


class TestConfig:
    """Tests for Config accessors."""

    def test_defaults_without_settings(self, tmp_path):
        config = Config(tmp_path)
        assert config.settings == {}
        assert config.plugin_dirs == []
        assert config.strict_namespaces is False
        assert config.logging_level == "INFO"
        assert config.logging_subsystem_levels == {}
        assert config.log_dir is None
        assert config.logging_max_file_size_mb == 10
        assert config.logging_backup_count == 5

    def test_plugin_dirs_resolve_relative_to_config_dir(self, tmp_path):
        _write_settings(tmp_path, "plugin_dirs:\n  - plugins/app\n  - /abs/tools\n")
        config = Config(tmp_path)
        assert config.plugin_dirs == [tmp_path / "plugins" / "app", Path("/abs/tools")]

    def test_env_var_overrides_settings(self, tmp_path):
        _write_settings(tmp_path, "plugin_dirs:\n  - plugins/app\n")
        config = Config(tmp_path)
        value = os.pathsep.join(["/one", "/two"])
        with patch.dict(os.environ, {PLUGIN_DIRS_ENV: value}):
            assert config.plugin_dirs == [Path("/one"), Path("/two")]

    def test_non_list_plugin_dirs_ignored(self, tmp_path):
        _write_settings(tmp_path, "plugin_dirs: plugins/app\n")
        assert Config(tmp_path).plugin_dirs == []

    def test_logging_settings(self, tmp_path):
        _write_settings(
            tmp_path,
            "log_dir: /var/log/gauntlet\n"
            "logging:\n"
            "  level: DEBUG\n"
            "  subsystem_levels:\n"
            "    plugins: WARNING\n"
            "  max_file_size_mb: 2\n"
            "  backup_count: 1\n",
        )
        config = Config(tmp_path)
        assert config.log_dir == Path("/var/log/gauntlet")
        assert config.logging_level == "DEBUG"
        assert config.logging_subsystem_levels == {"plugins": "WARNING"}
        assert config.logging_max_file_size_mb == 2
        assert config.logging_backup_count == 1

    def test_non_mapping_settings_raise(self, tmp_path):
        _write_settings(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigurationError):
            Config(tmp_path)

    def test_unparseable_settings_raise(self, tmp_path):
        _write_settings(tmp_path, "plugin_dirs: [oops\n")
        with pytest.raises(ConfigurationError):
            Config(tmp_path)

    def test_validate_does_not_raise(self, tmp_path):
        _write_settings(
            tmp_path,
            "plugin_dirs:\n  - missing\nlogging:\n  level: LOUD\n",
        )
        Config(tmp_path).validate()


class TestBuildRuntime:
    """Tests for build_runtime()."""

    def test_loads_plugins_in_order(self, tmp_path):
        _write_plugin(tmp_path / "plugins" / "b", "beta")
        _write_plugin(tmp_path / "plugins" / "a", "alpha")
        _write_settings(tmp_path, "plugin_dirs:\n  - plugins/b\n  - plugins/a\n")

        runtime = build_runtime(Config(tmp_path))

        assert [p.namespace for p in runtime.plugins] == ["beta", "alpha"]

    def test_missing_plugin_dir_raises(self, tmp_path):
        _write_settings(tmp_path, "plugin_dirs:\n  - plugins/missing\n")
        with pytest.raises(PluginLoadError):
            build_runtime(Config(tmp_path))

    def test_strict_namespaces_applied(self, tmp_path):
        _write_plugin(tmp_path / "plugins" / "one", "app")
        _write_plugin(tmp_path / "plugins" / "two", "app")
        _write_settings(
            tmp_path,
            "strict_namespaces: true\nplugin_dirs:\n  - plugins/one\n  - plugins/two\n",
        )
        with pytest.raises(PluginConflictError):
            build_runtime(Config(tmp_path))


class TestMalformedLoggingSection:
    """A non-mapping logging key falls back to defaults."""

    @pytest.mark.parametrize("text", ["logging:\n", "logging: DEBUG\n"])
    def test_accessors_use_defaults(self, tmp_path, text):
        _write_settings(tmp_path, text)
        config = Config(tmp_path)
        assert config.logging_level == "INFO"
        assert config.logging_subsystem_levels == {}
        assert config.logging_max_file_size_mb == 10
        assert config.logging_backup_count == 5

    def test_validate_logs_non_mapping(self, tmp_path):
        _write_settings(tmp_path, "logging: DEBUG\n")
        with patch("gauntlet.config.logger") as mock_logger:
            Config(tmp_path).validate()
        mock_logger.error.assert_any_call(
            "config_invalid_value", key="logging", type="str", valid="mapping"
        )

    def test_validate_accepts_null_logging(self, tmp_path):
        _write_settings(tmp_path, "logging:\n")
        with patch("gauntlet.config.logger") as mock_logger:
            Config(tmp_path).validate()
        mock_logger.error.assert_not_called()

    def test_non_integer_size_raises_configuration_error(self, tmp_path):
        _write_settings(tmp_path, "logging:\n  backup_count: lots\n")
        with pytest.raises(ConfigurationError) as exc_info:
            Config(tmp_path).logging_backup_count
        assert exc_info.value.setting_name == "logging.backup_count"
