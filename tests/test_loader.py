"""
Module Loader Tests

Tests for load_module(): caching, error classification and data files.
"""

import sys
from unittest.mock import patch

import pytest

from lazyconf import ConfigLoadError, ConfigNotFoundError, UnsupportedExtensionError
from lazyconf.loader import MODULE_PREFIX, load_module, module_name_for
from tests.factories import make_config, write_config, write_python_config


class TestLoadModule:
    """Test loading configuration files as modules."""

    def test_python_module_is_executed(self, config_dir):
        path = write_python_config(config_dir, "database", make_config())

        module = load_module(path)

        assert module.CONFIG == make_config()
        assert module.__file__ == str(path.resolve())

    def test_module_is_cached_per_path(self, config_dir):
        path = write_python_config(config_dir, "database", make_config())

        assert load_module(path) is load_module(path)
        assert module_name_for(path.resolve()) in sys.modules

    def test_missing_file_raises_not_found(self, config_dir):
        with pytest.raises(ConfigNotFoundError) as excinfo:
            load_module(config_dir / "missing.py", key="missing")

        assert excinfo.value.key == "missing"

    def test_directory_is_not_a_config_file(self, config_dir):
        (config_dir / "nested.py").mkdir()

        with pytest.raises(ConfigNotFoundError):
            load_module(config_dir / "nested.py")

    def test_key_defaults_to_file_stem(self, config_dir):
        with pytest.raises(ConfigNotFoundError) as excinfo:
            load_module(config_dir / "database.py")

        assert excinfo.value.key == "database"

    def test_unknown_suffix_raises(self, config_dir):
        path = config_dir / "notes.txt"
        path.write_text("hello", encoding="utf-8")

        with pytest.raises(UnsupportedExtensionError):
            load_module(path)

    def test_failed_module_is_not_registered(self, config_dir):
        path = write_python_config(config_dir, "broken", source="raise ValueError('bad')\n")

        with pytest.raises(ConfigLoadError) as excinfo:
            load_module(path)

        assert isinstance(excinfo.value.__cause__, ValueError)
        assert module_name_for(path.resolve()) not in sys.modules

    def test_exiting_module_is_not_cached(self, config_dir):
        path = write_python_config(
            config_dir,
            "exits",
            source="import sys\nsys.exit(3)\nCONFIG = {'never': 'reached'}\n",
        )

        with pytest.raises(SystemExit):
            load_module(path)

        assert module_name_for(path.resolve()) not in sys.modules
        # The next load runs the module again instead of returning a half-run one
        with pytest.raises(SystemExit):
            load_module(path)

    def test_unexpected_data_error_is_wrapped(self, config_dir):
        path = write_config(config_dir, "big", extension=".json", content='{"n": 1}')

        with patch("lazyconf.loader.json.load", side_effect=ValueError("too many digits")):
            with pytest.raises(ConfigLoadError) as excinfo:
                load_module(path)

        assert isinstance(excinfo.value.__cause__, ValueError)
        assert module_name_for(path.resolve()) not in sys.modules

    def test_yaml_document_becomes_export(self, config_dir):
        path = write_config(config_dir, "database", make_config())

        module = load_module(path, export_name="SETTINGS")

        assert module.SETTINGS == make_config()
        assert not hasattr(module, "CONFIG")

    def test_empty_yaml_exports_none(self, config_dir):
        path = write_config(config_dir, "empty", content="")

        assert load_module(path).CONFIG is None

    def test_json_document_becomes_export(self, config_dir):
        path = write_config(config_dir, "database", make_config(), extension=".json")

        assert load_module(path).CONFIG == make_config()


class TestModuleNames:
    """Test the sys.modules names derived from paths."""

    def test_name_is_stable(self, config_dir):
        path = config_dir / "database.py"

        assert module_name_for(path) == module_name_for(path)
        assert module_name_for(path).startswith(f"{MODULE_PREFIX}database_")

    def test_name_differs_per_path_and_export(self, config_dir):
        first = config_dir / "database.py"
        second = config_dir / "other" / "database.py"

        assert module_name_for(first) != module_name_for(second)
        assert module_name_for(first, "CONFIG") != module_name_for(first, "default")

    def test_name_is_a_valid_identifier(self, config_dir):
        assert module_name_for(config_dir / "my-service.config.py").isidentifier()
