import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path for CI environments where
# Python might not automatically include it.
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lazyconf import AccessorSettings, ConfigAccessor
from lazyconf.settings import CONFIG_DIR_ENV, CONFIG_DIRECTORY_ENV, ENVIRONMENT_ENV

ENV_VARS = (CONFIG_DIRECTORY_ENV, CONFIG_DIR_ENV, ENVIRONMENT_ENV, "LAZYCONF_LOG_LEVEL")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove lazyconf environment variables; restored after the test.

    Each variable is set before being deleted so monkeypatch records the
    original state even when the variable was absent, which also undoes
    anything load_dotenv() writes.
    """
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def config_dir(tmp_path) -> Path:
    """An empty configuration directory unique to the test."""
    directory = tmp_path / "config"
    directory.mkdir()
    return directory


@pytest.fixture
def accessor(config_dir) -> ConfigAccessor:
    """Accessor over the per-test configuration directory."""
    return ConfigAccessor(AccessorSettings(directory=config_dir))
