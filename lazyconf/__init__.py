"""
lazyconf

Lazy, immutable access to a directory of configuration files.
"""

from .accessor import ConfigAccessor
from .errors import (
    ConfigCycleError,
    ConfigLoadError,
    ConfigNotFoundError,
    InvalidConfigKeyError,
    LazyConfError,
    UnsupportedExtensionError,
)
from .freeze import FrozenDict, deep_freeze, thaw
from .settings import AccessorSettings

# NOTE: Settings are read from the environment at import time; no
# configuration file is touched until a key is awaited.
config = ConfigAccessor()
ENVIRONMENT = config.settings.environment

__all__ = [
    "ENVIRONMENT",
    "AccessorSettings",
    "ConfigAccessor",
    "ConfigCycleError",
    "ConfigLoadError",
    "ConfigNotFoundError",
    "FrozenDict",
    "InvalidConfigKeyError",
    "LazyConfError",
    "UnsupportedExtensionError",
    "config",
    "deep_freeze",
    "thaw",
]
