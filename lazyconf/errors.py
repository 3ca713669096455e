"""
Exception classes raised by lazyconf.

Every failure surfaced by an accessor derives from LazyConfError, and also
from the closest builtin so callers can keep catching FileNotFoundError or
ValueError.
"""

import errno


class LazyConfError(Exception):
    """Base exception for lazyconf errors."""

    pass


class ConfigNotFoundError(LazyConfError, FileNotFoundError):
    """Raised when no configuration file exists for a key."""

    def __init__(self, key: str, path: str) -> None:
        super().__init__(errno.ENOENT, f"No configuration file for key '{key}'", path)
        self.key = key
        self.path = path


class ConfigLoadError(LazyConfError):
    """Raised when a configuration file exists but fails to evaluate or parse."""

    def __init__(self, key: str, path: str, reason: str) -> None:
        super().__init__(f"Failed to load configuration '{key}' from {path}: {reason}")
        self.key = key
        self.path = path


class InvalidConfigKeyError(LazyConfError, ValueError):
    """Raised for keys that are empty or point outside the config directory."""

    pass


class ConfigCycleError(LazyConfError, ValueError):
    """Raised when a configuration value contains a reference to itself."""

    pass


class UnsupportedExtensionError(LazyConfError, ValueError):
    """Raised when settings name a file extension no loader handles."""

    pass
