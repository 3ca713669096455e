"""
Configuration file loading with per-path caching.

Turns a file path into an evaluated module. Python files are executed with
importlib; YAML and JSON files are parsed and wrapped in a synthetic module
whose export attribute holds the document. Loaded modules are registered in
sys.modules under a name derived from their path, which is what makes a
second load of the same file free.
"""

from __future__ import annotations

import hashlib
import importlib.util
import json
import logging
import re
import sys
import threading
import types
from collections.abc import Callable
from pathlib import Path

import yaml

from .errors import ConfigLoadError, ConfigNotFoundError, UnsupportedExtensionError
from .settings import DEFAULT_EXPORT_NAME

logger = logging.getLogger(__name__)

MODULE_PREFIX = "_lazyconf_"

_path_locks: dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def module_name_for(path: Path, export_name: str = DEFAULT_EXPORT_NAME) -> str:
    """Return the sys.modules name used for a configuration file."""
    digest = hashlib.sha1(f"{path}:{export_name}".encode()).hexdigest()[:12]
    stem = re.sub(r"\W", "_", path.stem)
    return f"{MODULE_PREFIX}{stem}_{digest}"


def _lock_for(name: str) -> threading.Lock:
    with _path_locks_guard:
        lock = _path_locks.get(name)
        if lock is None:
            lock = _path_locks[name] = threading.Lock()
        return lock


def load_module(
    path: str | Path,
    *,
    key: str | None = None,
    export_name: str = DEFAULT_EXPORT_NAME,
) -> types.ModuleType:
    """
    Load a configuration file as a module, once per resolved path.

    Args:
        path: Configuration file to load.
        key: Configuration key, used in error messages (defaults to the stem).
        export_name: Attribute data files store their document under.

    Returns:
        The evaluated (possibly cached) module.

    Raises:
        ConfigNotFoundError: if the file does not exist.
        ConfigLoadError: if the file fails to evaluate or parse.
        UnsupportedExtensionError: if no loader handles the file's suffix.
    """
    path = Path(path).resolve()
    key = key or path.stem

    if not path.is_file():
        raise ConfigNotFoundError(key, str(path))

    build = _LOADERS.get(path.suffix.lower())
    if build is None:
        raise UnsupportedExtensionError(f"No loader for '{path.suffix}' files: {path}")

    name = module_name_for(path, export_name)
    with _lock_for(name):
        module = sys.modules.get(name)
        if module is not None:
            logger.debug(f"Configuration module cache hit: {path}")
            return module

        module = build(name, path, key, export_name)
        logger.info(
            "Configuration loaded from %s",
            path,
            extra={"config_key": key, "config_path": str(path)},
        )
        return module


def _load_python(name: str, path: Path, key: str, export_name: str) -> types.ModuleType:
    spec = importlib.util.spec_from_file_location(name, str(path))
    if spec is None or spec.loader is None:
        raise ConfigLoadError(key, str(path), "not an importable Python file")

    module = importlib.util.module_from_spec(spec)
    # Registered before execution so dataclasses and friends can find it
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(name, None)
        raise ConfigLoadError(key, str(path), f"{type(e).__name__}: {e}") from e
    except BaseException:
        # SystemExit, KeyboardInterrupt: propagate, but never cache a half-run module
        sys.modules.pop(name, None)
        raise
    return module


def _load_yaml(name: str, path: Path, key: str, export_name: str) -> types.ModuleType:
    try:
        with path.open(encoding="utf-8") as file:
            document = yaml.safe_load(file)
    except Exception as e:
        raise ConfigLoadError(key, str(path), f"{type(e).__name__}: {e}") from e
    return _data_module(name, path, export_name, document)


def _load_json(name: str, path: Path, key: str, export_name: str) -> types.ModuleType:
    try:
        with path.open(encoding="utf-8") as file:
            document = json.load(file)
    except Exception as e:
        raise ConfigLoadError(key, str(path), f"{type(e).__name__}: {e}") from e
    return _data_module(name, path, export_name, document)


def _data_module(
    name: str, path: Path, export_name: str, document: object
) -> types.ModuleType:
    module = types.ModuleType(name, f"Configuration data loaded from {path}")
    module.__file__ = str(path)
    setattr(module, export_name, document)
    sys.modules[name] = module
    return module


_LOADERS: dict[str, Callable[[str, Path, str, str], types.ModuleType]] = {
    ".py": _load_python,
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
    ".json": _load_json,
}
