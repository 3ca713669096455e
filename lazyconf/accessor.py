"""
Lazy, immutable access to a directory of configuration files.

Each key maps to ``<directory>/<key><extension>``. Nothing is read until a key
is requested; the file is then loaded in a worker thread, its export is deeply
frozen and the frozen value is returned.

Access styles (all equivalent, all awaitable):

    await config.get("database")
    await config["database"]
    await config.database

Attribute access is only intercepted for names that are not already
attributes of the accessor and do not start with an underscore, so keys such
as ``get`` or ``status`` must go through ``get()``.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable
from pathlib import Path
from typing import Any

from .errors import InvalidConfigKeyError, LazyConfError
from .freeze import deep_freeze
from .loader import load_module
from .logging import get_logger
from .settings import AccessorSettings

logger = get_logger(__name__)


class ConfigAccessor:
    """
    Resolves configuration keys to deeply frozen values on demand.

    Loaded modules stay cached for the life of the process, so repeated reads
    of a key return the same frozen object. Concurrent reads of a key that is
    still loading share a single load.

    Any public attribute name resolves to a pending load, so
    ``hasattr(accessor, name)`` is always True and leaves an un-awaited
    coroutine behind (Python warns "coroutine was never awaited"). Use
    ``path_for(key).is_file()`` to test whether a key exists.
    """

    def __init__(self, settings: AccessorSettings | None = None) -> None:
        self._settings = settings or AccessorSettings.from_env()
        self._pending: dict[Path, asyncio.Task[Any]] = {}
        self._loaded: set[str] = set()

    @property
    def settings(self) -> AccessorSettings:
        return self._settings

    def __getattr__(self, name: str) -> Awaitable[Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __getitem__(self, key: str) -> Awaitable[Any]:
        return self.get(key)

    def __repr__(self) -> str:
        return (
            f"ConfigAccessor(directory={str(self._settings.directory)!r}, "
            f"extension={self._settings.extension!r})"
        )

    def path_for(self, key: str) -> Path:
        """
        Return the file path a key resolves to.

        Raises:
            InvalidConfigKeyError: for empty or absolute keys, or keys that
                resolve outside the configuration directory.
        """
        if not isinstance(key, str) or not key.strip():
            raise InvalidConfigKeyError("Configuration key must be a non-empty string")
        if Path(key).is_absolute():
            raise InvalidConfigKeyError(f"Configuration key must be relative: {key!r}")

        directory = self._settings.directory
        path = Path(os.path.normpath(directory / f"{key}{self._settings.extension}"))
        if not path.is_relative_to(directory):
            raise InvalidConfigKeyError(
                f"Configuration key {key!r} resolves outside {directory}"
            )
        return path

    async def get(self, key: str) -> Any:
        """
        Load, freeze and return the configuration exported for ``key``.

        Returns None when the file exists but defines no export.

        Raises:
            InvalidConfigKeyError: if the key cannot name a file.
            ConfigNotFoundError: if no file exists for the key.
            ConfigLoadError: if the file fails to evaluate or parse.
            ConfigCycleError: if the exported value contains a cycle.
        """
        path = self.path_for(key)

        task = self._pending.get(path)
        if task is None:
            task = asyncio.create_task(asyncio.to_thread(self._resolve, key, path))
            self._pending[path] = task

            def _forget(done: asyncio.Task[Any]) -> None:
                if self._pending.get(path) is done:
                    del self._pending[path]
                # Mark the outcome as retrieved; awaiters still receive it
                if not done.cancelled():
                    done.exception()

            task.add_done_callback(_forget)

        # One caller giving up must not cancel the load for everyone else
        return await asyncio.shield(task)

    def _resolve(self, key: str, path: Path) -> Any:
        extra = {"config_key": key, "config_path": str(path)}
        export_name = self._settings.export_name

        try:
            module = load_module(path, key=key, export_name=export_name)
        except LazyConfError as e:
            logger.warning(f"Configuration '{key}' unavailable: {e}", extra=extra)
            raise

        if not hasattr(module, export_name):
            logger.warning(
                f"Configuration '{key}' defines no {export_name}; resolving to None",
                extra=extra,
            )
            self._loaded.add(self._key_for(path))
            return None

        value = getattr(module, export_name)
        frozen = deep_freeze(value)
        if frozen is not value:
            # Later reads of the cached module see the frozen value
            setattr(module, export_name, frozen)

        self._loaded.add(self._key_for(path))
        return frozen

    def _key_for(self, path: Path) -> str:
        """Canonical key for a resolved path, so aliases such as "x/../a" collapse."""
        relative = path.relative_to(self._settings.directory).as_posix()
        return relative[: -len(self._settings.extension)]

    def status(self) -> dict[str, Any]:
        """
        Return accessor state for health reporting.

        Returns:
            Dict with the config directory, environment name, extension and
            the keys loaded so far.
        """
        return {
            "config_directory": str(self._settings.directory),
            "environment": self._settings.environment,
            "extension": self._settings.extension,
            "loaded_keys": sorted(self._loaded),
        }
