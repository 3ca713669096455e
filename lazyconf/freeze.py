"""
Deep immutability for configuration values.

deep_freeze() rebuilds a value so that nothing reachable from it can be
reassigned: mappings become FrozenDict, lists and tuples become tuples, sets
become frozensets and bytearrays become bytes. Anything else (numbers,
strings, None, arbitrary objects) is returned as-is.

Configuration values must be acyclic trees. A container that contains itself
raises ConfigCycleError instead of recursing forever.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from .errors import ConfigCycleError


class FrozenDict(Mapping[Any, Any]):
    """Read-only mapping produced by deep_freeze().

    Item assignment raises TypeError and attribute assignment raises
    AttributeError. A FrozenDict is only ever built from already-frozen
    values, so freezing it again is a no-op.
    """

    __slots__ = ("_data", "_hash")

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        object.__setattr__(self, "_data", dict(*args, **kwargs))
        object.__setattr__(self, "_hash", None)

    def __getitem__(self, key: Any) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FrozenDict({self._data!r})"

    def __hash__(self) -> int:
        if self._hash is None:
            object.__setattr__(self, "_hash", hash(frozenset(self._data.items())))
        return self._hash

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"FrozenDict is immutable; cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"FrozenDict is immutable; cannot delete '{name}'")

    def __reduce__(self) -> tuple[type[FrozenDict], tuple[dict[Any, Any]]]:
        return (FrozenDict, (self._data,))


def deep_freeze(value: Any) -> Any:
    """Return a deeply immutable version of ``value``.

    Raises:
        ConfigCycleError: if a mapping or sequence contains itself
    """
    return _freeze(value, set())


def _freeze(value: Any, active: set[int]) -> Any:
    if isinstance(value, FrozenDict):
        return value

    if isinstance(value, Mapping):
        _enter(value, active)
        try:
            return FrozenDict(
                {key: _freeze(item, active) for key, item in value.items()}
            )
        finally:
            active.discard(id(value))

    if isinstance(value, (list, tuple)):
        _enter(value, active)
        try:
            items = [_freeze(item, active) for item in value]
        finally:
            active.discard(id(value))
        if isinstance(value, tuple):
            if all(new is old for new, old in zip(items, value)):
                return value
            # namedtuples keep their type
            if hasattr(value, "_fields"):
                return type(value)(*items)
        return tuple(items)

    if isinstance(value, set):
        # set members are hashable, hence already immutable
        return frozenset(value)

    if isinstance(value, bytearray):
        return bytes(value)

    return value


def _enter(container: Any, active: set[int]) -> None:
    if id(container) in active:
        raise ConfigCycleError(
            f"Configuration value contains a reference cycle through "
            f"{type(container).__name__}"
        )
    active.add(id(container))


def thaw(value: Any) -> Any:
    """Convert a frozen tree back into plain dicts, lists and sets."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    if isinstance(value, frozenset):
        return set(value)
    return value
