"""
Key-value stores for URI parameters and headers.

Provides an abstract base class plus three interchangeable implementations:
an eager store decoded at parse time, a lazy store which validates at parse
time but decodes on first read, and a constant empty store.
"""

from __future__ import annotations

import threading
import typing
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

import rich.repr

from ._escape import check_unescape, encode_values, unescape
from ._utils import HEADERS_SEPARATOR, logger


# ============================================================================
# Base Class
# ============================================================================


class KeyValueStore(ABC, typing.Mapping[str, typing.List[str]]):
    """
    Abstract base class for multi-valued URI parameter/header stores.

    Every implementation presents the same read contract:
    - ``store[key]`` gives every value held for ``key``
    - ``get(key)`` gives the first value, or "" when absent
    - ``encode()`` serializes with sorted keys
    - ``count()`` and ``empty()`` describe the distinct keys
    """

    @abstractmethod
    def decode(self, raw: str, separator: str) -> None:
        """
        Populate the store from ``raw``, splitting pairs on ``separator``.

        Raises:
            EscapeError: If any key or value is malformed. The store is left
                unchanged.
        """
        ...

    @abstractmethod
    def encode(self, separator: str | None = None) -> str:
        """Serialize the store as ``key=value`` pairs in sorted key order."""
        ...

    @abstractmethod
    def empty(self) -> bool:
        """Check if the store holds no keys."""
        ...

    def count(self) -> int:
        """Return the number of distinct keys."""
        return len(self)

    def get(self, key: str, default: str = "") -> str:  # type: ignore[override]
        """Get the first value for ``key`` or ``default`` if absent."""
        values = self.get_all(key)
        return values[0] if values else default

    def get_all(self, key: str) -> list[str]:
        """Get every value for ``key`` in insertion order."""
        try:
            return list(self[key])
        except KeyError:
            return []

    def __rich_repr__(self) -> rich.repr.Result:
        for key in self:
            yield key, self[key]

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"{type(self).__name__}({{{items}}})"


def _split_pairs(raw: str, separator: str) -> typing.Iterator[tuple[str, str]]:
    """Yield the still escaped (key, value) pairs of ``raw``."""
    for pair in raw.split(separator):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        yield key, value


# ============================================================================
# Eager Implementation
# ============================================================================


class KeyValuePairs(KeyValueStore):
    """
    Eagerly decoded store backed by a ``dict[str, list[str]]``.

    Examples:
        >>> params = KeyValuePairs({"transport": ["tcp"], "lr": [""]})
        >>> params.get("transport")
        'tcp'
        >>> params.encode(";")
        'lr=;transport=tcp'
    """

    __slots__ = ("_values", "_separator")

    def __init__(
        self,
        values: Mapping[str, Iterable[str]] | None = None,
        separator: str = HEADERS_SEPARATOR,
    ) -> None:
        self._values: dict[str, list[str]] = {}
        self._separator = separator

        if values is not None:
            for key, vals in values.items():
                if isinstance(vals, str):
                    raise TypeError(f"values for {key!r} must be a sequence of str")
                self._values[key] = list(vals)

    def add(self, key: str, value: str) -> None:
        """Append ``value`` to the values held for ``key``."""
        self._values.setdefault(key, []).append(value)

    def decode(self, raw: str, separator: str) -> None:
        decoded: dict[str, list[str]] = {}
        for key, value in _split_pairs(raw, separator):
            decoded.setdefault(unescape(key), []).append(unescape(value))

        for key, values in decoded.items():
            self._values.setdefault(key, []).extend(values)
        self._separator = separator

    def encode(self, separator: str | None = None) -> str:
        return encode_values(self._values, separator or self._separator)

    def empty(self) -> bool:
        return not self._values

    def __getitem__(self, key: str) -> list[str]:
        return self._values[key]

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


# ============================================================================
# Lazy Implementation
# ============================================================================


class LazyStore(KeyValueStore):
    """
    Store which defers decoding until the first read.

    ``decode`` only records the raw text and validates its escapes, so
    malformed input still fails at parse time. The first read materializes
    a KeyValuePairs exactly once, even with concurrent readers.
    """

    __slots__ = ("_raw", "_separator", "_decoded", "_lock")

    def __init__(self) -> None:
        self._raw = ""
        self._separator = HEADERS_SEPARATOR
        self._decoded: KeyValuePairs | None = None
        self._lock = threading.Lock()

    def decode(self, raw: str, separator: str) -> None:
        for key, value in _split_pairs(raw, separator):
            check_unescape(key)
            check_unescape(value)

        with self._lock:
            if self._decoded is None and not self._raw:
                self._raw = raw
                self._separator = separator
                return
            # Holding earlier pairs, fold the new ones into the decoded view
            self._materialize_locked().decode(raw, separator)

    def _materialize_locked(self) -> KeyValuePairs:
        if self._decoded is None:
            decoded = KeyValuePairs(separator=self._separator)
            decoded.decode(self._raw, self._separator)
            logger.debug(f"Materialized lazy store with {len(decoded)} key(s)")
            self._decoded = decoded
        return self._decoded

    def _materialize(self) -> KeyValuePairs:
        decoded = self._decoded
        if decoded is not None:
            return decoded
        with self._lock:
            return self._materialize_locked()

    @property
    def materialized(self) -> bool:
        """Check if the raw text has been decoded yet."""
        return self._decoded is not None

    def encode(self, separator: str | None = None) -> str:
        return self._materialize().encode(separator or self._separator)

    def empty(self) -> bool:
        decoded = self._decoded
        if decoded is not None:
            return decoded.empty()
        # Any character other than a separator belongs to a non-empty pair
        return not self._raw.replace(self._separator, "")

    def __getitem__(self, key: str) -> list[str]:
        return self._materialize()[key]

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self._materialize())

    def __len__(self) -> int:
        return len(self._materialize())


# ============================================================================
# Empty Implementation
# ============================================================================


class EmptyStore(KeyValueStore):
    """Constant store that never holds anything."""

    __slots__ = ()

    def decode(self, raw: str, separator: str) -> None:
        return None

    def encode(self, separator: str | None = None) -> str:
        return ""

    def empty(self) -> bool:
        return True

    def count(self) -> int:
        return 0

    def get(self, key: str, default: str = "") -> str:  # type: ignore[override]
        return default

    def get_all(self, key: str) -> list[str]:
        return []

    def __getitem__(self, key: str) -> list[str]:
        raise KeyError(key)

    def __iter__(self) -> typing.Iterator[str]:
        return iter(())

    def __len__(self) -> int:
        return 0


# ============================================================================
# Exports
# ============================================================================


__all__ = [
    # Base class
    "KeyValueStore",
    # Implementations
    "KeyValuePairs",
    "LazyStore",
    "EmptyStore",
]
