"""In-memory key-value store holding string and list values."""

import threading
from typing import Optional, Union

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class WrongTypeError(TypeError):
    """Operation against a key holding the wrong kind of value."""


class NotAnIntegerError(ValueError):
    """Stored value is not an integer or the result would overflow."""


class KVStore:
    """Thread-safe store. Each key holds either a string or a list of strings."""

    def __init__(self):
        self._data: dict[str, Union[str, list[str]]] = {}
        self._lock = threading.RLock()

    def _get_string(self, key: str) -> Optional[str]:
        value = self._data.get(key)
        if isinstance(value, list):
            raise WrongTypeError("WRONGTYPE Operation against a key holding the wrong kind of value")
        return value

    def _get_list(self, key: str) -> list[str]:
        value = self._data.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise WrongTypeError("WRONGTYPE Operation against a key holding the wrong kind of value")
        return value

    def get(self, key: str) -> Optional[str]:
        """Get value for key. Returns None if key does not exist."""
        with self._lock:
            return self._get_string(key)

    def set(self, key: str, value: str) -> None:
        """Set key to value, replacing any previous value of either kind."""
        with self._lock:
            self._data[key] = value

    def incr(self, key: str) -> int:
        """Increment the integer stored at key (missing counts as 0)."""
        with self._lock:
            current = self._get_string(key)
            try:
                number = int(current) if current is not None else 0
            except ValueError:
                raise NotAnIntegerError("ERR value is not an integer or out of range") from None
            if current is not None and str(number) != current:
                # rejects " 5", "+5", "05"
                raise NotAnIntegerError("ERR value is not an integer or out of range")
            if not _INT64_MIN <= number + 1 <= _INT64_MAX:
                raise NotAnIntegerError("ERR increment or decrement would overflow")
            number += 1
            self._data[key] = str(number)
            return number

    def lpush(self, key: str, *values: str) -> int:
        """Prepend values one at a time; returns the new list length."""
        with self._lock:
            items = self._get_list(key)
            for value in values:
                items.insert(0, value)
            self._data[key] = items
            return len(items)

    def lrange(self, key: str, start: int, stop: int) -> list[str]:
        """Inclusive range with negative indices counted from the end."""
        with self._lock:
            items = self._get_list(key)
            n = len(items)
            if start < 0:
                start = max(n + start, 0)
            if stop < 0:
                stop = n + stop
            if start > stop or start >= n:
                return []
            return list(items[start:stop + 1])
