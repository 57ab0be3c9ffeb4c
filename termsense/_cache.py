# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Process-lifetime memo cells used by detectors.

A detector owns its cells, so a fresh detector always starts with
an empty cache.

"""

from __future__ import annotations

import termsense
from termsense import _typing as _t

T = _t.TypeVar("T")
K = _t.TypeVar("K")


class Memo(_t.Generic[T]):
    """
    A single memoized value, or :data:`~termsense.MISSING`.

    """

    def __init__(self):
        self._value: T | termsense.Missing = termsense.MISSING

    def get(self) -> T | termsense.Missing:
        return self._value

    def set(self, value: T, /) -> T:
        self._value = value
        return value

    def reset(self):
        self._value = termsense.MISSING

    @property
    def is_set(self) -> bool:
        return self._value is not termsense.MISSING

    def __repr__(self) -> str:
        return f"Memo({self._value!r})"


class KeyedMemo(_t.Generic[K, T]):
    """
    Memoized values keyed by exact key. Keys are never normalized.

    """

    def __init__(self):
        self._values: dict[K, T] = {}

    def get(self, key: K, /) -> T | termsense.Missing:
        return self._values.get(key, termsense.MISSING)

    def set(self, key: K, value: T, /) -> T:
        self._values[key] = value
        return value

    def reset(self):
        self._values = {}

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values
