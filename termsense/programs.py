# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Is a program available on ``PATH``?

Program names are passed to ``which`` (or ``where`` on Windows), so names
with shell metacharacters or control characters are rejected upfront.
Such names produce an :class:`InvalidCommandError` value,
which is returned, not raised.

.. autoclass:: ExecutablePresenceDetector
   :members:

.. autoclass:: InvalidCommandError
   :members:

.. autodata:: INVALID_COMMAND_CHARS

"""

from __future__ import annotations

import os
from dataclasses import dataclass

import termsense
import termsense._cache
import termsense.exec
import termsense.host
import termsense.settings
from termsense import _typing as _t

__all__ = [
    "INVALID_COMMAND_CHARS",
    "ExecutablePresenceDetector",
    "InvalidCommandError",
]

INVALID_COMMAND_CHARS: frozenset[str] = frozenset("&;\\$><'\"`") | frozenset(
    map(chr, range(0x20))
)
"""
Characters that can't appear in a program name.

"""


@dataclass(frozen=True, slots=True)
class InvalidCommandError:
    """
    Returned instead of a result when a program name contains
    a forbidden character.

    Evaluates to :data:`False`, so it can be checked like a negative result.

    """

    command: str
    """
    The offending program name.

    """

    char: str
    """
    First forbidden character found in the name.

    """

    kind: str = "invalid-command"

    @property
    def message(self) -> str:
        return (
            f"program name {self.command!r} contains "
            f"forbidden character {self.char!r}"
        )

    def __bool__(self) -> _t.Literal[False]:
        return False


class ExecutablePresenceDetector:
    """
    Checks whether programs can be found on ``PATH``.

    Results are cached by exact name until :meth:`reset`.

    :param runner:
        runs ``which`` or ``where``. Default is :func:`termsense.exec.run`.
    :param env:
        environment used to build default settings.
        Default is :data:`os.environ`.
    :param settings:
        timeouts. Default is built from ``env``.
    :param platform:
        platform name that decides which lookup command to use.
        Default is :func:`termsense.host.discover_os`.

    """

    def __init__(
        self,
        runner: termsense.exec.CommandRunner | None = None,
        env: _t.Mapping[str, str] | None = None,
        settings: termsense.settings.Settings | None = None,
        platform: str | None = None,
    ):
        self._runner = runner or termsense.exec.run
        self._env = env
        self._settings = settings
        self._platform = platform
        self._cache: termsense._cache.KeyedMemo[str, bool] = (
            termsense._cache.KeyedMemo()
        )

    @property
    def settings(self) -> termsense.settings.Settings:
        env = os.environ if self._env is None else self._env
        return self._settings or termsense.settings.Settings.from_env(env)

    def detect(self, name: str, /) -> bool | InvalidCommandError:
        """
        Check if ``name`` is an executable on ``PATH``.

        :example:
            ::

                >>> detector = ExecutablePresenceDetector()
                >>> detector.detect("   ")
                False
                >>> detector.detect("ls; rm -rf /")
                InvalidCommandError(command='ls; rm -rf /', char=';', kind='invalid-command')

        """

        for char in name:
            if char in INVALID_COMMAND_CHARS:
                return InvalidCommandError(name, char)

        if not name.strip():
            return False

        cached = self._cache.get(name)
        if cached is not termsense.MISSING:
            return cached

        platform = self._platform or termsense.host.discover_os()
        lookup = "where" if platform == "win32" else "which"
        result = self._runner(lookup, name, timeout=self.settings.command_timeout)
        termsense._logger.debug("%s %s: exit code %s", lookup, name, result.exit_code)
        return self._cache.set(name, result.ok)

    def reset(self):
        self._cache.reset()
