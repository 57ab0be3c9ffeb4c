# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
How many columns do we have for output?

:class:`AvailableWidthDetector` checks ``COLUMNS``, then the size reported
by the output stream, then asks the terminal directly. If nothing works,
it returns a fallback given by the caller.

.. autoclass:: AvailableWidthDetector
   :members:

.. autofunction:: parse_columns

.. autofunction:: parse_size_report

"""

from __future__ import annotations

import math
import os
import re

import termsense
import termsense._cache
import termsense.ansi
import termsense.settings
import termsense.term
from termsense import _typing as _t

__all__ = [
    "AvailableWidthDetector",
    "parse_columns",
    "parse_size_report",
]

SIZE_QUERY = termsense.ansi.ESC + "[18t"
"""
Asks the terminal for its text area size in characters.

"""

_SIZE_REPORT_RE = re.compile(r"\x1b\[8;(\d+);(\d+)t")
_CURSOR_REPORT_RE = re.compile(r"\x1b\[(\d+);(\d+)R")


def parse_columns(value: str | None) -> int | None:
    """
    Parse value of the ``COLUMNS`` variable.

    :example:
        ::

            >>> parse_columns("120.7")
            120
            >>> parse_columns("-5") is None
            True
            >>> parse_columns("abc") is None
            True

    """

    if value is None:
        return None
    try:
        columns = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(columns) or columns <= 0:
        return None
    return math.floor(columns) or None


def parse_size_report(response: str) -> int | None:
    """
    Extract number of columns from the terminal's answer to a size query.

    A cursor position report is accepted as well; in that case,
    cursor's column is used.

    :example:
        ::

            >>> parse_size_report("\\x1b[8;24;132t")
            132
            >>> parse_size_report("\\x1b[12;80R")
            80

    """

    match = _SIZE_REPORT_RE.search(response) or _CURSOR_REPORT_RE.search(response)
    if match is None:
        return None
    columns = int(match.group(2))
    return columns if columns > 0 else None


def _is_size_report_complete(response: str) -> bool:
    return bool(_SIZE_REPORT_RE.search(response) or _CURSOR_REPORT_RE.search(response))


class AvailableWidthDetector:
    """
    Detects width of the terminal in columns.

    Width learned from querying the terminal is cached until :meth:`reset`.
    Failed queries are not cached.

    :param probe:
        probe for querying the terminal; its device also reports columns
        of the output stream.
        Default is :func:`termsense.term.get_default_probe`.
    :param env:
        environment to inspect. Default is :data:`os.environ`.
    :param settings:
        timeouts and switches. Default is built from ``env``.

    """

    def __init__(
        self,
        probe: termsense.term.RawModeProbe | None = None,
        env: _t.Mapping[str, str] | None = None,
        settings: termsense.settings.Settings | None = None,
    ):
        self._probe = probe
        self._env = env
        self._settings = settings
        self._queried_width: termsense._cache.Memo[int] = termsense._cache.Memo()

    @property
    def probe(self) -> termsense.term.RawModeProbe:
        return self._probe or termsense.term.get_default_probe()

    @property
    def env(self) -> _t.Mapping[str, str]:
        return os.environ if self._env is None else self._env

    @property
    def settings(self) -> termsense.settings.Settings:
        return self._settings or termsense.settings.Settings.from_env(self.env)

    async def detect(self, fallback: int = 80) -> int:
        """
        Return width of the terminal, or ``fallback`` if it can't be found.

        """

        columns = parse_columns(self.env.get("COLUMNS"))
        if columns is not None:
            return columns

        probe = self.probe

        columns = probe.device.columns
        if isinstance(columns, int) and columns > 0:
            return columns

        cached = self._queried_width.get()
        if cached is not termsense.MISSING:
            return cached

        settings = self.settings
        if settings.osc_queries:
            response = await probe.probe(
                SIZE_QUERY, settings.probe_timeout, _is_size_report_complete
            )
            if response is not None:
                columns = parse_size_report(response)
                if columns is not None:
                    termsense._logger.debug("width from terminal: %s", columns)
                    return self._queried_width.set(columns)

        return fallback

    def reset(self):
        self._queried_width.reset()
