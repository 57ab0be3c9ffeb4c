# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
How many colors can the terminal display?

.. autoclass:: ColorDepth
   :members:

.. autoclass:: ColorDepthDetector
   :members:

"""

from __future__ import annotations

import enum
import os

import termsense
import termsense._cache
import termsense.ansi
import termsense.settings
import termsense.term
from termsense import _typing as _t

__all__ = [
    "ColorDepth",
    "ColorDepthDetector",
]


class ColorDepth(enum.IntEnum):
    """
    Number of colors that a terminal can display.

    """

    ANSI_8 = 8
    """
    Eight basic colors.

    """

    ANSI_16 = 16
    """
    Basic colors and their bright variants.

    """

    ANSI_256 = 256
    """
    Xterm's 256-color palette.

    """

    TRUECOLOR = 16_777_216
    """
    24-bit RGB colors.

    """


PALETTE_QUERY = termsense.ansi.ESC + "]4;255;?" + termsense.ansi.BEL
"""
Asks for the last color of a 256-color palette.

"""


def color_depth_from_term(term: str) -> ColorDepth | None:
    """
    Guess color depth from value of the ``TERM`` variable.

    :example:
        ::

            >>> color_depth_from_term("xterm-256color")
            <ColorDepth.ANSI_256: 256>
            >>> color_depth_from_term("screen-color")
            <ColorDepth.ANSI_8: 8>
            >>> color_depth_from_term("xterm")
            <ColorDepth.ANSI_16: 16>
            >>> color_depth_from_term("dumb") is None
            True

    """

    term = term.strip().lower()
    if "256color" in term:
        return ColorDepth.ANSI_256
    elif "16color" in term:
        return ColorDepth.ANSI_16
    elif term in ("linux", "xterm-color"):
        return ColorDepth.ANSI_8
    elif term.endswith("color") and "xterm" not in term:
        return ColorDepth.ANSI_8
    elif term == "xterm" or term.startswith("xterm-"):
        return ColorDepth.ANSI_16
    else:
        return None


class ColorDepthDetector:
    """
    Detects color depth from ``COLORTERM`` and ``TERM``, or by asking
    the terminal for a palette color.

    Outcome of the terminal query, successful or not, is cached
    until :meth:`reset`. Environment is checked on every call.

    :param probe:
        probe for querying the terminal.
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
        self._palette_answered: termsense._cache.Memo[bool] = termsense._cache.Memo()

    @property
    def probe(self) -> termsense.term.RawModeProbe:
        return self._probe or termsense.term.get_default_probe()

    @property
    def env(self) -> _t.Mapping[str, str]:
        return os.environ if self._env is None else self._env

    @property
    def settings(self) -> termsense.settings.Settings:
        return self._settings or termsense.settings.Settings.from_env(self.env)

    async def detect(self) -> ColorDepth:
        env = self.env

        colorterm = env.get("COLORTERM", "").strip().lower()
        if colorterm in ("truecolor", "24bit"):
            return ColorDepth.TRUECOLOR

        depth = color_depth_from_term(env.get("TERM", ""))
        if depth is not None:
            return depth

        if await self._query_palette():
            return ColorDepth.TRUECOLOR

        return ColorDepth.ANSI_256

    def reset(self):
        self._palette_answered.reset()

    async def _query_palette(self) -> bool:
        cached = self._palette_answered.get()
        if cached is not termsense.MISSING:
            return cached

        settings = self.settings
        if not settings.osc_queries:
            return False

        response = await self.probe.probe(
            PALETTE_QUERY,
            settings.probe_timeout,
            termsense.ansi.is_osc_response_complete,
        )
        answered = (
            response is not None
            and termsense.ansi.parse_color_query_response(response) is not None
        )
        termsense._logger.debug("palette query answered: %s", answered)
        return self._palette_answered.set(answered)
