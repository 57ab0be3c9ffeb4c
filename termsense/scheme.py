# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Is the terminal light or dark?

:class:`ColorSchemeDetector` tries the following sources, first definitive
answer wins:

1. ``VITE_THEME`` or ``THEME`` set to ``light`` or ``dark``;
2. terminal's background color, queried with OSC 11, then with OSC 4;-2;
3. ``GTK_THEME`` or ``XDG_CURRENT_DESKTOP`` mentioning ``dark`` or ``light``;
4. operating system's theme preference;
5. ``VITE_PREFERS`` or ``PREFERS`` set to ``light`` or ``dark``.

If nothing works, the scheme is ``"unknown"``.

.. autoclass:: ColorSchemeDetector
   :members:

"""

from __future__ import annotations

import os
import re

import termsense
import termsense.ansi
import termsense.color
import termsense.exec
import termsense.host
import termsense.settings
import termsense.term
from termsense import _typing as _t

__all__ = [
    "ColorScheme",
    "ColorSchemeDetector",
]

ColorScheme: _t.TypeAlias = _t.Literal["light", "dark", "unknown"]
"""
Result of color scheme detection.

"""

BACKGROUND_QUERIES = [
    termsense.ansi.ESC + "]11;?" + termsense.ansi.ST,
    termsense.ansi.ESC + "]4;-2;?" + termsense.ansi.ST,
]
"""
Background color queries, standard xterm one first, then iTerm2's extension.

"""

_WINDOWS_THEME_KEY = (
    "HKCU\\Software\\Microsoft\\Windows\\CurrentVersion\\Themes\\Personalize"
)
_WINDOWS_LIGHT_THEME_RE = re.compile(r"AppsUseLightTheme\s+REG_DWORD\s+0x1\b")


def _light_or_dark(value: str | None) -> _t.Literal["light", "dark"] | None:
    if value:
        value = value.strip().lower()
        if value == "light" or value == "dark":
            return value
    return None


def _mentions_light_or_dark(*values: str) -> _t.Literal["light", "dark"] | None:
    values = tuple(value.lower() for value in values)
    if any("dark" in value for value in values):
        return "dark"
    if any("light" in value for value in values):
        return "light"
    return None


class ColorSchemeDetector:
    """
    Detects whether the terminal uses a light or a dark color scheme.

    Results are never cached: the scheme can change while we're running.

    :param probe:
        probe for querying the terminal.
        Default is :func:`termsense.term.get_default_probe`.
    :param env:
        environment to inspect. Default is :data:`os.environ`.
    :param runner:
        runs OS theme queries. Default is :func:`termsense.exec.run`.
    :param settings:
        timeouts and switches. Default is built from ``env``.
    :param platform:
        platform name that decides how to query OS theme.
        Default is :func:`termsense.host.discover_os`.

    """

    def __init__(
        self,
        probe: termsense.term.RawModeProbe | None = None,
        env: _t.Mapping[str, str] | None = None,
        runner: termsense.exec.CommandRunner | None = None,
        settings: termsense.settings.Settings | None = None,
        platform: str | None = None,
    ):
        self._probe = probe
        self._env = env
        self._runner = runner or termsense.exec.run
        self._settings = settings
        self._platform = platform

    @property
    def probe(self) -> termsense.term.RawModeProbe:
        return self._probe or termsense.term.get_default_probe()

    @property
    def env(self) -> _t.Mapping[str, str]:
        return os.environ if self._env is None else self._env

    @property
    def settings(self) -> termsense.settings.Settings:
        return self._settings or termsense.settings.Settings.from_env(self.env)

    async def detect(self) -> ColorScheme:
        env = self.env
        settings = self.settings

        scheme = _light_or_dark(env.get("VITE_THEME")) or _light_or_dark(
            env.get("THEME")
        )
        if scheme is not None:
            termsense._logger.debug("color scheme from THEME: %s", scheme)
            return scheme

        if settings.osc_queries:
            scheme = await self._query_terminal(settings.probe_timeout)
            if scheme is not None:
                termsense._logger.debug("color scheme from terminal: %s", scheme)
                return scheme

        scheme = _mentions_light_or_dark(
            env.get("GTK_THEME", ""), env.get("XDG_CURRENT_DESKTOP", "")
        )
        if scheme is not None:
            termsense._logger.debug("color scheme from desktop hints: %s", scheme)
            return scheme

        scheme = self._query_os(settings.command_timeout)
        if scheme is not None:
            termsense._logger.debug("color scheme from OS settings: %s", scheme)
            return scheme

        return (
            _light_or_dark(env.get("VITE_PREFERS"))
            or _light_or_dark(env.get("PREFERS"))
            or "unknown"
        )

    def reset(self):
        """
        Does nothing, color scheme is never cached.

        """

    async def _query_terminal(
        self, timeout: float
    ) -> _t.Literal["light", "dark"] | None:
        probe = self.probe
        for query in BACKGROUND_QUERIES:
            response = await probe.probe(
                query, timeout, termsense.ansi.is_osc_response_complete
            )
            if not response:
                continue
            color = termsense.ansi.parse_color_query_response(response)
            if color is not None:
                return termsense.color.is_light_color(color.r, color.g, color.b)
        return None

    def _query_os(self, timeout: float) -> _t.Literal["light", "dark"] | None:
        platform = self._platform or termsense.host.discover_os()

        if platform == "darwin":
            result = self._runner(
                "defaults", "read", "-g", "AppleInterfaceStyle", timeout=timeout
            )
            if result.ok:
                return "dark" if "dark" in result.stdout.lower() else "light"
            elif result.exit_code == 1:
                # The key is missing when the light theme is active.
                return "light"
        elif platform == "win32":
            result = self._runner(
                "reg",
                "query",
                _WINDOWS_THEME_KEY,
                "/v",
                "AppsUseLightTheme",
                timeout=timeout,
            )
            if result.ok:
                if _WINDOWS_LIGHT_THEME_RE.search(result.stdout):
                    return "light"
                else:
                    return "dark"
        elif platform == "linux":
            result = self._runner(
                "gsettings",
                "get",
                "org.gnome.desktop.interface",
                "color-scheme",
                timeout=timeout,
            )
            if result.ok:
                return _mentions_light_or_dark(result.stdout)

        return None
