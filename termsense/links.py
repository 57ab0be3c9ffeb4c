# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Can the terminal display clickable OSC 8 hyperlinks?

Support is looked up by terminal application. For Alacritty, which gained
support in version 0.13, we also check the version.

.. autoclass:: LinkSupportDetector
   :members:

.. autodata:: KONSOLE_SUPPORTS_OSC8

.. autodata:: LINK_SUPPORT

"""

from __future__ import annotations

import termsense
import termsense._cache
import termsense.app
from termsense import _typing as _t
from termsense.app import TerminalApp

__all__ = [
    "KONSOLE_SUPPORTS_OSC8",
    "LINK_SUPPORT",
    "LinkSupport",
    "LinkSupportDetector",
]

LinkSupport: _t.TypeAlias = "bool | None"
"""
:data:`True` or :data:`False` if we know whether links are supported,
:data:`None` if we don't know the terminal.

"""

KONSOLE_SUPPORTS_OSC8: bool = True
"""
Whether Konsole renders OSC 8 links. Recent versions do, though sources
disagree on which version introduced it.

"""

ALACRITTY_OSC8_VERSION = termsense.app.AppVersion(0, 13, 0)
"""
First Alacritty version that supports OSC 8.

"""

LINK_SUPPORT: dict[TerminalApp, LinkSupport] = {
    TerminalApp.ITERM2: True,
    TerminalApp.WEZTERM: True,
    TerminalApp.KITTY: True,
    TerminalApp.ALACRITTY: True,
    TerminalApp.GHOSTTY: True,
    TerminalApp.WINDOWS_TERMINAL: True,
    TerminalApp.HYPER: True,
    TerminalApp.WARP: True,
    TerminalApp.APPLE_TERMINAL: False,
    TerminalApp.CMD: False,
    TerminalApp.POWERSHELL: False,
    TerminalApp.CONEMU: False,
    TerminalApp.MINTTY: False,
    TerminalApp.OTHER: None,
}
"""
Link support by terminal application. Konsole is decided by
:data:`KONSOLE_SUPPORTS_OSC8`.

"""


class LinkSupportDetector:
    """
    Detects whether the terminal supports OSC 8 hyperlinks.

    The result is cached until :meth:`reset`.

    :param app_detector:
        detector used to identify the terminal.
    :param version_detector:
        detector used to find Alacritty's version.

    """

    def __init__(
        self,
        app_detector: termsense.app.TerminalAppDetector | None = None,
        version_detector: termsense.app.AppVersionDetector | None = None,
    ):
        self._app_detector = app_detector or termsense.app.TerminalAppDetector()
        self._version_detector = (
            version_detector or termsense.app.AppVersionDetector(self._app_detector)
        )
        self._cache: termsense._cache.Memo[LinkSupport] = termsense._cache.Memo()

    async def detect(self) -> LinkSupport:
        cached = self._cache.get()
        if cached is not termsense.MISSING:
            return cached

        app = self._app_detector.detect()

        if app is TerminalApp.ALACRITTY:
            version = await self._version_detector.detect()
            if version is not None:
                termsense._logger.debug("alacritty version %s", version)
                return self._cache.set(version >= ALACRITTY_OSC8_VERSION)

        if app is TerminalApp.KONSOLE:
            return self._cache.set(KONSOLE_SUPPORTS_OSC8)

        return self._cache.set(LINK_SUPPORT.get(app))

    def reset(self):
        self._cache.reset()
