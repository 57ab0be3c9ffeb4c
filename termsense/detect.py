# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Process-wide detectors and shortcuts for them.

Most programs need a single answer per process, so this module keeps
one set of detectors attached to :data:`sys.__stdout__`
and :data:`sys.__stdin__`. Their caches live as long as the process does,
or until :func:`reset_caches` is called.

.. code-block:: python

    import asyncio
    import termsense.detect

    async def main():
        if await termsense.detect.detect_color_scheme() == "light":
            ...

    asyncio.run(main())


Shortcuts
---------

.. autofunction:: detect_color_scheme

.. autofunction:: detect_color_depth

.. autofunction:: detect_available_width

.. autofunction:: detect_terminal_app

.. autofunction:: detect_app_version

.. autofunction:: detect_link_support

.. autofunction:: has_program

.. autofunction:: is_running_in_wsl

.. autofunction:: reset_caches


Detector sets
-------------

.. autoclass:: Detectors
   :members:

.. autofunction:: get_detectors

"""

from __future__ import annotations

import threading

import termsense.app
import termsense.depth
import termsense.exec
import termsense.links
import termsense.programs
import termsense.scheme
import termsense.settings
import termsense.term
import termsense.width
from termsense import _typing as _t
from termsense.app import is_running_in_wsl

__all__ = [
    "Detectors",
    "detect_app_version",
    "detect_available_width",
    "detect_color_depth",
    "detect_color_scheme",
    "detect_link_support",
    "detect_terminal_app",
    "get_detectors",
    "has_program",
    "is_running_in_wsl",
    "reset_caches",
]


class Detectors:
    """
    A set of detectors that share a probe, an environment,
    a command runner and settings.

    :param probe:
        probe for querying the terminal.
        Default is :func:`termsense.term.get_default_probe`.
    :param env:
        environment to inspect. Default is :data:`os.environ`,
        read at the moment of detection.
    :param runner:
        runs external commands. Default is :func:`termsense.exec.run`.
    :param settings:
        timeouts and switches. Default is built from ``env``
        at the moment of detection.
    :param platform:
        platform name. Default is :func:`termsense.host.discover_os`.

    """

    def __init__(
        self,
        probe: termsense.term.RawModeProbe | None = None,
        env: _t.Mapping[str, str] | None = None,
        runner: termsense.exec.CommandRunner | None = None,
        settings: termsense.settings.Settings | None = None,
        platform: str | None = None,
    ):
        self.color_scheme = termsense.scheme.ColorSchemeDetector(
            probe, env, runner, settings, platform
        )
        self.color_depth = termsense.depth.ColorDepthDetector(probe, env, settings)
        self.available_width = termsense.width.AvailableWidthDetector(
            probe, env, settings
        )
        self.terminal_app = termsense.app.TerminalAppDetector(env)
        self.app_version = termsense.app.AppVersionDetector(
            self.terminal_app, env, runner, settings, platform
        )
        self.link_support = termsense.links.LinkSupportDetector(
            self.terminal_app, self.app_version
        )
        self.programs = termsense.programs.ExecutablePresenceDetector(
            runner, env, settings, platform
        )

    def reset(self):
        """
        Clear caches of all detectors.

        """

        self.color_scheme.reset()
        self.color_depth.reset()
        self.available_width.reset()
        self.terminal_app.reset()
        self.app_version.reset()
        self.link_support.reset()
        self.programs.reset()


_DETECTORS: Detectors | None = None
_DETECTORS_LOCK = threading.Lock()


def get_detectors() -> Detectors:
    """
    Return the process-wide set of detectors.

    """

    global _DETECTORS

    with _DETECTORS_LOCK:
        if _DETECTORS is None:
            _DETECTORS = Detectors()
        return _DETECTORS


def reset_caches():
    """
    Forget everything process-wide detectors have learned.

    """

    get_detectors().reset()


async def detect_color_scheme() -> termsense.scheme.ColorScheme:
    """
    Return ``"light"``, ``"dark"``, or ``"unknown"``.

    See :class:`~termsense.scheme.ColorSchemeDetector`.

    """

    return await get_detectors().color_scheme.detect()


async def detect_color_depth() -> termsense.depth.ColorDepth:
    """
    See :class:`~termsense.depth.ColorDepthDetector`.

    """

    return await get_detectors().color_depth.detect()


async def detect_available_width(fallback: int = 80) -> int:
    """
    See :class:`~termsense.width.AvailableWidthDetector`.

    """

    return await get_detectors().available_width.detect(fallback)


def detect_terminal_app() -> termsense.app.TerminalApp:
    """
    See :class:`~termsense.app.TerminalAppDetector`.

    """

    return get_detectors().terminal_app.detect()


async def detect_app_version() -> termsense.app.AppVersion | None:
    """
    See :class:`~termsense.app.AppVersionDetector`.

    """

    return await get_detectors().app_version.detect()


async def detect_link_support() -> termsense.links.LinkSupport:
    """
    See :class:`~termsense.links.LinkSupportDetector`.

    """

    return await get_detectors().link_support.detect()


def has_program(name: str, /) -> bool | termsense.programs.InvalidCommandError:
    """
    See :class:`~termsense.programs.ExecutablePresenceDetector`.

    """

    return get_detectors().programs.detect(name)
