# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Library-wide knobs, read from environment variables.

.. autoclass:: Settings
   :members:

.. autoclass:: SettingsWarning

Recognized variables:

``TERMSENSE_DISABLE_OSC_QUERIES``
    if present, detectors never send interactive queries to the terminal.

``TERMSENSE_PROBE_TIMEOUT``
    how long to wait for a terminal to answer a query, in seconds.

``TERMSENSE_COMMAND_TIMEOUT``
    how long to wait for an external command, in seconds.

"""

from __future__ import annotations

import math
import os
import warnings
from dataclasses import dataclass

import termsense
from termsense import _typing as _t

__all__ = [
    "Settings",
    "SettingsWarning",
]

DEFAULT_PROBE_TIMEOUT = 0.1
DEFAULT_COMMAND_TIMEOUT = 1.0


class SettingsWarning(termsense.TermsenseWarning):
    """
    Emitted when an environment variable holds a value that can't be used.

    """


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Timeouts and switches shared by all detectors.

    """

    osc_queries: bool = True
    """
    Allow interactive escape-sequence queries.

    """

    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    """
    Timeout for a single terminal query, in seconds.

    """

    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    """
    Timeout for external commands, in seconds.

    """

    @classmethod
    def from_env(cls, env: _t.Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from the given environment, or from :data:`os.environ`.

        Malformed numbers are ignored.

        :example:
            ::

                >>> Settings.from_env({"TERMSENSE_PROBE_TIMEOUT": "0.25"})
                Settings(osc_queries=True, probe_timeout=0.25, command_timeout=1.0)
                >>> Settings.from_env({"TERMSENSE_PROBE_TIMEOUT": "soon"}).probe_timeout
                0.1

        """

        if env is None:
            env = os.environ

        return cls(
            osc_queries="TERMSENSE_DISABLE_OSC_QUERIES" not in env,
            probe_timeout=_parse_seconds(
                env.get("TERMSENSE_PROBE_TIMEOUT"), DEFAULT_PROBE_TIMEOUT
            ),
            command_timeout=_parse_seconds(
                env.get("TERMSENSE_COMMAND_TIMEOUT"), DEFAULT_COMMAND_TIMEOUT
            ),
        )


def _parse_seconds(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        seconds = float(value.strip())
    except ValueError:
        warnings.warn(f"ignoring invalid timeout {value!r}", SettingsWarning)
        return default
    if not math.isfinite(seconds) or seconds <= 0:
        warnings.warn(f"ignoring invalid timeout {value!r}", SettingsWarning)
        return default
    return seconds
