# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Termsense: find out what the terminal you're running in can do.

Detectors live in their own modules (:mod:`termsense.scheme`,
:mod:`termsense.depth`, :mod:`termsense.width`, :mod:`termsense.app`,
:mod:`termsense.links`, :mod:`termsense.programs`). Most users only need
the process-wide shortcuts from :mod:`termsense.detect`.

.. autoclass:: TermsenseError

.. autoclass:: TermsenseWarning

.. autofunction:: enable_internal_logging

.. data:: MISSING

    Marks a cache cell that was not computed yet.

"""

from __future__ import annotations

import enum as _enum
import logging as _logging
import os as _os
import sys as _sys
import warnings

from termsense import _typing as _t

__version__ = "0.4.0"

__all__ = [
    "MISSING",
    "Missing",
    "TermsenseError",
    "TermsenseWarning",
    "enable_internal_logging",
]


class _Placeholders(_enum.Enum):
    MISSING = "<missing>"

    def __bool__(self) -> _t.Literal[False]:
        return False  # pragma: no cover

    def __repr__(self):
        return f"termsense.{self.name}"  # pragma: no cover

    def __str__(self) -> str:
        return self.value  # pragma: no cover


Missing: _t.TypeAlias = _t.Literal[_Placeholders.MISSING]
"""
Type of the :data:`MISSING` placeholder.

"""

MISSING: Missing = _Placeholders.MISSING


class TermsenseError(Exception):
    """
    Base class for all errors raised by Termsense.

    Detectors never raise; only formatting helpers that are given
    invalid arguments do.

    """


class TermsenseWarning(RuntimeWarning):
    """
    Base class for all runtime warnings.

    """


_logger = _logging.getLogger("termsense.internal")
_logger.propagate = False

__stderr_handler = _logging.StreamHandler(_sys.__stderr__)
__stderr_handler.setLevel("CRITICAL")
_logger.addHandler(__stderr_handler)


def enable_internal_logging(
    path: str | None = None, level: str | int | None = None, propagate=None
):  # pragma: no cover
    """
    Enable Termsense's internal logging.

    This function enables :func:`logging.captureWarnings`, enables printing
    of :class:`TermsenseWarning` messages, and sets up logging channels
    ``termsense.internal`` and ``py.warning``.

    :param path:
        if given, adds handlers that output internal log messages to the given file.
    :param level:
        configures logging level for file handler. Default is ``DEBUG``.
    :param propagate:
        if given, enables or disables log message propagation from
        ``termsense.internal`` and ``py.warning`` to the root logger.

    """

    if path:
        if level is None:
            level = _os.environ.get("TERMSENSE_DEBUG", "").strip().upper() or "DEBUG"
        if level in ["1", "Y", "YES", "TRUE"]:
            level = "DEBUG"
        file_handler = _logging.FileHandler(path, delay=True)
        file_handler.setFormatter(
            _logging.Formatter("%(filename)s:%(lineno)d: %(levelname)s: %(message)s")
        )
        file_handler.setLevel(level)
        _logger.addHandler(file_handler)
        _logging.getLogger("py.warnings").addHandler(file_handler)

    _logging.captureWarnings(True)
    warnings.simplefilter("default", category=TermsenseWarning)

    if propagate is not None:
        _logging.getLogger("py.warnings").propagate = propagate
        _logger.propagate = propagate


_debug = "TERMSENSE_DEBUG" in _os.environ or "TERMSENSE_DEBUG_FILE" in _os.environ
if _debug:  # pragma: no cover
    enable_internal_logging(
        path=_os.environ.get("TERMSENSE_DEBUG_FILE") or "termsense.log",
        propagate=False,
    )
else:
    warnings.simplefilter("ignore", category=TermsenseWarning, append=True)
