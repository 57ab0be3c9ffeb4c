# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
This module runs short-lived platform commands and reports how they went.

Unlike :func:`subprocess.check_output`, :func:`run` never raises
because of a failing child process: every failure is reported through
:attr:`CommandResult.exit_code`. Detectors rely on this to fall through
to their next strategy.

.. autofunction:: run

.. autoclass:: CommandResult
   :members:

.. autoclass:: CommandRunner

"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

from termsense import _typing as _t

__all__ = [
    "CommandResult",
    "CommandRunner",
    "run",
]

_LOGGER = logging.getLogger("termsense.exec")

UNKNOWN_EXIT_CODE = -1


@dataclass(frozen=True, slots=True)
class CommandResult:
    """
    Outcome of a command.

    """

    exit_code: int
    """
    Command's exit status, or ``-1`` if it couldn't be determined
    (command not found, timed out, killed by a signal).

    """

    stdout: str
    """
    Command's stdout, without a trailing newline.

    """

    stderr: str
    """
    Command's stderr, without a trailing newline.

    """

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(_t.Protocol):
    """
    Signature of :func:`run`. Detectors accept any callable like this,
    which allows substituting commands in tests.

    """

    def __call__(
        self,
        command: str,
        /,
        *args: str,
        timeout: float = 1.0,
        encoding: str | None = None,
        env: _t.Mapping[str, str] | None = None,
    ) -> CommandResult: ...


def _strip_newline(s: str | bytes | None, encoding: str | None) -> str:
    if s is None:
        return ""
    if isinstance(s, bytes):
        s = s.decode(encoding or "utf-8", errors="replace")
    if s.endswith("\r\n"):
        return s[:-2]
    if s.endswith("\n"):
        return s[:-1]
    return s


def run(
    command: str,
    /,
    *args: str,
    timeout: float = 1.0,
    encoding: str | None = None,
    env: _t.Mapping[str, str] | None = None,
) -> CommandResult:
    """
    Run a command and wait for it to finish.

    :param command:
        name or path of the executable.
    :param args:
        command arguments.
    :param timeout:
        seconds after which the command is killed and treated as failed.
    :param encoding:
        encoding for decoding command's output. Default is the locale encoding.
    :param env:
        define the environment variables for the command.
    :return:
        exit code and output of the command.

    """

    cmd = [command, *args]

    if _LOGGER.isEnabledFor(logging.DEBUG):
        _LOGGER.debug(" ".join(cmd))

    try:
        process = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            env=None if env is None else dict(env),
            text=True,
            encoding=encoding,
            errors="replace",
        )
    except subprocess.TimeoutExpired as e:
        _LOGGER.debug("-> timed out after %ss", timeout)
        return CommandResult(
            UNKNOWN_EXIT_CODE,
            _strip_newline(e.stdout, encoding),
            _strip_newline(e.stderr, encoding),
        )
    except (OSError, ValueError) as e:
        _LOGGER.debug("-> failed to start: %s", e)
        return CommandResult(UNKNOWN_EXIT_CODE, "", "")

    exit_code = process.returncode
    if exit_code is None or exit_code < 0:
        # Negative codes mean the child was killed by a signal.
        exit_code = UNKNOWN_EXIT_CODE

    _LOGGER.debug("-> exit code %s", exit_code)

    return CommandResult(
        exit_code,
        _strip_newline(process.stdout, encoding),
        _strip_newline(process.stderr, encoding),
    )
