# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Which terminal application we're running in, and which version of it.

Terminal applications are identified by environment variables they set
for their child processes. Versions come from environment variables as well,
or from running the terminal's binary with ``--version``.

WSL is an execution environment, not a terminal: when running inside WSL
we still report the terminal that hosts it.


Terminal application
--------------------

.. autoclass:: TerminalApp
   :members:

.. autoclass:: TerminalAppDetector
   :members:

.. autofunction:: is_running_in_wsl


Versions
--------

.. autoclass:: AppVersion
   :members:

.. autofunction:: parse_version

.. autofunction:: parse_version_output

.. autoclass:: VersionPattern
   :members:

.. autodata:: VERSION_PATTERNS

.. autoclass:: AppVersionDetector
   :members:

"""

from __future__ import annotations

import enum
import os
import re
from dataclasses import dataclass, field

import termsense
import termsense._cache
import termsense.exec
import termsense.host
import termsense.settings
from termsense import _typing as _t

__all__ = [
    "VERSION_PATTERNS",
    "AppVersion",
    "AppVersionDetector",
    "TerminalApp",
    "TerminalAppDetector",
    "VersionPattern",
    "is_running_in_wsl",
    "parse_version",
    "parse_version_output",
]


class TerminalApp(enum.Enum):
    """
    Terminal applications that we can recognize.

    """

    ITERM2 = "iterm2"
    WEZTERM = "wezterm"
    KITTY = "kitty"
    ALACRITTY = "alacritty"
    GHOSTTY = "ghostty"
    KONSOLE = "konsole"
    WINDOWS_TERMINAL = "windows-terminal"
    POWERSHELL = "powershell"
    CMD = "cmd"
    CONEMU = "conemu"
    MINTTY = "mintty"
    APPLE_TERMINAL = "apple-terminal"
    HYPER = "hyper"
    WARP = "warp"

    OTHER = "other"
    """
    We couldn't identify the terminal.

    """

    def __str__(self) -> str:
        return self.value


TERM_PROGRAM_LOOKUP: dict[str, TerminalApp] = {
    "iterm.app": TerminalApp.ITERM2,
    "wezterm": TerminalApp.WEZTERM,
    "ghostty": TerminalApp.GHOSTTY,
    "apple_terminal": TerminalApp.APPLE_TERMINAL,
    "alacritty": TerminalApp.ALACRITTY,
    "hyper": TerminalApp.HYPER,
    "warpterminal": TerminalApp.WARP,
}
"""
Maps lowercased values of ``TERM_PROGRAM`` to terminal applications.

"""

_TERM_PATTERNS: list[tuple[str, TerminalApp]] = [
    ("kitty", TerminalApp.KITTY),
    ("alacritty", TerminalApp.ALACRITTY),
    ("iterm2", TerminalApp.ITERM2),
    ("mintty", TerminalApp.MINTTY),
]

TERMINAL_ENV_VARS: list[tuple[TerminalApp, tuple[str, ...]]] = [
    (TerminalApp.WINDOWS_TERMINAL, ("WT_SESSION", "WT_PROFILE_ID")),
    (
        TerminalApp.WEZTERM,
        (
            "WEZTERM_CONFIG_DIR",
            "WEZTERM_CONFIG_FILE",
            "WEZTERM_EXECUTABLE",
            "WEZTERM_PANE",
            "WEZTERM_UNIX_SOCKET",
        ),
    ),
    (TerminalApp.ITERM2, ("ITERM_PROFILE", "ITERM_SESSION_ID")),
    (
        TerminalApp.ALACRITTY,
        ("ALACRITTY_LOG", "ALACRITTY_SOCKET", "ALACRITTY_WINDOW_ID"),
    ),
    (
        TerminalApp.KITTY,
        ("KITTY_WINDOW_ID", "KITTY_PUBLIC_KEY", "KITTY_INSTALLATION_DIR", "KITTY_PID"),
    ),
    (TerminalApp.KONSOLE, ("KONSOLE_VERSION", "KONSOLE_DBUS_WINDOW")),
    (
        TerminalApp.GHOSTTY,
        ("GHOSTTY_RESOURCES_DIR", "GHOSTTY_SHELL_FEATURES", "GHOSTTY_BIN_DIR"),
    ),
    (TerminalApp.POWERSHELL, ("PSModulePath", "POWERSHELL_DISTRIBUTION_CHANNEL")),
    (TerminalApp.CONEMU, ("ConEmuDir", "ConEmuBaseDir", "CMDER_ROOT")),
    (TerminalApp.MINTTY, ("MSYSTEM", "CHERE_INVOKING")),
    (TerminalApp.CMD, ("PROMPT", "COMSPEC")),
]
"""
Environment variables set by terminal applications, in order of priority.
A variable counts if it's present, even if it's empty.

"""


class TerminalAppDetector:
    """
    Identifies the terminal application from environment variables.

    Results are not cached: every call looks at the current environment.

    :param env:
        environment to inspect. Default is :data:`os.environ`,
        read at the moment of detection.

    """

    def __init__(self, env: _t.Mapping[str, str] | None = None):
        self._env = env

    @property
    def env(self) -> _t.Mapping[str, str]:
        return os.environ if self._env is None else self._env

    def detect(self) -> TerminalApp:
        env = self.env

        term_program = env.get("TERM_PROGRAM", "").lower()
        if term_program in TERM_PROGRAM_LOOKUP:
            return TERM_PROGRAM_LOOKUP[term_program]

        term = env.get("TERM", "").lower()
        for pattern, app in _TERM_PATTERNS:
            if pattern in term:
                return app

        for app, names in TERMINAL_ENV_VARS:
            if any(name in env for name in names):
                return app

        return TerminalApp.OTHER

    def reset(self):
        """
        Does nothing, terminal application is never cached.

        """


def is_running_in_wsl(
    env: _t.Mapping[str, str] | None = None,
    proc_version: str | os.PathLike[str] = "/proc/version",
) -> bool:
    """
    Check if we're running inside Windows Subsystem for Linux.

    :param env:
        environment to inspect. Default is :data:`os.environ`.
    :param proc_version:
        path to the kernel version file.

    """

    if env is None:
        env = os.environ

    if "WSL_DISTRO_NAME" in env:
        return True

    try:
        with open(proc_version, encoding="utf-8", errors="replace") as file:
            return "microsoft" in file.read().lower()
    except OSError:
        return False


@dataclass(frozen=True, order=True, slots=True)
class AppVersion:
    """
    Version of a terminal application.

    Versions are compared by their numeric components only.
    Formatting preserves zero-padding of the original text
    for versions like Konsole's ``25.04.2``.

    """

    major: int
    minor: int = 0
    patch: int = 0

    minor_width: int = field(default=0, compare=False, repr=False)
    """
    Zero-padded width of the minor component in the source text.

    """

    patch_width: int = field(default=0, compare=False, repr=False)
    """
    Zero-padded width of the patch component in the source text.

    """

    def __str__(self) -> str:
        if self.major < 100:
            minor = str(self.minor).zfill(self.minor_width)
            patch = str(self.patch).zfill(self.patch_width)
        else:
            minor = str(self.minor)
            patch = str(self.patch)
        return f"{self.major}.{minor}.{patch}"


def _padding(digits: str | None) -> int:
    if digits and len(digits) > 1 and digits.startswith("0"):
        return len(digits)
    return 0


def _from_semver(match: re.Match[str]) -> AppVersion:
    major, minor, patch = match.groups()
    return AppVersion(
        int(major),
        int(minor),
        int(patch or 0),
        minor_width=_padding(minor),
        patch_width=_padding(patch),
    )


def _from_yymmpp(match: re.Match[str]) -> AppVersion:
    yy, mm, pp = match.groups()
    return AppVersion(int(yy), int(mm), int(pp), minor_width=_padding(mm))


def _from_date_time(match: re.Match[str]) -> AppVersion:
    date, time = match.groups()
    return AppVersion(int(date), int(time), 0)


def _from_integer(match: re.Match[str]) -> AppVersion:
    return AppVersion(int(match.group(0)), 0, 0)


@dataclass(frozen=True, slots=True)
class VersionPattern:
    """
    One of the version formats that we understand.

    """

    name: str
    """
    Human-readable name of the format.

    """

    regex: re.Pattern[str]
    """
    Regular expression that must match the whole version string.

    """

    build: _t.Callable[[re.Match[str]], AppVersion]
    """
    Converts a successful match into a version.

    """

    def parse(self, text: str, /) -> AppVersion | None:
        match = self.regex.fullmatch(text)
        return None if match is None else self.build(match)


VERSION_PATTERNS: list[VersionPattern] = [
    VersionPattern(
        "semver",
        re.compile(r"[vV]?(\d+)\.(\d+)(?:\.(\d+))?(?:[-+].*)?"),
        _from_semver,
    ),
    VersionPattern(
        "yymmpp",
        re.compile(r"(\d\d)(\d\d)(\d\d)"),
        _from_yymmpp,
    ),
    VersionPattern(
        "date-time",
        re.compile(r"(\d{8})-(\d{6})(?:-.*)?"),
        _from_date_time,
    ),
    VersionPattern(
        "integer",
        re.compile(r"\d+"),
        _from_integer,
    ),
]
"""
Version formats, in order of precedence. The first one that matches wins.

"""


def parse_version(text: str, /) -> AppVersion | None:
    """
    Parse a version string.

    :example:
        ::

            >>> parse_version("v0.13.2")
            AppVersion(major=0, minor=13, patch=2)
            >>> str(parse_version("250402"))
            '25.04.2'
            >>> str(parse_version("20230712-072601-f4abf8fd"))
            '20230712.72601.0'
            >>> parse_version("465")
            AppVersion(major=465, minor=0, patch=0)
            >>> parse_version("not-a-version") is None
            True

    """

    text = text.strip()
    for pattern in VERSION_PATTERNS:
        if (version := pattern.parse(text)) is not None:
            return version
    return None


def parse_version_output(output: str, /) -> AppVersion | None:
    """
    Find the first version-like word in output of a ``--version`` command.

    :example:
        ::

            >>> parse_version_output("alacritty 0.13.2 (bb8ea18)")
            AppVersion(major=0, minor=13, patch=2)

    """

    for word in output.split():
        if (version := parse_version(word.strip("()[],;:"))) is not None:
            return version
    return None


VERSION_ENV_VARS: dict[TerminalApp, str] = {
    TerminalApp.ALACRITTY: "ALACRITTY_VERSION",
    TerminalApp.WEZTERM: "WEZTERM_VERSION",
    TerminalApp.KITTY: "KITTY_VERSION",
    TerminalApp.KONSOLE: "KONSOLE_VERSION",
}

_VERSION_COMMANDS: dict[TerminalApp, str] = {
    TerminalApp.ALACRITTY: "alacritty",
    TerminalApp.WEZTERM: "wezterm",
    TerminalApp.KITTY: "kitty",
    TerminalApp.GHOSTTY: "ghostty",
    TerminalApp.KONSOLE: "konsole",
    TerminalApp.POWERSHELL: "pwsh",
    TerminalApp.MINTTY: "mintty",
}

_INSTALL_PATHS: dict[str, dict[TerminalApp, str]] = {
    "darwin": {
        TerminalApp.ALACRITTY: "/Applications/Alacritty.app/Contents/MacOS/alacritty",
        TerminalApp.WEZTERM: "/Applications/WezTerm.app/Contents/MacOS/wezterm",
        TerminalApp.KITTY: "/Applications/kitty.app/Contents/MacOS/kitty",
        TerminalApp.GHOSTTY: "/Applications/Ghostty.app/Contents/MacOS/ghostty",
    },
    "win32": {
        TerminalApp.WEZTERM: "C:\\Program Files\\WezTerm\\wezterm.exe",
        TerminalApp.ALACRITTY: "C:\\Program Files\\Alacritty\\alacritty.exe",
    },
}


class AppVersionDetector:
    """
    Finds out version of the current terminal application.

    The result, including a failure to find one, is cached until :meth:`reset`.

    :param app_detector:
        detector used to identify the terminal.
    :param env:
        environment to inspect. Default is :data:`os.environ`.
    :param runner:
        runs ``--version`` commands. Default is :func:`termsense.exec.run`.
    :param settings:
        timeouts. Default is built from ``env``.
    :param platform:
        platform name used to pick well-known install paths.
        Default is :func:`termsense.host.discover_os`.

    """

    def __init__(
        self,
        app_detector: TerminalAppDetector | None = None,
        env: _t.Mapping[str, str] | None = None,
        runner: termsense.exec.CommandRunner | None = None,
        settings: termsense.settings.Settings | None = None,
        platform: str | None = None,
    ):
        self._app_detector = app_detector or TerminalAppDetector(env)
        self._env = env
        self._runner = runner or termsense.exec.run
        self._settings = settings
        self._platform = platform
        self._cache: termsense._cache.Memo[AppVersion | None] = termsense._cache.Memo()

    @property
    def env(self) -> _t.Mapping[str, str]:
        return os.environ if self._env is None else self._env

    @property
    def settings(self) -> termsense.settings.Settings:
        return self._settings or termsense.settings.Settings.from_env(self.env)

    async def detect(self) -> AppVersion | None:
        cached = self._cache.get()
        if cached is not termsense.MISSING:
            return cached
        return self._cache.set(self._detect())

    def reset(self):
        self._cache.reset()

    def _detect(self) -> AppVersion | None:
        app = self._app_detector.detect()
        env = self.env

        raw = None
        if (name := VERSION_ENV_VARS.get(app)) is not None:
            raw = env.get(name)
        if raw is None:
            raw = env.get("TERM_PROGRAM_VERSION")
        if raw is not None:
            version = parse_version(raw)
            termsense._logger.debug("%s version from environment: %r", app, raw)
            return version

        if app is TerminalApp.OTHER:
            return None

        return self._query_binary(app)

    def _query_binary(self, app: TerminalApp) -> AppVersion | None:
        platform = self._platform or termsense.host.discover_os()
        candidates = [
            command
            for command in (
                _VERSION_COMMANDS.get(app),
                _INSTALL_PATHS.get(platform, {}).get(app),
            )
            if command is not None
        ]

        timeout = self.settings.command_timeout
        for command in candidates:
            result = self._runner(command, "--version", timeout=timeout)
            if not result.ok:
                continue
            for output in (result.stdout, result.stderr):
                if (version := parse_version_output(output)) is not None:
                    termsense._logger.debug(
                        "%s version from %s: %s", app, command, version
                    )
                    return version

        return None
