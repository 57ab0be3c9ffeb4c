import pytest

import termsense.app
from termsense.app import AppVersion, TerminalApp
from termsense.exec import CommandResult


def detect_app(env):
    return termsense.app.TerminalAppDetector(env).detect()


@pytest.mark.parametrize(
    ("term_program", "app"),
    [
        ("ghostty", TerminalApp.GHOSTTY),
        ("GHOSTTY", TerminalApp.GHOSTTY),
        ("WezTerm", TerminalApp.WEZTERM),
        ("Apple_Terminal", TerminalApp.APPLE_TERMINAL),
        ("alacritty", TerminalApp.ALACRITTY),
        ("iTerm.app", TerminalApp.ITERM2),
        ("Hyper", TerminalApp.HYPER),
        ("WarpTerminal", TerminalApp.WARP),
        ("vscode", TerminalApp.OTHER),
        ("", TerminalApp.OTHER),
    ],
)
def test_term_program(term_program, app):
    assert detect_app({"TERM_PROGRAM": term_program}) is app


@pytest.mark.parametrize(
    ("term", "app"),
    [
        ("xterm-kitty", TerminalApp.KITTY),
        ("KITTY", TerminalApp.KITTY),
        ("alacritty", TerminalApp.ALACRITTY),
        ("iterm2", TerminalApp.ITERM2),
        ("mintty", TerminalApp.MINTTY),
        ("xterm-256color", TerminalApp.OTHER),
        ("", TerminalApp.OTHER),
    ],
)
def test_term(term, app):
    assert detect_app({"TERM": term}) is app


@pytest.mark.parametrize(
    ("var", "app"),
    [
        ("WT_SESSION", TerminalApp.WINDOWS_TERMINAL),
        ("WT_PROFILE_ID", TerminalApp.WINDOWS_TERMINAL),
        ("WEZTERM_PANE", TerminalApp.WEZTERM),
        ("WEZTERM_CONFIG_DIR", TerminalApp.WEZTERM),
        ("ITERM_SESSION_ID", TerminalApp.ITERM2),
        ("ITERM_PROFILE", TerminalApp.ITERM2),
        ("ALACRITTY_SOCKET", TerminalApp.ALACRITTY),
        ("ALACRITTY_WINDOW_ID", TerminalApp.ALACRITTY),
        ("KITTY_WINDOW_ID", TerminalApp.KITTY),
        ("KITTY_PID", TerminalApp.KITTY),
        ("KONSOLE_VERSION", TerminalApp.KONSOLE),
        ("KONSOLE_DBUS_WINDOW", TerminalApp.KONSOLE),
        ("GHOSTTY_RESOURCES_DIR", TerminalApp.GHOSTTY),
        ("GHOSTTY_BIN_DIR", TerminalApp.GHOSTTY),
        ("PSModulePath", TerminalApp.POWERSHELL),
        ("POWERSHELL_DISTRIBUTION_CHANNEL", TerminalApp.POWERSHELL),
        ("ConEmuDir", TerminalApp.CONEMU),
        ("ConEmuBaseDir", TerminalApp.CONEMU),
        ("CMDER_ROOT", TerminalApp.CONEMU),
        ("MSYSTEM", TerminalApp.MINTTY),
        ("CHERE_INVOKING", TerminalApp.MINTTY),
        ("PROMPT", TerminalApp.CMD),
        ("COMSPEC", TerminalApp.CMD),
    ],
)
def test_terminal_env_vars(var, app):
    assert detect_app({"TERM": "xterm-256color", var: "1"}) is app
    assert detect_app({var: "1"}) is app


def test_empty_env_var_counts():
    assert detect_app({"KITTY_WINDOW_ID": ""}) is TerminalApp.KITTY


@pytest.mark.parametrize(
    ("env", "app"),
    [
        ({"TERM_PROGRAM": "WezTerm", "TERM": "xterm-kitty"}, TerminalApp.WEZTERM),
        ({"TERM": "xterm-kitty", "WT_SESSION": "1"}, TerminalApp.KITTY),
        ({"WT_SESSION": "1", "WEZTERM_PANE": "1"}, TerminalApp.WINDOWS_TERMINAL),
        ({"WEZTERM_PANE": "1", "ITERM_PROFILE": "1"}, TerminalApp.WEZTERM),
        ({"ITERM_PROFILE": "1", "ALACRITTY_LOG": "1"}, TerminalApp.ITERM2),
        ({"ALACRITTY_LOG": "1", "KITTY_PID": "1"}, TerminalApp.ALACRITTY),
        ({"KITTY_PID": "1", "KONSOLE_VERSION": "1"}, TerminalApp.KITTY),
        ({"KONSOLE_VERSION": "1", "GHOSTTY_BIN_DIR": "1"}, TerminalApp.KONSOLE),
        ({"GHOSTTY_BIN_DIR": "1", "PSModulePath": "1"}, TerminalApp.GHOSTTY),
        ({"PSModulePath": "1", "ConEmuDir": "1"}, TerminalApp.POWERSHELL),
        ({"ConEmuDir": "1", "MSYSTEM": "1"}, TerminalApp.CONEMU),
        ({"MSYSTEM": "1", "COMSPEC": "1"}, TerminalApp.MINTTY),
        ({"TERM_PROGRAM": "vscode", "COMSPEC": "1"}, TerminalApp.CMD),
    ],
)
def test_priority(env, app):
    assert detect_app(env) is app


def test_nothing_detected():
    assert detect_app({}) is TerminalApp.OTHER
    assert str(TerminalApp.OTHER) == "other"
    assert str(TerminalApp.WINDOWS_TERMINAL) == "windows-terminal"


def test_wsl_is_not_a_terminal():
    env = {"WSL_DISTRO_NAME": "Ubuntu", "WT_SESSION": "1"}
    assert detect_app(env) is TerminalApp.WINDOWS_TERMINAL
    assert termsense.app.is_running_in_wsl(env)


class TestWSL:
    def test_distro_name(self, tmp_path):
        assert termsense.app.is_running_in_wsl(
            {"WSL_DISTRO_NAME": ""}, tmp_path / "missing"
        )

    def test_proc_version(self, tmp_path):
        proc_version = tmp_path / "version"
        proc_version.write_text(
            "Linux version 5.15.90.1-microsoft-standard-WSL2 (gcc 11.2.0)"
        )
        assert termsense.app.is_running_in_wsl({}, proc_version)

    def test_proc_version_microsoft_uppercase(self, tmp_path):
        proc_version = tmp_path / "version"
        proc_version.write_text("Linux version 4.4.0-19041-Microsoft")
        assert termsense.app.is_running_in_wsl({}, proc_version)

    def test_native_linux(self, tmp_path):
        proc_version = tmp_path / "version"
        proc_version.write_text("Linux version 6.5.0-generic (buildd@ubuntu)")
        assert not termsense.app.is_running_in_wsl({}, proc_version)

    def test_no_proc_version(self, tmp_path):
        assert not termsense.app.is_running_in_wsl({}, tmp_path / "missing")


@pytest.mark.parametrize(
    ("text", "expected", "rendered"),
    [
        ("0.13.2", AppVersion(0, 13, 2), "0.13.2"),
        ("v0.13.2", AppVersion(0, 13, 2), "0.13.2"),
        ("0.13", AppVersion(0, 13, 0), "0.13.0"),
        ("0.13.0-dev", AppVersion(0, 13, 0), "0.13.0"),
        ("0.13.2+build.5", AppVersion(0, 13, 2), "0.13.2"),
        ("1.0.0", AppVersion(1, 0, 0), "1.0.0"),
        ("23.08.1", AppVersion(23, 8, 1), "23.08.1"),
        ("250402", AppVersion(25, 4, 2), "25.04.2"),
        ("251210", AppVersion(25, 12, 10), "25.12.10"),
        (
            "20230712-072601-f4abf8fd",
            AppVersion(20230712, 72601, 0),
            "20230712.72601.0",
        ),
        ("20231217-143000", AppVersion(20231217, 143000, 0), "20231217.143000.0"),
        ("465", AppVersion(465, 0, 0), "465.0.0"),
        (" 3.4.19 ", AppVersion(3, 4, 19), "3.4.19"),
    ],
)
def test_parse_version(text, expected, rendered):
    version = termsense.app.parse_version(text)
    assert version == expected
    assert str(version) == rendered


@pytest.mark.parametrize(
    "text", ["not-a-version", "", "v", "1.", "1.2.3.4", "2023-07-12", "12345a"]
)
def test_parse_version_failure(text):
    assert termsense.app.parse_version(text) is None


@pytest.mark.parametrize(
    ("name", "text", "expected"),
    [
        ("semver", "0.13.2", AppVersion(0, 13, 2)),
        ("semver", "250402", None),
        ("yymmpp", "250402", AppVersion(25, 4, 2)),
        ("yymmpp", "2504021", None),
        ("date-time", "20230712-072601", AppVersion(20230712, 72601, 0)),
        ("date-time", "0.13.2", None),
        ("integer", "465", AppVersion(465, 0, 0)),
        ("integer", "465a", None),
    ],
)
def test_version_patterns(name, text, expected):
    (pattern,) = [p for p in termsense.app.VERSION_PATTERNS if p.name == name]
    assert pattern.parse(text) == expected


def test_version_pattern_order():
    assert [p.name for p in termsense.app.VERSION_PATTERNS] == [
        "semver",
        "yymmpp",
        "date-time",
        "integer",
    ]


def test_version_ordering():
    assert AppVersion(0, 12, 3) < AppVersion(0, 13, 0) < AppVersion(1, 0, 0)
    assert AppVersion(25, 4, 2, minor_width=2) == AppVersion(25, 4, 2)


@pytest.mark.parametrize(
    ("output", "expected"),
    [
        ("alacritty 0.13.2 (bb8ea18)", AppVersion(0, 13, 2)),
        ("wezterm 20230712-072601-f4abf8fd", AppVersion(20230712, 72601, 0)),
        ("kitty 0.31.0 created by Kovid Goyal", AppVersion(0, 31, 0)),
        ("Ghostty 1.0.1\n\nVersion\n  - channel: stable", AppVersion(1, 0, 1)),
        ("PowerShell 7.4.1", AppVersion(7, 4, 1)),
        ("konsole 23.08.1", AppVersion(23, 8, 1)),
        ("no version here", None),
        ("", None),
    ],
)
def test_parse_version_output(output, expected):
    assert termsense.app.parse_version_output(output) == expected


class TestAppVersionDetector:
    def make(self, env, runner, settings, platform="linux"):
        return termsense.app.AppVersionDetector(
            env=env, runner=runner, settings=settings, platform=platform
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("env", "expected"),
        [
            (
                {"TERM": "alacritty", "ALACRITTY_VERSION": "0.13.2"},
                AppVersion(0, 13, 2),
            ),
            (
                {"TERM_PROGRAM": "WezTerm", "WEZTERM_VERSION": "20230712-072601-f"},
                AppVersion(20230712, 72601, 0),
            ),
            (
                {"TERM_PROGRAM": "WezTerm", "TERM_PROGRAM_VERSION": "20231217-143000"},
                AppVersion(20231217, 143000, 0),
            ),
            (
                {"TERM_PROGRAM": "iTerm.app", "TERM_PROGRAM_VERSION": "3.4.19"},
                AppVersion(3, 4, 19),
            ),
            ({"TERM": "xterm-kitty", "KITTY_VERSION": "0.31.0"}, AppVersion(0, 31, 0)),
            (
                {"TERM_PROGRAM": "Apple_Terminal", "TERM_PROGRAM_VERSION": "465"},
                AppVersion(465, 0, 0),
            ),
            ({"KONSOLE_VERSION": "250402"}, AppVersion(25, 4, 2)),
            (
                {"TERM": "alacritty", "TERM_PROGRAM_VERSION": "0.14.0"},
                AppVersion(0, 14, 0),
            ),
        ],
    )
    async def test_from_env(self, runner, settings, env, expected):
        version = await self.make(env, runner, settings).detect()
        assert version == expected
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_specific_variable_wins(self, runner, settings):
        env = {
            "TERM": "alacritty",
            "ALACRITTY_VERSION": "0.12.0",
            "TERM_PROGRAM_VERSION": "0.14.0",
        }
        assert await self.make(env, runner, settings).detect() == AppVersion(0, 12, 0)

    @pytest.mark.asyncio
    async def test_konsole_rendering(self, runner, settings):
        detector = self.make({"KONSOLE_VERSION": "250402"}, runner, settings)
        version = await detector.detect()
        assert str(version) == "25.04.2"

    @pytest.mark.asyncio
    async def test_malformed_variable(self, runner, settings):
        env = {"TERM": "alacritty", "ALACRITTY_VERSION": "not-a-version"}
        assert await self.make(env, runner, settings).detect() is None
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_other_terminal(self, runner, settings):
        env = {"TERM": "xterm-256color"}
        assert await self.make(env, runner, settings).detect() is None
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_command_stdout(self, runner, settings):
        runner.results[("alacritty", "--version")] = CommandResult(
            0, "alacritty 0.13.2 (bb8ea18)", ""
        )
        detector = self.make({"TERM": "alacritty"}, runner, settings)
        assert await detector.detect() == AppVersion(0, 13, 2)
        assert runner.calls == [("alacritty", "--version")]

    @pytest.mark.asyncio
    async def test_command_stderr(self, runner, settings):
        runner.results[("mintty", "--version")] = CommandResult(
            0, "", "mintty 3.6.4 (x86_64-pc-cygwin)"
        )
        detector = self.make({"TERM": "mintty"}, runner, settings)
        assert await detector.detect() == AppVersion(3, 6, 4)

    @pytest.mark.asyncio
    async def test_command_install_path(self, runner, settings):
        path = "/Applications/WezTerm.app/Contents/MacOS/wezterm"
        runner.results[(path, "--version")] = CommandResult(
            0, "wezterm 20230712-072601-f4abf8fd", ""
        )
        detector = self.make({"WEZTERM_PANE": "0"}, runner, settings, "darwin")
        assert str(await detector.detect()) == "20230712.72601.0"
        assert runner.calls == [("wezterm", "--version"), (path, "--version")]

    @pytest.mark.asyncio
    async def test_command_failure(self, runner, settings):
        runner.results[("kitty", "--version")] = CommandResult(1, "kitty 0.31.0", "")
        detector = self.make({"TERM": "xterm-kitty"}, runner, settings)
        assert await detector.detect() is None
        assert runner.calls == [("kitty", "--version")]

    @pytest.mark.asyncio
    async def test_no_command_known(self, runner, settings):
        detector = self.make({"WT_SESSION": "1"}, runner, settings, "win32")
        assert await detector.detect() is None
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_cache(self, runner, settings):
        env = {"TERM": "alacritty", "ALACRITTY_VERSION": "0.13.2"}
        detector = self.make(env, runner, settings)
        assert await detector.detect() == AppVersion(0, 13, 2)

        env["ALACRITTY_VERSION"] = "0.14.0"
        assert await detector.detect() == AppVersion(0, 13, 2)

        detector.reset()
        assert await detector.detect() == AppVersion(0, 14, 0)

    @pytest.mark.asyncio
    async def test_failure_is_cached(self, runner, settings):
        detector = self.make({"TERM": "alacritty"}, runner, settings)
        assert await detector.detect() is None
        assert await detector.detect() is None
        assert runner.calls == [("alacritty", "--version")]
