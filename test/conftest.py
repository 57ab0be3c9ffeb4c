from __future__ import annotations

import asyncio
import contextlib

import pytest

import termsense.exec
import termsense.settings
import termsense.term
from termsense import _typing as _t


class FakeDevice(termsense.term.TerminalDevice):
    """
    A terminal that answers known queries with canned responses.

    Responses are delivered asynchronously, chunk by chunk,
    after the query is written.

    """

    def __init__(
        self,
        interactive: bool = True,
        columns: int | None = None,
        responses: dict[str, str | list[str]] | None = None,
        fail_raw_mode: bool = False,
        fail_write: bool = False,
    ):
        self.interactive = interactive
        self._columns = columns
        self.responses = responses or {}
        self.fail_raw_mode = fail_raw_mode
        self.fail_write = fail_write

        self.written: list[str] = []
        self.raw_mode_entered = 0
        self.raw_mode_exited = 0
        self.stop_calls = 0
        self.in_raw_mode = False
        self._callback: _t.Callable[[str], None] | None = None

    def is_interactive(self) -> bool:
        return self.interactive

    @property
    def columns(self) -> int | None:
        return self._columns

    @contextlib.contextmanager
    def raw_mode(self):
        if self.fail_raw_mode:
            raise OSError("can't enter raw mode")
        assert not self.in_raw_mode, "nested raw mode"
        self.raw_mode_entered += 1
        self.in_raw_mode = True
        try:
            yield
        finally:
            self.in_raw_mode = False
            self.raw_mode_exited += 1

    def write(self, data: str, /):
        assert self.in_raw_mode, "query written outside of raw mode"
        if self.fail_write:
            raise OSError("can't write")
        self.written.append(data)
        response = self.responses.get(data)
        if response is None or self._callback is None:
            return
        chunks = [response] if isinstance(response, str) else response
        loop = asyncio.get_running_loop()
        for chunk in chunks:
            loop.call_soon(self._deliver, chunk)

    def start_reading(self, callback: _t.Callable[[str], None], /):
        self._callback = callback

    def stop_reading(self):
        self._callback = None
        self.stop_calls += 1

    def _deliver(self, chunk: str):
        if self._callback is not None:
            self._callback(chunk)


class FakeRunner:
    """
    Records commands and returns canned results for them.

    Unknown commands fail with exit code ``-1``, as if not installed.

    """

    def __init__(
        self,
        results: dict[tuple[str, ...], termsense.exec.CommandResult] | None = None,
    ):
        self.results = results or {}
        self.calls: list[tuple[str, ...]] = []

    def __call__(
        self,
        command: str,
        /,
        *args: str,
        timeout: float = 1.0,
        encoding: str | None = None,
        env: _t.Mapping[str, str] | None = None,
    ) -> termsense.exec.CommandResult:
        key = (command, *args)
        self.calls.append(key)
        return self.results.get(key, termsense.exec.CommandResult(-1, "", ""))


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def probe(device: FakeDevice) -> termsense.term.RawModeProbe:
    return termsense.term.RawModeProbe(device)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings() -> termsense.settings.Settings:
    return termsense.settings.Settings(probe_timeout=0.05, command_timeout=1.0)


@pytest.fixture
def make_device() -> type[FakeDevice]:
    return FakeDevice
