# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Talking to the terminal directly.

Some capabilities can only be learned by asking the terminal: we write
a query sequence and read the terminal's answer from the input stream.
This requires switching the input into raw mode, and restoring it afterwards
no matter what happens.

This is a low-level module upon which detectors build.


Terminal devices
----------------

All direct access to the terminal goes through a :class:`TerminalDevice`.
Detectors receive a device explicitly, so tests can substitute a fake one.

.. autoclass:: TerminalDevice
   :members:

.. autoclass:: StreamDevice

.. autofunction:: get_default_device

.. autofunction:: get_default_probe


Queries
-------

.. autoclass:: RawModeProbe
   :members:

"""

from __future__ import annotations

import abc
import asyncio
import codecs
import contextlib
import os
import sys
import threading

import termsense
from termsense import _typing as _t

__all__ = [
    "RawModeProbe",
    "StreamDevice",
    "TerminalDevice",
    "get_default_device",
    "get_default_probe",
]


class TerminalDevice(abc.ABC):
    """
    A pair of input and output streams attached to a terminal.

    """

    @abc.abstractmethod
    def is_interactive(self) -> bool:
        """
        Return :data:`True` if both streams are attached to a TTY
        and we're allowed to query it.

        """

    @property
    @abc.abstractmethod
    def columns(self) -> int | None:
        """
        Width of the terminal as reported by the output stream, if known.

        """

    @abc.abstractmethod
    def raw_mode(self) -> _t.ContextManager[None]:
        """
        Context manager that puts input into raw mode, and restores
        the previous mode on exit.

        """

    @abc.abstractmethod
    def write(self, data: str, /):
        """
        Write data to the terminal and flush it.

        """

    @abc.abstractmethod
    def start_reading(self, callback: _t.Callable[[str], None], /):
        """
        Start delivering text that arrives from the terminal to ``callback``.

        Callback is invoked from the running event loop.

        """

    @abc.abstractmethod
    def stop_reading(self):
        """
        Stop delivering input. Must be safe to call several times.

        """


class RawModeProbe:
    """
    Sends a query to a terminal and waits for its answer.

    Only one query can be in flight on a device. Concurrent calls
    to :meth:`probe` from the same event loop wait for each other;
    a call made while another thread holds the terminal returns :data:`None`.

    """

    def __init__(self, device: TerminalDevice):
        self._device = device
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self._lock_swap = threading.Lock()
        self._session = threading.Lock()

    @property
    def device(self) -> TerminalDevice:
        return self._device

    async def probe(
        self,
        query: str,
        timeout: float,
        is_complete: _t.Callable[[str], bool],
    ) -> str | None:
        """
        Write ``query`` to the terminal and collect input until
        ``is_complete`` returns :data:`True` for the collected text.

        :param query:
            escape sequence to send.
        :param timeout:
            how long to wait for the answer, in seconds.
        :param is_complete:
            checks whether the text collected so far is a full answer.
        :returns:
            collected text, or :data:`None` if the device is not interactive,
            is busy with a query from another thread, the answer didn't arrive
            in time, or anything went wrong.

        """

        if not self._device.is_interactive():
            return None

        async with self._get_lock():
            # Event loops in other threads don't see our asyncio lock.
            if not self._session.acquire(blocking=False):
                termsense._logger.debug(
                    "query %r skipped, terminal is busy in another thread", query
                )
                return None
            try:
                return await self._probe(query, timeout, is_complete)
            finally:
                self._session.release()

    def _get_lock(self) -> asyncio.Lock:
        # Locks can't be shared between event loops.
        loop = asyncio.get_running_loop()
        with self._lock_swap:
            if self._lock is None or self._lock_loop is not loop:
                self._lock = asyncio.Lock()
                self._lock_loop = loop
            return self._lock

    async def _probe(
        self,
        query: str,
        timeout: float,
        is_complete: _t.Callable[[str], bool],
    ) -> str | None:
        loop = asyncio.get_running_loop()
        done: asyncio.Future[str | None] = loop.create_future()
        buf: list[str] = []

        def on_data(chunk: str):
            if done.done():
                return
            buf.append(chunk)
            response = "".join(buf)
            try:
                complete = is_complete(response)
            except Exception:
                termsense._logger.warning(
                    "completion check failed on %r", response, exc_info=True
                )
                done.set_result(None)
                return
            if complete:
                done.set_result(response)

        try:
            with self._device.raw_mode():
                self._device.start_reading(on_data)
                try:
                    self._device.write(query)
                    return await asyncio.wait_for(done, timeout)
                except asyncio.TimeoutError:
                    termsense._logger.debug(
                        "query %r timed out, got %r", query, "".join(buf)
                    )
                    return None
                finally:
                    _safe_stop_reading(self._device)
        except Exception:
            termsense._logger.warning("query %r failed", query, exc_info=True)
            return None


def _safe_stop_reading(device: TerminalDevice):
    try:
        device.stop_reading()
    except Exception:  # pragma: no cover
        termsense._logger.warning("failed to stop reading input", exc_info=True)


class StreamDevice(TerminalDevice):
    """
    A device backed by real text streams, usually :data:`sys.stdout`
    and :data:`sys.stdin`.

    """

    def __init__(self, ostream: _t.TextIO, istream: _t.TextIO):
        self.ostream = ostream
        self.istream = istream
        self._reader: _Reader | None = None

    def is_interactive(self) -> bool:
        return (
            _output_is_tty(self.ostream)
            and _input_is_tty(self.istream)
            and _is_foreground(self.istream)
        )

    @property
    def columns(self) -> int | None:
        try:
            return os.get_terminal_size(self.ostream.fileno()).columns
        except (AttributeError, ValueError, OSError):
            return None

    def raw_mode(self) -> _t.ContextManager[None]:
        return _enter_raw_mode(self.istream)

    def write(self, data: str, /):
        self.ostream.write(data)
        self.ostream.flush()

    def start_reading(self, callback: _t.Callable[[str], None], /):
        self.stop_reading()
        self._reader = _Reader(self.istream, callback)
        self._reader.start()

    def stop_reading(self):
        reader, self._reader = self._reader, None
        if reader is not None:
            reader.stop()


_DEFAULT_DEVICE: StreamDevice | None = None
_DEFAULT_DEVICE_LOCK = threading.Lock()


def get_default_device() -> StreamDevice:
    """
    Return a process-wide device for :data:`sys.__stdout__`
    and :data:`sys.__stdin__`.

    Original streams are used because :data:`sys.stdout` is often replaced
    by wrappers that don't support :meth:`~io.IOBase.fileno`.

    """

    global _DEFAULT_DEVICE

    with _DEFAULT_DEVICE_LOCK:
        if _DEFAULT_DEVICE is None:
            _DEFAULT_DEVICE = StreamDevice(
                sys.__stdout__ or sys.stdout,  # type: ignore
                sys.__stdin__ or sys.stdin,  # type: ignore
            )
        return _DEFAULT_DEVICE


_DEFAULT_PROBE: RawModeProbe | None = None


def get_default_probe() -> RawModeProbe:
    """
    Return a process-wide probe for :func:`get_default_device`.

    All detectors that talk to the real terminal share this probe,
    so their queries never overlap.

    """

    global _DEFAULT_PROBE

    device = get_default_device()
    with _DEFAULT_DEVICE_LOCK:
        if _DEFAULT_PROBE is None:
            _DEFAULT_PROBE = RawModeProbe(device)
        return _DEFAULT_PROBE


def _is_tty(stream: _t.TextIO | None) -> bool:
    try:
        return stream is not None and stream.isatty()
    except Exception:  # pragma: no cover
        return False


if os.name == "posix":

    def _is_foreground(stream: _t.TextIO | None) -> bool:
        try:
            return stream is not None and os.getpgrp() == os.tcgetpgrp(stream.fileno())
        except Exception:  # pragma: no cover
            return False

elif os.name == "nt":

    def _is_foreground(stream: _t.TextIO | None) -> bool:
        return True

else:  # pragma: no cover

    def _is_foreground(stream: _t.TextIO | None) -> bool:
        return False


def _input_is_tty(stream: _t.TextIO | None) -> bool:
    try:
        return stream is not None and _is_tty(stream) and stream.readable()
    except Exception:  # pragma: no cover
        return False


def _output_is_tty(stream: _t.TextIO | None) -> bool:
    try:
        return stream is not None and _is_tty(stream) and stream.writable()
    except Exception:  # pragma: no cover
        return False


# Platform-specific code for working with terminals.
if os.name == "posix":
    import termios
    import tty

    @contextlib.contextmanager
    def _enter_raw_mode(istream: _t.TextIO):
        prev_mode = termios.tcgetattr(istream)
        new_mode = prev_mode.copy()
        new_mode[tty.LFLAG] &= ~(
            termios.ECHO  # Don't print back what the terminal answers.
            | termios.ICANON  # Disable line editing.
            | termios.ISIG  # Disable signals on C-c and C-z.
        )
        new_mode[tty.CC] = new_mode[tty.CC].copy()
        new_mode[tty.CC][termios.VMIN] = 1
        new_mode[tty.CC][termios.VTIME] = 0
        termios.tcsetattr(istream, termios.TCSAFLUSH, new_mode)

        try:
            yield
        finally:
            try:
                # TCSAFLUSH also drops late answers we didn't wait for.
                termios.tcsetattr(istream, termios.TCSAFLUSH, prev_mode)
            except Exception:
                termsense._logger.warning(
                    "failed to restore terminal mode", exc_info=True
                )

    class _Reader:
        def __init__(self, istream: _t.TextIO, callback: _t.Callable[[str], None]):
            self._fd = istream.fileno()
            self._decoder = codecs.getincrementaldecoder(
                getattr(istream, "encoding", None) or "utf-8"
            )(errors="replace")
            self._callback = callback
            self._loop: asyncio.AbstractEventLoop | None = None

        def start(self):
            self._loop = asyncio.get_running_loop()
            self._loop.add_reader(self._fd, self._on_readable)

        def stop(self):
            if self._loop is not None:
                self._loop.remove_reader(self._fd)
                self._loop = None

        def _on_readable(self):
            try:
                data = os.read(self._fd, 1024)
            except OSError:
                termsense._logger.warning("failed to read input", exc_info=True)
                self.stop()
                return
            if not data:
                self.stop()
                return
            text = self._decoder.decode(data)
            if text:
                self._callback(text)

elif os.name == "nt":
    import ctypes
    import ctypes.wintypes
    import msvcrt
    import time

    _GetConsoleMode = ctypes.windll.kernel32.GetConsoleMode
    _GetConsoleMode.argtypes = [ctypes.wintypes.HANDLE, ctypes.wintypes.LPDWORD]
    _GetConsoleMode.restype = ctypes.wintypes.BOOL

    _SetConsoleMode = ctypes.windll.kernel32.SetConsoleMode
    _SetConsoleMode.argtypes = [ctypes.wintypes.HANDLE, ctypes.wintypes.DWORD]
    _SetConsoleMode.restype = ctypes.wintypes.BOOL

    _FlushConsoleInputBuffer = ctypes.windll.kernel32.FlushConsoleInputBuffer
    _FlushConsoleInputBuffer.argtypes = [ctypes.wintypes.HANDLE]
    _FlushConsoleInputBuffer.restype = ctypes.wintypes.BOOL

    _ENABLE_VIRTUAL_TERMINAL_INPUT = 0x0200

    @contextlib.contextmanager
    def _enter_raw_mode(istream: _t.TextIO):
        handle = msvcrt.get_osfhandle(istream.fileno())

        mode = ctypes.wintypes.DWORD()
        if not _GetConsoleMode(handle, ctypes.byref(mode)):
            raise ctypes.WinError()
        if not _SetConsoleMode(handle, _ENABLE_VIRTUAL_TERMINAL_INPUT):
            raise ctypes.WinError()

        try:
            yield
        finally:
            try:
                _FlushConsoleInputBuffer(handle)
                if not _SetConsoleMode(handle, mode):
                    raise ctypes.WinError()
            except Exception:
                termsense._logger.warning(
                    "failed to restore console mode", exc_info=True
                )

    class _Reader:
        # Console handles can't be registered in an event loop,
        # so we poll them from a thread.

        def __init__(self, istream: _t.TextIO, callback: _t.Callable[[str], None]):
            self._callback = callback
            self._stopped = threading.Event()
            self._thread: threading.Thread | None = None
            self._loop: asyncio.AbstractEventLoop | None = None

        def start(self):
            self._loop = asyncio.get_running_loop()
            self._thread = threading.Thread(
                target=self._run, name="termsense console reader", daemon=True
            )
            self._thread.start()

        def stop(self):
            self._stopped.set()
            if self._thread is not None:
                self._thread.join()
                self._thread = None

        def _run(self):
            assert self._loop is not None
            while not self._stopped.is_set():
                chars = []
                while msvcrt.kbhit():
                    chars.append(msvcrt.getwch())
                if chars:
                    try:
                        self._loop.call_soon_threadsafe(self._callback, "".join(chars))
                    except RuntimeError:  # pragma: no cover
                        return  # Loop is closed.
                else:
                    time.sleep(0.005)

else:  # pragma: no cover

    @contextlib.contextmanager
    def _enter_raw_mode(istream: _t.TextIO):
        raise OSError("not supported")
        yield

    class _Reader:
        def __init__(self, istream: _t.TextIO, callback: _t.Callable[[str], None]):
            raise OSError("not supported")

        def start(self):
            raise OSError("not supported")

        def stop(self):
            pass
