# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Which operating system and CPU we're running on.

.. autofunction:: discover_os

.. autofunction:: discover_os_arch

"""

from __future__ import annotations

import platform
import sys

__all__ = [
    "discover_os",
    "discover_os_arch",
]

_ARCH_NAMES = {
    "x86_64": "x64",
    "amd64": "x64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def discover_os() -> str:
    """
    Return a short platform name: ``"darwin"``, ``"linux"``, ``"win32"``,
    ``"freebsd"``, etc.

    """

    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform.startswith("freebsd"):
        return "freebsd"
    return sys.platform


def discover_os_arch() -> str:
    """
    Return ``"<os>/<arch>"``, for example ``"linux/x64"`` or ``"darwin/arm64"``.

    """

    machine = platform.machine().lower()
    return f"{discover_os()}/{_ARCH_NAMES.get(machine, machine or 'unknown')}"
