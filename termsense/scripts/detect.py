# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Print everything Termsense can find out about the current terminal.

"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

import termsense
import termsense.ansi
import termsense.app
import termsense.detect
import termsense.host
import termsense.settings
from termsense import _typing as _t


async def collect(detectors: termsense.detect.Detectors) -> dict[str, _t.Any]:
    """
    Run all detectors and gather their results into a JSON-friendly dict.

    """

    version = await detectors.app_version.detect()
    return {
        "os": termsense.host.discover_os_arch(),
        "color_scheme": await detectors.color_scheme.detect(),
        "color_depth": int(await detectors.color_depth.detect()),
        "available_width": await detectors.available_width.detect(),
        "terminal_app": str(detectors.terminal_app.detect()),
        "app_version": None if version is None else str(version),
        "wsl": termsense.app.is_running_in_wsl(),
        "link_support": await detectors.link_support.detect(),
    }


_LABELS = {
    "os": "OS",
    "color_scheme": "Theme",
    "color_depth": "Depth",
    "available_width": "Char Width",
    "terminal_app": "Terminal App",
    "app_version": "App Version",
    "wsl": "WSL",
    "link_support": "Links",
}


def format_report(
    report: dict[str, _t.Any], box_style: termsense.ansi.BoxStyle = "rounded"
) -> str:
    """
    Render results of :func:`collect` for humans.

    """

    width = max(len(label) for label in _LABELS.values()) + 2
    lines = ["", termsense.ansi.box("Host Detection", box_style), ""]
    for key, label in _LABELS.items():
        value = report.get(key)
        if value is None:
            text = termsense.ansi.dim("unknown")
        elif key == "os":
            text = termsense.ansi.blue(value)
        else:
            text = str(value)
        lines.append(termsense.ansi.bold(f"{label + ':':<{width}}") + text)
    return "\n".join(lines)


def main(argv: _t.Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="termsense-detect",
        description="Detect capabilities of the current terminal.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="print results as a JSON object",
    )
    parser.add_argument(
        "--no-probe",
        action="store_true",
        help="don't send queries to the terminal",
    )
    parser.add_argument(
        "--box",
        choices=["ascii", "single", "heavy", "double", "rounded"],
        default="rounded",
        help="style of the header box",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log detection steps to stderr",
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
        termsense.enable_internal_logging(propagate=True)

    settings = termsense.settings.Settings.from_env()
    if args.no_probe:
        settings = dataclasses.replace(settings, osc_queries=False)

    detectors = termsense.detect.Detectors(settings=settings)
    report = asyncio.run(collect(detectors))

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        print(format_report(report, args.box))

    return 0


if __name__ == "__main__":
    sys.exit(main())
