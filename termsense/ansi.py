# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Building and taking apart terminal control sequences.

Nothing in this module performs I/O; it only works with strings.


Colored text
------------

.. autofunction:: build_sgr

.. autofunction:: rgb_text

.. autofunction:: parse_rgb_spec

.. autofunction:: bold

.. autofunction:: dim

.. autofunction:: normal

.. autofunction:: underline

.. autofunction:: strikethrough

.. autofunction:: reset

.. autofunction:: box


Palette
-------

.. autodata:: PALETTE

Each palette entry has a function of the same name that colors its first
argument and appends the second one as is::

    >>> blue("OS:", " linux")
    '\\x1b[38;2;4;51;255mOS:\\x1b[0m linux'
    >>> bg_dark_gray("x")
    '\\x1b[48;2;66;66;66mx\\x1b[0m'


Hyperlinks
----------

.. autofunction:: osc8_link

.. autofunction:: url_link

.. autofunction:: file_link

.. autoclass:: InvalidFilePathError


Parsing
-------

.. autofunction:: parse_color_query_response

.. autofunction:: is_osc_response_complete

.. autofunction:: strip_control_sequences

"""

from __future__ import annotations

import os
import pathlib
import re

import termsense
import termsense.color
from termsense import _typing as _t

__all__ = [
    "BEL",
    "ESC",
    "InvalidFilePathError",
    "OSC8_DELIMITER",
    "OSC8_START",
    "PALETTE",
    "SGR_RESET",
    "ST",
    "bg_blue",
    "bg_dark_blue",
    "bg_dark_gray",
    "bg_dark_green",
    "bg_dark_red",
    "bg_dark_yellow",
    "bg_gray",
    "bg_green",
    "bg_light_blue",
    "bg_light_gray",
    "bg_light_green",
    "bg_light_red",
    "bg_light_yellow",
    "bg_red",
    "bg_yellow",
    "black_backed",
    "blue",
    "blue_backed",
    "bold",
    "box",
    "build_sgr",
    "dark_blue_backed",
    "dark_gray_backed",
    "dark_green_backed",
    "dark_pink_backed",
    "dark_purple_backed",
    "dark_red_backed",
    "dark_yellow_backed",
    "dim",
    "file_link",
    "gray_backed",
    "green",
    "green_backed",
    "is_osc_response_complete",
    "light_blue_backed",
    "light_gray_backed",
    "light_green_backed",
    "light_purple_backed",
    "light_red_backed",
    "light_yellow_backed",
    "lime",
    "lime_backed",
    "normal",
    "orange",
    "orange_backed",
    "orange_highlighted",
    "osc8_link",
    "parse_color_query_response",
    "parse_rgb_spec",
    "pink",
    "pink_backed",
    "purple",
    "purple_backed",
    "red",
    "red_backed",
    "reset",
    "rgb_text",
    "slate_blue",
    "slate_blue_backed",
    "strikethrough",
    "strip_control_sequences",
    "tangerine",
    "tangerine_backed",
    "tangerine_highlighted",
    "underline",
    "url_link",
    "white_backed",
    "yellow",
    "yellow_backed",
]

ESC = "\x1b"
BEL = "\x07"
ST = ESC + "\\"

OSC8_START = ESC + "]8;;"
OSC8_DELIMITER = ST

SGR_RESET = ESC + "[0m"
SGR_BOLD = ESC + "[1m"
SGR_DIM = ESC + "[2m"
SGR_NORMAL = ESC + "[22m"
SGR_UNDERLINE = ESC + "[4m"
SGR_NO_UNDERLINE = ESC + "[24m"
SGR_STRIKETHROUGH = ESC + "[9m"
SGR_NO_STRIKETHROUGH = ESC + "[29m"

_WEIGHTS = {
    "normal": SGR_NORMAL,
    "bold": SGR_BOLD,
    "dim": SGR_DIM,
}

RGB: _t.TypeAlias = "tuple[int, int, int]"


class InvalidFilePathError(termsense.TermsenseError, ValueError):
    """
    Raised by :func:`file_link` when the given path doesn't exist.

    """


def _valid_rgb(rgb: _t.Any) -> bool:
    try:
        return len(rgb) == 3 and all(
            isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 255
            for c in rgb
        )
    except TypeError:
        return False


def build_sgr(fore: RGB | None = None, back: RGB | None = None) -> str:
    """
    Build a truecolor SGR prefix for the given 8-bit foreground
    and background colors.

    Missing or malformed colors are skipped, so this function never fails.

    :example:
        ::

            >>> build_sgr((255, 100, 0))
            '\\x1b[38;2;255;100;0m'
            >>> build_sgr(None, (30, 30, 30))
            '\\x1b[48;2;30;30;30m'
            >>> build_sgr()
            ''

    """

    result = ""
    if fore is not None and _valid_rgb(fore):
        result += f"{ESC}[38;2;{fore[0]};{fore[1]};{fore[2]}m"
    if back is not None and _valid_rgb(back):
        result += f"{ESC}[48;2;{back[0]};{back[1]};{back[2]}m"
    return result


def rgb_text(text: str, fore: RGB | None = None, back: RGB | None = None) -> str:
    """
    Color ``text`` and reset all styles after it.

    """

    return build_sgr(fore, back) + text + SGR_RESET


def parse_rgb_spec(spec: str) -> tuple[RGB | None, RGB | None]:
    """
    Parse a space-separated color spec into foreground and background.

    A single triple sets the foreground, two triples separated by ``/``
    set both, and a triple after a leading ``/`` sets only the background.
    Malformed triples become :data:`None`.

    :example:
        ::

            >>> parse_rgb_spec("255 100 0")
            ((255, 100, 0), None)
            >>> parse_rgb_spec("255 100 0 / 30 30 30")
            ((255, 100, 0), (30, 30, 30))
            >>> parse_rgb_spec("/ 30 30 30")
            (None, (30, 30, 30))

    """

    fore_part, _, back_part = spec.partition("/")
    return _parse_triple(fore_part), _parse_triple(back_part)


def _parse_triple(s: str) -> RGB | None:
    parts = s.split()
    if len(parts) != 3:
        return None
    try:
        rgb = tuple(int(p, 10) for p in parts)
    except ValueError:
        return None
    return rgb if _valid_rgb(rgb) else None  # type: ignore


def bold(text: str) -> str:
    """
    Make ``text`` bold, then return to normal weight.

    """

    return SGR_BOLD + text + SGR_NORMAL


def dim(text: str) -> str:
    """
    Make ``text`` dim, then return to normal weight.

    """

    return SGR_DIM + text + SGR_NORMAL


def normal(
    text: str,
    return_to: _t.Literal["normal", "bold", "dim"] = "normal",
    after: str = "",
) -> str:
    """
    Print ``text`` with normal weight.

    If ``return_to`` is ``"bold"`` or ``"dim"``, switch back to that weight
    before printing ``after``, and reset weight once more at the end.

    """

    if return_to == "normal":
        return SGR_NORMAL + text + after
    else:
        return SGR_NORMAL + text + _WEIGHTS[return_to] + after + SGR_NORMAL


def underline(text: str) -> str:
    return SGR_UNDERLINE + text + SGR_NO_UNDERLINE


def strikethrough(text: str) -> str:
    return SGR_STRIKETHROUGH + text + SGR_NO_STRIKETHROUGH


def reset() -> str:
    """
    Return the sequence that resets all SGR attributes.

    """

    return SGR_RESET


PALETTE: dict[str, str] = {
    "orange": "242 81 29",
    "orange_highlighted": "242 81 29/71 49 55",
    "orange_backed": "16 16 16/242 81 29",
    "blue": "4 51 255",
    "blue_backed": "235 235 235/4 51 255",
    "light_blue_backed": "8 8 8/65 128 255",
    "dark_blue_backed": "235 235 235/1 25 147",
    "tangerine": "255 147 0",
    "tangerine_highlighted": "255 147 0/125 77 0",
    "tangerine_backed": "16 16 16/255 147 0",
    "slate_blue": "63 99 139",
    "slate_blue_backed": "63 99 139/203 237 255",
    "green": "0 143 0",
    "green_backed": "8 8 8/0 229 0",
    "light_green_backed": "8 8 8/0 143 0",
    "dark_green_backed": "235 235 235/0 65 0",
    "lime": "15 250 121",
    "lime_backed": "33 33 33/15 250 121",
    "pink": "255 138 216",
    "pink_backed": "33 33 33/255 138 216",
    "dark_pink_backed": "235 235 235/148 23 81",
    "yellow": "255 252 121",
    "light_yellow_backed": "8 8 8/255 252 121",
    "yellow_backed": "8 8 8/255 251 0",
    "dark_yellow_backed": "255 255 255/146 144 0",
    "red": "255 38 0",
    "red_backed": "235 235 235/255 38 0",
    "dark_red_backed": "235 235 235/148 17 0",
    "light_red_backed": "8 8 8/255 126 121",
    "purple": "172 57 255",
    "purple_backed": "235 235 235/148 55 255",
    "light_purple_backed": "8 8 8/215 131 255",
    "dark_purple_backed": "235 235 235/83 27 147",
    "black_backed": "192 192 192/0 0 0",
    "white_backed": "66 66 66/255 255 255",
    "gray_backed": "33 33 33/169 169 169",
    "light_gray_backed": "55 55 55/214 214 214",
    "dark_gray_backed": "235 235 235/66 66 66",
    "bg_gray": "/94 94 94",
    "bg_light_gray": "/146 146 146",
    "bg_dark_gray": "/66 66 66",
    "bg_blue": "/0 84 147",
    "bg_light_blue": "/0 150 255",
    "bg_dark_blue": "/1 25 147",
    "bg_green": "/0 143 0",
    "bg_light_green": "/0 172 0",
    "bg_dark_green": "/0 114 0",
    "bg_yellow": "/255 251 0",
    "bg_light_yellow": "/255 252 121",
    "bg_dark_yellow": "/146 144 0",
    "bg_red": "/255 38 0",
    "bg_light_red": "/255 126 121",
    "bg_dark_red": "/148 17 0",
}
"""
Named colors, as specs for :func:`parse_rgb_spec`. Every entry is also
available as a function in this module.

"""


def _palette_color(name: str) -> _t.Callable[..., str]:
    fore, back = parse_rgb_spec(PALETTE[name])

    def color(text: str = "", rest: str = "") -> str:
        return rgb_text(text, fore, back) + rest

    color.__name__ = color.__qualname__ = name
    color.__doc__ = f"Color ``text`` as ``{name}``, then append ``rest`` uncolored."
    return color


orange = _palette_color("orange")
orange_highlighted = _palette_color("orange_highlighted")
orange_backed = _palette_color("orange_backed")
blue = _palette_color("blue")
blue_backed = _palette_color("blue_backed")
light_blue_backed = _palette_color("light_blue_backed")
dark_blue_backed = _palette_color("dark_blue_backed")
tangerine = _palette_color("tangerine")
tangerine_highlighted = _palette_color("tangerine_highlighted")
tangerine_backed = _palette_color("tangerine_backed")
slate_blue = _palette_color("slate_blue")
slate_blue_backed = _palette_color("slate_blue_backed")
green = _palette_color("green")
green_backed = _palette_color("green_backed")
light_green_backed = _palette_color("light_green_backed")
dark_green_backed = _palette_color("dark_green_backed")
lime = _palette_color("lime")
lime_backed = _palette_color("lime_backed")
pink = _palette_color("pink")
pink_backed = _palette_color("pink_backed")
dark_pink_backed = _palette_color("dark_pink_backed")
yellow = _palette_color("yellow")
light_yellow_backed = _palette_color("light_yellow_backed")
yellow_backed = _palette_color("yellow_backed")
dark_yellow_backed = _palette_color("dark_yellow_backed")
red = _palette_color("red")
red_backed = _palette_color("red_backed")
dark_red_backed = _palette_color("dark_red_backed")
light_red_backed = _palette_color("light_red_backed")
purple = _palette_color("purple")
purple_backed = _palette_color("purple_backed")
light_purple_backed = _palette_color("light_purple_backed")
dark_purple_backed = _palette_color("dark_purple_backed")
black_backed = _palette_color("black_backed")
white_backed = _palette_color("white_backed")
gray_backed = _palette_color("gray_backed")
light_gray_backed = _palette_color("light_gray_backed")
dark_gray_backed = _palette_color("dark_gray_backed")
bg_gray = _palette_color("bg_gray")
bg_light_gray = _palette_color("bg_light_gray")
bg_dark_gray = _palette_color("bg_dark_gray")
bg_blue = _palette_color("bg_blue")
bg_light_blue = _palette_color("bg_light_blue")
bg_dark_blue = _palette_color("bg_dark_blue")
bg_green = _palette_color("bg_green")
bg_light_green = _palette_color("bg_light_green")
bg_dark_green = _palette_color("bg_dark_green")
bg_yellow = _palette_color("bg_yellow")
bg_light_yellow = _palette_color("bg_light_yellow")
bg_dark_yellow = _palette_color("bg_dark_yellow")
bg_red = _palette_color("bg_red")
bg_light_red = _palette_color("bg_light_red")
bg_dark_red = _palette_color("bg_dark_red")


_BOX_CORNERS: dict[str, tuple[str, str, str, str, str, str]] = {
    # h, v, tl, tr, bl, br
    "ascii": ("-", "|", "+", "+", "+", "+"),
    "single": ("─", "│", "┌", "┐", "└", "┘"),
    "heavy": ("━", "┃", "┏", "┓", "┗", "┛"),
    "double": ("═", "║", "╔", "╗", "╚", "╝"),
    "rounded": ("─", "│", "╭", "╮", "╰", "╯"),
}

BoxStyle: _t.TypeAlias = _t.Literal["ascii", "single", "heavy", "double", "rounded"]


def box(content: str, style: BoxStyle = "single") -> str:
    """
    Draw a one-line box around ``content``.

    Width is measured on the visible text, so colored content
    is boxed correctly.

    :example:
        ::

            >>> print(box("Host Detection", "ascii"))
            +----------------+
            | Host Detection |
            +----------------+

    """

    try:
        h, v, tl, tr, bl, br = _BOX_CORNERS[style]
    except KeyError:
        raise ValueError(f"unknown box style {style!r}") from None
    horizontal = h * (len(strip_control_sequences(content)) + 2)
    return "\n".join(
        [
            f"{tl}{horizontal}{tr}",
            f"{v} {content} {v}",
            f"{bl}{horizontal}{br}",
        ]
    )


def osc8_link(text: str, uri: str) -> str:
    """
    Wrap ``text`` into an OSC 8 hyperlink pointing to ``uri``.

    The link is closed by re-sending an OSC 8 start with an empty target.

    :example:
        ::

            >>> osc8_link("docs", "https://example.com")
            '\\x1b]8;;https://example.com\\x1b\\\\docs\\x1b]8;;\\x1b\\\\'

    """

    return OSC8_START + uri + OSC8_DELIMITER + text + OSC8_START + OSC8_DELIMITER


def _ensure_https(url: str) -> str:
    return url if url.startswith("https://") else "https://" + url


def url_link(text: str, url: str | None = None) -> str:
    """
    Link ``text`` to ``url``, adding ``https://`` if it's missing.

    If ``url`` is not given, ``text`` itself is used as the address.

    """

    return osc8_link(text, _ensure_https(text if url is None else url))


_LINE_SUFFIX_RE = re.compile(r"^(.+):(\d+)$")


def file_link(text: str, path: str | os.PathLike[str] | None = None) -> str:
    """
    Link ``text`` to a file on the local filesystem.

    If ``path`` is :data:`None`, ``text`` is returned as is. A ``file://``
    prefix and a ``:LINE`` suffix are accepted. A path that starts with ``/``
    but doesn't exist is retried relative to the current directory.

    :raises:
        :class:`InvalidFilePathError` if the path doesn't exist.

    """

    if path is None:
        return text

    clean = os.fspath(path)
    if clean.startswith("file://"):
        clean = clean[len("file://") :]

    line = None
    if match := _LINE_SUFFIX_RE.match(clean):
        clean, line = match.group(1), match.group(2)

    full_path = pathlib.Path(clean).resolve()
    if not full_path.exists() and clean.startswith("/"):
        full_path = pathlib.Path(clean.lstrip("/")).resolve()

    if not full_path.exists():
        raise InvalidFilePathError(
            f"the path {str(full_path)!r} is not a valid path on the file system"
        )

    uri = f"file://{full_path.as_posix()}"
    if line is not None:
        uri += f":{line}"
    return osc8_link(text, uri)


_COLOR_RESPONSE_RE = re.compile(
    r"rgb:([0-9a-fA-F]+)/([0-9a-fA-F]+)/([0-9a-fA-F]+)",
)


def _normalize_channel(h: str) -> int:
    value = int(h, 16)
    if len(h) == 2:
        return value * 0x101
    elif len(h) == 4:
        return value
    else:
        return round(value / (16 ** len(h) - 1) * 0xFFFF)


def parse_color_query_response(raw: str) -> termsense.color.RGBColor | None:
    """
    Extract a color from a terminal's answer to an OSC color query.

    Channels are scaled to 16 bits: two hex digits are replicated
    (``ff`` becomes ``ffff``), four digits are used as is, and any other
    width is scaled proportionally.

    :example:
        ::

            >>> parse_color_query_response("\\x1b]11;rgb:ff/80/00\\x07")
            <RGBColor #FF8000>
            >>> parse_color_query_response("\\x1b]11;?\\x07") is None
            True

    """

    match = _COLOR_RESPONSE_RE.search(raw)
    if match is None:
        return None
    r, g, b = (_normalize_channel(h) for h in match.groups())
    return termsense.color.RGBColor(r, g, b)


_CONTROL_SEQUENCE_RE = re.compile(
    r"""
        \x1b\[[0-9;?]*[a-zA-Z]              # CSI
      | \x1b\][^\x07\x1b]*(?:\x07|\x1b\\)   # OSC, terminated by BEL or ST
      | \x1b_[^\x1b]*\x1b\\                 # APC / DCS-like strings
      | \x1b[c78M]                          # RIS, DECSC, DECRC, RI
    """,
    re.VERBOSE,
)


def is_osc_response_complete(response: str) -> bool:
    """
    Check if an answer to an OSC query is terminated by BEL or ST.

    """

    return BEL in response or ST in response


def strip_control_sequences(text: str) -> str:
    """
    Remove CSI, OSC and APC sequences, as well as single-character escapes,
    from ``text``. Everything else, including stray control characters,
    is kept.

    :example:
        ::

            >>> strip_control_sequences("\\x1b[1mbold\\x1b[22m \\x1b]8;;https://x\\x1b\\\\link\\x1b]8;;\\x1b\\\\")
            'bold link'

    """

    # Removing a sequence can glue an ESC to the text after it
    # and form a new sequence, so repeat until nothing changes.
    while True:
        text, n = _CONTROL_SEQUENCE_RE.subn("", text)
        if not n:
            return text
