# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

"""
Colors as terminals report them, and the math we need to classify them.

Terminals answer color queries with 16-bit channels, so :class:`RGBColor`
stores values between ``0`` and ``0xFFFF``. Conversions to and from
the usual 8-bit notation are provided.

.. autoclass:: RGBColor
   :members:

.. autofunction:: calculate_luminance

.. autofunction:: is_light_color


Named colors
------------

.. autodata:: CSS_NAMED_COLORS

.. autofunction:: get_css_rgb_from_named_color

.. autofunction:: get_rgb_from_named_color

.. autoclass:: NamedColorError
   :members:

"""

from __future__ import annotations

import re
from dataclasses import dataclass

from termsense import _typing as _t

__all__ = [
    "CSS_NAMED_COLORS",
    "NamedColorError",
    "RGBColor",
    "calculate_luminance",
    "get_css_rgb_from_named_color",
    "get_rgb_from_named_color",
    "is_light_color",
]


@dataclass(frozen=True, slots=True)
class RGBColor:
    """
    A color with 16-bit channels.

    """

    r: int
    """
    Red channel, ``0..0xFFFF``.

    """

    g: int
    """
    Green channel, ``0..0xFFFF``.

    """

    b: int
    """
    Blue channel, ``0..0xFFFF``.

    """

    @classmethod
    def from_rgb8(cls, r: int, g: int, b: int, /) -> RGBColor:
        """
        Create a color from 8-bit components.

        :example:
            ::

                >>> RGBColor.from_rgb8(0xA0, 0x1E, 0x9C)
                <RGBColor #A01E9C>

        """

        return cls(r * 0x101, g * 0x101, b * 0x101)

    @classmethod
    def from_hex(cls, h: str, /) -> RGBColor:
        """
        Create a color from a hex string.

        :example:
            ::

                >>> RGBColor.from_hex('#A01E9C').to_rgb8()
                (160, 30, 156)

        """

        return cls.from_rgb8(*_parse_hex(h))

    @classmethod
    def from_name(cls, name: str, /) -> RGBColor:
        """
        Create a color from a CSS color name.

        :raises:
            :class:`ValueError` if the name is unknown.

        """

        rgb = get_rgb_from_named_color(name)
        if isinstance(rgb, NamedColorError):
            raise ValueError(rgb.message)
        return cls.from_rgb8(*rgb)

    def to_rgb8(self) -> tuple[int, int, int]:
        """
        Return 8-bit components of the color.

        """

        return (
            round(self.r / 0x101),
            round(self.g / 0x101),
            round(self.b / 0x101),
        )

    def to_hex(self) -> str:
        """
        Return color in hex format with leading ``#``.

        """

        r, g, b = self.to_rgb8()
        return f"#{r:02X}{g:02X}{b:02X}"

    @property
    def luminance(self) -> float:
        """
        WCAG relative luminance of this color.

        """

        return calculate_luminance(self.r, self.g, self.b)

    @property
    def is_light(self) -> bool:
        return is_light_color(self.r, self.g, self.b) == "light"

    def __repr__(self) -> str:
        return f"<RGBColor {self.to_hex()}>"


def _linearize(channel: float) -> float:
    if channel <= 0.03928:
        return channel / 12.92
    else:
        return ((channel + 0.055) / 1.055) ** 2.4


def calculate_luminance(r: int, g: int, b: int) -> float:
    """
    Calculate relative luminance of a 16-bit color using the WCAG formula.

    Each channel is scaled to ``0..1``, linearized with the sRGB
    gamma curve, then weighted.

    :example:
        ::

            >>> calculate_luminance(0, 0, 0)
            0.0
            >>> round(calculate_luminance(0xFFFF, 0xFFFF, 0xFFFF), 5)
            1.0

    """

    return (
        0.2126 * _linearize(r / 0xFFFF)
        + 0.7152 * _linearize(g / 0xFFFF)
        + 0.0722 * _linearize(b / 0xFFFF)
    )


def is_light_color(r: int, g: int, b: int) -> _t.Literal["light", "dark"]:
    """
    Classify a 16-bit color as ``"light"`` (luminance above ``0.5``)
    or ``"dark"``.

    """

    return "light" if calculate_luminance(r, g, b) > 0.5 else "dark"


@dataclass(frozen=True, slots=True)
class NamedColorError:
    """
    Returned instead of a color when a name is not a known CSS color.

    Evaluates to :data:`False`.

    """

    name: str
    """
    The name that was looked up.

    """

    kind: str = "invalid-color/named"

    @property
    def message(self) -> str:
        return f"the color {self.name!r} is not a known named color for the web or CSS"

    def __bool__(self) -> _t.Literal[False]:
        return False


def get_css_rgb_from_named_color(name: str) -> str | NamedColorError:
    """
    Return a CSS ``rgb(r, g, b)`` string for a named color.

    :example:
        ::

            >>> get_css_rgb_from_named_color("rebeccapurple")
            'rgb(102, 51, 153)'
            >>> bool(get_css_rgb_from_named_color("notacolor"))
            False

    """

    rgb = get_rgb_from_named_color(name)
    if isinstance(rgb, NamedColorError):
        return rgb
    return "rgb({}, {}, {})".format(*rgb)


def get_rgb_from_named_color(name: str) -> tuple[int, int, int] | NamedColorError:
    """
    Return 8-bit RGB components for a named color.

    Lookup ignores case, as CSS does.

    """

    value = CSS_NAMED_COLORS.get(name.lower())
    if value is None:
        return NamedColorError(name)
    return value


def _parse_hex(h: str) -> tuple[int, int, int]:
    if not re.match(r"^#[0-9a-fA-F]{6}$", h):
        raise ValueError(f"invalid hex string {h!r}")
    return tuple(int(h[i : i + 2], 16) for i in (1, 3, 5))  # type: ignore


CSS_NAMED_COLORS: dict[str, tuple[int, int, int]] = {
    "aliceblue": (240, 248, 255),
    "antiquewhite": (250, 235, 215),
    "aqua": (0, 255, 255),
    "aquamarine": (127, 255, 212),
    "azure": (240, 255, 255),
    "beige": (245, 245, 220),
    "bisque": (255, 228, 196),
    "black": (0, 0, 0),
    "blanchedalmond": (255, 235, 205),
    "blue": (0, 0, 255),
    "blueviolet": (138, 43, 226),
    "brown": (165, 42, 42),
    "burlywood": (222, 184, 135),
    "cadetblue": (95, 158, 160),
    "chartreuse": (127, 255, 0),
    "chocolate": (210, 105, 30),
    "coral": (255, 127, 80),
    "cornflowerblue": (100, 149, 237),
    "cornsilk": (255, 248, 220),
    "crimson": (220, 20, 60),
    "cyan": (0, 255, 255),
    "darkblue": (0, 0, 139),
    "darkcyan": (0, 139, 139),
    "darkgoldenrod": (184, 134, 11),
    "darkgray": (169, 169, 169),
    "darkgreen": (0, 100, 0),
    "darkgrey": (169, 169, 169),
    "darkkhaki": (189, 183, 107),
    "darkmagenta": (139, 0, 139),
    "darkolivegreen": (85, 107, 47),
    "darkorange": (255, 140, 0),
    "darkorchid": (153, 50, 204),
    "darkred": (139, 0, 0),
    "darksalmon": (233, 150, 122),
    "darkseagreen": (143, 188, 143),
    "darkslateblue": (72, 61, 139),
    "darkslategray": (47, 79, 79),
    "darkslategrey": (47, 79, 79),
    "darkturquoise": (0, 206, 209),
    "darkviolet": (148, 0, 211),
    "deeppink": (255, 20, 147),
    "deepskyblue": (0, 191, 255),
    "dimgray": (105, 105, 105),
    "dimgrey": (105, 105, 105),
    "dodgerblue": (30, 144, 255),
    "firebrick": (178, 34, 34),
    "floralwhite": (255, 250, 240),
    "forestgreen": (34, 139, 34),
    "fuchsia": (255, 0, 255),
    "gainsboro": (220, 220, 220),
    "ghostwhite": (248, 248, 255),
    "gold": (255, 215, 0),
    "goldenrod": (218, 165, 32),
    "gray": (128, 128, 128),
    "green": (0, 128, 0),
    "greenyellow": (173, 255, 47),
    "grey": (128, 128, 128),
    "honeydew": (240, 255, 240),
    "hotpink": (255, 105, 180),
    "indianred": (205, 92, 92),
    "indigo": (75, 0, 130),
    "ivory": (255, 255, 240),
    "khaki": (240, 230, 140),
    "lavender": (230, 230, 250),
    "lavenderblush": (255, 240, 245),
    "lawngreen": (124, 252, 0),
    "lemonchiffon": (255, 250, 205),
    "lightblue": (173, 216, 230),
    "lightcoral": (240, 128, 128),
    "lightcyan": (224, 255, 255),
    "lightgoldenrodyellow": (250, 250, 210),
    "lightgray": (211, 211, 211),
    "lightgreen": (144, 238, 144),
    "lightgrey": (211, 211, 211),
    "lightpink": (255, 182, 193),
    "lightsalmon": (255, 160, 122),
    "lightseagreen": (32, 178, 170),
    "lightskyblue": (135, 206, 250),
    "lightslategray": (119, 136, 153),
    "lightslategrey": (119, 136, 153),
    "lightsteelblue": (176, 196, 222),
    "lightyellow": (255, 255, 224),
    "lime": (0, 255, 0),
    "limegreen": (50, 205, 50),
    "linen": (250, 240, 230),
    "magenta": (255, 0, 255),
    "maroon": (128, 0, 0),
    "mediumaquamarine": (102, 205, 170),
    "mediumblue": (0, 0, 205),
    "mediumorchid": (186, 85, 211),
    "mediumpurple": (147, 112, 219),
    "mediumseagreen": (60, 179, 113),
    "mediumslateblue": (123, 104, 238),
    "mediumspringgreen": (0, 250, 154),
    "mediumturquoise": (72, 209, 204),
    "mediumvioletred": (199, 21, 133),
    "midnightblue": (25, 25, 112),
    "mintcream": (245, 255, 250),
    "mistyrose": (255, 228, 225),
    "moccasin": (255, 228, 181),
    "navajowhite": (255, 222, 173),
    "navy": (0, 0, 128),
    "oldlace": (253, 245, 230),
    "olive": (128, 128, 0),
    "olivedrab": (107, 142, 35),
    "orange": (255, 165, 0),
    "orangered": (255, 69, 0),
    "orchid": (218, 112, 214),
    "palegoldenrod": (238, 232, 170),
    "palegreen": (152, 251, 152),
    "paleturquoise": (175, 238, 238),
    "palevioletred": (219, 112, 147),
    "papayawhip": (255, 239, 213),
    "peachpuff": (255, 218, 185),
    "peru": (205, 133, 63),
    "pink": (255, 192, 203),
    "plum": (221, 160, 221),
    "powderblue": (176, 224, 230),
    "purple": (128, 0, 128),
    "rebeccapurple": (102, 51, 153),
    "red": (255, 0, 0),
    "rosybrown": (188, 143, 143),
    "royalblue": (65, 105, 225),
    "saddlebrown": (139, 69, 19),
    "salmon": (250, 128, 114),
    "sandybrown": (244, 164, 96),
    "seagreen": (46, 139, 87),
    "seashell": (255, 245, 238),
    "sienna": (160, 82, 45),
    "silver": (192, 192, 192),
    "skyblue": (135, 206, 235),
    "slateblue": (106, 90, 205),
    "slategray": (112, 128, 144),
    "slategrey": (112, 128, 144),
    "snow": (255, 250, 250),
    "springgreen": (0, 255, 127),
    "steelblue": (70, 130, 180),
    "tan": (210, 180, 140),
    "teal": (0, 128, 128),
    "thistle": (216, 191, 216),
    "tomato": (255, 99, 71),
    "turquoise": (64, 224, 208),
    "violet": (238, 130, 238),
    "wheat": (245, 222, 179),
    "white": (255, 255, 255),
    "whitesmoke": (245, 245, 245),
    "yellow": (255, 255, 0),
    "yellowgreen": (154, 205, 50),
}
"""
CSS Color Module Level 4 named colors, as 8-bit RGB.

"""
