import pytest

import termsense.depth
import termsense.term
from termsense.depth import ColorDepth
from termsense.settings import Settings

PALETTE_QUERY = "\x1b]4;255;?\x07"
PALETTE_RESPONSE = "\x1b]4;255;rgb:eeee/eeee/eeee\x07"


@pytest.fixture
def make_detector(probe, settings):
    def make(env, settings=settings):
        return termsense.depth.ColorDepthDetector(
            probe=probe, env=env, settings=settings
        )

    return make


def test_truecolor_value():
    assert ColorDepth.TRUECOLOR == 16_777_216
    assert ColorDepth.ANSI_8 < ColorDepth.ANSI_16 < ColorDepth.ANSI_256


@pytest.mark.parametrize(
    ("term", "expected"),
    [
        ("xterm-256color", ColorDepth.ANSI_256),
        ("screen-256color", ColorDepth.ANSI_256),
        ("XTERM-256COLOR", ColorDepth.ANSI_256),
        ("rxvt-16color", ColorDepth.ANSI_16),
        ("xterm-16color", ColorDepth.ANSI_16),
        ("linux", ColorDepth.ANSI_8),
        ("xterm-color", ColorDepth.ANSI_8),
        ("screen.xterm-color", None),
        ("screen-color", ColorDepth.ANSI_8),
        ("xterm", ColorDepth.ANSI_16),
        ("xterm-kitty", ColorDepth.ANSI_16),
        ("dumb", None),
        ("", None),
    ],
)
def test_color_depth_from_term(term, expected):
    assert termsense.depth.color_depth_from_term(term) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ({"COLORTERM": "truecolor"}, ColorDepth.TRUECOLOR),
        ({"COLORTERM": "24bit"}, ColorDepth.TRUECOLOR),
        ({"COLORTERM": " TrueColor "}, ColorDepth.TRUECOLOR),
        ({"COLORTERM": "truecolor", "TERM": "linux"}, ColorDepth.TRUECOLOR),
        ({"COLORTERM": "yes", "TERM": "xterm-256color"}, ColorDepth.ANSI_256),
        ({"TERM": "linux"}, ColorDepth.ANSI_8),
        ({"TERM": "xterm"}, ColorDepth.ANSI_16),
    ],
)
async def test_from_env(make_detector, device, env, expected):
    device.responses[PALETTE_QUERY] = PALETTE_RESPONSE

    assert await make_detector(env).detect() == expected
    assert device.written == []


@pytest.mark.asyncio
async def test_palette_answered(make_detector, device):
    device.responses[PALETTE_QUERY] = PALETTE_RESPONSE

    assert await make_detector({"TERM": "dumb"}).detect() == ColorDepth.TRUECOLOR
    assert device.written == [PALETTE_QUERY]


@pytest.mark.asyncio
async def test_palette_not_answered(make_detector, device):
    assert await make_detector({}).detect() == ColorDepth.ANSI_256
    assert device.written == [PALETTE_QUERY]


@pytest.mark.asyncio
async def test_palette_garbage(make_detector, device):
    device.responses[PALETTE_QUERY] = "\x1b]4;255;?\x07"
    assert await make_detector({}).detect() == ColorDepth.ANSI_256


@pytest.mark.asyncio
async def test_not_interactive(make_device, settings):
    device = make_device(
        interactive=False, responses={PALETTE_QUERY: PALETTE_RESPONSE}
    )
    detector = termsense.depth.ColorDepthDetector(
        probe=termsense.term.RawModeProbe(device), env={}, settings=settings
    )

    assert await detector.detect() == ColorDepth.ANSI_256
    assert device.written == []


@pytest.mark.asyncio
async def test_osc_queries_disabled(make_detector, device):
    device.responses[PALETTE_QUERY] = PALETTE_RESPONSE
    detector = make_detector({}, settings=Settings(osc_queries=False))

    assert await detector.detect() == ColorDepth.ANSI_256
    assert device.written == []


@pytest.mark.asyncio
async def test_query_outcome_is_cached(make_detector, device):
    env = {}
    detector = make_detector(env)
    assert await detector.detect() == ColorDepth.ANSI_256

    # The terminal starts answering, but we remember that it didn't.
    device.responses[PALETTE_QUERY] = PALETTE_RESPONSE
    assert await detector.detect() == ColorDepth.ANSI_256
    assert device.written == [PALETTE_QUERY]

    # Environment is still checked on every call.
    env["COLORTERM"] = "truecolor"
    assert await detector.detect() == ColorDepth.TRUECOLOR

    del env["COLORTERM"]
    detector.reset()
    assert await detector.detect() == ColorDepth.TRUECOLOR
    assert device.written == [PALETTE_QUERY, PALETTE_QUERY]

    assert await detector.detect() == ColorDepth.TRUECOLOR
    assert len(device.written) == 2
