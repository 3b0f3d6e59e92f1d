"""Command opcodes and high-level command builders.

Commands are identified by an opcode/sub-opcode pair in the first two
bytes of a report. The lighting builders turn a channel, effect, color
list and speed into the exact reports the firmware expects; depending on
the effect that is one report, three, or ten.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

from ..errors import InvalidColorCount
from ..models.color import Color
from ..models.effects import (
    ColorMode,
    Effect,
    color_mode_of,
    is_backward,
    is_dense_palette,
    is_marquee,
    is_moving_alternating,
    is_per_zone,
    is_starry_night,
)
from .framing import HID_REPORT_SIZE, Channel, pad_report
from .timing import SpeedLevel, timing_of

logger = logging.getLogger(__name__)


class Command(bytes, Enum):
    """Opcode/sub-opcode prefixes of host-to-device reports."""

    FIRMWARE_INFO = b"\x10\x01"
    LIGHTING_INFO = b"\x20\x03"
    LIGHTING_INFO_CONFIRM = b"\x70\x01"
    SET_UPDATE_INTERVAL = b"\x70\x02"
    SET_DUTY_PROFILE = b"\x72"
    SET_LIGHTING = b"\x2a\x04"
    SET_ZONE_MODE = b"\x22\x03"
    WRITE_PALETTE = b"\x22\x10"
    COMMIT_PALETTE = b"\x22\x11"
    WRITE_ZONE = b"\x22\x20"
    WRITE_PALETTE_TIMING = b"\x22\xa0"


UPDATE_INTERVAL_S = 0.5

# Colors carried by a default lighting report
DEFAULT_PALETTE_SLOTS = 16

# 64 - 4 header bytes, 3 bytes per color
DENSE_PALETTE_CAPACITY = (HID_REPORT_SIZE - 4) // 3

_DENSE_PALETTE_SUFFIX = bytes([0x08, 0x00, 0x00, 0x80, 0x00, 0x32, 0x00, 0x00, 0x01])

# Per-channel constant tied to animation synchronization
_STATIC_VALUE = {
    Channel.EXTERNAL: 40,
    Channel.RING: 8,
    Channel.LOGO: 1,
    Channel.SYNC: 40,
}

_MODE_RELATED = {
    Effect.FADING: 0x08,
    Effect.PULSE: 0x08,
    Effect.BREATHING: 0x08,
    Effect.TAI_CHI: 0x05,
    Effect.WATER_COOLER: 0x05,
    Effect.LOADING: 0x04,
}

# Opcodes whose variant byte is the LED group length
_SIZED_OPCODES = (0x03, 0x05)

ZONE_COUNT = 8


def build_command(command: Command, payload: bytes = b"") -> bytes:
    """Build a single 64-byte report for a command."""
    return pad_report(command.value + payload)


# ─── HANDSHAKE ────────────────────────────────────────────────────────

def build_firmware_info_request() -> bytes:
    return build_command(Command.FIRMWARE_INFO)


def build_lighting_info_request() -> bytes:
    return build_command(Command.LIGHTING_INFO)


def build_set_update_interval(seconds: float = UPDATE_INTERVAL_S) -> bytes:
    """Set how often the device pushes a status report.

    The interval is encoded in 0.25 s steps above a 0.5 s floor.
    """
    if seconds < 0.5:
        raise ValueError(f"Update interval must be at least 0.5 s, got {seconds}")
    interval = 1 + round((seconds - 0.5) / 0.25)
    if interval > 0xFF:
        raise ValueError(f"Update interval too long: {seconds} s")
    return build_command(Command.SET_UPDATE_INTERVAL, bytes([0x01, 0xB8, interval]))


def build_lighting_info_confirm() -> bytes:
    return build_command(Command.LIGHTING_INFO_CONFIRM)


def build_handshake_commands(update_interval: float = UPDATE_INTERVAL_S) -> list[bytes]:
    """The four reports that open a session, in the order they must be sent."""
    return [
        build_firmware_info_request(),
        build_lighting_info_request(),
        build_set_update_interval(update_interval),
        build_lighting_info_confirm(),
    ]


# ─── LIGHTING ─────────────────────────────────────────────────────────

def validate_colors(effect: Effect, colors: Sequence[Color]) -> ColorMode:
    """Check the color count against the effect's bounds.

    Returns:
        The effect's color mode.

    Raises:
        InvalidColorCount: If too few, any (when none are accepted), or
            too many colors were given.
    """
    mode = color_mode_of(effect)
    count = len(colors)
    name = effect.value
    if count < mode.min_colors:
        raise InvalidColorCount(
            f"Not enough colors for mode '{name}', at least {mode.min_colors} required",
            InvalidColorCount.TOO_FEW, count, mode.min_colors, mode.max_colors,
        )
    if mode.max_colors == 0 and count > 0:
        raise InvalidColorCount(
            f"Too many colors for mode '{name}', none needed",
            InvalidColorCount.NONE_NEEDED, count, mode.min_colors, mode.max_colors,
        )
    if count > mode.max_colors:
        raise InvalidColorCount(
            f"Too many colors for mode '{name}', max colors: {mode.max_colors}",
            InvalidColorCount.TOO_MANY, count, mode.min_colors, mode.max_colors,
        )
    return mode


def encode_colors(colors: Sequence[Color], slots: int) -> bytes:
    """GRB-encode ``colors`` and zero-fill the remaining ``slots``."""
    body = b"".join(color.to_grb() for color in colors)
    return body + b"\x00" * (3 * max(slots - len(colors), 0))


def direction_byte(effect: Effect) -> int:
    if is_marquee(effect):
        value = 0x04
    elif is_starry_night(effect) or is_moving_alternating(effect):
        value = 0x01
    else:
        value = 0x00
    if is_backward(effect):
        value += 0x02
    return value


def mode_related_byte(effect: Effect) -> int:
    return _MODE_RELATED.get(effect, 0x00)


def static_byte(channel: Channel) -> int:
    return _STATIC_VALUE[channel]


def color_count_byte(effect: Effect, colors: Sequence[Color]) -> int:
    # water-cooler always animates as a single color pair
    if effect is Effect.WATER_COOLER:
        return 0x01
    return len(colors)


def led_size_byte(mode: ColorMode) -> int:
    return mode.variant if mode.opcode in _SIZED_OPCODES else 0x03


def build_lighting_footer(channel: Channel, effect: Effect, colors: Sequence[Color]) -> bytes:
    """The five trailing bytes of a default lighting report."""
    mode = color_mode_of(effect)
    return bytes([
        direction_byte(effect),
        color_count_byte(effect, colors),
        mode_related_byte(effect),
        static_byte(channel),
        led_size_byte(mode),
    ])


def colors_sent(effect: Effect, colors: Sequence[Color]) -> list[Color]:
    """The part of ``colors`` that actually reaches the device for ``effect``.

    Dense-palette effects accept more colors than one palette report can
    carry; the surplus is dropped.
    """
    if is_dense_palette(effect):
        return list(colors[:DENSE_PALETTE_CAPACITY])
    return list(colors)


def _build_default(
    channel: Channel, effect: Effect, mode: ColorMode, colors: Sequence[Color], timing: bytes
) -> list[bytes]:
    cid = int(channel)
    header = Command.SET_LIGHTING.value + bytes([cid, cid, mode.opcode]) + timing
    body = encode_colors(colors, DEFAULT_PALETTE_SLOTS)
    footer = build_lighting_footer(channel, effect, colors)
    return [pad_report(header + body + footer)]


def _build_dense_palette(
    channel: Channel, effect: Effect, mode: ColorMode, colors: Sequence[Color], timing: bytes
) -> list[bytes]:
    cid = int(channel)
    if len(colors) > DENSE_PALETTE_CAPACITY:
        logger.warning(
            "%d colors given for mode '%s', only the first %d fit in a report",
            len(colors), effect.value, DENSE_PALETTE_CAPACITY,
        )
    colors = colors_sent(effect, colors)
    header = Command.WRITE_PALETTE.value + bytes([cid, 0x00])
    palette = (header + encode_colors(colors, mode.max_colors))[:HID_REPORT_SIZE]
    return [
        pad_report(palette),
        build_command(Command.COMMIT_PALETTE, bytes([cid, 0x00])),
        build_command(
            Command.WRITE_PALETTE_TIMING,
            bytes([cid, 0x00, mode.opcode]) + timing + _DENSE_PALETTE_SUFFIX,
        ),
    ]


def wings_palettes(color: Color) -> list[bytes]:
    """Brightness ramp for the wings zones: full, dimmed, dimmer, off."""
    dimmed = color.scaled(2.5)
    dimmer = dimmed.scaled(4)
    return [
        color.to_grb() * 2,
        dimmed.to_grb() * 2,
        dimmer.to_grb() * 2,
        b"\x00" * 8,
    ]


def build_zone(channel: Channel, zone: int, timing: bytes, palette: bytes) -> bytes:
    """One independently animated LED zone of the wings effect."""
    modulation = 0x05 if zone in (3, 7) else 0x01
    alternate = bytes([0x04, 0x84]) if zone < 4 else bytes([0x84, 0x04])
    body = (
        bytes([int(channel), zone, 0x04])
        + timing
        + bytes([modulation])
        + b"\x00" * 7
        + b"\x02"
        + alternate
        + b"\x00" * 10
        + palette
    )
    return build_command(Command.WRITE_ZONE, body)


def _build_per_zone(
    channel: Channel, effect: Effect, mode: ColorMode, colors: Sequence[Color], timing: bytes
) -> list[bytes]:
    cid = bytes([int(channel)])
    # reset every independent LED before programming zones
    frames = [
        build_command(Command.WRITE_PALETTE, cid),
        build_command(Command.COMMIT_PALETTE, cid),
    ]
    palettes = wings_palettes(colors[0])
    for zone in range(ZONE_COUNT):
        frames.append(build_zone(channel, zone, timing, palettes[zone % len(palettes)]))
    frames.append(build_command(Command.SET_ZONE_MODE, cid + b"\x08"))
    return frames


def build_color_frames(
    channel: Channel,
    effect: Effect,
    colors: Sequence[Color],
    speed: SpeedLevel = SpeedLevel.NORMAL,
) -> list[bytes]:
    """Encode a lighting change as the ordered list of reports to send.

    Args:
        channel: Target lighting channel.
        effect: Animation to run.
        colors: Colors for the animation, bounded by the effect.
        speed: One of the five animation speeds.

    Returns:
        One report for most effects, three for super-fixed and
        super-breathing, ten for wings. Every report is 64 bytes.

    Raises:
        InvalidColorCount: If ``colors`` does not fit the effect.
    """
    colors = list(colors)
    mode = validate_colors(effect, colors)
    channel = Channel(channel)
    timing = timing_of(mode.speed_class, SpeedLevel(speed))

    if is_dense_palette(effect):
        strategy = _build_dense_palette
    elif is_per_zone(effect):
        strategy = _build_per_zone
    else:
        strategy = _build_default

    frames = strategy(channel, effect, mode, colors, timing)
    logger.debug(
        "Encoded %s on %s at %s as %d report(s)",
        effect.value, channel.name.lower(), SpeedLevel(speed).name.lower(), len(frames),
    )
    return frames
