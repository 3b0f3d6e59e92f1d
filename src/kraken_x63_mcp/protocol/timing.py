"""Animation speed to firmware timer lookup.

Each effect family animates along its own curve, so the five user-facing
speed levels map to different timer values depending on the effect's
speed class.
"""

from __future__ import annotations

from enum import IntEnum

from ..errors import InvalidSpeedIndex


class SpeedLevel(IntEnum):
    SLOWEST = 0
    SLOWER = 1
    NORMAL = 2
    FASTER = 3
    FASTEST = 4

    @classmethod
    def from_name(cls, name: str) -> SpeedLevel:
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Unknown speed '{name}'. Valid: {[s.name.lower() for s in cls]}"
            ) from None


# speed class -> timer bytes for (slowest, slower, normal, faster, fastest)
_SPEED_VALUE: tuple[tuple[bytes, ...], ...] = (
    (b"\x32\x00", b"\x32\x00", b"\x32\x00", b"\x32\x00", b"\x32\x00"),
    (b"\x50\x00", b"\x3c\x00", b"\x28\x00", b"\x14\x00", b"\x0a\x00"),
    (b"\x5e\x01", b"\x2c\x01", b"\xfa\x00", b"\x96\x00", b"\x50\x00"),
    (b"\x40\x06", b"\x14\x05", b"\xe8\x03", b"\x20\x03", b"\x58\x02"),
    (b"\x20\x03", b"\xbc\x02", b"\xf4\x01", b"\x90\x01", b"\x2c\x01"),
    (b"\x19\x00", b"\x14\x00", b"\x0f\x00", b"\x07\x00", b"\x04\x00"),
    (b"\x28\x00", b"\x1e\x00", b"\x14\x00", b"\x0a\x00", b"\x04\x00"),
    (b"\x32\x00", b"\x28\x00", b"\x1e\x00", b"\x14\x00", b"\x0a\x00"),
    (b"\x14\x00", b"\x14\x00", b"\x14\x00", b"\x14\x00", b"\x14\x00"),
    (b"\x00\x00", b"\x00\x00", b"\x00\x00", b"\x00\x00", b"\x00\x00"),
    (b"\x37\x00", b"\x28\x00", b"\x19\x00", b"\x0a\x00", b"\x00\x00"),
    (b"\x6e\x00", b"\x53\x00", b"\x39\x00", b"\x2e\x00", b"\x20\x00"),
)

SPEED_CLASS_COUNT = len(_SPEED_VALUE)


def timing_of(speed_class: int, speed_level: int) -> bytes:
    """Return the 2-byte little-endian timer value for a class and level.

    Raises:
        InvalidSpeedIndex: If either index is outside the table.
    """
    if not 0 <= speed_class < SPEED_CLASS_COUNT:
        raise InvalidSpeedIndex(
            f"Speed class must be 0-{SPEED_CLASS_COUNT - 1}, got {speed_class}"
        )
    if not 0 <= speed_level < len(SpeedLevel):
        raise InvalidSpeedIndex(
            f"Speed level must be 0-{len(SpeedLevel) - 1}, got {speed_level}"
        )
    return _SPEED_VALUE[speed_class][speed_level]
