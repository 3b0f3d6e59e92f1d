"""64-byte HID report layout and lighting channel addressing.

Every host-to-device message is one HID output report::

    +---------+------------+------------------------------+---------+
    | Opcode  | Sub-opcode | Command body                 | Padding |
    | 1 byte  | 1 byte     | variable length              | to 64 B |
    +---------+------------+------------------------------+---------+

There is no length field or checksum; unused trailing bytes are zero.
Multi-byte numbers are little-endian and colors are sent as G, R, B.
"""

from __future__ import annotations

from enum import IntEnum

HID_REPORT_SIZE = 64


class Channel(IntEnum):
    """Lighting channels and their 3-bit channel IDs.

    ``SYNC`` sets every bit and addresses all other channels at once.
    """

    EXTERNAL = 0b001
    RING = 0b010
    LOGO = 0b100
    SYNC = 0b111

    @classmethod
    def from_name(cls, name: str) -> Channel:
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Unknown channel '{name}'. Valid: {[c.name.lower() for c in cls]}"
            ) from None


def pad_report(data: bytes | bytearray | list[int]) -> bytes:
    """Right-pad a command with zero bytes to a full 64-byte report.

    Raises:
        ValueError: If the command is longer than one report.
    """
    body = bytes(data)
    if len(body) > HID_REPORT_SIZE:
        raise ValueError(
            f"Command is {len(body)} bytes, reports hold at most {HID_REPORT_SIZE}"
        )
    return body + b"\x00" * (HID_REPORT_SIZE - len(body))


def hexdump(report: bytes) -> str:
    """Render a report for debug logs, dropping the zero padding."""
    trimmed = report.rstrip(b"\x00")
    return trimmed.hex(" ") if trimmed else "(empty)"
