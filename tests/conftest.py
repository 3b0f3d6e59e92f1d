"""Shared test doubles."""

from __future__ import annotations

import pytest

from kraken_x63_mcp.errors import ReadTimeout
from kraken_x63_mcp.protocol.framing import HID_REPORT_SIZE


def make_report(prefix: bytes, fields: dict[int, int] | None = None) -> bytes:
    """Build a 64-byte device report starting with ``prefix``.

    ``fields`` maps byte offsets to values.
    """
    buf = bytearray(HID_REPORT_SIZE)
    buf[: len(prefix)] = prefix
    for offset, value in (fields or {}).items():
        buf[offset] = value
    return bytes(buf)


def firmware_report(major: int = 1, minor: int = 2, patch: int = 3) -> bytes:
    buf = bytearray(make_report(b"\x11\x01"))
    buf[0x11:0x14] = bytes([major, minor, patch])
    return bytes(buf)


def lighting_report() -> bytes:
    return make_report(b"\x21\x03")


class FakeConnection:
    """In-memory stand-in for USBConnection.

    Reads pop from ``responses``; an exhausted queue behaves like a read
    timeout. ``None`` entries time out explicitly.
    """

    def __init__(self, responses=None, connected: bool = True) -> None:
        self.responses = list(responses or [])
        self.written: list[bytes] = []
        self.read_timeouts: list[int] = []
        self.flushes = 0
        self.closed = 0
        self._connected = connected
        self.opened = 0

    @property
    def connected(self) -> bool:
        return self._connected

    def open(self) -> None:
        self.opened += 1
        self._connected = True

    def close(self) -> None:
        self.closed += 1
        self._connected = False

    def write(self, data: bytes) -> int:
        assert len(data) == HID_REPORT_SIZE
        self.written.append(bytes(data))
        return len(data)

    def read(self, timeout_ms: int = 1000) -> bytes:
        self.read_timeouts.append(timeout_ms)
        if not self.responses:
            raise ReadTimeout("no report")
        report = self.responses.pop(0)
        if report is None:
            raise ReadTimeout("no report")
        return report

    def flush(self) -> int:
        self.flushes += 1
        return 0


@pytest.fixture
def handshake_responses():
    return [firmware_report(), lighting_report()]


@pytest.fixture
def fake_connection(handshake_responses):
    return FakeConnection(handshake_responses)
