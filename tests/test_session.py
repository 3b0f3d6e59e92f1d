"""Tests for the locked, handshaken device session."""

import threading
import time

import pytest

from conftest import FakeConnection, firmware_report, lighting_report, make_report
from kraken_x63_mcp.errors import (
    HandshakeTimeout,
    InvalidColorCount,
    ReadTimeout,
    SessionClosed,
    TransportError,
)
from kraken_x63_mcp.models.color import Color
from kraken_x63_mcp.models.effects import Effect
from kraken_x63_mcp.models.status import FirmwareInfo
from kraken_x63_mcp.protocol.framing import Channel
from kraken_x63_mcp.protocol.timing import SpeedLevel
from kraken_x63_mcp.session import KrakenSession

RED = Color(255, 0, 0)

HANDSHAKE_WRITES = 4


def _session(extra_responses=()):
    conn = FakeConnection([firmware_report(1, 2, 3), lighting_report(), *extra_responses])
    return KrakenSession(conn), conn


def test_session_runs_handshake():
    session, conn = _session()
    assert session.firmware == FirmwareInfo(1, 2, 3)
    assert len(conn.written) == HANDSHAKE_WRITES
    assert not session.closed


def test_session_opens_closed_connection():
    conn = FakeConnection([firmware_report(), lighting_report()], connected=False)
    KrakenSession(conn)
    assert conn.opened == 1


def test_handshake_failure_releases_connection():
    conn = FakeConnection([firmware_report()])
    with pytest.raises(HandshakeTimeout):
        KrakenSession(conn, handshake_reads=4)
    assert conn.closed == 1


def test_set_color_writes_reports():
    session, conn = _session()
    sent = session.set_color(Channel.RING, Effect.WINGS, [RED], SpeedLevel.FASTER)
    assert sent == 10
    assert len(conn.written) == HANDSHAKE_WRITES + 10


def test_rejected_colors_touch_nothing():
    session, conn = _session()
    with pytest.raises(InvalidColorCount):
        session.set_color(Channel.RING, Effect.FIXED, [RED, RED])
    assert len(conn.written) == HANDSHAKE_WRITES


def test_get_status():
    report = make_report(b"\x75\x02", {15: 30, 16: 2, 17: 0x2C, 18: 0x01, 19: 55})
    session, conn = _session([report])
    status = session.get_status()
    assert status.liquid_temperature == pytest.approx(30.2)
    assert status.pump_speed == 300
    assert status.pump_duty == 55
    assert conn.flushes == 2


def test_get_status_timeout_propagates():
    session, conn = _session()
    with pytest.raises(ReadTimeout):
        session.get_status(timeout_ms=10)
    assert conn.read_timeouts[-1] == 10
    # still usable afterwards
    session.set_color(Channel.LOGO, Effect.FIXED, [RED])


def test_pump_commands():
    session, conn = _session()
    session.set_fixed_speed(50)
    session.set_speed_profile([(20, 30), (40, 80)])
    assert [r[0] for r in conn.written[HANDSHAKE_WRITES:]] == [0x72, 0x72]


def test_close_is_idempotent():
    session, conn = _session()
    session.close()
    session.close()
    assert conn.closed == 1
    assert session.closed


def test_closed_session_rejects_operations():
    session, _ = _session()
    session.close()
    with pytest.raises(SessionClosed):
        session.set_color(Channel.RING, Effect.FIXED, [RED])
    with pytest.raises(SessionClosed):
        session.get_status()
    with pytest.raises(ConnectionError):
        session.set_fixed_speed(40)


def test_context_manager_closes():
    conn = FakeConnection([firmware_report(), lighting_report()])
    with KrakenSession(conn) as session:
        assert not session.closed
    assert conn.closed == 1


def test_multi_report_writes_are_not_interleaved():
    """Reports of one lighting change stay contiguous under concurrency."""

    class SlowConnection(FakeConnection):
        def write(self, data):
            super().write(data)
            self.owners.append(threading.current_thread().name)
            time.sleep(0.001)
            return len(data)

    conn = SlowConnection([firmware_report(), lighting_report()])
    conn.owners = []
    session = KrakenSession(conn)
    conn.owners.clear()

    def worker(effect, colors):
        for _ in range(3):
            session.set_color(Channel.RING, effect, colors)

    threads = [
        threading.Thread(target=worker, args=(Effect.WINGS, [RED]), name="wings"),
        threading.Thread(target=worker, args=(Effect.SUPER_FIXED, [RED]), name="super"),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    runs = []
    for owner in conn.owners:
        if runs and runs[-1][0] == owner:
            runs[-1][1] += 1
        else:
            runs.append([owner, 1])
    # every run is a whole number of complete updates
    for owner, length in runs:
        assert length % (10 if owner == "wings" else 3) == 0
    assert len(conn.owners) == 3 * 10 + 3 * 3


class UnpluggedConnection(FakeConnection):
    """Fails every transfer once ``unplugged`` is set, dropping the handle."""

    unplugged = False
    keeps_handle = False

    def _fail(self):
        if not self.keeps_handle:
            self._connected = False
        raise TransportError("device disconnected")

    def write(self, data):
        if self.unplugged:
            self._fail()
        return super().write(data)

    def read(self, timeout_ms=1000):
        if self.unplugged:
            self._fail()
        return super().read(timeout_ms)


def test_lost_handle_on_write_closes_session():
    conn = UnpluggedConnection([firmware_report(), lighting_report()])
    session = KrakenSession(conn)
    conn.unplugged = True
    with pytest.raises(TransportError):
        session.set_color(Channel.RING, Effect.FIXED, [RED])
    assert session.closed
    with pytest.raises(SessionClosed):
        session.set_fixed_speed(40)


def test_lost_handle_on_read_closes_session():
    conn = UnpluggedConnection([firmware_report(), lighting_report()])
    session = KrakenSession(conn)
    conn.unplugged = True
    with pytest.raises(TransportError):
        session.get_status()
    assert session.closed


def test_transfer_error_with_live_handle_keeps_session():
    conn = UnpluggedConnection([firmware_report(), lighting_report()])
    session = KrakenSession(conn)
    conn.unplugged = True
    conn.keeps_handle = True
    with pytest.raises(TransportError):
        session.set_color(Channel.RING, Effect.FIXED, [RED])
    assert not session.closed
    conn.unplugged = False
    session.set_color(Channel.RING, Effect.FIXED, [RED])
