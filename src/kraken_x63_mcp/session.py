"""A handshaken, lock-protected session with one cooler.

Usage::

    with KrakenSession() as kraken:
        kraken.set_color(Channel.RING, Effect.FADING, [Color(255, 0, 0), Color(0, 0, 255)])
        print(kraken.get_status())
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence

from .errors import SessionClosed, TransportError
from .models.color import Color
from .models.effects import Effect
from .models.status import FirmwareInfo, Status
from .protocol.commands import UPDATE_INTERVAL_S, build_color_frames
from .protocol.cooling import build_fixed_speed, build_speed_profile
from .protocol.framing import Channel
from .protocol.handshake import HANDSHAKE_MAX_READS, HANDSHAKE_TIMEOUT_S, Handshake
from .protocol.parser import parse_status
from .protocol.timing import SpeedLevel
from .transport.usb_connection import READ_TIMEOUT_MS, USBConnection

logger = logging.getLogger(__name__)


class KrakenSession:
    """Owns an open connection that has completed the handshake.

    All device I/O goes through one lock, so the reports of a multi-report
    lighting change are never interleaved with another caller's.
    Operations never retry; transport errors reach the caller unchanged.
    A transport error that leaves the connection without a handle closes
    the session, and a new one has to be opened.
    """

    def __init__(
        self,
        connection: USBConnection | None = None,
        *,
        read_timeout_ms: int = READ_TIMEOUT_MS,
        handshake_reads: int = HANDSHAKE_MAX_READS,
        handshake_timeout: float = HANDSHAKE_TIMEOUT_S,
        update_interval: float = UPDATE_INTERVAL_S,
    ) -> None:
        self._connection = connection if connection is not None else USBConnection()
        self._read_timeout_ms = read_timeout_ms
        self._lock = threading.Lock()
        self._closed = False

        if not self._connection.connected:
            self._connection.open()

        handshake = Handshake()
        try:
            self._firmware = handshake.run(
                self._connection,
                max_reads=handshake_reads,
                timeout=handshake_timeout,
                update_interval=update_interval,
            )
        except Exception:
            self._connection.close()
            self._closed = True
            raise
        logger.info("Session initialized after %d read(s)", handshake.reads)

    def __enter__(self) -> KrakenSession:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def firmware(self) -> FirmwareInfo | None:
        return self._firmware

    @property
    def connection(self) -> USBConnection:
        return self._connection

    def close(self) -> None:
        """Release the transport handle. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._connection.close()

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosed("Session is closed")

    def _drop_if_lost(self) -> None:
        """Close the session once the transport has lost its handle. Lock held."""
        if self._connection.connected:
            return
        logger.warning("Device handle lost, closing session")
        self._closed = True
        self._connection.close()

    def _write_all(self, reports: Sequence[bytes]) -> None:
        with self._lock:
            self._check_open()
            try:
                for report in reports:
                    self._connection.write(report)
            except TransportError:
                self._drop_if_lost()
                raise

    def set_color(
        self,
        channel: Channel,
        effect: Effect,
        colors: Iterable[Color] = (),
        speed: SpeedLevel = SpeedLevel.NORMAL,
    ) -> int:
        """Apply a lighting effect to a channel.

        The colors are validated and encoded before anything is written, so
        a rejected request leaves the device untouched.

        Returns:
            Number of reports sent.
        """
        self._check_open()
        reports = build_color_frames(channel, effect, list(colors), speed)
        self._write_all(reports)
        return len(reports)

    def set_fixed_speed(self, duty: int) -> None:
        """Run the pump at a fixed duty (%), full duty at the critical temperature."""
        self._check_open()
        self._write_all([build_fixed_speed(duty)])

    def set_speed_profile(self, profile: Iterable[tuple[int, int]]) -> None:
        """Make the pump follow ``(liquid temperature °C, duty %)`` points."""
        self._check_open()
        self._write_all([build_speed_profile(profile)])

    def get_status(self, timeout_ms: int | None = None) -> Status:
        """Read the next telemetry report.

        Queued (stale) reports are discarded first.

        Raises:
            ReadTimeout: If the device sends nothing within the timeout.
        """
        timeout_ms = self._read_timeout_ms if timeout_ms is None else timeout_ms
        with self._lock:
            self._check_open()
            try:
                self._connection.flush()
                report = self._connection.read(timeout_ms)
            except TransportError:
                self._drop_if_lost()
                raise
        return parse_status(report)
