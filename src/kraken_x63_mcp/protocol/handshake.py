"""Session initialization exchange.

The host requests firmware and lighting information, sets the status
update interval, and confirms. The session is ready once the device has
answered both information requests; other reports (status pushes) may be
interleaved with the answers and are ignored.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from ..errors import HandshakeTimeout, ReadTimeout
from ..models.status import FirmwareInfo
from .commands import UPDATE_INTERVAL_S, build_handshake_commands
from .framing import hexdump
from .parser import is_firmware_info, is_lighting_info, parse_firmware_info

logger = logging.getLogger(__name__)

HANDSHAKE_MAX_READS = 12
HANDSHAKE_TIMEOUT_S = 5.0


class Handshake:
    """Tracks which handshake acknowledgments have arrived."""

    def __init__(self) -> None:
        self.firmware_ack = False
        self.lighting_ack = False
        self.firmware: FirmwareInfo | None = None
        self.reads = 0

    @property
    def complete(self) -> bool:
        return self.firmware_ack and self.lighting_ack

    def feed(self, report: bytes) -> bool:
        """Consume one report; returns True once both acknowledgments arrived."""
        self.reads += 1
        if is_firmware_info(report):
            self.firmware = parse_firmware_info(report)
            self.firmware_ack = True
            logger.info("Firmware version: %s", self.firmware)
        elif is_lighting_info(report):
            self.lighting_ack = True
        else:
            logger.debug("Ignoring report during handshake: %s", hexdump(report))
        return self.complete

    def run(
        self,
        connection,
        max_reads: int = HANDSHAKE_MAX_READS,
        timeout: float = HANDSHAKE_TIMEOUT_S,
        update_interval: float = UPDATE_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> FirmwareInfo | None:
        """Send the handshake commands and wait for both acknowledgments.

        Args:
            connection: Open transport with ``write``, ``read`` and ``flush``.
            max_reads: Read attempts before giving up, timed-out reads included.
            timeout: Overall deadline in seconds.
            update_interval: Status push interval to configure, in seconds.
            clock: Monotonic time source.

        Returns:
            The firmware version reported by the device.

        Raises:
            HandshakeTimeout: If the ceiling or deadline is reached first.
        """
        for report in build_handshake_commands(update_interval):
            connection.write(report)

        deadline = clock() + timeout
        attempts = 0
        while not self.complete:
            remaining = deadline - clock()
            if attempts >= max_reads or remaining <= 0:
                raise HandshakeTimeout(
                    f"Device did not complete the handshake "
                    f"(attempts={attempts}, firmware={self.firmware_ack}, "
                    f"lighting={self.lighting_ack})",
                    firmware_ack=self.firmware_ack,
                    lighting_ack=self.lighting_ack,
                )
            attempts += 1
            try:
                report = connection.read(max(1, int(remaining * 1000)))
            except ReadTimeout:
                logger.debug("Handshake read %d timed out", attempts)
                continue
            self.feed(report)

        connection.flush()
        return self.firmware
