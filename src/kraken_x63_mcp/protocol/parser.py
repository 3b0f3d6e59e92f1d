"""Parsing of device-to-host reports."""

from __future__ import annotations

import logging

from ..models.status import FirmwareInfo, Status

logger = logging.getLogger(__name__)

FIRMWARE_INFO_TAG = b"\x11\x01"
LIGHTING_INFO_TAG = b"\x21\x03"
STATUS_TAG = b"\x75\x02"

# Status report offsets
OFF_TEMPERATURE = 15      # whole degrees, tenths at +1
OFF_PUMP_SPEED = 17       # 2 bytes, little-endian rpm
OFF_PUMP_DUTY = 19        # percent

# Firmware info report offsets
OFF_FIRMWARE_VERSION = 0x11   # major, minor, patch


def report_tag(report: bytes) -> bytes:
    """The opcode/sub-opcode pair identifying a report."""
    return bytes(report[0:2])


def is_firmware_info(report: bytes) -> bool:
    return report_tag(report) == FIRMWARE_INFO_TAG


def is_lighting_info(report: bytes) -> bool:
    return report_tag(report) == LIGHTING_INFO_TAG


def is_status(report: bytes) -> bool:
    return report_tag(report) == STATUS_TAG


def parse_status(report: bytes) -> Status:
    """Decode liquid temperature, pump speed and pump duty.

    The device does not mark status reports reliably, so any report long
    enough to hold the fields is decoded.

    Raises:
        ValueError: If the report is too short.
    """
    if len(report) <= OFF_PUMP_DUTY:
        raise ValueError(
            f"Status report must be at least {OFF_PUMP_DUTY + 1} bytes, got {len(report)}"
        )
    whole, tenths = report[OFF_TEMPERATURE], report[OFF_TEMPERATURE + 1]
    if whole == 0xFF and tenths == 0xFF:
        logger.warning("unexpected temperature reading, possible firmware fault;")
        logger.warning("try resetting the device or updating the firmware")
    return Status(
        liquid_temperature=whole + tenths / 10,
        pump_speed=int.from_bytes(report[OFF_PUMP_SPEED:OFF_PUMP_SPEED + 2], "little"),
        pump_duty=report[OFF_PUMP_DUTY],
    )


def parse_firmware_info(report: bytes) -> FirmwareInfo | None:
    """Parse the firmware version from a firmware info report.

    Returns ``None`` if the report is not a firmware info report.
    """
    if not is_firmware_info(report) or len(report) < OFF_FIRMWARE_VERSION + 3:
        return None
    major, minor, patch = report[OFF_FIRMWARE_VERSION:OFF_FIRMWARE_VERSION + 3]
    return FirmwareInfo(major=major, minor=minor, patch=patch)
