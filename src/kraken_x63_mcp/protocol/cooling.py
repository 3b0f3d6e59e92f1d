"""Pump duty curve encoding.

The firmware takes a full duty curve: one duty byte for every whole
liquid temperature from 20 °C up to the critical temperature. A fixed
speed is just a flat curve.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from liquidctl.util import clamp, interpolate_profile, normalize_profile

from .commands import Command, build_command

logger = logging.getLogger(__name__)

PUMP_CHANNEL_ID = 0x01
PUMP_MIN_DUTY = 20
PUMP_MAX_DUTY = 100

# Above this liquid temperature the pump always runs at full duty
CRITICAL_TEMPERATURE = 59

CURVE_TEMPERATURES = list(range(20, CRITICAL_TEMPERATURE + 1))


def compute_duty_curve(profile: Iterable[tuple[int, int]]) -> list[int]:
    """Duty for each temperature in :data:`CURVE_TEMPERATURES`."""
    points = list(profile)
    for temp, duty in points:
        if not 0 <= duty <= 100:
            raise ValueError(f"Duty must be 0-100%, got {duty} at {temp}°C")
    norm = normalize_profile(points, CRITICAL_TEMPERATURE, PUMP_MAX_DUTY)
    return [
        clamp(interpolate_profile(norm, t), PUMP_MIN_DUTY, PUMP_MAX_DUTY)
        for t in CURVE_TEMPERATURES
    ]


def build_speed_profile(profile: Iterable[tuple[int, int]]) -> bytes:
    """Build the report setting the pump duty curve.

    Args:
        profile: ``(temperature °C, duty %)`` points, in any order.
    """
    curve = compute_duty_curve(profile)
    for temp, duty in zip(CURVE_TEMPERATURES, curve):
        logger.debug("pump duty %d%% for liquid temperature >= %d°C", duty, temp)
    return build_command(
        Command.SET_DUTY_PROFILE, bytes([PUMP_CHANNEL_ID, 0x00, 0x00]) + bytes(curve)
    )


def build_fixed_speed(duty: int) -> bytes:
    """Build the report holding the pump at one duty below the critical temperature."""
    if not 0 <= duty <= 100:
        raise ValueError(f"Duty must be 0-100%, got {duty}")
    return build_speed_profile([(0, duty), (CRITICAL_TEMPERATURE - 1, duty)])
