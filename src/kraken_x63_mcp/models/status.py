"""Telemetry and identification models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Status:
    """One decoded telemetry report."""

    liquid_temperature: float
    pump_speed: int
    pump_duty: int

    def to_dict(self) -> dict:
        return {
            "liquid_temperature_c": self.liquid_temperature,
            "pump_speed_rpm": self.pump_speed,
            "pump_duty_percent": self.pump_duty,
        }


@dataclass
class FirmwareInfo:
    """Firmware version reported during the handshake."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"
