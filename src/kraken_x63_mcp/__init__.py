"""Lighting and pump control for the NZXT Kraken X63 liquid cooler."""

from .models import Color, Effect, Status, FirmwareInfo
from .protocol import Channel, SpeedLevel, build_color_frames, parse_status
from .session import KrakenSession

__version__ = "0.1.0"
