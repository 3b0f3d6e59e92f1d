"""Data models for colors, effects, and device telemetry."""

from .color import Color
from .effects import Effect, ColorMode, EffectFamily, color_mode_of
from .status import Status, FirmwareInfo
