"""RGB color value with the device's GRB wire encoding."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Color:
    """An 8-bit per channel RGB color."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Color channel {name} must be 0-255, got {value}")

    def to_grb(self) -> bytes:
        """Encode as the 3-byte green, red, blue triple the firmware expects."""
        return bytes([self.g, self.r, self.b])

    def scaled(self, divisor: float) -> Color:
        """Divide every channel by ``divisor``, truncating toward zero."""
        return Color(int(self.r // divisor), int(self.g // divisor), int(self.b // divisor))

    @classmethod
    def from_hex(cls, value: str) -> Color:
        """Parse ``"ff8000"`` or ``"#ff8000"``."""
        text = value.strip().lstrip("#")
        if len(text) != 6:
            raise ValueError(f"Color must be 6 hex digits, got '{value}'")
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Invalid hex color '{value}'") from e
        return cls(raw[0], raw[1], raw[2])

    def to_hex(self) -> str:
        return f"{self.r:02x}{self.g:02x}{self.b:02x}"


BLACK = Color(0, 0, 0)
