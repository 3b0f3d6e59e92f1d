"""Lighting effect catalog.

Every effect the firmware understands maps to one :class:`ColorMode`
row: the animation opcode, a size/variant byte, the speed class used to
pick timing bytes, and the accepted color count. A second table groups
effects into the families the frame encoder needs to distinguish.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, Flag, auto

from ..errors import UnknownEffect


class Effect(Enum):
    """Visual effects, valued by their front-end name."""

    OFF = "off"
    FIXED = "fixed"
    FADING = "fading"
    SUPER_FIXED = "super-fixed"
    SPECTRUM_WAVE = "spectrum-wave"
    BACKWARDS_SPECTRUM_WAVE = "backwards-spectrum-wave"
    MARQUEE_3 = "marquee-3"
    MARQUEE_4 = "marquee-4"
    MARQUEE_5 = "marquee-5"
    MARQUEE_6 = "marquee-6"
    BACKWARDS_MARQUEE_3 = "backwards-marquee-3"
    BACKWARDS_MARQUEE_4 = "backwards-marquee-4"
    BACKWARDS_MARQUEE_5 = "backwards-marquee-5"
    BACKWARDS_MARQUEE_6 = "backwards-marquee-6"
    COVERING_MARQUEE = "covering-marquee"
    COVERING_BACKWARDS_MARQUEE = "covering-backwards-marquee"
    ALTERNATING_3 = "alternating-3"
    ALTERNATING_4 = "alternating-4"
    ALTERNATING_5 = "alternating-5"
    ALTERNATING_6 = "alternating-6"
    MOVING_ALTERNATING_3 = "moving-alternating-3"
    MOVING_ALTERNATING_4 = "moving-alternating-4"
    MOVING_ALTERNATING_5 = "moving-alternating-5"
    MOVING_ALTERNATING_6 = "moving-alternating-6"
    BACKWARDS_MOVING_ALTERNATING_3 = "backwards-moving-alternating-3"
    BACKWARDS_MOVING_ALTERNATING_4 = "backwards-moving-alternating-4"
    BACKWARDS_MOVING_ALTERNATING_5 = "backwards-moving-alternating-5"
    BACKWARDS_MOVING_ALTERNATING_6 = "backwards-moving-alternating-6"
    PULSE = "pulse"
    BREATHING = "breathing"
    SUPER_BREATHING = "super-breathing"
    CANDLE = "candle"
    STARRY_NIGHT = "starry-night"
    RAINBOW_FLOW = "rainbow-flow"
    SUPER_RAINBOW = "super-rainbow"
    RAINBOW_PULSE = "rainbow-pulse"
    BACKWARDS_RAINBOW_FLOW = "backwards-rainbow-flow"
    BACKWARDS_SUPER_RAINBOW = "backwards-super-rainbow"
    BACKWARDS_RAINBOW_PULSE = "backwards-rainbow-pulse"
    LOADING = "loading"
    TAI_CHI = "tai-chi"
    WATER_COOLER = "water-cooler"
    WINGS = "wings"

    @classmethod
    def from_name(cls, name: str) -> Effect:
        """Look up an effect by its front-end name (``"marquee-3"``)."""
        key = name.strip().lower().replace("_", "-")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown effect '{name}'. Valid: {[e.value for e in cls]}"
            ) from None


@dataclass(frozen=True)
class ColorMode:
    """Protocol parameters of one effect.

    ``max_colors == 0`` means the effect takes no colors at all.
    """

    opcode: int
    variant: int
    speed_class: int
    min_colors: int
    max_colors: int

    def to_dict(self) -> dict:
        return asdict(self)


class EffectFamily(Flag):
    """Groupings that change how an effect is framed."""

    NONE = 0
    MARQUEE = auto()
    MOVING_ALTERNATING = auto()
    STARRY_NIGHT = auto()
    BACKWARD = auto()
    DENSE_PALETTE = auto()
    PER_ZONE = auto()


_E = Effect

# effect -> (opcode, variant, speed class, min colors, max colors)
_COLOR_MODES: dict[Effect, ColorMode] = {
    _E.OFF: ColorMode(0x00, 0x00, 0, 0, 0),
    _E.FIXED: ColorMode(0x00, 0x00, 0, 1, 1),
    _E.FADING: ColorMode(0x01, 0x00, 1, 1, 8),
    _E.SUPER_FIXED: ColorMode(0x01, 0x01, 9, 1, 40),
    _E.SPECTRUM_WAVE: ColorMode(0x02, 0x00, 2, 0, 0),
    _E.BACKWARDS_SPECTRUM_WAVE: ColorMode(0x02, 0x00, 2, 0, 0),
    _E.MARQUEE_3: ColorMode(0x03, 0x03, 2, 1, 1),
    _E.MARQUEE_4: ColorMode(0x03, 0x04, 2, 1, 1),
    _E.MARQUEE_5: ColorMode(0x03, 0x05, 2, 1, 1),
    _E.MARQUEE_6: ColorMode(0x03, 0x06, 2, 1, 1),
    _E.BACKWARDS_MARQUEE_3: ColorMode(0x03, 0x03, 2, 1, 1),
    _E.BACKWARDS_MARQUEE_4: ColorMode(0x03, 0x04, 2, 1, 1),
    _E.BACKWARDS_MARQUEE_5: ColorMode(0x03, 0x05, 2, 1, 1),
    _E.BACKWARDS_MARQUEE_6: ColorMode(0x03, 0x06, 2, 1, 1),
    _E.COVERING_MARQUEE: ColorMode(0x04, 0x00, 2, 1, 8),
    _E.COVERING_BACKWARDS_MARQUEE: ColorMode(0x04, 0x00, 2, 1, 8),
    _E.ALTERNATING_3: ColorMode(0x05, 0x03, 3, 1, 2),
    _E.ALTERNATING_4: ColorMode(0x05, 0x04, 3, 1, 2),
    _E.ALTERNATING_5: ColorMode(0x05, 0x05, 3, 1, 2),
    _E.ALTERNATING_6: ColorMode(0x05, 0x06, 3, 1, 2),
    _E.MOVING_ALTERNATING_3: ColorMode(0x05, 0x03, 4, 1, 2),
    _E.MOVING_ALTERNATING_4: ColorMode(0x05, 0x04, 4, 1, 2),
    _E.MOVING_ALTERNATING_5: ColorMode(0x05, 0x05, 4, 1, 2),
    _E.MOVING_ALTERNATING_6: ColorMode(0x05, 0x06, 4, 1, 2),
    _E.BACKWARDS_MOVING_ALTERNATING_3: ColorMode(0x05, 0x03, 4, 1, 2),
    _E.BACKWARDS_MOVING_ALTERNATING_4: ColorMode(0x05, 0x04, 4, 1, 2),
    _E.BACKWARDS_MOVING_ALTERNATING_5: ColorMode(0x05, 0x05, 4, 1, 2),
    _E.BACKWARDS_MOVING_ALTERNATING_6: ColorMode(0x05, 0x06, 4, 1, 2),
    _E.PULSE: ColorMode(0x06, 0x00, 5, 1, 8),
    _E.BREATHING: ColorMode(0x07, 0x00, 6, 1, 8),
    _E.SUPER_BREATHING: ColorMode(0x03, 0x00, 10, 1, 40),
    _E.CANDLE: ColorMode(0x08, 0x00, 0, 1, 1),
    _E.STARRY_NIGHT: ColorMode(0x09, 0x00, 5, 1, 1),
    _E.RAINBOW_FLOW: ColorMode(0x0B, 0x00, 2, 0, 0),
    _E.SUPER_RAINBOW: ColorMode(0x0C, 0x00, 2, 0, 0),
    _E.RAINBOW_PULSE: ColorMode(0x0D, 0x00, 2, 0, 0),
    _E.BACKWARDS_RAINBOW_FLOW: ColorMode(0x0B, 0x00, 2, 0, 0),
    _E.BACKWARDS_SUPER_RAINBOW: ColorMode(0x0C, 0x00, 2, 0, 0),
    _E.BACKWARDS_RAINBOW_PULSE: ColorMode(0x0D, 0x00, 2, 0, 0),
    _E.LOADING: ColorMode(0x10, 0x00, 8, 1, 1),
    _E.TAI_CHI: ColorMode(0x0E, 0x00, 7, 1, 2),
    _E.WATER_COOLER: ColorMode(0x0F, 0x00, 6, 2, 2),
    # wings is driven zone by zone and has no animation opcode of its own
    _E.WINGS: ColorMode(0x00, 0x00, 11, 1, 1),
}

_F = EffectFamily

_FAMILIES: dict[Effect, EffectFamily] = {
    _E.SUPER_FIXED: _F.DENSE_PALETTE,
    _E.SUPER_BREATHING: _F.DENSE_PALETTE,
    _E.WINGS: _F.PER_ZONE,
    _E.BACKWARDS_SPECTRUM_WAVE: _F.BACKWARD,
    _E.MARQUEE_3: _F.MARQUEE,
    _E.MARQUEE_4: _F.MARQUEE,
    _E.MARQUEE_5: _F.MARQUEE,
    _E.MARQUEE_6: _F.MARQUEE,
    _E.BACKWARDS_MARQUEE_3: _F.MARQUEE | _F.BACKWARD,
    _E.BACKWARDS_MARQUEE_4: _F.MARQUEE | _F.BACKWARD,
    _E.BACKWARDS_MARQUEE_5: _F.MARQUEE | _F.BACKWARD,
    _E.BACKWARDS_MARQUEE_6: _F.MARQUEE | _F.BACKWARD,
    _E.COVERING_MARQUEE: _F.MARQUEE,
    _E.COVERING_BACKWARDS_MARQUEE: _F.MARQUEE | _F.BACKWARD,
    _E.MOVING_ALTERNATING_3: _F.MOVING_ALTERNATING,
    _E.MOVING_ALTERNATING_4: _F.MOVING_ALTERNATING,
    _E.MOVING_ALTERNATING_5: _F.MOVING_ALTERNATING,
    _E.MOVING_ALTERNATING_6: _F.MOVING_ALTERNATING,
    _E.BACKWARDS_MOVING_ALTERNATING_3: _F.MOVING_ALTERNATING | _F.BACKWARD,
    _E.BACKWARDS_MOVING_ALTERNATING_4: _F.MOVING_ALTERNATING | _F.BACKWARD,
    _E.BACKWARDS_MOVING_ALTERNATING_5: _F.MOVING_ALTERNATING | _F.BACKWARD,
    _E.BACKWARDS_MOVING_ALTERNATING_6: _F.MOVING_ALTERNATING | _F.BACKWARD,
    _E.STARRY_NIGHT: _F.STARRY_NIGHT,
    _E.BACKWARDS_RAINBOW_FLOW: _F.BACKWARD,
    _E.BACKWARDS_SUPER_RAINBOW: _F.BACKWARD,
    _E.BACKWARDS_RAINBOW_PULSE: _F.BACKWARD,
}


def color_mode_of(effect: Effect) -> ColorMode:
    """Return the protocol parameters for ``effect``."""
    try:
        return _COLOR_MODES[effect]
    except KeyError:
        raise UnknownEffect(f"No color mode defined for effect {effect!r}") from None


def family_of(effect: Effect) -> EffectFamily:
    return _FAMILIES.get(effect, EffectFamily.NONE)


def is_marquee(effect: Effect) -> bool:
    return EffectFamily.MARQUEE in family_of(effect)


def is_moving_alternating(effect: Effect) -> bool:
    return EffectFamily.MOVING_ALTERNATING in family_of(effect)


def is_starry_night(effect: Effect) -> bool:
    return EffectFamily.STARRY_NIGHT in family_of(effect)


def is_backward(effect: Effect) -> bool:
    return EffectFamily.BACKWARD in family_of(effect)


def is_dense_palette(effect: Effect) -> bool:
    return EffectFamily.DENSE_PALETTE in family_of(effect)


def is_per_zone(effect: Effect) -> bool:
    return EffectFamily.PER_ZONE in family_of(effect)


def _check_catalog() -> None:
    missing = [e.value for e in Effect if e not in _COLOR_MODES]
    if missing:
        raise UnknownEffect(f"Effects without a color mode: {missing}")


_check_catalog()
