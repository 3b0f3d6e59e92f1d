"""Tests for the effect catalog and family classification."""

import pytest

from kraken_x63_mcp.errors import UnknownEffect
from kraken_x63_mcp.models.color import Color
from kraken_x63_mcp.models.effects import (
    ColorMode,
    Effect,
    color_mode_of,
    is_backward,
    is_dense_palette,
    is_marquee,
    is_moving_alternating,
    is_per_zone,
    is_starry_night,
)
from kraken_x63_mcp.protocol.timing import SPEED_CLASS_COUNT


@pytest.mark.parametrize("effect", list(Effect))
def test_catalog_is_total(effect):
    """Every effect has a color mode with sane bounds."""
    mode = color_mode_of(effect)
    assert isinstance(mode, ColorMode)
    assert mode.max_colors == 0 or mode.min_colors <= mode.max_colors
    assert 0 <= mode.speed_class < SPEED_CLASS_COUNT


def test_effect_count():
    assert len(Effect) == 43


def test_known_rows():
    assert color_mode_of(Effect.FIXED) == ColorMode(0x00, 0x00, 0, 1, 1)
    assert color_mode_of(Effect.SUPER_FIXED) == ColorMode(0x01, 0x01, 9, 1, 40)
    assert color_mode_of(Effect.MARQUEE_5) == ColorMode(0x03, 0x05, 2, 1, 1)
    assert color_mode_of(Effect.WATER_COOLER) == ColorMode(0x0F, 0x00, 6, 2, 2)
    assert color_mode_of(Effect.WINGS).speed_class == 11
    assert color_mode_of(Effect.BACKWARDS_RAINBOW_PULSE) == ColorMode(0x0D, 0x00, 2, 0, 0)


def test_backward_variants_share_forward_parameters():
    """Backward effects only differ from their forward twin by direction."""
    for effect in Effect:
        if not effect.value.startswith("backwards-"):
            continue
        forward = Effect(effect.value.replace("backwards-", ""))
        assert color_mode_of(effect) == color_mode_of(forward)
        assert is_backward(effect)
        assert not is_backward(forward)


def test_unknown_effect_raises():
    with pytest.raises(UnknownEffect):
        color_mode_of("not-an-effect")


def test_from_name():
    assert Effect.from_name("Marquee_3") is Effect.MARQUEE_3
    assert Effect.from_name("wings") is Effect.WINGS
    with pytest.raises(ValueError):
        Effect.from_name("disco")


def test_marquee_family():
    assert is_marquee(Effect.MARQUEE_3)
    assert is_marquee(Effect.COVERING_BACKWARDS_MARQUEE)
    assert not is_marquee(Effect.ALTERNATING_3)


def test_moving_alternating_family():
    assert is_moving_alternating(Effect.MOVING_ALTERNATING_6)
    assert is_moving_alternating(Effect.BACKWARDS_MOVING_ALTERNATING_4)
    assert not is_moving_alternating(Effect.ALTERNATING_4)


def test_strategy_families():
    dense = {e for e in Effect if is_dense_palette(e)}
    zoned = {e for e in Effect if is_per_zone(e)}
    assert dense == {Effect.SUPER_FIXED, Effect.SUPER_BREATHING}
    assert zoned == {Effect.WINGS}
    assert is_starry_night(Effect.STARRY_NIGHT)


def test_color_grb():
    assert Color(r=10, g=20, b=30).to_grb() == bytes([20, 10, 30])


def test_color_hex():
    assert Color.from_hex("#ff8000") == Color(255, 128, 0)
    assert Color(1, 2, 3).to_hex() == "010203"
    with pytest.raises(ValueError):
        Color.from_hex("fff")
    with pytest.raises(ValueError):
        Color.from_hex("zzzzzz")


def test_color_range():
    with pytest.raises(ValueError):
        Color(256, 0, 0)
