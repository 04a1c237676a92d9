"""Test the Color value type"""
import numpy as np
import pytest
from statuslight.common.color import OFF, ORANGE, RED, Color, clamp_brightness, validate_brightness
from statuslight.common.errors import InvalidColorValue


def test_equality_is_channel_wise():
    """Two colors are equal iff all channels are equal"""
    assert Color(1, 2, 3) == Color(1, 2, 3)
    assert Color(1, 2, 3) != Color(1, 2, 4)
    assert Color(255, 0, 0) == RED


def test_color_is_immutable():
    """Colors are frozen value types"""
    color = Color(10, 20, 30)
    with pytest.raises(AttributeError):
        color.red = 0


def test_clamped():
    """Out-of-range channels are clamped into [0, 255]"""
    assert Color(-5, 300, 128).clamped() == Color(0, 255, 128)
    assert Color(0, 0, 0).clamped() == OFF


def test_numpy_integers_accepted():
    """numpy integer scalars count as integers"""
    color = Color(np.int64(10), np.int32(20), np.uint8(30))
    assert color.as_tuple() == (10, 20, 30)


@pytest.mark.parametrize("bad", [1.5, "12", None, True])
def test_non_integer_rejected(bad):
    """Non-integer channel values raise InvalidColorValue"""
    with pytest.raises(InvalidColorValue):
        Color(bad, 0, 0)


def test_invalid_color_value_is_value_error():
    """InvalidColorValue can be caught as ValueError"""
    with pytest.raises(ValueError):
        validate_brightness("bright", "red")


def test_clamp_brightness():
    """Clamp helper"""
    assert clamp_brightness(-1) == 0
    assert clamp_brightness(256) == 255
    assert clamp_brightness(42) == 42


def test_from_hex():
    """Hex parsing with and without hash, mixed case"""
    assert Color.from_hex("#ff0000") == RED
    assert Color.from_hex("FF8000") == ORANGE
    assert Color.from_hex("#Ff0000") == RED


def test_from_hex_invalid():
    """Malformed hex strings raise InvalidColorValue"""
    with pytest.raises(InvalidColorValue):
        Color.from_hex("invalid")
    with pytest.raises(InvalidColorValue):
        Color.from_hex("#12345")


def test_is_off():
    """Off detection uses clamped values"""
    assert OFF.is_off()
    assert Color(-3, 0, -1).is_off()
    assert not RED.is_off()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
