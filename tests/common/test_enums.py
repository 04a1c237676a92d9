"""Test enum helpers"""
import pytest
from statuslight.common.enums import Channel, EffectKind, get_effect_kind_enum


def test_channel_order():
    """Channels iterate in hardware write order"""
    assert list(Channel) == [Channel.RED, Channel.GREEN, Channel.BLUE]


@pytest.mark.parametrize("name", ["wifi_failed", "WIFI_FAILED", "wifi-failed", " Wifi_Failed "])
def test_effect_kind_from_string(name):
    """Effect names are matched case-insensitively, dashes allowed"""
    assert get_effect_kind_enum(name) == EffectKind.WIFI_FAILED


def test_effect_kind_passthrough():
    """Enum members are returned unchanged"""
    assert get_effect_kind_enum(EffectKind.PARTY) is EffectKind.PARTY


@pytest.mark.parametrize("name", ["disco", "", 3, None])
def test_unknown_effect_kind(name):
    """Unknown names map to None"""
    assert get_effect_kind_enum(name) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
