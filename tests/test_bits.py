"""Tests for nibble and bit helpers."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from cpu16.bits import get_bit, mask_word, nibble, set_bit


class TestNibble:
    """Test nibble extraction."""

    @pytest.mark.parametrize("position,expected", [(1, 0x1), (2, 0x2), (3, 0x3), (4, 0x4)])
    def test_positions(self, position, expected):
        """Nibble 1 is the most significant."""
        assert nibble(0x1234, position) == expected

    def test_all_ones(self):
        """Every nibble of 0xFFFF is 15."""
        assert [nibble(0xFFFF, p) for p in range(1, 5)] == [15, 15, 15, 15]

    def test_example_encoding(self):
        """ADD 2 3 4 splits into opcode and three registers."""
        assert [nibble(0x0234, p) for p in range(1, 5)] == [0, 2, 3, 4]


class TestBits:
    """Test single-bit access."""

    def test_get_bit(self):
        """get_bit reads individual bits."""
        assert get_bit(0b101, 0) is True
        assert get_bit(0b101, 1) is False
        assert get_bit(0b101, 2) is True
        assert get_bit(0x8000, 15) is True

    def test_set_bit(self):
        """set_bit sets without touching other bits."""
        assert set_bit(0b100, 0, True) == 0b101
        assert set_bit(0, 15, True) == 0x8000

    def test_clear_bit(self):
        """set_bit with False clears only that bit."""
        assert set_bit(0xFFFF, 1, False) == 0xFFFD
        assert set_bit(0, 3, False) == 0

    def test_set_bit_stays_16_bit(self):
        """Results never grow past 16 bits."""
        assert set_bit(0xFFFF, 4, False) <= 0xFFFF


class TestMaskWord:
    """Test 16-bit wraparound."""

    @pytest.mark.parametrize("value,expected", [
        (0, 0),
        (0xFFFF, 0xFFFF),
        (0x10000, 0),
        (0x10005, 5),
        (-1, 0xFFFF),
    ])
    def test_mask(self, value, expected):
        assert mask_word(value) == expected
