"""Bit and nibble helpers for 16-bit words.

Nibbles are numbered 1 (most significant) to 4 (least significant):

    1111 2222 3333 4444

Bits are numbered 0 (least significant) to 15:

    FEDCBA9876543210
"""

WORD_BITS = 16
WORD_MASK = 0xFFFF


def mask_word(value: int) -> int:
    """Reduce an integer to an unsigned 16-bit word (wraparound)."""
    return value & WORD_MASK


def nibble(word: int, position: int) -> int:
    """Return the 4-bit field at ``position`` (1-4) of ``word``.

    Args:
        word: 16-bit word
        position: Nibble number, 1 being the most significant

    Returns:
        Value 0-15
    """
    shift = (4 - position) * 4
    return (word >> shift) & 0xF


def get_bit(word: int, pos: int) -> bool:
    """Return whether bit ``pos`` (0-15) of ``word`` is set."""
    return bool(word & (1 << pos))


def set_bit(word: int, pos: int, value: bool) -> int:
    """Return ``word`` with bit ``pos`` (0-15) set or cleared."""
    mask = 1 << pos
    if value:
        return mask_word(word | mask)
    return mask_word(word & ~mask)
