"""Word-addressed memories for CPU16.

Two separate address spaces, each 65536 words of 16 bits:
    - ProgramStore: instructions and constants (ROM analog). Written by the
      loader before execution, read-only while the CPU runs.
    - DataStore: working memory (RAM analog), read and written by MOV/LD.

There is no byte addressing: address N holds one whole 16-bit word.
"""

from typing import Iterable, List

from .bits import WORD_MASK
from .errors import ProgramLoadError

MEMORY_SIZE = 0x10000

# Opcode nibble 0xF: an unprogrammed location halts the CPU.
HLT_WORD = 0xFFFF


class Memory:
    """Fixed-size array of 16-bit words.

    Attributes:
        size: Number of addressable words
        fill: Value every location holds after clear()
    """

    def __init__(self, size: int = MEMORY_SIZE, fill: int = 0):
        self.size = size
        self.fill = fill
        self._words: List[int] = [fill] * size

    def _check(self, address: int) -> None:
        if not 0 <= address < self.size:
            raise IndexError(f"Address out of range: {address}")

    def __getitem__(self, address: int) -> int:
        self._check(address)
        return self._words[address]

    def __len__(self) -> int:
        return self.size

    def clear(self) -> None:
        """Set every location back to the fill value."""
        self._words = [self.fill] * self.size

    def dump(self, start: int = 0, count: int = 16) -> List[int]:
        """Copy ``count`` words starting at ``start``."""
        self._check(start)
        return list(self._words[start:start + count])


class DataStore(Memory):
    """Read/write working memory. Zero-initialised."""

    def __setitem__(self, address: int, value: int) -> None:
        self._check(address)
        self._words[address] = value & WORD_MASK


class ProgramStore(Memory):
    """Instruction memory, filled with HLT until a program is loaded.

    The store is frozen once execution starts; loading into a frozen store
    raises ProgramLoadError.
    """

    def __init__(self, size: int = MEMORY_SIZE):
        super().__init__(size, fill=HLT_WORD)
        self._frozen = False

    def load(self, words: Iterable[int], origin: int = 0) -> int:
        """Write a word sequence starting at ``origin``.

        Args:
            words: 16-bit words to store
            origin: Address of the first word

        Returns:
            Number of words written

        Raises:
            ProgramLoadError: If frozen, or a word or the range is invalid
        """
        if self._frozen:
            raise ProgramLoadError("Cannot load program: program store is frozen")
        words = list(words)
        if not 0 <= origin < self.size:
            raise ProgramLoadError(f"Origin out of range: {origin}")
        if origin + len(words) > self.size:
            raise ProgramLoadError(
                f"Program of {len(words)} words does not fit at origin 0x{origin:04X}"
            )
        for offset, word in enumerate(words):
            if not isinstance(word, int) or not 0 <= word <= WORD_MASK:
                raise ProgramLoadError(f"Invalid word at offset {offset}: {word!r}")
        self._words[origin:origin + len(words)] = words
        return len(words)

    def freeze(self) -> None:
        """Make the store read-only."""
        self._frozen = True

    def unfreeze(self) -> None:
        """Allow loading again (used by CPU reset)."""
        self._frozen = False

    def is_frozen(self) -> bool:
        """Check if the store is frozen."""
        return self._frozen
