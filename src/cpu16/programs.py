"""Program loading helpers.

Programs are plain sequences of 16-bit words. In text form they are hex
words separated by whitespace or commas, with an optional ``0x`` prefix and
``#`` or ``;`` comments running to the end of the line:

    A200 0000   ; LDV 2, 0x0000
    A300 0001   ; LDV 3, 0x0001
"""

import re
from pathlib import Path
from typing import List, Union

from .errors import ProgramLoadError

# Prints the Fibonacci numbers that fit in 16 bits, then halts.
#
#       LDV 2, 0x0000
#       LDV 3, 0x0001
#       ADD 2 3 4
# 0x06: OUT 4
#       CPY 3 2
#       CPY 4 3
#       ADD 2 3 4
#       CMP 4 3
#       J 1 0, 0x0006    ; loop while the sum grew
#       (HLT from the unprogrammed store)
FIBONACCI: List[int] = [
    0xA200, 0x0000,
    0xA300, 0x0001,
    0x0234, 0x0000,
    0x7400, 0x0000,
    0x6320, 0x0000,
    0x6430, 0x0000,
    0x0234, 0x0000,
    0x5430, 0x0000,
    0xE100, 0x0006,
]

_COMMENT = re.compile(r"[#;].*$", re.MULTILINE)
_WORD = re.compile(r"^(?:0[xX])?([0-9a-fA-F]{1,4})$")


def parse_words(source: str) -> List[int]:
    """Parse hex program text into words.

    Raises:
        ProgramLoadError: If a token is not a 16-bit hex word
    """
    words = []
    text = _COMMENT.sub("", source)
    for token in re.split(r"[\s,]+", text):
        if not token:
            continue
        match = _WORD.match(token)
        if not match:
            raise ProgramLoadError(f"Invalid program word: {token!r}")
        words.append(int(match.group(1), 16))
    return words


def load_words_file(path: Union[str, Path]) -> List[int]:
    """Read and parse a hex program file."""
    return parse_words(Path(path).read_text())
