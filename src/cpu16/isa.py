"""Instruction set and encoding for CPU16.

Every instruction is two 16-bit words:
    (1) opcode (4 bits) followed by up to three register, mode or flag
        fields (4 bits each): ``OOOO AAAA BBBB CCCC``
    (2) an address or immediate value, used only by MOV, LD, LDV and J

Opcodes:
    0:  ADD A B C    --> C = A + B
    1:  SUB A B C    --> C = A - B
    2:  NOT A        --> A = ~A
    3:  AND A B      --> set flags from (A & B) compared to 0
    4:  OR A B       --> set flags from (A | B) compared to 0
    5:  CMP A B      --> set flags by comparing A to B (unsigned)
    6:  CPY A B      --> B = A
    7:  OUT A        --> emit A
    8:  MOV A, ADDR  --> DATA[ADDR] = A
    9:  LD A, ADDR   --> A = DATA[ADDR]
    A:  LDV A, VAL   --> A = VAL
    B-D:             --> unassigned, behave as HLT
    E:  J MODE FLAG, ADDR --> jump if flag bit is 0 (MODE 0), 1 (MODE 1),
                              or unconditionally (any other MODE)
    F:  HLT

Examples (* = don't care):
    ADD 2 3 4        0x0234 0x****
    LDV 3, 0x0001    0xA3** 0x0001
    J 1 2, 0x0000    0xE12* 0x0000
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from .bits import nibble


class Opcode(IntEnum):
    """Closed set of opcodes. INVALID stands for every unassigned nibble."""
    ADD = 0x0
    SUB = 0x1
    NOT = 0x2
    AND = 0x3
    OR = 0x4
    CMP = 0x5
    CPY = 0x6
    OUT = 0x7
    MOV = 0x8
    LD = 0x9
    LDV = 0xA
    J = 0xE
    HLT = 0xF
    INVALID = -1

    @classmethod
    def from_nibble(cls, value: int) -> "Opcode":
        """Map an opcode nibble to its Opcode, INVALID if unassigned."""
        if value < 0:
            return cls.INVALID
        try:
            return cls(value)
        except ValueError:
            return cls.INVALID


class Flag(IntEnum):
    """Bit positions of the condition flags in R1."""
    GREATER = 0
    EQUAL = 1
    LESS = 2


class JumpMode(IntEnum):
    """First field of J. Any value other than these two is unconditional."""
    IF_CLEAR = 0
    IF_SET = 1
    ALWAYS = 2


# Opcodes that use the second instruction word.
OPERAND_OPCODES = frozenset({Opcode.MOV, Opcode.LD, Opcode.LDV, Opcode.J})

PC = 0
FLAGS = 1


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction.

    Attributes:
        opcode: Decoded opcode (INVALID for unassigned nibbles)
        a: Second nibble (register, or J mode)
        b: Third nibble (register, or J flag bit)
        c: Fourth nibble (register)
        operand: Second word, None when the opcode ignores it
        raw: Original first word
    """
    opcode: Opcode
    a: int = 0
    b: int = 0
    c: int = 0
    operand: Optional[int] = None
    raw: int = 0

    def __post_init__(self):
        # Opcodes that read the second word always carry one.
        if self.opcode in OPERAND_OPCODES and self.operand is None:
            object.__setattr__(self, "operand", 0)

    @classmethod
    def decode(cls, word: int, operand: int) -> "Instruction":
        """Decode an instruction from its two words."""
        opcode = Opcode.from_nibble(nibble(word, 1))
        return cls(
            opcode=opcode,
            a=nibble(word, 2),
            b=nibble(word, 3),
            c=nibble(word, 4),
            operand=operand if opcode in OPERAND_OPCODES else None,
            raw=word,
        )

    def encode(self) -> Tuple[int, int]:
        """Encode back into two words. Don't-care fields encode as 0.

        INVALID has no canonical encoding, so its original word is returned.
        """
        if self.opcode is Opcode.INVALID:
            return self.raw, self.operand or 0
        word = (int(self.opcode) << 12) | (self.a << 8) | (self.b << 4) | self.c
        return word, self.operand if self.operand is not None else 0

    def __str__(self) -> str:
        op = self.opcode
        if op in (Opcode.ADD, Opcode.SUB):
            return f"{op.name} R{self.a} R{self.b} R{self.c}"
        if op in (Opcode.AND, Opcode.OR, Opcode.CMP, Opcode.CPY):
            return f"{op.name} R{self.a} R{self.b}"
        if op in (Opcode.NOT, Opcode.OUT):
            return f"{op.name} R{self.a}"
        if op in (Opcode.MOV, Opcode.LD, Opcode.LDV):
            return f"{op.name} R{self.a}, 0x{self.operand:04X}"
        if op is Opcode.J:
            return f"J {self.a} {self.b}, 0x{self.operand:04X}"
        if op is Opcode.HLT:
            return "HLT"
        return f"??? 0x{self.raw:04X}"


def encode(opcode: Opcode, a: int = 0, b: int = 0, c: int = 0,
           operand: int = 0) -> Tuple[int, int]:
    """Build the two words of an instruction from its fields."""
    for name, field in (("a", a), ("b", b), ("c", c)):
        if not 0 <= field <= 0xF:
            raise ValueError(f"Field {name} must be 0-15, got {field}")
    if not 0 <= operand <= 0xFFFF:
        raise ValueError(f"Operand must be 0-0xFFFF, got {operand}")
    return Instruction(opcode, a, b, c, operand).encode()
