"""CPUState: register file, flags and memories of one CPU16 instance.

State Components:
    - Registers: R0-R15, unsigned 16-bit
        R0 is the program counter
        R1 is the flags register (bit0 greater, bit1 equal, bit2 less)
        R2-R15 are general purpose
    - Program store: 65536 words, HLT-filled, read-only while running
    - Data store: 65536 words, zero-filled
    - Halted: Execution termination flag
    - Cycle count: Total executed cycles

Unlike a snapshot, CPUState is mutable: the execution engine updates it in
place, one instruction at a time. Use snapshot() for an independent copy.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .bits import WORD_MASK, get_bit, mask_word, set_bit
from .isa import FLAGS, PC, Flag
from .memory import DataStore, ProgramStore

NUM_REGISTERS = 16
FLAG_BITS = (Flag.GREATER, Flag.EQUAL, Flag.LESS)


@dataclass
class CPUState:
    """Mutable CPU state.

    Attributes:
        registers: List of 16 register values (R0-R15)
        program: Program store (instructions)
        data: Data store (working memory)
        halted: Whether the CPU has halted
        cycle_count: Number of execution cycles completed
    """
    registers: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    program: ProgramStore = field(default_factory=ProgramStore)
    data: DataStore = field(default_factory=DataStore)
    halted: bool = False
    cycle_count: int = 0

    @property
    def pc(self) -> int:
        """Program counter (R0)."""
        return self.registers[PC]

    @pc.setter
    def pc(self, value: int) -> None:
        self.registers[PC] = mask_word(value)

    @property
    def flags(self) -> int:
        """Flags register (R1)."""
        return self.registers[FLAGS]

    def get_register(self, index: int) -> int:
        """Get value of register ``index`` (0-15).

        Raises:
            IndexError: If register doesn't exist
        """
        if not 0 <= index < NUM_REGISTERS:
            raise IndexError(f"Invalid register: {index}")
        return self.registers[index]

    def set_register(self, index: int, value: int) -> None:
        """Set register ``index``, wrapping the value to 16 bits.

        Raises:
            IndexError: If register doesn't exist
        """
        if not 0 <= index < NUM_REGISTERS:
            raise IndexError(f"Invalid register: {index}")
        self.registers[index] = mask_word(value)

    def get_flag(self, pos: int) -> bool:
        """Read bit ``pos`` of the flags register."""
        return get_bit(self.registers[FLAGS], pos)

    def set_flag(self, pos: int, value: bool) -> None:
        """Set or clear bit ``pos`` of the flags register in place."""
        self.registers[FLAGS] = set_bit(self.registers[FLAGS], pos, value)

    def set_comparison(self, left: int, right: int) -> None:
        """Record an unsigned comparison in the three condition flags.

        Clears greater/equal/less, then sets exactly one of them. Reserved
        flag bits are left alone.
        """
        for bit in FLAG_BITS:
            self.set_flag(bit, False)
        if left > right:
            self.set_flag(Flag.GREATER, True)
        elif left == right:
            self.set_flag(Flag.EQUAL, True)
        else:
            self.set_flag(Flag.LESS, True)

    def reset(self) -> None:
        """Zero registers, halt flag, cycle count and data store.

        The program store keeps its contents and becomes loadable again.
        """
        self.registers = [0] * NUM_REGISTERS
        self.halted = False
        self.cycle_count = 0
        self.data.clear()
        self.program.unfreeze()

    def snapshot(self) -> dict:
        """Create an independent copy of the register state for tracing.

        Returns:
            Dictionary with registers, pc, flags, halted and cycle_count
        """
        return {
            "registers": list(self.registers),
            "pc": self.pc,
            "flags": {bit.name: self.get_flag(bit) for bit in FLAG_BITS},
            "halted": self.halted,
            "cycle_count": self.cycle_count,
            # Memories excluded: 128K words per copy
        }

    def validate(self) -> bool:
        """Validate state integrity.

        Checks:
            - Exactly 16 registers, all unsigned 16-bit
            - At most one condition flag set
            - Cycle count non-negative
        """
        if len(self.registers) != NUM_REGISTERS:
            return False
        for value in self.registers:
            if not isinstance(value, int) or not 0 <= value <= WORD_MASK:
                return False
        if sum(self.get_flag(bit) for bit in FLAG_BITS) > 1:
            return False
        return self.cycle_count >= 0

    def dump_registers(self) -> Dict[str, int]:
        """Get a copy of all register values keyed R0-R15."""
        return {f"R{i}": value for i, value in enumerate(self.registers)}

    def __str__(self) -> str:
        """Human-readable state representation."""
        regs = " ".join(f"R{i}={v}" for i, v in enumerate(self.registers) if i > FLAGS)
        flags = "".join(
            name[0] if self.get_flag(bit) else "-"
            for bit, name in ((Flag.GREATER, "G"), (Flag.EQUAL, "E"), (Flag.LESS, "L"))
        )
        halted = " HALTED" if self.halted else ""
        return f"[Cycle {self.cycle_count}] PC=0x{self.pc:04X} F={flags} {regs}{halted}"
