"""Exceptions raised by the CPU16 emulator.

Unassigned opcodes are not errors: the engine treats them as HLT. The
exceptions here cover misuse of the machine and conditions the
hardware model leaves undefined.
"""


class CPUError(Exception):
    """Base class for all emulator errors."""


class ProgramCounterError(CPUError):
    """The program counter points where a full instruction cannot be fetched."""

    def __init__(self, pc: int):
        super().__init__(f"Program counter out of range: 0x{pc:04X}")
        self.pc = pc


class ProgramLoadError(CPUError, ValueError):
    """A program could not be written into the Program Store."""


class CPUHaltedError(CPUError, RuntimeError):
    """step() was called on a halted CPU."""

    def __init__(self):
        super().__init__("CPU is halted")


class CycleLimitExceeded(CPUError, RuntimeError):
    """The cycle driver hit its safety limit before the program halted."""

    def __init__(self, limit: int):
        super().__init__(f"Max cycles ({limit}) exceeded")
        self.limit = limit
