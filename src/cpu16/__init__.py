"""CPU16: a minimal 16-bit instruction-set emulator.

A fixed-width virtual CPU that fetches two-word instructions from a
read-only program store, decodes a 4-bit opcode plus three 4-bit fields, and
executes one instruction per cycle against 16 registers and a separate
read/write data store.

Architecture:
    PROGRAM -> FETCH -> DECODE -> pc += 2 -> REGISTRY -> STATE
                          |                     |
                    [Instruction]       [one primitive per opcode]

Modules:
    bits: Nibble and bit helpers
    memory: Program and data stores
    isa: Opcodes and the two-word instruction encoding
    state: CPUState (registers, flags, memories, halt flag)
    registry: Opcode primitives
    cpu: CPU16 fetch-decode-execute engine
    driver: Cycle driver and pacing
    programs: Program loading helpers and the Fibonacci demo program
"""

__version__ = "0.1.0"

from .errors import (
    CPUError,
    CPUHaltedError,
    CycleLimitExceeded,
    ProgramCounterError,
    ProgramLoadError,
)
from .isa import Flag, Instruction, JumpMode, Opcode
from .state import CPUState
from .registry import OpcodeRegistry
from .cpu import CPU16, ExecutionTraceEntry
from .driver import CycleDriver, FixedDelay, NoDelay, Pacer

__all__ = [
    "CPU16",
    "CPUState",
    "OpcodeRegistry",
    "Instruction",
    "Opcode",
    "Flag",
    "JumpMode",
    "ExecutionTraceEntry",
    "CycleDriver",
    "Pacer",
    "NoDelay",
    "FixedDelay",
    "CPUError",
    "CPUHaltedError",
    "CycleLimitExceeded",
    "ProgramCounterError",
    "ProgramLoadError",
]
