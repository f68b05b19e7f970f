"""OpcodeRegistry: per-opcode execution primitives for CPU16.

Each opcode maps to exactly one primitive. A primitive receives the CPU
state (already advanced past the instruction), the decoded instruction and
the output callback, and applies the opcode's whole effect to the state.

Registry Keys:
    ADD, SUB, NOT: Arithmetic and bitwise complement
    AND, OR: Bitwise test, result compared against 0 into the flags
    CMP: Unsigned compare, sets exactly one of greater/equal/less
    CPY: Register to register copy
    OUT: Emit a register value
    MOV, LD: Register <-> data store
    LDV: Immediate to register
    J: Conditional or unconditional jump
    HLT: Stop execution
    INVALID: Unassigned opcode, halts like HLT

The registry is checked for exhaustiveness over Opcode and frozen when
built, so every decodable instruction has exactly one behaviour.
"""

from typing import Callable, Dict, Optional, Set

from .isa import Instruction, JumpMode, Opcode
from .state import CPUState

Emit = Callable[[int], None]
Primitive = Callable[[CPUState, Instruction, Emit], None]


class OpcodeRegistry:
    """Verified registry of opcode primitives.

    Attributes:
        _primitives: Dictionary mapping opcodes to handler functions
        _frozen: Whether the registry is locked against modifications
    """

    def __init__(self):
        """Initialize registry with all opcode primitives."""
        self._primitives: Dict[Opcode, Primitive] = {}
        self._frozen = False
        self._register_all_primitives()
        self._check_exhaustive()
        self.freeze()

    def _register_all_primitives(self) -> None:
        # Arithmetic
        self.register(Opcode.ADD, self._op_add)
        self.register(Opcode.SUB, self._op_sub)
        self.register(Opcode.NOT, self._op_not)

        # Flag setting
        self.register(Opcode.AND, self._op_and)
        self.register(Opcode.OR, self._op_or)
        self.register(Opcode.CMP, self._op_cmp)

        # Data movement
        self.register(Opcode.CPY, self._op_cpy)
        self.register(Opcode.OUT, self._op_out)
        self.register(Opcode.MOV, self._op_mov)
        self.register(Opcode.LD, self._op_ld)
        self.register(Opcode.LDV, self._op_ldv)

        # Control flow
        self.register(Opcode.J, self._op_j)
        self.register(Opcode.HLT, self._op_hlt)
        self.register(Opcode.INVALID, self._op_hlt)

    def _check_exhaustive(self) -> None:
        missing = set(Opcode) - set(self._primitives)
        if missing:
            names = ", ".join(sorted(op.name for op in missing))
            raise RuntimeError(f"No primitive registered for: {names}")

    def register(self, opcode: Opcode, handler: Primitive) -> None:
        """Register a primitive operation.

        Args:
            opcode: Opcode the handler implements
            handler: Function applying the opcode to (state, instruction, emit)

        Raises:
            RuntimeError: If registry is frozen
            ValueError: If opcode already registered
        """
        if self._frozen:
            raise RuntimeError("Cannot register primitives: registry is frozen")
        if opcode in self._primitives:
            raise ValueError(f"Primitive already registered: {opcode.name}")
        self._primitives[opcode] = handler

    def freeze(self) -> None:
        """Freeze the registry to prevent further modifications."""
        self._frozen = True

    def is_frozen(self) -> bool:
        """Check if registry is frozen."""
        return self._frozen

    def get_valid_keys(self) -> Set[Opcode]:
        """Get set of all registered opcodes."""
        return set(self._primitives.keys())

    def execute(self, state: CPUState, instruction: Instruction, emit: Emit) -> None:
        """Apply a decoded instruction to ``state`` and count the cycle.

        The program counter must already point past the instruction.
        """
        handler = self._primitives[instruction.opcode]
        handler(state, instruction, emit)
        state.cycle_count += 1

    # =========================================================================
    # Arithmetic Primitives
    # =========================================================================

    def _op_add(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """ADD A B C - C = A + B, wrapping at 16 bits."""
        state.set_register(ins.c, state.registers[ins.a] + state.registers[ins.b])

    def _op_sub(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """SUB A B C - C = A - B, wrapping at 16 bits."""
        state.set_register(ins.c, state.registers[ins.a] - state.registers[ins.b])

    def _op_not(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """NOT A - bitwise complement of A, in place."""
        state.set_register(ins.a, ~state.registers[ins.a])

    # =========================================================================
    # Flag Primitives
    # =========================================================================

    def _op_and(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """AND A B - flags from (A & B) compared to 0.

        Non-zero sets greater, zero sets equal. Registers are unchanged.
        """
        state.set_comparison(state.registers[ins.a] & state.registers[ins.b], 0)

    def _op_or(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """OR A B - flags from (A | B) compared to 0."""
        state.set_comparison(state.registers[ins.a] | state.registers[ins.b], 0)

    def _op_cmp(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """CMP A B - unsigned compare of A to B."""
        state.set_comparison(state.registers[ins.a], state.registers[ins.b])

    # =========================================================================
    # Data Movement Primitives
    # =========================================================================

    def _op_cpy(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """CPY A B - B = A."""
        state.set_register(ins.b, state.registers[ins.a])

    def _op_out(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """OUT A - deliver A to the output collaborator."""
        emit(state.registers[ins.a])

    def _op_mov(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """MOV A, ADDR - DATA[ADDR] = A."""
        state.data[ins.operand] = state.registers[ins.a]

    def _op_ld(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """LD A, ADDR - A = DATA[ADDR]."""
        state.set_register(ins.a, state.data[ins.operand])

    def _op_ldv(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """LDV A, VAL - A = VAL, straight from the instruction's second word."""
        state.set_register(ins.a, ins.operand)

    # =========================================================================
    # Control Flow Primitives
    # =========================================================================

    def _op_j(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """J MODE FLAG, ADDR - jump to ADDR.

        MODE 0 jumps if flag bit FLAG is clear, MODE 1 if it is set, any
        other MODE always jumps.
        """
        if ins.a == JumpMode.IF_CLEAR:
            taken = not state.get_flag(ins.b)
        elif ins.a == JumpMode.IF_SET:
            taken = state.get_flag(ins.b)
        else:
            taken = True
        if taken:
            state.pc = ins.operand

    def _op_hlt(self, state: CPUState, ins: Instruction, emit: Emit) -> None:
        """HLT - stop until reset. Also used for unassigned opcodes."""
        state.halted = True


# Singleton registry instance
_registry: Optional[OpcodeRegistry] = None


def get_registry() -> OpcodeRegistry:
    """Get the singleton opcode registry instance."""
    global _registry
    if _registry is None:
        _registry = OpcodeRegistry()
    return _registry
