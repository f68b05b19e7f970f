"""CPU16: fetch-decode-execute engine.

Each cycle:
    PROGRAM[pc], PROGRAM[pc+1] -> FETCH -> DECODE -> pc += 2 -> EXECUTE -> STATE
                                    |                              |
                              [Instruction]                 [OpcodeRegistry]

The program counter advances before the opcode runs, so a jump overwrites
the increment and every other opcode keeps it.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from .driver import CycleDriver, Pacer
from .errors import CPUHaltedError, ProgramCounterError, ProgramLoadError
from .isa import Flag, Instruction
from .memory import MEMORY_SIZE
from .registry import OpcodeRegistry, get_registry
from .state import CPUState

logger = logging.getLogger(__name__)


@dataclass
class ExecutionTraceEntry:
    """Single entry in the execution trace.

    Attributes:
        cycle: Cycle number (1-indexed, count after execution)
        address: Address the instruction was fetched from
        instruction: Decoded instruction
        pre_state: State before execution
        post_state: State after execution
        output: Value emitted by OUT, if any
    """
    cycle: int
    address: int
    instruction: Instruction
    pre_state: dict
    post_state: dict
    output: Optional[int] = None


class CPU16:
    """16-bit CPU emulator.

    All state lives in one CPUState, so independent instances never share
    registers or memory. step(), reset(), load_program() and snapshot() hold
    a lock, making it safe to observe the CPU from another thread while a
    CycleDriver runs it in the background.

    Attributes:
        state: Registers, flags and memories
        registry: Opcode primitives
        output: Callback receiving each OUT value
        outputs: Every value emitted since reset, in order
        trace: Execution trace entries (when record_trace is set)
        max_cycles: Default safety limit for run()
    """

    DEFAULT_MAX_CYCLES = 1_000_000

    def __init__(
        self,
        output: Optional[Callable[[int], None]] = None,
        record_trace: bool = True,
        max_cycles: Optional[int] = DEFAULT_MAX_CYCLES,
        registry: Optional[OpcodeRegistry] = None,
    ):
        self.state = CPUState()
        self.registry = registry or get_registry()
        self.output = output
        self.outputs: List[int] = []
        self.record_trace = record_trace
        self.trace: List[ExecutionTraceEntry] = []
        self.max_cycles = max_cycles
        self._lock = threading.RLock()
        self._last_output: Optional[int] = None

    def load_program(self, words: Iterable[int], origin: int = 0,
                     entry: Optional[int] = None) -> int:
        """Write program words into the program store.

        Args:
            words: 16-bit words (instruction pairs and constants)
            origin: Address of the first word
            entry: Address to start executing from (pc is left alone if None)

        Returns:
            Number of words loaded

        Raises:
            ProgramLoadError: If the store is frozen, the words are invalid
                or the entry point is out of range
        """
        if entry is not None and not 0 <= entry < MEMORY_SIZE - 1:
            raise ProgramLoadError(f"Entry point out of range: {entry}")
        with self._lock:
            count = self.state.program.load(words, origin)
            if entry is not None:
                self.state.pc = entry
        logger.info("Loaded %d words at 0x%04X", count, origin)
        return count

    def reset(self) -> None:
        """Return to power-on state. The loaded program is kept."""
        with self._lock:
            self.state.reset()
            self.outputs = []
            self.trace = []
        logger.info("CPU reset")

    def _emit(self, value: int) -> None:
        # Delivered to the collaborator only once the cycle is committed.
        self._last_output = value

    def step(self) -> bool:
        """Execute a single fetch-decode-execute cycle.

        Returns:
            True if the CPU is halted after this cycle

        The cycle is committed (pc, registers, cycle count, output log and
        trace) before the output collaborator is called, so an exception from
        the collaborator propagates with the instruction fully applied.

        Raises:
            CPUHaltedError: If the CPU was already halted
            ProgramCounterError: If pc leaves no room for a two-word fetch
        """
        with self._lock:
            state = self.state
            if state.halted:
                raise CPUHaltedError()

            # FETCH
            pc = state.pc
            if pc + 1 >= MEMORY_SIZE:
                raise ProgramCounterError(pc)
            state.program.freeze()
            word = state.program[pc]
            operand = state.program[pc + 1]

            # DECODE
            instruction = Instruction.decode(word, operand)
            pre_state = state.snapshot() if self.record_trace else None

            # EXECUTE
            self._last_output = None
            state.pc = pc + 2
            try:
                self.registry.execute(state, instruction, self._emit)
            except Exception:
                state.pc = pc
                raise
            logger.debug("0x%04X: %s", pc, instruction)

            emitted = self._last_output
            if emitted is not None:
                self.outputs.append(emitted)
            if self.record_trace:
                self.trace.append(ExecutionTraceEntry(
                    cycle=state.cycle_count,
                    address=pc,
                    instruction=instruction,
                    pre_state=pre_state,
                    post_state=state.snapshot(),
                    output=emitted,
                ))

            if state.halted:
                logger.info("Halted at 0x%04X after %d cycles", pc, state.cycle_count)
            halted = state.halted

        if emitted is not None and self.output is not None:
            self.output(emitted)
        return halted

    def run(self, max_cycles: Optional[int] = None,
            pacer: Optional[Pacer] = None) -> List[ExecutionTraceEntry]:
        """Run the CPU until it halts.

        Args:
            max_cycles: Override maximum cycles (uses instance default if None)
            pacer: Delay policy between cycles (no delay if None)

        Returns:
            Complete execution trace

        Raises:
            CycleLimitExceeded: If max cycles exceeded (safety limit)
        """
        limit = max_cycles if max_cycles is not None else self.max_cycles
        CycleDriver(self, pacer=pacer, max_cycles=limit).run()
        return self.trace

    def snapshot(self) -> dict:
        """Consistent copy of the register state, taken between cycles."""
        with self._lock:
            return self.state.snapshot()

    def get_register(self, index: int) -> int:
        """Get value of register ``index`` (0-15)."""
        with self._lock:
            return self.state.get_register(index)

    def dump_registers(self) -> Dict[str, int]:
        """Get all register values keyed R0-R15."""
        with self._lock:
            return self.state.dump_registers()

    def get_flags(self) -> Dict[str, bool]:
        """Get the three condition flags."""
        with self._lock:
            return {bit.name: self.state.get_flag(bit) for bit in Flag}

    def read_data(self, address: int) -> int:
        """Read one word of the data store."""
        with self._lock:
            return self.state.data[address]

    def get_pc(self) -> int:
        """Get current program counter."""
        return self.get_register(0)

    def get_cycle_count(self) -> int:
        """Get number of executed cycles."""
        with self._lock:
            return self.state.cycle_count

    def is_halted(self) -> bool:
        """Check if CPU is halted."""
        with self._lock:
            return self.state.halted

    def print_trace(self) -> None:
        """Print execution trace in human-readable format."""
        print("=" * 70)
        print("CPU16 EXECUTION TRACE")
        print("=" * 70)

        for entry in self.trace:
            word1, _ = entry.instruction.encode()
            print(f"\n[Cycle {entry.cycle}] 0x{entry.address:04X}: "
                  f"{word1:04X}  {entry.instruction}")

            pre_regs = entry.pre_state["registers"]
            post_regs = entry.post_state["registers"]
            changes = [
                f"R{i}: {before} → {after}"
                for i, (before, after) in enumerate(zip(pre_regs, post_regs))
                if i > 0 and before != after
            ]
            if changes:
                print(f"  Changes: {', '.join(changes)}")
            if entry.output is not None:
                print(f"  Output: {entry.output}")
            if entry.post_state["pc"] != entry.address + 2:
                print(f"  PC: {entry.pre_state['pc']} → {entry.post_state['pc']}")

        print("\n" + "=" * 70)
        print("FINAL STATE")
        print("=" * 70)
        print(f"  Registers: {self.dump_registers()}")
        print(f"  Flags: {self.get_flags()}")
        print(f"  PC: {self.get_pc()}")
        print(f"  Cycles: {self.get_cycle_count()}")
        print(f"  Halted: {self.is_halted()}")

    def get_summary(self) -> Dict:
        """Get execution summary, taken from one snapshot between cycles.

        Returns:
            Dictionary with execution statistics and final state
        """
        with self._lock:
            snapshot = self.state.snapshot()
            return {
                "cycles": snapshot["cycle_count"],
                "halted": snapshot["halted"],
                "registers": {f"R{i}": v for i, v in enumerate(snapshot["registers"])},
                "flags": snapshot["flags"],
                "pc": snapshot["pc"],
                "outputs": list(self.outputs),
                "trace_length": len(self.trace),
            }
