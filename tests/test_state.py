"""Tests for CPUState and the memories it owns."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from cpu16.errors import ProgramLoadError
from cpu16.isa import Flag
from cpu16.memory import HLT_WORD, MEMORY_SIZE, DataStore, ProgramStore
from cpu16.state import NUM_REGISTERS, CPUState


class TestCPUStateCreation:
    """Test CPUState initialization and defaults."""

    def test_default_state(self):
        """Default state has zeroed registers and no halt."""
        state = CPUState()
        assert state.registers == [0] * NUM_REGISTERS
        assert state.pc == 0
        assert state.flags == 0
        assert state.halted is False
        assert state.cycle_count == 0

    def test_program_store_defaults_to_hlt(self):
        """Unprogrammed locations hold the HLT word."""
        state = CPUState()
        assert state.program[0] == HLT_WORD
        assert state.program[MEMORY_SIZE - 1] == HLT_WORD

    def test_data_store_zeroed(self):
        """Data store starts zeroed."""
        state = CPUState()
        assert state.data[0] == 0
        assert state.data[0xFFFF] == 0

    def test_instances_are_independent(self):
        """Two states never share registers or memory."""
        first, second = CPUState(), CPUState()
        first.set_register(2, 7)
        first.data[5] = 9
        assert second.registers[2] == 0
        assert second.data[5] == 0


class TestRegisters:
    """Test register accessors."""

    def test_set_register_wraps(self):
        """Values wrap to 16 bits."""
        state = CPUState()
        state.set_register(2, 0x10001)
        assert state.get_register(2) == 1
        state.set_register(3, -1)
        assert state.get_register(3) == 0xFFFF

    def test_invalid_register(self):
        """Registers beyond R15 don't exist."""
        state = CPUState()
        with pytest.raises(IndexError):
            state.get_register(16)
        with pytest.raises(IndexError):
            state.set_register(-1, 0)

    def test_pc_is_r0(self):
        """The program counter is register 0."""
        state = CPUState()
        state.pc = 0x20
        assert state.registers[0] == 0x20

    def test_pc_wraps(self):
        state = CPUState()
        state.pc = 0x10000
        assert state.pc == 0


class TestFlags:
    """Test flag bits in R1."""

    @pytest.mark.parametrize("left,right,expected", [
        (5, 3, Flag.GREATER),
        (3, 3, Flag.EQUAL),
        (3, 5, Flag.LESS),
        (0xFFFF, 0, Flag.GREATER),
    ])
    def test_set_comparison(self, left, right, expected):
        """Exactly one condition flag is set."""
        state = CPUState()
        state.set_comparison(left, right)
        set_bits = [bit for bit in Flag if state.get_flag(bit)]
        assert set_bits == [expected]

    def test_comparison_clears_previous_result(self):
        state = CPUState()
        state.set_comparison(1, 2)
        state.set_comparison(2, 1)
        assert state.get_flag(Flag.GREATER) is True
        assert state.get_flag(Flag.LESS) is False

    def test_reserved_bits_preserved(self):
        """Bits above 2 are untouched by comparisons."""
        state = CPUState()
        state.set_register(1, 0x8000)
        state.set_comparison(1, 1)
        assert state.flags == 0x8000 | (1 << Flag.EQUAL)


class TestReset:
    """Test reset behaviour."""

    def test_reset_clears_state_keeps_program(self):
        state = CPUState()
        state.program.load([0xA200, 0x0005])
        state.program.freeze()
        state.set_register(2, 5)
        state.data[3] = 4
        state.halted = True
        state.cycle_count = 9

        state.reset()

        assert state.registers == [0] * NUM_REGISTERS
        assert state.halted is False
        assert state.cycle_count == 0
        assert state.data[3] == 0
        assert state.program[0] == 0xA200
        assert state.program.is_frozen() is False


class TestSnapshotAndValidation:
    """Test snapshots and validate()."""

    def test_snapshot_is_copy(self):
        state = CPUState()
        state.set_register(2, 42)
        snapshot = state.snapshot()
        assert snapshot["registers"][2] == 42
        assert snapshot["flags"] == {"GREATER": False, "EQUAL": False, "LESS": False}

        snapshot["registers"][2] = 999
        assert state.registers[2] == 42

    def test_valid_state(self):
        assert CPUState().validate() is True

    def test_invalid_register_value(self):
        state = CPUState()
        state.registers[2] = 0x10000
        assert state.validate() is False

    def test_two_flags_invalid(self):
        state = CPUState()
        state.registers[1] = 0b011
        assert state.validate() is False

    def test_dump_registers(self):
        state = CPUState()
        state.set_register(15, 3)
        regs = state.dump_registers()
        assert regs["R15"] == 3
        assert len(regs) == NUM_REGISTERS


class TestProgramStore:
    """Test program loading rules."""

    def test_load_at_origin(self):
        store = ProgramStore()
        assert store.load([1, 2, 3], origin=0x10) == 3
        assert store.dump(0x10, 3) == [1, 2, 3]
        assert store[0x13] == HLT_WORD

    def test_load_frozen(self):
        store = ProgramStore()
        store.freeze()
        with pytest.raises(ProgramLoadError, match="frozen"):
            store.load([0])

    def test_load_too_long(self):
        store = ProgramStore()
        with pytest.raises(ProgramLoadError):
            store.load([0, 0], origin=MEMORY_SIZE - 1)

    @pytest.mark.parametrize("word", [-1, 0x10000, "A200"])
    def test_load_invalid_word(self, word):
        store = ProgramStore()
        with pytest.raises(ProgramLoadError):
            store.load([word])

    def test_program_store_not_writable(self):
        """Only load() writes the program store."""
        store = ProgramStore()
        with pytest.raises(TypeError):
            store[0] = 1

    def test_read_out_of_range(self):
        with pytest.raises(IndexError):
            ProgramStore()[MEMORY_SIZE]


class TestDataStore:
    """Test data memory."""

    def test_write_wraps(self):
        store = DataStore()
        store[7] = 0x1FFFF
        assert store[7] == 0xFFFF

    def test_clear(self):
        store = DataStore()
        store[1] = 5
        store.clear()
        assert store[1] == 0
