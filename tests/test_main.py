"""Tests for the command line interface."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
import main


def run_cli(monkeypatch, capsys, *args):
    monkeypatch.setattr(sys, "argv", ["main.py", *args])
    code = main.main()
    return code, capsys.readouterr().out


class TestCLI:
    """Test running programs through main()."""

    def test_inline_program(self, monkeypatch, capsys):
        code, out = run_cli(monkeypatch, capsys,
                            "--inline", "A200 0005 7200 0000", "--delay-ms", "0", "--quiet")
        assert code == 0
        assert out.split() == ["5"]

    def test_inline_program_at_origin(self, monkeypatch, capsys):
        """--origin both places the program and starts execution there."""
        code, out = run_cli(monkeypatch, capsys,
                            "--origin", "0x10", "--inline", "A200 0005 7200 0000",
                            "--delay-ms", "0", "--quiet")
        assert code == 0
        assert out.split() == ["5"]

    def test_origin_out_of_range(self, monkeypatch, capsys):
        code, out = run_cli(monkeypatch, capsys,
                            "--origin", "0xFFFF", "--inline", "F000",
                            "--delay-ms", "0", "--quiet")
        assert code == 1
        assert "Error" in out

    def test_builtin_fibonacci(self, monkeypatch, capsys):
        code, out = run_cli(monkeypatch, capsys, "--delay-ms", "0", "--quiet")
        values = [int(line) for line in out.split()]
        assert code == 0
        assert values[:5] == [1, 2, 3, 5, 8]
        assert values[-1] == 46368

    def test_cycle_limit_exit_code(self, monkeypatch, capsys):
        code, out = run_cli(monkeypatch, capsys,
                            "--inline", "E200 0000", "--delay-ms", "0",
                            "--max-cycles", "10", "--quiet")
        assert code == 1
        assert "Max cycles (10) exceeded" in out

    def test_invalid_word(self, monkeypatch, capsys):
        code, out = run_cli(monkeypatch, capsys, "--inline", "XYZ", "--quiet")
        assert code == 1
        assert "Invalid program word" in out
