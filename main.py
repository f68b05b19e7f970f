#!/usr/bin/env python3
"""CPU16 Command Line Interface.

Run machine-code programs with the CPU16 emulator.

Usage:
    python main.py
    python main.py --program programs/fibonacci.hex --delay-ms 0
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from cpu16 import CPU16, CPUError, FixedDelay, NoDelay
from cpu16.programs import FIBONACCI, load_words_file, parse_words

# One instruction every 50 ms by default.
DEFAULT_DELAY_MS = 50


def print_output(value: int) -> None:
    print(value, flush=True)


def main():
    parser = argparse.ArgumentParser(
        description="CPU16: Minimal 16-bit CPU Emulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run the built-in Fibonacci program at the default clock speed
    python main.py

    # Run a hex word file at full speed with a full trace
    python main.py --program programs/fibonacci.hex --delay-ms 0 --trace

    # Run inline words
    python main.py --inline "A200 0005 7200 0000"
        """
    )

    parser.add_argument(
        "--program", "-p",
        type=str,
        help="Path to program file (hex words)"
    )
    parser.add_argument(
        "--inline", "-i",
        type=str,
        help="Inline program (hex words separated by spaces or commas)"
    )
    parser.add_argument(
        "--origin",
        type=lambda s: int(s, 0),
        default=0,
        help="Load address of the first word. Default: 0"
    )
    parser.add_argument(
        "--delay-ms",
        type=float,
        default=DEFAULT_DELAY_MS,
        help=f"Delay between instructions in milliseconds. Default: {DEFAULT_DELAY_MS}"
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=CPU16.DEFAULT_MAX_CYCLES,
        help=f"Maximum execution cycles (safety limit). Default: {CPU16.DEFAULT_MAX_CYCLES}"
    )
    parser.add_argument(
        "--trace", "-t",
        action="store_true",
        help="Print full execution trace"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Minimal output (program output only)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every executed instruction"
    )

    args = parser.parse_args()

    if args.program and args.inline:
        parser.error("--program and --inline are mutually exclusive")
    if args.delay_ms < 0:
        parser.error("--delay-ms must be non-negative")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        if args.program:
            program_path = Path(args.program)
            if not program_path.exists():
                print(f"Error: Program file not found: {args.program}")
                return 1
            words = load_words_file(program_path)
            if not args.quiet:
                print(f"Loading program: {args.program}")
        elif args.inline:
            words = parse_words(args.inline)
            if not args.quiet:
                print("Running inline program")
        else:
            words = FIBONACCI
            if not args.quiet:
                print("Running built-in Fibonacci program")

        cpu = CPU16(output=print_output, record_trace=args.trace,
                    max_cycles=args.max_cycles)
        cpu.load_program(words, origin=args.origin, entry=args.origin)
    except CPUError as e:
        print(f"Error: {e}")
        return 1

    if not args.quiet:
        print("-" * 60)

    pacer = FixedDelay(args.delay_ms / 1000) if args.delay_ms else NoDelay()
    try:
        cpu.run(pacer=pacer)
    except CPUError as e:
        print(f"Execution error: {e}")
    except KeyboardInterrupt:
        print("Interrupted")

    if args.trace:
        cpu.print_trace()
    elif not args.quiet:
        print("-" * 60)
        summary = cpu.get_summary()
        print(f"Cycles: {summary['cycles']}")
        print(f"Halted: {summary['halted']}")
        print(f"PC: 0x{summary['pc']:04X}")
        print(f"Registers: {summary['registers']}")
        print(f"Flags: {summary['flags']}")

    # Return exit code based on halted state
    return 0 if cpu.is_halted() else 1


if __name__ == "__main__":
    sys.exit(main())
