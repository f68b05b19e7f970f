"""CPU16 Interactive Demo.

A Gradio web interface for running and inspecting CPU16 programs.

Usage:
    cd /path/to/cpu16
    python demo/gradio_app.py

Features:
    - Paste or load machine-code programs (hex words)
    - See program output, final registers and flags
    - Step-by-step execution trace
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import gradio as gr
from cpu16 import CPU16, CPUError
from cpu16.programs import parse_words


# =============================================================================
# Example Programs
# =============================================================================

EXAMPLE_PROGRAMS = {
    "Fibonacci": """A200 0000   ; LDV 2, 0x0000
A300 0001   ; LDV 3, 0x0001
0234 0000   ; ADD 2 3 4
7400 0000   ; OUT 4
6320 0000   ; CPY 3 2
6430 0000   ; CPY 4 3
0234 0000   ; ADD 2 3 4
5430 0000   ; CMP 4 3
E100 0006   ; J 1 0, 0x0006""",

    "Countdown": """A200 0005   ; LDV 2, 5
A300 0001   ; LDV 3, 1
A400 0000   ; LDV 4, 0
8200 0100   ; MOV 2, 0x0100
9500 0100   ; LD 5, 0x0100
7500 0000   ; OUT 5
1532 0000   ; SUB 5 3 2
5240 0000   ; CMP 2 4
E010 0006   ; J 0 1, 0x0006
F000 0000   ; HLT""",

    "Complement": """A200 00FF   ; LDV 2, 0x00FF
2200 0000   ; NOT 2
7200 0000   ; OUT 2          -> 65280
F000 0000   ; HLT""",

    "Custom": ""
}


# =============================================================================
# Execution Functions
# =============================================================================

def run_program(program: str, max_cycles: int) -> tuple:
    """Execute a hex word program and return results.

    Args:
        program: Program text (hex words, ; comments)
        max_cycles: Maximum execution cycles

    Returns:
        Tuple of (summary_text, output_text, trace_text, registers_text)
    """
    if not program.strip():
        return "Error: No program provided", "", "", ""

    cpu = CPU16(max_cycles=int(max_cycles))
    try:
        cpu.load_program(parse_words(program))
    except CPUError as e:
        return f"Error: {e}", "", "", ""

    try:
        trace = cpu.run()
    except CPUError as e:
        error_msg = str(e)
        trace = cpu.trace
    else:
        error_msg = None

    # Format summary
    summary = cpu.get_summary()
    summary_lines = [
        "EXECUTION SUMMARY",
        "=" * 40,
        f"Cycles: {summary['cycles']}",
        f"Halted: {'Yes' if summary['halted'] else 'No'}",
        f"PC: 0x{summary['pc']:04X}",
        f"Outputs: {len(summary['outputs'])}",
    ]
    if error_msg:
        summary_lines.append(f"\nRuntime: {error_msg}")
    summary_text = "\n".join(summary_lines)

    output_text = "\n".join(str(value) for value in summary["outputs"])

    # Format trace
    trace_lines = [
        "EXECUTION TRACE",
        "=" * 60,
    ]
    for entry in trace[:200]:
        trace_lines.append(f"\n--- Cycle {entry.cycle} (0x{entry.address:04X}) ---")
        trace_lines.append(f"Instruction: {entry.instruction}")

        pre_regs = entry.pre_state["registers"]
        post_regs = entry.post_state["registers"]
        changes = [
            f"R{i}: {before} -> {after}"
            for i, (before, after) in enumerate(zip(pre_regs, post_regs))
            if before != after
        ]
        if changes:
            trace_lines.append(f"Changes:     {', '.join(changes)}")
        if entry.output is not None:
            trace_lines.append(f"Output:      {entry.output}")

    if len(trace) > 200:
        trace_lines.append(f"\n... ({len(trace) - 200} more entries)")
    trace_text = "\n".join(trace_lines)

    # Format registers
    reg_lines = [
        "FINAL REGISTERS",
        "=" * 30,
    ]
    for name, value in summary["registers"].items():
        marker = " *" if value != 0 else ""
        reg_lines.append(f"  {name:>3}: {value:>6}  0x{value:04X}{marker}")

    reg_lines.append("")
    reg_lines.append("FLAGS")
    reg_lines.append("-" * 30)
    for flag, value in summary["flags"].items():
        reg_lines.append(f"  {flag}: {value}")
    registers_text = "\n".join(reg_lines)

    return summary_text, output_text, trace_text, registers_text


def load_example(example_name: str) -> str:
    """Load an example program."""
    return EXAMPLE_PROGRAMS.get(example_name, "")


# =============================================================================
# Gradio Interface
# =============================================================================

def create_demo():
    """Create and return the Gradio demo interface."""

    with gr.Blocks(title="CPU16 Demo", theme=gr.themes.Soft()) as demo:
        gr.Markdown("""
        # CPU16: Minimal 16-bit CPU Emulator

        Two-word instructions, 4-bit opcodes, 16 registers, separate
        program and data memories.

        **Cycle**: `fetch -> decode -> pc += 2 -> execute`
        """)

        with gr.Row():
            with gr.Column(scale=2):
                gr.Markdown("### Program")

                example_dropdown = gr.Dropdown(
                    choices=list(EXAMPLE_PROGRAMS.keys()),
                    value="Fibonacci",
                    label="Load Example"
                )

                program_input = gr.Textbox(
                    value=EXAMPLE_PROGRAMS["Fibonacci"],
                    label="Hex Words",
                    lines=15,
                    placeholder="Enter hex words here..."
                )

                max_cycles = gr.Slider(
                    minimum=100,
                    maximum=100000,
                    value=10000,
                    step=100,
                    label="Max Cycles"
                )

                run_button = gr.Button("Run Program", variant="primary")

            with gr.Column(scale=3):
                with gr.Row():
                    summary_output = gr.Textbox(
                        label="Summary",
                        lines=10,
                        interactive=False
                    )
                    program_output = gr.Textbox(
                        label="Output",
                        lines=10,
                        interactive=False
                    )
                    registers_output = gr.Textbox(
                        label="Final Registers",
                        lines=10,
                        interactive=False
                    )

                trace_output = gr.Textbox(
                    label="Execution Trace",
                    lines=20,
                    interactive=False
                )

        with gr.Accordion("ISA Reference", open=False):
            gr.Markdown("""
            | Opcode | Instruction | Description | Encoding |
            |--------|-------------|-------------|----------|
            | 0 | `ADD A B C` | C = A + B (mod 2^16) | `0ABC ****` |
            | 1 | `SUB A B C` | C = A - B (mod 2^16) | `1ABC ****` |
            | 2 | `NOT A` | A = ~A | `2A** ****` |
            | 3 | `AND A B` | flags from A & B vs 0 | `3AB* ****` |
            | 4 | `OR A B` | flags from A \\| B vs 0 | `4AB* ****` |
            | 5 | `CMP A B` | flags from A vs B | `5AB* ****` |
            | 6 | `CPY A B` | B = A | `6AB* ****` |
            | 7 | `OUT A` | print A | `7A** ****` |
            | 8 | `MOV A, ADDR` | DATA[ADDR] = A | `8A** ADDR` |
            | 9 | `LD A, ADDR` | A = DATA[ADDR] | `9A** ADDR` |
            | A | `LDV A, VAL` | A = VAL | `AA** VAL` |
            | E | `J MODE FLAG, ADDR` | jump if FLAG is 0 / 1 / always | `EMF* ADDR` |
            | F | `HLT` | halt (also B, C, D) | `F*** ****` |

            **Registers**: R0 = PC, R1 = flags (bit0 greater, bit1 equal, bit2 less), R2-R15 general purpose
            """)

        # Event handlers
        example_dropdown.change(
            fn=load_example,
            inputs=[example_dropdown],
            outputs=[program_input]
        )

        run_button.click(
            fn=run_program,
            inputs=[program_input, max_cycles],
            outputs=[summary_output, program_output, trace_output, registers_output]
        )

    return demo


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7861,
        show_error=True
    )
