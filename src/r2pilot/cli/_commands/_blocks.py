"""pdb2bb command - formats radare2 `pdb` output as a basic block."""

import sys

from cyclopts import App

from r2pilot.blocks import pdb_to_basic_block

from ._shared import ExitCode, exit_with_error

app = App(
    name="pdb2bb",
    help="Format radare2 'pdb' output read from stdin as a basic block.",
    help_on_error=True,
)


@app.default
def pdb2bb() -> None:
    """Convert 'pdb' output provided via stdin into a boxed basic block."""
    try:
        text = sys.stdin.read()
    except OSError as e:
        exit_with_error(f"Failed to read stdin: {e}", ExitCode.IO_ERROR)

    print(pdb_to_basic_block(text))
