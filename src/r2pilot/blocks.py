"""Basic-block formatting for radare2 disassembly.

Turns the output of `pdb` (print disassembly of a basic block) into a boxed
block for pasting into notes or graphs. Given:

                ;-- rip:
               ; 0x100555b8c
               488d351a8a1f.  lea rsi, qword str.SecCertificateCopyValues
               4889c7         mov rdi, rax
               e806200c00     call sym.imp.dlsym

the result is:

    ┌─────────────────────────────────────────────┐
    │ ;-- rip:                                    │
    │ ; 0x100555b8c                               │
    │ lea rsi, qword str.SecCertificateCopyValues │
    │ mov rdi, rax                                │
    │ call sym.imp.dlsym                          │
    └─────────────────────────────────────────────┘
"""


def _strip_byte_column(line: str) -> str:
    """Drop the leading hex byte column of an instruction line."""
    if not line or not line[0].isalnum():
        return line

    first_space = line.find(" ")
    if first_space < 0:
        return line

    rest = line[first_space:].lstrip()
    return rest or line


def pdb_lines(text: str) -> list[str]:
    """Extract the display lines of a basic block from `pdb` output.

    The first non-blank line sets the indentation removed from every line
    after it. An empty line ends the block.
    """
    lines: list[str] = []
    inset: int | None = None

    for raw in text.splitlines():
        if inset is None:
            stripped = raw.lstrip()
            if not stripped:
                continue
            inset = len(raw) - len(stripped)
            lines.append(stripped)
            continue

        if not raw:
            break

        line = raw[inset:] if len(raw) > inset else raw
        lines.append(_strip_byte_column(line))

    return lines


def render_box(lines: list[str]) -> str:
    """Frame lines in a box padded to the widest line."""
    width = max((len(line) for line in lines), default=0)
    border = "─" * (width + 2)
    body = [f"│ {line.ljust(width)} │" for line in lines]
    return "\n".join([f"┌{border}┐", *body, f"└{border}┘"])


def pdb_to_basic_block(text: str) -> str:
    """Format `pdb` output as a boxed basic block.

    Args:
        text: Output of radare2's `pdb` command.

    Returns:
        The boxed block, without a trailing newline.
    """
    return render_box(pdb_lines(text))
