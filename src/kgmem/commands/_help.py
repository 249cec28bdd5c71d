"""Help text shared by the command modules."""

from __future__ import annotations


def examples(block: str) -> str:
    """Turn an indented block of sample invocations into a ``--help`` epilog.

    The leading ``\\b`` line tells click to print the block verbatim
    instead of rewrapping it, so *block* must not contain blank lines.
    """
    if any(not line.strip() for line in block.splitlines()):
        msg = "examples block must not contain blank lines"
        raise ValueError(msg)
    return f"\b\nExamples:\n{block}"
