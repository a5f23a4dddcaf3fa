from __future__ import annotations

from collections.abc import Sequence

from .profile import Block


def _format_lines(start_line: int, end_line: int) -> str:
    if start_line == end_line:
        return f"{start_line}"
    return f"{start_line}-{end_line}"


def format_block(b: Block) -> str:
    """Render the lines of a block: `7` or `7-9`."""
    return _format_lines(b.start_line, b.end_line)


def extent_blocks(blocks: Sequence[Block]) -> str:
    """Render the whole span from the first block's start to the last block's end."""
    if not blocks:
        return ""
    return _format_lines(blocks[0].start_line, blocks[-1].end_line)


def all_blocks(blocks: Sequence[Block]) -> str:
    return ",".join(format_block(b) for b in blocks)


def missing_blocks(blocks: Sequence[Block]) -> str:
    """
    Render the runs of uncovered blocks, e.g. `11-13,17`.

    Consecutive uncovered blocks are merged into one range even when there is
    a gap in line numbers between them; only a covered block splits a run.
    """
    out: list[str] = []
    run: tuple[int, int] | None = None
    for b in blocks:
        if b.count > 0:
            if run is not None:
                out.append(_format_lines(*run))
                run = None
            continue
        run = (b.start_line, b.end_line) if run is None else (run[0], b.end_line)
    if run is not None:
        out.append(_format_lines(*run))
    return ",".join(out)
