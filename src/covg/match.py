from __future__ import annotations

from collections.abc import Sequence

from .errors import NoBlocksError
from .funcs import FuncExtent
from .profile import Block


def match_blocks(func: FuncExtent, blocks: Sequence[Block]) -> Sequence[Block]:
    """
    Return the contiguous slice of `blocks` that belongs to `func`.

    Parameters
    ----------
    func : FuncExtent
        Function span, as found in the source file.
    blocks : Sequence[Block]
        All blocks of the same file, sorted by start position.

    Returns
    -------
    Sequence[Block]
        Non-empty slice of `blocks`.

    Raises
    ------
    NoBlocksError
        If no block overlaps the function.
    """
    start: int | None = None
    for i, b in enumerate(blocks):
        if b.start_line > func.end_line or (
            b.start_line == func.end_line and b.start_col >= func.end_col
        ):
            # Past the end of the function.
            if start is None:
                raise NoBlocksError(func.name)
            return blocks[start:i]
        if b.end_line < func.start_line or (
            b.end_line == func.start_line and b.end_col <= func.start_col
        ):
            continue
        if start is None:
            start = i
    if start is None:
        raise NoBlocksError(func.name)
    return blocks[start:]
