from __future__ import annotations

from collections.abc import Iterable

from .profile import Block


def aggregate(blocks: Iterable[Block]) -> tuple[int, int]:
    """Return (covered statements, total statements); a block is covered as a whole or not at all."""
    covered = total = 0
    for b in blocks:
        total += b.num_stmt
        if b.count > 0:
            covered += b.num_stmt
    return covered, total


def percent(covered: int, total: int) -> float:
    if total == 0:
        return 100.0
    return 100.0 * covered / total
