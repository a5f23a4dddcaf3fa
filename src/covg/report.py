from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from .coverage import aggregate, percent
from .funcs import FuncExtent, find_funcs
from .match import match_blocks
from .paths import path_offset
from .profile import Profile
from .ranges import extent_blocks, missing_blocks
from .tabwriter import TabWriter

logger = logging.getLogger(__name__)

# Name of the functions Go uses for side-effect-only declarations.
BLANK_FUNC = "_"


@dataclass(frozen=True, slots=True)
class ReportOptions:
    """
    Report settings.

    - `show_all` lists fully covered functions (with their whole span) and `_`.
    - `full_paths` disables trimming of the directories shared by all files.
    """

    show_all: bool = False
    full_paths: bool = False


@dataclass(frozen=True, slots=True)
class ReportTotals:
    covered: int
    total: int

    @property
    def percent(self) -> float:
        return percent(self.covered, self.total)


def _format_line(path: str, func: FuncExtent, covered: int, total: int, ranges: str) -> str:
    return f"{path}:{func.start_line}:\t{func.name}\t{percent(covered, total):5.1f}% {ranges}\n"


def write_report(
    profiles: Sequence[Profile],
    *,
    out: TextIO,
    options: ReportOptions,
    find_file: Callable[[str], Path],
    find_funcs: Callable[[Path], list[FuncExtent]] = find_funcs,
) -> ReportTotals:
    """
    Write the per-function coverage report of `profiles` to `out`.

    Parameters
    ----------
    profiles : Sequence[Profile]
        Parsed coverage profile, one entry per source file.
    out : TextIO
        Report sink.
    options : ReportOptions
        What to list and how to print paths.
    find_file : Callable
        Maps a profile file name to the source file on disk.
    find_funcs : Callable
        Lists the functions of a source file, sorted by position.

    Returns
    -------
    ReportTotals
        Statements covered and counted over the whole run.

    Raises
    ------
    NoBlocksError
        If a function has no coverage block; nothing is written in that case.
    """
    offset = path_offset(
        [p.file_name for p in profiles], full_paths=options.full_paths or options.show_all
    )

    tabber = TabWriter(out, minwidth=1, tabwidth=8, padding=1, padchar="\t")
    covered_sum = total_sum = 0
    for profile in profiles:
        name = profile.file_name
        path = find_file(name)
        funcs = find_funcs(path)
        logger.debug("%s: %d functions, %d blocks", path, len(funcs), len(profile.blocks))

        for func in funcs:
            # Side-effect-only declarations do not count against coverage, and
            # go test may not instrument them at all.
            if func.name == BLANK_FUNC and not options.show_all:
                continue
            blocks = match_blocks(func, profile.blocks)
            covered, total = aggregate(blocks)
            covered_sum += covered
            total_sum += total
            if covered == total:
                if options.show_all:
                    tabber.write(
                        _format_line(name[offset:], func, covered, total, extent_blocks(blocks))
                    )
                continue
            tabber.write(_format_line(name[offset:], func, covered, total, missing_blocks(blocks)))

    totals = ReportTotals(covered=covered_sum, total=total_sum)
    tabber.write(f"total:\t(statements)\t{totals.percent:5.1f}%\n")
    tabber.flush()
    return totals
