"""
Elastic tabstops for plain-text reports.

Text is buffered until `flush()`. Each line is split into cells on `\t`; a
column block is a run of consecutive lines that all have a tab-terminated
cell in that column, and every cell of a block is padded to the block's
widest cell plus `padding`. The cell after the last tab of a line is never
padded. This matches the layout of Go's `text/tabwriter` (left alignment,
no flags), so reports line up the same way as `go tool cover -func`.
"""

from __future__ import annotations

from typing import TextIO


class TabWriter:
    def __init__(
        self,
        out: TextIO,
        *,
        minwidth: int = 0,
        tabwidth: int = 8,
        padding: int = 1,
        padchar: str = "\t",
    ) -> None:
        if minwidth < 0 or tabwidth < 0 or padding < 0:
            raise ValueError("minwidth, tabwidth and padding must be >= 0")
        if len(padchar) != 1:
            raise ValueError("padchar must be a single character")
        self._out = out
        self._minwidth = minwidth
        self._tabwidth = tabwidth
        self._padding = padding
        self._padchar = padchar
        self._parts: list[str] = []

    def write(self, text: str) -> int:
        self._parts.append(text)
        return len(text)

    def flush(self) -> None:
        """Format everything written so far and write it to the underlying stream."""
        text = "".join(self._parts)
        self._parts.clear()
        if not text:
            return
        lines = [line.split("\t") for line in text.split("\n")]
        self._out.write(self._format(lines))

    def __enter__(self) -> TabWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush()

    def _pad(self, textw: int, cellw: int) -> str:
        if self._padchar == "\t":
            if self._tabwidth == 0:
                return ""
            # Round the cell up to the next tab stop.
            cellw = -(-cellw // self._tabwidth) * self._tabwidth
            return "\t" * -(-(cellw - textw) // self._tabwidth)
        return self._padchar * (cellw - textw)

    def _format(self, lines: list[list[str]]) -> str:
        widths: list[int] = []
        out: list[str] = []

        def write_lines(line0: int, line1: int) -> None:
            for cells in lines[line0:line1]:
                parts: list[str] = []
                for j, cell in enumerate(cells):
                    parts.append(cell)
                    if j < len(cells) - 1 and j < len(widths):
                        parts.append(self._pad(len(cell), widths[j]))
                out.append("".join(parts))

        def fmt(line0: int, line1: int) -> None:
            column = len(widths)
            this = line0
            while this < line1:
                if column >= len(lines[this]) - 1:
                    this += 1
                    continue
                # A new column block starts at this line.
                write_lines(line0, this)
                line0 = this
                width = self._minwidth
                while this < line1 and column < len(lines[this]) - 1:
                    width = max(width, len(lines[this][column]) + self._padding)
                    this += 1
                widths.append(width)
                fmt(line0, this)
                widths.pop()
                line0 = this
            write_lines(line0, line1)

        fmt(0, len(lines))
        return "\n".join(out)
