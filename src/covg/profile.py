from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import ProfileParseError

_MODE_PREFIX: Final[str] = "mode: "
_MODES: Final[frozenset[str]] = frozenset({"set", "count", "atomic"})
_BLOCK_RE: Final[re.Pattern[str]] = re.compile(
    r"^(.+):(\d+)\.(\d+),(\d+)\.(\d+) (\d+) (\d+)$"
)


@dataclass(frozen=True, slots=True, order=True)
class Block:
    """One coverage unit of a source file.

    Ordering compares the start position first, which is the order blocks are
    stored in a `Profile`.
    """

    start_line: int
    start_col: int
    end_line: int
    end_col: int
    num_stmt: int
    count: int


@dataclass(frozen=True, slots=True)
class Profile:
    """Coverage blocks of one instrumented source file, sorted by start position."""

    file_name: str
    mode: str
    blocks: tuple[Block, ...]


def parse_profiles(path: Path) -> list[Profile]:
    """Read a Go coverage profile file (`go test -coverprofile`)."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ProfileParseError(f"cannot read coverage profile {path}: {e}") from e
    return parse_profile_text(text, source=str(path))


def parse_profile_text(text: str, *, source: str = "<profile>") -> list[Profile]:
    """
    Parse the text of a Go coverage profile.

    Format:
        mode: count
        example.com/pkg/file.go:7.22,9.2 1 3

    Notes:
    - Blocks are grouped per file and sorted by (start line, start column).
    - The same block listed twice (e.g. concatenated profiles) is merged:
      counts are added, or OR-ed in `set` mode.
    - Profiles are returned sorted by file name.
    """
    mode: str | None = None
    files: dict[str, dict[tuple[int, int, int, int], Block]] = {}

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        if line.startswith(_MODE_PREFIX):
            m = line[len(_MODE_PREFIX) :].strip()
            if m not in _MODES:
                raise ProfileParseError(f"{source}:{lineno}: unknown coverage mode {m!r}")
            if mode is not None and m != mode:
                raise ProfileParseError(
                    f"{source}:{lineno}: mode {m!r} conflicts with earlier mode {mode!r}"
                )
            mode = m
            continue

        if mode is None:
            raise ProfileParseError(f"{source}:{lineno}: missing 'mode:' line before blocks")

        match = _BLOCK_RE.match(line)
        if match is None:
            raise ProfileParseError(f"{source}:{lineno}: malformed line {line!r}")

        file_name = match.group(1)
        b = Block(*(int(g) for g in match.groups()[1:]))
        if (b.end_line, b.end_col) < (b.start_line, b.start_col):
            raise ProfileParseError(f"{source}:{lineno}: block ends before it starts")

        blocks = files.setdefault(file_name, {})
        key = (b.start_line, b.start_col, b.end_line, b.end_col)
        prev = blocks.get(key)
        if prev is None:
            blocks[key] = b
            continue
        if prev.num_stmt != b.num_stmt:
            raise ProfileParseError(
                f"{source}:{lineno}: inconsistent statement count for {file_name}:"
                f"{b.start_line}.{b.start_col},{b.end_line}.{b.end_col}"
            )
        if mode == "set":
            count = 1 if prev.count or b.count else 0
        else:
            count = prev.count + b.count
        blocks[key] = Block(*key, num_stmt=b.num_stmt, count=count)

    if mode is None:
        return []

    return [
        Profile(file_name=name, mode=mode, blocks=tuple(sorted(files[name].values())))
        for name in sorted(files)
    ]
