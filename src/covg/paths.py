from __future__ import annotations

import posixpath
from collections.abc import Iterable


def common_prefix(a: str, b: str) -> str:
    """Character-wise common prefix; it may stop in the middle of a directory name."""
    n = min(len(a), len(b))
    i = 0
    while i < n and a[i] == b[i]:
        i += 1
    return a[:i]


def path_offset(file_names: Iterable[str], *, full_paths: bool = False) -> int:
    """
    Return how many leading characters to strip from every reported file name.

    The offset covers the directories shared by all files plus the separator
    that follows them, e.g. `example.com/pkg/a.go` and `example.com/pkg/b.go`
    are printed as `a.go` and `b.go`.
    """
    if full_paths:
        return 0

    dirs = [posixpath.dirname(name) for name in file_names]
    if not dirs:
        return 0

    prefix = dirs[0]
    for d in dirs[1:]:
        prefix = common_prefix(prefix, d)

    # A prefix ending on a separator keeps it; it is counted once below.
    prefix = prefix.removesuffix("/")
    if not prefix:
        return 0
    # Also trim the trailing path separator.
    return len(prefix) + 1
