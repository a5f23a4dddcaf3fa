from __future__ import annotations

import json
import logging
import os
import posixpath
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from .errors import PackageError
from .exec import run_capture, run_streaming
from .profile import Profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Package:
    """One entry of `go list -json`."""

    import_path: str
    dir: str
    error: str | None = None


def _is_local(file_name: str) -> bool:
    # Profiles name files by import path, unless the package was given as a path.
    return file_name.startswith(".") or os.path.isabs(file_name)


def _iter_json_objects(text: str) -> Iterable[dict]:
    # `go list -json` prints a stream of objects, not an array.
    decoder = json.JSONDecoder()
    pos = 0
    while True:
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text):
            return
        try:
            obj, pos = decoder.raw_decode(text, pos)
        except json.JSONDecodeError as e:
            raise PackageError(f"cannot parse go list output: {e}") from e
        if isinstance(obj, dict):
            yield obj


def parse_go_list_json(text: str) -> dict[str, Package]:
    pkgs: dict[str, Package] = {}
    for obj in _iter_json_objects(text):
        import_path = str(obj.get("ImportPath", ""))
        err = obj.get("Error")
        pkgs[import_path] = Package(
            import_path=import_path,
            dir=str(obj.get("Dir", "")),
            error=str(err.get("Err", "")) if isinstance(err, dict) else None,
        )
    return pkgs


def find_packages(profiles: Sequence[Profile], *, go: str = "go") -> dict[str, Package]:
    """
    Locate on disk the package of every file named in `profiles`.

    Runs a single `go list -e -json` over the distinct package import paths.
    Files named by relative or absolute path need no lookup.
    """
    wanted: list[str] = []
    for profile in profiles:
        if _is_local(profile.file_name):
            continue
        pkg = posixpath.dirname(profile.file_name)
        if pkg not in wanted:
            wanted.append(pkg)
    if not wanted:
        return {}

    res = run_capture([go, "list", "-e", "-json", *wanted])
    if res.returncode != 0:
        raise PackageError(f"go list failed with exit code {res.returncode}")
    return parse_go_list_json(res.stdout)


def find_file(packages: dict[str, Package], file_name: str) -> Path:
    """Map a file name from a coverage profile to the source file on disk."""
    if _is_local(file_name):
        return Path(file_name)
    pkg = packages.get(posixpath.dirname(file_name))
    if pkg is not None:
        if pkg.dir:
            return Path(pkg.dir) / posixpath.basename(file_name)
        if pkg.error:
            raise PackageError(pkg.error)
    raise PackageError(f"did not find package for {file_name} in go list output")


def get_packages(args: Sequence[str], *, go: str = "go") -> list[str]:
    """
    Resolve package specifiers (`.`, `./...`, import paths) to sorted import paths.

    Returns an empty list when `go list` rejects the specifiers.
    """
    res = run_capture([go, "list", "-f", "{{.ImportPath}}", *args])
    if res.returncode != 0:
        return []
    pkgs = sorted(line.strip() for line in res.stdout.splitlines() if line.strip())
    logger.debug("packages: %s", " ".join(pkgs))
    return pkgs


def go_test(
    packages: Sequence[str],
    *,
    profile_path: Path,
    sink: TextIO,
    go: str = "go",
    covermode: str = "count",
    extra_args: Sequence[str] = (),
) -> int:
    """Run `go test` with a coverage profile; its stdout is copied into `sink`."""
    argv = [
        go,
        "test",
        f"-covermode={covermode}",
        "-coverprofile",
        str(profile_path),
        *extra_args,
        *packages,
    ]
    return run_streaming(argv, sink=sink)
