from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

COVERMODES: Final[tuple[str, ...]] = ("set", "count", "atomic")


class ConfigError(ValueError):
    """Raised when CLI/env configuration values are invalid."""


@dataclass(frozen=True, slots=True)
class Config:
    """
    Typed config used by the runner.

    Notes:
    - `packages` are package specifiers as given by the user (`.`, `./...`).
    - `test_args` are passed to `go test` verbatim, before the packages.
    """

    packages: tuple[str, ...] = (".",)
    test_args: tuple[str, ...] = ()
    go: str = "go"
    covermode: str = "count"
    show_all: bool = False
    full_paths: bool = False
    verbose: bool = False


def split_args(args: Sequence[str]) -> tuple[list[str], list[str]]:
    """
    Split positional arguments into package specifiers and `go test` arguments.

    Everything after the first `--` goes to `go test`. An argument that looks
    like a flag also starts the `go test` arguments, so `covg -run Foo` works.
    """
    for i, a in enumerate(args):
        if a == "--":
            return list(args[:i]), list(args[i + 1 :])
        if a.startswith("-"):
            return list(args[:i]), list(args[i:])
    return list(args), []


def config_from_values(
    *,
    args: Sequence[str],
    go: str,
    covermode: str,
    show_all: bool,
    full_paths: bool,
    verbose: bool,
) -> Config:
    packages, test_args = split_args(args)
    cfg = Config(
        packages=tuple(packages) or (".",),
        test_args=tuple(test_args),
        go=go.strip(),
        covermode=covermode.strip().lower(),
        show_all=show_all,
        full_paths=full_paths,
        verbose=verbose,
    )
    validate_config(cfg)
    return cfg


def validate_config(cfg: Config) -> None:
    if not cfg.go:
        raise ConfigError("go command must not be empty.")
    if cfg.covermode not in COVERMODES:
        raise ConfigError(
            f"Invalid covermode {cfg.covermode!r} (expected one of: {', '.join(COVERMODES)})"
        )
