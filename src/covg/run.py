from __future__ import annotations

import functools
import logging
import os
import tempfile
from pathlib import Path
from typing import TextIO

from .config import Config
from .errors import CovgError, PackageError, SilentError
from .exec import Interrupted
from .gotool import find_file, find_packages, get_packages, go_test
from .profile import parse_profiles
from .report import ReportOptions, ReportTotals, write_report

logger = logging.getLogger(__name__)


def print_coverage(profile_path: Path, cfg: Config, *, out: TextIO) -> ReportTotals:
    """Write the per-function report of an existing coverage profile."""
    profiles = parse_profiles(profile_path)
    packages = find_packages(profiles, go=cfg.go)
    return write_report(
        profiles,
        out=out,
        options=ReportOptions(show_all=cfg.show_all, full_paths=cfg.full_paths),
        find_file=functools.partial(find_file, packages),
    )


def _create_profile_file() -> Path:
    try:
        fd, name = tempfile.mkstemp(prefix="covg")
    except OSError as e:
        raise CovgError(f"cannot create coverage file: {e}") from e
    os.close(fd)
    return Path(name)


def _run_and_report(packages: list[str], profile_path: Path, cfg: Config, out: TextIO) -> ReportTotals:
    try:
        rc = go_test(
            packages,
            profile_path=profile_path,
            sink=out,
            go=cfg.go,
            covermode=cfg.covermode,
            extra_args=cfg.test_args,
        )
    except Interrupted as e:
        raise SilentError("interrupted") from e
    if rc != 0:
        # go test already explained the failure on stderr.
        raise SilentError(f"go test exited with code {rc}")
    try:
        return print_coverage(profile_path, cfg, out=out)
    except Interrupted as e:
        # Ctrl-C while go list locates the packages.
        raise SilentError("interrupted") from e


def run_cover(cfg: Config, *, out: TextIO) -> ReportTotals:
    """
    Run the tests of `cfg.packages` under coverage, then print the report.

    Exactly one temporary coverage file is used; it is removed on every path.

    Raises
    ------
    PackageError
        If the package specifiers do not resolve; `go test` is not started.
    SilentError
        If `go test` fails or is interrupted.
    CovgError
        If the report cannot be produced.
    """
    try:
        packages = get_packages(cfg.packages, go=cfg.go)
    except Interrupted as e:
        raise SilentError("interrupted") from e
    if not packages:
        raise PackageError("invalid path")
    logger.debug("run_cover(%s, %s, all=%s)", packages, list(cfg.test_args), cfg.show_all)

    profile_path = _create_profile_file()
    try:
        totals = _run_and_report(packages, profile_path, cfg, out)
    except BaseException:
        try:
            profile_path.unlink(missing_ok=True)
        except OSError as e:
            # Report the error that got us here instead.
            logger.warning("cannot remove %s: %s", profile_path, e)
        raise

    try:
        profile_path.unlink(missing_ok=True)
    except OSError as e:
        raise CovgError(f"cannot remove {profile_path}: {e}") from e
    return totals
