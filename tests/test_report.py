from __future__ import annotations

import io
import posixpath
from pathlib import Path

import pytest

from covg.errors import NoBlocksError
from covg.funcs import FuncExtent
from covg.profile import Block, Profile
from covg.report import ReportOptions, write_report


def _locator(testdata: Path):
    def find_file(name: str) -> Path:
        return testdata / "testpkg" / posixpath.basename(name)

    return find_file


def test_write_report_lists_functions_missing_coverage(
    fixture_profile: Profile, testdata: Path
) -> None:
    out = io.StringIO()
    totals = write_report(
        [fixture_profile], out=out, options=ReportOptions(), find_file=_locator(testdata)
    )
    assert out.getvalue() == (
        "testpkg.go:11:\tuntested\t  0.0% 11-13\n"
        "testpkg.go:15:\tpartlytested\t 80.0% 17-19\n"
        "total:\t\t(statements)\t 71.4%\n"
    )
    assert (totals.covered, totals.total) == (5, 7)


def test_write_report_show_all(fixture_profile: Profile, testdata: Path) -> None:
    out = io.StringIO()
    write_report(
        [fixture_profile],
        out=out,
        options=ReportOptions(show_all=True),
        find_file=_locator(testdata),
    )
    assert out.getvalue() == (
        "example.com/covg/testpkg/testpkg.go:7:\ttested\t\t100.0% 7-9\n"
        "example.com/covg/testpkg/testpkg.go:11:\tuntested\t  0.0% 11-13\n"
        "example.com/covg/testpkg/testpkg.go:15:\tpartlytested\t 80.0% 17-19\n"
        "total:\t\t\t\t\t(statements)\t 71.4%\n"
    )


def test_write_report_full_paths_without_show_all(
    fixture_profile: Profile, testdata: Path
) -> None:
    out = io.StringIO()
    write_report(
        [fixture_profile],
        out=out,
        options=ReportOptions(full_paths=True),
        find_file=_locator(testdata),
    )
    first = out.getvalue().splitlines()[0]
    assert first.startswith("example.com/covg/testpkg/testpkg.go:11:\t")


_BLANK_PROFILE = Profile(
    file_name="example.com/p/a.go",
    mode="count",
    blocks=(
        Block(1, 10, 3, 2, num_stmt=1, count=0),
        Block(5, 10, 7, 2, num_stmt=2, count=1),
    ),
)


def _blank_funcs(_: Path) -> list[FuncExtent]:
    return [FuncExtent("_", 1, 1, 3, 2), FuncExtent("f", 5, 1, 7, 2)]


def test_write_report_ignores_blank_functions() -> None:
    out = io.StringIO()
    totals = write_report(
        [_BLANK_PROFILE],
        out=out,
        options=ReportOptions(),
        find_file=Path,
        find_funcs=_blank_funcs,
    )
    assert out.getvalue() == "total:\t(statements)\t100.0%\n"
    assert (totals.covered, totals.total) == (2, 2)


def test_write_report_show_all_counts_blank_functions() -> None:
    out = io.StringIO()
    totals = write_report(
        [_BLANK_PROFILE],
        out=out,
        options=ReportOptions(show_all=True),
        find_file=Path,
        find_funcs=_blank_funcs,
    )
    assert out.getvalue() == (
        "example.com/p/a.go:1:\t_\t\t  0.0% 1-3\n"
        "example.com/p/a.go:5:\tf\t\t100.0% 5-7\n"
        "total:\t\t\t(statements)\t 66.7%\n"
    )
    assert (totals.covered, totals.total) == (2, 3)


def test_write_report_empty_profile() -> None:
    out = io.StringIO()
    totals = write_report([], out=out, options=ReportOptions(), find_file=Path)
    assert out.getvalue() == "total:\t(statements)\t100.0%\n"
    assert totals.percent == 100.0


def test_write_report_aborts_when_a_function_has_no_blocks(
    fixture_profile: Profile, testdata: Path
) -> None:
    truncated = Profile(
        file_name=fixture_profile.file_name,
        mode=fixture_profile.mode,
        blocks=fixture_profile.blocks[:1] + fixture_profile.blocks[2:],
    )
    out = io.StringIO()
    with pytest.raises(NoBlocksError) as exc:
        write_report([truncated], out=out, options=ReportOptions(), find_file=_locator(testdata))
    assert exc.value.name == "untested"
    assert out.getvalue() == ""


def test_write_report_skips_uninstrumented_blank_functions() -> None:
    # go test does not instrument `func _()`, e.g. in stringer output.
    profile = Profile(
        file_name="example.com/p/a.go",
        mode="count",
        blocks=(Block(5, 10, 7, 2, num_stmt=2, count=1),),
    )
    out = io.StringIO()
    totals = write_report(
        [profile], out=out, options=ReportOptions(), find_file=Path, find_funcs=_blank_funcs
    )
    assert out.getvalue() == "total:\t(statements)\t100.0%\n"
    assert (totals.covered, totals.total) == (2, 2)

    with pytest.raises(NoBlocksError) as exc:
        write_report(
            [profile],
            out=io.StringIO(),
            options=ReportOptions(show_all=True),
            find_file=Path,
            find_funcs=_blank_funcs,
        )
    assert exc.value.name == "_"
