from __future__ import annotations

import logging
import sys
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import ConfigError, config_from_values
from .errors import CovgError, SilentError
from .exec import ExecError, Interrupted
from .run import run_cover

app = typer.Typer(
    add_completion=False,
    pretty_exceptions_enable=False,
    help="Run Go tests under coverage and report coverage per function.",
)


def _setup_logging(verbose: bool) -> None:
    # Diagnostics go to stderr; stdout carries only the test output and the report.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        # Like go test, stop parsing our flags at the first package.
        "allow_interspersed_args": False,
    },
)
def run(
    ctx: typer.Context,
    args: Annotated[
        list[str] | None,
        typer.Argument(
            help="Packages to test (default: .), optionally followed by -- and go test arguments.",
            show_default=False,
        ),
    ] = None,
    show_all: Annotated[
        bool,
        typer.Option(
            "-a",
            "--all",
            help="Show functions with 100% coverage and full paths.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "-v",
            "--verbose",
            help="Enable logging.",
        ),
    ] = False,
    full_paths: Annotated[
        bool,
        typer.Option(
            "--full-paths",
            help="Print file names as found in the coverage profile.",
        ),
    ] = False,
    go: Annotated[
        str,
        typer.Option(
            "--go",
            help="go command to run.",
            envvar="COVG_GO",
        ),
    ] = "go",
    covermode: Annotated[
        str,
        typer.Option(
            "--covermode",
            help="Coverage mode passed to go test (set|count|atomic).",
            envvar="COVG_COVERMODE",
        ),
    ] = "count",
) -> None:
    """
    Run `go test` with a coverage profile and print, per function, the
    percentage of statements covered and the line ranges missing coverage.
    """
    _setup_logging(verbose)

    positional = [*(args or []), *ctx.args]
    if ctx.obj:
        # Arguments after `--` on the command line, set aside by main().
        positional = [*positional, *ctx.obj]

    try:
        cfg = config_from_values(
            args=positional,
            go=go,
            covermode=covermode,
            show_all=show_all,
            full_paths=full_paths,
            verbose=verbose,
        )
    except ConfigError as e:
        typer.secho(f"CONFIG ERROR: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from e

    try:
        run_cover(cfg, out=sys.stdout)
    except SilentError:
        raise typer.Exit(code=1) from None
    except (CovgError, ExecError) as e:
        typer.secho(f"covg: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from None
    except (KeyboardInterrupt, Interrupted):
        raise typer.Exit(code=1) from None


def main(argv: list[str] | None = None) -> None:
    """
    Programmatic entrypoint used by `project.scripts`.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    # Click drops `--` and would parse flags meant for go test (e.g. `-v`)
    # as ours, so keep everything from `--` on out of its sight.
    passthrough: list[str] = []
    if "--" in argv:
        i = argv.index("--")
        argv, passthrough = argv[:i], argv[i:]
    app(args=argv, prog_name="covg", obj=passthrough)


if __name__ == "__main__":
    main()
