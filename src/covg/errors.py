from __future__ import annotations


class CovgError(RuntimeError):
    """Base class for errors reported by covg."""


class SilentError(CovgError):
    """The process must exit with 1 but the cause was already shown to the user."""


class NoBlocksError(CovgError):
    """Raised when a function has no coverage block at all.

    This means the function scanner and the coverage profile disagree about
    the content of a file; a partial report would misstate the total.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"no coverage block found for function {name!r}")
        self.name = name


class ProfileParseError(CovgError):
    """Raised when a coverage profile is malformed."""


class SourceParseError(CovgError):
    """Raised when a Go source file cannot be scanned for functions."""


class PackageError(CovgError):
    """Raised when packages or source files cannot be located."""
