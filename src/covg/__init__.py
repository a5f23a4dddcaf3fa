"""
covg: per-function coverage report for Go packages.

Runs `go test` with a coverage profile and prints, per function, the
percentage of statements covered and the line ranges still missing coverage.

Public API surface is intentionally small; prefer using the CLI entrypoint.
"""

from __future__ import annotations

__all__ = [
    "__version__",
]

# Keep in sync with pyproject.toml.
__version__ = "0.1.0"
