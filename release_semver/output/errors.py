"""Error presentation utilities.

Centralized error formatting and exit code mapping for the release command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from release_semver.core.errors import ErrorCode
from release_semver.output.console import Style

if TYPE_CHECKING:
    from release_semver.output.console import ConsoleProtocol
    from release_semver.release.errors import SyncError

__all__ = ["print_sync_error", "sync_error_exit_code"]


def print_sync_error(error: SyncError, console: ConsoleProtocol) -> None:
    """Print an abort reason, its hint and any detail lines."""
    if error.is_precondition:
        console.error(error.message)
    else:
        console.error(f"The following error occurred: {error.message}")
    if error.kind == "unmerged_commits" and error.details:
        console.print("Please merge the following commits back first:", Style.BOLD)

    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    for line in error.details:
        console.print(f"  {line}", Style.DIM)


def sync_error_exit_code(error: SyncError) -> int:
    """Every abort maps to the same exit status."""
    del error
    return int(ErrorCode.ABORTED)
