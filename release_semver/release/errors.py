"""Error payload for aborted release runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SyncErrorKind = Literal[
    "git_missing",
    "dirty_worktree",
    "branch_missing",
    "upstream_mismatch",
    "diverged",
    "unmerged_commits",
    "git_failed",
    "invalid_version",
]

PRECONDITION_KINDS: frozenset[str] = frozenset(
    {
        "git_missing",
        "dirty_worktree",
        "branch_missing",
        "upstream_mismatch",
        "diverged",
        "unmerged_commits",
    }
)


@dataclass(frozen=True, slots=True)
class SyncError:
    """Why a release run stopped.

    Attributes:
        kind: Machine-readable failure category
        message: One-line explanation for the operator
        hint: Optional suggestion or raw git stderr
        details: Extra lines shown below the message (e.g. unmerged commits)
    """

    kind: SyncErrorKind
    message: str
    hint: str | None = None
    details: tuple[str, ...] = ()

    @property
    def is_precondition(self) -> bool:
        return self.kind in PRECONDITION_KINDS
