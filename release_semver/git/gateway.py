"""Repository capabilities consumed by the release engine.

RepositoryGateway is the only seam through which the engine reads or mutates
the working tree, branches, tags and remotes. GitGateway implements it with
the git CLI; tests use an in-memory fake.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from release_semver.core.result import Result

if TYPE_CHECKING:
    from release_semver.release.model import BranchRef
    from release_semver.release.semver import Version

__all__ = ["DivergedError", "GatewayError", "RepositoryGateway"]


@dataclass(frozen=True, slots=True)
class GatewayError:
    """Error from a repository operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class DivergedError(GatewayError):
    """A fast-forward was refused because the local branch has its own commits."""

    branch: str = ""
    local_commits: int = 0


class RepositoryGateway(Protocol):
    """Query and mutation primitives of the repository backend."""

    def is_available(self) -> bool:
        """True if the backend tool can be run."""
        ...

    def current_branch(self) -> Result[str, GatewayError]: ...

    def is_working_tree_clean(self) -> Result[bool, GatewayError]: ...

    def fetch(self, upstream: str) -> Result[None, GatewayError]:
        """Update remote-tracking branches and tags, pruning stale ones."""
        ...

    def branch_exists_locally(self, name: str) -> bool: ...

    def create_tracking_branch(self, name: str, upstream: str) -> Result[None, GatewayError]:
        """Create ``name`` from ``upstream/name``; fails if the remote branch is absent."""
        ...

    def checkout(self, name: str) -> Result[None, GatewayError]: ...

    def upstream_of(self, branch: str) -> Result[BranchRef | None, GatewayError]: ...

    def ahead_behind_no_merges(self, from_: str, to: str) -> Result[int, GatewayError]:
        """Count non-merge commits reachable from ``to`` but not from ``from_``."""
        ...

    def unmerged_commits(self, from_: str, to: str) -> Result[list[str], GatewayError]:
        """One-line log of the commits counted by ahead_behind_no_merges."""
        ...

    def fast_forward(self, branch: str, remote_ref: BranchRef) -> Result[None, GatewayError]:
        """Advance ``branch`` to ``remote_ref``; DivergedError if it cannot."""
        ...

    def latest_tag_version(
        self, upstream: str, source_branch: str, *, match: str | None = None
    ) -> Result[Version | None, GatewayError]:
        """Version of the nearest tag reachable from ``upstream/source_branch``.

        ``match`` restricts the candidate tags to a glob (e.g. ``app/*``).
        Returns Ok(None) when no tag is reachable.
        """
        ...

    def merge_no_fast_forward(self, branch: str, message: str) -> Result[None, GatewayError]: ...

    def create_annotated_tag(
        self, name: str, target_branch: str, message: str
    ) -> Result[None, GatewayError]: ...

    def push(self, upstream: str, refs: Sequence[str]) -> Result[None, GatewayError]:
        """Push every ref in a single invocation."""
        ...
