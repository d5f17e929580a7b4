"""Dry-run decorator for a RepositoryGateway.

Queries and the read-mostly sync operations are delegated untouched so the
readiness report is accurate. Merge, tag and push are echoed as the git
command that would have run and succeed without reaching the backend.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from typing import TYPE_CHECKING

from release_semver.core.result import Ok, Result
from release_semver.git.gateway import GatewayError, RepositoryGateway
from release_semver.output.console import ConsoleProtocol, Style

if TYPE_CHECKING:
    from release_semver.release.model import BranchRef
    from release_semver.release.semver import Version

__all__ = ["DryRunGateway"]


class DryRunGateway:
    def __init__(self, inner: RepositoryGateway, *, console: ConsoleProtocol) -> None:
        self._inner = inner
        self._console = console
        self.recorded: list[list[str]] = []

    def _record(self, cmd: list[str]) -> Result[None, GatewayError]:
        self.recorded.append(cmd)
        self._console.print(f"dry-run: {shlex.join(cmd)}", Style.DIM)
        return Ok(None)

    # Delegated

    def is_available(self) -> bool:
        return self._inner.is_available()

    def current_branch(self) -> Result[str, GatewayError]:
        return self._inner.current_branch()

    def is_working_tree_clean(self) -> Result[bool, GatewayError]:
        return self._inner.is_working_tree_clean()

    def fetch(self, upstream: str) -> Result[None, GatewayError]:
        return self._inner.fetch(upstream)

    def branch_exists_locally(self, name: str) -> bool:
        return self._inner.branch_exists_locally(name)

    def create_tracking_branch(self, name: str, upstream: str) -> Result[None, GatewayError]:
        return self._inner.create_tracking_branch(name, upstream)

    def checkout(self, name: str) -> Result[None, GatewayError]:
        return self._inner.checkout(name)

    def upstream_of(self, branch: str) -> Result[BranchRef | None, GatewayError]:
        return self._inner.upstream_of(branch)

    def ahead_behind_no_merges(self, from_: str, to: str) -> Result[int, GatewayError]:
        return self._inner.ahead_behind_no_merges(from_, to)

    def unmerged_commits(self, from_: str, to: str) -> Result[list[str], GatewayError]:
        return self._inner.unmerged_commits(from_, to)

    def fast_forward(self, branch: str, remote_ref: BranchRef) -> Result[None, GatewayError]:
        return self._inner.fast_forward(branch, remote_ref)

    def latest_tag_version(
        self, upstream: str, source_branch: str, *, match: str | None = None
    ) -> Result[Version | None, GatewayError]:
        return self._inner.latest_tag_version(upstream, source_branch, match=match)

    # Simulated

    def merge_no_fast_forward(self, branch: str, message: str) -> Result[None, GatewayError]:
        return self._record(["git", "merge", "--no-ff", "-m", message, branch])

    def create_annotated_tag(
        self, name: str, target_branch: str, message: str
    ) -> Result[None, GatewayError]:
        return self._record(["git", "tag", "-a", name, target_branch, "-m", message])

    def push(self, upstream: str, refs: Sequence[str]) -> Result[None, GatewayError]:
        return self._record(["git", "push", upstream, *refs])
