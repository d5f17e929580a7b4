"""Git implementation of RepositoryGateway.

Every operation runs one or two git subcommands through
``release_semver.platform.process.run`` and returns a Result.

Usage:
    gateway = GitGateway(Path("/path/to/repo"), console=RichConsole())

    match gateway.current_branch():
        case Ok(branch):
            print(f"Branch: {branch}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from pathlib import Path

from release_semver.core.result import Err, Ok, Result
from release_semver.git.gateway import DivergedError, GatewayError
from release_semver.output.console import ConsoleProtocol, Style
from release_semver.platform.process import ProcessError, which
from release_semver.platform.process import run as run_process
from release_semver.release.model import BranchRef
from release_semver.release.semver import Version, coerce

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

# `git describe` exits with 128 when no tag is reachable
_DESCRIBE_NO_NAMES = 128

__all__ = ["GitGateway"]


class GitGateway:
    """RepositoryGateway backed by the git CLI.

    Attributes:
        path: Repository root (commands run with ``git -C path``)
    """

    def __init__(
        self,
        path: Path,
        *,
        console: ConsoleProtocol,
        echo_commands: bool = False,
        echo_output: bool = False,
    ) -> None:
        """Initialize the gateway.

        Args:
            path: Repository root
            console: Sink for echoed commands and output
            echo_commands: Print each git command before running it
            echo_output: Print the stdout of each git command
        """
        self.path = path
        self._console = console
        self._echo_commands = echo_commands
        self._echo_output = echo_output

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_available(self) -> bool:
        return which("git") is not None

    def current_branch(self) -> Result[str, GatewayError]:
        result = self._git(["rev-parse", "--abbrev-ref", "HEAD"])
        if isinstance(result, Err):
            return result
        branch = result.value.strip()
        if branch == "HEAD":
            return Err(
                GatewayError(command="rev-parse", message="HEAD is detached; check out a branch")
            )
        return Ok(branch)

    def is_working_tree_clean(self) -> Result[bool, GatewayError]:
        return self._git(["status", "--porcelain"]).map(lambda out: out.strip() == "")

    def branch_exists_locally(self, name: str) -> bool:
        return isinstance(self._git(["rev-parse", "--verify", "--quiet", f"refs/heads/{name}"]), Ok)

    def upstream_of(self, branch: str) -> Result[BranchRef | None, GatewayError]:
        result = self._git(
            [
                "for-each-ref",
                "--format=%(upstream:remotename)%09%(upstream:short)",
                f"refs/heads/{branch}",
            ]
        )
        if isinstance(result, Err):
            return result

        line = result.value.strip("\n")
        remote, _, short = line.partition("\t")
        if not short:
            return Ok(None)
        remotes = (remote,) if remote and remote != "." else ()
        return Ok(BranchRef.parse_short(short, remotes=remotes))

    def ahead_behind_no_merges(self, from_: str, to: str) -> Result[int, GatewayError]:
        result = self._git(["rev-list", "--count", "--no-merges", f"{from_}..{to}"])
        if isinstance(result, Err):
            return result
        return self._parse_count(result.value, command="rev-list")

    def unmerged_commits(self, from_: str, to: str) -> Result[list[str], GatewayError]:
        return self._git(["log", "--oneline", "--no-merges", f"{from_}..{to}"]).map(
            lambda out: [ln for ln in out.splitlines() if ln.strip()]
        )

    def latest_tag_version(
        self, upstream: str, source_branch: str, *, match: str | None = None
    ) -> Result[Version | None, GatewayError]:
        ref = self._git(["rev-parse", "--verify", f"refs/remotes/{upstream}/{source_branch}"])
        if isinstance(ref, Err):
            return ref

        cmd = ["describe", "--tags", "--abbrev=0"]
        if match:
            cmd.extend(["--match", match])
        cmd.append(ref.value.strip())

        described = self._git(cmd)
        if isinstance(described, Err):
            if described.error.returncode == _DESCRIBE_NO_NAMES:
                return Ok(None)
            return described
        return Ok(coerce(described.value))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def fetch(self, upstream: str) -> Result[None, GatewayError]:
        return self._git(["fetch", upstream, "--tags", "--prune"]).map(lambda _: None)

    def create_tracking_branch(self, name: str, upstream: str) -> Result[None, GatewayError]:
        remote_ref = f"refs/remotes/{upstream}/{name}"
        exists = self._git(["rev-parse", "--verify", "--quiet", remote_ref])
        if isinstance(exists, Err):
            return Err(
                GatewayError(
                    command="branch",
                    message=f"'{upstream}/{name}' does not exist",
                    returncode=exists.error.returncode,
                )
            )
        return self._git(["branch", "--track", name, f"{upstream}/{name}"]).map(lambda _: None)

    def checkout(self, name: str) -> Result[None, GatewayError]:
        return self._git(["checkout", "-q", name, "--"]).map(lambda _: None)

    def fast_forward(self, branch: str, remote_ref: BranchRef) -> Result[None, GatewayError]:
        """Fast-forward ``branch`` (which must be checked out) to ``remote_ref``."""
        local = self._git(
            ["rev-list", "--count", f"refs/remotes/{remote_ref}..refs/heads/{branch}"]
        )
        if isinstance(local, Err):
            return local
        count = self._parse_count(local.value, command="rev-list")
        if isinstance(count, Err):
            return count
        if count.value > 0:
            return Err(
                DivergedError(
                    command="merge --ff-only",
                    message=f"{branch} has local commits; can't fast-forward",
                    branch=branch,
                    local_commits=count.value,
                )
            )

        return self._git(["merge", "--ff-only", str(remote_ref)]).map(lambda _: None)

    def merge_no_fast_forward(self, branch: str, message: str) -> Result[None, GatewayError]:
        return self._git(["merge", "--no-ff", "-m", message, branch]).map(lambda _: None)

    def create_annotated_tag(
        self, name: str, target_branch: str, message: str
    ) -> Result[None, GatewayError]:
        return self._git(["tag", "-a", name, target_branch, "-m", message]).map(lambda _: None)

    def push(self, upstream: str, refs: Sequence[str]) -> Result[None, GatewayError]:
        return self._git(["push", upstream, *refs]).map(lambda _: None)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _git(self, args: list[str]) -> Result[str, GatewayError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        if self._echo_commands:
            self._console.print(shlex.join(["git", *args]), Style.DIM)

        result = run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
        match result:
            case Err(e):
                return Err(_to_gateway_error(command, e))
            case Ok(stdout):
                if self._echo_output and stdout.strip():
                    self._console.print(stdout.rstrip(), Style.DIM)
                return Ok(stdout)

    @staticmethod
    def _parse_count(output: str, *, command: str) -> Result[int, GatewayError]:
        text = output.strip()
        try:
            return Ok(int(text or "0"))
        except ValueError:
            return Err(GatewayError(command=command, message=f"unexpected count: {text!r}"))


def _to_gateway_error(command: str, error: ProcessError) -> GatewayError:
    message = error.stderr.strip() or error.stdout.strip() or f"git {command} failed"
    return GatewayError(command=command, message=message, returncode=error.returncode)
