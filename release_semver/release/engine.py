"""Ordered validation and release pipeline.

SyncEngine walks a fixed list of stages. Each stage handler receives the
current SyncState and either advances (possibly with updated fields),
finishes the run early (operator cancelled), or fails with a SyncError that
aborts the run. Stages never repeat and nothing is retried.

Only merge, tag and push change what the remote will see; every check before
them runs first so a failed precondition never leaves partial work behind.
There is no rollback once those stages start.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from typing import Literal

from release_semver.core.config import Options
from release_semver.core.result import Err, Ok, Result
from release_semver.git.dry_run import DryRunGateway
from release_semver.git.gateway import DivergedError, GatewayError, RepositoryGateway
from release_semver.output.console import ConsoleProtocol
from release_semver.release.chooser import VersionChooser
from release_semver.release.errors import SyncError
from release_semver.release.model import BranchRef, ReleaseTag, RunOutcome, VersionCandidates
from release_semver.release.oracle import latest_version
from release_semver.release.semver import Version

Stage = Literal[
    "preflight",
    "clean_workdir",
    "refresh",
    "source_resolve",
    "target_resolve",
    "upstream_check",
    "fast_forward",
    "uptodate_check",
    "version_resolve",
    "version_choice",
    "release_commit",
    "release_tag",
    "release_push",
]

STAGES: tuple[Stage, ...] = (
    "preflight",
    "clean_workdir",
    "refresh",
    "source_resolve",
    "target_resolve",
    "upstream_check",
    "fast_forward",
    "uptodate_check",
    "version_resolve",
    "version_choice",
    "release_commit",
    "release_tag",
    "release_push",
)


@dataclass(frozen=True, slots=True)
class SyncState:
    """Everything a run has learned so far; discarded when the run ends."""

    stage: Stage
    source_branch: str
    target_branch: str
    upstream: str
    original_branch: str | None = None
    current_version: Version | None = None
    candidate_version: Version | None = None
    tag: ReleaseTag | None = None

    @property
    def single_branch(self) -> bool:
        return self.source_branch == self.target_branch

    def branches(self) -> tuple[str, ...]:
        """Source, then target when it is a different branch."""
        if self.single_branch:
            return (self.source_branch,)
        return (self.source_branch, self.target_branch)


@dataclass(frozen=True, slots=True)
class StepAdvance:
    state: SyncState


@dataclass(frozen=True, slots=True)
class StepFinish:
    outcome: RunOutcome


StepOutcome = StepAdvance | StepFinish
StepHandler = Callable[[SyncState], Result[StepOutcome, SyncError]]


def advance(state: SyncState) -> Result[StepOutcome, SyncError]:
    return Ok(StepAdvance(state=state))


def finish(outcome: RunOutcome) -> Result[StepOutcome, SyncError]:
    return Ok(StepFinish(outcome=outcome))


def git_failed(error: GatewayError) -> SyncError:
    return SyncError(
        kind="git_failed",
        message=error.message,
        hint=f"git {error.command} (exit {error.returncode})",
    )


def _role(state: SyncState, branch: str) -> str:
    return "Source" if branch == state.source_branch else "Target"


def format_release_date(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


class SyncEngine:
    """Runs one guarded release against a repository.

    Attributes:
        visited: Stages entered during the last run, in order
    """

    def __init__(
        self,
        *,
        gateway: RepositoryGateway,
        options: Options,
        chooser: VersionChooser,
        console: ConsoleProtocol,
        today: Callable[[], date] = date.today,
    ) -> None:
        if options.dry_run:
            gateway = DryRunGateway(gateway, console=console)
        self._gateway: RepositoryGateway = gateway
        self._options = options
        self._chooser = chooser
        self._console = console
        self._today = today
        self._state: SyncState | None = None
        self._moved_head = False
        self.visited: list[Stage] = []

    @property
    def handlers(self) -> Mapping[Stage, StepHandler]:
        return {
            "preflight": self._preflight,
            "clean_workdir": self._clean_workdir,
            "refresh": self._refresh,
            "source_resolve": self._source_resolve,
            "target_resolve": self._target_resolve,
            "upstream_check": self._upstream_check,
            "fast_forward": self._fast_forward,
            "uptodate_check": self._uptodate_check,
            "version_resolve": self._version_resolve,
            "version_choice": self._version_choice,
            "release_commit": self._release_commit,
            "release_tag": self._release_tag,
            "release_push": self._release_push,
        }

    def run(self) -> Result[RunOutcome, SyncError]:
        """Run every stage in order; always restore the original branch."""
        self.visited = []
        self._moved_head = False
        self._state = SyncState(
            stage=STAGES[0],
            source_branch=self._options.source_branch,
            target_branch=self._options.target_branch,
            upstream=self._options.upstream,
        )
        try:
            return self._drive()
        finally:
            self._restore()

    def _drive(self) -> Result[RunOutcome, SyncError]:
        handlers = self.handlers
        assert self._state is not None

        for stage in STAGES:
            self.visited.append(stage)
            outcome = handlers[stage](replace(self._state, stage=stage))
            if isinstance(outcome, Err):
                return outcome

            step = outcome.value
            if isinstance(step, StepFinish):
                return Ok(step.outcome)
            self._state = step.state

        raise AssertionError("release_push must finish the run")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _checkout(self, branch: str) -> Result[None, SyncError]:
        self._moved_head = True
        result = self._gateway.checkout(branch)
        if isinstance(result, Err):
            return Err(git_failed(result.error))
        return Ok(None)

    def _resolve_branch(self, state: SyncState, branch: str) -> Result[None, SyncError]:
        if self._gateway.branch_exists_locally(branch):
            return Ok(None)

        role = _role(state, branch)
        self._console.info(f"{role} branch '{branch}' does not exist locally, creating it...")
        created = self._gateway.create_tracking_branch(branch, state.upstream)
        if isinstance(created, Err) or not self._gateway.branch_exists_locally(branch):
            hint = created.error.message if isinstance(created, Err) else None
            return Err(
                SyncError(
                    kind="branch_missing",
                    message=f"{role} branch '{branch}' does not exist at upstream '{state.upstream}'.",
                    hint=hint,
                )
            )
        return Ok(None)

    def _restore(self) -> None:
        state = self._state
        if state is None or state.original_branch is None or not self._moved_head:
            return
        result = self._gateway.checkout(state.original_branch)
        if isinstance(result, Err):
            self._console.warning(
                f"could not return to branch '{state.original_branch}': {result.error.message}"
            )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _preflight(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        if not self._gateway.is_available():
            return Err(
                SyncError(
                    kind="git_missing",
                    message="Could not find git, which is required for this script to run.",
                )
            )
        current = self._gateway.current_branch()
        if isinstance(current, Err):
            return Err(git_failed(current.error))
        return advance(replace(state, original_branch=current.value))

    def _clean_workdir(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        clean = self._gateway.is_working_tree_clean()
        if isinstance(clean, Err):
            return Err(git_failed(clean.error))
        if not clean.value:
            return Err(
                SyncError(
                    kind="dirty_worktree",
                    message="Working dir must be clean. Please stage and commit your changes.",
                )
            )
        self._console.success("Working dir is clean.")
        return advance(state)

    def _refresh(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        fetched = self._gateway.fetch(state.upstream)
        if isinstance(fetched, Err):
            return Err(git_failed(fetched.error))
        self._console.success("Repo updated.")
        return advance(state)

    def _source_resolve(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        resolved = self._resolve_branch(state, state.source_branch)
        if isinstance(resolved, Err):
            return resolved
        checked = self._checkout(state.source_branch)
        if isinstance(checked, Err):
            return checked
        self._console.success(f"Source branch '{state.source_branch}' found.")
        return advance(state)

    def _target_resolve(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        if state.single_branch:
            return advance(state)
        resolved = self._resolve_branch(state, state.target_branch)
        if isinstance(resolved, Err):
            return resolved
        self._console.success(f"Target branch '{state.target_branch}' found.")
        return advance(state)

    def _upstream_check(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        for branch in state.branches():
            expected = BranchRef(name=branch, remote=state.upstream)
            actual = self._gateway.upstream_of(branch)
            if isinstance(actual, Err):
                return Err(git_failed(actual.error))
            if actual.value != expected:
                role = _role(state, branch)
                return Err(
                    SyncError(
                        kind="upstream_mismatch",
                        message=f"{role} branch '{branch}' does not have upstream '{expected}'.",
                        hint=f"git branch --set-upstream-to={expected} {branch}",
                    )
                )
            self._console.success(f"{_role(state, branch)} branch '{branch}' tracks '{expected}'.")
        return advance(state)

    def _fast_forward(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        for branch in state.branches():
            checked = self._checkout(branch)
            if isinstance(checked, Err):
                return checked
            synced = self._gateway.fast_forward(branch, BranchRef(name=branch, remote=state.upstream))
            if isinstance(synced, Err):
                e = synced.error
                if isinstance(e, DivergedError):
                    return Err(
                        SyncError(
                            kind="diverged",
                            message=e.message,
                            hint=f"push or reset the {e.local_commits} local commit(s) on '{branch}'",
                        )
                    )
                return Err(git_failed(e))

        if not state.single_branch:
            checked = self._checkout(state.source_branch)
            if isinstance(checked, Err):
                return checked
        self._console.success("Branches synchronized.")
        return advance(state)

    def _uptodate_check(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        if state.single_branch:
            return advance(state)

        count = self._gateway.ahead_behind_no_merges(state.source_branch, state.target_branch)
        if isinstance(count, Err):
            return Err(git_failed(count.error))
        if count.value > 0:
            hint = f"git checkout {state.source_branch} && git merge {state.target_branch}"
            commits = self._gateway.unmerged_commits(state.source_branch, state.target_branch)
            details: tuple[str, ...] = ()
            if isinstance(commits, Ok):
                details = tuple(commits.value)
            else:
                hint += f"; could not list the commits: {commits.error.message}"
            return Err(
                SyncError(
                    kind="unmerged_commits",
                    message=(
                        f"Not all commits on {state.target_branch} are merged back into "
                        f"{state.source_branch} ({count.value} missing)."
                    ),
                    hint=hint,
                    details=details,
                )
            )
        self._console.success("Everything is up to date.")
        return advance(state)

    def _version_resolve(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        found = latest_version(self._gateway, self._options)
        if isinstance(found, Err):
            return Err(git_failed(found.error))
        if found.value == Version.zero():
            self._console.info("No version found, starting with 0.0.0.")
        else:
            self._console.success(f"Latest version is {found.value}.")
        return advance(replace(state, current_version=found.value))

    def _version_choice(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        current = state.current_version or Version.zero()
        chosen = self._chooser.choose(VersionCandidates.from_current(current))
        if chosen is None:
            self._console.info("No version selected; nothing was merged, tagged or pushed.")
            return finish(RunOutcome(status="cancelled"))
        if chosen <= current:
            return Err(
                SyncError(
                    kind="invalid_version",
                    message=f"new version {chosen} must be greater than {current}",
                )
            )
        tag = ReleaseTag(prefix=self._options.prefix, version=chosen)
        return advance(replace(state, candidate_version=chosen, tag=tag))

    def _release_commit(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        if state.single_branch:
            return advance(state)
        assert state.tag is not None

        checked = self._checkout(state.target_branch)
        if isinstance(checked, Err):
            return checked
        message = (
            f"Merge branch '{state.source_branch}' into {state.target_branch} for '{state.tag}'"
        )
        merged = self._gateway.merge_no_fast_forward(state.source_branch, message)
        if isinstance(merged, Err):
            return Err(git_failed(merged.error))
        self._console.success(f"Merged {state.source_branch} into {state.target_branch}.")
        return advance(state)

    def _release_tag(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        assert state.tag is not None
        message = f"Version {state.tag} released on {format_release_date(self._today())}"
        tagged = self._gateway.create_annotated_tag(state.tag.name, state.target_branch, message)
        if isinstance(tagged, Err):
            return Err(git_failed(tagged.error))
        self._console.success(f"Release tagged {state.tag}.")
        return advance(state)

    def _release_push(self, state: SyncState) -> Result[StepOutcome, SyncError]:
        assert state.tag is not None
        refs = [*state.branches(), state.tag.name]
        pushed = self._gateway.push(state.upstream, refs)
        if isinstance(pushed, Err):
            return Err(git_failed(pushed.error))

        if self._options.dry_run:
            self._console.success("Dry run complete; nothing was merged, tagged or pushed.")
            return finish(RunOutcome(status="dry_run", tag=state.tag))
        self._console.success(f"Things got pushed to '{state.upstream}'. We're done.")
        return finish(RunOutcome(status="released", tag=state.tag))
