"""Tests for git/repository.py."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from release_semver.core.result import Err, Ok
from release_semver.git.gateway import DivergedError
from release_semver.git.repository import GitGateway
from release_semver.output.console import MockConsole, Style
from release_semver.release.model import BranchRef
from release_semver.release.semver import Version


def make_completed_process(
    stdout: str = "",
    stderr: str = "",
    returncode: int = 0,
) -> subprocess.CompletedProcess[str]:
    """Create a mock CompletedProcess."""
    return subprocess.CompletedProcess(
        args=["git"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


def _gateway(path: Path, **kwargs: bool) -> tuple[GitGateway, MockConsole]:
    console = MockConsole()
    return GitGateway(path, console=console, **kwargs), console


def _argv(mock_run: MagicMock, index: int = -1) -> list[str]:
    return mock_run.call_args_list[index][0][0]


# =============================================================================
# Queries
# =============================================================================


class TestQueries:
    @patch("subprocess.run")
    def test_commands_run_against_repo(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="master\n")
        gateway, _ = _gateway(tmp_path)

        gateway.current_branch()

        assert _argv(mock_run) == ["git", "-C", str(tmp_path), "rev-parse", "--abbrev-ref", "HEAD"]

    @patch("subprocess.run")
    def test_current_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="feature/login\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.current_branch() == Ok("feature/login")

    @patch("subprocess.run")
    def test_current_branch_detached(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="HEAD\n")
        gateway, _ = _gateway(tmp_path)

        result = gateway.current_branch()

        assert isinstance(result, Err)
        assert "detached" in result.error.message

    @patch("subprocess.run")
    def test_clean_tree(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="")
        gateway, _ = _gateway(tmp_path)

        assert gateway.is_working_tree_clean() == Ok(True)

    @patch("subprocess.run")
    def test_dirty_tree(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout=" M README.md\n?? new.txt\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.is_working_tree_clean() == Ok(False)

    @patch("subprocess.run")
    def test_branch_exists_locally(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = [
            make_completed_process(stdout="abc123\n"),
            make_completed_process(returncode=1),
        ]
        gateway, _ = _gateway(tmp_path)

        assert gateway.branch_exists_locally("master") is True
        assert gateway.branch_exists_locally("nope") is False
        assert _argv(mock_run)[-1] == "refs/heads/nope"

    @patch("subprocess.run")
    def test_upstream_of(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="origin\torigin/release\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.upstream_of("release") == Ok(BranchRef(name="release", remote="origin"))

    @patch("subprocess.run")
    def test_upstream_of_remote_with_slash(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="team/fork\tteam/fork/master\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.upstream_of("master") == Ok(BranchRef(name="master", remote="team/fork"))

    @patch("subprocess.run")
    def test_upstream_of_untracked(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="\t\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.upstream_of("master") == Ok(None)

    @patch("subprocess.run")
    def test_upstream_of_local_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout=".\tmain\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.upstream_of("topic") == Ok(BranchRef(name="main"))

    @patch("subprocess.run")
    def test_ahead_behind_no_merges(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="3\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.ahead_behind_no_merges("master", "release") == Ok(3)
        assert _argv(mock_run)[3:] == ["rev-list", "--count", "--no-merges", "master..release"]

    @patch("subprocess.run")
    def test_unexpected_count(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="lots\n")
        gateway, _ = _gateway(tmp_path)

        result = gateway.ahead_behind_no_merges("master", "release")

        assert isinstance(result, Err)
        assert "unexpected count" in result.error.message

    @patch("subprocess.run")
    def test_unmerged_commits(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="abc1234 fix\ndef5678 fix again\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.unmerged_commits("master", "release") == Ok(
            ["abc1234 fix", "def5678 fix again"]
        )


class TestLatestTagVersion:
    @patch("subprocess.run")
    def test_described_tag_is_coerced(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = [
            make_completed_process(stdout="1a2b3c\n"),
            make_completed_process(stdout="v2.3.1\n"),
        ]
        gateway, _ = _gateway(tmp_path)

        result = gateway.latest_tag_version("origin", "master")

        assert result == Ok(Version(2, 3, 1))
        assert _argv(mock_run, 0)[-1] == "refs/remotes/origin/master"
        assert _argv(mock_run, 1)[3:] == ["describe", "--tags", "--abbrev=0", "1a2b3c"]

    @patch("subprocess.run")
    def test_match_pattern(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = [
            make_completed_process(stdout="1a2b3c\n"),
            make_completed_process(stdout="web/1.4.0\n"),
        ]
        gateway, _ = _gateway(tmp_path)

        result = gateway.latest_tag_version("origin", "master", match="web/*")

        assert result == Ok(Version(1, 4, 0))
        assert "--match" in _argv(mock_run)
        assert "web/*" in _argv(mock_run)

    @patch("subprocess.run")
    def test_no_tag(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = [
            make_completed_process(stdout="1a2b3c\n"),
            make_completed_process(returncode=128, stderr="fatal: No names found"),
        ]
        gateway, _ = _gateway(tmp_path)

        assert gateway.latest_tag_version("origin", "master") == Ok(None)

    @patch("subprocess.run")
    def test_missing_remote_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=128, stderr="fatal: Needed a single revision"
        )
        gateway, _ = _gateway(tmp_path)

        result = gateway.latest_tag_version("origin", "master")

        assert isinstance(result, Err)
        assert result.error.message == "fatal: Needed a single revision"


# =============================================================================
# Mutations
# =============================================================================


class TestMutations:
    @patch("subprocess.run")
    def test_fetch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        gateway, _ = _gateway(tmp_path)

        assert gateway.fetch("origin") == Ok(None)
        assert _argv(mock_run)[3:] == ["fetch", "origin", "--tags", "--prune"]
        assert mock_run.call_args.kwargs["timeout"] == 180.0

    @patch("subprocess.run")
    def test_fetch_failure(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=128, stderr="fatal: 'origin' does not appear to be a git repository\n"
        )
        gateway, _ = _gateway(tmp_path)

        result = gateway.fetch("origin")

        assert isinstance(result, Err)
        assert result.error.command == "fetch"
        assert result.error.returncode == 128
        assert result.error.message.startswith("fatal: 'origin'")

    @patch("subprocess.run")
    def test_create_tracking_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="abc\n")
        gateway, _ = _gateway(tmp_path)

        assert gateway.create_tracking_branch("release", "origin") == Ok(None)
        assert _argv(mock_run)[3:] == ["branch", "--track", "release", "origin/release"]

    @patch("subprocess.run")
    def test_create_tracking_branch_missing_remote(
        self, mock_run: MagicMock, tmp_path: Path
    ) -> None:
        mock_run.return_value = make_completed_process(returncode=1)
        gateway, _ = _gateway(tmp_path)

        result = gateway.create_tracking_branch("release", "origin")

        assert isinstance(result, Err)
        assert result.error.message == "'origin/release' does not exist"
        assert mock_run.call_count == 1

    @patch("subprocess.run")
    def test_fast_forward(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = [
            make_completed_process(stdout="0\n"),
            make_completed_process(),
        ]
        gateway, _ = _gateway(tmp_path)

        result = gateway.fast_forward("master", BranchRef(name="master", remote="origin"))

        assert result == Ok(None)
        assert _argv(mock_run, 0)[-1] == "refs/remotes/origin/master..refs/heads/master"
        assert _argv(mock_run, 1)[3:] == ["merge", "--ff-only", "origin/master"]

    @patch("subprocess.run")
    def test_fast_forward_diverged(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="2\n")
        gateway, _ = _gateway(tmp_path)

        result = gateway.fast_forward("release", BranchRef(name="release", remote="origin"))

        assert isinstance(result, Err)
        assert isinstance(result.error, DivergedError)
        assert result.error.local_commits == 2
        assert result.error.message == "release has local commits; can't fast-forward"
        assert mock_run.call_count == 1

    @patch("subprocess.run")
    def test_merge_tag_push_argv(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        gateway, _ = _gateway(tmp_path)

        gateway.merge_no_fast_forward("master", "Merge branch 'master' into release for '1.0.0'")
        gateway.create_annotated_tag("1.0.0", "release", "Version 1.0.0 released on May 1, 2024")
        gateway.push("origin", ["master", "release", "1.0.0"])

        assert _argv(mock_run, 0)[3:] == [
            "merge",
            "--no-ff",
            "-m",
            "Merge branch 'master' into release for '1.0.0'",
            "master",
        ]
        assert _argv(mock_run, 1)[3:] == [
            "tag",
            "-a",
            "1.0.0",
            "release",
            "-m",
            "Version 1.0.0 released on May 1, 2024",
        ]
        assert _argv(mock_run, 2)[3:] == ["push", "origin", "master", "release", "1.0.0"]


# =============================================================================
# Echo
# =============================================================================


class TestEcho:
    @patch("subprocess.run")
    def test_quiet_by_default(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="Already up to date.\n")
        gateway, console = _gateway(tmp_path)

        gateway.fetch("origin")

        assert console.outputs == []

    @patch("subprocess.run")
    def test_echo_commands(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        gateway, console = _gateway(tmp_path, echo_commands=True)

        gateway.create_annotated_tag("1.0.0", "release", "Version 1.0.0 released")

        assert console.messages == ["git tag -a 1.0.0 release -m 'Version 1.0.0 released'"]
        assert console.count(Style.DIM) == 1

    @patch("subprocess.run")
    def test_echo_output(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="Fast-forward\n")
        gateway, console = _gateway(tmp_path, echo_output=True)

        gateway.fetch("origin")

        assert console.messages == ["Fast-forward"]


@patch("release_semver.git.repository.which")
def test_is_available(mock_which: MagicMock, tmp_path: Path) -> None:
    gateway, _ = _gateway(tmp_path)

    mock_which.return_value = Path("/usr/bin/git")
    assert gateway.is_available() is True

    mock_which.return_value = None
    assert gateway.is_available() is False
