from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from release_semver.release.semver import Version


ReleaseBump = Literal["major", "minor", "patch"]
RunStatus = Literal["released", "dry_run", "cancelled"]

BUMP_KINDS: tuple[ReleaseBump, ...] = ("patch", "minor", "major")


@dataclass(frozen=True, slots=True)
class BranchRef:
    """A branch, either local (``remote is None``) or remote-tracking."""

    name: str
    remote: str | None = None

    @staticmethod
    def parse_short(short: str, *, remotes: tuple[str, ...]) -> BranchRef:
        """Parse ``origin/main`` style names against the known remotes."""
        for remote in sorted(remotes, key=len, reverse=True):
            if short.startswith(remote + "/"):
                return BranchRef(name=short[len(remote) + 1 :], remote=remote)
        return BranchRef(name=short)

    def __str__(self) -> str:
        if self.remote is None:
            return self.name
        return f"{self.remote}/{self.name}"


@dataclass(frozen=True, slots=True)
class ReleaseTag:
    prefix: str | None
    version: Version

    @property
    def name(self) -> str:
        if self.prefix:
            return f"{self.prefix}/{self.version}"
        return str(self.version)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class VersionCandidates:
    """Next versions offered to the operator, one per bump kind."""

    current: Version
    patch: Version
    minor: Version
    major: Version

    @classmethod
    def from_current(cls, current: Version) -> VersionCandidates:
        return cls(
            current=current,
            patch=current.bump("patch"),
            minor=current.bump("minor"),
            major=current.bump("major"),
        )

    def for_kind(self, kind: ReleaseBump) -> Version:
        match kind:
            case "patch":
                return self.patch
            case "minor":
                return self.minor
            case "major":
                return self.major


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """How a release run ended when no stage failed."""

    status: RunStatus
    tag: ReleaseTag | None = None
