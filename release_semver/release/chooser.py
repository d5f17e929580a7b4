"""Operator choice of the next version.

The engine only knows the VersionChooser protocol. Returning None means the
operator declined to release, which ends the run without touching the
repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from release_semver.release.model import ReleaseBump, VersionCandidates
from release_semver.release.semver import Version

__all__ = ["ScriptedChooser", "VersionChooser"]


class VersionChooser(Protocol):
    def choose(self, candidates: VersionCandidates) -> Version | None:
        """Return the selected next version, or None to cancel."""
        ...


def _no_offers() -> list[VersionCandidates]:
    return []


@dataclass
class ScriptedChooser:
    """Chooser answering with a fixed bump kind (``None`` cancels).

    Used for ``--bump`` and in tests; ``offered`` keeps every candidate set
    it was asked about.
    """

    kind: ReleaseBump | None
    offered: list[VersionCandidates] = field(default_factory=_no_offers)

    def choose(self, candidates: VersionCandidates) -> Version | None:
        self.offered.append(candidates)
        if self.kind is None:
            return None
        return candidates.for_kind(self.kind)
