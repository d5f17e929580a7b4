from __future__ import annotations

from release_semver.cli.selector import SelectorOption, select_one
from release_semver.release.model import BUMP_KINDS, ReleaseBump, VersionCandidates
from release_semver.release.semver import Version

_BUMP_LABELS: dict[ReleaseBump, str] = {
    "patch": "patch version (e.g. bug fixes)",
    "minor": "minor version (e.g. new functionality, no breaking changes)",
    "major": "major version (e.g. breaking changes)",
}


def version_options(candidates: VersionCandidates) -> list[SelectorOption[Version]]:
    return [
        SelectorOption(
            value=candidates.for_kind(kind),
            label=f"{_BUMP_LABELS[kind]}: {candidates.for_kind(kind)}",
        )
        for kind in BUMP_KINDS
    ]


class InteractiveChooser:
    """Arrow-key selection of patch / minor / major; q cancels."""

    def choose(self, candidates: VersionCandidates) -> Version | None:
        result = select_one(
            title=f"Select the new version (current: {candidates.current}):",
            options=version_options(candidates),
        )
        if result.action == "cancel":
            return None
        return result.value
