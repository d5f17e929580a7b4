"""Semantic versions: parsing, loose coercion, bumping and precedence.

``parse`` accepts a full semver string (optionally prefixed with ``v`` or
``=``). ``coerce`` is the loose reader used on ``git describe`` output such as
``app/v2.3.1-4-g1a2b3c4``: it keeps the first ``X[.Y[.Z]]`` of the last path
segment and drops everything else.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from release_semver.release.model import ReleaseBump

_NUM = r"0|[1-9]\d*"
_IDENT = r"[0-9A-Za-z-]+"
_SEMVER_RE = re.compile(
    rf"^[=v]*\s*({_NUM})\.({_NUM})\.({_NUM})"
    rf"(?:-({_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+({_IDENT}(?:\.{_IDENT})*))?$"
)
_COERCE_RE = re.compile(r"(?:^|[^\d])(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?:$|[^\d])")


def _valid_prerelease(parts: tuple[str, ...]) -> bool:
    # numeric identifiers must not carry leading zeros
    return all(not (p.isdigit() and len(p) > 1 and p[0] == "0") for p in parts)


@total_ordering
@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    # build metadata carries no precedence
    build: tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def zero(cls) -> Version:
        return cls(0, 0, 0)

    def bump(self, kind: ReleaseBump) -> Version:
        """Return the next version for ``kind``.

        A prerelease bumps to its own release when the bump does not go past
        it (``1.2.0-rc.1`` minor -> ``1.2.0``).
        """
        match kind:
            case "major":
                if self.prerelease and self.minor == 0 and self.patch == 0:
                    return Version(self.major, 0, 0)
                return Version(self.major + 1, 0, 0)
            case "minor":
                if self.prerelease and self.patch == 0:
                    return Version(self.major, self.minor, 0)
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                if self.prerelease:
                    return Version(self.major, self.minor, self.patch)
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def _precedence(self) -> tuple[object, ...]:
        pre = tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in self.prerelease)
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, pre)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __str__(self) -> str:
        s = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            s += "-" + ".".join(self.prerelease)
        if self.build:
            s += "+" + ".".join(self.build)
        return s


def parse(text: str) -> Version | None:
    """Parse a strict semantic version, or return None."""
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    prerelease = tuple(m.group(4).split(".")) if m.group(4) else ()
    if not _valid_prerelease(prerelease):
        return None
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease, build)


def coerce(text: str) -> Version | None:
    """Loosely read a version out of a tag name or describe output."""
    segment = text.strip().rsplit("/", 1)[-1]
    m = _COERCE_RE.search(segment)
    if m is None:
        return None
    return Version(int(m.group(1)), int(m.group(2) or 0), int(m.group(3) or 0))
