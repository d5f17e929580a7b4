from __future__ import annotations

from release_semver.core.config import Options
from release_semver.core.result import Err, Ok, Result
from release_semver.git.gateway import GatewayError, RepositoryGateway
from release_semver.release.semver import Version


def tag_match_pattern(options: Options) -> str | None:
    """Glob limiting describe to this release line's tags, if prefixed."""
    if options.prefix:
        return f"{options.prefix}/*"
    return None


def latest_version(
    gateway: RepositoryGateway, options: Options
) -> Result[Version, GatewayError]:
    """Latest released version reachable from the remote source branch.

    Falls back to 0.0.0 when no tag is reachable.
    """
    found = gateway.latest_tag_version(
        options.upstream,
        options.source_branch,
        match=tag_match_pattern(options),
    )
    if isinstance(found, Err):
        return found
    return Ok(found.value if found.value is not None else Version.zero())
