"""Git access for the release engine.

- RepositoryGateway: the capability protocol the engine depends on
- GitGateway: implementation running the git CLI
- DryRunGateway: wrapper that echoes merge/tag/push instead of running them

Usage:
    from release_semver.git import GitGateway

    gateway = GitGateway(Path("."), console=RichConsole(), echo_commands=True)
    if gateway.is_available():
        print(gateway.current_branch())
"""

from release_semver.git.dry_run import DryRunGateway
from release_semver.git.gateway import DivergedError, GatewayError, RepositoryGateway
from release_semver.git.repository import GitGateway

__all__ = [
    "DivergedError",
    "DryRunGateway",
    "GatewayError",
    "GitGateway",
    "RepositoryGateway",
]
