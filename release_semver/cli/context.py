from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from release_semver.core.config import Options
from release_semver.git.gateway import RepositoryGateway
from release_semver.git.repository import GitGateway
from release_semver.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    options: Options
    gateway: RepositoryGateway
    console: ConsoleProtocol


def build_context(repo_root: Path, options: Options) -> CLIContext:
    console = RichConsole()
    gateway = GitGateway(
        repo_root,
        console=console,
        echo_commands=options.echo_commands,
        echo_output=not options.silent,
    )
    return CLIContext(repo_root=repo_root, options=options, gateway=gateway, console=console)
