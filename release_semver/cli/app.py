from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer

from release_semver import __version__
from release_semver.cli.context import build_context
from release_semver.cli.selector import is_interactive_terminal
from release_semver.cli.version_prompt import InteractiveChooser
from release_semver.core.config import resolve_options
from release_semver.core.errors import ErrorCode
from release_semver.core.result import Err, Ok
from release_semver.core.structured import parse_bool
from release_semver.output.errors import print_sync_error, sync_error_exit_code
from release_semver.release.chooser import ScriptedChooser, VersionChooser
from release_semver.release.engine import SyncEngine


class BumpChoice(str, Enum):
    patch = "patch"
    minor = "minor"
    major = "major"
    none = "none"


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)

# Unrecognised `--name value` pairs are ignored rather than rejected.
_CONTEXT_SETTINGS = {"ignore_unknown_options": True, "allow_extra_args": True}


def _flag(value: str | None, name: str) -> bool | None:
    if value is None:
        return None
    parsed = parse_bool(value)
    if parsed is None:
        raise typer.BadParameter(f"expected true/false, got {value!r}", param_hint=name)
    return parsed


def collect_overrides(
    *,
    source_branch: str | None,
    target_branch: str | None,
    upstream: str | None,
    prefix: str | None,
    silent: str | None,
    verbose: str | None,
    dryrun: str | None,
) -> dict[str, object]:
    """Flags given on the command line, booleans coerced."""
    raw: dict[str, object | None] = {
        "source_branch": source_branch,
        "target_branch": target_branch,
        "upstream": upstream,
        "prefix": prefix,
        "silent": _flag(silent, "--silent"),
        "verbose": _flag(verbose, "--verbose"),
        "dry_run": _flag(dryrun, "--dryrun"),
    }
    return {k: v for k, v in raw.items() if v is not None}


def build_chooser(bump: BumpChoice | None) -> VersionChooser:
    if bump is None:
        if not is_interactive_terminal():
            typer.echo("error: no terminal to choose a version; pass --bump", err=True)
            raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))
        return InteractiveChooser()
    if bump is BumpChoice.none:
        return ScriptedChooser(kind=None)
    return ScriptedChooser(kind=bump.value)


@app.command(context_settings=_CONTEXT_SETTINGS)
def release(
    source_branch: str | None = typer.Option(
        None, "--sourceBranch", help="Development branch to release [default: master]"
    ),
    target_branch: str | None = typer.Option(
        None, "--targetBranch", help="Release branch receiving merge and tag [default: release]"
    ),
    upstream: str | None = typer.Option(
        None, "--upstream", help="Remote both branches track [default: origin]"
    ),
    prefix: str | None = typer.Option(None, "--prefix", help="Tag prefix (tags become PREFIX/X.Y.Z)"),
    silent: str | None = typer.Option(
        None, "--silent", metavar="BOOL", help="Hide git output [default: true]"
    ),
    verbose: str | None = typer.Option(
        None, "--verbose", metavar="BOOL", help="Echo git commands [default: false]"
    ),
    dryrun: str | None = typer.Option(
        None, "--dryrun", metavar="BOOL", help="Check everything, only echo merge/tag/push"
    ),
    bump: BumpChoice | None = typer.Option(
        None, "--bump", help="Choose the version without prompting (none cancels)"
    ),
    repo: Path = typer.Option(Path("."), "--repo", "-C", help="Repository to release"),
    config: Path | None = typer.Option(None, "--config", help="Options file (TOML)"),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Merge, tag and push a new semantic version after checking both branches."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    overrides = collect_overrides(
        source_branch=source_branch,
        target_branch=target_branch,
        upstream=upstream,
        prefix=prefix,
        silent=silent,
        verbose=verbose,
        dryrun=dryrun,
    )

    try:
        repo_root = repo.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --repo: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    resolved = resolve_options(repo_root=repo_root, config_path=config, overrides=overrides)
    if isinstance(resolved, Err):
        typer.echo(f"error: {resolved.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))
    options = resolved.value

    chooser = build_chooser(bump)
    ctx = build_context(repo_root, options)

    ctx.console.header(" release-semver running ")
    if options.dry_run:
        ctx.console.info("running in dry mode. Will fetch and checkout but not merge, tag or push.")

    engine = SyncEngine(
        gateway=ctx.gateway,
        options=options,
        chooser=chooser,
        console=ctx.console,
    )
    match engine.run():
        case Err(e):
            print_sync_error(e, ctx.console)
            raise typer.Exit(code=sync_error_exit_code(e))
        case Ok(_):
            pass


def main() -> None:
    app()
