"""Release options and their optional TOML configuration file.

Options come from three layers, later layers winning:
defaults < ``.release-semver.toml`` < command-line flags.

Config file example (every key optional, unknown keys ignored)::

    source_branch = "main"
    target_branch = "release"
    upstream = "origin"
    prefix = "app"
    dry_run = false
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "Options",
    "load_config",
    "resolve_options",
]

CONFIG_FILENAME = ".release-semver.toml"

DEFAULT_SOURCE_BRANCH = "master"
DEFAULT_TARGET_BRANCH = "release"
DEFAULT_UPSTREAM = "origin"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when options cannot be loaded or validated."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Options:
    """Release run configuration.

    Attributes:
        source_branch: Development line merged into the release line
        target_branch: Release line that receives the merge and the tag
        upstream: Name of the remote both branches track
        prefix: Optional tag prefix; tags become ``prefix/X.Y.Z``
        dry_run: Run every check but only echo merge, tag and push
        silent: Do not echo git command output
        verbose: Echo every git command before running it
    """

    source_branch: str = DEFAULT_SOURCE_BRANCH
    target_branch: str = DEFAULT_TARGET_BRANCH
    upstream: str = DEFAULT_UPSTREAM
    prefix: str | None = None
    dry_run: bool = False
    silent: bool = True
    verbose: bool = False

    @property
    def single_branch(self) -> bool:
        """True when releasing directly from one branch."""
        return self.source_branch == self.target_branch

    @property
    def echo_commands(self) -> bool:
        return self.verbose or self.dry_run

    def merged_with(self, data: Mapping[str, object]) -> Options:
        """Return a copy overridden by the recognised keys of ``data``.

        Keys may use snake_case or the historical camelCase flag names.
        Unknown keys are ignored.
        """
        prefix = self.prefix
        if "prefix" in data:
            raw = data["prefix"]
            prefix = get_str(data, "prefix") if isinstance(raw, str) else None

        silent = get_bool(data, "silent")
        verbose = get_bool(data, "verbose")
        dry_run = get_bool(data, "dry_run", "dryrun")

        return replace(
            self,
            source_branch=get_str(data, "source_branch", "sourceBranch") or self.source_branch,
            target_branch=get_str(data, "target_branch", "targetBranch") or self.target_branch,
            upstream=get_str(data, "upstream") or self.upstream,
            prefix=prefix,
            dry_run=self.dry_run if dry_run is None else dry_run,
            silent=self.silent if silent is None else silent,
            verbose=self.verbose if verbose is None else verbose,
        )

    def as_dict(self) -> dict[str, object]:
        """Render the options with the command-line flag names.

        An unset prefix is rendered as ``False``.
        """
        return {
            "sourceBranch": self.source_branch,
            "targetBranch": self.target_branch,
            "upstream": self.upstream,
            "prefix": self.prefix if self.prefix else False,
            "silent": self.silent,
            "verbose": self.verbose,
            "dryrun": self.dry_run,
        }


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[StrDict, ConfigError]:
    """Load the raw option table from a TOML file.

    Args:
        path: Path to the config file

    Returns:
        Ok(table) on success, Err(ConfigError) on failure
    """
    return _parse_toml(path)


def resolve_options(
    *,
    repo_root: Path,
    config_path: Path | None,
    overrides: Mapping[str, object],
) -> Result[Options, ConfigError]:
    """Build the final Options for a run.

    The default config file is optional; an explicit ``config_path`` must
    exist. ``overrides`` holds only the flags given on the command line.
    """
    options = Options()

    path = config_path if config_path is not None else repo_root / CONFIG_FILENAME
    if config_path is not None or path.is_file():
        loaded = load_config(path)
        if isinstance(loaded, Err):
            return loaded
        options = options.merged_with(loaded.value)

    options = options.merged_with(overrides)

    if not options.upstream:
        return Err(ConfigError("upstream must not be empty"))
    return Ok(options)
