"""Process exit codes for the release command."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes of ``release-semver``.

    These values are part of the CLI contract and must remain stable:
    - 0: Release done, dry run finished, or operator cancelled the choice
    - 1: A precondition or git command failed and the run was aborted
    - 2: Bad invocation (invalid flag value, unreadable config file)
    """

    OK = 0
    ABORTED = 1
    USAGE_ERROR = 2

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
