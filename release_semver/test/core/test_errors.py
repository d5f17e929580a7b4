"""Tests for release_semver.core.errors module."""

from release_semver.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.ABORTED == 1
        assert ErrorCode.USAGE_ERROR == 2

    def test_str(self) -> None:
        assert str(ErrorCode.USAGE_ERROR) == "usage error"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success is True
        assert ErrorCode.ABORTED.is_success is False
