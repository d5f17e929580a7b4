"""Tests for release_semver.core.result module."""

import pytest

from release_semver.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    """Tests for Ok type."""

    def test_ok_is_ok(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        """Ok.map() transforms the value."""
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_ok_map_err(self) -> None:
        """Ok.map_err() returns self unchanged."""
        assert Ok(42).map_err(lambda e: f"error: {e}") == Ok(42)

    def test_ok_repr(self) -> None:
        assert repr(Ok("master")) == "Ok('master')"

    def test_ok_frozen(self) -> None:
        result = Ok(42)
        with pytest.raises(AttributeError):
            result.value = 0  # type: ignore[misc]


class TestErr:
    """Tests for Err type."""

    def test_err_is_err(self) -> None:
        result = Err("boom")
        assert result.is_err() is True
        assert result.is_ok() is False

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("boom").unwrap()

    def test_err_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_err_map(self) -> None:
        """Err.map() returns self unchanged."""
        assert Err("boom").map(lambda x: x * 2) == Err("boom")

    def test_err_map_err(self) -> None:
        assert Err("boom").map_err(str.upper) == Err("BOOM")


class TestTypeGuards:
    def test_is_ok(self) -> None:
        result: Result[int, str] = Ok(1)
        assert is_ok(result)
        assert not is_err(result)

    def test_is_err(self) -> None:
        result: Result[int, str] = Err("x")
        assert is_err(result)
        assert not is_ok(result)

    def test_pattern_matching(self) -> None:
        def describe(result: Result[str, str]) -> str:
            match result:
                case Ok(value):
                    return f"on {value}"
                case Err(error):
                    return f"failed: {error}"

        assert describe(Ok("master")) == "on master"
        assert describe(Err("detached")) == "failed: detached"
