"""Tests for pkgrestore.core.errors module."""

from pkgrestore.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.PLATFORM_ERROR == 2
        assert ErrorCode.BOOTSTRAP_ERROR == 3
        assert ErrorCode.CONFIG_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_str(self) -> None:
        assert str(ErrorCode.PLATFORM_ERROR) == "platform error"
        assert str(ErrorCode.OK) == "ok"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.OK.is_error
        assert ErrorCode.IO_ERROR.is_error

    def test_usable_as_exit_code(self) -> None:
        assert int(ErrorCode.BOOTSTRAP_ERROR) == 3
