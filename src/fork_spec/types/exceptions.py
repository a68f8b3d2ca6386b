"""Exception hierarchy shared by every fork-spec module."""

from __future__ import annotations

from typing import Any


class ForkSpecError(Exception):
    """
    Base exception for all fork-spec errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class HexDecodeError(ForkSpecError, ValueError):
    """
    Raised when a hexadecimal string cannot be decoded.

    Attributes:
        value: The offending string (truncated for display).
        expected_digits: Number of hex digits the decode required, if fixed.
        detail: Description of what went wrong.
    """

    def __init__(
        self,
        value: str,
        detail: str,
        *,
        expected_digits: int | None = None,
    ) -> None:
        self.value = value
        self.detail = detail
        self.expected_digits = expected_digits

        value_repr = repr(value)
        if len(value_repr) > 50:
            value_repr = value_repr[:47] + "..."

        super().__init__(f"{detail}: {value_repr}")


class IntegerParseError(ForkSpecError, ValueError):
    """
    Raised when a numeric string cannot be parsed as an integer.

    Attributes:
        value: The value that failed to parse.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"invalid integer: {value!r}")
