"""Exception types raised by the DigitNet core."""

from __future__ import annotations


class FormatError(ValueError):
    """A text line could not be parsed into a vector."""


class ContractViolation(AssertionError):
    """The core API was called with mismatched shapes or out of order.

    This signals a bug in the caller and is never caught inside the package.
    """


def require(condition: bool, message: str) -> None:
    if not condition:
        raise ContractViolation(message)


__all__ = ["FormatError", "ContractViolation", "require"]
