"""Errors raised by the contracts."""

from __future__ import annotations


class StdError(Exception):
    """A standard contract error, shown as ``<kind>: <message>``."""

    def __init__(self, message: str, kind: str = "Generic error") -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


def generic_err(msg: object) -> StdError:
    """Build a generic error carrying ``msg``."""
    return StdError(str(msg))


class ContractError(Exception):
    """Base error of the burn-auction contract.

    Constructed from a :class:`StdError` it reads exactly like that error.
    """


class Unauthorized(ContractError):
    """The sender may not perform the action."""

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class NoNativeFunds(ContractError):
    """A native-token action was called without funds."""

    def __init__(self) -> None:
        super().__init__("No native funds sent")