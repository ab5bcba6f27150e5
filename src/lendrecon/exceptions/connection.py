"""
Chain access exceptions for the lendrecon package.

This module contains exceptions raised when the on-chain collaborator cannot deliver a value,
whether from a network failure, an RPC error, a timeout or a malformed response.
"""

from typing import Any

from lendrecon.exceptions.base import LendreconError


class ChainUnavailable(LendreconError):
    """
    Raised when an on-chain read fails.
    """

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(message=f"Chain unavailable: {error}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.error,)


class ChainCallTimeout(ChainUnavailable):
    """
    Raised when a single on-chain read does not complete within the configured timeout.
    """

    def __init__(self, call: str, timeout_seconds: float | None = None) -> None:
        self.call = call
        self.timeout_seconds = timeout_seconds

        error = f"timed out waiting for {call}"
        if timeout_seconds is not None:
            error += f" after {timeout_seconds} seconds"

        super().__init__(error=error)

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.call, self.timeout_seconds)
