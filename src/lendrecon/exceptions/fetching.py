"""
Record lookup exceptions for the lendrecon package.

These are raised when the primary entity of a validation request is absent from the data-access
collaborator. A user without a position in some reserve is not an error, and does not raise.
"""

from typing import Any

from lendrecon.exceptions.base import LendreconError


class RecordNotFound(LendreconError):
    """
    Base exception for missing database records.
    """


class ReserveNotFound(RecordNotFound):
    def __init__(self, reserve_address: str) -> None:
        self.reserve_address = reserve_address
        super().__init__(message=f"No reserve data found for reserve address {reserve_address}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.reserve_address,)


class UserNotFound(RecordNotFound):
    def __init__(self, user_address: str) -> None:
        self.user_address = user_address
        super().__init__(message=f"No position data found for user address {user_address}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.user_address,)
