from typing import Any

from lendrecon.exceptions.base import LendreconError


class MathError(LendreconError):
    """
    Raised when a fixed-point operation cannot produce a result in the uint256 domain.
    """


class MathOverflow(MathError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(message=f"Overflow in {operation}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.operation,)


class MathDivisionByZero(MathError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(message=f"Division by zero in {operation}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.operation,)
