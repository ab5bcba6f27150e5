import pathlib
from typing import Any

from lendrecon.exceptions.base import LendreconError


class BackupExists(LendreconError):
    """
    Raised by `lendrecon database backup` if a file exists at the target path.
    """

    def __init__(self, path: pathlib.Path) -> None:
        self.path = path
        super().__init__(message=f"A backup at {path} already exists.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.path,)


class BalanceParseError(LendreconError):
    """
    Raised when a stored amount cannot be interpreted as a non-negative integer balance.
    """

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(message=f"Failed to parse {field} value {value!r} as an integer balance")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.field, self.value)
