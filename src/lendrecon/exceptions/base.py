from typing import Any


class LendreconError(Exception):
    """
    Base exception used as the parent class for all exceptions raised by this package.

    Calling code should catch `LendreconError` and derived classes separately before general
    exceptions, e.g.:

    ```
    try:
        await validator.validate_reserve(reserve_address)
    except ReserveNotFound:
        ... # handle a specific exception
    except LendreconError:
        ... # handle non-specific lendrecon exception
    except Exception:
        ... # handle exceptions raised by 3rd party dependencies or Python built-ins
    ```

    An optional string-formatted message may be attached to the exception and retrieved by accessing
    the `.message` attribute.
    """

    message: str | None = None

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
            super().__init__(message)


class LendreconValueError(LendreconError):
    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.message,)


class DeadlineExceeded(LendreconError):
    """
    Raised for an entity that was not started before a bulk validation deadline expired.
    """

    def __init__(self, entity: str) -> None:
        self.entity = entity
        super().__init__(message=f"Deadline expired before validation of {entity} could start.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.entity,)
