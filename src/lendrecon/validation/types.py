from dataclasses import dataclass
from typing import Self

from lendrecon.validation.classifier import (
    DEFAULT_POLICY,
    Classification,
    TolerancePolicy,
    Verdict,
    classify,
    compute_percentage,
)

SUPPLY_ERROR_PREFIX = "Supply validation failed"
BORROW_ERROR_PREFIX = "Borrow validation failed"


@dataclass(slots=True, frozen=True)
class EntryState:
    """
    The outcome of one comparison between a database amount and an on-chain amount.
    """

    database_amount: int
    on_chain_amount: int
    difference: int
    percentage: float

    @classmethod
    def new(cls, database_amount: int, on_chain_amount: int) -> Self:
        return cls(
            database_amount=database_amount,
            on_chain_amount=on_chain_amount,
            difference=abs(database_amount - on_chain_amount),
            percentage=compute_percentage(database_amount, on_chain_amount),
        )

    @classmethod
    def empty(cls) -> Self:
        return cls.new(0, 0)

    def classify(
        self,
        description: str = "",
        policy: TolerancePolicy = DEFAULT_POLICY,
    ) -> Classification:
        return classify(
            calculated=self.database_amount,
            on_chain=self.on_chain_amount,
            description=description,
            policy=policy,
        )


def join_errors(*errors: str | None) -> str | None:
    """
    Combine sub-check error messages, skipping the ones that succeeded.
    """

    return "; ".join(error for error in errors if error) or None


def _completed(*entries: EntryState | None) -> tuple[EntryState, ...]:
    return tuple(entry for entry in entries if entry is not None)


@dataclass(slots=True, frozen=True)
class PositionValidation:
    """
    The supply and borrow checks for one user position. A side is `None` when its check failed,
    in which case `error` carries the reason.
    """

    reserve_address: str
    supply: EntryState | None = None
    borrow: EntryState | None = None
    error: str | None = None

    def entries(self) -> tuple[EntryState, ...]:
        return _completed(self.supply, self.borrow)


@dataclass(slots=True, frozen=True)
class ReserveValidation:
    reserve_address: str
    supply: EntryState | None = None
    borrow: EntryState | None = None
    error: str | None = None

    @property
    def entity(self) -> str:
        return self.reserve_address

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def entries(self) -> tuple[EntryState, ...]:
        return _completed(self.supply, self.borrow)


@dataclass(slots=True, frozen=True)
class ReserveIndexValidation:
    reserve_address: str
    liquidity_index: EntryState | None = None
    variable_borrow_index: EntryState | None = None
    error: str | None = None

    @property
    def entity(self) -> str:
        return self.reserve_address

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def entries(self) -> tuple[EntryState, ...]:
        return _completed(self.liquidity_index, self.variable_borrow_index)


@dataclass(slots=True, frozen=True)
class UserValidation:
    user_address: str
    positions: tuple[PositionValidation, ...] = ()

    @property
    def entity(self) -> str:
        return self.user_address

    @property
    def error(self) -> str | None:
        return join_errors(
            *(
                f"Reserve {position.reserve_address}: {position.error}"
                for position in self.positions
                if position.error is not None
            )
        )

    @property
    def has_error(self) -> bool:
        return any(position.error is not None for position in self.positions)

    def entries(self) -> tuple[EntryState, ...]:
        return tuple(entry for position in self.positions for entry in position.entries())


def has_mismatch(
    validation: ReserveValidation | ReserveIndexValidation | UserValidation,
    policy: TolerancePolicy = DEFAULT_POLICY,
) -> bool:
    return any(
        entry.classify(policy=policy).verdict is Verdict.MISMATCH
        for entry in validation.entries()
    )
