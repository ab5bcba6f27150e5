"""
Fan-out of reserve and user validations across every entity in the ledger.

Each entity is validated in its own task. Concurrency is capped by a semaphore, and an exception
raised while validating one entity is recorded as a `BulkFailure` for that entity without
affecting any other task. The scheduler always waits for every task it started.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from lendrecon.exceptions.base import DeadlineExceeded
from lendrecon.logging import logger
from lendrecon.validation.classifier import DEFAULT_POLICY, TolerancePolicy
from lendrecon.validation.types import (
    ReserveIndexValidation,
    ReserveValidation,
    UserValidation,
    has_mismatch,
)
from lendrecon.validation.validators import BalanceMode, ReserveValidator

DEFAULT_MAX_CONCURRENCY = 16

type EntityValidation = ReserveValidation | ReserveIndexValidation | UserValidation


@dataclass(slots=True, frozen=True)
class BulkFailure:
    entity: str
    error: str
    exception_type: str


@dataclass
class BulkResult[ValidationType: EntityValidation]:
    results: list[ValidationType] = field(default_factory=list)
    failures: list[BulkFailure] = field(default_factory=list)
    policy: TolerancePolicy = DEFAULT_POLICY

    @property
    def total(self) -> int:
        return len(self.results) + len(self.failures)

    @property
    def success_count(self) -> int:
        """
        Entities that completed without any internal error.
        """

        return sum(1 for result in self.results if not result.has_error)

    @property
    def error_count(self) -> int:
        """
        Entities that failed outright or completed with an internal error.
        """

        return len(self.failures) + sum(1 for result in self.results if result.has_error)

    @property
    def mismatch_count(self) -> int:
        """
        Completed entities with at least one comparison outside both tolerances.
        """

        return sum(1 for result in self.results if has_mismatch(result, self.policy))


@dataclass(slots=True)
class EverythingResult:
    reserves: BulkResult[ReserveValidation]
    users: BulkResult[UserValidation]

    @property
    def total(self) -> int:
        return self.reserves.total + self.users.total

    @property
    def success_count(self) -> int:
        return self.reserves.success_count + self.users.success_count

    @property
    def error_count(self) -> int:
        return self.reserves.error_count + self.users.error_count

    @property
    def mismatch_count(self) -> int:
        return self.reserves.mismatch_count + self.users.mismatch_count


class BulkValidator:
    """
    Runs a `ReserveValidator` over every reserve and/or user known to its data-access
    collaborator.

    Arguments:
        validator: The single-entity validator.
        max_concurrency: Upper bound on entities validated at the same time.
        deadline: Optional number of seconds after which no further entity is started. Entities
            already in progress run to completion, and entities never started are recorded as
            `DeadlineExceeded` failures.
        on_complete: Optional callback invoked with the entity address as each one finishes.
    """

    def __init__(
        self,
        validator: ReserveValidator,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        deadline: float | None = None,
        on_complete: Callable[[str], None] | None = None,
    ) -> None:
        if max_concurrency < 1:
            msg = f"max_concurrency must be at least 1, got {max_concurrency}"
            raise ValueError(msg)

        self.validator = validator
        self.max_concurrency = max_concurrency
        self.deadline = deadline
        self.on_complete = on_complete

    def _expiry(self) -> float | None:
        if self.deadline is None:
            return None
        return asyncio.get_running_loop().time() + self.deadline

    def _notify(self, entity: str) -> None:
        if self.on_complete is None:
            return
        try:
            self.on_complete(entity)
        except Exception as exc:
            logger.warning(f"Completion callback failed for {entity}: {exc}")

    async def _run[ValidationType: EntityValidation](
        self,
        entities: Sequence[str],
        validate: Callable[[str], Awaitable[ValidationType]],
        expires_at: float | None,
    ) -> BulkResult[ValidationType]:
        semaphore = asyncio.Semaphore(self.max_concurrency)
        loop = asyncio.get_running_loop()

        async def validate_with_limit(entity: str) -> ValidationType | BulkFailure:
            async with semaphore:
                try:
                    if expires_at is not None and loop.time() >= expires_at:
                        raise DeadlineExceeded(entity)
                    return await validate(entity)
                except Exception as exc:
                    logger.warning(f"Validation failed for {entity}: {exc}")
                    return BulkFailure(
                        entity=entity,
                        error=str(exc),
                        exception_type=type(exc).__name__,
                    )
                finally:
                    self._notify(entity)

        outcomes = await asyncio.gather(*(validate_with_limit(entity) for entity in entities))

        result: BulkResult[ValidationType] = BulkResult(policy=self.validator.policy)
        for outcome in outcomes:
            if isinstance(outcome, BulkFailure):
                result.failures.append(outcome)
            else:
                result.results.append(outcome)

        logger.info(
            f"Validated {result.total} entities: {result.success_count} successful, "
            f"{result.error_count} errors, {result.mismatch_count} mismatches"
        )
        return result

    async def _validate_reserves(
        self,
        mode: BalanceMode,
        expires_at: float | None,
    ) -> BulkResult[ReserveValidation]:
        reserves = await self.validator.data_access.list_all_reserves()
        logger.info(f"Validating {len(reserves)} reserves ({mode.value} balances)")

        return await self._run(
            [reserve.reserve_address for reserve in reserves],
            lambda reserve_address: self.validator.validate_reserve(reserve_address, mode),
            expires_at,
        )

    async def _validate_users(
        self,
        mode: BalanceMode,
        expires_at: float | None,
    ) -> BulkResult[UserValidation]:
        users = await self.validator.data_access.list_all_users()
        logger.info(f"Validating {len(users)} users ({mode.value} balances)")

        return await self._run(
            [user.user_address for user in users],
            lambda user_address: self.validator.validate_user_all_positions(user_address, mode),
            expires_at,
        )

    async def validate_all_reserves(
        self,
        mode: BalanceMode = BalanceMode.REAL,
    ) -> BulkResult[ReserveValidation]:
        return await self._validate_reserves(mode, self._expiry())

    async def validate_all_users(
        self,
        mode: BalanceMode = BalanceMode.REAL,
    ) -> BulkResult[UserValidation]:
        return await self._validate_users(mode, self._expiry())

    async def validate_everything(self, mode: BalanceMode = BalanceMode.REAL) -> EverythingResult:
        """
        Validate every reserve, then every user. The deadline covers both phases together.
        """

        expires_at = self._expiry()
        reserves = await self._validate_reserves(mode, expires_at)
        users = await self._validate_users(mode, expires_at)
        return EverythingResult(reserves=reserves, users=users)

    async def validate_all_reserve_indexes(self) -> BulkResult[ReserveIndexValidation]:
        expires_at = self._expiry()
        reserves = await self.validator.data_access.list_all_reserves()
        logger.info(f"Validating indexes for {len(reserves)} reserves")

        return await self._run(
            [reserve.reserve_address for reserve in reserves],
            self.validator.validate_reserve_indexes,
            expires_at,
        )
