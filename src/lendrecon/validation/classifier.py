"""
Discrepancy classification for a pair of database / on-chain amounts.

Two independent tolerances decide whether a non-zero difference is reported as a minor
mismatch: an absolute floor in the token's smallest unit, and a relative floor in percent of
the on-chain amount. Either one is enough to downgrade the verdict, so small rounding noise on
large balances and single-unit noise on tiny balances are both tolerated.
"""

from dataclasses import dataclass
from enum import Enum

DEFAULT_ABSOLUTE_FLOOR = 1_000_000  # wei
DEFAULT_RELATIVE_FLOOR = 0.01  # percent


class Verdict(Enum):
    MATCH = "match"
    MINOR_MISMATCH = "minor mismatch"
    MISMATCH = "mismatch"


@dataclass(slots=True, frozen=True)
class TolerancePolicy:
    absolute_floor: int = DEFAULT_ABSOLUTE_FLOOR
    relative_floor: float = DEFAULT_RELATIVE_FLOOR


DEFAULT_POLICY = TolerancePolicy()


@dataclass(slots=True, frozen=True)
class Classification:
    verdict: Verdict
    difference: int
    percentage: float
    description: str

    def report(self, calculated: int, on_chain: int) -> str:
        match self.verdict:
            case Verdict.MATCH:
                return f"{self.description} amounts match: {calculated}"
            case Verdict.MINOR_MISMATCH:
                label = "Minor mismatch"
            case Verdict.MISMATCH:
                label = "Mismatch"
        return (
            f"{label} for {self.description}: calculated = {calculated}, "
            f"on-chain = {on_chain}, diff = {self.difference} ({self.percentage:.4f}%)"
        )


def compute_percentage(calculated: int, on_chain: int) -> float:
    """
    Relative difference in percent of the on-chain amount.

    A zero denominator is resolved before dividing: two zero amounts differ by 0%, and a zero on
    exactly one side differs by 100%.
    """

    if on_chain == 0:
        return 0.0 if calculated == 0 else 100.0
    if calculated == 0:
        return 100.0
    return abs(calculated - on_chain) / on_chain * 100.0


def classify(
    calculated: int,
    on_chain: int,
    description: str = "",
    policy: TolerancePolicy = DEFAULT_POLICY,
) -> Classification:
    if calculated == on_chain:
        return Classification(
            verdict=Verdict.MATCH,
            difference=0,
            percentage=0.0,
            description=description,
        )

    difference = abs(calculated - on_chain)
    percentage = compute_percentage(calculated, on_chain)

    if difference < policy.absolute_floor or percentage < policy.relative_floor:
        verdict = Verdict.MINOR_MISMATCH
    else:
        verdict = Verdict.MISMATCH

    return Classification(
        verdict=verdict,
        difference=difference,
        percentage=percentage,
        description=description,
    )
