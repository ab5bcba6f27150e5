from decimal import Decimal

import hypothesis
import hypothesis.strategies
import pytest

from lendrecon.constants import MAX_UINT128
from lendrecon.exceptions import BalanceParseError, MathOverflow
from lendrecon.libraries.token_math import (
    get_collateral_balance,
    get_debt_balance,
    parse_balance,
    project_real_balance,
)
from lendrecon.libraries.wad_ray_math import RAY


def test_projection_at_unit_index() -> None:
    assert project_real_balance(1_000_000, RAY) == 1_000_000


def test_projection_at_unit_index_large_balance() -> None:
    assert project_real_balance(1_000_000 * 10**18, RAY) == 1_000_000 * 10**18


def test_projection_applies_index() -> None:
    index = 1_050_000_000_000_000_000_000_000_000
    assert project_real_balance(1_000_000, index) == 1_050_000
    assert get_collateral_balance(1_000_000, index) == 1_050_000
    assert get_debt_balance(1_000_000, index) == 1_050_000


def test_projection_rounds_half_up() -> None:
    # 3 * 1.5 = 4.5, which rounds up
    assert project_real_balance(3, 15 * 10**26) == 5
    # 3 * 1.4 = 4.2, which rounds down
    assert project_real_balance(3, 14 * 10**26) == 4


def test_projection_of_zero() -> None:
    assert project_real_balance(0, 2 * RAY) == 0
    assert project_real_balance(1_000_000, 0) == 0


def test_projection_exceeding_uint128() -> None:
    with pytest.raises(MathOverflow, match="project_real_balance"):
        project_real_balance(MAX_UINT128, 2 * RAY)

    assert project_real_balance(MAX_UINT128, RAY) == MAX_UINT128


@hypothesis.given(
    scaled=hypothesis.strategies.integers(min_value=0, max_value=MAX_UINT128),
    index=hypothesis.strategies.integers(min_value=RAY, max_value=10 * RAY),
)
def test_projection_is_monotonic_in_index(scaled: int, index: int) -> None:
    try:
        lower = project_real_balance(scaled, index)
        higher = project_real_balance(scaled, index + RAY // 100)
    except MathOverflow:
        return
    assert lower <= higher
    assert lower >= scaled


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, 0),
        (1_000_000, 1_000_000),
        ("1000000", 1_000_000),
        (" 42 ", 42),
        ("115792089237316195423570985008687907853269984665640564039457584007913129639935", 2**256 - 1),  # noqa: E501
        (Decimal("7"), 7),
        (Decimal("7.000"), 7),
        (Decimal("1E+3"), 1_000),
    ],
)
def test_parse_balance(value: int | str | Decimal, expected: int) -> None:
    assert parse_balance(value, "a_token_balance") == expected


@pytest.mark.parametrize(
    "value",
    [
        None,
        True,
        -1,
        "",
        "-5",
        "1.5",
        "0x10",
        "abc",
        "١٢٣",
        Decimal("1.5"),
        Decimal("-3"),
        Decimal("NaN"),
        Decimal("Infinity"),
        1.0,
    ],
)
def test_parse_balance_rejects(value: object) -> None:
    with pytest.raises(BalanceParseError, match="total_scaled_debt"):
        parse_balance(value, "total_scaled_debt")  # type: ignore[arg-type]


def test_parse_balance_error_attributes() -> None:
    with pytest.raises(BalanceParseError) as exc_info:
        parse_balance("12abc", "debt_token_balance")
    assert exc_info.value.field == "debt_token_balance"
    assert exc_info.value.value == "12abc"
