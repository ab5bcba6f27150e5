import hypothesis
import hypothesis.strategies
import pytest

from lendrecon.constants import MAX_UINT256, MIN_UINT256
from lendrecon.exceptions import MathDivisionByZero, MathError, MathOverflow
from lendrecon.libraries.wad_ray_math import HALF_RAY, RAY, ray_div, ray_mul


def test_constants() -> None:
    assert RAY == 1 * 10**27
    assert HALF_RAY == 1 * 10**27 // 2


def test_ray_mul_edge() -> None:
    assert ray_mul(0, RAY) == 0
    assert ray_mul(RAY, 0) == 0
    assert ray_mul(0, 0) == 0


def test_ray_mul() -> None:
    assert ray_mul(25 * 10**26, 5 * 10**26) == 125 * 10**25
    assert ray_mul(4122 * 10**26, 1 * 10**27) == 4122 * 10**26
    assert ray_mul(6 * 10**27, 2 * 10**27) == 12 * 10**27


def test_ray_mul_rounds_half_up() -> None:
    assert ray_mul(1, HALF_RAY) == 1
    assert ray_mul(1, HALF_RAY - 1) == 0
    assert ray_mul(3, HALF_RAY) == 2


def test_ray_div() -> None:
    assert ray_div(25 * 10**26, 5 * 10**26) == 5 * 10**27
    assert ray_div(4122 * 10**26, 1 * 10**27) == 4122 * 10**26
    assert ray_div(6 * 10**27, 2 * 10**27) == 3 * 10**27


def test_ray_div_rounds_half_up() -> None:
    assert ray_div(1, 2 * RAY) == 1
    assert ray_div(1, 3 * RAY) == 0


def test_ray_div_by_zero() -> None:
    with pytest.raises(MathDivisionByZero, match="Division by zero in ray_div"):
        ray_div(RAY, 0)
    with pytest.raises(MathError):
        ray_div(0, 0)


def test_ray_mul_overflow() -> None:
    with pytest.raises(MathOverflow, match="Overflow in ray_mul"):
        ray_mul(MAX_UINT256, 2)


def test_ray_div_overflow() -> None:
    with pytest.raises(MathOverflow, match="Overflow in ray_div"):
        ray_div(MAX_UINT256, 1)


def test_negative_operands_rejected() -> None:
    with pytest.raises(MathOverflow):
        ray_mul(-1, RAY)
    with pytest.raises(MathOverflow):
        ray_div(-1, RAY)


@hypothesis.given(
    a=hypothesis.strategies.integers(min_value=MIN_UINT256, max_value=MAX_UINT256),
    b=hypothesis.strategies.integers(min_value=MIN_UINT256, max_value=MAX_UINT256),
)
def test_ray_mul_fuzzing(a: int, b: int) -> None:
    if a * b + HALF_RAY > MAX_UINT256:
        with pytest.raises(MathOverflow):
            ray_mul(a, b)
    else:
        assert ray_mul(a, b) == (a * b + HALF_RAY) // RAY


@hypothesis.given(
    a=hypothesis.strategies.integers(min_value=MIN_UINT256, max_value=MAX_UINT256),
    b=hypothesis.strategies.integers(min_value=MIN_UINT256, max_value=MAX_UINT256),
)
def test_ray_div_fuzzing(a: int, b: int) -> None:
    if b == 0:
        with pytest.raises(MathDivisionByZero):
            ray_div(a, b)
    elif a * RAY + b // 2 > MAX_UINT256:
        with pytest.raises(MathOverflow):
            ray_div(a, b)
    else:
        assert ray_div(a, b) == (a * RAY + b // 2) // b


@hypothesis.given(
    a=hypothesis.strategies.integers(min_value=0, max_value=(MAX_UINT256 - HALF_RAY) // RAY),
)
def test_ray_identities(a: int) -> None:
    assert ray_mul(a, RAY) == a
    assert ray_div(a, RAY) == a


def test_exact_values() -> None:
    assert ray_mul(2 * RAY, 3 * RAY) == 6 * RAY
    assert ray_div(3 * RAY, 2 * RAY) == RAY + RAY // 2
    with pytest.raises(MathDivisionByZero):
        ray_div(1, 0)
