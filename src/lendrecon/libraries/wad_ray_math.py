"""
Ray fixed-point arithmetic, matching the rounding of Aave's WadRayMath library.

A ray is a decimal number with 27 digits of precision. Both operations round half up by adding
half of the denominator before the integer division, and both revert (raise) instead of
wrapping when an intermediate value leaves the uint256 domain.
"""

from lendrecon.constants import MAX_UINT256
from lendrecon.exceptions.math import MathDivisionByZero, MathOverflow

# Ray: decimal numbers with 27 digits of precision
RAY = 10**27
HALF_RAY = 5 * 10**26


def _raise_on_overflow(value: int, operation: str) -> None:
    if value > MAX_UINT256:
        raise MathOverflow(operation)


def _raise_on_negative(*values: int, operation: str) -> None:
    if any(value < 0 for value in values):
        raise MathOverflow(operation)


def ray_mul(a: int, b: int) -> int:
    """
    Multiplies two ray, rounding half up to the nearest ray.
    """

    _raise_on_negative(a, b, operation="ray_mul")
    _raise_on_overflow(a * b + HALF_RAY, operation="ray_mul")
    return (a * b + HALF_RAY) // RAY


def ray_div(a: int, b: int) -> int:
    """
    Divides two ray, rounding half up to the nearest ray.
    """

    if b == 0:
        raise MathDivisionByZero("ray_div")
    _raise_on_negative(a, b, operation="ray_div")
    _raise_on_overflow(a * RAY + b // 2, operation="ray_div")
    return (a * RAY + b // 2) // b
