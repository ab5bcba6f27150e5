"""
Projection of stored scaled balances into real balances.

The database stores aToken and debt token balances in scaled form, i.e. divided by the reserve
index at the time of each mint or burn. The redeemable (or owed) amount at some later point is
recovered by applying the current index:

    real = ray_div(ray_mul(scaled, index), RAY)

The liquidity index governs collateral (aToken) balances and the variable borrow index governs
debt balances. The second step is an identity for every input, but it is kept so that the
calculation mirrors the documented formula one operation at a time.
"""

from decimal import Decimal, InvalidOperation

from lendrecon.constants import MAX_UINT128
from lendrecon.exceptions.database import BalanceParseError
from lendrecon.exceptions.math import MathOverflow
from lendrecon.libraries.wad_ray_math import RAY, ray_div, ray_mul


def project_real_balance(scaled_balance: int, index: int) -> int:
    """
    Apply a ray-scaled index to a scaled balance.

    Raises `MathOverflow` if the result does not fit in a uint128, which is the widest balance
    held by the token contracts.
    """

    real_balance = ray_div(ray_mul(scaled_balance, index), RAY)
    if real_balance > MAX_UINT128:
        raise MathOverflow("project_real_balance")
    return real_balance


def get_collateral_balance(scaled_amount: int, liquidity_index: int) -> int:
    return project_real_balance(scaled_amount, liquidity_index)


def get_debt_balance(scaled_amount: int, borrow_index: int) -> int:
    return project_real_balance(scaled_amount, borrow_index)


def parse_balance(value: int | str | Decimal | None, field: str) -> int:
    """
    Interpret a stored amount as a non-negative integer.

    Stored amounts arrive as Python integers, integer strings (the SQL layer keeps uint256 values
    as text), or `Decimal` values with no fractional part. Anything else raises
    `BalanceParseError` with the name of the offending field.
    """

    match value:
        case bool() | None:
            raise BalanceParseError(field=field, value=value)
        case int():
            result = value
        case str():
            text = value.strip()
            if not (text.isascii() and text.isdigit()):
                raise BalanceParseError(field=field, value=value)
            result = int(text)
        case Decimal():
            try:
                integral = value.to_integral_exact()
            except InvalidOperation:
                raise BalanceParseError(field=field, value=value) from None
            if not value.is_finite() or integral != value:
                raise BalanceParseError(field=field, value=value)
            result = int(integral)
        case _:
            raise BalanceParseError(field=field, value=value)

    if result < 0:
        raise BalanceParseError(field=field, value=value)
    return result
