__all__ = (
    "MAX_UINT128",
    "MAX_UINT256",
    "MIN_UINT256",
)

import typing


def _min_uint(_: int) -> int:
    return 0


def _max_uint(bits: int) -> int:
    return typing.cast("int", 2**bits - 1)


MAX_UINT128 = _max_uint(128)

MIN_UINT256 = _min_uint(256)
MAX_UINT256 = _max_uint(256)
