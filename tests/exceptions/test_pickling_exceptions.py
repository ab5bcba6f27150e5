import pathlib
import pickle

import pytest

from lendrecon.exceptions import (
    BackupExists,
    BalanceParseError,
    ChainCallTimeout,
    ChainUnavailable,
    DeadlineExceeded,
    LendreconError,
    LendreconValueError,
    MathDivisionByZero,
    MathOverflow,
    ReserveNotFound,
    UserNotFound,
)


@pytest.mark.parametrize(
    "exception",
    [
        LendreconValueError(message="Invalid pool address"),
        BackupExists(path=pathlib.Path("/tmp/lendrecon.db.bak")),
        BalanceParseError(field="a_token_balance", value="12abc"),
        ChainUnavailable(error="connection refused"),
        ChainCallTimeout(call="totalSupply()", timeout_seconds=2.5),
        ChainCallTimeout(call="totalSupply()"),
        DeadlineExceeded(entity="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"),
        MathOverflow(operation="ray_mul"),
        MathDivisionByZero(operation="ray_div"),
        ReserveNotFound(reserve_address="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"),
        UserNotFound(user_address="0x00000000000000000000000000000000000a11ce"),
    ],
)
def test_exception_pickling(exception: LendreconError) -> None:
    """
    Test that each exception's `__reduce__` method allows the exception to be pickled and
    unpickled correctly.
    """

    unpickled_exception = pickle.loads(pickle.dumps(exception))

    assert type(unpickled_exception) is type(exception)
    assert unpickled_exception.message == exception.message
    assert str(unpickled_exception) == str(exception)


def test_exception_messages() -> None:
    assert str(ChainUnavailable(error="connection refused")) == (
        "Chain unavailable: connection refused"
    )
    assert str(ChainCallTimeout(call="totalSupply()", timeout_seconds=2.5)) == (
        "Chain unavailable: timed out waiting for totalSupply() after 2.5 seconds"
    )
    assert isinstance(ChainCallTimeout(call="totalSupply()"), ChainUnavailable)
    assert str(ReserveNotFound(reserve_address="0xabc")) == (
        "No reserve data found for reserve address 0xabc"
    )
    assert str(UserNotFound(user_address="0xdef")) == "No position data found for user address 0xdef"
