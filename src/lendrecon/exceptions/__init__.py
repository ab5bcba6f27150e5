from lendrecon.exceptions.base import DeadlineExceeded, LendreconError, LendreconValueError
from lendrecon.exceptions.connection import ChainCallTimeout, ChainUnavailable
from lendrecon.exceptions.database import BackupExists, BalanceParseError
from lendrecon.exceptions.fetching import RecordNotFound, ReserveNotFound, UserNotFound
from lendrecon.exceptions.math import MathDivisionByZero, MathError, MathOverflow

from . import base, connection, database, fetching, math

__all__ = (
    "BackupExists",
    "BalanceParseError",
    "ChainCallTimeout",
    "ChainUnavailable",
    "DeadlineExceeded",
    "LendreconError",
    "LendreconValueError",
    "MathDivisionByZero",
    "MathError",
    "MathOverflow",
    "RecordNotFound",
    "ReserveNotFound",
    "UserNotFound",
    "base",
    "connection",
    "database",
    "fetching",
    "math",
)
