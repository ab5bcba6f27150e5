from .base import Base
from .reserves import ReserveTable, UserPositionTable, UserTable

__all__ = (
    "Base",
    "ReserveTable",
    "UserPositionTable",
    "UserTable",
)
