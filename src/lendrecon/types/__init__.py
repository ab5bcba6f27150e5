from lendrecon.types.abstract import ChainAccess, DataAccess
from lendrecon.types.records import (
    ReserveRecord,
    ReserveTokenField,
    StoredAmount,
    UserPositionRecord,
    UserRecord,
)

__all__ = (
    "ChainAccess",
    "DataAccess",
    "ReserveRecord",
    "ReserveTokenField",
    "StoredAmount",
    "UserPositionRecord",
    "UserRecord",
)
