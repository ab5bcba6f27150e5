from .checksum_cache import get_checksum_address
from .config import settings
from .version import __version__

# isort: split

from .chain import Web3ChainAccess
from .database import SqlDataAccess
from .logging import logger
from .types import ChainAccess, DataAccess, ReserveRecord, UserPositionRecord, UserRecord
from .validation import (
    BalanceMode,
    BulkResult,
    BulkValidator,
    EntryState,
    ReserveIndexValidation,
    ReserveValidation,
    ReserveValidator,
    TolerancePolicy,
    UserValidation,
    Verdict,
)

__all__ = (
    "BalanceMode",
    "BulkResult",
    "BulkValidator",
    "ChainAccess",
    "DataAccess",
    "EntryState",
    "ReserveIndexValidation",
    "ReserveRecord",
    "ReserveValidation",
    "ReserveValidator",
    "SqlDataAccess",
    "TolerancePolicy",
    "UserPositionRecord",
    "UserRecord",
    "UserValidation",
    "Verdict",
    "Web3ChainAccess",
    "__version__",
    "get_checksum_address",
    "logger",
    "settings",
)
