from lendrecon.database.data_access import SqlDataAccess
from lendrecon.database.operations import (
    backup_sqlite_database,
    compact_sqlite_database,
    create_new_sqlite_database,
    get_scoped_sqlite_session,
    remove_sqlite_database,
)

__all__ = (
    "SqlDataAccess",
    "backup_sqlite_database",
    "compact_sqlite_database",
    "create_new_sqlite_database",
    "get_scoped_sqlite_session",
    "remove_sqlite_database",
)
