"""
Lifecycle of the SQLite ledger file: creation, backup, compaction, removal and sessions.
"""

import contextlib
import pathlib
import sqlite3
from collections.abc import Iterator

from sqlalchemy import URL, Engine, create_engine, text
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from lendrecon.database.models import Base
from lendrecon.exceptions.base import LendreconValueError
from lendrecon.exceptions.database import BackupExists
from lendrecon.logging import logger

SIDECAR_SUFFIXES = ("-wal", "-shm")


def _sqlite_url(db_path: pathlib.Path) -> URL:
    return URL.create(drivername="sqlite", database=str(db_path.absolute()))


@contextlib.contextmanager
def _sqlite_engine(db_path: pathlib.Path) -> Iterator[Engine]:
    engine = create_engine(_sqlite_url(db_path))
    try:
        yield engine
    finally:
        engine.dispose()


def _require_database(db_path: pathlib.Path) -> None:
    if not db_path.exists():
        raise LendreconValueError(message=f"No database found at {db_path}")


def create_new_sqlite_database(db_path: pathlib.Path) -> None:
    """
    Create the ledger schema in a new WAL-mode database file.
    """

    db_path.parent.mkdir(parents=True, exist_ok=True)

    with _sqlite_engine(db_path) as engine, engine.connect() as connection:
        journal_mode = connection.execute(text("PRAGMA journal_mode=WAL;")).scalar()
        assert journal_mode == "wal"
        connection.execute(text("PRAGMA auto_vacuum=FULL;"))
        Base.metadata.create_all(bind=engine)
        connection.execute(text("VACUUM;"))

    logger.info(f"Initialized new SQLite database at {db_path}")


def backup_sqlite_database(db_path: pathlib.Path) -> pathlib.Path:
    """
    Copy the database to a `.bak` file beside it and return the backup path.

    Raises `BackupExists` instead of overwriting an earlier backup.
    """

    _require_database(db_path)

    backup_path = db_path.with_suffix(db_path.suffix + ".bak")
    if backup_path.exists():
        raise BackupExists(path=backup_path)

    # Fold the write-ahead log into the main file so the copy is complete
    with _sqlite_engine(db_path) as engine, engine.connect() as connection:
        connection.execute(text("PRAGMA wal_checkpoint(FULL);"))

    with sqlite3.connect(db_path) as source, sqlite3.connect(backup_path) as target:
        source.backup(target)

    logger.info(f"Backed up SQLite database at {db_path} to {backup_path}")
    return backup_path


def compact_sqlite_database(db_path: pathlib.Path) -> None:
    _require_database(db_path)

    with _sqlite_engine(db_path) as engine, engine.connect() as connection:
        connection.execute(text("VACUUM;"))

    logger.info(f"Compacted SQLite database at {db_path}")


def remove_sqlite_database(db_path: pathlib.Path) -> None:
    """
    Delete the database file together with its WAL and shared-memory files.
    """

    sidecars = [db_path.with_name(db_path.name + suffix) for suffix in SIDECAR_SUFFIXES]
    for path in (db_path, *sidecars):
        path.unlink(missing_ok=True)

    logger.info(f"Removed SQLite database at {db_path}")


def get_scoped_sqlite_session(database_path: pathlib.Path) -> scoped_session[Session]:
    return scoped_session(
        session_factory=sessionmaker(bind=create_engine(_sqlite_url(database_path)))
    )
