"""
Database connection and initialization.
"""

import aiosqlite
from pathlib import Path
from productivity.config import settings
from productivity.logging import get_logger

logger = get_logger('database')

DATABASE_PATH = Path(settings.DATABASE_PATH)

# SQLite's LIKE and lower() only fold ASCII letters.
CASEFOLD_FUNCTION = "casefold"


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


async def connect(db_path: str | Path) -> aiosqlite.Connection:
    """
    Open a connection with dict-style rows and a Unicode ``casefold()`` SQL function.

    :param db_path: Path to the SQLite database file
    :type db_path: str | Path
    :return: Open database connection; the caller closes it
    :rtype: aiosqlite.Connection
    """
    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await db.create_function(CASEFOLD_FUNCTION, 1, _casefold, deterministic=True)
    return db


async def init_db(db_path: str | Path | None = None):
    """
    Initialize database with schema.

    :param db_path: Database file to initialize, defaults to the configured path
    :type db_path: str | Path | None
    :return: None
    :rtype: None
    """
    path = Path(db_path) if db_path is not None else DATABASE_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(path) as db:
        schema_path = Path(__file__).parent / "init_db.sql"
        with open(schema_path) as f:
            await db.executescript(f.read())
        await db.commit()
        logger.info(f"Database initialized at {path}")
