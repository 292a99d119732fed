import sqlite3
from contextlib import contextmanager
from callcenter.config import settings


@contextmanager
def get_db():
    """Open a connection to the service database; rows come back as ``sqlite3.Row``.

    Dispatch writes and webhook writes land concurrently, so the journal runs
    in WAL mode and writers wait up to 30s for the lock.
    """
    conn = sqlite3.connect(settings.DATABASE_PATH, check_same_thread=False, timeout=30)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    try:
        yield conn
    finally:
        conn.close()
