"""
Database connection utilities for the photo catalog.

Provides connection creation, PRAGMA configuration, SQL functions, and context manager.
"""

import os
import sqlite3
from contextlib import contextmanager

from config import SearchConfig

DEFAULT_DB_PATH = os.environ.get('DB_PATH', 'catalog.db')


def get_pragma_values(config=None):
    """Read mmap_size and cache_size from the performance section of search_config.json.

    Args:
        config: SearchConfig to read from; loaded from search_config.json when None
    """
    perf = (config or SearchConfig()).performance
    return {
        'mmap_size': perf['mmap_size_mb'] * 1024 * 1024,
        'cache_size_kb': perf['cache_size_mb'] * 1000,  # negative KB for PRAGMA cache_size
    }


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_functions(conn):
    """Register the SQL functions catalog queries rely on.

    unicode_lower(x) lowercases the full Unicode range; SQLite's built-in
    LOWER() only folds ASCII letters.
    """
    conn.create_function('unicode_lower', 1, _unicode_lower, deterministic=True)


def apply_pragmas(conn, mmap_size_mb=None, cache_size_mb=None, config=None):
    """Apply standard PRAGMA settings to a connection.

    Args:
        conn: SQLite connection
        mmap_size_mb: Override mmap_size (MB). None = use config value.
        cache_size_mb: Override cache_size (MB). None = use config value.
        config: SearchConfig supplying the defaults; loaded from file when None
    """
    pv = get_pragma_values(config)
    mmap_bytes = mmap_size_mb * 1024 * 1024 if mmap_size_mb is not None else pv['mmap_size']
    cache_kb = cache_size_mb * 1000 if cache_size_mb is not None else pv['cache_size_kb']
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA busy_timeout = 5000")
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA synchronous = NORMAL")
    conn.execute(f"PRAGMA cache_size = -{cache_kb}")
    conn.execute("PRAGMA temp_store = MEMORY")
    conn.execute(f"PRAGMA mmap_size = {mmap_bytes}")


@contextmanager
def get_connection(db_path=DEFAULT_DB_PATH, row_factory=True, config=None):
    """
    Context manager for database connections with WAL mode.

    Args:
        db_path: Path to the SQLite database file
        row_factory: If True, set row_factory to sqlite3.Row for dict-like access
        config: SearchConfig for the performance pragmas

    Yields:
        sqlite3.Connection configured with WAL mode, busy timeout and catalog SQL functions
    """
    conn = sqlite3.connect(db_path)
    apply_pragmas(conn, config=config)
    register_functions(conn)
    if row_factory:
        conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()
