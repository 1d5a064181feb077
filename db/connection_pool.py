"""
Connection pool for the photo catalog.

Thread-safe pool of pre-configured SQLite connections shared by concurrent searches.
"""

import sqlite3
import threading
from contextlib import contextmanager
from queue import Full, Queue

from db.connection import DEFAULT_DB_PATH, apply_pragmas, register_functions


class ConnectionPool:
    """Thread-safe connection pool for the catalog database.

    Connections are configured once (pragmas, SQL functions, row factory) and
    reused. Each connection is handed to one caller at a time, so concurrent
    searches never share a cursor or a transaction.

    Usage:
        pool = ConnectionPool('catalog.db', size=4)
        with pool.connection() as conn:
            conn.execute("SELECT ...")
    """

    def __init__(self, db_path=DEFAULT_DB_PATH, size=5, row_factory=True,
                 mmap_size_mb=None, cache_size_mb=None, config=None):
        self.db_path = db_path
        self.size = size
        self.row_factory = row_factory
        self._mmap_size_mb = mmap_size_mb
        self._cache_size_mb = cache_size_mb
        self._config = config
        self._pool = Queue(maxsize=size)
        self._lock = threading.Lock()
        self._initialized = False

    def _create_connection(self):
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        apply_pragmas(conn, mmap_size_mb=self._mmap_size_mb, cache_size_mb=self._cache_size_mb,
                      config=self._config)
        register_functions(conn)
        if self.row_factory:
            conn.row_factory = sqlite3.Row
        return conn

    def _initialize_pool(self):
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            for _ in range(self.size):
                self._pool.put(self._create_connection())
            self._initialized = True

    def get_connection(self, timeout=30):
        """Take a connection from the pool.

        Raises:
            queue.Empty: If no connection is available within timeout
        """
        self._initialize_pool()
        return self._pool.get(timeout=timeout)

    def return_connection(self, conn):
        """Give a connection back, discarding it if it can no longer be reset."""
        try:
            conn.rollback()
            self._pool.put_nowait(conn)
        except (sqlite3.Error, Full):
            conn.close()

    @contextmanager
    def connection(self):
        conn = self.get_connection()
        try:
            yield conn
        finally:
            self.return_connection(conn)

    def close_all(self):
        """Close all idle connections in the pool."""
        while not self._pool.empty():
            self._pool.get_nowait().close()
        self._initialized = False


_connection_pool = None
_pool_lock = threading.Lock()


def get_pool(db_path=DEFAULT_DB_PATH, size=5, config=None):
    """Get or create the process-wide pool (arguments only used on first call)."""
    global _connection_pool
    with _pool_lock:
        if _connection_pool is None:
            _connection_pool = ConnectionPool(db_path, size=size, config=config)
    return _connection_pool
