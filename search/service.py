"""
Photo catalog search service.

PhotoSearch runs composed searches and point lookups against the SQLite
catalog. It keeps no per-request state, so one instance can serve concurrent
callers as long as each call gets its own connection.
"""

import logging
import sqlite3
import time
from contextlib import contextmanager

from config import SearchConfig
from db import DEFAULT_DB_PATH, get_connection
from search.composer import compose_predicates
from search.criteria import parse_criteria
from search.errors import CriteriaError, NotFoundError, QueryError
from search.models import File, Photo, SearchResultRow, SearchResults
from search.paging import effective_window, order_by_clause
from search.query import attach_tag_labels, build_count_query, build_search_query

logger = logging.getLogger(__name__)


class PhotoSearch:
    """Searches photos and looks up files/photos in a catalog database.

    Usage:
        finder = PhotoSearch('catalog.db')
        results = finder.photos({'query': 'beach', 'count': 20})
        for row in results.rows:
            print(row.photo_title, row.tags)
    """

    def __init__(self, db_path=DEFAULT_DB_PATH, config=None, pool=None):
        """
        Args:
            db_path: Path to the SQLite catalog (ignored when pool is given)
            config: SearchConfig; loaded from search_config.json when None
            pool: Optional db.ConnectionPool to borrow connections from
        """
        self.db_path = db_path
        self.config = config or SearchConfig()
        self.pool = pool

    @contextmanager
    def _connection(self):
        if self.pool is not None:
            with self.pool.connection() as conn:
                yield conn
        else:
            with get_connection(self.db_path, config=self.config) as conn:
                yield conn

    def _fetch(self, description, fn):
        """Run fn(conn), turning store failures into QueryError."""
        try:
            with self._connection() as conn:
                return fn(conn)
        except sqlite3.Error as e:
            logger.error("%s failed: %s", description, e)
            raise QueryError(f"{description} failed: {e}", cause=e) from e

    def photos(self, criteria):
        """Search photos matching criteria.

        Args:
            criteria: SearchCriteria or a mapping of its fields

        Returns:
            SearchResults with the page of rows and the total match count

        Raises:
            CriteriaError: Invalid criteria (nothing is queried)
            QueryError: The store failed; no partial results are returned
        """
        criteria = parse_criteria(criteria)
        start = time.perf_counter()

        predicates = compose_predicates(criteria, self.config)
        limit, offset = effective_window(criteria.count, criteria.offset,
                                         default=self.config.default_count,
                                         maximum=self.config.max_count)
        separator = self.config.tag_separator
        string_aggregation = self.config.string_aggregation
        query, params = build_search_query(
            predicates, order_by_clause(criteria.order), limit, offset,
            separator=separator, string_aggregation=string_aggregation,
        )
        count_query, count_params = build_count_query(predicates)

        def run(conn):
            # Page and total read from one snapshot
            conn.execute("BEGIN")
            try:
                rows = [dict(row) for row in conn.execute(query, params).fetchall()]
                total = conn.execute(count_query, count_params).fetchone()[0]
                if not string_aggregation:
                    attach_tag_labels(rows, conn, separator=separator)
            finally:
                conn.rollback()
            return rows, total

        rows, total = self._fetch("Photo search", run)
        logger.debug("search for %r took %.3fs (%d of %d)",
                     criteria, time.perf_counter() - start, len(rows), total)

        result_rows = []
        for row in rows:
            result_row = SearchResultRow.model_validate(row)
            result_row._tag_separator = separator
            result_rows.append(result_row)

        return SearchResults(
            rows=result_rows,
            total=total,
            count=limit,
            offset=offset,
        )

    def find_files(self, limit, offset):
        """Return up to limit files starting at offset, ordered by id."""
        if limit < 0 or offset < 0:
            raise CriteriaError(f"limit and offset must not be negative (got {limit}, {offset})")

        rows = self._fetch("File listing", lambda conn: conn.execute(
            "SELECT * FROM files WHERE deleted_at IS NULL ORDER BY id LIMIT ? OFFSET ?",
            (limit, offset)
        ).fetchall())
        return [File.model_validate(dict(row)) for row in rows]

    def _find_file(self, column, value):
        def run(conn):
            file_row = conn.execute(
                f"SELECT * FROM files WHERE {column} = ? AND deleted_at IS NULL ORDER BY id LIMIT 1",
                (value,)
            ).fetchone()
            if file_row is None:
                return None, None
            photo_row = conn.execute(
                "SELECT * FROM photos WHERE id = ? AND deleted_at IS NULL", (file_row['photo_id'],)
            ).fetchone()
            return file_row, photo_row

        file_row, photo_row = self._fetch(f"File lookup by {column}", run)
        if file_row is None:
            raise NotFoundError('File', value)
        file = dict(file_row)
        file['photo'] = dict(photo_row) if photo_row is not None else None
        return File.model_validate(file)

    def find_file_by_id(self, file_id):
        """Return the file with this id, with its photo attached."""
        return self._find_file('id', file_id)

    def find_file_by_hash(self, file_hash):
        """Return the file with this content hash, with its photo attached."""
        return self._find_file('file_hash', file_hash)

    def find_photo_by_id(self, photo_id):
        """Return the photo with this id."""
        row = self._fetch("Photo lookup", lambda conn: conn.execute(
            "SELECT * FROM photos WHERE id = ? AND deleted_at IS NULL", (photo_id,)
        ).fetchone())
        if row is None:
            raise NotFoundError('Photo', photo_id)
        return Photo.model_validate(dict(row))
