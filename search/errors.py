"""
Error kinds raised by the catalog search.
"""


class SearchError(Exception):
    """Base class for all catalog search errors."""


class CriteriaError(SearchError, ValueError):
    """Malformed search input, raised before any query is composed."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []


class QueryError(SearchError):
    """The store failed while executing a composed query. Never retried here."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class NotFoundError(SearchError, LookupError):
    """A point lookup matched zero rows."""

    def __init__(self, entity, key):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key
