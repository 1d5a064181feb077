"""
Photo catalog database package.

Re-exports public API for short imports.
"""

from db.connection import (
    get_connection, apply_pragmas, get_pragma_values, register_functions, DEFAULT_DB_PATH,
)
from db.connection_pool import ConnectionPool, get_pool
from db.schema import (
    init_database,
    CAMERAS_COLUMNS, LENSES_COLUMNS, COUNTRIES_COLUMNS, LOCATIONS_COLUMNS,
    PHOTOS_COLUMNS, FILES_COLUMNS, TAGS_COLUMNS, PHOTO_TAGS_COLUMNS,
    TABLES, INDEXES,
)
