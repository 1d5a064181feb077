"""
Database schema definitions and initialization for the photo catalog.

Single source of truth for all table and index definitions.
"""

import logging
import sqlite3

from db.connection import apply_pragmas

logger = logging.getLogger(__name__)

# Schema definitions as (name, type_definition) tuples
# Type definition includes any defaults or constraints

CAMERAS_COLUMNS = [
    ('id', 'INTEGER PRIMARY KEY AUTOINCREMENT'),
    ('camera_make', 'TEXT'),
    ('camera_model', 'TEXT'),
]

LENSES_COLUMNS = [
    ('id', 'INTEGER PRIMARY KEY AUTOINCREMENT'),
    ('lens_make', 'TEXT'),
    ('lens_model', 'TEXT'),
]

COUNTRIES_COLUMNS = [
    ('id', 'TEXT PRIMARY KEY'),  # ISO code, e.g. 'de'
    ('country_name', 'TEXT'),
]

LOCATIONS_COLUMNS = [
    ('id', 'INTEGER PRIMARY KEY AUTOINCREMENT'),
    ('loc_display_name', 'TEXT'),
    ('loc_name', 'TEXT'),
    ('loc_city', 'TEXT'),
    ('loc_postcode', 'TEXT'),
    ('loc_county', 'TEXT'),
    ('loc_state', 'TEXT'),
    ('loc_country', 'TEXT'),
    ('loc_country_code', 'TEXT'),
    ('loc_category', 'TEXT'),
    ('loc_type', 'TEXT'),
]

PHOTOS_COLUMNS = [
    ('id', 'INTEGER PRIMARY KEY AUTOINCREMENT'),
    ('created_at', "TEXT DEFAULT (datetime('now'))"),
    ('updated_at', "TEXT DEFAULT (datetime('now'))"),
    ('deleted_at', 'TEXT'),
    ('taken_at', 'TEXT'),  # 'YYYY-MM-DD HH:MM:SS'

    # Descriptive metadata
    ('photo_title', 'TEXT'),
    ('photo_description', 'TEXT'),
    ('photo_notes', 'TEXT'),
    ('photo_artist', 'TEXT'),
    ('photo_keywords', 'TEXT'),
    ('photo_colors', 'TEXT'),
    ('photo_color', 'TEXT'),
    ('photo_canonical_name', 'TEXT'),
    ('photo_lat', 'REAL DEFAULT 0'),
    ('photo_long', 'REAL DEFAULT 0'),
    ('photo_aperture', 'REAL DEFAULT 0'),
    ('photo_favorite', 'INTEGER DEFAULT 0 CHECK (photo_favorite IN (0, 1))'),

    # Relations
    ('camera_id', 'INTEGER NOT NULL REFERENCES cameras(id)'),
    ('lens_id', 'INTEGER NOT NULL REFERENCES lenses(id)'),
    ('country_id', 'TEXT REFERENCES countries(id)'),
    ('location_id', 'INTEGER REFERENCES locations(id)'),
]

FILES_COLUMNS = [
    ('id', 'INTEGER PRIMARY KEY AUTOINCREMENT'),
    ('photo_id', 'INTEGER NOT NULL REFERENCES photos(id) ON DELETE CASCADE'),
    ('created_at', "TEXT DEFAULT (datetime('now'))"),
    ('updated_at', "TEXT DEFAULT (datetime('now'))"),
    ('deleted_at', 'TEXT'),

    # Flags
    ('file_primary', 'INTEGER DEFAULT 0 CHECK (file_primary IN (0, 1))'),
    ('file_missing', 'INTEGER DEFAULT 0 CHECK (file_missing IN (0, 1))'),
    ('file_duplicate', 'INTEGER DEFAULT 0 CHECK (file_duplicate IN (0, 1))'),
    ('file_portrait', 'INTEGER DEFAULT 0 CHECK (file_portrait IN (0, 1))'),

    # File attributes
    ('file_name', 'TEXT'),
    ('file_hash', 'TEXT'),
    ('file_perceptual_hash', 'TEXT'),
    ('file_type', 'TEXT'),
    ('file_mime', 'TEXT'),
    ('file_width', 'INTEGER'),
    ('file_height', 'INTEGER'),
    ('file_orientation', 'INTEGER'),
    ('file_aspect_ratio', 'REAL'),

    # Color analysis
    ('file_main_color', 'TEXT'),
    ('file_colors', 'TEXT'),
    ('file_luminance', 'TEXT'),
    ('file_chroma', 'INTEGER DEFAULT 0 CHECK (file_chroma >= 0)'),
]

TAGS_COLUMNS = [
    ('id', 'INTEGER PRIMARY KEY AUTOINCREMENT'),
    ('tag_label', 'TEXT NOT NULL UNIQUE'),
]

PHOTO_TAGS_COLUMNS = [
    ('photo_id', 'INTEGER NOT NULL REFERENCES photos(id) ON DELETE CASCADE'),
    ('tag_id', 'INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE'),
]

# Table creation order respects foreign keys
TABLES = [
    ('cameras', CAMERAS_COLUMNS, None),
    ('lenses', LENSES_COLUMNS, None),
    ('countries', COUNTRIES_COLUMNS, None),
    ('locations', LOCATIONS_COLUMNS, None),
    ('photos', PHOTOS_COLUMNS, None),
    ('files', FILES_COLUMNS, None),
    ('tags', TAGS_COLUMNS, None),
    ('photo_tags', PHOTO_TAGS_COLUMNS, ['PRIMARY KEY (photo_id, tag_id)']),
]

# Index definitions as (name, table, column_expression)
INDEXES = [
    ('idx_photos_taken_at', 'photos', 'taken_at DESC'),
    ('idx_photos_created_at', 'photos', 'created_at DESC'),
    ('idx_photos_camera', 'photos', 'camera_id'),
    ('idx_photos_location', 'photos', 'location_id'),
    ('idx_photos_lat_long', 'photos', 'photo_lat, photo_long'),
    ('idx_files_photo_primary', 'files', 'photo_id, file_primary'),
    ('idx_files_hash', 'files', 'file_hash'),
    ('idx_files_main_color', 'files', 'file_main_color'),
    ('idx_photo_tags_tag', 'photo_tags', 'tag_id'),
    ('idx_locations_country_code', 'locations', 'loc_country_code'),
]


def _build_create_table_sql(table_name, columns, constraints=None):
    """Build CREATE TABLE IF NOT EXISTS SQL from column definitions."""
    col_defs = [f'{name} {typedef}' for name, typedef in columns]
    if constraints:
        col_defs.extend(constraints)
    cols_sql = ',\n                    '.join(col_defs)
    return f'''CREATE TABLE IF NOT EXISTS {table_name} (
                    {cols_sql}
                )'''


def _migrate_add_missing_columns(conn, table_name, columns):
    """Add any missing columns to an existing table.

    Args:
        conn: SQLite connection
        table_name: Name of the table to migrate
        columns: List of (name, type_definition) tuples defining expected columns
    """
    cursor = conn.execute(f"PRAGMA table_info({table_name})")
    existing_cols = {row[1] for row in cursor.fetchall()}

    for col_name, col_type in columns:
        if col_name not in existing_cols:
            # ALTER TABLE only accepts the base type
            base_type = col_type.split()[0] if col_type else 'TEXT'
            try:
                conn.execute(f"ALTER TABLE {table_name} ADD COLUMN {col_name} {base_type}")
                logger.info("Added column: %s.%s", table_name, col_name)
            except sqlite3.OperationalError as e:
                if 'duplicate column name' not in str(e).lower():
                    raise


def init_database(db_path='catalog.db'):
    """
    Initialize the catalog schema (idempotent).

    Creates all tables and indexes using CREATE IF NOT EXISTS.
    Safe to call on existing databases - automatically adds new columns.

    Args:
        db_path: Path to the SQLite database file
    """
    with sqlite3.connect(db_path) as conn:
        apply_pragmas(conn)

        for table_name, columns, constraints in TABLES:
            conn.execute(_build_create_table_sql(table_name, columns, constraints=constraints))
            _migrate_add_missing_columns(conn, table_name, columns)

        for idx_name, table, column_expr in INDEXES:
            conn.execute(
                f'CREATE INDEX IF NOT EXISTS {idx_name} ON {table}({column_expr})'
            )

        conn.commit()
    conn.close()
