"""
Join/projection assembler and SQLite renderer for photo searches.

One row per photo and primary file: the tag join fans out, so rows are grouped
by photo and file id and tag labels are folded with GROUP_CONCAT. Tag
predicates use EXISTS subqueries so that filtering on one tag never drops the
other labels from the aggregate.
"""

from search.predicates import AnyOf, Equals, Exists, Range, Substring

# Flattened projection, one entry per SearchResultRow field
PHOTO_SELECT_COLS = [
    'photos.id', 'photos.created_at', 'photos.updated_at', 'photos.taken_at',
    'photos.photo_title', 'photos.photo_description', 'photos.photo_artist',
    'photos.photo_keywords', 'photos.photo_colors', 'photos.photo_color',
    'photos.photo_canonical_name', 'photos.photo_lat', 'photos.photo_long',
    'photos.photo_favorite',
]
CAMERA_SELECT_COLS = ['photos.camera_id', 'cameras.camera_make', 'cameras.camera_model']
LENS_SELECT_COLS = ['photos.lens_id', 'lenses.lens_make', 'lenses.lens_model']
COUNTRY_SELECT_COLS = ['photos.country_id', 'countries.country_name']
LOCATION_SELECT_COLS = [
    'photos.location_id', 'locations.loc_display_name', 'locations.loc_name',
    'locations.loc_city', 'locations.loc_postcode', 'locations.loc_county',
    'locations.loc_state', 'locations.loc_country', 'locations.loc_country_code',
    'locations.loc_category', 'locations.loc_type',
]
FILE_SELECT_COLS = [
    'files.id AS file_id', 'files.file_primary', 'files.file_missing', 'files.file_name',
    'files.file_hash', 'files.file_perceptual_hash', 'files.file_type', 'files.file_mime',
    'files.file_width', 'files.file_height', 'files.file_orientation',
    'files.file_aspect_ratio', 'files.file_main_color', 'files.file_chroma',
]
SEARCH_SELECT_COLS = (PHOTO_SELECT_COLS + CAMERA_SELECT_COLS + LENS_SELECT_COLS
                      + COUNTRY_SELECT_COLS + LOCATION_SELECT_COLS + FILE_SELECT_COLS)

SEARCH_JOINS = [
    "JOIN files ON files.photo_id = photos.id AND files.file_primary = 1 AND files.deleted_at IS NULL",
    "JOIN cameras ON cameras.id = photos.camera_id",
    "JOIN lenses ON lenses.id = photos.lens_id",
    "LEFT JOIN countries ON countries.id = photos.country_id",
    "LEFT JOIN locations ON locations.id = photos.location_id",
]
TAG_JOINS = [
    "LEFT JOIN photo_tags ON photo_tags.photo_id = photos.id",
    "LEFT JOIN tags ON tags.id = photo_tags.tag_id",
]

# Always applied: soft-deleted photos and missing files never match
BASE_WHERE = ["photos.deleted_at IS NULL", "files.file_missing = 0"]

GROUP_BY = "photos.id, files.id"

# Logical predicate fields -> SQL expressions
FIELD_COLUMNS = {
    'camera_id': 'photos.camera_id',
    'photo_title': 'photos.photo_title',
    'photo_description': 'photos.photo_description',
    'photo_notes': 'photos.photo_notes',
    'photo_favorite': 'photos.photo_favorite',
    'photo_aperture': 'photos.photo_aperture',
    'photo_lat': 'photos.photo_lat',
    'photo_long': 'photos.photo_long',
    'taken_date': 'DATE(photos.taken_at)',
    'file_main_color': 'files.file_main_color',
    'file_hash': 'files.file_hash',
    'file_duplicate': 'files.file_duplicate',
    'file_portrait': 'files.file_portrait',
    'file_chroma': 'files.file_chroma',
    'location': 'locations.id',
    'loc_display_name': 'locations.loc_display_name',
    'loc_country_code': 'locations.loc_country_code',
}

TAG_FIELD = 'tag_label'
TAG_EXISTS_SQL = ("EXISTS (SELECT 1 FROM photo_tags pt JOIN tags t ON t.id = pt.tag_id "
                  "WHERE pt.photo_id = photos.id AND {condition})")


def escape_like(value):
    """Escape LIKE wildcards so value matches literally (ESCAPE '\\')."""
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def _column(field):
    try:
        return FIELD_COLUMNS[field]
    except KeyError:
        raise ValueError(f"Unknown search field: {field}") from None


def _on_field(field, condition_fn):
    """Apply condition_fn to the field's column, wrapping tag fields in EXISTS."""
    if field == TAG_FIELD:
        return TAG_EXISTS_SQL.format(condition=condition_fn('t.tag_label'))
    return condition_fn(_column(field))


def render_predicate(predicate):
    """Render one predicate to a (sql_fragment, params) pair."""
    if isinstance(predicate, Equals):
        value = int(predicate.value) if isinstance(predicate.value, bool) else predicate.value
        return _on_field(predicate.field, lambda col: f"{col} = ?"), [value]

    if isinstance(predicate, Substring):
        pattern = f"%{escape_like(predicate.value.lower())}%"
        # unicode_lower is registered by db.register_functions
        return _on_field(predicate.field, lambda col: f"unicode_lower({col}) LIKE ? ESCAPE '\\'"), [pattern]

    if isinstance(predicate, Range):
        col = _column(predicate.field)
        if predicate.lower is not None and predicate.upper is not None and not predicate.lower_strict:
            return f"{col} BETWEEN ? AND ?", [predicate.lower, predicate.upper]
        parts, params = [], []
        if predicate.lower is not None:
            parts.append(f"{col} {'>' if predicate.lower_strict else '>='} ?")
            params.append(predicate.lower)
        if predicate.upper is not None:
            parts.append(f"{col} <= ?")
            params.append(predicate.upper)
        if not parts:
            raise ValueError(f"Range on {predicate.field} has no bounds")
        sql = parts[0] if len(parts) == 1 else f"({' AND '.join(parts)})"
        return sql, params

    if isinstance(predicate, Exists):
        return f"{_column(predicate.field)} IS NOT NULL", []

    if isinstance(predicate, AnyOf):
        fragments, params = [], []
        for inner in predicate.predicates:
            sql, inner_params = render_predicate(inner)
            fragments.append(sql)
            params.extend(inner_params)
        return f"({' OR '.join(fragments)})", params

    raise TypeError(f"Unsupported predicate: {predicate!r}")


def build_where(predicates):
    """Build the WHERE clause (base exclusions + predicates) and its params."""
    where_clauses = list(BASE_WHERE)
    sql_params = []
    for predicate in predicates:
        sql, params = render_predicate(predicate)
        where_clauses.append(sql)
        sql_params.extend(params)
    return f" WHERE {' AND '.join(where_clauses)}", sql_params


def _from_clause(with_tags):
    joins = SEARCH_JOINS + (TAG_JOINS if with_tags else [])
    return "photos " + " ".join(joins)


def build_search_query(predicates, order_by, limit, offset, separator=',', string_aggregation=True):
    """Build the paged search query.

    Args:
        predicates: Output of compose_predicates
        order_by: ORDER BY body, see search.paging.order_by_clause
        limit, offset: Effective page window
        separator: Delimiter between aggregated tag labels
        string_aggregation: If False, no tag join/aggregate is selected and
            tags must be filled in with attach_tag_labels

    Returns:
        Tuple of (sql, params)
    """
    where_str, where_params = build_where(predicates)
    select_cols = list(SEARCH_SELECT_COLS)
    select_params = []
    if string_aggregation:
        select_cols.append("GROUP_CONCAT(tags.tag_label, ?) AS tags")
        select_params.append(separator)
    else:
        select_cols.append("NULL AS tags")

    query = (f"SELECT {', '.join(select_cols)} FROM {_from_clause(string_aggregation)}"
             f"{where_str} GROUP BY {GROUP_BY} ORDER BY {order_by} LIMIT ? OFFSET ?")
    return query, select_params + where_params + [limit, offset]


def build_count_query(predicates):
    """Build the total-match count query (no window, no tag fan-out)."""
    where_str, where_params = build_where(predicates)
    query = (f"SELECT COUNT(*) FROM (SELECT photos.id FROM {_from_clause(False)}"
             f"{where_str} GROUP BY {GROUP_BY})")
    return query, where_params


def attach_tag_labels(rows, conn, separator=','):
    """Batch-fetch tag labels for result rows and join them per photo.

    Used when the store cannot aggregate strings itself. Rows are dicts with
    an 'id' key; each gets 'tags' set to the joined labels ('' if none).
    """
    if not rows:
        return
    photo_ids = [row['id'] for row in rows]
    placeholders = ','.join(['?'] * len(photo_ids))
    tag_rows = conn.execute(f"""
        SELECT photo_tags.photo_id, tags.tag_label
        FROM photo_tags
        JOIN tags ON tags.id = photo_tags.tag_id
        WHERE photo_tags.photo_id IN ({placeholders})
        ORDER BY photo_tags.photo_id, tags.tag_label
    """, photo_ids).fetchall()

    photo_to_labels = {}
    for photo_id, label in tag_rows:
        photo_to_labels.setdefault(photo_id, []).append(label)

    for row in rows:
        row['tags'] = separator.join(photo_to_labels.get(row['id'], []))
