"""
Sample catalog used by the search tests.

Builds a small SQLite catalog with photos covering every search facet, plus
photos that must never be found (soft-deleted photo, missing file, deleted file).
"""

import os
import sqlite3
import tempfile

from db import init_database


def _insert(conn, table, values):
    cols = ', '.join(values)
    placeholders = ', '.join(['?'] * len(values))
    cursor = conn.execute(f"INSERT INTO {table} ({cols}) VALUES ({placeholders})", list(values.values()))
    return cursor.lastrowid


def add_photo(conn, camera_id, lens_id, file=None, tags=(), **fields):
    """Insert a photo with one primary file and optional tags. Returns (photo_id, file_id)."""
    photo_id = _insert(conn, 'photos', dict(camera_id=camera_id, lens_id=lens_id, **fields))
    file_values = {'file_primary': 1, 'file_name': f"photo_{photo_id}.jpg",
                   'file_hash': f"hash-{photo_id}", 'file_type': 'jpg', 'file_mime': 'image/jpeg',
                   'file_width': 4000, 'file_height': 3000, 'file_orientation': 1,
                   'file_aspect_ratio': 1.33}
    file_values.update(file or {})
    file_id = _insert(conn, 'files', dict(photo_id=photo_id, **file_values))
    for label in tags:
        row = conn.execute("SELECT id FROM tags WHERE tag_label = ?", (label,)).fetchone()
        tag_id = row[0] if row else _insert(conn, 'tags', {'tag_label': label})
        _insert(conn, 'photo_tags', {'photo_id': photo_id, 'tag_id': tag_id})
    return photo_id, file_id


def build_sample_catalog(db_path):
    """Populate db_path with the sample catalog. Returns {name: (photo_id, file_id)}."""
    init_database(db_path)
    ids = {}
    with sqlite3.connect(db_path) as conn:
        canon = _insert(conn, 'cameras', {'camera_make': 'Canon', 'camera_model': 'EOS 5D'})
        sony = _insert(conn, 'cameras', {'camera_make': 'Sony', 'camera_model': 'A7'})
        fifty = _insert(conn, 'lenses', {'lens_make': 'Canon', 'lens_model': 'EF 50mm f/1.8'})
        zoom = _insert(conn, 'lenses', {'lens_make': 'Sony', 'lens_model': 'FE 24-70mm'})
        _insert(conn, 'countries', {'id': 'de', 'country_name': 'Germany'})
        _insert(conn, 'countries', {'id': 'br', 'country_name': 'Brazil'})
        berlin = _insert(conn, 'locations', {
            'loc_display_name': 'Brandenburger Tor, Berlin, Germany', 'loc_name': 'Brandenburger Tor',
            'loc_city': 'Berlin', 'loc_postcode': '10117', 'loc_state': 'Berlin',
            'loc_country': 'Germany', 'loc_country_code': 'de', 'loc_category': 'tourism',
            'loc_type': 'attraction'})
        rio = _insert(conn, 'locations', {
            'loc_display_name': 'Copacabana Beach, Rio de Janeiro, Brazil', 'loc_name': 'Copacabana',
            'loc_city': 'Rio de Janeiro', 'loc_country': 'Brazil', 'loc_country_code': 'br',
            'loc_category': 'natural', 'loc_type': 'beach'})

        ids['beach_day'] = add_photo(
            conn, canon, fifty, tags=('sun', 'sand', 'sea'),
            photo_title='Sunny Beach Day', taken_at='2019-07-01 10:00:00',
            created_at='2020-01-03 00:00:00', photo_aperture=2.8, photo_favorite=1,
            file={'file_main_color': 'yellow', 'file_chroma': 10})
        ids['volleyball'] = add_photo(
            conn, sony, fifty, tags=('beach-volleyball',),
            photo_title='Match Point', taken_at='2019-08-15 18:30:00',
            created_at='2020-01-01 00:00:00', photo_aperture=4.0,
            photo_lat=-22.97, photo_long=-43.18, country_id='br', location_id=rio,
            file={'file_main_color': 'blue', 'file_chroma': 0, 'file_portrait': 1})
        ids['city_walk'] = add_photo(
            conn, canon, zoom, tags=('street',),
            photo_title='City Walk', photo_description='Evening walk near the gate',
            photo_notes='Scanned from film', taken_at='2018-03-10 09:00:00',
            created_at='2020-01-02 00:00:00', photo_aperture=8.0,
            photo_lat=52.52, photo_long=13.405, country_id='de', location_id=berlin,
            file={'file_main_color': 'grey', 'file_chroma': 5, 'file_duplicate': 1,
                  'file_hash': 'a1b2c3d4'})
        ids['night_sky'] = add_photo(
            conn, sony, zoom, photo_title='Night Sky', taken_at='2021-12-31 23:00:00',
            created_at='2020-01-05 00:00:00', photo_aperture=1.8,
            photo_lat=52.60, photo_long=13.50,
            file={'file_main_color': 'black', 'file_chroma': 0})
        ids['munich'] = add_photo(
            conn, canon, fifty, photo_title='Munich Morning', taken_at='2017-05-05 07:15:00',
            created_at='2020-01-04 00:00:00', photo_aperture=11.0,
            photo_lat=48.14, photo_long=11.58,
            file={'file_main_color': 'white', 'file_chroma': 20})

        # Never returned by a search
        ids['deleted_photo'] = add_photo(
            conn, canon, fifty, tags=('sea',), photo_title='Beach (deleted)',
            taken_at='2019-07-02 10:00:00', deleted_at='2020-02-01 00:00:00',
            file={'file_main_color': 'yellow'})
        ids['missing_file'] = add_photo(
            conn, canon, fifty, photo_title='Beach (missing file)', taken_at='2019-07-03 10:00:00',
            file={'file_missing': 1, 'file_main_color': 'yellow'})
        ids['deleted_file'] = add_photo(
            conn, canon, fifty, photo_title='Beach (deleted file)', taken_at='2019-07-04 10:00:00',
            file={'deleted_at': '2020-02-01 00:00:00', 'file_main_color': 'yellow'})
        conn.commit()
    conn.close()
    return ids


def make_sample_catalog():
    """Create a temporary catalog file. Returns (db_path, ids); caller unlinks db_path."""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        db_path = f.name
    return db_path, build_sample_catalog(db_path)


def remove_catalog(db_path):
    for suffix in ('', '-wal', '-shm'):
        if os.path.exists(db_path + suffix):
            os.unlink(db_path + suffix)
