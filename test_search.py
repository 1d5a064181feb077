"""
Integration tests for PhotoSearch against a sample SQLite catalog.

Run: python3 -m pytest test_search.py -v
"""

import os
import sqlite3
import sys
import tempfile
import unittest
from concurrent.futures import ThreadPoolExecutor

# Ensure project root is on sys.path
_script_dir = os.path.dirname(os.path.abspath(__file__))
if _script_dir not in sys.path:
    sys.path.insert(0, _script_dir)

from catalog_testdata import add_photo, make_sample_catalog, remove_catalog
from config import SearchConfig
from db import ConnectionPool, get_connection, get_pragma_values, init_database
from search import CriteriaError, NotFoundError, PhotoSearch, QueryError, SearchCriteria

NO_CONFIG_FILE = '/nonexistent/search_config.json'


class CatalogTestCase(unittest.TestCase):

    def setUp(self):
        self.db_path, self.ids = make_sample_catalog()
        self.finder = PhotoSearch(self.db_path, config=SearchConfig(config_path=NO_CONFIG_FILE))

    def tearDown(self):
        remove_catalog(self.db_path)

    def photo_id(self, name):
        return self.ids[name][0]

    def file_id(self, name):
        return self.ids[name][1]

    def found(self, **criteria):
        """Names of the photos found, in result order."""
        by_id = {photo_id: name for name, (photo_id, _) in self.ids.items()}
        return [by_id[row.id] for row in self.finder.photos(criteria).rows]

    def assertFound(self, expected, **criteria):
        self.assertEqual(sorted(self.found(**criteria)), sorted(expected))


# ============================================================
# Text search
# ============================================================

class TestTextSearch(CatalogTestCase):

    def test_query_matches_title_or_tag(self):
        self.assertFound(['beach_day', 'volleyball'], query='beach')

    def test_query_is_case_insensitive(self):
        self.assertFound(['beach_day', 'volleyball'], query='BEACH')
        self.assertFound(['volleyball'], query='Volley')

    def test_query_matches_main_color(self):
        self.assertFound(['beach_day'], query='yel')

    def test_query_without_match(self):
        results = self.finder.photos({'query': 'mountain'})
        self.assertEqual(results.rows, [])
        self.assertEqual(results.total, 0)

    def test_query_wildcards_match_literally(self):
        self.assertFound([], query='%')
        self.assertFound([], query='_')

    def test_location_mode_matches_display_name_only(self):
        # 'Sunny Beach Day' matches by title but has no location
        self.assertFound(['volleyball'], query='beach', location=True)
        self.assertFound(['city_walk'], query='berlin', location=True)

    def test_location_mode_ignores_tags_titles_and_colors(self):
        self.assertFound([], query='street', location=True)
        self.assertFound([], query='city walk', location=True)
        self.assertFound([], query='grey', location=True)

    def test_location_mode_without_query_requires_location(self):
        self.assertFound(['volleyball', 'city_walk'], location=True)


# ============================================================
# Facet filters
# ============================================================

class TestFacetFilters(CatalogTestCase):

    def test_camera(self):
        camera_id = self.finder.find_photo_by_id(self.photo_id('night_sky')).camera_id
        self.assertFound(['volleyball', 'night_sky'], camera=camera_id)

    def test_color_is_exact(self):
        self.assertFound(['volleyball'], color='blue')
        self.assertFound([], color='Blue')
        self.assertFound([], color='blu')

    def test_favorites(self):
        self.assertFound(['beach_day'], favorites=True)

    def test_country_code(self):
        self.assertFound(['city_walk'], country='de')
        self.assertFound(['volleyball'], country='br')

    def test_exact_tag(self):
        self.assertFound(['beach_day'], tags='sand')
        self.assertFound([], tags='san')

    def test_title_description_notes_substrings(self):
        self.assertFound(['city_walk'], title='walk')
        self.assertFound(['city_walk'], description='GATE')
        self.assertFound(['city_walk'], notes='film')

    def test_hash(self):
        self.assertFound(['city_walk'], hash='a1b2c3d4')

    def test_duplicate_and_portrait_flags(self):
        self.assertFound(['city_walk'], duplicate=True)
        self.assertFound(['volleyball'], portrait=True)

    def test_mono(self):
        self.assertFound(['volleyball', 'night_sky'], mono=True)

    def test_mono_ignores_chroma_threshold(self):
        self.assertFound(['volleyball', 'night_sky'], mono=True, chroma=7)

    def test_chroma_threshold_is_strict(self):
        self.assertFound(['beach_day', 'munich'], chroma=7)
        self.assertFound(['munich'], chroma=10)

    def test_aperture(self):
        self.assertFound(['volleyball', 'city_walk', 'munich'], fmin=3)
        self.assertFound(['beach_day', 'volleyball', 'night_sky'], fmax=4)
        self.assertFound(['beach_day', 'volleyball'], fmin=2.8, fmax=4)

    def test_taken_after_is_inclusive_by_day(self):
        self.assertFound(['beach_day', 'volleyball', 'night_sky'], after='2019-07-01')

    def test_taken_before_is_inclusive_by_day(self):
        self.assertFound(['beach_day', 'city_walk', 'munich'], before='2019-07-01')

    def test_date_range(self):
        self.assertFound(['beach_day', 'volleyball'], after='2019-01-01', before='2019-12-31')

    def test_combined_filters(self):
        self.assertFound(['city_walk'], query='walk', country='de', fmin=5, duplicate=True)
        self.assertFound([], query='walk', country='br')


# ============================================================
# Geo radius
# ============================================================

class TestGeoSearch(CatalogTestCase):

    def test_default_radius(self):
        self.assertFound(['city_walk', 'night_sky'], lat=52.52, long=13.405, dist=0)

    def test_small_radius(self):
        self.assertFound(['city_walk'], lat=52.52, long=13.405, dist=5)

    def test_large_radius_is_clamped(self):
        # 1000 km in each direction: Munich is in, Rio is not
        self.assertFound(['city_walk', 'night_sky', 'munich'], lat=52.52, long=13.405, dist=99999)

    def test_latitude_only(self):
        self.assertFound(['city_walk', 'night_sky'], lat=52.52)

    def test_longitude_only(self):
        self.assertFound(['city_walk', 'night_sky'], long=13.405)

    def test_southern_and_western_hemisphere(self):
        self.assertFound(['volleyball'], lat=-22.97, long=-43.18)

    def test_nan_radius_is_rejected(self):
        with self.assertRaises(CriteriaError):
            self.finder.photos({'lat': 52.52, 'long': 13.405, 'dist': 'nan'})


# ============================================================
# Non-ASCII text
# ============================================================

class TestUnicodeText(CatalogTestCase):

    def setUp(self):
        super().setUp()
        beach_day = self.finder.find_photo_by_id(self.photo_id('beach_day'))
        with sqlite3.connect(self.db_path) as conn:
            location_id = conn.execute(
                "INSERT INTO locations (loc_display_name, loc_city, loc_country_code) VALUES (?, ?, ?)",
                ('MARIENPLATZ, MÜNCHEN, DEUTSCHLAND', 'München', 'de')).lastrowid
            self.ids['marienplatz'] = add_photo(
                conn, beach_day.camera_id, beach_day.lens_id, tags=('ÄRGER',),
                photo_title='ÜBER MÜNCHEN', photo_description='Blick vom RATHAUSTURM',
                taken_at='2016-01-01 12:00:00', location_id=location_id,
                file={'file_main_color': 'grün'})
            conn.commit()
        conn.close()

    def test_query_matches_upper_case_non_ascii_title(self):
        self.assertFound(['marienplatz'], query='münchen')
        self.assertFound(['marienplatz'], query='Über')

    def test_query_matches_non_ascii_tag_and_color(self):
        self.assertFound(['marienplatz'], query='ärger')
        self.assertFound(['marienplatz'], query='GRÜN')

    def test_substring_fields_fold_non_ascii(self):
        self.assertFound(['marienplatz'], title='über')
        self.assertFound(['marienplatz'], description='rathausturm')

    def test_location_name_folds_non_ascii(self):
        self.assertFound(['marienplatz'], query='münchen', location=True)

    def test_pooled_connections_fold_non_ascii(self):
        pool = ConnectionPool(self.db_path, size=2, config=self.finder.config)
        try:
            finder = PhotoSearch(config=self.finder.config, pool=pool)
            rows = finder.photos({'query': 'münchen', 'location': True}).rows
            self.assertEqual([r.id for r in rows], [self.photo_id('marienplatz')])
        finally:
            pool.close_all()


# ============================================================
# Projection & aggregation
# ============================================================

class TestProjection(CatalogTestCase):

    def row_for(self, name, **criteria):
        rows = [r for r in self.finder.photos(criteria).rows if r.id == self.photo_id(name)]
        self.assertEqual(len(rows), 1)
        return rows[0]

    def test_one_row_per_photo_with_all_tags(self):
        row = self.row_for('beach_day')
        self.assertEqual(sorted(row.tags_list()), ['sand', 'sea', 'sun'])

    def test_tag_filter_keeps_all_tags(self):
        row = self.row_for('beach_day', tags='sand')
        self.assertEqual(sorted(row.tags_list()), ['sand', 'sea', 'sun'])

    def test_text_search_keeps_all_tags(self):
        row = self.row_for('beach_day', query='sea')
        self.assertEqual(sorted(row.tags_list()), ['sand', 'sea', 'sun'])

    def test_untagged_photo(self):
        row = self.row_for('night_sky')
        self.assertEqual(row.tags, '')
        self.assertEqual(row.tags_list(), [])

    def test_row_fields(self):
        row = self.row_for('city_walk')
        self.assertEqual(row.photo_title, 'City Walk')
        self.assertEqual(row.camera_make, 'Canon')
        self.assertEqual(row.lens_model, 'FE 24-70mm')
        self.assertEqual(row.country_id, 'de')
        self.assertEqual(row.country_name, 'Germany')
        self.assertEqual(row.loc_city, 'Berlin')
        self.assertEqual(row.loc_country_code, 'de')
        self.assertEqual(row.file_id, self.file_id('city_walk'))
        self.assertTrue(row.file_primary)
        self.assertFalse(row.file_missing)
        self.assertEqual(row.file_hash, 'a1b2c3d4')
        self.assertEqual(row.file_width, 4000)
        self.assertAlmostEqual(row.photo_lat, 52.52)
        self.assertEqual(row.tags, 'street')

    def test_optional_relations_may_be_absent(self):
        row = self.row_for('munich')
        self.assertIsNone(row.location_id)
        self.assertIsNone(row.loc_display_name)
        self.assertIsNone(row.country_name)

    def test_deleted_and_missing_never_returned(self):
        hidden = {self.photo_id(n) for n in ('deleted_photo', 'missing_file', 'deleted_file')}
        for criteria in ({}, {'query': 'beach'}, {'color': 'yellow'}, {'tags': 'sea'},
                         {'after': '2019-07-02', 'before': '2019-07-04'}):
            with self.subTest(criteria=criteria):
                ids = {row.id for row in self.finder.photos(criteria).rows}
                self.assertFalse(ids & hidden)

    def test_custom_tag_separator(self):
        config = SearchConfig(config_path=NO_CONFIG_FILE, overrides={'search': {'tags': {'separator': '|'}}})
        finder = PhotoSearch(self.db_path, config=config)
        (row,) = finder.photos({'tags': 'sun'}).rows
        self.assertEqual(sorted(row.tags.split('|')), ['sand', 'sea', 'sun'])
        self.assertEqual(sorted(row.tags_list()), ['sand', 'sea', 'sun'])

    def test_application_side_tag_aggregation_matches(self):
        config = SearchConfig(config_path=NO_CONFIG_FILE, overrides={'search': {'string_aggregation': False}})
        app_side = PhotoSearch(self.db_path, config=config).photos({})
        store_side = self.finder.photos({})
        self.assertEqual([r.id for r in app_side.rows], [r.id for r in store_side.rows])
        self.assertEqual(app_side.total, store_side.total)
        for a, b in zip(app_side.rows, store_side.rows):
            self.assertEqual(sorted(a.tags_list()), sorted(b.tags_list()))


# ============================================================
# Ordering & pagination
# ============================================================

class TestOrderingAndPaging(CatalogTestCase):

    def test_newest_is_default(self):
        expected = ['night_sky', 'volleyball', 'beach_day', 'city_walk', 'munich']
        self.assertEqual(self.found(order='newest'), expected)
        self.assertEqual(self.found(), expected)
        self.assertEqual(self.found(order='bogus'), expected)

    def test_oldest(self):
        self.assertEqual(self.found(order='oldest'),
                         ['munich', 'city_walk', 'beach_day', 'volleyball', 'night_sky'])

    def test_imported(self):
        self.assertEqual(self.found(order='imported'),
                         ['night_sky', 'munich', 'beach_day', 'city_walk', 'volleyball'])

    def test_taken_at_is_monotonic(self):
        newest = [r.taken_at for r in self.finder.photos({'order': 'newest'}).rows]
        self.assertEqual(newest, sorted(newest, reverse=True))
        oldest = [r.taken_at for r in self.finder.photos({'order': 'oldest'}).rows]
        self.assertEqual(oldest, sorted(oldest))

    def test_window_and_total(self):
        results = self.finder.photos({'count': 2, 'offset': 1})
        self.assertEqual([r.id for r in results.rows],
                         [self.photo_id('volleyball'), self.photo_id('beach_day')])
        self.assertEqual(results.total, 5)
        self.assertEqual((results.count, results.offset), (2, 1))

    def test_total_is_independent_of_window(self):
        totals = {self.finder.photos({'query': 'beach', 'count': c, 'offset': o}).total
                  for c, o in ((1, 0), (1, 1), (10, 0), (0, 0), (1, 50))}
        self.assertEqual(totals, {2})

    def test_offset_past_end(self):
        results = self.finder.photos({'count': 10, 'offset': 50})
        self.assertEqual(results.rows, [])
        self.assertEqual(results.total, 5)

    def test_out_of_range_count_resets_window(self):
        for count in (0, -3, 1001):
            with self.subTest(count=count):
                results = self.finder.photos({'count': count, 'offset': 3})
                self.assertEqual((results.count, results.offset), (100, 0))
                self.assertEqual(len(results.rows), 5)

    def test_configured_page_size(self):
        config = SearchConfig(config_path=NO_CONFIG_FILE,
                              overrides={'search': {'pagination': {'default_count': 2, 'max_count': 3}}})
        results = PhotoSearch(self.db_path, config=config).photos({'count': 4})
        self.assertEqual(len(results.rows), 2)
        self.assertEqual(results.total, 5)


# ============================================================
# Point lookups
# ============================================================

class TestLookups(CatalogTestCase):

    def test_find_files(self):
        files = self.finder.find_files(2, 0)
        self.assertEqual([f.id for f in files], [self.file_id('beach_day'), self.file_id('volleyball')])
        self.assertEqual(len(self.finder.find_files(100, 0)), 7)
        self.assertEqual([f.id for f in self.finder.find_files(1, 2)], [self.file_id('city_walk')])

    def test_find_files_rejects_negative_window(self):
        with self.assertRaises(CriteriaError):
            self.finder.find_files(-1, 0)
        with self.assertRaises(CriteriaError):
            self.finder.find_files(10, -1)

    def test_find_file_by_id(self):
        file = self.finder.find_file_by_id(self.file_id('city_walk'))
        self.assertEqual(file.photo_id, self.photo_id('city_walk'))
        self.assertTrue(file.file_duplicate)
        self.assertEqual(file.photo.photo_title, 'City Walk')

    def test_find_file_by_hash(self):
        file = self.finder.find_file_by_hash('a1b2c3d4')
        self.assertEqual(file.id, self.file_id('city_walk'))
        self.assertEqual(file.photo.id, self.photo_id('city_walk'))

    def test_find_file_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.finder.find_file_by_id(9999)
        self.assertEqual(ctx.exception.entity, 'File')
        with self.assertRaises(NotFoundError):
            self.finder.find_file_by_hash('does-not-exist')
        with self.assertRaises(NotFoundError):
            self.finder.find_file_by_id(self.file_id('deleted_file'))

    def test_find_photo_by_id(self):
        photo = self.finder.find_photo_by_id(self.photo_id('beach_day'))
        self.assertEqual(photo.photo_title, 'Sunny Beach Day')
        self.assertTrue(photo.photo_favorite)
        self.assertAlmostEqual(photo.photo_aperture, 2.8)

    def test_find_photo_not_found(self):
        with self.assertRaises(NotFoundError):
            self.finder.find_photo_by_id(9999)
        with self.assertRaises(NotFoundError):
            self.finder.find_photo_by_id(self.photo_id('deleted_photo'))


# ============================================================
# Errors & concurrency
# ============================================================

class TestErrors(CatalogTestCase):

    def test_invalid_criteria_is_rejected_before_querying(self):
        finder = PhotoSearch('/nonexistent/dir/catalog.db', config=self.finder.config)
        with self.assertRaises(CriteriaError):
            finder.photos({'lat': 120})

    def test_store_failure_raises_query_error(self):
        with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
            empty_db = f.name
        try:
            finder = PhotoSearch(empty_db, config=self.finder.config)
            with self.assertRaises(QueryError) as ctx:
                finder.photos(SearchCriteria(query='beach'))
            self.assertIsInstance(ctx.exception.cause, sqlite3.Error)
            self.assertIsInstance(ctx.exception.__cause__, sqlite3.Error)
            with self.assertRaises(QueryError):
                finder.find_photo_by_id(1)
        finally:
            remove_catalog(empty_db)

    def test_init_database_is_idempotent(self):
        init_database(self.db_path)
        with get_connection(self.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM photos").fetchone()[0]
        self.assertEqual(count, 8)


class TestSearchConfig(unittest.TestCase):

    def write_config(self, text):
        with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as f:
            f.write(text)
        self.addCleanup(os.unlink, f.name)
        return f.name

    def test_defaults_without_file(self):
        config = SearchConfig(config_path=NO_CONFIG_FILE)
        self.assertEqual(config.default_radius_km, 20)
        self.assertEqual(config.max_radius_km, 1000)
        self.assertEqual(config.degrees_per_km, 0.009)
        self.assertEqual((config.default_count, config.max_count), (100, 1000))
        self.assertEqual(config.tag_separator, ',')
        self.assertTrue(config.string_aggregation)
        self.assertEqual(config.log_level, 'INFO')

    def test_file_is_merged_over_defaults(self):
        path = self.write_config('{"search": {"radius": {"max_km": 50}}, "logging": {"level": "debug"}}')
        config = SearchConfig(config_path=path)
        self.assertEqual(config.max_radius_km, 50)
        self.assertEqual(config.default_radius_km, 20)
        self.assertEqual(config.log_level, 'DEBUG')

    def test_overrides_win_over_file(self):
        path = self.write_config('{"search": {"tags": {"separator": ";"}}}')
        config = SearchConfig(config_path=path, overrides={'search': {'tags': {'separator': '|'}}})
        self.assertEqual(config.tag_separator, '|')

    def test_malformed_file(self):
        with self.assertRaises(ValueError):
            SearchConfig(config_path=self.write_config('{"search": '))
        with self.assertRaises(ValueError):
            SearchConfig(config_path=self.write_config('[1, 2]'))

    def test_performance_settings_reach_connections(self):
        config = SearchConfig(config_path=NO_CONFIG_FILE,
                              overrides={'performance': {'mmap_size_mb': 1, 'cache_size_mb': 2}})
        self.assertEqual(get_pragma_values(config), {'mmap_size': 1024 * 1024, 'cache_size_kb': 2000})

        with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
            db_path = f.name
        self.addCleanup(remove_catalog, db_path)
        with get_connection(db_path, config=config) as conn:
            self.assertEqual(conn.execute("PRAGMA cache_size").fetchone()[0], -2000)
        pool = ConnectionPool(db_path, size=1, config=config)
        try:
            with pool.connection() as conn:
                self.assertEqual(conn.execute("PRAGMA cache_size").fetchone()[0], -2000)
        finally:
            pool.close_all()


class TestConcurrentSearches(CatalogTestCase):

    def test_pooled_searches_agree(self):
        pool = ConnectionPool(self.db_path, size=3)
        try:
            finder = PhotoSearch(config=self.finder.config, pool=pool)
            criteria = SearchCriteria(query='beach', order='oldest')
            with ThreadPoolExecutor(max_workers=6) as executor:
                results = list(executor.map(lambda _: finder.photos(criteria), range(24)))
            expected = self.finder.photos(criteria)
            for result in results:
                self.assertEqual(result, expected)
        finally:
            pool.close_all()


if __name__ == '__main__':
    unittest.main()
