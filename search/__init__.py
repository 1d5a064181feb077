"""
Faceted photo catalog search.

Re-exports public API for short imports.
"""

from search.errors import SearchError, CriteriaError, QueryError, NotFoundError
from search.criteria import (
    SearchCriteria, SortOrder, LocationMode, GeneralMode, text_mode, parse_criteria,
)
from search.predicates import Equals, Substring, Range, Exists, AnyOf, Predicate
from search.geo import DEGREES_PER_KM, effective_radius, bounding_box, radius_predicates
from search.composer import compose_predicates
from search.paging import sort_order, order_by_clause, effective_window
from search.query import (
    render_predicate, build_where, build_search_query, build_count_query, attach_tag_labels,
)
from search.models import SearchResultRow, SearchResults, Photo, File
from search.service import PhotoSearch
