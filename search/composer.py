"""
Predicate composer: maps SearchCriteria to an ordered list of predicates.

Pure function of its inputs. Fields left at their zero value contribute nothing.
"""

from typing import List

from config import SearchConfig
from search.criteria import GeneralMode, LocationMode, SearchCriteria, text_mode
from search.geo import DEFAULT_RADIUS_KM, DEGREES_PER_KM, MAX_RADIUS_KM, radius_predicates
from search.predicates import AnyOf, Equals, Exists, Predicate, Range, Substring

# Criteria fields compared for exact equality, mapped to catalog fields
EQUALS_FIELDS = [
    ('camera', 'camera_id'),
    ('color', 'file_main_color'),
    ('country', 'loc_country_code'),
    ('tags', 'tag_label'),
    ('hash', 'file_hash'),
]

SUBSTRING_FIELDS = [
    ('title', 'photo_title'),
    ('description', 'photo_description'),
    ('notes', 'photo_notes'),
]

# Boolean criteria that require the catalog flag to be set
FLAG_FIELDS = [
    ('favorites', 'photo_favorite'),
    ('duplicate', 'file_duplicate'),
    ('portrait', 'file_portrait'),
]


def _text_predicates(criteria: SearchCriteria) -> List[Predicate]:
    mode = text_mode(criteria)
    if isinstance(mode, LocationMode):
        predicates = [Exists(field='location')]
        if mode.query:
            predicates.append(Substring(field='loc_display_name', value=mode.query))
        return predicates
    if isinstance(mode, GeneralMode):
        return [AnyOf(predicates=(
            Substring(field='tag_label', value=mode.query),
            Substring(field='photo_title', value=mode.query),
            Substring(field='file_main_color', value=mode.query),
        ))]
    return []


def _chroma_predicates(criteria: SearchCriteria) -> List[Predicate]:
    if criteria.mono:
        return [Equals(field='file_chroma', value=0)]
    if criteria.chroma > 0:
        return [Range(field='file_chroma', lower=criteria.chroma, lower_strict=True)]
    return []


def _taken_predicates(criteria: SearchCriteria) -> List[Predicate]:
    predicates = []
    if criteria.after:
        predicates.append(Range(field='taken_date', lower=criteria.after.isoformat()))
    if criteria.before:
        predicates.append(Range(field='taken_date', upper=criteria.before.isoformat()))
    return predicates


def compose_predicates(criteria: SearchCriteria, config: SearchConfig = None) -> List[Predicate]:
    """Translate criteria into the conjunction of predicates for one search.

    Args:
        criteria: Validated search criteria
        config: Radius scale and clamps; built-in defaults when None

    Returns:
        Predicates in a stable order: text, equality, flags, substrings,
        chroma, aperture, date taken, radius
    """
    predicates = _text_predicates(criteria)

    for criteria_field, field in EQUALS_FIELDS:
        value = getattr(criteria, criteria_field)
        if value:
            predicates.append(Equals(field=field, value=value))

    for criteria_field, field in FLAG_FIELDS:
        if getattr(criteria, criteria_field):
            predicates.append(Equals(field=field, value=True))

    for criteria_field, field in SUBSTRING_FIELDS:
        value = getattr(criteria, criteria_field)
        if value:
            predicates.append(Substring(field=field, value=value))

    predicates.extend(_chroma_predicates(criteria))

    if criteria.fmin > 0:
        predicates.append(Range(field='photo_aperture', lower=criteria.fmin))
    if criteria.fmax > 0:
        predicates.append(Range(field='photo_aperture', upper=criteria.fmax))

    predicates.extend(_taken_predicates(criteria))

    if config is None:
        scale, default, maximum = DEGREES_PER_KM, DEFAULT_RADIUS_KM, MAX_RADIUS_KM
    else:
        scale, default, maximum = config.degrees_per_km, config.default_radius_km, config.max_radius_km
    predicates.extend(radius_predicates(criteria.lat, criteria.long, criteria.dist,
                                        scale=scale, default=default, maximum=maximum))

    return predicates
