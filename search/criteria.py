"""
Search criteria model.

SearchCriteria is the typed, immutable form of one search request. Every field
defaults to its zero value, and a zero value never restricts results.
"""

from datetime import date
from enum import Enum
from typing import Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from search.errors import CriteriaError


class SortOrder(str, Enum):
    NEWEST = 'newest'
    OLDEST = 'oldest'
    IMPORTED = 'imported'


class SearchCriteria(BaseModel):
    """Optional photo filters for one search request.

    Exact-match codes (color, country, tags, hash, order) are stripped of
    surrounding whitespace. Free text and substring fields are used as given.
    Numbers must be finite.
    """

    model_config = ConfigDict(frozen=True, extra='forbid', allow_inf_nan=False)

    # Free text, matched against tags/title/color or, with location=True, the place name
    query: str = ''
    location: bool = False

    camera: int = Field(0, ge=0)
    color: str = ''
    favorites: bool = False
    country: str = ''
    tags: str = ''
    title: str = ''
    description: str = ''
    notes: str = ''
    hash: str = ''

    duplicate: bool = False
    portrait: bool = False
    mono: bool = False
    chroma: int = Field(0, ge=0)

    fmin: float = Field(0, ge=0)
    fmax: float = Field(0, ge=0)

    lat: float = Field(0, ge=-90, le=90)
    long: float = Field(0, ge=-180, le=180)
    dist: float = 0  # km, clamped by search.geo.effective_radius

    before: Optional[date] = None
    after: Optional[date] = None

    order: str = ''  # unknown values sort like 'newest'
    count: int = 0
    offset: int = Field(0, ge=0)

    @field_validator('color', 'country', 'tags', 'hash', 'order', mode='before')
    @classmethod
    def _strip_codes(cls, value):
        return value.strip() if isinstance(value, str) else value


class LocationMode(BaseModel):
    """Text search restricted to photos with a location, matching the place name only."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['location'] = 'location'
    query: str = ''


class GeneralMode(BaseModel):
    """Text search over tag labels, photo titles and main file colors."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['general'] = 'general'
    query: str


TextMode = Union[LocationMode, GeneralMode]


def text_mode(criteria: SearchCriteria) -> Optional[TextMode]:
    """Pick the text-search branch; location mode excludes general mode."""
    if criteria.location:
        return LocationMode(query=criteria.query)
    if criteria.query:
        return GeneralMode(query=criteria.query)
    return None


def parse_criteria(data: Mapping) -> SearchCriteria:
    """Validate raw input (e.g. query parameters) into SearchCriteria.

    Raises:
        CriteriaError: If a field is unknown, has the wrong type or is out of range
    """
    if isinstance(data, SearchCriteria):
        return data
    try:
        return SearchCriteria.model_validate(dict(data))
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        fields = ', '.join('.'.join(str(p) for p in err['loc']) for err in errors)
        raise CriteriaError(f"Invalid search criteria: {fields}", errors=errors) from e
