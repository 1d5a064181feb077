"""Pydantic models for catalog records and search results."""

from typing import Optional

from pydantic import BaseModel, PrivateAttr, field_validator


class SearchResultRow(BaseModel):
    # Photo
    id: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    taken_at: Optional[str] = None
    photo_title: Optional[str] = None
    photo_description: Optional[str] = None
    photo_artist: Optional[str] = None
    photo_keywords: Optional[str] = None
    photo_colors: Optional[str] = None
    photo_color: Optional[str] = None
    photo_canonical_name: Optional[str] = None
    photo_lat: float = 0
    photo_long: float = 0
    photo_favorite: bool = False

    # Camera
    camera_id: int
    camera_make: Optional[str] = None
    camera_model: Optional[str] = None

    # Lens
    lens_id: int
    lens_make: Optional[str] = None
    lens_model: Optional[str] = None

    # Country
    country_id: Optional[str] = None
    country_name: Optional[str] = None

    # Location
    location_id: Optional[int] = None
    loc_display_name: Optional[str] = None
    loc_name: Optional[str] = None
    loc_city: Optional[str] = None
    loc_postcode: Optional[str] = None
    loc_county: Optional[str] = None
    loc_state: Optional[str] = None
    loc_country: Optional[str] = None
    loc_country_code: Optional[str] = None
    loc_category: Optional[str] = None
    loc_type: Optional[str] = None

    # File
    file_id: int
    file_primary: bool = False
    file_missing: bool = False
    file_name: Optional[str] = None
    file_hash: Optional[str] = None
    file_perceptual_hash: Optional[str] = None
    file_type: Optional[str] = None
    file_mime: Optional[str] = None
    file_width: Optional[int] = None
    file_height: Optional[int] = None
    file_orientation: Optional[int] = None
    file_aspect_ratio: Optional[float] = None
    file_main_color: Optional[str] = None
    file_chroma: Optional[int] = None

    # Tags, joined with the configured separator
    tags: str = ''
    _tag_separator: str = PrivateAttr(default=',')

    @field_validator('tags', mode='before')
    @classmethod
    def _no_tags(cls, value):
        return value or ''

    @field_validator('photo_lat', 'photo_long', mode='before')
    @classmethod
    def _no_coordinate(cls, value):
        return value or 0

    def tags_list(self, separator=None):
        """Split tags; defaults to the separator the search joined them with."""
        separator = separator or self._tag_separator
        return [t.strip() for t in self.tags.split(separator) if t.strip()] if self.tags else []


class SearchResults(BaseModel):
    rows: list[SearchResultRow]
    total: int
    count: int
    offset: int


class Photo(BaseModel):
    id: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None
    taken_at: Optional[str] = None
    photo_title: Optional[str] = None
    photo_description: Optional[str] = None
    photo_notes: Optional[str] = None
    photo_artist: Optional[str] = None
    photo_keywords: Optional[str] = None
    photo_colors: Optional[str] = None
    photo_color: Optional[str] = None
    photo_canonical_name: Optional[str] = None
    photo_lat: Optional[float] = None
    photo_long: Optional[float] = None
    photo_aperture: Optional[float] = None
    photo_favorite: bool = False
    camera_id: Optional[int] = None
    lens_id: Optional[int] = None
    country_id: Optional[str] = None
    location_id: Optional[int] = None


class File(BaseModel):
    id: int
    photo_id: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None
    file_primary: bool = False
    file_missing: bool = False
    file_duplicate: bool = False
    file_portrait: bool = False
    file_name: Optional[str] = None
    file_hash: Optional[str] = None
    file_perceptual_hash: Optional[str] = None
    file_type: Optional[str] = None
    file_mime: Optional[str] = None
    file_width: Optional[int] = None
    file_height: Optional[int] = None
    file_orientation: Optional[int] = None
    file_aspect_ratio: Optional[float] = None
    file_main_color: Optional[str] = None
    file_colors: Optional[str] = None
    file_luminance: Optional[str] = None
    file_chroma: Optional[int] = None
    photo: Optional[Photo] = None
