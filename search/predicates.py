"""
Predicate variants.

A search is a conjunction of these. They name logical catalog fields, not SQL
columns; search.query renders them for SQLite.
"""

from typing import Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _Predicate(BaseModel):
    model_config = ConfigDict(frozen=True)


class Equals(_Predicate):
    """Exact, case-sensitive match."""
    kind: Literal['equals'] = 'equals'
    field: str
    value: Any


class Substring(_Predicate):
    """Case-insensitive substring match; wildcards in value match literally."""
    kind: Literal['substring'] = 'substring'
    field: str
    value: str


class Range(_Predicate):
    """Lower and/or upper bound, inclusive unless lower_strict is set."""
    kind: Literal['range'] = 'range'
    field: str
    lower: Optional[Any] = None
    upper: Optional[Any] = None
    lower_strict: bool = False


class Exists(_Predicate):
    """The optional related record behind field is present."""
    kind: Literal['exists'] = 'exists'
    field: str


class AnyOf(_Predicate):
    """Disjunction of predicates."""
    kind: Literal['any_of'] = 'any_of'
    predicates: Tuple['Predicate', ...] = Field(min_length=1)


Predicate = Union[Equals, Substring, Range, Exists, AnyOf]

AnyOf.model_rebuild()
