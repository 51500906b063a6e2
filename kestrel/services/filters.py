"""
Query-parameter to SQLAlchemy predicate translation.

Every list endpoint builds its WHERE clause from these helpers so the rules
are the same everywhere:

- a missing value never constrains (absent is not a default);
- free text ORs a case-insensitive substring match over fixed columns, with
  `%` and `_` matched literally;
- boolean-like flags only constrain on the literal string ``"true"``;
- comma-separated multi-values match on a non-empty intersection.
"""
from enum import Enum
from typing import Any, Iterable, List, Optional, Set

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement


TRUE_LITERAL = "true"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _present(value: Any) -> bool:
    return value is not None and value != ""


def equals(column, value: Any) -> Optional[ColumnElement]:
    if not _present(value):
        return None
    return column == _plain(value)


def contains(column, value: Optional[str]) -> Optional[ColumnElement]:
    if not _present(value):
        return None
    return column.icontains(value, autoescape=True)


def search(columns: Iterable, term: Optional[str]) -> Optional[ColumnElement]:
    if not _present(term):
        return None
    return or_(*[c.icontains(term, autoescape=True) for c in columns])


def is_true(raw: Optional[str]) -> bool:
    return raw == TRUE_LITERAL


def flag(column, raw: Optional[str]) -> Optional[ColumnElement]:
    """Constrain ``column`` to true only when ``raw`` is exactly "true"; otherwise no constraint."""
    if not is_true(raw):
        return None
    return column == True  # noqa: E712


def split_values(raw: Optional[str]) -> Set[str]:
    if not _present(raw):
        return set()
    return {part.strip() for part in raw.split(",") if part.strip()}


def matches_any(values: Optional[Iterable[str]], wanted: Set[str]) -> bool:
    """True when no values are wanted, or ``values`` shares at least one with ``wanted``."""
    if not wanted:
        return True
    return bool(set(values or ()) & wanted)


def build_predicates(*clauses: Optional[ColumnElement]) -> List[ColumnElement]:
    return [c for c in clauses if c is not None]
