"""Helpers shared by the per-domain services (filters, counters, page result)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Generic, Iterable, Sequence, TypeVar

from cruscotto.domain.parsing import parse_italian_date

T = TypeVar("T")

ALL = "all"


def date_in_range(value: date | None, start: date | None, end: date | None) -> bool:
    """Inclusive range check; an unknown date never matches an active bound."""
    if start is None and end is None:
        return True
    if value is None:
        return False
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def matches_search(term: str | None, *fields: str | None) -> bool:
    needle = (term or "").strip().lower()
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in fields)


def matches_choice(selected: str | None, value: str) -> bool:
    return not selected or selected == ALL or selected == value


def count_by(items: Iterable[Any], attr: str) -> dict[str, int]:
    counts: dict[str, int] = {}
    for item in items:
        key = getattr(item, attr)
        counts[key] = counts.get(key, 0) + 1
    return counts


def unique_values(items: Iterable[Any], attr: str, include_all: bool = True) -> list[str]:
    seen: dict[str, None] = {}
    for item in items:
        seen.setdefault(getattr(item, attr), None)
    values = list(seen)
    return [ALL, *values] if include_all else values


def normalize_view(requested: str | None, allowed: Sequence[str]) -> str:
    view = (requested or "").strip().lower()
    return view if view in allowed else allowed[0]


def text_field(row: dict, key: str, default: str = "") -> str:
    """Airtable values as stripped text, falling back to default when empty."""
    value = row.get(key)
    if value is None:
        return default
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value)
    text = str(value).strip()
    return text or default


def date_field(row: dict, key: str) -> date | None:
    return parse_italian_date(row.get(key))


def newest_first(items: Sequence[T], attr: str = "date") -> list[T]:
    """Timeline ordering; undated records go last."""
    dated = [i for i in items if getattr(i, attr) is not None]
    undated = [i for i in items if getattr(i, attr) is None]
    return sorted(dated, key=lambda i: getattr(i, attr), reverse=True) + undated


@dataclass
class ProjectPage(Generic[T]):
    """What every per-project page renders: the project's items after filtering."""

    project_id: str
    project_name: str
    items: list[T]
    view: str
    total_loaded: int = 0
    kpis: dict[str, Any] = field(default_factory=dict)
    chart: dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def has_records(self) -> bool:
        return self.total_loaded > 0


def project_name_from(rows: Sequence[dict], fallback: str) -> str:
    """The page header uses the Progetto value of the first record."""
    if rows:
        return text_field(rows[0], "Progetto", fallback)
    return fallback
