"""Query-string parsing shared by the HTML pages and the JSON API."""
from __future__ import annotations

from typing import List, Optional

from fastapi import Query

from cruscotto.domain.parsing import parse_iso_date
from cruscotto.services.decisions import DecisionFilters
from cruscotto.services.incidents import IncidentFilters
from cruscotto.services.tasks import SortConfig, TaskFilters
from cruscotto.services.variants import IMPACT_CHOICES, VariantFilters


def _impact(value: str) -> str:
    return value if value in IMPACT_CHOICES else "all"


def _clean(values: Optional[List[str]]) -> tuple[str, ...]:
    return tuple(v for v in (values or []) if v)


def task_filters(
    owner: str = "all",
    start_date: str = "",
    end_date: str = "",
    late: bool = False,
    critical: bool = False,
) -> TaskFilters:
    return TaskFilters(
        owner=owner or "all",
        start_date=parse_iso_date(start_date),
        end_date=parse_iso_date(end_date),
        show_late=late,
        show_critical=critical,
    )


def task_sort(sort: str = "deadline", direction: str = "asc") -> SortConfig:
    return SortConfig.parse(sort, direction)


def incident_filters(
    start_date: str = "",
    end_date: str = "",
    status: Optional[List[str]] = Query(None),
    criticality: Optional[List[str]] = Query(None),
    q: str = "",
) -> IncidentFilters:
    return IncidentFilters(
        start_date=parse_iso_date(start_date),
        end_date=parse_iso_date(end_date),
        statuses=_clean(status),
        criticalities=_clean(criticality),
        search=q,
    )


def variant_filters(
    type: str = "all",
    status: str = "all",
    time_impact: str = "all",
    cost_impact: str = "all",
    q: str = "",
) -> VariantFilters:
    return VariantFilters(
        variant_type=type or "all",
        status=status or "all",
        time_impact=_impact(time_impact),
        cost_impact=_impact(cost_impact),
        search=q,
    )


def decision_filters(
    responsabile: str = "all",
    start_date: str = "",
    end_date: str = "",
    q: str = "",
) -> DecisionFilters:
    return DecisionFilters(
        responsabile=responsabile or "all",
        start_date=parse_iso_date(start_date),
        end_date=parse_iso_date(end_date),
        search=q,
    )
