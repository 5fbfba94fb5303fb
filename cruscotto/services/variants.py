"""Change requests ("varianti"): time/cost impact filters and totals."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from cruscotto.domain.parsing import format_currency, format_date, format_days, parse_currency, parse_days
from cruscotto.domain.statuses import VARIANT_STATUS_BADGES, badge_for
from cruscotto.repositories.json_storage import load_table, records_for_project
from cruscotto.services.common import (
    ProjectPage,
    count_by,
    date_field,
    matches_choice,
    matches_search,
    normalize_view,
    project_name_from,
    text_field,
    unique_values,
)

VIEWS = ("cards", "table")
IMPACT_CHOICES = ("all", "positive", "negative", "zero")
CHART_STATUSES = (
    ("Approvate", "Approvata"),
    ("Rifiutate", "Rifiutata"),
    ("In Valutazione", "In valutazione"),
)


@dataclass(frozen=True)
class VariantView:
    id: int
    type: str
    project: str
    date: date | None
    description: str
    time_impact: int
    cost_impact: float
    status: str

    @property
    def status_badge(self) -> str:
        return badge_for(self.status, VARIANT_STATUS_BADGES)

    @property
    def time_label(self) -> str:
        return format_days(self.time_impact)

    @property
    def cost_label(self) -> str:
        return format_currency(self.cost_impact, decimals=2)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "project": self.project,
            "date": self.date.isoformat() if self.date else None,
            "date_label": format_date(self.date),
            "description": self.description,
            "time_impact": self.time_impact,
            "cost_impact": self.cost_impact,
            "status": self.status,
        }


def impact_matches(choice: str | None, value: float) -> bool:
    """Impact filter: "positive" means a saving (negative delta), "negative" an overrun."""
    if not choice or choice == "all":
        return True
    if choice == "positive":
        return value < 0
    if choice == "negative":
        return value > 0
    if choice == "zero":
        return value == 0
    return True


@dataclass(frozen=True)
class VariantFilters:
    variant_type: str = "all"
    status: str = "all"
    time_impact: str = "all"
    cost_impact: str = "all"
    search: str = ""

    def matches(self, variant: VariantView) -> bool:
        return (
            matches_choice(self.variant_type, variant.type)
            and matches_choice(self.status, variant.status)
            and impact_matches(self.time_impact, variant.time_impact)
            and impact_matches(self.cost_impact, variant.cost_impact)
            and matches_search(self.search, variant.type, variant.project)
        )


def to_view(index: int, row: dict) -> VariantView:
    return VariantView(
        id=index,
        type=text_field(row, "Variante"),
        project=text_field(row, "Progetto"),
        date=date_field(row, "Data Variante"),
        description=text_field(row, "Descrizione Variante", "Nessuna descrizione."),
        time_impact=parse_days(row.get("Impatto Tempi (in giorni)")),
        cost_impact=parse_currency(row.get("Impatto Costi")),
        status=text_field(row, "Stato", "In valutazione"),
    )


def load_variants(project_id: str, data_dir: Path | str | None = None) -> tuple[list[dict], list[VariantView]]:
    rows = records_for_project(load_table("varianti", data_dir), project_id)
    return rows, [to_view(i, row) for i, row in enumerate(rows)]


def variant_kpis(variants: list[VariantView]) -> dict:
    return {
        "total": len(variants),
        "total_time_impact": sum(v.time_impact for v in variants),
        "total_cost_impact": sum(v.cost_impact for v in variants),
    }


def status_chart(variants: list[VariantView]) -> dict[str, int]:
    by_status = count_by(variants, "status")
    return {label: by_status.get(status, 0) for label, status in CHART_STATUSES}


def type_options(variants: list[VariantView]) -> list[str]:
    return unique_values(variants, "type")


def status_options(variants: list[VariantView]) -> list[str]:
    return unique_values(variants, "status")


def variant_page(
    project_id: str,
    filters: VariantFilters | None = None,
    view: str | None = None,
    data_dir: Path | str | None = None,
) -> ProjectPage[VariantView]:
    filters = filters or VariantFilters()
    rows, variants = load_variants(project_id, data_dir)
    selected = [v for v in variants if filters.matches(v)]
    return ProjectPage(
        project_id=project_id,
        project_name=project_name_from(rows, project_id),
        items=selected,
        view=normalize_view(view, VIEWS),
        total_loaded=len(variants),
        kpis=variant_kpis(selected),
        chart=status_chart(selected),
    )


def get_variant(project_id: str, variant_id: int, data_dir: Path | str | None = None) -> VariantView | None:
    _, variants = load_variants(project_id, data_dir)
    if 0 <= variant_id < len(variants):
        return variants[variant_id]
    return None
