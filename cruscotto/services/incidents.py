"""Incident ("imprevisti") page: KPIs, per-type chart, cards/table/timeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from cruscotto.domain.parsing import format_date
from cruscotto.domain.statuses import INCIDENT_CRITICALITY_BADGES, INCIDENT_STATUS_BADGES, badge_for
from cruscotto.repositories.json_storage import load_table, records_for_project
from cruscotto.services.common import (
    ProjectPage,
    count_by,
    date_field,
    date_in_range,
    matches_search,
    newest_first,
    normalize_view,
    project_name_from,
    text_field,
    unique_values,
)

VIEWS = ("cards", "table", "timeline")


@dataclass(frozen=True)
class IncidentView:
    id: int
    title: str
    project: str
    description: str
    type: str
    criticality: str
    date: date | None
    status: str
    risk: str

    @property
    def criticality_badge(self) -> str:
        return badge_for(self.criticality, INCIDENT_CRITICALITY_BADGES)

    @property
    def status_badge(self) -> str:
        return badge_for(self.status, INCIDENT_STATUS_BADGES)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "project": self.project,
            "description": self.description,
            "type": self.type,
            "criticality": self.criticality,
            "date": self.date.isoformat() if self.date else None,
            "date_label": format_date(self.date),
            "status": self.status,
            "risk": self.risk,
        }


@dataclass(frozen=True)
class IncidentFilters:
    start_date: date | None = None
    end_date: date | None = None
    statuses: tuple[str, ...] = field(default_factory=tuple)
    criticalities: tuple[str, ...] = field(default_factory=tuple)
    search: str = ""

    def matches(self, incident: IncidentView) -> bool:
        if not date_in_range(incident.date, self.start_date, self.end_date):
            return False
        if self.statuses and incident.status not in self.statuses:
            return False
        if self.criticalities and incident.criticality not in self.criticalities:
            return False
        return matches_search(self.search, incident.title, incident.type)


def to_view(index: int, row: dict) -> IncidentView:
    return IncidentView(
        id=index,
        title=text_field(row, "Titolo Imprevisto"),
        project=text_field(row, "Progetto"),
        description=text_field(row, "Descrizione Problema", "Nessuna descrizione fornita."),
        type=text_field(row, "Tipo", "Non specificato"),
        criticality=text_field(row, "Criticità", "Bassa"),
        date=date_field(row, "Data Imprevisti"),
        status=text_field(row, "Stato", "Aperto"),
        risk=text_field(row, "Rischio Previsionale", "Non definito"),
    )


def load_incidents(project_id: str, data_dir: Path | str | None = None) -> tuple[list[dict], list[IncidentView]]:
    rows = records_for_project(load_table("imprevisti", data_dir), project_id)
    return rows, [to_view(i, row) for i, row in enumerate(rows)]


def incident_kpis(incidents: list[IncidentView]) -> dict[str, int]:
    by_status = count_by(incidents, "status")
    return {
        "total": len(incidents),
        "open": by_status.get("Aperto", 0),
        "in_progress": by_status.get("In lavorazione", 0),
        "resolved": by_status.get("Risolto", 0),
    }


def status_options(incidents: list[IncidentView]) -> list[str]:
    return unique_values(incidents, "status", include_all=False)


def criticality_options(incidents: list[IncidentView]) -> list[str]:
    return unique_values(incidents, "criticality", include_all=False)


def incident_page(
    project_id: str,
    filters: IncidentFilters | None = None,
    view: str | None = None,
    data_dir: Path | str | None = None,
) -> ProjectPage[IncidentView]:
    filters = filters or IncidentFilters()
    rows, incidents = load_incidents(project_id, data_dir)
    selected = [i for i in incidents if filters.matches(i)]
    view = normalize_view(view, VIEWS)
    if view == "timeline":
        selected = newest_first(selected)
    return ProjectPage(
        project_id=project_id,
        project_name=project_name_from(rows, project_id),
        items=selected,
        view=view,
        total_loaded=len(incidents),
        kpis=incident_kpis(selected),
        chart=count_by(selected, "type"),
    )


def get_incident(project_id: str, incident_id: int, data_dir: Path | str | None = None) -> IncidentView | None:
    _, incidents = load_incidents(project_id, data_dir)
    if 0 <= incident_id < len(incidents):
        return incidents[incident_id]
    return None
