"""Decision log page."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from cruscotto.domain.parsing import format_date, unescape_newlines
from cruscotto.domain.statuses import (
    DECISION_APPROVED,
    DECISION_BADGES,
    DECISION_PENDING,
    DECISION_REJECTED,
    badge_for,
    decision_status,
)
from cruscotto.repositories.json_storage import load_table, records_for_project
from cruscotto.services.common import (
    ProjectPage,
    count_by,
    date_field,
    date_in_range,
    matches_choice,
    matches_search,
    newest_first,
    normalize_view,
    project_name_from,
    text_field,
    unique_values,
)

VIEWS = ("cards", "table", "timeline")
DEFAULT_MOTIVATION = "Nessuna motivazione fornita."


@dataclass(frozen=True)
class DecisionView:
    id: int
    decision: str
    project: str
    responsabile: str
    date: date | None
    motivation: str
    status: str

    @property
    def status_badge(self) -> str:
        return badge_for(self.status, DECISION_BADGES)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "decision": self.decision,
            "project": self.project,
            "responsabile": self.responsabile,
            "date": self.date.isoformat() if self.date else None,
            "date_label": format_date(self.date),
            "motivation": self.motivation,
            "status": self.status,
        }


@dataclass(frozen=True)
class DecisionFilters:
    responsabile: str = "all"
    start_date: date | None = None
    end_date: date | None = None
    search: str = ""

    def matches(self, decision: DecisionView) -> bool:
        return (
            matches_choice(self.responsabile, decision.responsabile)
            and date_in_range(decision.date, self.start_date, self.end_date)
            and matches_search(self.search, decision.decision, decision.responsabile)
        )


def to_view(index: int, row: dict) -> DecisionView:
    motivation = unescape_newlines(text_field(row, "Motivazione", DEFAULT_MOTIVATION), "\n")
    return DecisionView(
        id=index,
        decision=unescape_newlines(text_field(row, "Decisione"), " "),
        project=text_field(row, "Progetto"),
        responsabile=text_field(row, "Responsabile", "Non specificato"),
        date=date_field(row, "Data Decisione"),
        motivation=motivation,
        status=decision_status(motivation),
    )


def load_decisions(project_id: str, data_dir: Path | str | None = None) -> tuple[list[dict], list[DecisionView]]:
    rows = records_for_project(load_table("decisioni", data_dir), project_id)
    return rows, [to_view(i, row) for i, row in enumerate(rows)]


def decision_kpis(decisions: list[DecisionView]) -> dict[str, int]:
    by_status = count_by(decisions, "status")
    return {
        "total": len(decisions),
        "approvate": by_status.get(DECISION_APPROVED, 0),
        "rifiutate": by_status.get(DECISION_REJECTED, 0),
        "in_valutazione": by_status.get(DECISION_PENDING, 0),
    }


def responsabile_options(decisions: list[DecisionView]) -> list[str]:
    return unique_values(decisions, "responsabile")


def decision_page(
    project_id: str,
    filters: DecisionFilters | None = None,
    view: str | None = None,
    data_dir: Path | str | None = None,
) -> ProjectPage[DecisionView]:
    filters = filters or DecisionFilters()
    rows, decisions = load_decisions(project_id, data_dir)
    selected = [d for d in decisions if filters.matches(d)]
    view = normalize_view(view, VIEWS)
    if view == "timeline":
        selected = newest_first(selected)
    return ProjectPage(
        project_id=project_id,
        project_name=project_name_from(rows, project_id),
        items=selected,
        view=view,
        total_loaded=len(decisions),
        kpis=decision_kpis(selected),
    )


def get_decision(project_id: str, decision_id: int, data_dir: Path | str | None = None) -> DecisionView | None:
    _, decisions = load_decisions(project_id, data_dir)
    if 0 <= decision_id < len(decisions):
        return decisions[decision_id]
    return None
