"""Project cards and the portfolio summary shown on the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from pathlib import Path

from cruscotto.domain.parsing import parse_currency, parse_percentage
from cruscotto.domain.statuses import PROJECT_BADGES, badge_for
from cruscotto.repositories.json_storage import load_table

SECTIONS = (
    ("Milestone", "milestone"),
    ("Task", "task"),
    ("Imprevisti", "imprevisti"),
    ("Varianti", "varianti"),
    ("Decisioni", "decisioni"),
)


@dataclass(frozen=True)
class ProjectView:
    id: str
    name: str
    client: str
    pm: str
    status: str
    budget: float
    costs: float
    forecast: float
    progress: int

    @property
    def badge(self) -> str:
        return badge_for(self.status, PROJECT_BADGES)

    @property
    def progress_width(self) -> int:
        return max(0, min(self.progress, 100))

    @property
    def forecast_delta(self) -> float:
        return self.forecast - self.budget

    def as_dict(self) -> dict:
        data = asdict(self)
        data["forecast_delta"] = self.forecast_delta
        return data


def _to_view(row: dict) -> ProjectView:
    def _text(key: str) -> str:
        value = row.get(key)
        return str(value).strip() if value is not None else ""

    return ProjectView(
        id=_text("Id Progetto"),
        name=_text("Nome Progetto"),
        client=_text("Cliente"),
        pm=_text("PM responsabile"),
        status=_text("Stato"),
        budget=parse_currency(row.get("Budget Iniziale")),
        costs=parse_currency(row.get("Costi Sostenuti")),
        forecast=parse_currency(row.get("Previsione Finale Costi")),
        progress=parse_percentage(row.get("% Avanzamento")),
    )


def list_projects(data_dir: Path | str | None = None) -> list[ProjectView]:
    """All projects with both an id and a name, in file order."""
    projects = (_to_view(row) for row in load_table("progetti", data_dir))
    return [p for p in projects if p.id and p.name]


def get_project(project_id: str, data_dir: Path | str | None = None) -> ProjectView | None:
    for project in list_projects(data_dir):
        if project.id == project_id:
            return project
    return None


@dataclass(frozen=True)
class PortfolioSummary:
    total: int
    by_status: dict[str, int]
    budget: float
    costs: float
    forecast: float
    average_progress: int
    over_budget: list[ProjectView]

    def as_dict(self) -> dict:
        data = asdict(self)
        data["over_budget"] = [p.as_dict() for p in self.over_budget]
        return data


def portfolio_summary(projects: list[ProjectView]) -> PortfolioSummary:
    by_status: dict[str, int] = {}
    for p in projects:
        key = p.status or "Non specificato"
        by_status[key] = by_status.get(key, 0) + 1
    total = len(projects)
    average = round(sum(p.progress for p in projects) / total) if total else 0
    return PortfolioSummary(
        total=total,
        by_status=by_status,
        budget=sum(p.budget for p in projects),
        costs=sum(p.costs for p in projects),
        forecast=sum(p.forecast for p in projects),
        average_progress=average,
        over_budget=[p for p in projects if p.forecast > p.budget > 0],
    )
