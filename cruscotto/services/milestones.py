"""Milestone page: status chips (cards) or a Gantt chart."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from cruscotto.domain.parsing import format_date
from cruscotto.domain.statuses import (
    MILESTONE_BADGES,
    MILESTONE_COMPLETED,
    badge_for,
    bar_class,
    milestone_status,
)
from cruscotto.repositories.json_storage import load_table, records_for_project
from cruscotto.services.common import ProjectPage, count_by, date_field, normalize_view, project_name_from, text_field
from cruscotto.services.gantt import GanttChart, build_chart

VIEWS = ("cards", "gantt")


@dataclass(frozen=True)
class MilestoneView:
    name: str
    project: str
    start_date: date | None
    deadline: date | None
    status: str
    calculated_status: str

    @property
    def badge(self) -> str:
        return badge_for(self.calculated_status, MILESTONE_BADGES)

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "project": self.project,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "deadline_label": format_date(self.deadline),
            "status": self.status,
            "calculated_status": self.calculated_status,
        }


def to_view(row: dict, today: date) -> MilestoneView:
    deadline = date_field(row, "Deadline")
    status = text_field(row, "Stato")
    return MilestoneView(
        name=text_field(row, "Milestone"),
        project=text_field(row, "Progetto"),
        start_date=date_field(row, "Start Date"),
        deadline=deadline,
        status=status,
        calculated_status=milestone_status(status, deadline, today),
    )


def load_milestones(project_id: str, today: date, data_dir: Path | str | None = None) -> tuple[list[dict], list[MilestoneView]]:
    rows = records_for_project(load_table("milestone", data_dir), project_id)
    return rows, [to_view(row, today) for row in rows]


def gantt_chart(milestones: list[MilestoneView]) -> GanttChart:
    return build_chart(
        [
            (
                m.name,
                m.start_date,
                m.deadline,
                100 if m.status == MILESTONE_COMPLETED else 0,
                bar_class(m.calculated_status),
            )
            for m in milestones
        ]
    )


def milestone_page(
    project_id: str,
    today: date,
    view: str | None = None,
    data_dir: Path | str | None = None,
) -> ProjectPage[MilestoneView]:
    rows, milestones = load_milestones(project_id, today, data_dir)
    return ProjectPage(
        project_id=project_id,
        project_name=project_name_from(rows, project_id),
        items=milestones,
        view=normalize_view(view, VIEWS),
        total_loaded=len(milestones),
        kpis=count_by(milestones, "calculated_status"),
    )
