"""
Task page: owner/date/late/critical filters, sortable table and timeline.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path

from cruscotto.domain.parsing import format_date, parse_percentage
from cruscotto.domain.statuses import (
    HIGH_CRITICALITY,
    TASK_DEFAULT_STATUS,
    StatusInfo,
    bar_class,
    criticality_rank,
    task_is_late,
    task_status_info,
)
from cruscotto.repositories.json_storage import load_table, records_for_project
from cruscotto.services.common import (
    ProjectPage,
    date_in_range,
    date_field,
    matches_choice,
    normalize_view,
    text_field,
    unique_values,
)
from cruscotto.services.gantt import GanttChart, build_chart

VIEWS = ("table", "gantt")
SORT_KEYS = ("title", "owner", "deadline", "criticality")
DEFAULT_OWNER = "Non assegnato"
DEFAULT_CRITICALITY = "Bassa"


@dataclass(frozen=True)
class TaskView:
    id: str
    title: str
    project: str
    owner: str
    start_date: date
    deadline: date
    status: str
    criticality: str
    completion: int
    is_late: bool

    @property
    def status_info(self) -> StatusInfo:
        return task_status_info(self.status, self.is_late)

    @property
    def is_critical(self) -> bool:
        return self.criticality == HIGH_CRITICALITY

    @property
    def completion_width(self) -> int:
        return max(0, min(self.completion, 100))

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "project": self.project,
            "owner": self.owner,
            "start_date": self.start_date.isoformat(),
            "deadline": self.deadline.isoformat(),
            "deadline_label": format_date(self.deadline),
            "status": self.status,
            "status_label": self.status_info.text,
            "criticality": self.criticality,
            "completion": self.completion,
            "is_late": self.is_late,
        }


@dataclass(frozen=True)
class TaskFilters:
    owner: str = "all"
    start_date: date | None = None
    end_date: date | None = None
    show_late: bool = False
    show_critical: bool = False

    def matches(self, task: TaskView) -> bool:
        if not matches_choice(self.owner, task.owner):
            return False
        if self.show_late and not task.is_late:
            return False
        if self.show_critical and not task.is_critical:
            return False
        # start bound applies to the start date, end bound to the deadline
        if not date_in_range(task.start_date, self.start_date, None):
            return False
        return date_in_range(task.deadline, None, self.end_date)


@dataclass(frozen=True)
class SortConfig:
    key: str = "deadline"
    direction: str = "asc"

    @classmethod
    def parse(cls, key: str | None, direction: str | None) -> "SortConfig":
        k = key if key in SORT_KEYS else "deadline"
        d = "desc" if (direction or "").lower() == "desc" else "asc"
        return cls(k, d)

    def toggle(self, key: str) -> "SortConfig":
        """Clicking the same header flips direction; a new header sorts ascending."""
        if key == self.key:
            return replace(self, direction="desc" if self.direction == "asc" else "asc")
        return SortConfig(key=key, direction="asc")


def _sort_value(task: TaskView, key: str):
    if key == "criticality":
        return criticality_rank(task.criticality)
    return getattr(task, key)


def sort_tasks(tasks: list[TaskView], config: SortConfig) -> list[TaskView]:
    return sorted(tasks, key=lambda t: _sort_value(t, config.key), reverse=config.direction == "desc")


def to_view(row: dict, today: date) -> TaskView | None:
    """Tasks without id, title or both dates cannot be placed and are skipped."""
    start = date_field(row, "Start Date")
    deadline = date_field(row, "Deadline")
    task_id = text_field(row, "ID")
    title = text_field(row, "Titolo Task")
    if not (task_id and title and start and deadline):
        return None
    raw_status = text_field(row, "Stato")
    return TaskView(
        id=task_id,
        title=title,
        project=text_field(row, "Progetto"),
        owner=text_field(row, "Owner", DEFAULT_OWNER),
        start_date=start,
        deadline=deadline,
        status=raw_status or TASK_DEFAULT_STATUS,
        criticality=text_field(row, "Criticità", DEFAULT_CRITICALITY),
        completion=parse_percentage(row.get("% Completamento")),
        is_late=task_is_late(raw_status, deadline, today),
    )


def load_tasks(project_id: str, today: date, data_dir: Path | str | None = None) -> tuple[list[dict], list[TaskView]]:
    rows = records_for_project(load_table("task", data_dir), project_id)
    tasks = [t for t in (to_view(row, today) for row in rows) if t is not None]
    return rows, tasks


def owner_options(tasks: list[TaskView]) -> list[str]:
    return unique_values(tasks, "owner")


def gantt_chart(tasks: list[TaskView]) -> GanttChart:
    return build_chart(
        [
            (
                t.title,
                t.start_date,
                t.deadline,
                t.completion,
                "bar-in-ritardo" if t.is_late else bar_class(t.status),
            )
            for t in tasks
        ]
    )


def task_page(
    project_id: str,
    today: date,
    filters: TaskFilters | None = None,
    sort: SortConfig | None = None,
    view: str | None = None,
    data_dir: Path | str | None = None,
) -> ProjectPage[TaskView]:
    filters = filters or TaskFilters()
    sort = sort or SortConfig()
    _, tasks = load_tasks(project_id, today, data_dir)
    selected = sort_tasks([t for t in tasks if filters.matches(t)], sort)
    return ProjectPage(
        project_id=project_id,
        project_name=tasks[0].project if tasks else project_id,
        items=selected,
        view=normalize_view(view, VIEWS),
        total_loaded=len(tasks),
        kpis={
            "total": len(selected),
            "late": sum(1 for t in selected if t.is_late),
            "critical": sum(1 for t in selected if t.is_critical),
        },
    )
