"""JSON mirror of the dashboard pages."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from cruscotto.core.config import get_settings
from cruscotto.routers import params
from cruscotto.services import decisions, incidents, milestones, tasks, variants
from cruscotto.services.common import ProjectPage
from cruscotto.services.projects import ProjectView, get_project, list_projects, portfolio_summary

router = APIRouter(prefix="/api", tags=["api"])


def _require_project(project_id: str) -> ProjectView:
    project = get_project(project_id)
    if project is None:
        raise HTTPException(404, "Progetto non trovato")
    return project


def _page_payload(project: ProjectView, page: ProjectPage) -> dict:
    return {
        "project": {"id": project.id, "name": project.name},
        "view": page.view,
        "total_loaded": page.total_loaded,
        "count": len(page.items),
        "items": [item.as_dict() for item in page.items],
        "kpis": page.kpis,
        "chart": page.chart,
    }


@router.get("/health")
def health():
    return {"ok": True}


@router.get("/progetti")
def projects():
    items = list_projects()
    return {"items": [p.as_dict() for p in items], "summary": portfolio_summary(items).as_dict()}


@router.get("/progetti/{project_id}")
def project_detail(project_id: str):
    return _require_project(project_id).as_dict()


@router.get("/progetti/{project_id}/milestone")
def project_milestones(project_id: str, view: str = "cards"):
    project = _require_project(project_id)
    page = milestones.milestone_page(project_id, get_settings().today(), view=view)
    payload = _page_payload(project, page)
    payload["gantt"] = [bar.as_dict() for bar in milestones.gantt_chart(page.items).bars]
    return payload


@router.get("/progetti/{project_id}/task")
def project_tasks(
    project_id: str,
    view: str = "table",
    filters: tasks.TaskFilters = Depends(params.task_filters),
    sort: tasks.SortConfig = Depends(params.task_sort),
):
    project = _require_project(project_id)
    page = tasks.task_page(project_id, get_settings().today(), filters=filters, sort=sort, view=view)
    payload = _page_payload(project, page)
    payload["sort"] = {"key": sort.key, "direction": sort.direction}
    payload["gantt"] = [bar.as_dict() for bar in tasks.gantt_chart(page.items).bars]
    return payload


@router.get("/progetti/{project_id}/imprevisti")
def project_incidents(
    project_id: str,
    view: str = "cards",
    filters: incidents.IncidentFilters = Depends(params.incident_filters),
):
    project = _require_project(project_id)
    return _page_payload(project, incidents.incident_page(project_id, filters=filters, view=view))


@router.get("/progetti/{project_id}/varianti")
def project_variants(
    project_id: str,
    view: str = "cards",
    filters: variants.VariantFilters = Depends(params.variant_filters),
):
    project = _require_project(project_id)
    return _page_payload(project, variants.variant_page(project_id, filters=filters, view=view))


@router.get("/progetti/{project_id}/decisioni")
def project_decisions(
    project_id: str,
    view: str = "cards",
    filters: decisions.DecisionFilters = Depends(params.decision_filters),
):
    project = _require_project(project_id)
    return _page_payload(project, decisions.decision_page(project_id, filters=filters, view=view))
