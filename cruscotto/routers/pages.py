from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from cruscotto.core.config import get_settings
from cruscotto.routers import params
from cruscotto.services import decisions, incidents, milestones, tasks, variants
from cruscotto.services.projects import SECTIONS, get_project, list_projects, portfolio_summary

router = APIRouter(prefix="", tags=["pages"])


def _templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates non configurati")


def _render(request: Request, name: str, context: dict, status_code: int = 200):
    ctx = {"sections": SECTIONS, **context}
    return _templates(request).TemplateResponse(request, name, ctx, status_code=status_code)


def _project_name(project_id: str, fallback: str) -> str:
    project = get_project(project_id)
    return project.name if project else fallback


@router.get("/", response_class=HTMLResponse)
def dashboard(request: Request):
    projects = list_projects()
    return _render(
        request,
        "dashboard.html",
        {"active": "dashboard", "summary": portfolio_summary(projects), "projects": projects},
    )


@router.get("/progetti", response_class=HTMLResponse)
def projects_page(request: Request):
    return _render(request, "progetti.html", {"active": "progetti", "projects": list_projects()})


def _no_project(section: str, label: str):
    def handler(request: Request):
        return _render(request, "no_project.html", {"active": section, "label": label})

    handler.__name__ = f"{section}_no_project"
    return handler


for _label, _section in SECTIONS:
    router.add_api_route(
        f"/{_section}",
        _no_project(_section, _label),
        methods=["GET"],
        response_class=HTMLResponse,
    )


@router.get("/progetti/{project_id}/milestone", response_class=HTMLResponse)
def milestone_page(request: Request, project_id: str, view: str = "cards"):
    page = milestones.milestone_page(project_id, get_settings().today(), view=view)
    return _render(
        request,
        "milestone.html",
        {
            "active": "milestone",
            "page": page,
            "project_name": _project_name(project_id, page.project_name),
            "views": milestones.VIEWS,
            "gantt": milestones.gantt_chart(page.items) if page.view == "gantt" else None,
        },
    )


@router.get("/progetti/{project_id}/task", response_class=HTMLResponse)
def task_page(
    request: Request,
    project_id: str,
    view: str = "table",
    filters: tasks.TaskFilters = Depends(params.task_filters),
    sort: tasks.SortConfig = Depends(params.task_sort),
):
    today = get_settings().today()
    page = tasks.task_page(project_id, today, filters=filters, sort=sort, view=view)
    _, all_tasks = tasks.load_tasks(project_id, today)
    return _render(
        request,
        "task.html",
        {
            "active": "task",
            "page": page,
            "project_name": _project_name(project_id, page.project_name),
            "views": tasks.VIEWS,
            "filters": filters,
            "sort": sort,
            "owners": tasks.owner_options(all_tasks),
            "gantt": tasks.gantt_chart(page.items) if page.view == "gantt" else None,
        },
    )


@router.get("/progetti/{project_id}/imprevisti", response_class=HTMLResponse)
def incidents_page(
    request: Request,
    project_id: str,
    view: str = "cards",
    filters: incidents.IncidentFilters = Depends(params.incident_filters),
):
    page = incidents.incident_page(project_id, filters=filters, view=view)
    _, all_incidents = incidents.load_incidents(project_id)
    return _render(
        request,
        "imprevisti.html",
        {
            "active": "imprevisti",
            "page": page,
            "project_name": _project_name(project_id, page.project_name),
            "views": incidents.VIEWS,
            "filters": filters,
            "statuses": incidents.status_options(all_incidents),
            "criticalities": incidents.criticality_options(all_incidents),
        },
    )


@router.get("/progetti/{project_id}/imprevisti/{incident_id}", response_class=HTMLResponse)
def incident_detail(request: Request, project_id: str, incident_id: int):
    incident = incidents.get_incident(project_id, incident_id)
    if incident is None:
        raise HTTPException(404, "Imprevisto non trovato")
    return _render(
        request,
        "imprevisto.html",
        {"active": "imprevisti", "project_id": project_id, "incident": incident},
    )


@router.get("/progetti/{project_id}/varianti", response_class=HTMLResponse)
def variants_page(
    request: Request,
    project_id: str,
    view: str = "cards",
    filters: variants.VariantFilters = Depends(params.variant_filters),
):
    page = variants.variant_page(project_id, filters=filters, view=view)
    _, all_variants = variants.load_variants(project_id)
    return _render(
        request,
        "varianti.html",
        {
            "active": "varianti",
            "page": page,
            "project_name": _project_name(project_id, page.project_name),
            "views": variants.VIEWS,
            "filters": filters,
            "types": variants.type_options(all_variants),
            "statuses": variants.status_options(all_variants),
        },
    )


@router.get("/progetti/{project_id}/varianti/{variant_id}", response_class=HTMLResponse)
def variant_detail(request: Request, project_id: str, variant_id: int):
    variant = variants.get_variant(project_id, variant_id)
    if variant is None:
        raise HTTPException(404, "Variante non trovata")
    return _render(
        request,
        "variante.html",
        {"active": "varianti", "project_id": project_id, "variant": variant},
    )


@router.get("/progetti/{project_id}/decisioni", response_class=HTMLResponse)
def decisions_page(
    request: Request,
    project_id: str,
    view: str = "cards",
    filters: decisions.DecisionFilters = Depends(params.decision_filters),
):
    page = decisions.decision_page(project_id, filters=filters, view=view)
    _, all_decisions = decisions.load_decisions(project_id)
    return _render(
        request,
        "decisioni.html",
        {
            "active": "decisioni",
            "page": page,
            "project_name": _project_name(project_id, page.project_name),
            "views": decisions.VIEWS,
            "filters": filters,
            "responsabili": decisions.responsabile_options(all_decisions),
        },
    )


@router.get("/progetti/{project_id}/decisioni/{decision_id}", response_class=HTMLResponse)
def decision_detail(request: Request, project_id: str, decision_id: int):
    decision = decisions.get_decision(project_id, decision_id)
    if decision is None:
        raise HTTPException(404, "Decisione non trovata")
    return _render(
        request,
        "decisione.html",
        {"active": "decisioni", "project_id": project_id, "decision": decision},
    )
