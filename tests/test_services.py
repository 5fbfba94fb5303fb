"""
Per-page services against the sample dataset written by the data_dir fixture.
"""
from __future__ import annotations

from datetime import date

import pytest

from cruscotto.services import decisions, incidents, milestones, tasks, variants
from cruscotto.services.common import date_in_range, matches_search, normalize_view
from cruscotto.services.projects import get_project, list_projects, portfolio_summary

from conftest import TODAY, write_tables


def test_list_projects_skips_rows_without_id_or_name(data_dir):
    projects = list_projects()
    assert [p.id for p in projects] == ["PRJ-1", "PRJ-2"]
    first = projects[0]
    assert first.budget == pytest.approx(100000.0)
    assert first.costs == pytest.approx(40000.0)
    assert first.forecast == pytest.approx(110000.0)
    assert first.progress == 40
    assert first.badge == "badge-yellow"
    assert get_project("PRJ-3") is None


def test_portfolio_summary(data_dir):
    summary = portfolio_summary(list_projects())
    assert summary.total == 2
    assert summary.by_status == {"In corso": 1, "Completato": 1}
    assert summary.budget == pytest.approx(150000.0)
    assert summary.average_progress == 70
    assert [p.id for p in summary.over_budget] == ["PRJ-1"]


def test_portfolio_summary_of_nothing():
    summary = portfolio_summary([])
    assert summary.total == 0
    assert summary.average_progress == 0


def test_milestones_mark_late_ones(data_dir):
    page = milestones.milestone_page("PRJ-1", TODAY)
    statuses = [m.calculated_status for m in page.items]
    assert statuses == ["Completata", "In ritardo", "Pianificata"]
    assert page.view == "cards"
    assert page.kpis == {"Completata": 1, "In ritardo": 1, "Pianificata": 1}


def test_milestone_gantt_bars(data_dir):
    page = milestones.milestone_page("PRJ-1", TODAY, view="gantt")
    chart = milestones.gantt_chart(page.items)
    assert page.view == "gantt"
    assert [b.custom_class for b in chart.bars] == ["bar-completata", "bar-in-ritardo", "bar-pianificata"]
    assert [b.progress for b in chart.bars] == [100, 0, 0]
    assert chart.start == date(2025, 2, 1)
    assert chart.end == date(2025, 12, 31)
    assert chart.bars[0].offset_pct == 0
    assert chart.bars[0].as_dict()["start"] == "2025-02-01"


def test_unknown_project_has_no_records(data_dir):
    page = milestones.milestone_page("NOPE", TODAY)
    assert page.is_empty
    assert not page.has_records
    assert page.project_name == "NOPE"


def test_tasks_drop_incomplete_rows_and_apply_defaults(data_dir):
    page = tasks.task_page("PRJ-1", TODAY)
    assert [t.id for t in page.items] == ["T1", "T2", "T3"]
    t1, t2, t3 = page.items
    assert not t1.is_late
    assert t2.is_late and t2.is_critical
    assert t3.owner == "Non assegnato"
    assert t3.status == "Pianificato"
    assert t3.criticality == "Bassa"
    assert page.kpis == {"total": 3, "late": 1, "critical": 1}


@pytest.mark.parametrize(
    "filters, expected",
    [
        (tasks.TaskFilters(owner="Sara"), ["T2"]),
        (tasks.TaskFilters(show_late=True), ["T2"]),
        (tasks.TaskFilters(show_critical=True), ["T2"]),
        (tasks.TaskFilters(start_date=date(2025, 4, 1)), ["T2", "T3"]),
        (tasks.TaskFilters(end_date=date(2025, 5, 20)), ["T1", "T2"]),
        (tasks.TaskFilters(owner="Nessuno"), []),
    ],
)
def test_task_filters(data_dir, filters, expected):
    page = tasks.task_page("PRJ-1", TODAY, filters=filters)
    assert [t.id for t in page.items] == expected


def test_task_sorting_by_criticality(data_dir):
    asc = tasks.task_page("PRJ-1", TODAY, sort=tasks.SortConfig("criticality", "asc"))
    desc = tasks.task_page("PRJ-1", TODAY, sort=tasks.SortConfig("criticality", "desc"))
    assert [t.id for t in asc.items] == ["T2", "T1", "T3"]
    assert [t.id for t in desc.items] == ["T3", "T1", "T2"]


def test_task_page_name_comes_from_first_kept_task(tmp_path):
    rows = [
        {"ID": "X0", "Titolo Task": "Bozza", "Progetto": ["PRJ-9", "PRJ-1"]},
        {"ID": "X1", "Titolo Task": "Scavi", "Progetto": "PRJ-9", "Start Date": "01/03/2025", "Deadline": "30/03/2025"},
    ]
    write_tables(tmp_path, {"task": rows})
    page = tasks.task_page("PRJ-9", TODAY, data_dir=tmp_path)
    assert [t.id for t in page.items] == ["X1"]
    assert page.project_name == "PRJ-9"
    assert tasks.task_page("PRJ-0", TODAY, data_dir=tmp_path).project_name == "PRJ-0"


def test_sort_config_toggle_and_parse():
    default = tasks.SortConfig()
    assert default.toggle("deadline") == tasks.SortConfig("deadline", "desc")
    assert default.toggle("deadline").toggle("deadline") == default
    assert default.toggle("title") == tasks.SortConfig("title", "asc")
    assert tasks.SortConfig.parse("bogus", "DESC") == tasks.SortConfig("deadline", "desc")


def test_task_owner_options_and_gantt(data_dir):
    _, all_tasks = tasks.load_tasks("PRJ-1", TODAY)
    assert tasks.owner_options(all_tasks) == ["all", "Luca", "Sara", "Non assegnato"]
    chart = tasks.gantt_chart(all_tasks)
    assert [b.custom_class for b in chart.bars] == ["bar-completato", "bar-in-ritardo", "bar-pianificato"]
    assert [b.progress for b in chart.bars] == [100, 70, 0]


def test_incident_defaults_kpis_and_chart(data_dir):
    page = incidents.incident_page("PRJ-1")
    last = page.items[2]
    assert last.status == "Aperto"
    assert last.criticality == "Bassa"
    assert last.description == "Nessuna descrizione fornita."
    assert last.risk == "Non definito"
    assert page.kpis == {"total": 3, "open": 1, "in_progress": 1, "resolved": 1}
    assert page.chart == {"Fornitura": 2, "Tecnico": 1}


@pytest.mark.parametrize(
    "filters, expected",
    [
        (incidents.IncidentFilters(statuses=("Aperto",)), [2]),
        (incidents.IncidentFilters(criticalities=("Alta", "Media")), [0, 1]),
        (incidents.IncidentFilters(search="FORN"), [0, 2]),
        (incidents.IncidentFilters(start_date=date(2025, 5, 1), end_date=date(2025, 5, 12)), [0]),
    ],
)
def test_incident_filters(data_dir, filters, expected):
    page = incidents.incident_page("PRJ-1", filters=filters)
    assert [i.id for i in page.items] == expected


def test_incident_timeline_is_newest_first(data_dir):
    page = incidents.incident_page("PRJ-1", view="timeline")
    assert [i.id for i in page.items] == [2, 0, 1]
    assert incidents.get_incident("PRJ-1", 1).title == "Falda"
    assert incidents.get_incident("PRJ-1", 9) is None


def test_variants_parse_impacts(data_dir):
    page = variants.variant_page("PRJ-1")
    first = page.items[0]
    assert first.type == "Parcheggio"
    assert first.time_impact == 10
    assert first.cost_impact == pytest.approx(15000.0)
    assert page.items[2].status == "In valutazione"
    assert page.kpis["total"] == 3
    assert page.kpis["total_time_impact"] == 8
    assert page.kpis["total_cost_impact"] == pytest.approx(11500.0)
    assert page.chart == {"Approvate": 1, "Rifiutate": 1, "In Valutazione": 1}


@pytest.mark.parametrize(
    "filters, expected",
    [
        (variants.VariantFilters(time_impact="positive"), [1]),
        (variants.VariantFilters(time_impact="negative"), [0]),
        (variants.VariantFilters(time_impact="zero"), [2]),
        (variants.VariantFilters(cost_impact="negative"), [0]),
        (variants.VariantFilters(variant_type="Parcheggio"), [0]),
        (variants.VariantFilters(status="Rifiutata"), [1]),
        (variants.VariantFilters(search="prj-1"), [0, 1, 2]),
    ],
)
def test_variant_filters(data_dir, filters, expected):
    page = variants.variant_page("PRJ-1", filters=filters)
    assert [v.id for v in page.items] == expected


def test_decisions_status_and_text_cleanup(data_dir):
    page = decisions.decision_page("PRJ-1")
    first = page.items[0]
    assert first.decision == "Adozione BIM in cantiere"
    assert first.motivation == "Approvata dal comitato.\nRiduce errori."
    assert [d.status for d in page.items] == ["Approvata", "In Valutazione", "Rifiutata", "Neutrale"]
    assert page.items[2].responsabile == "Non specificato"
    assert page.kpis == {"total": 4, "approvate": 1, "rifiutate": 1, "in_valutazione": 1}


@pytest.mark.parametrize(
    "filters, expected",
    [
        (decisions.DecisionFilters(responsabile="Giulia"), [0, 3]),
        (decisions.DecisionFilters(search="marco"), [1]),
        (decisions.DecisionFilters(start_date=date(2025, 3, 1), end_date=date(2025, 3, 5)), [2, 3]),
    ],
)
def test_decision_filters(data_dir, filters, expected):
    page = decisions.decision_page("PRJ-1", filters=filters)
    assert [d.id for d in page.items] == expected


def test_decision_timeline(data_dir):
    page = decisions.decision_page("PRJ-1", view="timeline")
    assert [d.id for d in page.items] == [1, 3, 2, 0]


def test_common_helpers():
    assert date_in_range(None, None, None)
    assert not date_in_range(None, date(2025, 1, 1), None)
    assert date_in_range(date(2025, 1, 1), date(2025, 1, 1), date(2025, 1, 1))
    assert matches_search("", None)
    assert matches_search("bim", "Adozione BIM", None)
    assert normalize_view("GANTT", ("cards", "gantt")) == "gantt"
    assert normalize_view("kanban", ("cards", "gantt")) == "cards"
