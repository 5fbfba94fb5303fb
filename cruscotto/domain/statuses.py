"""Status rules and badge styling shared by the dashboard pages."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

WHITESPACE_RE = re.compile(r"\s+")

DEFAULT_BADGE = "badge-slate"

PROJECT_BADGES = {
    "In corso": "badge-yellow",
    "Completato": "badge-green",
    "Da approvare": "badge-blue",
}

MILESTONE_COMPLETED = "Completata"
MILESTONE_LATE = "In ritardo"
MILESTONE_BADGES = {
    "Completata": "badge-green",
    "In corso": "badge-yellow",
    "Pianificata": "badge-blue",
    "In ritardo": "badge-red",
}

TASK_COMPLETED = "Completato"
TASK_DEFAULT_STATUS = "Pianificato"
CRITICALITY_ORDER = {"Alta": 0, "Media": 1, "Bassa": 2}
HIGH_CRITICALITY = "Alta"

INCIDENT_CRITICALITY_BADGES = {
    "Alta": "badge-red",
    "Media": "badge-orange",
    "Bassa": "badge-green",
}
INCIDENT_STATUS_BADGES = {
    "Aperto": "badge-red",
    "In lavorazione": "badge-yellow",
    "Risolto": "badge-green",
}

VARIANT_STATUS_BADGES = {
    "Approvata": "badge-green",
    "Rifiutata": "badge-red",
    "In valutazione": "badge-yellow",
}

DECISION_APPROVED = "Approvata"
DECISION_REJECTED = "Rifiutata"
DECISION_PENDING = "In Valutazione"
DECISION_NEUTRAL = "Neutrale"
DECISION_BADGES = {
    DECISION_APPROVED: "badge-green",
    DECISION_REJECTED: "badge-red",
    DECISION_PENDING: "badge-yellow",
}


@dataclass(frozen=True)
class StatusInfo:
    text: str
    badge: str
    progress: str


TASK_STATUS_INFO = {
    "Completato": StatusInfo("Completato", "badge-green", "progress-green"),
    "In corso": StatusInfo("In Corso", "badge-yellow", "progress-yellow"),
    "Pianificato": StatusInfo("Pianificato", "badge-blue", "progress-blue"),
}
TASK_LATE_INFO = StatusInfo("In Ritardo", "badge-red", "progress-red")
TASK_UNKNOWN_INFO = StatusInfo("Sconosciuto", "badge-slate", "progress-slate")


def badge_for(status: str | None, badges: dict[str, str]) -> str:
    return badges.get(status or "", DEFAULT_BADGE)


def is_past(deadline: date | None, today: date) -> bool:
    return deadline is not None and deadline < today


def milestone_status(raw_status: str | None, deadline: date | None, today: date) -> str:
    """A milestone not yet completed whose deadline has passed is "In ritardo"."""
    status = raw_status or ""
    if status != MILESTONE_COMPLETED and is_past(deadline, today):
        return MILESTONE_LATE
    return status


def task_is_late(raw_status: str | None, deadline: date | None, today: date) -> bool:
    return is_past(deadline, today) and raw_status != TASK_COMPLETED


def task_status_info(status: str, is_late: bool) -> StatusInfo:
    if is_late:
        return TASK_LATE_INFO
    return TASK_STATUS_INFO.get(status, TASK_UNKNOWN_INFO)


def criticality_rank(value: str) -> int:
    return CRITICALITY_ORDER.get(value, len(CRITICALITY_ORDER))


def decision_status(motivation: str) -> str:
    """Derive the outcome of a decision from the wording of its motivation."""
    text = (motivation or "").lower()
    if "approvat" in text:
        return DECISION_APPROVED
    if "rifiutat" in text:
        return DECISION_REJECTED
    if "in valutazione" in text or "sospesa" in text:
        return DECISION_PENDING
    return DECISION_NEUTRAL


def bar_class(status: str) -> str:
    """CSS class for Gantt bars: "In ritardo" -> "bar-in-ritardo"."""
    slug = WHITESPACE_RE.sub("-", (status or "").strip().lower())
    return f"bar-{slug}" if slug else "bar-default"
