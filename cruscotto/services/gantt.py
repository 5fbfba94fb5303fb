"""Gantt/timeline bars for milestones and tasks.

Charts are drawn with plain HTML/CSS: each bar carries its offset and width
as a percentage of the overall date span.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True)
class GanttBar:
    id: str
    name: str
    start: date
    end: date
    progress: int
    custom_class: str
    offset_pct: float = 0.0
    width_pct: float = 100.0

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "progress": self.progress,
            "custom_class": self.custom_class,
        }


@dataclass(frozen=True)
class GanttChart:
    bars: list[GanttBar]
    start: date | None
    end: date | None
    weeks: list[date]

    @property
    def is_empty(self) -> bool:
        return not self.bars


def build_chart(rows: list[tuple[str, date | None, date | None, int, str]]) -> GanttChart:
    """
    rows: (name, start, end, progress, custom_class). Rows without both dates
    are left out; an end before the start is drawn as a one-day bar.
    """
    usable = []
    for name, start, end, progress, css in rows:
        if start is None or end is None:
            continue
        if end < start:
            end = start
        usable.append((name, start, end, progress, css))
    if not usable:
        return GanttChart(bars=[], start=None, end=None, weeks=[])

    span_start = min(r[1] for r in usable)
    span_end = max(r[2] for r in usable)
    # inclusive day count so single-day bars stay visible
    total_days = (span_end - span_start).days + 1

    bars = []
    for i, (name, start, end, progress, css) in enumerate(usable):
        offset = (start - span_start).days / total_days * 100
        width = ((end - start).days + 1) / total_days * 100
        bars.append(
            GanttBar(
                id=f"task_{i}",
                name=name,
                start=start,
                end=end,
                progress=max(0, min(progress, 100)),
                custom_class=css,
                offset_pct=round(offset, 2),
                width_pct=round(width, 2),
            )
        )
    return GanttChart(bars=bars, start=span_start, end=span_end, weeks=_week_marks(span_start, span_end))


def _week_marks(start: date, end: date) -> list[date]:
    """Mondays covering the span, used as column headers (view mode "Week")."""
    monday = start - timedelta(days=start.weekday())
    marks = []
    while monday <= end:
        marks.append(monday)
        monday += timedelta(days=7)
    return marks
