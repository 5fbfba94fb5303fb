"""
JSON-file persistence adapter.

The sync script writes one JSON array per Airtable table into the data
directory; the web app reads them back on every request.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable
import json
import logging

from cruscotto.core.config import get_settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a data file exists but cannot be used."""


@dataclass(frozen=True)
class Table:
    name: str
    airtable_table: str


TABLES: tuple[Table, ...] = (
    Table("progetti", "Progetti"),
    Table("milestone", "Milestone"),
    Table("task", "Task"),
    Table("imprevisti", "Imprevisti"),
    Table("varianti", "Varianti"),
    Table("decisioni", "Decision Log"),
)
TABLE_NAMES = tuple(t.name for t in TABLES)

PROJECT_FIELD = "Progetto"


def _data_dir(data_dir: Path | str | None) -> Path:
    return Path(data_dir) if data_dir else get_settings().data_dir


def table_path(name: str, data_dir: Path | str | None = None) -> Path:
    return _data_dir(data_dir) / f"{name}.json"


def load_table(name: str, data_dir: Path | str | None = None) -> list[dict]:
    path = table_path(name, data_dir)
    if not path.exists():
        logger.warning("Data file %s not found; treating table %s as empty", path, name)
        return []
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise StorageError(f"Impossibile leggere {path.name}: {exc}") from exc
    if not isinstance(data, list):
        raise StorageError(f"{path.name} non contiene un array JSON")
    return [row for row in data if isinstance(row, dict)]


def save_table(name: str, records: Iterable[dict[str, Any]], data_dir: Path | str | None = None) -> Path:
    path = table_path(name, data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(list(records), ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def _belongs_to(row: dict, project_id: str) -> bool:
    value = row.get(PROJECT_FIELD)
    # linked-record fields arrive as lists
    if isinstance(value, list):
        return project_id in value
    return value == project_id


def records_for_project(records: Iterable[dict], project_id: str | None) -> list[dict]:
    if not project_id:
        return []
    return [row for row in records if _belongs_to(row, project_id)]
