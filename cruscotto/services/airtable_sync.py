"""
Airtable -> JSON sync.

Each configured table is downloaded through the Airtable list-records
endpoint (following the pagination offset) and written to
<data_dir>/<name>.json as an array of {"id": ..., **fields} objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional
from urllib.parse import quote
import logging

import requests

from cruscotto.core.config import DEFAULT_AIRTABLE_URL, Settings, get_settings
from cruscotto.repositories.json_storage import TABLES, Table, save_table

logger = logging.getLogger(__name__)


class SyncError(Exception):
    """Base exception for the sync workflow."""


class AirtableError(SyncError):
    def __init__(self, status: int, message: str, table: str = "") -> None:
        prefix = f"{table}: " if table else ""
        super().__init__(f"{prefix}Airtable API error {status}: {message}")
        self.status = status
        self.message = message
        self.table = table


def _error_message(resp: requests.Response) -> str:
    # Airtable errors look like {"error": {"type": ..., "message": ...}} or {"error": "NOT_FOUND"}
    try:
        payload = resp.json()
    except ValueError:
        return resp.reason or resp.text
    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        return str(err.get("message") or err.get("type") or resp.reason)
    if err:
        return str(err)
    return resp.reason or resp.text


def _is_record(item) -> bool:
    return isinstance(item, dict) and isinstance(item.get("fields") or {}, dict)


class AirtableClient:
    """Minimal read-only client for the Airtable REST API."""

    def __init__(
        self,
        api_key: str,
        base_id: str,
        *,
        api_url: str = DEFAULT_AIRTABLE_URL,
        page_size: int = 100,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self.page_size = page_size
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> "AirtableClient":
        settings = settings or get_settings()
        settings.require_airtable()
        kwargs.setdefault("page_size", settings.airtable_page_size)
        kwargs.setdefault("timeout", settings.airtable_timeout)
        kwargs.setdefault("api_url", settings.airtable_api_url)
        return cls(settings.airtable_api_key, settings.airtable_base_id, **kwargs)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    def table_url(self, table: str) -> str:
        return f"{self.api_url}/{self.base_id}/{quote(table, safe='')}"

    def iter_pages(self, table: str) -> Iterator[list[dict]]:
        url = self.table_url(table)
        params: dict = {"pageSize": self.page_size}
        while True:
            resp = self.session.get(url, headers=self._headers(), params=params, timeout=self.timeout)
            if resp.status_code // 100 != 2:
                raise AirtableError(resp.status_code, _error_message(resp), table)
            try:
                data = resp.json()
            except ValueError as exc:
                raise AirtableError(resp.status_code, f"risposta non JSON ({exc})", table) from exc
            if not isinstance(data, dict):
                raise AirtableError(resp.status_code, "payload inatteso", table)
            records = data.get("records") or []
            if not isinstance(records, list) or not all(_is_record(r) for r in records):
                raise AirtableError(resp.status_code, "payload inatteso", table)
            yield records
            offset = data.get("offset")
            if not offset:
                return
            params = {"pageSize": self.page_size, "offset": offset}

    def list_records(self, table: str) -> list[dict]:
        """Every record of the table flattened to {"id": ..., **fields}."""
        records: list[dict] = []
        for page in self.iter_pages(table):
            for record in page:
                records.append({"id": record.get("id"), **(record.get("fields") or {})})
        return records


@dataclass
class TableResult:
    name: str
    airtable_table: str
    records: int = 0
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncReport:
    results: list[TableResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def failed(self) -> list[TableResult]:
        return [r for r in self.results if not r.ok]

    @property
    def total_records(self) -> int:
        return sum(r.records for r in self.results)


def select_tables(names: Iterable[str] | None) -> tuple[Table, ...]:
    """Restrict TABLES to the given file names (or Airtable names)."""
    wanted = [n.strip() for n in (names or []) if n and n.strip()]
    if not wanted:
        return TABLES
    selected = []
    for name in wanted:
        match = next((t for t in TABLES if name in (t.name, t.airtable_table)), None)
        if match is None:
            known = ", ".join(t.name for t in TABLES)
            raise SyncError(f"Tabella sconosciuta '{name}' (valide: {known})")
        if match not in selected:
            selected.append(match)
    return tuple(selected)


def sync_tables(
    client: AirtableClient,
    tables: Iterable[Table] = TABLES,
    data_dir: Path | str | None = None,
    *,
    fail_fast: bool = False,
) -> SyncReport:
    """
    Download each table sequentially. A failing table is logged and skipped,
    unless fail_fast is set, in which case the error propagates and the run stops.
    """
    report = SyncReport()
    for table in tables:
        result = TableResult(table.name, table.airtable_table)
        report.results.append(result)
        logger.info("Syncing table %s", table.airtable_table)
        try:
            records = client.list_records(table.airtable_table)
            result.path = save_table(table.name, records, data_dir)
            result.records = len(records)
        except (SyncError, requests.RequestException, OSError) as exc:
            result.error = str(exc)
            logger.error("Sync failed for %s: %s", table.airtable_table, exc)
            if fail_fast:
                raise
            continue
        logger.info("%s.json updated (%d records)", table.name, result.records)
    return report
