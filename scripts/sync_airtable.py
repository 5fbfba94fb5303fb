#!/usr/bin/env python3
"""
Scarica le tabelle Airtable nei file JSON letti dalla dashboard.

Uso:
  AIRTABLE_API_KEY=... AIRTABLE_BASE_ID=... python scripts/sync_airtable.py \
      [--output data/] [--table progetti --table task] [--fail-fast] [--page-size 100]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from requests import RequestException

# Rende importabile il pacchetto quando lanciato direttamente
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cruscotto.core.config import ConfigurationError, get_settings  # noqa: E402
from cruscotto.core.logs import configure_logging  # noqa: E402
from cruscotto.services.airtable_sync import (  # noqa: E402
    AirtableClient,
    SyncError,
    select_tables,
    sync_tables,
)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Sincronizza Airtable -> JSON")
    ap.add_argument("--output", help="Cartella di destinazione (default: DATA_DIR)")
    ap.add_argument(
        "--table",
        action="append",
        dest="tables",
        help="Tabella da sincronizzare (ripetibile; default: tutte)",
    )
    ap.add_argument("--fail-fast", action="store_true", help="Interrompe al primo errore")
    ap.add_argument("--page-size", type=int, help="Record per pagina (1-100)")
    ap.add_argument("--log-level", help="Livello di log (default: LOG_LEVEL)")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    settings = get_settings()

    try:
        tables = select_tables(args.tables)
        kwargs = {}
        if args.page_size:
            kwargs["page_size"] = min(max(args.page_size, 1), 100)
        client = AirtableClient.from_settings(settings, **kwargs)
    except (ConfigurationError, SyncError) as exc:
        sys.stderr.write(f"Errore: {exc}\n")
        return 1

    output = Path(args.output) if args.output else settings.data_dir
    fail_fast = args.fail_fast or settings.sync_fail_fast
    try:
        report = sync_tables(client, tables, output, fail_fast=fail_fast)
    except (SyncError, RequestException, OSError) as exc:  # --fail-fast
        sys.stderr.write(f"Errore: {exc}\n")
        return 1

    for result in report.results:
        if result.ok:
            print(f"[OK] {result.name}.json ({result.records} record)")
        else:
            print(f"[ERRORE] {result.airtable_table}: {result.error}")
    print(f"Totale: {report.total_records} record, {len(report.failed)} tabelle fallite")
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
