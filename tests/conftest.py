from __future__ import annotations

import json
import sys
from datetime import date
from pathlib import Path

import pytest

# Rende importabile il pacchetto durante i test locali
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cruscotto.core import config as core_config  # noqa: E402

TODAY = date(2025, 6, 1)

PROJECTS = [
    {
        "id": "rec1",
        "Id Progetto": "PRJ-1",
        "Nome Progetto": "Nuova sede",
        "Cliente": "Acme",
        "PM responsabile": "Giulia",
        "Stato": "In corso",
        "Budget Iniziale": "100.000,00 €",
        "Costi Sostenuti": "40.000,00 €",
        "Previsione Finale Costi": "110.000,00 €",
        "% Avanzamento": "40%",
    },
    {
        "id": "rec2",
        "Id Progetto": "PRJ-2",
        "Nome Progetto": "Portale",
        "Cliente": "Beta",
        "PM responsabile": "Marco",
        "Stato": "Completato",
        "Budget Iniziale": "50.000 €",
        "Costi Sostenuti": "48.000 €",
        "Previsione Finale Costi": "48.000 €",
        "% Avanzamento": "100%",
    },
    {"id": "rec3", "Id Progetto": "PRJ-3"},
]

MILESTONES = [
    {"Milestone": "Progetto esecutivo", "Progetto": "PRJ-1", "Start Date": "01/02/2025", "Deadline": "31/03/2025", "Stato": "Completata"},
    {"Milestone": "Strutture", "Progetto": "PRJ-1", "Start Date": "01/04/2025", "Deadline": "15/05/2025", "Stato": "In corso"},
    {"Milestone": "Consegna", "Progetto": "PRJ-1", "Start Date": "01/09/2025", "Deadline": "31/12/2025", "Stato": "Pianificata"},
    {"Milestone": "Kick-off", "Progetto": "PRJ-2", "Start Date": "01/01/2025", "Deadline": "02/01/2025", "Stato": "Completata"},
]

TASKS = [
    {"ID": "T1", "Titolo Task": "Rilievo", "Progetto": "PRJ-1", "Owner": "Luca", "Start Date": "01/02/2025", "Deadline": "15/02/2025", "Stato": "Completato", "Criticità": "Media", "% Completamento": "100%"},
    {"ID": "T2", "Titolo Task": "Fondazioni", "Progetto": "PRJ-1", "Owner": "Sara", "Start Date": "01/04/2025", "Deadline": "20/05/2025", "Stato": "In corso", "Criticità": "Alta", "% Completamento": "70%"},
    {"ID": "T3", "Titolo Task": "Impianti", "Progetto": "PRJ-1", "Start Date": "01/07/2025", "Deadline": "30/09/2025", "% Completamento": "0%"},
    {"ID": "T4", "Titolo Task": "Senza date", "Progetto": "PRJ-1", "Owner": "Luca"},
    {"ID": "T5", "Titolo Task": "Altro progetto", "Progetto": "PRJ-2", "Start Date": "01/01/2025", "Deadline": "02/01/2025"},
]

INCIDENTS = [
    {"Titolo Imprevisto": "Ritardo acciaio", "Progetto": "PRJ-1", "Descrizione Problema": "Slittamento fornitura", "Tipo": "Fornitura", "Criticità": "Alta", "Data Imprevisti": "12/05/2025", "Stato": "In lavorazione"},
    {"Titolo Imprevisto": "Falda", "Progetto": "PRJ-1", "Tipo": "Tecnico", "Criticità": "Media", "Data Imprevisti": "03/04/2025", "Stato": "Risolto", "Rischio Previsionale": "Allagamento scavi"},
    {"Titolo Imprevisto": "Sciopero trasporti", "Progetto": "PRJ-1", "Tipo": "Fornitura", "Data Imprevisti": "20/05/2025"},
]

VARIANTS = [
    {"Variante": " Parcheggio ", "Progetto": "PRJ-1", "Data Variante": "20/05/2025", "Impatto Tempi (in giorni)": "+10", "Impatto Costi": "15.000,00 €", "Stato": "Approvata"},
    {"Variante": "Pavimentazione", "Progetto": "PRJ-1", "Data Variante": "02/05/2025", "Impatto Tempi (in giorni)": "-2", "Impatto Costi": "-3.500,00 €", "Stato": "Rifiutata"},
    {"Variante": "Colore facciata", "Progetto": "PRJ-1", "Data Variante": "10/05/2025", "Impatto Tempi (in giorni)": "0", "Impatto Costi": "0 €"},
]

DECISIONS = [
    {"Decisione": "Adozione BIM\\nin cantiere", "Progetto": "PRJ-1", "Responsabile": "Giulia", "Data Decisione": "10/02/2025", "Motivazione": "Approvata dal comitato.\\nRiduce errori."},
    {"Decisione": "Secondo turno", "Progetto": "PRJ-1", "Responsabile": "Marco", "Data Decisione": "15/05/2025", "Motivazione": "Sospesa in attesa del cronoprogramma."},
    {"Decisione": "Cambio fornitore", "Progetto": "PRJ-1", "Data Decisione": "01/03/2025", "Motivazione": "Proposta rifiutata per costi."},
    {"Decisione": "Riunioni settimanali", "Progetto": "PRJ-1", "Responsabile": "Giulia", "Data Decisione": "05/03/2025"},
]

SAMPLE_TABLES = {
    "progetti": PROJECTS,
    "milestone": MILESTONES,
    "task": TASKS,
    "imprevisti": INCIDENTS,
    "varianti": VARIANTS,
    "decisioni": DECISIONS,
}


def write_tables(data_dir: Path, tables: dict) -> None:
    data_dir.mkdir(parents=True, exist_ok=True)
    for name, rows in tables.items():
        (data_dir / f"{name}.json").write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    """Cartella dati temporanea con il dataset di esempio e settings ricaricati."""
    folder = tmp_path / "data"
    write_tables(folder, SAMPLE_TABLES)
    monkeypatch.setenv("DATA_DIR", str(folder))
    monkeypatch.setenv("DASHBOARD_TODAY", TODAY.isoformat())
    core_config.get_settings.cache_clear()
    yield folder
    core_config.get_settings.cache_clear()
