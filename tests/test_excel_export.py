"""
Tests for the Excel exporter: cell formatting policy, column sizing,
workbook layout and the empty-export guard.
"""

import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

import pandas as pd
from openpyxl import load_workbook

from src.integrations.excel_export import (
    SpreadsheetExporter,
    ExportFile,
    export_to_excel,
    format_value,
    EMPTY_EXPORT_MESSAGE,
)
from src.integrations.export_columns import ExportColumn, DEVIS_EXPORT_COLUMNS

NNBSP = "\u202f"


# =============================================================================
# format_value
# =============================================================================

def test_format_date():
    assert format_value("2025-03-15", "date") == "15/03/2025"
    assert format_value("2025-03-05 08:00:00+00", "date") == "05/03/2025"


def test_format_datetime():
    assert format_value("2025-03-15 14:30:00", "datetime") == "15/03/2025 14:30"
    # UTC value shown in Paris time (UTC+1 in March before DST)
    assert format_value("2025-03-15T13:30:00+00:00", "datetime") == "15/03/2025 14:30"
    assert format_value(pd.Timestamp("2025-12-01 09:05"), "datetime") == "01/12/2025 09:05"


def test_format_currency():
    assert format_value(1234.5, "currency") == f"1{NNBSP}234,50 €"
    assert format_value("1234567.891", "currency") == f"1{NNBSP}234{NNBSP}567,89 €"
    assert format_value(0, "currency") == "0,00 €"
    assert format_value(2.675, "currency") == "2,68 €"
    assert format_value(-1500, "currency") == f"-1{NNBSP}500,00 €"


def test_format_percent_is_not_scaled():
    assert format_value(20, "percent") == "20 %"
    assert format_value(12.5, "percent") == "12.5 %"
    assert format_value("75", "percent") == "75 %"


def test_empty_values_give_empty_string():
    for fmt in (None, "date", "datetime", "currency", "percent"):
        assert format_value(None, fmt) == ""
        assert format_value("", fmt) == ""
        assert format_value(float("nan"), fmt) == ""
    assert format_value(pd.NaT, "date") == ""


def test_unparseable_values_fall_back_to_raw_text():
    assert format_value("pas une date", "date") == "pas une date"
    assert format_value("n/a", "currency") == "n/a"
    assert format_value("beaucoup", "percent") == "beaucoup"


def test_no_format_stringifies():
    assert format_value(42) == "42"
    assert format_value("Villa") == "Villa"
    assert format_value(0) == "0"


# =============================================================================
# SpreadsheetExporter
# =============================================================================

COLUMNS = [
    ExportColumn("Nom", "nom"),
    ExportColumn("Montant", "montant", "currency"),
    ExportColumn("Date", "date", "date"),
]


@dataclass(frozen=True)
class _Row:
    nom: Any = None
    montant: Any = None
    date: Any = None


def test_empty_rows_produce_no_file_and_warn(caplog):
    exporter = SpreadsheetExporter()

    with caplog.at_level(logging.WARNING):
        assert exporter.export([], COLUMNS, "leads") is None
        assert exporter.export(None, COLUMNS, "leads") is None

    assert EMPTY_EXPORT_MESSAGE in caplog.text


def test_filename_contains_export_date():
    export_file = SpreadsheetExporter().export(
        [{"nom": "Dupont"}], COLUMNS, "devis", today=date(2025, 3, 15)
    )

    assert export_file.filename == "devis_2025-03-15.xlsx"
    assert export_file.mime.endswith("spreadsheetml.sheet")


def test_workbook_layout():
    rows = [
        {"nom": "Dupont", "montant": 1234.5, "date": "2025-03-15", "ignored": "x"},
        {"nom": None, "montant": None, "date": "invalide"},
    ]

    export_file = SpreadsheetExporter().export(rows, COLUMNS, "devis")
    sheet = load_workbook(io.BytesIO(export_file.bytes_data)).active

    assert sheet.title == "Export"
    values = [[cell.value for cell in row] for row in sheet.iter_rows()]
    assert values[0] == ["Nom", "Montant", "Date"]
    assert values[1] == ["Dupont", f"1{NNBSP}234,50 €", "15/03/2025"]
    # openpyxl reads empty strings back as None
    assert values[2][0] in ("", None)
    assert values[2][2] == "invalide"


def test_dataclass_and_dict_rows_give_same_cells():
    record = {"nom": "Leroy", "montant": 10, "date": "2025-01-02"}

    from_dict = SpreadsheetExporter.format_rows([record], COLUMNS)
    from_dataclass = SpreadsheetExporter.format_rows([_Row(**record)], COLUMNS)

    assert from_dict == from_dataclass == [["Leroy", "10,00 €", "02/01/2025"]]


def test_column_widths_are_padded_and_capped():
    exporter = SpreadsheetExporter()
    rows = [{"nom": "x" * 100, "montant": 5, "date": None}]

    cells = exporter.format_rows(rows, COLUMNS)
    widths = exporter.column_widths(COLUMNS, cells)

    # "Nom" capped, "Montant" header (7) longer than "5,00 €" (6), "Date" header only
    assert widths == [50, 9, 6]

    sheet = exporter.build_workbook(rows, COLUMNS).active
    assert sheet.column_dimensions["A"].width == 50
    assert sheet.column_dimensions["B"].width == 9


def test_control_characters_do_not_abort_export():
    export_file = SpreadsheetExporter().export([{"nom": "A\x07B"}], COLUMNS, "leads")
    sheet = load_workbook(io.BytesIO(export_file.bytes_data)).active

    assert sheet["A2"].value == "AB"


def test_export_with_predefined_column_set():
    rows = DEVIS_EXPORT_COLUMNS.rows([
        {"numero": "D-001", "montant_ht": 1000, "tva_pct": 20, "montant_ttc": 1200, "statut": "signé"},
    ])

    export_file = export_to_excel(rows, DEVIS_EXPORT_COLUMNS, "devis")
    sheet = load_workbook(io.BytesIO(export_file.bytes_data)).active

    header = [cell.value for cell in sheet[1]]
    assert header == DEVIS_EXPORT_COLUMNS.headers
    assert sheet["G2"].value == "20 %"
    assert sheet["H2"].value == f"1{NNBSP}200,00 €"


def test_export_file_save(tmp_path):
    export_file = ExportFile(filename="leads_2025-01-01.xlsx", bytes_data=b"data")

    path = export_file.save(tmp_path / "out")

    assert path.read_bytes() == b"data"
    assert path.name == "leads_2025-01-01.xlsx"
