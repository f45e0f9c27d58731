"""
Excel Export Module

Writes tabular data to a single-sheet .xlsx document with French-formatted
cells and auto-sized columns.
"""

import io
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from config.settings import EXPORT_SHEET_NAME, EXPORT_COLUMN_PADDING, EXPORT_COLUMN_MAX_WIDTH
from src.processing.revenue import parse_timestamp
from .export_columns import ExportColumn

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EMPTY_EXPORT_MESSAGE = "Aucune donnée à exporter"

# fr-FR number grouping character (narrow no-break space)
THOUSANDS_SEPARATOR = "\u202f"
DECIMAL_SEPARATOR = ","
CURRENCY_SUFFIX = " €"
PERCENT_SUFFIX = " %"

_CENT = Decimal("0.01")


@dataclass
class ExportFile:
    """A produced spreadsheet, ready for download or saving."""
    filename: str
    bytes_data: bytes
    mime: str = XLSX_MIME

    def save(self, directory: Union[str, Path] = ".") -> Path:
        """Write the file into a directory and return its path."""
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / self.filename
        path.write_bytes(self.bytes_data)
        return path


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ''
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return True
    return False


def _to_number(value: Any) -> Optional[float]:
    """Numeric value of a cell, or None if it is not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num):
        return None
    return num


def _plain_number(num: float) -> str:
    """Shortest text for a number: 20.0 -> '20', 12.5 -> '12.5'."""
    if num.is_integer():
        return str(int(num))
    return str(num)


def format_currency(num: float) -> str:
    """Format an amount as '1 234,50 €' (two decimals, fr-FR separators)."""
    try:
        amount = Decimal(str(num)).quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return str(num)
    text = f"{amount:,.2f}"
    text = text.replace(",", "\x00").replace(".", DECIMAL_SEPARATOR).replace("\x00", THOUSANDS_SEPARATOR)
    return text + CURRENCY_SUFFIX


def _format_timestamp(value: Any, pattern: str) -> str:
    ts = parse_timestamp(value)
    if pd.isna(ts):
        return str(value)
    return ts.strftime(pattern)


def format_value(value: Any, format: Optional[str] = None) -> str:
    """
    Format a cell value for export.

    Args:
        value: Raw value from the row
        format: One of 'date', 'datetime', 'currency', 'percent' or None

    Returns:
        Display text; '' for empty values, the raw text when the value
        cannot be read in the requested format
    """
    if _is_blank(value):
        return ''

    if format == 'date':
        return _format_timestamp(value, '%d/%m/%Y')

    if format == 'datetime':
        return _format_timestamp(value, '%d/%m/%Y %H:%M')

    if format == 'currency':
        num = _to_number(value)
        if num is None:
            return str(value)
        return format_currency(num)

    if format == 'percent':
        num = _to_number(value)
        if num is None:
            return str(value)
        return _plain_number(num) + PERCENT_SUFFIX

    return str(value)


def _read_field(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


class SpreadsheetExporter:
    """
    Generic table exporter driven by its column definitions.

    Rows may be dataclass instances or dicts; only the keys named by the
    columns are read.
    """

    def __init__(
        self,
        sheet_name: str = EXPORT_SHEET_NAME,
        padding: int = EXPORT_COLUMN_PADDING,
        max_width: int = EXPORT_COLUMN_MAX_WIDTH
    ):
        self.sheet_name = sheet_name
        self.padding = padding
        self.max_width = max_width

    @staticmethod
    def format_rows(rows: Sequence[Any], columns: Sequence[ExportColumn]) -> List[List[str]]:
        """Formatted cell text for every row, in column order."""
        return [
            [format_value(_read_field(row, col.key), col.format) for col in columns]
            for row in rows
        ]

    def column_widths(self, columns: Sequence[ExportColumn], cells: List[List[str]]) -> List[int]:
        """
        Width per column: longest of header and cells, plus padding, capped.
        """
        widths = []
        for index, col in enumerate(columns):
            longest = max([len(col.header)] + [len(row[index]) for row in cells])
            widths.append(min(longest + self.padding, self.max_width))
        return widths

    def build_workbook(self, rows: Sequence[Any], columns: Sequence[ExportColumn]) -> Workbook:
        cells = self.format_rows(rows, columns)

        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = self.sheet_name

        worksheet.append([col.header for col in columns])
        for row in cells:
            # Control characters are rejected by openpyxl
            worksheet.append([ILLEGAL_CHARACTERS_RE.sub('', text) for text in row])

        for index, width in enumerate(self.column_widths(columns, cells), start=1):
            worksheet.column_dimensions[get_column_letter(index)].width = width

        return workbook

    @staticmethod
    def build_filename(filename_base: str, today: Optional[date] = None) -> str:
        """'{base}_{YYYY-MM-DD}.xlsx', dated in UTC by default."""
        today = today or datetime.now(timezone.utc).date()
        return f"{filename_base}_{today.isoformat()}.xlsx"

    def export(
        self,
        rows: Optional[Sequence[Any]],
        columns: Iterable[ExportColumn],
        filename_base: str,
        today: Optional[date] = None
    ) -> Optional[ExportFile]:
        """
        Export rows to an .xlsx document.

        Args:
            rows: Rows to export
            columns: Column definitions (ExportColumnSet or list of ExportColumn)
            filename_base: File name without date or extension
            today: Export date used in the file name

        Returns:
            ExportFile, or None when there is nothing to export
        """
        if not rows:
            logger.warning("%s (%s)", EMPTY_EXPORT_MESSAGE, filename_base)
            return None

        columns = list(columns)
        workbook = self.build_workbook(rows, columns)

        buffer = io.BytesIO()
        workbook.save(buffer)

        filename = self.build_filename(filename_base, today)
        logger.info("Exported %d row(s) to %s", len(rows), filename)
        return ExportFile(filename=filename, bytes_data=buffer.getvalue())


def export_to_excel(
    rows: Optional[Sequence[Any]],
    columns: Iterable[ExportColumn],
    filename_base: str
) -> Optional[ExportFile]:
    """
    Convenience function to export rows with the default exporter.

    Args:
        rows: Rows to export
        columns: Column definitions
        filename_base: File name without date or extension

    Returns:
        ExportFile, or None when rows is empty
    """
    return SpreadsheetExporter().export(rows, columns, filename_base)
