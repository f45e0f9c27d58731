"""Spreadsheet export integration."""
from .excel_export import SpreadsheetExporter, ExportFile, export_to_excel
from .export_columns import ExportColumn, ExportColumnSet, EXPORT_CONFIGS

__all__ = ["SpreadsheetExporter", "ExportFile", "export_to_excel", "ExportColumn", "ExportColumnSet", "EXPORT_CONFIGS"]
