#!/usr/bin/env python3
"""
Excel Export Runner

Exports the leads, devis and chantiers tables to dated .xlsx files.
"""

import sys
import logging
import argparse
from pathlib import Path
from datetime import datetime
from typing import List

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.api.backend import BackendClient, BackendQueryError, BackendConfigurationError
from src.integrations.excel_export import SpreadsheetExporter
from src.integrations.export_columns import EXPORT_CONFIGS


def _setup_logging() -> logging.Logger:
    logs_dir = PROJECT_ROOT / "logs"
    logs_dir.mkdir(exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(logs_dir / f"export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"),
        ],
    )
    return logging.getLogger(__name__)


def run_export(tables: List[str], output_dir: Path) -> bool:
    """
    Export each table to output_dir.

    Returns:
        True if every table was fetched (empty tables are skipped, not failures)
    """
    logger = logging.getLogger(__name__)
    backend = BackendClient()
    exporter = SpreadsheetExporter()

    for table in tables:
        column_set, filename_base = EXPORT_CONFIGS[table]
        logger.info(f"--- Exporting {table} ---")
        try:
            rows = column_set.rows(backend.select(table, ["*"]))
        except (BackendQueryError, BackendConfigurationError) as e:
            logger.error(f"Export of {table} failed: {e}")
            return False

        export_file = exporter.export(rows, column_set, filename_base)
        if export_file is None:
            continue
        path = export_file.save(output_dir)
        logger.info(f"Wrote {path}")

    return True


def main():
    parser = argparse.ArgumentParser(description="Export dashboard tables to Excel")
    parser.add_argument(
        "tables",
        nargs="*",
        help=f"Tables to export among {', '.join(EXPORT_CONFIGS)} (default: all)"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=PROJECT_ROOT / "exports",
        help="Directory for the .xlsx files (default: exports/)"
    )
    args = parser.parse_args()

    unknown = [t for t in args.tables if t not in EXPORT_CONFIGS]
    if unknown:
        parser.error(f"unknown table(s): {', '.join(unknown)}")

    logger = _setup_logging()
    tables = args.tables or list(EXPORT_CONFIGS)
    logger.info(f"Exporting tables: {', '.join(tables)}")

    success = run_export(tables, args.output_dir)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
