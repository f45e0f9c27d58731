#!/usr/bin/env python3
"""
Monthly Report Trigger

Asks the report service to generate and email the monthly report.
Defaults to the previous month.
"""

import sys
import logging
import argparse
from pathlib import Path
from datetime import datetime

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.api.rapport import ReportRequestClient, ReportConfig, default_report_period


def _setup_logging() -> logging.Logger:
    logs_dir = PROJECT_ROOT / "logs"
    logs_dir.mkdir(exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(logs_dir / f"rapport_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"),
        ],
    )
    return logging.getLogger(__name__)


def main():
    default_month, default_year = default_report_period()

    parser = argparse.ArgumentParser(description="Generate the monthly report")
    parser.add_argument("--month", type=int, default=default_month, choices=range(1, 13),
                        help=f"Month 1-12 (default: {default_month})")
    parser.add_argument("--year", type=int, default=default_year,
                        help=f"Year (default: {default_year})")
    args = parser.parse_args()

    logger = _setup_logging()
    client = ReportRequestClient(ReportConfig.from_settings())
    result = client.generate(args.month, args.year)

    if result.ok:
        logger.info(result.message)
        sys.exit(0)
    logger.error(result.message)
    sys.exit(1)


if __name__ == "__main__":
    main()
