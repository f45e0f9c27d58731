#!/usr/bin/env python3
"""
Statistiques Dashboard Launcher

Starts the Streamlit statistics page (src/dashboard/app.py). Table exports
and the monthly report can also be run without the page:

    python scripts/export_tables.py [leads devis chantiers]
    python scripts/generate_rapport.py --month 3 --year 2025

Usage:
    python scripts/run_dashboard.py [--port 8501] [--host localhost] [--admin]
"""

import argparse
import os
import sys
import subprocess
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
DASHBOARD_PATH = PROJECT_ROOT / "src" / "dashboard" / "app.py"

sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import settings


def missing_settings(config=settings, admin: bool = False) -> list:
    """Names of the secrets the page needs but cannot find."""
    missing = []
    if not config.supabase_url:
        missing.append("SUPABASE_URL")
    if not config.supabase_key:
        missing.append("SUPABASE_KEY")
    if (admin or config.is_admin) and not (config.api_url and config.webhook_secret):
        missing.append("API_URL / WEBHOOK_SECRET")
    return missing


def main():
    parser = argparse.ArgumentParser(description="Launch the statistics dashboard")
    parser.add_argument("--port", type=int, default=8501, help="Port (default: 8501)")
    parser.add_argument("--host", type=str, default="localhost", help="Host to bind to (default: localhost)")
    parser.add_argument(
        "--admin",
        action="store_true",
        help="Show the monthly report section (sets DASHBOARD_ADMIN for this run)"
    )
    args = parser.parse_args()

    env = os.environ.copy()
    if args.admin:
        env["DASHBOARD_ADMIN"] = "true"

    for name in missing_settings(admin=args.admin):
        print(f"Warning: {name} is not configured")

    print(f"Statistiques: http://{args.host}:{args.port}")

    cmd = [
        sys.executable, "-m", "streamlit", "run",
        str(DASHBOARD_PATH),
        "--server.port", str(args.port),
        "--server.address", args.host,
        "--browser.gatherUsageStats", "false"
    ]

    try:
        subprocess.run(cmd, check=True, cwd=PROJECT_ROOT, env=env)
    except KeyboardInterrupt:
        print("\nDashboard stopped.")
    except subprocess.CalledProcessError as e:
        print(f"Error launching dashboard: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
