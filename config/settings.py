"""
Statistiques Dashboard Configuration Settings

Loads environment variables and defines application constants.
"""

import os
import sys
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Dict


def _running_in_streamlit() -> bool:
    """
    Best-effort detection for Streamlit runtime.

    The Streamlit dashboard reads `st.secrets`; scripts read `.env`.
    """
    return "streamlit" in sys.modules


def _load_dotenv_if_available() -> None:
    """
    Load variables from .env for non-Streamlit scripts (CLI runs).

    Skipped when running under Streamlit.
    """
    if _running_in_streamlit():
        return
    from dotenv import load_dotenv

    load_dotenv()


def get_secret(key: str, default: str = "") -> str:
    """
    Return secret value from Streamlit secrets when available; otherwise from env.

    - Streamlit dashboard: uses `st.secrets` (from TOML / Cloud secrets)
    - Scripts and tests: uses os.environ, optionally loaded by dotenv
    """
    try:
        import streamlit as st  # type: ignore

        # st.secrets raises when no secrets.toml exists
        if hasattr(st, "secrets") and key in st.secrets:
            val = st.secrets.get(key)
            return "" if val is None else str(val)
    except Exception:
        pass
    return os.getenv(key, default)


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "oui")


# Load environment variables from .env file for non-Streamlit usage
_load_dotenv_if_available()

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Supabase data backend
    supabase_url: str = field(default_factory=lambda: get_secret("SUPABASE_URL", ""))
    supabase_key: str = field(default_factory=lambda: get_secret("SUPABASE_KEY", ""))

    # Report webhook service
    api_url: str = field(default_factory=lambda: get_secret("API_URL", ""))
    webhook_secret: str = field(default_factory=lambda: get_secret("WEBHOOK_SECRET", ""))

    # Role gate for the report section
    is_admin: bool = field(default_factory=lambda: _as_bool(get_secret("DASHBOARD_ADMIN", "false")))

    # API Request Settings
    api_timeout: int = 30
    query_cache_ttl: int = 300


# Status Configuration
# Quote statuses counted as revenue. The backend stores these labels
# inconsistently (casing, accents), every variant seen in production is listed.
ACCEPTED_REVENUE_STATUSES: List[str] = [
    'payes',
    'payés',
    'paye',
    'payé',
    'Payé',
    'signe',
    'signé',
    'Signé',
    'accepte',
    'accepté',
    'Accepté',
]

# Lead lifecycle vocabulary -> chart colour
LEAD_STATUS_COLORS: Dict[str, str] = {
    'nouveau': '#3b82f6',
    'contacte': '#8b5cf6',
    'qualifie': '#10b981',
    'devis_envoye': '#f59e0b',
    'accepte': '#22c55e',
    'refuse': '#ef4444',
    'perdu': '#6b7280',
}
LEAD_STATUS_DEFAULT_COLOR = '#8884d8'

# Label used for empty values (status, client name)
UNDEFINED_LABEL = "Non défini"

# French Month Mapping
MONTH_MAP: Dict[int, str] = {
    1: "Janvier",
    2: "Février",
    3: "Mars",
    4: "Avril",
    5: "Mai",
    6: "Juin",
    7: "Juillet",
    8: "Août",
    9: "Septembre",
    10: "Octobre",
    11: "Novembre",
    12: "Décembre"
}

# Abbreviated month labels for chart axes
MONTH_ABBR_MAP: Dict[int, str] = {
    1: "janv.",
    2: "févr.",
    3: "mars",
    4: "avr.",
    5: "mai",
    6: "juin",
    7: "juil.",
    8: "août",
    9: "sept.",
    10: "oct.",
    11: "nov.",
    12: "déc."
}

# Timezone used for bucketing and displaying dates
LOCAL_TIMEZONE = "Europe/Paris"

# Revenue chart window
REVENUE_WINDOW_MONTHS = 12

# Top clients chart
TOP_CLIENTS_LIMIT = 5

# Excel export
EXPORT_SHEET_NAME = "Export"
EXPORT_COLUMN_PADDING = 2
EXPORT_COLUMN_MAX_WIDTH = 50

# Report webhook
RAPPORT_ENDPOINT_PATH = "/api/v1/rapport/generate"


# Singleton instance
settings = Settings()
