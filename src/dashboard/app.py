"""
Streamlit Dashboard: Statistiques

Revenue, lead status and top clients charts, table exports and the
monthly report generator (administrators only).
"""

import streamlit as st
import sys
from pathlib import Path
from datetime import datetime

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from config.settings import settings, MONTH_MAP
from src.api.backend import BackendQueryError, BackendConfigurationError
from src.api.queries import StatsQueries
from src.api.rapport import (
    ReportStatus, session_report_client,
    default_report_period, available_report_years
)
from src.processing.revenue import aggregate_revenue
from src.processing.status_counter import count_statuses
from src.processing.top_clients import TopClientsAggregator
from src.integrations.excel_export import SpreadsheetExporter, EMPTY_EXPORT_MESSAGE
from src.integrations.export_columns import EXPORT_CONFIGS
from src.dashboard.charts import plot_revenue_bar, plot_leads_status_pie, plot_top_clients_bar

# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="Statistiques",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        color: #1a472a;
        font-size: 2.2rem;
        font-weight: 700;
        margin-bottom: 0.2rem;
    }
    .section-divider {
        border-top: 2px solid #1a472a;
        margin: 1.5rem 0;
    }
</style>
""", unsafe_allow_html=True)

EXPORT_LABELS = {
    "leads": "Leads",
    "devis": "Devis",
    "chantiers": "Chantiers",
}


# =============================================================================
# SHARED RESOURCES
# =============================================================================

@st.cache_resource
def get_queries() -> StatsQueries:
    """Shared query layer (its cache lives across reruns)."""
    return StatsQueries()


# =============================================================================
# SECTIONS
# =============================================================================

def render_charts(queries: StatsQueries) -> None:
    col1, col2 = st.columns(2)

    with col1:
        with st.spinner("Chargement..."):
            buckets = aggregate_revenue(queries.accepted_devis_amounts())
        st.plotly_chart(plot_revenue_bar(buckets), use_container_width=True)

    with col2:
        with st.spinner("Chargement..."):
            counts = count_statuses(queries.lead_statuses())
        st.plotly_chart(plot_leads_status_pie(counts), use_container_width=True)

    with st.spinner("Chargement..."):
        clients = TopClientsAggregator().aggregate(queries.accepted_devis_by_client())
    st.plotly_chart(plot_top_clients_bar(clients), use_container_width=True)


def render_exports(queries: StatsQueries) -> None:
    st.markdown("### 📥 Exports Excel")
    exporter = SpreadsheetExporter()
    columns = st.columns(len(EXPORT_CONFIGS))

    for col, (table, (column_set, filename_base)) in zip(columns, EXPORT_CONFIGS.items()):
        with col:
            rows = column_set.rows(queries.table_rows(table))
            export_file = exporter.export(rows, column_set, filename_base)
            if export_file is None:
                st.warning(f"{EXPORT_LABELS[table]} : {EMPTY_EXPORT_MESSAGE}")
                continue
            st.download_button(
                label=f"📥 Exporter {EXPORT_LABELS[table]}",
                data=export_file.bytes_data,
                file_name=export_file.filename,
                mime=export_file.mime,
                key=f"xlsx_export_{table}"
            )


def render_report_generator() -> None:
    st.markdown("### 📄 Générer un rapport mensuel")
    st.caption("Sélectionnez le mois et l'année pour générer et recevoir le rapport par email")

    # Per-session client; status and message belong to this browser session
    client = session_report_client(st.session_state)
    default_month, default_year = default_report_period()
    years = available_report_years()

    col1, col2 = st.columns(2)
    with col1:
        month = st.selectbox(
            "Mois",
            list(MONTH_MAP.keys()),
            index=default_month - 1,
            format_func=lambda m: MONTH_MAP[m]
        )
    with col2:
        year = st.selectbox("Année", years, index=years.index(default_year))

    clicked = st.button(
        "✉️ Générer et envoyer le rapport",
        disabled=client.is_loading
    )

    if clicked:
        with st.spinner("Génération en cours..."):
            result = client.generate(month, year)
        if result.status == ReportStatus.SUCCESS:
            st.toast(f"Rapport envoyé ! {result.description}", icon="✅")
        elif result.status == ReportStatus.ERROR:
            st.toast(f"Erreur : {result.message}", icon="⚠️")

    if client.status == ReportStatus.SUCCESS:
        st.success(client.message)
    elif client.status == ReportStatus.ERROR:
        st.error(client.message)


def main():
    """Main dashboard application."""
    st.markdown('<h1 class="main-header">Statistiques</h1>', unsafe_allow_html=True)
    st.markdown("*Analysez vos performances*")
    st.markdown("---")

    queries = get_queries()

    with st.sidebar:
        st.markdown("### Données")
        if st.button("🔄 Actualiser les données"):
            queries.refresh()
            st.rerun()

        st.markdown("---")
        st.markdown("##### Dernière mise à jour")
        st.markdown(f"*{datetime.now().strftime('%d/%m/%Y %H:%M')}*")

    try:
        render_charts(queries)
        st.markdown('<div class="section-divider"></div>', unsafe_allow_html=True)
        render_exports(queries)
    except (BackendQueryError, BackendConfigurationError) as e:
        st.error(f"Impossible de charger les données : {e}")

    if settings.is_admin:
        st.markdown('<div class="section-divider"></div>', unsafe_allow_html=True)
        render_report_generator()


if __name__ == "__main__":
    main()
