"""
Statistics Charts

Plotly figures for the statistics page.
"""

from typing import List

import plotly.graph_objects as go

from src.processing.revenue import MonthBucket, buckets_to_dataframe
from src.processing.status_counter import StatusCounter
from src.processing.top_clients import ClientTotal, TopClientsAggregator
from src.integrations.excel_export import THOUSANDS_SEPARATOR, CURRENCY_SUFFIX

PRIMARY_COLOR = '#1a472a'

# Slices below this share get no percentage label
PIE_LABEL_MIN_SHARE = 0.05


def _euros(value: float) -> str:
    return f"{value:,.0f}".replace(",", THOUSANDS_SEPARATOR) + CURRENCY_SUFFIX


def plot_revenue_bar(buckets: List[MonthBucket], title: str = "Chiffre d'affaires (12 mois)") -> go.Figure:
    """Monthly revenue bars, oldest month first."""
    data = buckets_to_dataframe(buckets)
    if data.empty:
        return go.Figure()

    fig = go.Figure(go.Bar(
        x=data['month'],
        y=data['revenue'],
        marker_color=PRIMARY_COLOR,
        hovertext=[
            f"{start:%m/%Y} : {_euros(value)}"
            for start, value in zip(data['month_start'], data['revenue'])
        ],
        hoverinfo='text',
    ))

    fig.update_layout(
        title=dict(text=title, x=0.5),
        xaxis_title="",
        yaxis_title="CA (€)",
        yaxis=dict(ticksuffix="€"),
        showlegend=False,
        margin=dict(t=60, b=40, l=60, r=40),
        height=380
    )

    return fig


def plot_leads_status_pie(counts: dict, title: str = "Leads par statut") -> go.Figure:
    """Lead status pie; unknown statuses use the default colour."""
    data = StatusCounter.to_dataframe(counts)
    if data.empty:
        return go.Figure()

    total = data['value'].sum()
    text = [
        f"{value / total:.0%}" if total and value / total > PIE_LABEL_MIN_SHARE else ""
        for value in data['value']
    ]

    fig = go.Figure(go.Pie(
        labels=data['name'],
        values=data['value'],
        marker=dict(colors=data['color'].tolist()),
        text=text,
        textinfo='text',
        textfont=dict(color='#ffffff', size=12),
        sort=False,
    ))

    fig.update_layout(
        title=dict(text=title, x=0.5),
        showlegend=True,
        margin=dict(t=60, b=40, l=40, r=40),
        height=380
    )

    return fig


def plot_top_clients_bar(clients: List[ClientTotal], title: str = "Top clients") -> go.Figure:
    """Horizontal bars of the best clients, largest at the top."""
    data = TopClientsAggregator.to_dataframe(clients)
    if data.empty:
        return go.Figure()

    data = data.iloc[::-1]
    fig = go.Figure(go.Bar(
        x=data['total'],
        y=[f"{row['client']} ({int(row['count'])})" for _, row in data.iterrows()],
        orientation='h',
        marker_color=PRIMARY_COLOR,
        text=[_euros(v) for v in data['total']],
        textposition='outside'
    ))

    fig.update_layout(
        title=dict(text=title, x=0.5),
        xaxis_title="Montant (€)",
        yaxis_title="",
        showlegend=False,
        margin=dict(t=60, b=40, l=160, r=60),
        height=380
    )

    return fig
