"""
Plotly chart factory functions with consistent styling for the dashboard.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st


DEFAULT_TEMPLATE = "plotly_white"
DEFAULT_COLOR_SEQUENCE = [
    "#1f77b4",  # listed prices
    "#2ca02c",  # sold prices
    "#ff7f0e",  # 7-day average
    "#9467bd",  # 30-day average
    "#d62728",
    "#8c564b",
]


def _configure_layout(
    fig: go.Figure,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
    legend_title: Optional[str] = None,
    hovermode: str = "x unified",
) -> go.Figure:
    fig.update_layout(
        template=DEFAULT_TEMPLATE,
        colorway=DEFAULT_COLOR_SEQUENCE,
        title=title,
        legend_title=legend_title,
        hovermode=hovermode,
        margin=dict(l=40, r=20, t=60, b=40),
    )
    if yaxis_title:
        fig.update_yaxes(title=yaxis_title)
    if yaxis_tickformat:
        fig.update_yaxes(tickformat=yaxis_tickformat)
    fig.update_xaxes(showgrid=False)
    fig.update_yaxes(showgrid=True, zeroline=True)
    return fig


def render_plotly(fig: go.Figure) -> None:
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def line_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    color: Optional[str] = None,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
    markers: bool = True,
    hover_data: Optional[List[str]] = None,
) -> go.Figure:
    fig = px.line(
        df,
        x=x,
        y=y,
        color=color,
        markers=markers,
        hover_data=hover_data,
    )
    fig = _configure_layout(fig, title, yaxis_title, yaxis_tickformat)
    return fig


def multi_line_chart(
    df: pd.DataFrame,
    x: str,
    series: Dict[str, str],
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
    dashed: Sequence[str] = (),
) -> go.Figure:
    """One trace per column in `series` (column -> legend label).

    Gaps stay gaps: days with no value for a column are not joined.
    """
    fig = go.Figure()
    for column, label in series.items():
        if column not in df:
            continue
        fig.add_trace(
            go.Scatter(
                x=df[x],
                y=df[column],
                name=label,
                mode="lines+markers",
                connectgaps=False,
                line=dict(dash="dash") if column in dashed else None,
            )
        )
    fig = _configure_layout(fig, title, yaxis_title, yaxis_tickformat, legend_title="Series")
    return fig


def scatter_plot(
    df: pd.DataFrame,
    x: str,
    y: str,
    color: Optional[str] = None,
    size: Optional[str] = None,
    hover_data: Optional[List[str]] = None,
    log_x: bool = False,
    log_y: bool = False,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
) -> go.Figure:
    fig = px.scatter(
        df,
        x=x,
        y=y,
        color=color,
        size=size,
        hover_data=hover_data,
        log_x=log_x,
        log_y=log_y,
    )
    fig = _configure_layout(fig, title, yaxis_title, yaxis_tickformat, hovermode="closest")
    return fig
