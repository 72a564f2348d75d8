from __future__ import annotations

from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def bar_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    *,
    title: str,
    x_title: str = "",
    y_title: str = "Score",
    height: int = 350,
    tooltip: Optional[List[Any]] = None,
) -> alt.Chart:
    # sort=None keeps the row order of df (ranking order, selection order)
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X(f"{x}:N", sort=None, title=x_title, axis=alt.Axis(labelAngle=-45, grid=False)),
            y=alt.Y(f"{y}:Q", title=y_title, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=tooltip or [alt.Tooltip(f"{x}:N"), alt.Tooltip(f"{y}:Q", format=",.3f")],
        )
        .properties(title=title, height=height)
    )


def pie_chart(df: pd.DataFrame, label: str, value: str, *, title: str, height: int = 350) -> alt.Chart:
    return (
        alt.Chart(df)
        .mark_arc()
        .encode(
            theta=alt.Theta(f"{value}:Q"),
            color=alt.Color(f"{label}:N", sort=None, title=None),
            tooltip=[alt.Tooltip(f"{label}:N"), alt.Tooltip(f"{value}:Q", format=",.3f")],
        )
        .properties(title=title, height=height)
    )
