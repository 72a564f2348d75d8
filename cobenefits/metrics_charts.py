from __future__ import annotations

from typing import Any, Dict, List, Literal

import altair as alt
import pandas as pd

from cobenefits.charts import bar_chart, pie_chart, to_vega_spec
from cobenefits.config import (
    BENEFIT_LABELS,
    CHART_SAMPLE_LIMIT,
    DETAIL_TOP_N,
    EMPTY_SELECTION_MESSAGE,
)
from cobenefits.data import DatasetIndex
from cobenefits.engine import (
    RankedArea,
    lookup_area,
    selected_impact_for_area,
    top_n_by_reference,
    top_n_by_selected_impact,
)
from cobenefits.errors import EmptySelection
from cobenefits.filters import SelectionState, selection_to_dict

ChartType = Literal["bar", "pie", "heatmap", "scatter"]


def _bar_labels(areas: List[str]) -> List[str]:
    """Unique x labels; a repeated small_area gets " (2)", " (3)", ... so its bars are not stacked."""
    seen: Dict[str, int] = {}
    labels = []
    for area in areas:
        seen[area] = seen.get(area, 0) + 1
        labels.append(area if seen[area] == 1 else f"{area} ({seen[area]})")
    return labels


def _ranked_frame(ranked: List[RankedArea]) -> pd.DataFrame:
    return pd.DataFrame(
        {"area": _bar_labels([r.area for r in ranked]), "value": [r.value for r in ranked]},
        columns=["area", "value"],
    )


def _benefit_frame(selection: SelectionState, values) -> pd.DataFrame:
    rows = [
        {"benefit": b, "label": BENEFIT_LABELS[b], "value": float(values.get(b, 0.0))}
        for b in selection.selected_benefits
    ]
    return pd.DataFrame(rows, columns=["benefit", "label", "value"])


def _overview_main(selection: SelectionState, index: DatasetIndex, chart_type: ChartType) -> alt.Chart:
    totals = _benefit_frame(selection, index.benefit_totals)
    title = "Overview of Co-benefits (Selected Impact)"

    if chart_type == "pie":
        # negative totals (costs) cannot be drawn as slices
        pie_df = totals.assign(value=totals["value"].clip(lower=0.0))
        return pie_chart(pie_df, "label", "value", title=title)

    sample_n = min(selection.top_n, CHART_SAMPLE_LIMIT)

    if chart_type == "heatmap":
        top = index.ranked_records[:sample_n]
        labels = _bar_labels([r.area_id for r in top])
        cells = []
        for b in selection.selected_benefits:
            for label, record in zip(labels, top):
                cells.append({"area": label, "benefit": BENEFIT_LABELS[b], "value": record.benefit_values[b]})
        heat_df = pd.DataFrame(cells, columns=["area", "benefit", "value"])
        return (
            alt.Chart(heat_df)
            .mark_rect()
            .encode(
                x=alt.X("area:N", sort=labels, title="Area (small_area)"),
                y=alt.Y("benefit:N", sort=None, title=None),
                color=alt.Color("value:Q", title="Score"),
                tooltip=["benefit", "area", alt.Tooltip("value:Q", title="Score", format=",.3f")],
            )
            .properties(title="Heatmap (Top-N Areas x Benefits)", height=350)
        )

    if chart_type == "scatter" and len(selection.selected_benefits) >= 2:
        bx, by = selection.selected_benefits[0], selection.selected_benefits[1]
        top = index.ranked_records[:sample_n]
        points = [
            {"area": label, "x": record.benefit_values[bx], "y": record.benefit_values[by]}
            for label, record in zip(_bar_labels([r.area_id for r in top]), top)
        ]
        scatter_df = pd.DataFrame(points, columns=["area", "x", "y"])
        return (
            alt.Chart(scatter_df)
            .mark_circle(size=60)
            .encode(
                x=alt.X("x:Q", title=BENEFIT_LABELS[bx]),
                y=alt.Y("y:Q", title=BENEFIT_LABELS[by]),
                tooltip=["area", alt.Tooltip("x:Q", format=",.3f"), alt.Tooltip("y:Q", format=",.3f")],
            )
            .properties(title=f"Scatter: {BENEFIT_LABELS[bx]} vs {BENEFIT_LABELS[by]} (Top-{sample_n} by sum)", height=350)
        )

    return bar_chart(totals, "label", "value", title=title, x_title="Benefit")


def compute_charts(
    selection: SelectionState,
    index: DatasetIndex,
    *,
    chart_type: ChartType = "bar",
) -> Dict[str, Any]:
    """Vega-Lite specs for the main, comparison, ranking and detail panels."""
    payload: Dict[str, Any] = {
        "selection": selection_to_dict(selection),
        "chart_type": chart_type,
        "error": None,
        "charts": {},
    }
    if not selection.selected_benefits:
        payload["error"] = EMPTY_SELECTION_MESSAGE
        return payload

    try:
        charts: Dict[str, Any] = {}
        region = selection.current_region

        if selection.is_overview:
            charts["main"] = to_vega_spec(_overview_main(selection, index, chart_type))
        else:
            record = lookup_area(index, region)
            if record is not None:
                breakdown = _benefit_frame(selection, record.benefit_values)
                title = f"Breakdown for {region} (Selected Impact)"
                if chart_type == "pie":
                    pie_df = breakdown.assign(value=breakdown["value"].clip(lower=0.0))
                    charts["main"] = to_vega_spec(pie_chart(pie_df, "label", "value", title=title))
                else:
                    charts["main"] = to_vega_spec(bar_chart(breakdown, "label", "value", title=title, x_title="Benefit"))

        top = _ranked_frame(top_n_by_reference(index, selection.top_n))
        charts["comparison"] = to_vega_spec(
            bar_chart(
                top,
                "area",
                "value",
                title=f"Top-{selection.top_n} Areas by Total Impact",
                x_title="Area (small_area)",
                y_title="Total Impact",
            )
        )

        by_selected = _ranked_frame(top_n_by_selected_impact(index, selection, selection.top_n))
        charts["selected_ranking"] = to_vega_spec(
            bar_chart(
                by_selected,
                "area",
                "value",
                title=f"Top-{selection.top_n} Areas by Selected Impact",
                x_title="Area (small_area)",
                y_title="Selected Impact",
            )
        )

        if selection.is_overview:
            top_detail = _ranked_frame(top_n_by_reference(index, DETAIL_TOP_N))
            charts["detail"] = to_vega_spec(
                bar_chart(
                    top_detail,
                    "area",
                    "value",
                    title=f"Top {DETAIL_TOP_N} Areas (Total Impact)",
                    x_title="Area (small_area)",
                    y_title="Total Impact",
                    height=400,
                )
            )
        else:
            record = lookup_area(index, region)
            summary = pd.DataFrame(
                [
                    {"metric": "Total Impact (sum)", "value": record.reference_total if record is not None else 0.0},
                    {"metric": "Selected Impact", "value": selected_impact_for_area(index, selection, region)},
                ],
                columns=["metric", "value"],
            )
            charts["detail"] = to_vega_spec(
                bar_chart(summary, "metric", "value", title=f"Impact Summary for {region}", x_title="Metric", height=400)
            )
    except EmptySelection:
        payload["error"] = EMPTY_SELECTION_MESSAGE
        return payload

    payload["charts"] = charts
    return payload
