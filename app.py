import streamlit as st
from typing import Any, Dict, List, Optional

from cobenefits.config import (
    ALL_REGIONS,
    BENEFIT_CATEGORIES,
    BENEFIT_LABELS,
    DATA_SOURCE,
)
from cobenefits.data import DatasetIndex, index_from_text, load_dataset
from cobenefits.errors import LoadFailed, MalformedInput
from cobenefits.engine import search_areas
from cobenefits.filters import SelectionState, toggle_benefit, with_region, with_top_n
from cobenefits.metrics_charts import compute_charts
from cobenefits.metrics_overview import compute_overview
from cobenefits.transport import is_url, read_text

TOP_N_OPTIONS = [10, 30, 50, 100]
CHART_TYPES = {"bar": "Bar", "pie": "Pie", "heatmap": "Heatmap", "scatter": "Scatter"}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .mode-badge {display: inline-block;background: #eef2ff;border: 1px solid #c7d2fe;border-radius: 14px;
                     padding: 2px 10px;font-size: 0.85rem;color: #3730a3;margin-bottom: 8px;}
        .footer-meta {color: #6b7280;font-size: 0.85rem;border-top: 1px solid #e5e7eb;padding-top: 6px;margin-top: 16px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def _fmt(value: Optional[float], decimals: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:,.{decimals}f}"


def load_index() -> DatasetIndex:
    if is_url(DATA_SOURCE):
        return index_from_text(read_text(DATA_SOURCE))
    return load_dataset(DATA_SOURCE)


def render_stats(overview: Dict[str, Any]):
    stats = overview["stats"]
    tb = stats["top_benefit"]
    cols = st.columns(5)
    cols[0].metric("Rows Loaded", f"{stats['rows_loaded']:,}", help="Data records")
    cols[1].metric("Total Impact", _fmt(stats["total_impact"]), help="Dataset reference metric (sum column)")
    cols[2].metric("Selected Impact", _fmt(stats["selected_impact"]), help="From chosen co-benefits")
    cols[3].metric("Active Benefits", stats["active_benefits"], help="Selected categories")
    cols[4].metric("Top Benefit", tb["label"] if tb else "-", help="Highest contribution")


def render_region_info(overview: Dict[str, Any]):
    region = overview["region"]
    if overview["mode"] == "overview":
        st.markdown(
            "Showing **All Areas**  \n"
            "**Total Impact** uses dataset `sum` (ranking Top-N).  \n"
            "**Selected Impact** uses chosen co-benefit columns (interactive)."
        )
        return
    if not region["found"]:
        st.warning("Area not found in loaded data")
        return
    st.markdown(
        f"**{region['area']}**  \n"
        f"Total Impact (sum): **{_fmt(region['total_impact'], 3)}**  \n"
        f"Selected Impact: **{_fmt(region['selected_impact'], 3)}**"
    )


def takeaway_lines(overview: Dict[str, Any]) -> List[str]:
    t = overview["takeaways"]
    region = overview["region"]
    lines = []
    if t["top_benefit"]:
        lines.append(f"Top co-benefit contribution is “{t['top_benefit']['label']}” (based on current view).")
    else:
        lines.append("Select at least one co-benefit category to see insights.")
    if t["top_area"]:
        lines.append(
            f"Highest Total Impact area is “{t['top_area']['area']}” with Total Impact = {_fmt(t['top_area']['value'], 3)}."
        )
    else:
        lines.append("Top area could not be computed.")
    if overview["mode"] == "overview":
        lines.append(
            f"Overview charts aggregate all areas; comparison charts show Top-{t['top_n']} by dataset sum to remain fast and readable."
        )
    else:
        lines.append(
            f"For “{region['area']}”: Total Impact (sum) = {_fmt(region['total_impact'], 3)}, "
            f"Selected Impact = {_fmt(region['selected_impact'] or 0.0, 3)}."
        )
    return lines


# ---------- UI setup ----------
st.set_page_config(page_title="Co-benefits Dashboard", layout="wide")
inject_base_styles()
st.title("Co-benefits Dashboard")

try:
    index = load_index()
except (LoadFailed, MalformedInput) as exc:
    st.error(str(exc))
    st.stop()

if "selection" not in st.session_state:
    st.session_state["selection"] = SelectionState()
selection: SelectionState = st.session_state["selection"]

# ----- Sidebar: region, benefits, top-N -----
with st.sidebar:
    st.markdown("### Region")
    query = st.text_input("Search area", "")
    area_options = [ALL_REGIONS] + search_areas(index, query)
    if selection.current_region not in area_options:
        area_options.insert(1, selection.current_region)
    region = st.selectbox(
        "Area",
        options=area_options,
        index=area_options.index(selection.current_region),
        format_func=lambda a: "All Areas" if a == ALL_REGIONS else a,
    )
    selection = with_region(selection, region)

    st.markdown("---")
    st.markdown("### Co-benefits")
    for b in BENEFIT_CATEGORIES:
        checked = st.checkbox(BENEFIT_LABELS[b], value=b in selection.selected_benefits, key=f"benefit_{b}")
        selection = toggle_benefit(selection, b, checked)

    st.markdown("---")
    top_n_value = selection.top_n if selection.top_n in TOP_N_OPTIONS else TOP_N_OPTIONS[1]
    top_n = st.selectbox("Top N areas", options=TOP_N_OPTIONS, index=TOP_N_OPTIONS.index(top_n_value))
    selection = with_top_n(selection, top_n)
    chart_type = st.selectbox("Chart type", options=list(CHART_TYPES), format_func=CHART_TYPES.get)

st.session_state["selection"] = selection

overview = compute_overview(selection, index)
st.markdown(
    f"<span class='mode-badge'>{'Overview Mode' if overview['mode'] == 'overview' else 'Detail Mode'}</span>",
    unsafe_allow_html=True,
)
render_region_info(overview)
render_stats(overview)

st.markdown("#### Key takeaways")
st.markdown("\n".join(f"- {line}" for line in takeaway_lines(overview)))

payload = compute_charts(selection, index, chart_type=chart_type)
if payload["error"]:
    st.error(payload["error"])
else:
    charts = payload["charts"]
    if "main" in charts:
        st.vega_lite_chart(charts["main"], use_container_width=True)
    left, right = st.columns(2)
    with left:
        st.vega_lite_chart(charts["comparison"], use_container_width=True)
    with right:
        st.vega_lite_chart(charts["selected_ranking"], use_container_width=True)
    st.vega_lite_chart(charts["detail"], use_container_width=True)

meta = overview["meta"]
st.markdown(
    f"<div class='footer-meta'>Loaded {meta['rows']:,} rows | Total Impact (all) = {meta['sum_total']:.2f} | "
    f"Range: [{meta['sum_min']:.2f} … {meta['sum_max']:.2f}]</div>",
    unsafe_allow_html=True,
)
