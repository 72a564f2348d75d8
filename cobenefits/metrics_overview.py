from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from cobenefits.config import EMPTY_SELECTION_MESSAGE
from cobenefits.data import DatasetIndex
from cobenefits.engine import (
    TopBenefit,
    lookup_area,
    selected_impact,
    top_benefit,
    top_n_by_reference,
)
from cobenefits.errors import EmptySelection
from cobenefits.filters import SelectionState, selection_to_dict


def _top_benefit_dict(tb: Optional[TopBenefit]) -> Optional[Dict[str, Any]]:
    if tb is None:
        return None
    return {"key": tb.key, "label": tb.label, "value": tb.value}


def compute_overview(selection: SelectionState, index: DatasetIndex) -> Dict[str, Any]:
    """Stats cards, region info and takeaways for the current selection.

    Raw numbers only; formatting is left to the front-end. An empty benefit
    selection is reported in ``error`` and leaves the selected impact as None.
    """
    record = None if selection.is_overview else lookup_area(index, selection.current_region)
    found = selection.is_overview or record is not None

    error: Optional[str] = None
    try:
        sel_impact: Optional[float] = selected_impact(index, selection)
    except EmptySelection:
        sel_impact = None
        error = EMPTY_SELECTION_MESSAGE

    if selection.is_overview:
        total_impact = index.meta.sum_total
    else:
        total_impact = record.reference_total if record is not None else 0.0

    tb = _top_benefit_dict(top_benefit(index, selection))
    top_ref = top_n_by_reference(index, 1)
    top_area = {"area": top_ref[0].area, "value": top_ref[0].value} if top_ref else None

    return {
        "selection": selection_to_dict(selection),
        "mode": "overview" if selection.is_overview else "detail",
        "region": {
            "area": None if selection.is_overview else selection.current_region,
            "found": found,
            "total_impact": total_impact,
            "selected_impact": sel_impact,
        },
        "stats": {
            "rows_loaded": index.meta.rows,
            "total_impact": total_impact,
            "selected_impact": sel_impact,
            "active_benefits": len(selection.selected_benefits),
            "top_benefit": tb,
        },
        "takeaways": {
            "top_benefit": tb,
            "top_area": top_area,
            "top_n": selection.top_n,
        },
        "meta": asdict(index.meta),
        "error": error,
    }
