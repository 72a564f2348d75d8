"""
Aggregation engine
==================

Stateless queries over ``(DatasetIndex, SelectionState)``. Nothing here keeps
state between calls, so every query returns the same answer for the same
index and selection.

Two rankings exist side by side and must not be confused:

- ``top_n_by_reference``: the dataset's own ``sum`` column, fixed at load time
- ``top_n_by_selected_impact``: the sum of the currently selected benefits

Queries whose value depends on the selected benefits raise ``EmptySelection``
when nothing is selected; per-field coercion problems were already absorbed
by the parser.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional

from cobenefits.config import (
    ALL_REGIONS,
    BENEFIT_LABELS,
    SEARCH_DEFAULT_LIMIT,
    SEARCH_FALLBACK_LIMIT,
    SEARCH_MATCH_LIMIT,
)
from cobenefits.data import AreaRecord, DatasetIndex
from cobenefits.errors import EmptySelection
from cobenefits.filters import SelectionState


class RankedArea(NamedTuple):
    area: str
    value: float


class TopBenefit(NamedTuple):
    key: str
    label: str
    value: float


def _require_selection(selection: SelectionState) -> None:
    if not selection.selected_benefits:
        raise EmptySelection("No co-benefit category is selected.")


def _selected_sum(record: AreaRecord, selection: SelectionState) -> float:
    t = 0.0
    for b in selection.selected_benefits:
        t += record.benefit_values.get(b, 0.0)
    return t


def lookup_area(index: DatasetIndex, area_id: str) -> Optional[AreaRecord]:
    """Return the record for ``area_id``, or None when the area is unknown."""
    return index.area_lookup.get(area_id)


def selected_impact_for_area(index: DatasetIndex, selection: SelectionState, area_id: str) -> float:
    _require_selection(selection)
    record = lookup_area(index, area_id)
    if record is None:
        return 0.0
    return _selected_sum(record, selection)


def selected_impact_dataset_wide(index: DatasetIndex, selection: SelectionState) -> float:
    _require_selection(selection)
    t = 0.0
    for b in selection.selected_benefits:
        t += index.benefit_totals.get(b, 0.0)
    return t


def selected_impact(index: DatasetIndex, selection: SelectionState) -> float:
    """Selected impact for the current region (dataset-wide for "all")."""
    if selection.current_region == ALL_REGIONS:
        return selected_impact_dataset_wide(index, selection)
    return selected_impact_for_area(index, selection, selection.current_region)


def top_benefit(index: DatasetIndex, selection: SelectionState, scope: Optional[str] = None) -> Optional[TopBenefit]:
    """Selected category with the largest value in ``scope``.

    ``scope`` defaults to the selection's region. Ties go to the category
    selected first. Returns None for an empty selection or an unknown area.
    """
    if not selection.selected_benefits:
        return None
    scope = selection.current_region if scope is None else scope

    if scope == ALL_REGIONS:
        values = index.benefit_totals
    else:
        record = lookup_area(index, scope)
        if record is None:
            return None
        values = record.benefit_values

    best: Optional[str] = None
    best_score = float("-inf")
    for b in selection.selected_benefits:
        v = values.get(b, 0.0)
        if v > best_score:
            best_score = v
            best = b
    if best is None:
        return None
    return TopBenefit(key=best, label=BENEFIT_LABELS[best], value=best_score)


def top_n_by_reference(index: DatasetIndex, n: int) -> List[RankedArea]:
    """First ``n`` areas of the load-time ranking by the dataset ``sum``."""
    n = max(0, n)
    return [RankedArea(r.area_id, r.reference_total) for r in index.ranked_records[:n]]


def top_n_by_selected_impact(index: DatasetIndex, selection: SelectionState, n: int) -> List[RankedArea]:
    """First ``n`` rows ordered by the sum of the selected benefits."""
    _require_selection(selection)
    n = max(0, n)
    scored = [RankedArea(r.area_id, _selected_sum(r, selection)) for r in index.records]
    scored.sort(key=lambda t: t.value, reverse=True)
    return scored[:n]


def search_areas(
    index: DatasetIndex,
    query: str = "",
    *,
    default_limit: int = SEARCH_DEFAULT_LIMIT,
    match_limit: int = SEARCH_MATCH_LIMIT,
    fallback_limit: int = SEARCH_FALLBACK_LIMIT,
) -> List[str]:
    """Area ids for the region picker, in ranking order.

    Case-insensitive substring match. With no query the head of the ranking is
    returned; with no match the head of the ranking is returned as well, so the
    list is never empty while areas exist.
    """
    ranked = index.ranked_areas
    q = (query or "").strip().lower()
    if not q:
        return ranked[:default_limit]

    matches: List[str] = []
    for area in ranked:
        if q in area.lower():
            matches.append(area)
            if len(matches) >= match_limit:
                break
    return matches if matches else ranked[:fallback_limit]
