from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Tuple

from cobenefits.config import (
    ALL_REGIONS,
    BENEFIT_CATEGORIES,
    DEFAULT_TOP_N,
    TOP_N_MAX,
    TOP_N_MIN,
)


@dataclass(frozen=True)
class SelectionState:
    """What the user is currently looking at.

    ``selected_benefits`` keeps insertion order: it decides the top-benefit
    tie-break and the order of chart series.
    """

    current_region: str = ALL_REGIONS
    selected_benefits: Tuple[str, ...] = field(default_factory=lambda: tuple(BENEFIT_CATEGORIES))
    top_n: int = DEFAULT_TOP_N

    @property
    def is_overview(self) -> bool:
        return self.current_region == ALL_REGIONS


def _as_benefit_tuple(values: Optional[Iterable[object]]) -> Tuple[str, ...]:
    if values is None:
        return ()
    known = set(BENEFIT_CATEGORIES)
    out: list[str] = []
    for v in values:
        key = str(v)
        if key in known and key not in out:
            out.append(key)
    return tuple(out)


def _region_or_all(region: object) -> str:
    # area ids are stored untrimmed, so only blank/"all" checks see the stripped value
    if region is None:
        return ALL_REGIONS
    region = str(region)
    if not region.strip() or region.strip() == ALL_REGIONS:
        return ALL_REGIONS
    return region


def coerce_top_n(raw: object, default: int = DEFAULT_TOP_N) -> int:
    try:
        top_n = int(raw)  # type: ignore[arg-type]
    except Exception:
        top_n = default
    if top_n == 0:
        top_n = default
    return max(TOP_N_MIN, min(TOP_N_MAX, top_n))


def normalize_selection(raw: dict) -> SelectionState:
    """Build a SelectionState from a loosely typed UI/API dict.

    Missing ``selected_benefits`` means "all categories"; an explicit empty
    list is kept empty so queries can report it.
    """
    region = _region_or_all(raw.get("current_region"))

    benefits_raw = raw.get("selected_benefits")
    if benefits_raw is None:
        benefits = tuple(BENEFIT_CATEGORIES)
    else:
        benefits = _as_benefit_tuple(benefits_raw)

    top_n = coerce_top_n(raw.get("top_n", DEFAULT_TOP_N))
    return SelectionState(current_region=region, selected_benefits=benefits, top_n=top_n)


def toggle_benefit(state: SelectionState, key: str, checked: bool) -> SelectionState:
    if key not in BENEFIT_CATEGORIES:
        raise ValueError(f"Unknown benefit category: {key!r}")
    benefits = list(state.selected_benefits)
    if checked and key not in benefits:
        benefits.append(key)
    elif not checked and key in benefits:
        benefits.remove(key)
    return replace(state, selected_benefits=tuple(benefits))


def with_region(state: SelectionState, region: Optional[str]) -> SelectionState:
    return replace(state, current_region=_region_or_all(region))


def with_top_n(state: SelectionState, raw: object) -> SelectionState:
    return replace(state, top_n=coerce_top_n(raw))


def selection_to_dict(state: SelectionState) -> dict:
    return {
        "current_region": state.current_region,
        "selected_benefits": list(state.selected_benefits),
        "top_n": state.top_n,
    }
