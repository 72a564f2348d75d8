from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from cobenefits.config import ALL_REGIONS, BENEFIT_CATEGORIES, DEFAULT_TOP_N


class SelectionModel(BaseModel):
    current_region: str = ALL_REGIONS
    selected_benefits: List[str] = Field(default_factory=lambda: list(BENEFIT_CATEGORIES))
    top_n: int = DEFAULT_TOP_N


class SelectionPatchModel(BaseModel):
    """Partial update for the live session; omitted fields are left unchanged."""

    current_region: Optional[str] = None
    selected_benefits: Optional[List[str]] = None
    top_n: Optional[int] = None
    chart_type: Optional[Literal["bar", "pie", "heatmap", "scatter"]] = None


class ImpactRequest(BaseModel):
    selection: SelectionModel = Field(default_factory=SelectionModel)
    area: Optional[str] = None


class AreasResponse(BaseModel):
    areas: List[str]
