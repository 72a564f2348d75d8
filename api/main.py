from __future__ import annotations

from dataclasses import asdict
import logging
import math
from typing import Literal

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import AreasResponse, ImpactRequest, SelectionModel, SelectionPatchModel
from cobenefits.config import BENEFIT_CATEGORIES, BENEFIT_LABELS
from cobenefits.data import DatasetIndex, records_frame
from cobenefits.engine import (
    lookup_area,
    search_areas,
    selected_impact_dataset_wide,
    selected_impact_for_area,
    top_n_by_reference,
    top_n_by_selected_impact,
)
from cobenefits.errors import DatasetLoading, EmptySelection, LoadFailed, MalformedInput
from cobenefits.filters import SelectionState, normalize_selection, selection_to_dict
from cobenefits.metrics_charts import compute_charts
from cobenefits.metrics_overview import compute_overview
from cobenefits.session import DashboardSession


app = FastAPI(title="Co-benefits Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5500", "http://127.0.0.1:5500"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

session = DashboardSession()

_STATUS_BY_ERROR = {
    EmptySelection: 422,
    DatasetLoading: 503,
    LoadFailed: 502,
    MalformedInput: 500,
}


def _selection_from_model(model: SelectionModel) -> SelectionState:
    return normalize_selection(model.model_dump())


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        ),
    )


def _error(exc: Exception, route: str) -> JSONResponse:
    status = _STATUS_BY_ERROR.get(type(exc), 500)
    if status == 500:
        logger.exception("%s failed", route)
    else:
        logger.warning("%s failed: %s", route, exc)
    return JSONResponse(status_code=status, content={"error": str(exc), "type": type(exc).__name__})


async def _current_index() -> DatasetIndex:
    if session.index is None and not session.loading:
        await session.reload()
    return session.require_index()


@app.get("/meta")
async def meta():
    try:
        index = await _current_index()
        return _json(
            {
                "meta": asdict(index.meta),
                "benefits": [{"key": b, "label": BENEFIT_LABELS[b]} for b in BENEFIT_CATEGORIES],
            }
        )
    except Exception as exc:
        return _error(exc, "meta")


@app.get("/areas", response_model=AreasResponse)
async def areas(q: str = Query(default="")):
    try:
        index = await _current_index()
        return _json({"areas": search_areas(index, q)})
    except Exception as exc:
        return _error(exc, "areas")


@app.post("/overview")
async def overview(selection: SelectionModel):
    try:
        index = await _current_index()
        return _json(compute_overview(_selection_from_model(selection), index))
    except Exception as exc:
        return _error(exc, "overview")


@app.post("/charts")
async def charts(
    selection: SelectionModel,
    chart_type: Literal["bar", "pie", "heatmap", "scatter"] = Query(default="bar"),
):
    try:
        index = await _current_index()
        return _json(compute_charts(_selection_from_model(selection), index, chart_type=chart_type))
    except Exception as exc:
        return _error(exc, "charts")


@app.post("/top/reference")
async def top_reference(selection: SelectionModel):
    try:
        index = await _current_index()
        f = _selection_from_model(selection)
        return _json({"top_n": f.top_n, "areas": [r._asdict() for r in top_n_by_reference(index, f.top_n)]})
    except Exception as exc:
        return _error(exc, "top_reference")


@app.post("/top/selected")
async def top_selected(selection: SelectionModel):
    try:
        index = await _current_index()
        f = _selection_from_model(selection)
        ranked = top_n_by_selected_impact(index, f, f.top_n)
        return _json({"top_n": f.top_n, "areas": [r._asdict() for r in ranked]})
    except Exception as exc:
        return _error(exc, "top_selected")


@app.post("/impact")
async def impact(request: ImpactRequest):
    try:
        index = await _current_index()
        f = _selection_from_model(request.selection)
        if request.area:
            return _json(
                {
                    "area": request.area,
                    "found": lookup_area(index, request.area) is not None,
                    "selected_impact": selected_impact_for_area(index, f, request.area),
                }
            )
        return _json({"area": None, "found": True, "selected_impact": selected_impact_dataset_wide(index, f)})
    except Exception as exc:
        return _error(exc, "impact")


@app.post("/export")
async def export_records():
    try:
        index = await _current_index()
    except Exception as exc:
        return _error(exc, "export")
    csv_bytes = records_frame(index).to_csv(index=False, sep=";").encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=cobenefits.csv"})


# ---------------- Live session (single user) ----------------
@app.get("/session/view")
async def session_view():
    try:
        await _current_index()
        if session.view is None:
            session.recompute()
        return _json({"pending": session.pending, "view": session.view})
    except Exception as exc:
        return _error(exc, "session_view")


@app.patch("/session/selection")
async def session_selection(patch: SelectionPatchModel):
    try:
        current = selection_to_dict(session.selection)
        changes = patch.model_dump(exclude_none=True)
        chart_type = changes.pop("chart_type", None)
        current.update(changes)
        accepted = session.update_selection(normalize_selection(current), chart_type=chart_type)
        return _json(
            {"accepted": accepted, "pending": session.pending, "selection": selection_to_dict(session.selection)},
            status_code=202,
        )
    except Exception as exc:
        return _error(exc, "session_selection")


@app.post("/session/flush")
async def session_flush():
    try:
        await _current_index()
        return _json({"pending": False, "view": session.flush()})
    except Exception as exc:
        return _error(exc, "session_flush")


@app.post("/session/reload")
async def session_reload():
    try:
        index = await session.reload()
        return _json({"meta": asdict(index.meta)})
    except Exception as exc:
        return _error(exc, "session_reload")
