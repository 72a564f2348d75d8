"""
Application-wide configuration constants.

Values that differ between deployments are read from the environment once at
import time; everything else is a fixed constant of the dataset format.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List


DATA_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_FILE = "Level_1.csv"

DELIMITER = ";"
AREA_FIELD = "small_area"
REFERENCE_FIELD = "sum"
ALL_REGIONS = "all"

BENEFIT_CATEGORIES: List[str] = [
    "air_quality",
    "congestion",
    "dampness",
    "diet_change",
    "excess_cold",
    "excess_heat",
    "hassle_costs",
    "noise",
    "physical_activity",
    "road_repairs",
    "road_safety",
]

BENEFIT_LABELS: Dict[str, str] = {
    "air_quality": "Air Quality",
    "congestion": "Congestion",
    "dampness": "Dampness",
    "diet_change": "Diet Change",
    "excess_cold": "Excess Cold",
    "excess_heat": "Excess Heat",
    "hassle_costs": "Hassle Costs",
    "noise": "Noise",
    "physical_activity": "Physical Activity",
    "road_repairs": "Road Repairs",
    "road_safety": "Road Safety",
}

TOP_N_MIN = 1
TOP_N_MAX = 200

# Area search / region dropdown caps
SEARCH_DEFAULT_LIMIT = 300
SEARCH_MATCH_LIMIT = 200
SEARCH_FALLBACK_LIMIT = 50

CHART_SAMPLE_LIMIT = 50
DETAIL_TOP_N = 10

EMPTY_SELECTION_MESSAGE = "Please select at least one co-benefit category."


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


DATA_SOURCE = os.getenv("COBENEFITS_DATA_SOURCE") or str(DATA_DIR / DEFAULT_DATA_FILE)
DEBOUNCE_MS = max(0, _env_int("COBENEFITS_DEBOUNCE_MS", 150))
DEFAULT_TOP_N = max(TOP_N_MIN, min(TOP_N_MAX, _env_int("COBENEFITS_TOP_N", 30)))
HTTP_TIMEOUT = _env_float("COBENEFITS_HTTP_TIMEOUT", 30.0)
