"""
Dataset index (raw rows -> AreaRecord lookup tables)
====================================================

Builds, once per load, every derived structure the dashboard queries:

- ``area_lookup``: small_area -> AreaRecord (later duplicates replace earlier ones)
- ``benefit_totals``: benefit -> dataset-wide sum
- ``ranked_records``: all records ordered by the dataset ``sum`` column, descending
- ``meta``: row count and min/max/total of ``sum``

The index is never edited after ``build_index`` returns; a reload builds a new
one and the caller swaps it in with a single assignment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

import pandas as pd

from cobenefits.config import AREA_FIELD, BENEFIT_CATEGORIES, REFERENCE_FIELD
from cobenefits.errors import LoadFailed
from cobenefits.parser import RawRow, parse_text, to_number
from cobenefits.transport import read_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AreaRecord:
    """One dataset row: a small area with its benefit scores and reference total."""

    area_id: str
    benefit_values: Mapping[str, float]
    reference_total: float
    # position in the source file, used as the ranking tie-break
    row_index: int = 0

    @property
    def all_benefits_total(self) -> float:
        return sum(self.benefit_values[b] for b in BENEFIT_CATEGORIES)


@dataclass(frozen=True)
class DatasetMeta:
    rows: int = 0
    areas: int = 0
    duplicate_areas: int = 0
    sum_min: float = 0.0
    sum_max: float = 0.0
    sum_total: float = 0.0


@dataclass(frozen=True)
class DatasetIndex:
    """Read-only container of everything derived from one dataset load."""

    records: Tuple[AreaRecord, ...]
    area_lookup: Mapping[str, AreaRecord]
    benefit_totals: Mapping[str, float]
    ranked_records: Tuple[AreaRecord, ...]
    meta: DatasetMeta

    @property
    def ranked_areas(self) -> List[str]:
        return [r.area_id for r in self.ranked_records]


def area_id_for(row: RawRow, i: int) -> str:
    return row.get(AREA_FIELD) or f"Area_{i}"


def build_index(rows: Sequence[RawRow]) -> DatasetIndex:
    """Build a DatasetIndex from parsed rows.

    Every row becomes a record, even when its ``small_area`` repeats: the
    lookup keeps the last one, while ``records`` and the ranking keep both.
    """
    benefit_totals: Dict[str, float] = {b: 0.0 for b in BENEFIT_CATEGORIES}
    area_lookup: Dict[str, AreaRecord] = {}
    records: List[AreaRecord] = []
    duplicates: List[str] = []

    sum_min = float("inf")
    sum_max = float("-inf")
    sum_total = 0.0

    for i, row in enumerate(rows):
        area_id = area_id_for(row, i)
        values: Dict[str, float] = {}
        for b in BENEFIT_CATEGORIES:
            v = to_number(row.get(b))
            values[b] = v
            benefit_totals[b] += v
        s = to_number(row.get(REFERENCE_FIELD))

        record = AreaRecord(
            area_id=area_id,
            benefit_values=MappingProxyType(values),
            reference_total=s,
            row_index=i,
        )
        if area_id in area_lookup:
            duplicates.append(area_id)
        area_lookup[area_id] = record
        records.append(record)

        sum_min = min(sum_min, s)
        sum_max = max(sum_max, s)
        sum_total += s

    # sorted() is stable with reverse=True, so equal sums keep file order
    ranked = sorted(records, key=lambda r: r.reference_total, reverse=True)

    if duplicates:
        logger.warning(
            "Duplicate small_area ids: %d rows replaced earlier entries in the lookup (e.g. %s)",
            len(duplicates),
            ", ".join(duplicates[:5]),
        )

    meta = DatasetMeta(
        rows=len(records),
        areas=len(area_lookup),
        duplicate_areas=len(duplicates),
        sum_min=sum_min if records else 0.0,
        sum_max=sum_max if records else 0.0,
        sum_total=sum_total,
    )
    logger.info("Built dataset index: %d rows, %d distinct areas", meta.rows, meta.areas)
    return DatasetIndex(
        records=tuple(records),
        area_lookup=MappingProxyType(area_lookup),
        benefit_totals=MappingProxyType(benefit_totals),
        ranked_records=tuple(ranked),
        meta=meta,
    )


def index_from_text(text: str) -> DatasetIndex:
    return build_index(parse_text(text))


def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path), path.stat().st_mtime)


@lru_cache(maxsize=4)
def _load_dataset_cached(files_sig: Tuple[str, float]) -> DatasetIndex:
    return index_from_text(read_text(Path(files_sig[0])))


def load_dataset(path: str | Path) -> DatasetIndex:
    """Read, parse and index a local dataset file.

    Results are memoized per (path, mtime), so an edited file is re-read.
    """
    p = Path(path)
    try:
        sig = file_signature(p)
    except OSError as exc:
        raise LoadFailed(f"Failed to load CSV: {exc}") from exc
    return _load_dataset_cached(sig)


def records_frame(index: DatasetIndex) -> pd.DataFrame:
    """One row per record, in file order, with the source column names."""
    columns = [AREA_FIELD, *BENEFIT_CATEGORIES, REFERENCE_FIELD]
    data = [
        {
            AREA_FIELD: r.area_id,
            **{b: r.benefit_values[b] for b in BENEFIT_CATEGORIES},
            REFERENCE_FIELD: r.reference_total,
        }
        for r in index.records
    ]
    return pd.DataFrame(data, columns=columns)
