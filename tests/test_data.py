"""Tests for the dataset index builder and loaders."""

import logging
import os

import pytest

from cobenefits.config import BENEFIT_CATEGORIES
from cobenefits.data import build_index, index_from_text, load_dataset, records_frame
from cobenefits.errors import LoadFailed
from cobenefits.parser import parse_text


class TestScenario:
    def test_area_value(self, scenario_index):
        assert scenario_index.area_lookup["A"].benefit_values["air_quality"] == 2.5

    def test_benefit_total(self, scenario_index):
        assert scenario_index.benefit_totals["air_quality"] == 3.5

    def test_ranking(self, scenario_index):
        assert scenario_index.ranked_areas == ["B", "A"]

    def test_meta(self, scenario_index):
        meta = scenario_index.meta
        assert meta.rows == 2
        assert meta.sum_total == 30.0
        assert meta.sum_min == 10.0
        assert meta.sum_max == 20.0

    def test_missing_columns_are_zero(self, scenario_index):
        record = scenario_index.area_lookup["B"]
        assert set(record.benefit_values) == set(BENEFIT_CATEGORIES)
        assert record.benefit_values["noise"] == 0.0
        assert scenario_index.benefit_totals["road_safety"] == 0.0


class TestIndexProperties:
    def test_rows_equal_non_blank_lines(self):
        text = "small_area;sum\nA;1\n\nB;2\n  \nC;3\n"
        assert index_from_text(text).meta.rows == 3

    def test_totals_equal_record_sums(self, divergent_index):
        from_totals = sum(divergent_index.benefit_totals[b] for b in BENEFIT_CATEGORIES)
        from_records = sum(r.benefit_values[b] for r in divergent_index.records for b in BENEFIT_CATEGORIES)
        assert from_totals == from_records
        assert divergent_index.benefit_totals["air_quality"] == 8.0
        assert divergent_index.benefit_totals["noise"] == 6.5

    def test_ranking_non_increasing_and_stable(self, divergent_index):
        ranked = divergent_index.ranked_records
        values = [r.reference_total for r in ranked]
        assert values == sorted(values, reverse=True)
        # B and D tie on 20; B comes first in the file
        assert divergent_index.ranked_areas == ["A", "B", "D", "C"]

    def test_ranking_is_permutation(self, divergent_index):
        assert sorted(divergent_index.ranked_areas) == sorted(r.area_id for r in divergent_index.records)
        assert len(divergent_index.ranked_areas) == len(divergent_index.area_lookup)

    def test_all_benefits_total(self, divergent_index):
        assert divergent_index.area_lookup["B"].all_benefits_total == 9.0

    def test_records_are_read_only(self, scenario_index):
        record = scenario_index.area_lookup["A"]
        with pytest.raises(TypeError):
            record.benefit_values["air_quality"] = 99.0  # type: ignore[index]
        with pytest.raises(Exception):
            record.reference_total = 1.0  # type: ignore[misc]


class TestEdgeCases:
    def test_empty_dataset_meta_defaults(self):
        index = index_from_text("small_area;sum\n")
        assert index.meta.rows == 0
        assert index.meta.sum_min == 0.0
        assert index.meta.sum_max == 0.0
        assert index.meta.sum_total == 0.0
        assert index.ranked_areas == []

    def test_synthesized_area_id(self):
        index = index_from_text("small_area;sum\n;5\nX;3\n")
        assert index.ranked_areas == ["Area_0", "X"]

    def test_synthesized_when_column_missing(self):
        index = index_from_text("air_quality;sum\n1;5\n2;6\n")
        assert set(index.area_lookup) == {"Area_0", "Area_1"}

    def test_negative_reference_totals(self):
        index = index_from_text("small_area;sum\nA;-5\nB;-1\n")
        assert index.meta.sum_max == -1.0
        assert index.meta.sum_min == -5.0
        assert index.ranked_areas == ["B", "A"]

    def test_duplicate_area_ids(self, caplog):
        text = "small_area;air_quality;sum\nA;1;5\nB;2;7\nA;3;9\n"
        with caplog.at_level(logging.WARNING, logger="cobenefits.data"):
            index = build_index(parse_text(text))
        # lookup collapses to the later row
        assert index.area_lookup["A"].benefit_values["air_quality"] == 3.0
        assert index.area_lookup["A"].reference_total == 9.0
        assert len(index.area_lookup) == 2
        # both rows are counted and ranked
        assert index.meta.rows == 3
        assert index.meta.areas == 2
        assert index.meta.duplicate_areas == 1
        assert index.ranked_areas == ["A", "B", "A"]
        assert [r.reference_total for r in index.ranked_records] == [9.0, 7.0, 5.0]
        # totals include both rows
        assert index.benefit_totals["air_quality"] == 6.0
        assert "Duplicate small_area" in caplog.text


class TestRecordsFrame:
    def test_columns_and_rows(self, divergent_index):
        df = records_frame(divergent_index)
        assert list(df.columns) == ["small_area", *BENEFIT_CATEGORIES, "sum"]
        assert df["small_area"].tolist() == ["A", "B", "C", "D"]
        assert df["noise"].tolist() == [2.0, 4.0, 0.5, 0.0]


class TestLoadDataset:
    def test_load_from_file(self, tmp_path, divergent_text):
        path = tmp_path / "Level_1.csv"
        path.write_text(divergent_text, encoding="utf-8")
        index = load_dataset(path)
        assert index.meta.rows == 4

    def test_cached_until_file_changes(self, tmp_path, divergent_text, scenario_text):
        path = tmp_path / "data.csv"
        path.write_text(divergent_text, encoding="utf-8")
        first = load_dataset(path)
        assert load_dataset(path) is first

        path.write_text(scenario_text, encoding="utf-8")
        st = path.stat()
        os.utime(path, (st.st_atime, st.st_mtime + 10))
        second = load_dataset(path)
        assert second is not first
        assert second.meta.rows == 2

    def test_bom_is_ignored(self, tmp_path, scenario_text):
        path = tmp_path / "bom.csv"
        path.write_text(scenario_text, encoding="utf-8-sig")
        assert load_dataset(path).ranked_areas == ["B", "A"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadFailed):
            load_dataset(tmp_path / "nope.csv")
