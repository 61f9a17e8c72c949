"""Tests for the whitespace-delimited data loader."""

from __future__ import annotations

from pathlib import Path

import polars as pl
import pytest

from modelhost.bindings import BindingTable, sync
from modelhost.errors import DataParseError, LoadError
from modelhost.loader import DataSet, apply_dataset, forward_fill, parse_data_file
from modelhost.models.model2 import Model2


# ---------------------------------------------------------------------------
# A) forward_fill
# ---------------------------------------------------------------------------


class TestForwardFill:
    def test_short_row_repeats_last_value(self) -> None:
        assert forward_fill([10.0, 20.0], 4) == [10.0, 20.0, 20.0, 20.0]

    def test_full_row_unchanged(self) -> None:
        assert forward_fill([1.0, 2.0, 3.0], 3) == [1.0, 2.0, 3.0]

    def test_single_value_fills_horizon(self) -> None:
        assert forward_fill([7.5], 5) == [7.5] * 5

    def test_extra_values_dropped(self) -> None:
        assert forward_fill([1.0, 2.0, 3.0, 4.0], 2) == [1.0, 2.0]

    def test_nothing_supplied_is_zero(self) -> None:
        assert forward_fill([], 3) == [0.0, 0.0, 0.0]

    def test_zero_horizon(self) -> None:
        assert forward_fill([1.0], 0) == []


# ---------------------------------------------------------------------------
# B) parse_data_file
# ---------------------------------------------------------------------------


class TestParseDataFile:
    def test_axis_and_forward_fill(self, write_data) -> None:
        path = write_data("LATA 2020 2021 2022 2023\nx 10 20\n")
        ds = parse_data_file(path)
        assert ds is not None
        assert ds.axis == [2020, 2021, 2022, 2023]
        assert ds.horizon == 4
        assert ds.series["x"] == [10.0, 20.0, 20.0, 20.0]

    def test_runs_of_whitespace_and_tabs(self, write_data) -> None:
        path = write_data("LATA\t2020   2021\n  y \t 1.5\t\t2.5  \n")
        ds = parse_data_file(path)
        assert ds.axis == [2020, 2021]
        assert ds.series["y"] == [1.5, 2.5]

    def test_blank_and_name_only_lines_skipped(self, write_data) -> None:
        path = write_data("LATA 1 2\n\nlonely\nz 3\n")
        ds = parse_data_file(path)
        assert list(ds.series) == ["z"]
        assert ds.series["z"] == [3.0, 3.0]

    def test_empty_file_returns_none(self, write_data) -> None:
        assert parse_data_file(write_data("")) is None

    def test_blank_first_line_returns_none(self, write_data) -> None:
        assert parse_data_file(write_data("\nLATA 2020\nx 1\n")) is None

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            parse_data_file(tmp_path / "nope.txt")

    def test_malformed_value(self, write_data) -> None:
        path = write_data("LATA 2020 2021\nproduction 1 abc\n")
        with pytest.raises(DataParseError) as exc_info:
            parse_data_file(path)
        assert exc_info.value.line_no == 2
        assert exc_info.value.token == "abc"
        assert isinstance(exc_info.value, LoadError)

    def test_malformed_axis_label(self, write_data) -> None:
        path = write_data("LATA 2020 twenty\n")
        with pytest.raises(DataParseError) as exc_info:
            parse_data_file(path)
        assert exc_info.value.line_no == 1

    def test_later_duplicate_row_wins(self, write_data) -> None:
        ds = parse_data_file(write_data("LATA 1 2\nx 1\nx 5 6\n"))
        assert ds.series["x"] == [5.0, 6.0]

    def test_header_with_label_only(self, write_data) -> None:
        ds = parse_data_file(write_data("LATA\nx 5\n"))
        assert ds.horizon == 0
        assert ds.series["x"] == []


class TestDataSetFrame:
    def test_to_frame(self) -> None:
        ds = DataSet([2020, 2021], {"a": [1.0, 2.0], "b": [3.0, 3.0]})
        df = ds.to_frame()
        assert df.columns == ["name", "2020", "2021"]
        assert df["name"].to_list() == ["a", "b"]
        assert df["2021"].to_list() == [2.0, 3.0]
        assert df.schema["2020"] == pl.Float64

    def test_to_frame_empty(self) -> None:
        df = DataSet([1, 2], {}).to_frame()
        assert df.height == 0
        assert df.columns == ["name", "1", "2"]

    def test_duplicate_period_labels(self) -> None:
        df = DataSet([2020, 2020], {"a": [1.0, 2.0]}).to_frame()
        assert df.columns == ["name", "2020", "2020_1"]


# ---------------------------------------------------------------------------
# C) apply_dataset
# ---------------------------------------------------------------------------


class TestApplyDataset:
    def _load(self, ds: DataSet) -> tuple[Model2, BindingTable]:
        model = Model2()
        table = BindingTable()
        sync(model, table)
        errors = apply_dataset(model, table, ds)
        assert errors == []
        return model, table

    def test_horizon_overrides_file(self) -> None:
        ds = DataSet([2020, 2021, 2022], {"LL": [99.0, 99.0, 99.0]})
        model, table = self._load(ds)
        assert model.LL == 3
        assert table["LL"] == 3

    def test_missing_series_are_zero(self) -> None:
        ds = DataSet([2020, 2021], {"production": [5.0, 5.0]})
        model, table = self._load(ds)
        assert model.savings == [0.0, 0.0]
        assert table["netWealth"] == [0.0, 0.0]
        assert table["production"] == [5.0, 5.0]

    def test_axis_written_to_table(self) -> None:
        _, table = self._load(DataSet([2020, 2021], {}))
        assert table["LATA"] == [2020, 2021]

    def test_unknown_rows_not_on_model(self) -> None:
        ds = DataSet([1], {"unrelated": [4.0]})
        model, table = self._load(ds)
        assert "unrelated" not in table
        assert not hasattr(model, "unrelated")

    def test_table_matches_model(self) -> None:
        ds = DataSet([1, 2], {"production": [1.0, 2.0]})
        model, table = self._load(ds)
        for name in model.bound_names():
            assert table[name] == model.get(name)
