"""Tests for report rendering and number formatting."""

from __future__ import annotations

import math

import polars as pl
import pytest

from modelhost.bindings import BindingTable
from modelhost.report import (
    NumberFormat,
    is_scratch_name,
    parse_report,
    render_report,
    report_frame,
)


def make_table(declared: dict, extra: dict | None = None) -> BindingTable:
    table = BindingTable()
    table.declare(list(declared))
    table.update(declared)
    table.update(extra or {})
    return table


class TestNumberFormat:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (1000.0, "1 000"),
            (1234.5, "1 234,50"),
            (999.999, "1 000"),
            (0.0, "0"),
            (0.004, "0"),
            (12.345678, "12,35"),
            (-0.5, "-0,50"),
            (-1234567.25, "-1 234 567,25"),
            (7, "7"),
            (-12000, "-12 000"),
        ],
    )
    def test_defaults(self, value, expected) -> None:
        assert NumberFormat().format_number(value) == expected

    def test_half_even_on_decimal_value(self) -> None:
        fmt = NumberFormat()
        assert fmt.format_number(0.125) == "0,12"
        assert fmt.format_number(0.375) == "0,38"

    def test_custom_separators(self) -> None:
        fmt = NumberFormat(decimal_separator=".", grouping_separator=",")
        assert fmt.format_number(1234567.5) == "1,234,567.50"

    def test_fraction_digits(self) -> None:
        fmt = NumberFormat(fraction_digits=3)
        assert fmt.format_number(1.23456) == "1,235"
        assert fmt.format_number(2.0004) == "2"

    def test_special_values(self) -> None:
        fmt = NumberFormat()
        assert fmt.format_number(math.nan) == "NaN"
        assert fmt.format_number(math.inf) == "∞"
        assert fmt.format_number(-math.inf) == "-∞"

    def test_from_config(self) -> None:
        fmt = NumberFormat.from_config(
            {"decimal_separator": ".", "grouping_separator": "'", "fraction_digits": "1"}
        )
        assert fmt.format_number(12345.67) == "12'345.7"

    def test_format_value(self) -> None:
        fmt = NumberFormat()
        assert fmt.format_value([1000.0, 2.5]) == "1 000\t2,50"
        assert fmt.format_value([]) == ""
        assert fmt.format_value(True) == "true"
        assert fmt.format_value(None) == ""
        assert fmt.format_value("text") == "text"


class TestScratchNames:
    @pytest.mark.parametrize("name", ["t", "i", "x"])
    def test_single_lowercase_letter(self, name: str) -> None:
        assert is_scratch_name(name)

    @pytest.mark.parametrize("name", ["T", "tt", "t1", "_", "ratio"])
    def test_other_names(self, name: str) -> None:
        assert not is_scratch_name(name)


class TestRenderReport:
    def test_layout_and_order(self) -> None:
        table = make_table(
            {"LL": 2, "production": [1000.0, 1234.5], "savings": [1.0, 2.0]},
            {"LATA": [2020, 2021], "ratio": 0.5},
        )
        assert render_report(table) == (
            "LATA\t2020\t2021\n"
            "production\t1 000\t1 234,50\n"
            "savings\t1\t2\n"
            "ratio\t0,50\n"
        )

    def test_axis_labels_unformatted(self) -> None:
        table = make_table({}, {"LATA": [12000, 12001]})
        assert render_report(table) == "LATA\t12000\t12001\n"

    def test_horizon_never_rendered(self) -> None:
        table = make_table({"LL": 3}, {"LL2": 1})
        assert render_report(table) == "LL2\t1\n"

    def test_scratch_names_excluded_from_extras_only(self) -> None:
        table = make_table({"k": 5.0}, {"t": 2, "total": 3})
        assert render_report(table) == "k\t5\ntotal\t3\n"

    def test_declared_single_letter_needs_private_flag(self) -> None:
        table = make_table({"x": 1.0, "y": 2.0}, {"z": 3.0})
        assert render_report(table, private_names={"y"}) == "x\t1\n"

    def test_private_names_excluded(self) -> None:
        table = make_table({"shown": 1.0, "hidden": 2.0})
        assert render_report(table, private_names={"hidden"}) == "shown\t1\n"

    def test_missing_declared_value_skipped(self) -> None:
        table = BindingTable()
        table.declare(["a", "b"])
        table["b"] = 1.0
        assert render_report(table) == "b\t1\n"

    def test_custom_names_and_format(self) -> None:
        table = make_table({"N": 2, "out": [1.5]}, {"YEAR": [1, 2]})
        text = render_report(
            table,
            axis_name="YEAR",
            horizon_name="N",
            number_format=NumberFormat(decimal_separator="."),
        )
        assert text == "YEAR\t1\t2\nout\t1.50\n"

    def test_empty_table(self) -> None:
        assert render_report(BindingTable()) == ""


class TestReportFrame:
    def test_parse_report(self) -> None:
        assert parse_report("a\t1\t2\nb\t3\n") == [["a", "1", "2"], ["b", "3"]]

    def test_frame_padding(self) -> None:
        df = report_frame("LATA\t2020\t2021\nratio\t0,50\n")
        assert df.columns == ["name", "v1", "v2"]
        assert df.schema["v1"] == pl.Utf8
        assert df.row(1) == ("ratio", "0,50", None)

    def test_empty_text(self) -> None:
        df = report_frame("")
        assert df.columns == ["name"]
        assert df.height == 0
