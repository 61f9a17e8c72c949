"""Tab-separated report rendering for a binding table.

Report layout:

1. The time axis, if present, with raw period labels.
2. Every model-declared variable in declaration order, except the horizon
   variable and variables declared private.
3. Every other table entry in table order, except the horizon variable and
   single lower-case letter names (script scratch variables).

Numbers use a thousands separator and a localized decimal separator; a
fraction that rounds to zero is dropped.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any

import polars as pl

from modelhost.bindings import BindingTable

_SCRATCH_NAME_RE = re.compile(r"^[a-z]$")


class NumberFormat:
    """Locale settings for number rendering.

    Attributes:
        decimal_separator: Separator between integer and fraction digits.
        grouping_separator: Separator between groups of three integer digits.
        fraction_digits: Maximum number of fraction digits.
    """

    def __init__(
        self,
        decimal_separator: str = ",",
        grouping_separator: str = " ",
        fraction_digits: int = 2,
    ) -> None:
        self.decimal_separator = decimal_separator
        self.grouping_separator = grouping_separator
        self.fraction_digits = fraction_digits

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> NumberFormat:
        return cls(
            decimal_separator=str(config["decimal_separator"]),
            grouping_separator=str(config["grouping_separator"]),
            fraction_digits=int(config["fraction_digits"]),
        )

    def _group(self, digits: int) -> str:
        return f"{digits:,}".replace(",", self.grouping_separator)

    def format_number(self, value: int | float) -> str:
        """Format a single number.

        Examples (default settings):
            ``1000.0`` -> ``"1 000"``, ``1234.5`` -> ``"1 234,50"``,
            ``999.999`` -> ``"1 000"``, ``-0.5`` -> ``"-0,50"``.
        """
        if isinstance(value, int):
            sign = "-" if value < 0 else ""
            return sign + self._group(abs(value))

        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "∞" if value > 0 else "-∞"

        if value == math.floor(value):
            return self.format_number(int(value))

        quantum = Decimal(1).scaleb(-self.fraction_digits)
        rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_EVEN)
        if rounded == 0:
            return "0"

        sign = "-" if rounded < 0 else ""
        whole, _, fraction = f"{abs(rounded):f}".partition(".")
        text = sign + self._group(int(whole))
        if fraction.strip("0"):
            text += self.decimal_separator + fraction
        return text

    def format_value(self, value: Any) -> str:
        """Format a table value; sequences become tab-joined elements."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, list):
            return "\t".join(self.format_value(v) for v in value)
        if isinstance(value, (int, float)):
            return self.format_number(value)
        return str(value)


def is_scratch_name(name: str) -> bool:
    """True for single lower-case letter names such as loop counters."""
    return bool(_SCRATCH_NAME_RE.match(name))


def render_report(
    table: BindingTable,
    *,
    axis_name: str = "LATA",
    horizon_name: str = "LL",
    private_names: set[str] | frozenset[str] = frozenset(),
    number_format: NumberFormat | None = None,
) -> str:
    """Render *table* as newline-terminated, tab-separated lines.

    Visibility of model-declared names is controlled only by
    ``Bound(..., private=True)``: a declared single-letter name such as
    ``x`` is reported.  The single-letter scratch rule applies to names a
    script added.

    Args:
        table: The binding table to render.
        axis_name: Name of the time axis entry.
        horizon_name: Name of the horizon length entry (never rendered).
        private_names: Model-declared names to leave out.
        number_format: Locale settings; defaults to ``NumberFormat()``.

    Returns:
        The report text.
    """
    fmt = number_format or NumberFormat()
    lines: list[str] = []

    if axis_name in table:
        axis = table[axis_name]
        labels = axis if isinstance(axis, list) else [axis]
        lines.append(axis_name + "".join(f"\t{label}" for label in labels))

    declared = table.declared_names()
    for name in declared:
        if name in (axis_name, horizon_name) or name in private_names:
            continue
        if name not in table:
            continue
        lines.append(f"{name}\t{fmt.format_value(table[name])}")

    for name in table.extra_names():
        if name in (axis_name, horizon_name) or is_scratch_name(name):
            continue
        lines.append(f"{name}\t{fmt.format_value(table[name])}")

    return "".join(line + "\n" for line in lines)


def parse_report(text: str) -> list[list[str]]:
    """Split report text into rows of cells."""
    return [row.split("\t") for row in text.splitlines()]


def report_frame(text: str) -> pl.DataFrame:
    """Build a display table from report text.

    Columns are ``name`` followed by ``v1 .. vN``; shorter rows are padded
    with nulls.
    """
    rows = parse_report(text)
    width = max((len(row) for row in rows), default=1)
    columns = ["name"] + [f"v{i}" for i in range(1, width)]
    padded = [row + [None] * (width - len(row)) for row in rows]
    return pl.DataFrame(padded, schema={c: pl.Utf8 for c in columns}, orient="row")
