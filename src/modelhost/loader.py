"""Whitespace-delimited data file loader with forward-fill.

File format::

    LATA 2015 2016 2017 2018
    production 100
    growthRatesProduction 1 1.1 1.2

The first line holds a label followed by the period labels (integers).
Every later line holds a variable name followed by up to one real value
per period.  A row shorter than the header repeats its last value through
the remaining periods.
"""

from __future__ import annotations

import logging
from pathlib import Path

import polars as pl

from modelhost.bindings import BindingTable, assign
from modelhost.errors import BindingError, DataParseError
from modelhost.models.base import Bound, Model

logger = logging.getLogger(__name__)


class DataSet:
    """Parsed contents of a data file.

    Attributes:
        axis: Period labels from the header row.
        series: Variable name -> sequence of length ``horizon``, in file order.
    """

    def __init__(self, axis: list[int], series: dict[str, list[float]]) -> None:
        self.axis = axis
        self.series = series

    @property
    def horizon(self) -> int:
        return len(self.axis)

    def to_frame(self) -> pl.DataFrame:
        """Return the series as a DataFrame: one row per variable, one column per period."""
        labels = _unique_labels([str(year) for year in self.axis])
        schema: dict[str, pl.DataType] = {"name": pl.Utf8}
        for label in labels:
            schema[label] = pl.Float64
        rows = [[name, *values] for name, values in self.series.items()]
        return pl.DataFrame(rows, schema=schema, orient="row")


def _unique_labels(labels: list[str]) -> list[str]:
    seen: dict[str, int] = {}
    out: list[str] = []
    for label in labels:
        count = seen.get(label, 0)
        seen[label] = count + 1
        out.append(label if count == 0 else f"{label}_{count}")
    return out


def _parse_token(path: Path, line_no: int, token: str, kind: type) -> float | int:
    try:
        return kind(token)
    except ValueError as exc:
        raise DataParseError(path, line_no, token) from exc


def forward_fill(supplied: list[float], horizon: int) -> list[float]:
    """Spread *supplied* over *horizon* periods, repeating the last value.

    Values beyond the horizon are dropped.  With nothing supplied the
    result is all zeros.

    Args:
        supplied: Explicit values, starting at period 0.
        horizon: Number of periods.

    Returns:
        A new list of length *horizon*.
    """
    values = [0.0] * horizon
    supplied = supplied[:horizon]
    for i, value in enumerate(supplied):
        values[i] = value
    if supplied:
        last = supplied[-1]
        for i in range(len(supplied), horizon):
            values[i] = last
    return values


def parse_data_file(path: Path) -> DataSet | None:
    """Parse a data file.

    Args:
        path: The file to read.

    Returns:
        The parsed DataSet, or ``None`` if the first line is absent or blank.

    Raises:
        FileNotFoundError: If *path* does not exist.
        DataParseError: On the first malformed numeric token.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        first_line = f.readline()
        if not first_line.strip():
            return None

        axis = [
            int(_parse_token(path, 1, token, int))
            for token in first_line.split()[1:]
        ]
        horizon = len(axis)

        series: dict[str, list[float]] = {}
        for line_no, line in enumerate(f, start=2):
            parts = line.split()
            if len(parts) < 2:
                continue
            supplied = [
                float(_parse_token(path, line_no, token, float))
                for token in parts[1:]
            ]
            if len(supplied) > horizon:
                logger.debug(
                    "%s:%d: %s has %d values for %d periods; extra values dropped",
                    path.name, line_no, parts[0], len(supplied), horizon,
                )
            series[parts[0]] = forward_fill(supplied, horizon)

    return DataSet(axis, series)


def apply_dataset(
    model: Model,
    table: BindingTable,
    dataset: DataSet,
    *,
    axis_name: str = "LATA",
    horizon_name: str = "LL",
) -> list[BindingError]:
    """Populate *model* and *table* from *dataset*.

    The horizon variable is set to the number of periods regardless of the
    file content.  Bound sequences without a matching row become all-zero;
    scalar bound variables take the first value of a matching row.

    Returns:
        One ``BindingError`` per variable that could not be written.
    """
    table[axis_name] = list(dataset.axis)
    horizon = dataset.horizon

    errors: list[BindingError] = []
    for decl in model.bound_variables():
        if decl.name == horizon_name:
            value = horizon
        elif decl.name in dataset.series:
            row = dataset.series[decl.name]
            if decl.kind == Bound.SEQUENCE:
                value = row
            else:
                value = row[0] if row else 0
        elif decl.kind == Bound.SEQUENCE:
            value = [0.0] * horizon
        else:
            value = decl.default()

        try:
            assign(model, table, decl.name, value)
        except BindingError as exc:
            logger.debug("load skipped %s: %s", decl.name, exc)
            errors.append(exc)
    return errors
