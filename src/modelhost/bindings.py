"""Binding table: the shared namespace mirroring a model's bound variables.

The table is an ordered name -> value mapping.  ``sync()`` copies every
bound variable of a model into it; scripts then read and write the table,
never the model.  Names written by anything other than a sync are
"extra" names and are reported after the model's own variables.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, MutableMapping
from typing import Any

from modelhost.errors import BindingError
from modelhost.models.base import Model

logger = logging.getLogger(__name__)


def copy_value(value: Any) -> Any:
    """Copy sequences so the table never aliases model state."""
    if isinstance(value, list):
        return [copy_value(v) for v in value]
    return value


class BindingTable(MutableMapping):
    """Insertion-ordered namespace shared by the engine and scripts."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._declared: list[str] = []

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"BindingTable({self._values!r})"

    def declare(self, names: list[str]) -> None:
        """Record the model-declared names, in declaration order."""
        self._declared = list(names)

    def declared_names(self) -> list[str]:
        return list(self._declared)

    def extra_names(self) -> list[str]:
        """Names in the table that the model does not declare, in table order."""
        declared = set(self._declared)
        return [name for name in self._values if name not in declared]

    def snapshot(self) -> dict[str, Any]:
        """Return a detached copy of the current contents."""
        return {name: copy_value(value) for name, value in self._values.items()}


def sync(model: Model, table: BindingTable) -> list[BindingError]:
    """Copy every bound variable of *model* into *table*.

    Variables that cannot be read are skipped; their errors are returned
    so the caller can log them.  Calling this twice without mutating the
    model leaves the table unchanged.

    Args:
        model: The model to read from.
        table: The namespace to write into.

    Returns:
        One ``BindingError`` per variable that was skipped.
    """
    table.declare(model.bound_names())
    errors: list[BindingError] = []
    for name in model.bound_names():
        try:
            table[name] = copy_value(model.get(name))
        except BindingError as exc:
            logger.debug("sync skipped %s: %s", name, exc)
            errors.append(exc)
    return errors


def assign(model: Model, table: BindingTable, name: str, value: Any) -> None:
    """Write *value* into the model and mirror the stored value in the table.

    Raises:
        BindingError: If the model rejects the write.
    """
    model.set(name, value)
    table[name] = copy_value(model.get(name))
