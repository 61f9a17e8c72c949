"""Model contract: declared bound variables plus a single ``run()``."""

from __future__ import annotations

from typing import Any

from modelhost.errors import BindingError


class Bound:
    """Declaration of one externally bound model variable.

    Attributes:
        name: Attribute name on the model and key in the binding table.
        kind: ``"int"``, ``"float"`` or ``"sequence"`` (of reals).
        private: Hidden from the report when true.
        doc: Short human-readable description.
    """

    INT = "int"
    FLOAT = "float"
    SEQUENCE = "sequence"

    def __init__(
        self, name: str, kind: str = SEQUENCE, *, private: bool = False, doc: str = ""
    ) -> None:
        if kind not in (self.INT, self.FLOAT, self.SEQUENCE):
            raise ValueError(f"Unknown bound variable kind: {kind!r}")
        self.name = name
        self.kind = kind
        self.private = private
        self.doc = doc

    def default(self) -> Any:
        """Value a fresh model holds before any data is loaded."""
        if self.kind == self.INT:
            return 0
        if self.kind == self.FLOAT:
            return 0.0
        return []

    def coerce(self, value: Any) -> Any:
        """Convert *value* to this declaration's kind.

        Raises:
            TypeError, ValueError: If the value does not fit the kind.
        """
        if self.kind == self.INT:
            return int(value)
        if self.kind == self.FLOAT:
            return float(value)
        return [float(v) for v in value]

    def __repr__(self) -> str:
        flag = ", private" if self.private else ""
        return f"Bound({self.name!r}, {self.kind!r}{flag})"


class Model:
    """Base class for pluggable models.

    Subclasses list their externally visible variables in ``bound`` and
    implement ``run()``, which reads the input variables and writes the
    outputs in place.  Any other attributes are private working state and
    never reach the binding table.

    Usage::

        @register_model("Doubler")
        class Doubler(Model):
            bound = (Bound("LL", Bound.INT), Bound("values"), Bound("doubled"))

            def run(self) -> None:
                self.doubled = [2 * v for v in self.values]
    """

    model_name: str = ""
    bound: tuple[Bound, ...] = ()

    def __init__(self) -> None:
        for decl in self.bound:
            setattr(self, decl.name, decl.default())

    def bound_variables(self) -> tuple[Bound, ...]:
        """Return the bound variable declarations in declaration order."""
        return tuple(self.bound)

    def bound_names(self) -> list[str]:
        return [decl.name for decl in self.bound]

    def declaration(self, name: str) -> Bound:
        """Return the declaration for *name*.

        Raises:
            BindingError: If the model does not declare *name*.
        """
        for decl in self.bound:
            if decl.name == name:
                return decl
        raise BindingError(name, f"{type(self).__name__} does not declare {name!r}")

    def get(self, name: str) -> Any:
        """Read the current value of a bound variable.

        Raises:
            BindingError: If *name* is not declared or cannot be read.
        """
        self.declaration(name)
        try:
            return getattr(self, name)
        except AttributeError as exc:
            raise BindingError(name, f"Cannot read bound variable {name!r}: {exc}") from exc

    def set(self, name: str, value: Any) -> None:
        """Write a bound variable, coercing it to its declared kind.

        Raises:
            BindingError: If *name* is not declared or *value* does not fit.
        """
        decl = self.declaration(name)
        try:
            coerced = decl.coerce(value)
            setattr(self, name, coerced)
        except (TypeError, ValueError, AttributeError) as exc:
            raise BindingError(name, f"Cannot write bound variable {name!r}: {exc}") from exc

    def run(self) -> None:
        """Compute the output variables from the inputs."""
        raise NotImplementedError
