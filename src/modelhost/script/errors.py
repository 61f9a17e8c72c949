"""Error types for script parsing and evaluation."""

from __future__ import annotations

from modelhost.errors import EngineError


class ScriptError(EngineError):
    """Base class for all script-related errors."""


class ScriptParseError(ScriptError):
    """Syntax error in a script.

    Attributes:
        line: 1-based line where the error was detected.
        column: 1-based column where the error was detected.
    """

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> None:
        self.line = line
        self.column = column
        full = f"Script parse error: {message}"
        if line is not None:
            full += f" (at line {line}"
            if column is not None:
                full += f", column {column}"
            full += ")"
        super().__init__(full)


class ScriptRefError(ScriptError):
    """Reference to a name that is not in the namespace.

    Attributes:
        ref_name: The unresolved reference.
        available: Names currently in the namespace.
    """

    def __init__(self, ref_name: str, available: list[str] | None = None) -> None:
        self.ref_name = ref_name
        self.available = available or []
        msg = f"Unknown variable: {ref_name!r}"
        if self.available:
            msg += f". Available: {self.available}"
        super().__init__(msg)


class ScriptFunctionError(ScriptError):
    """Unknown function or wrong number of arguments.

    Attributes:
        func_name: The function that caused the error.
    """

    def __init__(self, func_name: str, message: str | None = None) -> None:
        self.func_name = func_name
        super().__init__(message or f"Unknown function: {func_name!r}")


class ScriptRuntimeError(ScriptError):
    """A statement failed while executing.

    Attributes:
        line: 1-based line of the failing statement.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        full = f"Script error: {message}"
        if line is not None:
            full += f" (at line {line})"
        super().__init__(full)
