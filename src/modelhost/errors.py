"""Error taxonomy for the modelhost engine.

Loader and script failures are raised to the caller.  Binding failures are
recoverable per variable and are logged by the sync that hit them.  Model
execution failures end the session.
"""

from __future__ import annotations

from pathlib import Path


class EngineError(Exception):
    """Base class for all modelhost errors."""


class ModelNotFoundError(EngineError):
    """The model identifier does not name a registered or importable model.

    Attributes:
        model_name: The identifier that failed to resolve.
        available: Registered model names.
    """

    def __init__(self, model_name: str, available: list[str] | None = None) -> None:
        self.model_name = model_name
        self.available = available or []
        msg = f"Unknown model: {model_name!r}"
        if self.available:
            msg += f". Available: {self.available}"
        super().__init__(msg)


class LoadError(EngineError):
    """Data file could not be loaded."""


class DataParseError(LoadError):
    """Malformed numeric token in a data file.

    Attributes:
        path: The data file.
        line_no: 1-based line number of the offending token.
        token: The token that failed to parse.
    """

    def __init__(self, path: Path | str, line_no: int, token: str) -> None:
        self.path = Path(path)
        self.line_no = line_no
        self.token = token
        super().__init__(
            f"{self.path.name}:{line_no}: cannot parse {token!r} as a number"
        )


class BindingError(EngineError):
    """A bound variable could not be read or written.

    Attributes:
        name: The variable name.
    """

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"Cannot access bound variable {name!r}")


class ModelExecutionError(EngineError):
    """``run()`` failed; the session must be discarded.

    Attributes:
        model_name: The model that failed.
    """

    def __init__(self, model_name: str, message: str) -> None:
        self.model_name = model_name
        super().__init__(f"Model {model_name!r} failed: {message}")


class SessionFailedError(ModelExecutionError):
    """An operation was attempted on a session whose model run already failed."""

    def __init__(self, model_name: str) -> None:
        super().__init__(model_name, "session was discarded after a failed run")
