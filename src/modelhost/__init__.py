"""modelhost: load a pluggable model, feed it data, script it, report it."""

__version__ = "0.1.0"

from modelhost.controller import Controller  # noqa: E402

__all__ = ["Controller", "__version__"]
