"""Script parsing and evaluation against a live namespace.

Public API::

    from modelhost.script import evaluate, evaluate_file, parse_script
"""

from __future__ import annotations

from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from modelhost.script.errors import (
    ScriptError,
    ScriptFunctionError,
    ScriptParseError,
    ScriptRefError,
    ScriptRuntimeError,
)
from modelhost.script.evaluator import execute_script
from modelhost.script.parser import parse_script


def evaluate(source: str, namespace: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Parse and run *source* with *namespace* as its variable scope.

    Nothing runs if the source does not parse.  A runtime failure keeps
    the writes of every statement that completed before it.

    Returns:
        The same *namespace*, mutated in place.
    """
    return execute_script(parse_script(source), namespace)


def evaluate_file(path: Path | str, namespace: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Like ``evaluate()``, reading the source from *path* (UTF-8)."""
    return evaluate(Path(path).read_text(encoding="utf-8"), namespace)


__all__ = [
    "ScriptError",
    "ScriptFunctionError",
    "ScriptParseError",
    "ScriptRefError",
    "ScriptRuntimeError",
    "evaluate",
    "evaluate_file",
    "execute_script",
    "parse_script",
]
