"""Tree-walking evaluator for parsed scripts.

Statements run in order directly against the namespace, so every write is
visible immediately and survives a later failure.  Arithmetic broadcasts
element-wise when either operand is a sequence.
"""

from __future__ import annotations

import math
import operator
from collections.abc import MutableMapping
from typing import Any, Callable

from lark import Token, Tree

from modelhost.script.errors import (
    ScriptError,
    ScriptFunctionError,
    ScriptRefError,
    ScriptRuntimeError,
)


def execute_script(tree: Tree, namespace: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Execute a parsed script against *namespace*.

    Args:
        tree: Parse tree from ``parse_script()``.
        namespace: Mutable name -> value mapping, read and written in place.

    Returns:
        The same *namespace*.

    Raises:
        ScriptError: On the first failing statement.  Statements before it
            have already been applied.
    """
    for stmt in tree.children:
        _exec(stmt, namespace)
    return namespace


# ---------- Statements ----------


_RUNTIME_ERRORS = (ArithmeticError, LookupError, TypeError, ValueError)


def _exec(stmt: Tree, ns: MutableMapping[str, Any]) -> None:
    """Execute one statement, tagging runtime failures with its line."""
    try:
        _exec_stmt(stmt, ns)
    except ScriptError:
        raise
    except _RUNTIME_ERRORS as exc:
        raise ScriptRuntimeError(f"{type(exc).__name__}: {exc}", line=_line(stmt)) from exc


def _exec_block(block: Tree, ns: MutableMapping[str, Any]) -> None:
    for stmt in block.children:
        _exec(stmt, ns)


def _exec_stmt(stmt: Tree, ns: MutableMapping[str, Any]) -> None:
    rule = stmt.data

    if rule == "expr_stmt":
        _eval(stmt.children[0], ns)
        return

    if rule == "assign":
        target, value_node = stmt.children
        _store(target, _eval(value_node, ns), ns, _line(stmt))
        return

    if rule == "aug_assign":
        target, op_token, value_node = stmt.children
        op = _AUG_OPS[str(op_token)]
        current = _eval(target, ns)
        _store(target, _binary(op, current, _eval(value_node, ns)), ns, _line(stmt))
        return

    if rule == "for_stmt":
        name_token, iter_node, body = stmt.children
        iterable = _eval(iter_node, ns)
        if not isinstance(iterable, (list, str)):
            raise ScriptRuntimeError(
                f"cannot iterate over {type(iterable).__name__}", line=_line(stmt)
            )
        for item in list(iterable):
            ns[str(name_token)] = item
            _exec_block(body, ns)
        return

    if rule == "while_stmt":
        cond_node, body = stmt.children
        while _eval(cond_node, ns):
            _exec_block(body, ns)
        return

    if rule == "if_stmt":
        children = stmt.children
        for i in range(0, len(children) - 1, 2):
            if _eval(children[i], ns):
                _exec_block(children[i + 1], ns)
                return
        if len(children) % 2 == 1:
            _exec_block(children[-1], ns)
        return

    raise ScriptError(f"Unknown statement type: {rule}")


def _store(target: Tree, value: Any, ns: MutableMapping[str, Any], line: int | None) -> None:
    """Assign *value* to a name or an indexed element."""
    if isinstance(target, Tree) and target.data == "var":
        ns[str(target.children[0])] = _copy(value)
        return
    if isinstance(target, Tree) and target.data == "index":
        container = _eval(target.children[0], ns)
        if not isinstance(container, list):
            raise ScriptRuntimeError(
                f"cannot assign into an element of {type(container).__name__}", line=line
            )
        container[_as_index(_eval(target.children[1], ns))] = _copy(value)
        return
    raise ScriptRuntimeError("cannot assign to expression", line=line)


def _copy(value: Any) -> Any:
    """Copy lists on assignment so two names never share one sequence."""
    if isinstance(value, list):
        return [_copy(v) for v in value]
    return value


def _line(node: Tree) -> int | None:
    meta = getattr(node, "meta", None)
    if meta is None or getattr(meta, "empty", True):
        return None
    return getattr(meta, "line", None)


# ---------- Expressions ----------


def _binary(op: Callable[[Any, Any], Any], left: Any, right: Any) -> Any:
    """Apply *op*, broadcasting element-wise over sequences."""
    left_seq = isinstance(left, list)
    right_seq = isinstance(right, list)
    if left_seq and right_seq:
        if len(left) != len(right):
            raise ValueError(
                f"sequence lengths differ ({len(left)} and {len(right)})"
            )
        return [_binary(op, a, b) for a, b in zip(left, right)]
    if left_seq:
        return [_binary(op, a, right) for a in left]
    if right_seq:
        return [_binary(op, left, b) for b in right]
    return op(left, right)


def _map(fn: Callable[[Any], Any], value: Any) -> Any:
    if isinstance(value, list):
        return [_map(fn, v) for v in value]
    return fn(value)


def _as_index(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("sequence index must be a number, not bool")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int):
        return value
    raise TypeError(f"sequence index must be a whole number, got {value!r}")


_ARITHMETIC: dict[str, Callable[[Any, Any], Any]] = {
    "add": operator.add,
    "sub": operator.sub,
    "mul": operator.mul,
    "div": operator.truediv,
    "mod": operator.mod,
    "pow": operator.pow,
}

_COMPARISONS: dict[str, Callable[[Any, Any], Any]] = {
    "gt": operator.gt,
    "lt": operator.lt,
    "gte": operator.ge,
    "lte": operator.le,
    "eq": operator.eq,
    "neq": operator.ne,
}

_AUG_OPS: dict[str, Callable[[Any, Any], Any]] = {
    "+=": operator.add,
    "-=": operator.sub,
    "*=": operator.mul,
    "/=": operator.truediv,
}


def _eval(node: Tree | Token, ns: MutableMapping[str, Any]) -> Any:
    """Recursively evaluate an expression node."""
    if isinstance(node, Token):
        return _eval_token(node)

    rule = node.data

    if rule in _ARITHMETIC:
        left = _eval(node.children[0], ns)
        right = _eval(node.children[1], ns)
        return _binary(_ARITHMETIC[rule], left, right)
    if rule in _COMPARISONS:
        return _COMPARISONS[rule](_eval(node.children[0], ns), _eval(node.children[1], ns))

    if rule == "neg":
        return _map(operator.neg, _eval(node.children[0], ns))
    if rule == "pos":
        return _eval(node.children[0], ns)

    # Logical operators short-circuit
    if rule == "and_":
        left = _eval(node.children[0], ns)
        return _eval(node.children[1], ns) if left else left
    if rule == "or_":
        left = _eval(node.children[0], ns)
        return left if left else _eval(node.children[1], ns)
    if rule == "not_":
        return not _eval(node.children[0], ns)

    # Literals
    if rule == "number":
        return _parse_number(node.children[0])
    if rule == "true_":
        return True
    if rule == "false_":
        return False
    if rule == "string":
        return _eval_token(node.children[0])
    if rule == "list_":
        return _eval(node.children[0], ns)

    if rule == "var":
        name = str(node.children[0])
        if name in ns:
            return ns[name]
        raise ScriptRefError(name, available=sorted(ns.keys()))

    if rule == "index":
        container = _eval(node.children[0], ns)
        return container[_as_index(_eval(node.children[1], ns))]

    if rule == "func_call":
        return _eval_func(node, ns)

    if rule == "args":
        return [_eval(child, ns) for child in node.children]

    raise ScriptError(f"Unknown node type: {rule}")


def _eval_token(token: Token) -> Any:
    if token.type == "NUMBER":
        return _parse_number(token)
    if token.type == "ESCAPED_STRING":
        raw = str(token)
        return raw[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return str(token)


def _parse_number(token: Token) -> int | float:
    """Parse a NUMBER token to int or float."""
    s = str(token)
    if any(c in s for c in ".eE"):
        return float(s)
    return int(s)


# ---------- Function dispatch ----------


def _eval_func(node: Tree, ns: MutableMapping[str, Any]) -> Any:
    """Evaluate a function call node."""
    func_name = str(node.children[0]).upper()
    if func_name not in _FUNC_TABLE:
        raise ScriptFunctionError(func_name)
    args = _eval(node.children[1], ns)
    return _FUNC_TABLE[func_name](args)


def _flatten(args: list) -> list:
    """Flatten one level of sequences in an argument list."""
    result = []
    for a in args:
        if isinstance(a, list):
            result.extend(a)
        else:
            result.append(a)
    return result


def _fn_sum(args: list) -> Any:
    if len(args) < 1:
        raise ScriptFunctionError("SUM", "SUM requires at least 1 argument")
    return sum(_flatten(args))


def _fn_average(args: list) -> float:
    values = _flatten(args)
    if not values:
        raise ScriptFunctionError("AVERAGE", "AVERAGE requires at least 1 value")
    return sum(values) / len(values)


def _fn_min(args: list) -> Any:
    values = _flatten(args)
    if not values:
        raise ScriptFunctionError("MIN", "MIN requires at least 1 value")
    return min(values)


def _fn_max(args: list) -> Any:
    values = _flatten(args)
    if not values:
        raise ScriptFunctionError("MAX", "MAX requires at least 1 value")
    return max(values)


def _fn_abs(args: list) -> Any:
    if len(args) != 1:
        raise ScriptFunctionError("ABS", "ABS requires exactly 1 argument")
    return _map(abs, args[0])


def _fn_round(args: list) -> Any:
    if len(args) < 1 or len(args) > 2:
        raise ScriptFunctionError("ROUND", "ROUND requires 1-2 arguments")
    digits = int(args[1]) if len(args) == 2 else 0
    return _map(lambda v: round(v, digits), args[0])


def _fn_sqrt(args: list) -> Any:
    if len(args) != 1:
        raise ScriptFunctionError("SQRT", "SQRT requires exactly 1 argument")
    return _map(math.sqrt, args[0])


def _fn_len(args: list) -> int:
    if len(args) != 1:
        raise ScriptFunctionError("LEN", "LEN requires exactly 1 argument")
    return len(args[0])


def _fn_range(args: list) -> list[int]:
    """RANGE(stop) or RANGE(start, stop)."""
    if len(args) < 1 or len(args) > 2:
        raise ScriptFunctionError("RANGE", "RANGE requires 1-2 arguments")
    bounds = [_as_index(a) for a in args]
    return list(range(*bounds))


def _fn_zeros(args: list) -> list[float]:
    if len(args) != 1:
        raise ScriptFunctionError("ZEROS", "ZEROS requires exactly 1 argument")
    return [0.0] * _as_index(args[0])


_FUNC_TABLE: dict[str, Callable[[list], Any]] = {
    "SUM": _fn_sum,
    "AVERAGE": _fn_average,
    "MIN": _fn_min,
    "MAX": _fn_max,
    "ABS": _fn_abs,
    "ROUND": _fn_round,
    "SQRT": _fn_sqrt,
    "LEN": _fn_len,
    "RANGE": _fn_range,
    "ZEROS": _fn_zeros,
}
