"""Lark-based parser for namespace scripts.

A script is a sequence of statements separated by newlines or ``;``::

    savingsRatio = ZEROS(LL)
    for t in RANGE(LL) {
        savingsRatio[t] = savings[t] / production[t] * 100
    }
    if netWealth[0] < 0 { warning = "negative start" } else { warning = "ok" }

Supports:
- Assignment to names and indexed elements, augmented ``+= -= *= /=``
- ``for NAME in expr { ... }``, ``while expr { ... }``,
  ``if expr { ... } elif expr { ... } else { ... }``
- Arithmetic, comparisons, ``and``/``or``/``not``, indexing, list literals,
  function calls
- Comments from ``#`` or ``//`` to the end of the line

``elif`` and ``else`` must follow the closing brace on the same line.
"""

from __future__ import annotations

from lark import Lark, Tree
from lark.exceptions import UnexpectedInput

from modelhost.script.errors import ScriptParseError

# LALR(1) grammar.
# Operator precedence (lowest to highest):
#   1. or
#   2. and
#   3. not
#   4. Comparison: > < >= <= == !=
#   5. Addition/subtraction: + -
#   6. Multiplication/division/modulo: * / %
#   7. Unary plus/minus: + -
#   8. Exponentiation: ^ (right-associative)
#   9. Indexing: x[i]
#  10. Atoms: number, bool, string, list, function call, name, parenthesized expr
GRAMMAR = r"""
start: _seps? _stmts?

_stmts: stmt (_seps stmt)* _seps?
_seps: _SEP+

?stmt: for_stmt
    | while_stmt
    | if_stmt
    | expr "=" expr           -> assign
    | expr AUG_OP expr        -> aug_assign
    | expr                    -> expr_stmt

for_stmt: "for" NAME "in" expr block
while_stmt: "while" expr block
if_stmt: "if" expr block ("elif" expr block)* ("else" block)?

block: "{" _seps? "}"
    | "{" _seps? _stmts "}"

?expr: or_expr

?or_expr: and_expr
    | or_expr "or" and_expr     -> or_

?and_expr: not_expr
    | and_expr "and" not_expr   -> and_

?not_expr: comparison
    | "not" not_expr            -> not_

?comparison: addition
    | comparison ">" addition   -> gt
    | comparison "<" addition   -> lt
    | comparison ">=" addition  -> gte
    | comparison "<=" addition  -> lte
    | comparison "==" addition  -> eq
    | comparison "!=" addition  -> neq

?addition: multiplication
    | addition "+" multiplication  -> add
    | addition "-" multiplication  -> sub

?multiplication: unary
    | multiplication "*" unary  -> mul
    | multiplication "/" unary  -> div
    | multiplication "%" unary  -> mod

?unary: exponentiation
    | "-" unary  -> neg
    | "+" unary  -> pos

?exponentiation: postfix
    | postfix "^" unary  -> pow

?postfix: atom
    | postfix "[" expr "]"  -> index

?atom: NUMBER                   -> number
    | "true"                    -> true_
    | "false"                   -> false_
    | ESCAPED_STRING            -> string
    | NAME "(" args ")"         -> func_call
    | NAME                      -> var
    | "[" args "]"              -> list_
    | "(" expr ")"

args: expr ("," expr)*
    |

AUG_OP: "+=" | "-=" | "*=" | "/="

NAME: /[A-Za-z_][A-Za-z0-9_]*/

_SEP: /[;\n]/

COMMENT: /(#|\/\/)[^\n]*/

%import common.NUMBER
%import common.ESCAPED_STRING
%ignore /[ \t\f\r]+/
%ignore COMMENT
"""

_parser = Lark(GRAMMAR, parser="lalr", start="start", propagate_positions=True)


def parse_script(text: str) -> Tree:
    """Parse script source into a Lark Tree.

    Args:
        text: The script source.

    Returns:
        A Lark parse tree whose ``start`` node holds one child per statement.

    Raises:
        ScriptParseError: If the script has invalid syntax.
    """
    try:
        return _parser.parse(text)
    except UnexpectedInput as exc:
        lines = str(exc).strip().splitlines() or ["invalid syntax"]
        line = getattr(exc, "line", None)
        column = getattr(exc, "column", None)
        # Lark reports -1 for positions it cannot determine (end of input)
        raise ScriptParseError(
            lines[0],
            line=line if isinstance(line, int) and line > 0 else None,
            column=column if isinstance(column, int) and column > 0 else None,
        ) from exc
