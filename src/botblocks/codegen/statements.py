"""
Statement IR for generated Python source.

Lowering code builds trees of the nodes below; ``render`` is the only place
that knows about indentation, string escaping and line wrapping.

Expressions: ``Name`` (raw identifier or expression text), ``Literal``
(Python value, possibly nesting other expressions inside lists and dicts)
and ``Call``. Statements: ``Line`` (an expression statement or raw code),
``Assign``, ``Return``, ``Comment``, ``Blank`` and ``Suite`` (a block
header such as ``if x:`` with an indented body).
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

INDENT = "    "
DEFAULT_WIDTH = 88


@dataclass(frozen=True)
class Name:
    """Raw expression text, rendered verbatim."""

    value: str


@dataclass(frozen=True)
class Literal:
    """
    A Python literal.

    Lists, tuples and dicts may contain other expressions; plain values are
    rendered as Python literals with double-quoted strings.
    """

    value: Any


@dataclass(frozen=True)
class Call:
    func: str
    args: tuple[Expr, ...] = ()
    kwargs: tuple[tuple[str, Expr], ...] = ()


Expr = Name | Literal | Call


@dataclass(frozen=True)
class Line:
    """One statement: raw code text or an expression."""

    code: str | Expr


@dataclass(frozen=True)
class Assign:
    target: str
    value: Expr


@dataclass(frozen=True)
class Return:
    value: Expr


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class Blank:
    pass


@dataclass(frozen=True)
class Suite:
    """A compound statement: ``header`` (ending in a colon) and its body."""

    header: str
    body: tuple[Stmt, ...] = field(default_factory=tuple)


Stmt = Line | Assign | Return | Comment | Blank | Suite


def call(func: str, *args: Any, **kwargs: Any) -> Call:
    """
    Build a ``Call``, wrapping plain Python values in ``Literal``.

    Keyword arguments whose value is None are dropped, so optional
    constructor parameters can be passed through unconditionally.
    """
    return Call(
        func=func,
        args=tuple(_expr(a) for a in args),
        kwargs=tuple((k, _expr(v)) for k, v in kwargs.items() if v is not None),
    )


def _expr(value: Any) -> Expr:
    if isinstance(value, Name | Literal | Call):
        return value
    return Literal(value)


# =============================================================================
# Rendering
# =============================================================================


def render(statements: Iterable[Stmt], width: int = DEFAULT_WIDTH) -> str:
    """Render statements to source text ending in a single newline."""
    lines: list[str] = []
    _render_block(list(statements), 0, width, lines)
    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines) + "\n"


def render_expr(expr: Expr, width: int = DEFAULT_WIDTH, level: int = 0) -> str:
    return "\n".join(_format(expr, level, len(INDENT) * level, width))


def _render_block(statements: list[Stmt], level: int, width: int, out: list[str]) -> None:
    pad = INDENT * level
    for stmt in statements:
        if isinstance(stmt, Blank):
            out.append("")
        elif isinstance(stmt, Comment):
            for text in stmt.text.splitlines() or [""]:
                out.append(f"{pad}# {text}".rstrip())
        elif isinstance(stmt, Suite):
            out.append(pad + stmt.header)
            body = list(stmt.body) or [Line("pass")]
            _render_block(body, level + 1, width, out)
        elif isinstance(stmt, Assign | Return):
            prefix = f"{stmt.target} = " if isinstance(stmt, Assign) else "return "
            lines = _format(stmt.value, level, len(pad) + len(prefix), width)
            out.append(pad + prefix + lines[0])
            out.extend(lines[1:])
        elif isinstance(stmt.code, str):
            out.append(pad + stmt.code)
        else:
            lines = _format(stmt.code, level, len(pad), width)
            out.append(pad + lines[0])
            out.extend(lines[1:])


def _format(expr: Expr, level: int, used: int, width: int) -> list[str]:
    """
    Format ``expr`` starting at column ``used``.

    Returns the lines of the expression; the first line carries no
    indentation, continuation lines are fully indented.
    """
    flat = _flat(expr)
    if used + len(flat) <= width:
        return [flat]

    if isinstance(expr, Call):
        opener, closer = f"{expr.func}(", ")"
        items: list[tuple[str, Expr]] = [("", a) for a in expr.args]
        items.extend((f"{k}=", v) for k, v in expr.kwargs)
    elif isinstance(expr, Literal) and isinstance(expr.value, list | tuple) and expr.value:
        opener, closer = ("[", "]") if isinstance(expr.value, list) else ("(", ")")
        items = [("", _expr(v)) for v in expr.value]
    elif isinstance(expr, Literal) and isinstance(expr.value, dict) and expr.value:
        opener, closer = "{", "}"
        items = [(f"{_scalar(k)}: ", _expr(v)) for k, v in expr.value.items()]
    else:
        return [flat]

    if not items:
        return [flat]

    inner_pad = INDENT * (level + 1)
    lines = [opener]
    for prefix, item in items:
        sub = _format(item, level + 1, len(inner_pad) + len(prefix), width)
        lines.append(inner_pad + prefix + sub[0])
        lines.extend(sub[1:])
        lines[-1] += ","
    lines.append(INDENT * level + closer)
    return lines


def _flat(expr: Expr) -> str:
    if isinstance(expr, Name):
        return expr.value
    if isinstance(expr, Call):
        parts = [_flat(a) for a in expr.args]
        parts.extend(f"{k}={_flat(v)}" for k, v in expr.kwargs)
        return f"{expr.func}({', '.join(parts)})"
    value = expr.value
    if isinstance(value, list):
        return "[" + ", ".join(_flat(_expr(v)) for v in value) + "]"
    if isinstance(value, tuple):
        inner = ", ".join(_flat(_expr(v)) for v in value)
        return f"({inner},)" if len(value) == 1 else f"({inner})"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{_scalar(k)}: {_flat(_expr(v))}" for k, v in value.items()) + "}"
    return _scalar(value)


def _scalar(value: Any) -> str:
    if isinstance(value, str):
        # A JSON string literal is also a valid Python string literal.
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, float) and not math.isfinite(value):
        # repr gives bare nan/inf, which are not names in the generated module
        return f"float({json.dumps(repr(value))})"
    if value is None or isinstance(value, bool | int | float):
        return repr(value)
    return json.dumps(str(value), ensure_ascii=False)


def source_literal(value: Any) -> str:
    """Single-line Python source for a literal value."""
    return _flat(_expr(value))
