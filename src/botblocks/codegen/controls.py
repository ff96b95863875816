"""
Control lowering: conditional, bounded loop, delay, try/except and named
function stubs. Unknown control kinds become a commented no-op.
"""

from __future__ import annotations

import ast
import keyword
import math
from collections.abc import Callable
from typing import Any

from botblocks.core.ir import (
    ControlKind,
    FunctionControlPayload,
    IfControlPayload,
    LoopControlPayload,
    PayloadModel,
    StructuredCondition,
    TryControlPayload,
    WaitControlPayload,
)

from .context import LoweringContext
from .statements import Blank, Comment, Line, Stmt, Suite, source_literal

DEFAULT_CONDITION = "user_message == 'condition'"
DEFAULT_LOOP_COUNT = 3
DEFAULT_LOOP_VARIABLE = "i"
DEFAULT_WAIT_SECONDS = 1
DEFAULT_FUNCTION_NAME = "custom_function"

COMPARISON_OPERATORS = frozenset({"==", "!=", ">", "<", ">=", "<=", "in", "not in"})


def is_name(value: Any) -> bool:
    """True for strings usable as a Python name (identifiers that are not keywords)."""
    return isinstance(value, str) and value.isidentifier() and not keyword.iskeyword(value)


def _is_expression(text: str) -> bool:
    try:
        ast.parse(text, mode="eval")
    except SyntaxError:
        return False
    return True


def _operand(value: Any) -> str:
    """Names (``user_message``) stay names; anything else is a literal."""
    if is_name(value):
        return value
    return source_literal(value)


def condition_expression(condition: StructuredCondition | str | None, ctx: LoweringContext) -> str:
    if isinstance(condition, StructuredCondition):
        operator = condition.operator.strip()
        left, right = _operand(condition.left_value), source_literal(condition.right_value)
        if operator == "contains":
            return f"{right} in {left}"
        if operator not in COMPARISON_OPERATORS:
            ctx.warn(f"Unsupported comparison operator '{operator}'; using ==")
            operator = "=="
        return f"{left} {operator} {right}"
    if isinstance(condition, str) and condition.strip():
        expression = " ".join(condition.split())
        if _is_expression(expression):
            return expression
        ctx.warn(f"Condition '{expression}' is not a valid expression; using {DEFAULT_CONDITION}")
    return DEFAULT_CONDITION


def _if(p: IfControlPayload, ctx: LoweringContext) -> list[Stmt]:
    test = condition_expression(p.condition, ctx)
    return [
        Comment("Conditional branch"),
        Suite(f"if {test}:", (Comment("Runs when the condition holds"), Line("pass"))),
        Suite("else:", (Comment("Runs otherwise"), Line("pass"))),
    ]


def _loop(p: LoopControlPayload, ctx: LoweringContext) -> list[Stmt]:
    variable = p.variable if is_name(p.variable) else DEFAULT_LOOP_VARIABLE
    if p.variable and variable != p.variable:
        ctx.warn(f"'{p.variable}' is not a valid loop variable; using {variable}")
    count = p.count if p.count is not None and p.count >= 0 else DEFAULT_LOOP_COUNT
    return [
        Comment("Repeat"),
        Suite(f"for {variable} in range({count}):", (Line("pass"),)),
    ]


def _wait(p: WaitControlPayload, ctx: LoweringContext) -> list[Stmt]:
    seconds = p.time if p.time is not None and 0 <= p.time < math.inf else DEFAULT_WAIT_SECONDS
    return [Comment("Wait"), Line(f"time.sleep({source_literal(seconds)})")]


def _try(p: TryControlPayload, ctx: LoweringContext) -> list[Stmt]:
    return [
        Comment("Error handling"),
        Suite("try:", (Line("pass"),)),
        Suite("except Exception as e:", (Line('app.logger.error("Error: %s", e)'),)),
    ]


def _function(p: FunctionControlPayload, ctx: LoweringContext) -> list[Stmt]:
    name = p.function_name if is_name(p.function_name) else DEFAULT_FUNCTION_NAME
    if p.function_name and name != p.function_name:
        ctx.warn(f"'{p.function_name}' is not a valid function name; using {name}")
    return [
        Comment("Custom function"),
        Suite(f"def {name}():", (Line("pass"),)),
        Blank(),
        Line(f"{name}()"),
    ]


CONTROL_LOWERINGS: dict[ControlKind, Callable[[Any, LoweringContext], list[Stmt]]] = {
    ControlKind.IF: _if,
    ControlKind.LOOP: _loop,
    ControlKind.WAIT: _wait,
    ControlKind.TRY: _try,
    ControlKind.FUNCTION: _function,
}


def lower_control(kind: ControlKind, payload: PayloadModel, ctx: LoweringContext) -> list[Stmt]:
    return CONTROL_LOWERINGS[kind](payload, ctx)


def unknown_control(kind: str | None, ctx: LoweringContext) -> list[Stmt]:
    ctx.warn(f"Unsupported control type '{kind}' emitted as a no-op")
    return [Comment(f"Unsupported control type: {kind}"), Line("pass")]
