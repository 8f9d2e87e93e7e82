"""Calculator — arithmetic without eval(). Needs no credentials."""

from __future__ import annotations

import ast
import math
import operator

from toolgate.tools.base import Tool, ToolParam, ToolResult

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS = {
    "sqrt": math.sqrt,
    "log": math.log,
    "log10": math.log10,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "abs": abs,
    "round": round,
}

_CONSTANTS = {"pi": math.pi, "e": math.e}

# Keeps "9**9**9" from hanging the event loop.
_MAX_EXPONENT = 1000


def evaluate(expression: str) -> float | int:
    """Evaluate an arithmetic expression. Raises ValueError on anything else."""
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Not an arithmetic expression: {expression!r}") from e
    return _eval(tree.body)


def _eval(node: ast.AST):
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)):
        return node.value
    if isinstance(node, ast.Name) and node.id in _CONSTANTS:
        return _CONSTANTS[node.id]
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left, right = _eval(node.left), _eval(node.right)
        if isinstance(node.op, ast.Pow) and abs(right) > _MAX_EXPONENT:
            raise ValueError("Exponent too large")
        return _BINARY_OPS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval(node.operand))
    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in _FUNCTIONS
        and not node.keywords
    ):
        return _FUNCTIONS[node.func.id](*(_eval(arg) for arg in node.args))
    raise ValueError(f"Unsupported expression element: {ast.dump(node)}")


class CalculatorTool(Tool):
    name = "calculator"
    description = (
        "Evaluate an arithmetic expression. Supports + - * / // % **, "
        "parentheses, pi, e and sqrt/log/log10/sin/cos/tan/abs/round."
    )
    status_text = "Calculating..."
    parameters = [
        ToolParam(
            name="expression",
            type="string",
            description="The expression to evaluate, e.g. '(2 + 3) * sqrt(16)'",
            required=True,
        ),
    ]

    async def execute(self, expression: str, **_) -> ToolResult:
        try:
            value = evaluate(expression)
        except ZeroDivisionError:
            return ToolResult.fail("Division by zero")
        except (ValueError, TypeError, OverflowError) as e:
            return ToolResult.fail(f"Cannot evaluate {expression!r}: {e}")
        return ToolResult.success(str(value), expression=expression, value=value)
