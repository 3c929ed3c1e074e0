"""
Betting Calculator

Evaluates arithmetic with SymPy's parser so the model can convert odds to
implied probabilities, compute edges and expected value:
- Caret exponentiation: 2^16
- Percentages as plain arithmetic: 110 / (110 + 100)
- Functions: sqrt, log, exp, ceil, floor, abs, min, max; constants pi, E

Only numbers, operators and the names above are accepted. The parsed
expression is evaluated against a namespace holding nothing else.
"""

import logging
import re
from typing import Optional

from pydantic import BaseModel, Field
from sympy import (
    Abs,
    E,
    Float,
    Integer,
    Max,
    Min,
    N,
    Rational,
    Symbol,
    ceiling,
    exp,
    factorial,
    floor,
    log,
    pi,
    sqrt,
)
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor,
    factorial_notation,
)

from .registry import ToolResult, ToolSpec

logger = logging.getLogger(__name__)

TRANSFORMATIONS = (
    standard_transformations
    + (implicit_multiplication_application,)
    + (convert_xor,)  # 2^16 -> 2**16
    + (factorial_notation,)
)

ALLOWED_FUNCTIONS = {
    "sqrt": sqrt,
    "log": log,
    "exp": exp,
    "ceiling": ceiling,
    "floor": floor,
    "abs": Abs,
    "min": Min,
    "max": Max,
    "pi": pi,
    "E": E,
}

ALLOWED_NAMES = set(ALLOWED_FUNCTIONS) | {"ceil"}

ALLOWED_CHARS = re.compile(r"[0-9A-Za-z+\-*/^().,!\s]+")
NUMBER_PATTERN = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
NAME_PATTERN = re.compile(r"[A-Za-z_]\w*")


def _global_dict() -> dict:
    """Namespace the parsed expression is evaluated in; no builtins."""
    return {
        "__builtins__": {},
        "Integer": Integer,
        "Float": Float,
        "Rational": Rational,
        "Symbol": Symbol,
        "factorial": factorial,
        **ALLOWED_FUNCTIONS,
    }


class CalculateParams(BaseModel):
    expression: str = Field(
        min_length=1,
        description="Math expression, e.g. '100 / (150 + 100)' or '0.55 * 1.91 - 1'",
    )


def preprocess_expression(expression: str) -> str:
    """Rewrite ceil() to SymPy's ceiling() and strip thousands separators."""
    expression = re.sub(r"(?<=\d),(?=\d{3}\b)", "", expression)
    return re.sub(r"\bceil\b", "ceiling", expression)


def check_expression(expression: str) -> Optional[str]:
    """
    Reject anything that is not plain arithmetic over the allowed names.

    Returns:
        An error message, or None when the expression is acceptable
    """
    if not ALLOWED_CHARS.fullmatch(expression):
        return (
            "Expression may only contain numbers, operators (+ - * / ^ !), "
            "parentheses, commas and function names"
        )
    without_numbers = NUMBER_PATTERN.sub(" ", expression)
    for name in NAME_PATTERN.findall(without_numbers):
        if name not in ALLOWED_NAMES:
            return f"Unsupported name '{name}'. Allowed: {', '.join(sorted(ALLOWED_NAMES))}"
    return None


def calculate(expression: str) -> ToolResult:
    """
    Safely evaluate a mathematical expression.

    Args:
        expression: Mathematical expression as a string

    Returns:
        ToolResult with ``{"expression", "result"}`` or an error message
    """
    if not expression or not expression.strip():
        return ToolResult.failure(
            'Expression is empty. Please provide a math expression in format: {"expression": "2+2"}'
        )

    prepared = preprocess_expression(expression)
    problem = check_expression(prepared)
    if problem:
        logger.info("Rejected calculator expression: %s", problem)
        return ToolResult.failure(problem)

    try:
        expr = parse_expr(
            prepared,
            local_dict={},
            global_dict=_global_dict(),
            transformations=TRANSFORMATIONS,
            evaluate=True,
        )
        result = complex(N(expr))

        if result.imag == 0:
            result = result.real

        if isinstance(result, float) and result.is_integer():
            result = int(result)
        elif isinstance(result, float):
            result = round(result, 6)
        else:
            result = str(result)

        return ToolResult.success({"expression": expression, "result": result})

    except SyntaxError as e:
        logger.debug("Syntax error parsing expression '%s': %s", expression, e)
        return ToolResult.failure(f"Syntax error: {e}")
    except (ValueError, TypeError) as e:
        logger.debug("Value/Type error evaluating '%s': %s", expression, e)
        return ToolResult.failure(str(e))
    except Exception as e:
        logger.debug("Calculation error for '%s': %s", expression, e)
        return ToolResult.failure(f"Calculation error: {e}")


def _handle_calculate(args: CalculateParams) -> ToolResult:
    return calculate(args.expression)


def create_calculator_tool() -> ToolSpec:
    return ToolSpec(
        name="calculate",
        description=(
            "Perform mathematical calculations, e.g. implied probability from "
            "American odds or expected value. Supports + - * / ^ !, parentheses "
            "and sqrt, log, exp, ceil, floor, abs, min, max, pi, E."
        ),
        parameters=CalculateParams,
        execute=_handle_calculate,
    )
