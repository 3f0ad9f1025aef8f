"""Arithmetic and unit-conversion evaluator.

Arithmetic is evaluated strictly left to right with no operator precedence:
``2 + 3 * 4`` is 20. Parentheses are tokenized and then ignored, so
``2 * (3 + 4)`` is 10.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass

from aurora.errors import CalculationError

logger = logging.getLogger(__name__)

_ARITHMETIC_RE = re.compile(r"(?:what is|calculate)\s+([\d\s+\-*/().x÷]+)")
_CONVERT_RE = re.compile(
    r"convert\s+([\d.]+)\s*([a-z]+)\s+to\s+([a-z]+)|([\d.]+)\s*([a-z]+)\s+in\s+([a-z]+)"
)
_TOKEN_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+|[+\-*/()]|\S")

_OPERATORS = {"+", "-", "*", "/"}
_OPERATOR_CHARS = frozenset("+-*/x÷")

CALCULATION_APOLOGY = "I'm sorry, I couldn't perform that calculation."


@dataclass(frozen=True)
class Affine:
    """A non-linear conversion with its dedicated inverse."""

    forward: Callable[[float], float]
    inverse: Callable[[float], float]


Conversion = float | Affine

CONVERSIONS: dict[str, dict[str, Conversion]] = {
    "km": {"miles": 0.621371, "m": 1000},
    "miles": {"km": 1.60934},
    "celsius": {"fahrenheit": Affine(lambda c: (c * 9 / 5) + 32, lambda f: (f - 32) * 5 / 9)},
    "fahrenheit": {"celsius": Affine(lambda f: (f - 32) * 5 / 9, lambda c: (c * 9 / 5) + 32)},
    "kg": {"pounds": 2.20462},
    "pounds": {"kg": 0.453592},
    "m": {"feet": 3.28084},
    "feet": {"m": 0.3048},
}

UNIT_ALIASES: dict[str, str] = {
    "kilometer": "km",
    "kilometers": "km",
    "kilometre": "km",
    "kilometres": "km",
    "mile": "miles",
    "mi": "miles",
    "meter": "m",
    "meters": "m",
    "metre": "m",
    "metres": "m",
    "foot": "feet",
    "ft": "feet",
    "c": "celsius",
    "f": "fahrenheit",
    "kilogram": "kg",
    "kilograms": "kg",
    "kgs": "kg",
    "pound": "pounds",
    "lb": "pounds",
    "lbs": "pounds",
}


def _format_number(value: float) -> str:
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return f"{value:.10g}"


def tokenize(expression: str) -> list[float | str]:
    """Split an expression into numbers and operator/parenthesis symbols."""
    normalized = expression.replace("x", "*").replace("÷", "/")
    tokens: list[float | str] = []
    for raw in _TOKEN_RE.findall(normalized):
        if raw in _OPERATORS or raw in ("(", ")"):
            tokens.append(raw)
            continue
        try:
            tokens.append(float(raw))
        except ValueError as exc:
            raise CalculationError(f"Unexpected token {raw!r}") from exc
    return tokens


def calculate(expression: str) -> float:
    """Evaluate ``expression`` left to right, ignoring precedence and grouping."""
    parts = [t for t in tokenize(expression) if t not in ("(", ")")]
    if not parts or not isinstance(parts[0], float):
        raise CalculationError("Expression must start with a number")

    result = parts[0]
    for i in range(1, len(parts), 2):
        op = parts[i]
        if op not in _OPERATORS or i + 1 >= len(parts) or not isinstance(parts[i + 1], float):
            raise CalculationError(f"Malformed expression: {expression!r}")
        num = parts[i + 1]
        if op == "+":
            result += num
        elif op == "-":
            result -= num
        elif op == "*":
            result *= num
        else:
            if num == 0:
                raise CalculationError("Division by zero")
            result /= num
    if not math.isfinite(result):
        raise CalculationError(f"Result out of range: {expression!r}")
    return result


def normalize_unit(unit: str) -> str:
    unit = unit.lower()
    return UNIT_ALIASES.get(unit, unit)


def convert(value: float, from_unit: str, to_unit: str) -> float | None:
    """Convert between two units from the table, or None if the pair is unknown.

    The forward entry wins. Otherwise the entry declared in the opposite
    direction is used: plain factors are divided, affine entries apply their
    paired inverse.
    """
    src, dst = normalize_unit(from_unit), normalize_unit(to_unit)

    forward = CONVERSIONS.get(src, {}).get(dst)
    if forward is not None:
        return forward.forward(value) if isinstance(forward, Affine) else value * forward

    backward = CONVERSIONS.get(dst, {}).get(src)
    if backward is not None:
        return backward.inverse(value) if isinstance(backward, Affine) else value / backward

    return None


def _evaluate_arithmetic(lowered: str) -> str | None:
    match = _ARITHMETIC_RE.search(lowered)
    if not match or not any(ch.isdigit() for ch in match.group(1)):
        return None

    expression = match.group(1).strip()
    # A bare number followed by more words ("what is 10 km in miles") is not arithmetic.
    trailing = lowered[match.end() :].strip(" ?.!")
    if trailing and not _OPERATOR_CHARS.intersection(expression):
        return None
    try:
        result = calculate(expression)
    except CalculationError as exc:
        logger.error("Calculation error: %s", exc)
        return CALCULATION_APOLOGY

    logger.info('Calculation: "%s" = %s', expression, _format_number(result))
    return f"The result is: {_format_number(result)}"


def _evaluate_conversion(lowered: str) -> str | None:
    match = _CONVERT_RE.search(lowered)
    if not match:
        return None

    raw_value = match.group(1) or match.group(4)
    from_unit = match.group(2) or match.group(5)
    to_unit = match.group(3) or match.group(6)
    try:
        value = float(raw_value)
    except ValueError:
        return None

    converted = convert(value, from_unit, to_unit)
    if converted is None:
        return None
    if not (math.isfinite(value) and math.isfinite(converted)):
        logger.error("Conversion out of range: %s %s to %s", raw_value, from_unit, to_unit)
        return CALCULATION_APOLOGY

    logger.info("Conversion: %s %s to %s = %s", raw_value, from_unit, to_unit, converted)
    return f"{_format_number(value)} {from_unit} is approximately {converted:.2f} {to_unit}."


def evaluate(text: str) -> str | None:
    """Answer an arithmetic or unit-conversion utterance.

    Returns the reply text, or None when the utterance is neither, so the
    caller can keep looking for another intent.
    """
    lowered = text.lower().strip()
    reply = _evaluate_arithmetic(lowered)
    if reply is not None:
        return reply
    return _evaluate_conversion(lowered)
