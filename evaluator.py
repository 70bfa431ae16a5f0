"""
Expression evaluation for the TinyCalc keypad.

The keypad only ever produces digits, decimal points and the operators
+ - * / %, so the evaluator accepts exactly that (plus parentheses and
whitespace) and nothing else. Expressions are parsed with Python's own
`ast` module and the tree is walked by hand, so no names, calls or
attributes can ever be reached.

Precedence is the usual one: * / % bind tighter than + -, all of them left
associative. % is the truncated remainder, so the sign of the result follows
the dividend (-7 % 2 == -1).
"""
import ast
import logging
import math
import re

logger = logging.getLogger(__name__)

# ---------------- Errors ----------------
class EvalError(Exception):
    """Base class for everything `evaluate` can raise."""


class EmptyExpressionError(EvalError, ValueError):
    """The expression is empty or only whitespace."""


class ExpressionSyntaxError(EvalError, ValueError):
    """The expression cannot be parsed (bad token, trailing operator, ...)."""


class DivideByZeroError(EvalError, ZeroDivisionError):
    """A / or % operator has a zero right-hand operand."""


class ResultOverflowError(EvalError, OverflowError):
    """The result (or an intermediate value) is not a finite number."""


# ---------------- Input sanitization ----------------
# Anything outside this set is rejected before parsing.
ALLOWED_CHARS = re.compile(r'^[0-9+\-*/%().\s]+$')
# "007" is a perfectly good keypad number but not a valid Python literal.
LEADING_ZEROS = re.compile(r'(?<![\d.])0+(?=\d)')

RESULT_DECIMALS = 10


def _binary(op, left, right):
    if isinstance(op, ast.Add):
        return left + right
    if isinstance(op, ast.Sub):
        return left - right
    if isinstance(op, ast.Mult):
        return left * right
    if isinstance(op, ast.Div):
        if right == 0:
            raise DivideByZeroError("division by zero")
        return left / right
    if isinstance(op, ast.Mod):
        if right == 0:
            raise DivideByZeroError("modulo by zero")
        return math.fmod(left, right)
    raise ExpressionSyntaxError(f"operator {type(op).__name__} is not supported")


def _eval_node(node):
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)

    if isinstance(node, ast.BinOp):
        return _binary(node.op, _eval_node(node.left), _eval_node(node.right))

    if isinstance(node, ast.UnaryOp):
        operand = _eval_node(node.operand)
        if isinstance(node.op, ast.UAdd):
            return operand
        if isinstance(node.op, ast.USub):
            return -operand
        raise ExpressionSyntaxError(f"unary {type(node.op).__name__} is not supported")

    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        try:
            return float(node.value)
        except OverflowError:
            raise ResultOverflowError(f"number too large: {node.value}") from None

    raise ExpressionSyntaxError(f"unexpected {type(node).__name__} in expression")


def evaluate(expr: str) -> float:
    """
    Parse and compute an arithmetic expression.

    Args:
        expr (str): Expression built from keypad input, e.g. "12.5*-3+1".
    Returns:
        float: The computed value.
    Raises:
        EmptyExpressionError: `expr` is empty.
        ExpressionSyntaxError: `expr` is malformed.
        DivideByZeroError: a / or % has a zero right-hand side.
        ResultOverflowError: the value is not finite.
    """
    text = expr.strip()
    if not text:
        raise EmptyExpressionError("empty expression")
    if not ALLOWED_CHARS.match(text):
        raise ExpressionSyntaxError(f"invalid characters in {expr!r}")

    text = LEADING_ZEROS.sub('', text)
    try:
        tree = ast.parse(text, mode='eval')
        value = _eval_node(tree)
    except SyntaxError as exc:
        raise ExpressionSyntaxError(f"cannot parse {expr!r}: {exc.msg}") from None
    except RecursionError:
        raise ExpressionSyntaxError("expression is nested too deeply") from None

    if not math.isfinite(value):
        raise ResultOverflowError(f"result of {expr!r} is not finite")
    logger.debug("Evaluated %r -> %r", expr, value)
    return value


def format_result(value: float) -> str:
    """
    Turn a computed value into the string shown on the display.

    Integral values drop the trailing ".0"; everything else is rounded to
    RESULT_DECIMALS places and written without an exponent so the result can
    be fed straight back into `evaluate` for chained calculations.
    """
    value = round(value, RESULT_DECIMALS)
    if value == 0:
        return "0"  # also covers -0.0
    if value.is_integer():
        return str(int(value))
    return f"{value:.{RESULT_DECIMALS}f}".rstrip("0").rstrip(".")


def calculate(expr: str) -> str:
    """Evaluate `expr` and return the formatted result."""
    return format_result(evaluate(expr))
