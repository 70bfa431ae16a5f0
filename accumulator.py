"""
Button-press state machine for TinyCalc.

Every keypad press is turned into a `Key` and folded into an immutable
`CalcState` by `reduce`. The `Calculator` class keeps the current state for
the window loop and hands back the string to show on the display.

Rules:
    - digits and "." are appended, with at most one "." per number; right
      after "=" they start a new expression instead
    - an operator is ignored on an empty expression and replaces a trailing
      operator instead of stacking on top of it
    - "+/-" adds or removes a unary minus in front of the trailing number
    - "AC" clears everything, "DEL" removes the last character
    - "=" evaluates; the result becomes the new expression so calculations
      can be chained, and any failure shows "Error" and clears the expression
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum

from evaluator import EvalError, evaluate, format_result

logger = logging.getLogger(__name__)

OPERATORS = "+-*/%"
ERROR_DISPLAY = "Error"
EMPTY_DISPLAY = "0"

# Trailing run of digits and decimal points: the number currently being typed.
TRAILING_NUMBER = re.compile(r'[0-9.]*$')


class Key(Enum):
    """Every button on the keypad, keyed by its label."""

    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    DOT = "."
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    NEGATE = "+/-"
    CLEAR = "AC"
    DELETE = "DEL"
    EQUALS = "="

    @classmethod
    def from_label(cls, label):
        """Look up the key for a button label, rejecting anything unknown."""
        if isinstance(label, cls):
            return label
        try:
            return cls(label)
        except ValueError:
            raise ValueError(f"unknown button label: {label!r}") from None

    @property
    def label(self) -> str:
        return self.value

    @property
    def is_digit(self) -> bool:
        return self.value.isdigit()

    @property
    def is_operator(self) -> bool:
        return len(self.value) == 1 and self.value in OPERATORS


@dataclass(frozen=True)
class CalcState:
    """
    Snapshot of the calculator.

    Attributes:
        expression (str): What has been typed so far, or the last result.
        display (str): What the display shows.
        evaluated (bool): True while `expression` holds a computed result.
    """

    expression: str = ""
    display: str = EMPTY_DISPLAY
    evaluated: bool = False


def _editing(expression, evaluated=False):
    return CalcState(expression, expression or EMPTY_DISPLAY, evaluated)


def _input_number(state, char):
    expression = "" if state.evaluated else state.expression
    if char == "." and "." in TRAILING_NUMBER.search(expression).group():
        return state
    return _editing(expression + char)


def _input_operator(state, op):
    # Drop a trailing operator (or dangling unary minus) before appending.
    head = state.expression.rstrip(OPERATORS)
    if not head:
        return state
    return _editing(head + op)


def _toggle_sign(state):
    expression = state.expression
    match = TRAILING_NUMBER.search(expression)
    number = match.group()
    if not number:
        return state
    head = expression[:match.start()]
    # A "-" at the start or right after another operator is a sign, not a subtraction.
    if head.endswith("-") and (len(head) == 1 or head[-2] in OPERATORS):
        toggled = head[:-1] + number
    else:
        toggled = head + "-" + number
    return _editing(toggled, state.evaluated)


def _evaluate(state):
    try:
        result = format_result(evaluate(state.expression))
    except EvalError as exc:
        logger.info("Could not evaluate %r: %s", state.expression, exc)
        return CalcState("", ERROR_DISPLAY, False)
    return CalcState(result, result, True)


def reduce(state: CalcState, key: Key) -> CalcState:
    """Return the state that follows `state` when `key` is pressed."""
    if key.is_digit or key is Key.DOT:
        return _input_number(state, key.value)
    if key.is_operator:
        return _input_operator(state, key.value)
    if key is Key.NEGATE:
        return _toggle_sign(state)
    if key is Key.CLEAR:
        return CalcState()
    if key is Key.DELETE:
        return _editing(state.expression[:-1])
    if key is Key.EQUALS:
        return _evaluate(state)
    raise ValueError(f"unhandled key: {key!r}")


class Calculator:
    """Holds the current `CalcState` for the window loop."""

    def __init__(self, state=None):
        self.state = state or CalcState()

    @property
    def display(self) -> str:
        return self.state.display

    @property
    def expression(self) -> str:
        return self.state.expression

    def apply(self, button) -> str:
        """
        Feed one button press into the calculator.

        Args:
            button (str | Key): Button label such as "7", "+/-" or "=".
        Returns:
            str: The new display value.
        Raises:
            ValueError: `button` is not a keypad label.
        """
        key = Key.from_label(button)
        self.state = reduce(self.state, key)
        logger.debug("Pressed %s -> expression=%r display=%r",
                     key.label, self.state.expression, self.state.display)
        return self.state.display

    def reset(self):
        self.state = CalcState()
