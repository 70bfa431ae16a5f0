import pytest

from accumulator import Calculator


@pytest.fixture
def calc():
    return Calculator()


@pytest.fixture
def press(calc):
    """Press each label in turn and return the display after the last one."""
    def _press(*labels):
        display = calc.display
        for label in labels:
            display = calc.apply(label)
        return display
    return _press
