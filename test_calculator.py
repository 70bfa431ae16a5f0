# test_calculator.py

import cv2
import numpy as np
import pytest

import calculator
from accumulator import Calculator
from calculator import (
    CalculatorWindow, fit_text, main,
    DISPLAY_COLOR, KEYPAD_COLOR, WINDOW_WIDTH, WINDOW_HEIGHT, MIN_DISPLAY_FONT_SCALE,
)


def click(window, label):
    btn = next(b for b in window.buttons if b.text == label)
    x = btn.pos[0] + btn.size[0] // 2
    y = btn.pos[1] + btn.size[1] // 2
    window.on_mouse(cv2.EVENT_LBUTTONDOWN, x, y)
    window.on_mouse(cv2.EVENT_LBUTTONUP, x, y)


@pytest.fixture
def window():
    return CalculatorWindow()

# ---------------------------
# Layout
# ---------------------------

def test_default_window_layout(window):
    assert (window.width, window.height) == (WINDOW_WIDTH, WINDOW_HEIGHT)
    assert window.display_height == WINDOW_HEIGHT // 5
    assert len(window.buttons) == 20
    assert min(b.pos[1] for b in window.buttons) >= window.display_height

# ---------------------------
# Mouse input
# ---------------------------

def test_clicks_reach_calculator(window):
    for label in ["1", "+", "2", "="]:
        click(window, label)
    assert window.calculator.display == "3"

def test_press_and_release_feedback(window):
    btn = next(b for b in window.buttons if b.text == "7")
    x, y = btn.pos[0] + 5, btn.pos[1] + 5
    window.on_mouse(cv2.EVENT_LBUTTONDOWN, x, y)
    assert btn.active
    assert window.calculator.display == "0"
    window.on_mouse(cv2.EVENT_LBUTTONUP, x, y)
    assert not btn.active
    assert window.calculator.display == "7"

def test_release_elsewhere_cancels_click(window):
    seven = next(b for b in window.buttons if b.text == "7")
    eight = next(b for b in window.buttons if b.text == "8")
    window.on_mouse(cv2.EVENT_LBUTTONDOWN, seven.pos[0] + 5, seven.pos[1] + 5)
    window.on_mouse(cv2.EVENT_LBUTTONUP, eight.pos[0] + 5, eight.pos[1] + 5)
    assert not seven.active
    assert window.calculator.display == "0"

def test_release_without_press_is_ignored(window):
    window.on_mouse(cv2.EVENT_LBUTTONUP, 50, 150)
    assert window.calculator.display == "0"

def test_click_on_display_does_nothing(window):
    window.on_mouse(cv2.EVENT_LBUTTONDOWN, 200, 50)
    window.on_mouse(cv2.EVENT_LBUTTONUP, 200, 50)
    assert window.calculator.display == "0"
    assert not any(b.active for b in window.buttons)

def test_hover_tracks_pointer(window):
    btn = next(b for b in window.buttons if b.text == "5")
    window.on_mouse(cv2.EVENT_MOUSEMOVE, btn.pos[0] + 5, btn.pos[1] + 5)
    assert [b.text for b in window.buttons if b.hover] == ["5"]
    window.on_mouse(cv2.EVENT_MOUSEMOVE, 200, 10)
    assert not any(b.hover for b in window.buttons)

# ---------------------------
# Keyboard input
# ---------------------------

def test_keyboard_input(window):
    for ch in "12*3":
        assert window.on_key(ord(ch))
    assert window.calculator.display == "12*3"
    window.on_key(13)
    assert window.calculator.display == "36"
    window.on_key(ord("n"))
    assert window.calculator.display == "-36"
    window.on_key(8)
    assert window.calculator.display == "-3"
    window.on_key(ord("c"))
    assert window.calculator.display == "0"

def test_unmapped_keys_ignored(window):
    assert window.on_key(ord("q"))
    assert window.calculator.display == "0"

def test_escape_closes(window):
    assert window.on_key(27) is False

# ---------------------------
# Rendering
# ---------------------------

def test_render_frame(window):
    frame = window.render()
    assert frame.shape == (WINDOW_HEIGHT, WINDOW_WIDTH, 3)
    assert frame.dtype == np.uint8
    assert tuple(frame[2, 2]) == DISPLAY_COLOR
    # the keypad background shows through the gap between the first two buttons
    gap_x = window.buttons[1].pos[0] - 1
    assert tuple(frame[window.display_height + 1, gap_x]) == KEYPAD_COLOR

def test_render_shows_display_text(window):
    blank = window.render()
    window.calculator.apply("8")
    drawn = window.render()
    top = slice(0, window.display_height)
    assert not np.array_equal(blank[top], drawn[top])
    # the keypad is unchanged
    assert np.array_equal(blank[window.display_height:], drawn[window.display_height:])

def test_fit_text_keeps_short_text():
    text, scale = fit_text("123", 300)
    assert text == "123"
    assert scale == calculator.DISPLAY_FONT_SCALE

def test_fit_text_shrinks_then_truncates():
    text, scale = fit_text("9" * 15, 300)
    assert text == "9" * 15
    assert scale < calculator.DISPLAY_FONT_SCALE
    text, scale = fit_text("9" * 200, 300)
    assert text.startswith("..")
    assert text.endswith("9")
    assert scale == MIN_DISPLAY_FONT_SCALE

# ---------------------------
# CLI
# ---------------------------

def test_main_press(capsys):
    assert main(["--press", "1 + 2 = + 3 ="]) == 0
    assert capsys.readouterr().out.strip() == "6"

def test_main_press_error_display(capsys):
    assert main(["--press", "5 / 0 ="]) == 0
    assert capsys.readouterr().out.strip() == "Error"

def test_main_press_unknown_label(capsys):
    assert main(["--press", "1 + x"]) == 2
    assert "unknown button label" in capsys.readouterr().err

def test_main_opens_window(monkeypatch):
    opened = []

    def fake_run(self):
        opened.append((self.width, self.height))

    monkeypatch.setattr(CalculatorWindow, "run", fake_run)
    assert main(["--width", "320", "--height", "400"]) == 0
    assert opened == [(320, 400)]

def test_main_rejects_tiny_window():
    with pytest.raises(SystemExit):
        main(["--width", "10"])

def test_window_uses_given_calculator():
    calc = Calculator()
    calc.apply("4")
    assert CalculatorWindow(calc).calculator.display == "4"
