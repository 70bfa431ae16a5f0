"""
TinyCalc: a small desktop calculator window.

The window is split in two: the top fifth shows the display, the rest is a
5x4 keypad. Buttons react to the mouse (hover highlight, press feedback) and a
full click, press and release on the same button, sends its label to the
calculator. The keyboard works too: digits and operators type themselves,
Enter evaluates, Backspace deletes, "c" clears, "n" toggles the sign and ESC
closes the window.

Libraries:
    - OpenCV: window, drawing and mouse events.
    - NumPy: the canvas every frame is drawn on.

Usage:
    tinycalc                         # open the window
    tinycalc --press "1 + 2 ="       # no window, print the display
"""
import argparse
import logging
import sys

import cv2
import numpy as np

from accumulator import Calculator
from keypad import FONT, FONT_THICKNESS, TEXT_COLOR, build_buttons, button_at

logger = logging.getLogger(__name__)

# ---------------- Window Settings ----------------
WINDOW_NAME = "TinyCalc"
WINDOW_WIDTH = 400
WINDOW_HEIGHT = 500
DISPLAY_COLOR = (34, 26, 20)      # #141A22 (BGR)
KEYPAD_COLOR = (58, 48, 42)       # #2A303A (BGR)
DISPLAY_FONT_SCALE = 1.2
MIN_DISPLAY_FONT_SCALE = 0.5
DISPLAY_PADDING = 12
FRAME_DELAY_MS = 15
ESC = 27

# waitKey codes that do not map to a label one-to-one.
KEY_SHORTCUTS = {
    13: "=",      # Enter
    10: "=",
    8: "DEL",     # Backspace
    127: "DEL",
    ord("c"): "AC",
    ord("n"): "+/-",
}
TYPED_LABELS = set("0123456789.+-*/%=")


def fit_text(text, max_width, scale=DISPLAY_FONT_SCALE):
    """
    Shrink the font until `text` fits in `max_width` pixels.

    If it still does not fit at MIN_DISPLAY_FONT_SCALE, characters are dropped
    from the front (the end of a number is what matters) and replaced by "..".

    Returns:
        tuple: (text, scale) to draw with.
    """
    def width(t, s):
        return cv2.getTextSize(t, FONT, s, FONT_THICKNESS)[0][0]

    while scale > MIN_DISPLAY_FONT_SCALE and width(text, scale) > max_width:
        scale = round(scale - 0.1, 2)
    scale = max(scale, MIN_DISPLAY_FONT_SCALE)
    if width(text, scale) <= max_width:
        return text, scale

    tail = text
    while len(tail) > 1 and width(".." + tail, scale) > max_width:
        tail = tail[1:]
    return ".." + tail, scale


class CalculatorWindow:
    """
    The calculator window: renders frames and turns mouse and keyboard input
    into button presses.
    """

    def __init__(self, calculator=None, width=WINDOW_WIDTH, height=WINDOW_HEIGHT):
        self.calculator = calculator or Calculator()
        self.width = width
        self.height = height
        self.display_height = height // 5
        self.buttons = build_buttons((0, self.display_height),
                                     (width, height - self.display_height))
        self._pressed = None

    # ---------------- Input ----------------
    def press(self, label):
        display = self.calculator.apply(label)
        logger.debug("Button %s -> %s", label, display)
        return display

    def on_mouse(self, event, x, y, flags=None, param=None):
        """OpenCV mouse callback."""
        hovered = button_at(self.buttons, x, y)
        for btn in self.buttons:
            btn.hover = btn is hovered

        if event == cv2.EVENT_LBUTTONDOWN:
            if hovered is not None:
                hovered.active = True
                self._pressed = hovered
        elif event == cv2.EVENT_LBUTTONUP:
            pressed, self._pressed = self._pressed, None
            if pressed is None:
                return
            pressed.active = False
            # Releasing somewhere else cancels the click.
            if pressed is hovered:
                self.press(pressed.text)

    def on_key(self, code):
        """
        Handle a key code from cv2.waitKey.

        Returns:
            bool: False when the window should close.
        """
        if code == ESC:
            return False
        label = KEY_SHORTCUTS.get(code)
        if label is None and 0 <= code < 256 and chr(code) in TYPED_LABELS:
            label = chr(code)
        if label is not None:
            self.press(label)
        return True

    # ---------------- Drawing ----------------
    def render(self):
        """Draw one frame and return it as a BGR image."""
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)

        cv2.rectangle(frame, (0, 0), (self.width - 1, self.display_height - 1),
                      DISPLAY_COLOR, cv2.FILLED)
        text, scale = fit_text(self.calculator.display, self.width - 2 * DISPLAY_PADDING)
        (text_w, text_h), _ = cv2.getTextSize(text, FONT, scale, FONT_THICKNESS)
        text_x = (self.width - text_w) // 2
        text_y = (self.display_height + text_h) // 2
        cv2.putText(frame, text, (text_x, text_y), FONT, scale, TEXT_COLOR,
                    FONT_THICKNESS, cv2.LINE_AA)

        cv2.rectangle(frame, (0, self.display_height), (self.width - 1, self.height - 1),
                      KEYPAD_COLOR, cv2.FILLED)
        for btn in self.buttons:
            btn.draw(frame)
        return frame

    # ---------------- Main Loop ----------------
    def run(self):
        """Show the window until ESC is pressed or the window is closed."""
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_AUTOSIZE)
        cv2.setMouseCallback(WINDOW_NAME, self.on_mouse)
        logger.info("Opened %s window (%dx%d)", WINDOW_NAME, self.width, self.height)
        try:
            while True:
                cv2.imshow(WINDOW_NAME, self.render())
                code = cv2.waitKey(FRAME_DELAY_MS)
                if code != -1 and not self.on_key(code & 0xFF):
                    break
                if cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
                    break
        finally:
            cv2.destroyAllWindows()
        logger.info("Closed %s window", WINDOW_NAME)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="TinyCalc desktop calculator.")
    parser.add_argument(
        "--width",
        type=int,
        default=WINDOW_WIDTH,
        help=f"Window width in pixels (default: {WINDOW_WIDTH}).",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=WINDOW_HEIGHT,
        help=f"Window height in pixels (default: {WINDOW_HEIGHT}).",
    )
    parser.add_argument(
        "--press",
        type=str,
        help='Space separated button labels to press without opening a window, e.g. "1 + 2 =".',
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING).",
    )
    args = parser.parse_args(argv)
    if args.width < 100 or args.height < 125:
        parser.error("window must be at least 100x125 pixels")
    return args


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    calculator = Calculator()
    if args.press is not None:
        for label in args.press.split():
            try:
                calculator.apply(label)
            except ValueError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                return 2
        print(calculator.display)
        return 0

    CalculatorWindow(calculator, args.width, args.height).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
