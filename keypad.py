"""
The TinyCalc keypad: a 5x4 grid of buttons drawn with OpenCV.

Buttons only know how to lay themselves out, draw themselves and answer hit
tests. What a press means is up to the accumulator.
"""
import cv2

# ---------------- Layout ----------------
KEYPAD_LABELS = [
    ["+/-", "AC", "DEL", "/"],
    ["7", "8", "9", "*"],
    ["4", "5", "6", "-"],
    ["1", "2", "3", "+"],
    ["%", "0", ".", "="],
]
ROWS = len(KEYPAD_LABELS)
COLS = len(KEYPAD_LABELS[0])
GAP = 4  # pixels between neighbouring buttons

# ---------------- Look ----------------
# Colours are BGR, as OpenCV expects.
BUTTON_COLOR = (58, 48, 42)        # #2A303A
BORDER_COLOR = (128, 128, 128)
HOVER_BORDER_COLOR = (255, 255, 255)
TEXT_COLOR = (255, 255, 255)
FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.8
FONT_THICKNESS = 2
PRESS_LIGHTEN = 20     # added to each channel while pressed
PRESS_SHRINK = 0.05    # fraction of the size lost while pressed


class Button:
    """
    A single keypad button.

    Attributes:
        pos (tuple): (x, y) of the top-left corner.
        size (tuple): (width, height).
        text (str): The label, which is also what gets sent to the calculator.
        color (tuple): Base BGR fill colour.
        active (bool): True while the mouse button is held down on it.
        hover (bool): True while the pointer is over it.
    """

    def __init__(self, pos, text, size=(96, 76), color=BUTTON_COLOR):
        self.pos = pos
        self.size = size
        self.text = text
        self.color = color
        self.active = False
        self.hover = False

    def __repr__(self):
        return f"Button({self.text!r}, pos={self.pos}, size={self.size})"

    def hit(self, px, py):
        """True if (px, py) lies inside the button, edges included."""
        x, y = self.pos
        w, h = self.size
        return x <= px <= x + w and y <= py <= y + h

    def fill_color(self):
        if not self.active:
            return self.color
        return tuple(min(255, c + PRESS_LIGHTEN) for c in self.color)

    def animated_rect(self):
        """Return (x, y, w, h) of the button as drawn, shrunk around its centre while pressed."""
        x, y = self.pos
        w, h = self.size
        if not self.active:
            return x, y, w, h
        scale = 1.0 - PRESS_SHRINK
        new_w, new_h = int(round(w * scale)), int(round(h * scale))
        cx, cy = x + w / 2, y + h / 2
        return int(round(cx - new_w / 2)), int(round(cy - new_h / 2)), new_w, new_h

    def draw(self, img):
        """Draw the button background, border and centred label onto `img`."""
        x, y, w, h = self.animated_rect()
        cv2.rectangle(img, (x, y), (x + w, y + h), self.fill_color(), cv2.FILLED)

        border_color = HOVER_BORDER_COLOR if self.hover else BORDER_COLOR
        cv2.rectangle(img, (x, y), (x + w, y + h), border_color, 1)

        text_size = cv2.getTextSize(self.text, FONT, FONT_SCALE, FONT_THICKNESS)[0]
        text_x = x + (w - text_size[0]) // 2
        text_y = y + (h + text_size[1]) // 2
        cv2.putText(img, self.text, (text_x, text_y), FONT, FONT_SCALE, TEXT_COLOR,
                    FONT_THICKNESS, cv2.LINE_AA)


def build_buttons(origin, size, gap=GAP, labels=KEYPAD_LABELS):
    """
    Lay the keypad out inside a rectangle.

    Each label gets an equal cell; the button sits inside its cell with half
    the gap left free on every side.

    Args:
        origin (tuple): (x, y) of the keypad's top-left corner.
        size (tuple): (width, height) of the keypad area.
        gap (int): Space between neighbouring buttons.
        labels (list): Rows of button labels.
    Returns:
        list: Buttons in row-major order.
    """
    ox, oy = origin
    width, height = size
    cell_w = width / len(labels[0])
    cell_h = height / len(labels)

    buttons = []
    for row_i, row in enumerate(labels):
        for col_i, text in enumerate(row):
            x = ox + col_i * cell_w + gap / 2
            y = oy + row_i * cell_h + gap / 2
            buttons.append(Button((int(x), int(y)), text, (int(cell_w - gap), int(cell_h - gap))))
    return buttons


def button_at(buttons, px, py):
    """Return the first button under (px, py), or None."""
    for btn in buttons:
        if btn.hit(px, py):
            return btn
    return None
