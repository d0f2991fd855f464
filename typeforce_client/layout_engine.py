"""Word-wrapping glyph layout inside the text frame."""
from __future__ import annotations

import logging
from typing import List

from typeforce_client.geometry import FrameRect
from typeforce_client.glyph_model import Glyph, GlyphMeasurer, TypographyParams

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")

FRAME_PADDING = 10.0
# Approximate ascent as a fraction of the font size. A measured ascent ratio may be
# passed to layout() instead; positions only shift by the ascent difference.
BASELINE_RATIO = 0.85


def measure_word(word: str, typography: TypographyParams, measure: GlyphMeasurer) -> float:
    """Sum of glyph advances plus tracking between glyphs (none after the last)."""
    if not word:
        return 0.0
    tracking = typography.tracking_px
    width = 0.0
    for index, char in enumerate(word):
        width += measure(char, typography.font_size)
        if index < len(word) - 1:
            width += tracking
    return width


def starts_new_line(x: float, word_width: float, line_start_x: float, usable_width: float) -> bool:
    return x + word_width > line_start_x + usable_width


def layout(
    text: str,
    frame: FrameRect,
    typography: TypographyParams,
    measure: GlyphMeasurer,
    *,
    baseline_ratio: float = BASELINE_RATIO,
) -> List[Glyph]:
    """Lay ``text`` out glyph by glyph inside ``frame``.

    Words are split on single spaces, so runs of spaces produce empty words that
    still advance the cursor. A word wider than the frame is placed on its own
    line and overflows; there is no hyphenation.
    """
    glyphs: List[Glyph] = []
    if not text:
        return glyphs

    line_start_x = frame.left + FRAME_PADDING
    usable_width = frame.width - 2 * FRAME_PADDING
    tracking = typography.tracking_px
    line_height = typography.line_height
    baseline_offset = typography.font_size * baseline_ratio
    space_advance = measure_word(" ", typography, measure)

    x = line_start_x
    y = frame.top + FRAME_PADDING
    line_index = 0

    for word_index, word in enumerate(text.split(" ")):
        word_width = measure_word(word, typography, measure)
        if starts_new_line(x, word_width, line_start_x, usable_width):
            x = line_start_x
            y += line_height
            line_index += 1

        for char in word:
            advance = measure(char, typography.font_size)
            glyphs.append(
                Glyph.placed(
                    char,
                    x,
                    y + baseline_offset,
                    advance=advance,
                    line_index=line_index,
                    word_index=word_index,
                )
            )
            x += advance + tracking

        x += space_advance + tracking

    _CLIENT_LOGGER.debug(
        "Layout produced %d glyphs on %d line(s) (frame=%s font_size=%.1f)",
        len(glyphs),
        line_index + 1,
        frame.bounds(),
        typography.font_size,
    )
    return glyphs


def translate_glyphs(glyphs: List[Glyph], dx: float, dy: float) -> None:
    """Shift every glyph by (dx, dy), keeping force offsets intact."""
    if dx == 0 and dy == 0:
        return
    for glyph in glyphs:
        glyph.translate(dx, dy)
