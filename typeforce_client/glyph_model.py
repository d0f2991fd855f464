"""Glyph and typography value types."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Tuple

from typeforce_client.geometry import Bounds, Point

DEFAULT_FONT_SIZE = 60.0
DEFAULT_LINE_HEIGHT_FACTOR = 1.25
DEFAULT_FONT_COLOR = "white"
DEFAULT_FONT_FAMILY = "ABC Diatype Rounded"

# (char, font_size) -> horizontal advance in pixels
GlyphMeasurer = Callable[[str, float], float]


@dataclass(frozen=True)
class TypographyParams:
    """Values read once at the start of a reflow."""

    font_size: float = DEFAULT_FONT_SIZE
    line_height_factor: float = DEFAULT_LINE_HEIGHT_FACTOR
    tracking_em: float = 0.0
    font_color: str = DEFAULT_FONT_COLOR
    font_family: str = DEFAULT_FONT_FAMILY

    @property
    def tracking_px(self) -> float:
        return self.tracking_em * self.font_size

    @property
    def line_height(self) -> float:
        return self.font_size * self.line_height_factor

    def with_changes(self, **changes: object) -> "TypographyParams":
        return replace(self, **changes)  # type: ignore[arg-type]


@dataclass
class Glyph:
    """One laid-out character.

    ``base_x``/``base_y`` are set by the reflow that created the glyph. ``x``/``y``
    and ``rotation`` start equal to the base placement and are then mutated in
    place by the force field and by drag finalisation.

    ``x``/``y`` is the baseline origin. ``pivot_dx``/``pivot_dy`` locate the centre
    of the rendered glyph box relative to it; forces are measured from that centre
    and rotation turns about it.
    """

    char: str
    base_x: float
    base_y: float
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    advance: float = 0.0
    pivot_dx: float = 0.0
    pivot_dy: float = 0.0
    line_index: int = 0
    word_index: int = 0
    node: Optional[object] = field(default=None, repr=False, compare=False)

    @classmethod
    def placed(
        cls,
        char: str,
        x: float,
        y: float,
        *,
        advance: float = 0.0,
        line_index: int = 0,
        word_index: int = 0,
    ) -> "Glyph":
        return cls(
            char=char,
            base_x=x,
            base_y=y,
            x=x,
            y=y,
            advance=advance,
            line_index=line_index,
            word_index=word_index,
        )

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def center(self) -> Point:
        return Point(self.x + self.pivot_dx, self.y + self.pivot_dy)

    @property
    def base_position(self) -> Point:
        return Point(self.base_x, self.base_y)

    def offset(self) -> Point:
        """Force-induced displacement relative to the base placement."""
        return Point(self.x - self.base_x, self.y - self.base_y)

    def translate(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy
        self.base_x += dx
        self.base_y += dy


@dataclass(frozen=True)
class GlyphSnapshot:
    char: str
    x: float
    y: float
    rotation: float


@dataclass(frozen=True)
class ExportSnapshot:
    """Immutable view of the arrangement for export collaborators."""

    glyphs: Tuple[GlyphSnapshot, ...]
    frame_bounds: Bounds
    typography: TypographyParams


def snapshot_glyphs(glyphs, frame_bounds: Bounds, typography: TypographyParams) -> ExportSnapshot:
    return ExportSnapshot(
        glyphs=tuple(GlyphSnapshot(g.char, g.x, g.y, g.rotation) for g in glyphs),
        frame_bounds=tuple(frame_bounds),  # type: ignore[arg-type]
        typography=typography,
    )
