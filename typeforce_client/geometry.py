"""Point and frame rectangle primitives shared by layout, force and interaction code."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

MIN_FRAME_WIDTH = 60.0
MIN_FRAME_HEIGHT = 40.0

Bounds = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalized(self) -> "Point":
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length == 0.0:
            return Point(0.0, 0.0)
        return Point(self.x / length, self.y / length)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass
class FrameRect:
    """Axis-aligned text frame. Width and height never drop below the frame minimums."""

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self) -> None:
        self.width = max(MIN_FRAME_WIDTH, float(self.width))
        self.height = max(MIN_FRAME_HEIGHT, float(self.height))

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def top_left(self) -> Point:
        return Point(self.left, self.top)

    @property
    def bottom_right(self) -> Point:
        return Point(self.right, self.bottom)

    def bounds(self) -> Bounds:
        return (self.left, self.top, self.right, self.bottom)

    def contains(self, point: Point) -> bool:
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom

    def move_to(self, left: float, top: float) -> None:
        self.left = float(left)
        self.top = float(top)

    def resize(self, width: float, height: float) -> None:
        self.width = max(MIN_FRAME_WIDTH, float(width))
        self.height = max(MIN_FRAME_HEIGHT, float(height))
