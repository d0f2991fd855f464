"""Pointer force field: per-tick displacement and rotation of glyphs.

Each apply function is a pure step over (current glyph state, field): it mutates
glyph position or rotation in place and returns the number of glyphs it changed.
Repeated ticks compound because every step starts from the current position.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Sequence, Tuple

from typeforce_client.geometry import Point
from typeforce_client.glyph_model import Glyph

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")

SQUARE_PUSH_SCALE = 0.5


class FieldShape(str, Enum):
    CIRCLE = "circle"
    SQUARE = "square"


class ForceMode(str, Enum):
    PUSH = "push"
    PULL = "pull"
    SPIN = "spin"


class PushDirection(str, Enum):
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"
    UP = "up"

    def cycled(self) -> "PushDirection":
        order = _DIRECTION_ORDER
        return order[(order.index(self) + 1) % len(order)]

    @property
    def unit(self) -> Tuple[float, float]:
        return _DIRECTION_UNITS[self]


_DIRECTION_ORDER: Tuple[PushDirection, ...] = (
    PushDirection.RIGHT,
    PushDirection.DOWN,
    PushDirection.LEFT,
    PushDirection.UP,
)
_DIRECTION_UNITS: Dict[PushDirection, Tuple[float, float]] = {
    PushDirection.RIGHT: (1.0, 0.0),
    PushDirection.DOWN: (0.0, 1.0),
    PushDirection.LEFT: (-1.0, 0.0),
    PushDirection.UP: (0.0, -1.0),
}


@dataclass(frozen=True)
class PointerField:
    center: Point
    radius: float
    strength: float
    shape: FieldShape = FieldShape.CIRCLE
    mode: ForceMode = ForceMode.PUSH
    direction: PushDirection = PushDirection.RIGHT

    def is_valid(self) -> bool:
        return (
            self.center.is_finite()
            and math.isfinite(self.radius)
            and self.radius > 0
            and math.isfinite(self.strength)
        )


def _outside_bounding_square(position: Point, center: Point, radius: float) -> bool:
    return (
        position.x < center.x - radius
        or position.x > center.x + radius
        or position.y < center.y - radius
        or position.y > center.y + radius
    )


def _apply_radial(glyphs: Iterable[Glyph], center: Point, radius: float, strength: float, sign: float) -> int:
    affected = 0
    for glyph in glyphs:
        position = glyph.center
        if _outside_bounding_square(position, center, radius):
            continue
        away = position - center
        dist = away.length()
        if dist >= radius or dist == 0.0:
            continue
        force = (radius - dist) * strength * sign
        unit = away.normalized()
        glyph.x += unit.x * force
        glyph.y += unit.y * force
        affected += 1
    return affected


def apply_circle_push(glyphs: Iterable[Glyph], center: Point, radius: float, strength: float) -> int:
    """Push glyphs within ``radius`` away from ``center`` by ``(radius - d) * strength``."""
    return _apply_radial(glyphs, center, radius, strength, 1.0)


def apply_circle_pull(glyphs: Iterable[Glyph], center: Point, radius: float, strength: float) -> int:
    return _apply_radial(glyphs, center, radius, strength, -1.0)


def spin_target_angle(glyph: Glyph, center: Point) -> float:
    """Angle in degrees of the vector from the glyph centre to the pointer."""
    position = glyph.center
    return math.degrees(math.atan2(center.y - position.y, center.x - position.x))


def apply_circle_spin(glyphs: Iterable[Glyph], center: Point, radius: float, strength: float) -> int:
    """Ease each glyph's rotation toward the radial line; closer glyphs turn faster."""
    affected = 0
    for glyph in glyphs:
        position = glyph.center
        if _outside_bounding_square(position, center, radius):
            continue
        dist = (position - center).length()
        if dist >= radius:
            continue
        target = spin_target_angle(glyph, center)
        weight = (1.0 - dist / radius) * strength
        glyph.rotation += (target - glyph.rotation) * weight
        affected += 1
    return affected


def square_push_offset(position: Point, center: Point, radius: float, strength: float, direction: PushDirection) -> Point:
    """Displacement for a point inside the square; zero at the pushing edge."""
    span = radius * 2.0
    if direction is PushDirection.RIGHT:
        distance = (center.x + radius) - position.x
    elif direction is PushDirection.LEFT:
        distance = position.x - (center.x - radius)
    elif direction is PushDirection.DOWN:
        distance = (center.y + radius) - position.y
    else:
        distance = position.y - (center.y - radius)
    t = max(0.0, min(1.0, distance / span))
    magnitude = t * t * radius * SQUARE_PUSH_SCALE * strength
    ux, uy = direction.unit
    return Point(ux * magnitude, uy * magnitude)


def apply_square_push(
    glyphs: Iterable[Glyph],
    center: Point,
    radius: float,
    strength: float,
    direction: PushDirection = PushDirection.RIGHT,
) -> int:
    """Wall-like push along ``direction``; the perpendicular axis is untouched."""
    left = center.x - radius
    right = center.x + radius
    top = center.y - radius
    bottom = center.y + radius
    affected = 0
    for glyph in glyphs:
        position = glyph.center
        if not (left < position.x < right and top < position.y < bottom):
            continue
        offset = square_push_offset(position, center, radius, strength, direction)
        if offset.x == 0.0 and offset.y == 0.0:
            continue
        glyph.x += offset.x
        glyph.y += offset.y
        affected += 1
    return affected


def apply_square_pull(
    glyphs: Iterable[Glyph],
    center: Point,
    radius: float,
    strength: float,
    direction: PushDirection = PushDirection.RIGHT,
) -> int:
    return 0


def apply_square_spin(
    glyphs: Iterable[Glyph],
    center: Point,
    radius: float,
    strength: float,
    direction: PushDirection = PushDirection.RIGHT,
) -> int:
    return 0


_CircleFn = Callable[[Iterable[Glyph], Point, float, float], int]
_SquareFn = Callable[[Iterable[Glyph], Point, float, float, PushDirection], int]

_CIRCLE_FORCES: Dict[ForceMode, _CircleFn] = {
    ForceMode.PUSH: apply_circle_push,
    ForceMode.PULL: apply_circle_pull,
    ForceMode.SPIN: apply_circle_spin,
}
_SQUARE_FORCES: Dict[ForceMode, _SquareFn] = {
    ForceMode.PUSH: apply_square_push,
    ForceMode.PULL: apply_square_pull,
    ForceMode.SPIN: apply_square_spin,
}


def apply_field(glyphs: Sequence[Glyph], field: PointerField) -> int:
    """Apply one tick of ``field`` to ``glyphs``; returns how many glyphs changed."""
    if not glyphs:
        return 0
    if not field.is_valid():
        _CLIENT_LOGGER.debug("Skipping force tick for invalid field %s", field)
        return 0
    if field.shape is FieldShape.SQUARE:
        return _SQUARE_FORCES[field.mode](glyphs, field.center, field.radius, field.strength, field.direction)
    return _CIRCLE_FORCES[field.mode](glyphs, field.center, field.radius, field.strength)
