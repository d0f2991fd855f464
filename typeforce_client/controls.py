"""Field and typography parameters as driven by external UI controls.

Raw control values arrive as strings or numbers. Anything that does not parse to
a finite number is rejected and the last known-good value is kept.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from typeforce_client.force_field import FieldShape, ForceMode, PointerField, PushDirection
from typeforce_client.geometry import Point

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")

DEFAULT_RADIUS = 120.0
DEFAULT_STRENGTH = 0.08
DEFAULT_MIN_RADIUS = 10.0
DEFAULT_MAX_RADIUS = 200.0
WHEEL_RADIUS_STEP = 3.0


def coerce_number(raw: Any, last_good: float, *, label: str = "value") -> float:
    """Parse ``raw`` as a finite float, falling back to ``last_good``."""
    if isinstance(raw, bool):
        return last_good
    try:
        value = float(raw)
    except (TypeError, ValueError):
        _CLIENT_LOGGER.debug("Ignoring unparsable %s %r; keeping %s", label, raw, last_good)
        return last_good
    if not math.isfinite(value):
        _CLIENT_LOGGER.debug("Ignoring non-finite %s %r; keeping %s", label, raw, last_good)
        return last_good
    return value


def radius_scale_factor(current_radius: float, new_radius: float) -> float:
    """Scale applied to the field visuals when the radius changes."""
    if current_radius > 0:
        return new_radius / current_radius
    return 1.0


def _coerce_enum(enum_cls, raw: Any, fallback):
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        _CLIENT_LOGGER.debug("Ignoring unknown %s %r; keeping %s", enum_cls.__name__, raw, fallback.value)
        return fallback


@dataclass
class FieldSettings:
    """Mutable field parameters owned by the application context."""

    radius: float = DEFAULT_RADIUS
    strength: float = DEFAULT_STRENGTH
    shape: FieldShape = FieldShape.CIRCLE
    mode: ForceMode = ForceMode.PUSH
    direction: PushDirection = PushDirection.RIGHT
    min_radius: float = DEFAULT_MIN_RADIUS
    max_radius: float = DEFAULT_MAX_RADIUS

    def set_radius(self, raw: Any) -> float:
        """Set the radius from a control value; returns the visual scale factor."""
        value = coerce_number(raw, self.radius, label="radius")
        value = max(self.min_radius, min(self.max_radius, value))
        factor = radius_scale_factor(self.radius, value)
        self.radius = value
        return factor

    def adjust_radius_by_wheel(self, delta_y: float) -> Optional[float]:
        """Grow on scroll up, shrink on scroll down; returns the scale factor if changed."""
        step = WHEEL_RADIUS_STEP if delta_y < 0 else -WHEEL_RADIUS_STEP
        new_radius = float(round(max(self.min_radius, min(self.max_radius, self.radius + step))))
        if new_radius == self.radius:
            return None
        factor = radius_scale_factor(self.radius, new_radius)
        self.radius = new_radius
        return factor

    def set_strength(self, raw: Any) -> float:
        self.strength = coerce_number(raw, self.strength, label="strength")
        return self.strength

    def set_shape(self, raw: Any) -> FieldShape:
        self.shape = _coerce_enum(FieldShape, raw, self.shape)
        return self.shape

    def set_mode(self, raw: Any) -> ForceMode:
        self.mode = _coerce_enum(ForceMode, raw, self.mode)
        return self.mode

    def set_direction(self, raw: Any) -> PushDirection:
        self.direction = _coerce_enum(PushDirection, raw, self.direction)
        return self.direction

    def cycle_direction(self) -> PushDirection:
        self.direction = self.direction.cycled()
        _CLIENT_LOGGER.debug("Square push direction -> %s", self.direction.value)
        return self.direction

    def field_at(self, center: Point) -> PointerField:
        return PointerField(
            center=center,
            radius=self.radius,
            strength=self.strength,
            shape=self.shape,
            mode=self.mode,
            direction=self.direction,
        )
