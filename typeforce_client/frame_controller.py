"""Drag/resize state machine for the text frame and its bottom-right handle."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from typeforce_client.geometry import FrameRect, MIN_FRAME_HEIGHT, MIN_FRAME_WIDTH, Point

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")

HANDLE_SIZE = 8.0
HANDLE_TOLERANCE = 6.0


class FrameState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


class FrameHit(str, Enum):
    HANDLE = "handle"
    BODY = "body"
    BACKGROUND = "background"


class FrameController:
    """Owns the frame rectangle and keeps the handle on its bottom-right corner.

    ``reflow_fn`` is called synchronously after every resize step.
    ``translate_fn(dx, dy)`` is called once when a drag is released.
    ``geometry_fn(frame)`` is notified after every geometry change so the scene
    can move the frame and handle visuals. ``handle_hit_fn(point)`` replaces the
    geometric handle test when the handle is hit-tested through the scene.
    """

    def __init__(
        self,
        frame: FrameRect,
        *,
        reflow_fn: Callable[[], None],
        translate_fn: Callable[[float, float], None],
        geometry_fn: Optional[Callable[[FrameRect], None]] = None,
        handle_hit_fn: Optional[Callable[[Point], bool]] = None,
    ) -> None:
        self._frame = frame
        self._handle_hit = handle_hit_fn
        self._reflow = reflow_fn
        self._translate = translate_fn
        self._geometry_changed = geometry_fn
        self._state = FrameState.IDLE
        self._grab_offset: Optional[Point] = None
        self._origin_at_grab: Optional[Point] = None

    @property
    def frame(self) -> FrameRect:
        return self._frame

    @property
    def handle_position(self) -> Point:
        return self._frame.bottom_right

    @property
    def state(self) -> FrameState:
        return self._state

    def hit_test(self, point: Point) -> FrameHit:
        if self._hits_handle(point):
            return FrameHit.HANDLE
        if self._frame.contains(point):
            return FrameHit.BODY
        return FrameHit.BACKGROUND

    def pointer_down(self, point: Point) -> FrameHit:
        """Start a resize or drag depending on what ``point`` hits."""
        hit = self.hit_test(point)
        if hit is FrameHit.HANDLE:
            self._state = FrameState.RESIZING
            _CLIENT_LOGGER.debug("Resize started at %s frame=%s", point, self._frame.bounds())
        elif hit is FrameHit.BODY:
            self._state = FrameState.DRAGGING
            self._grab_offset = self._frame.top_left - point
            self._origin_at_grab = self._frame.top_left
            _CLIENT_LOGGER.debug("Drag started at %s offset=%s", point, self._grab_offset)
        return hit

    def pointer_move(self, point: Point) -> bool:
        """Advance an active drag or resize; returns False when idle."""
        if self._state is FrameState.RESIZING:
            top_left = self._frame.top_left
            self._frame.resize(
                max(MIN_FRAME_WIDTH, point.x - top_left.x),
                max(MIN_FRAME_HEIGHT, point.y - top_left.y),
            )
            self._notify_geometry()
            self._reflow()
            return True
        if self._state is FrameState.DRAGGING and self._grab_offset is not None:
            target = point + self._grab_offset
            self._frame.move_to(target.x, target.y)
            self._notify_geometry()
            return True
        return False

    def pointer_up(self) -> FrameState:
        """Finish the current gesture and return the state that just ended."""
        finished = self._state
        if finished is FrameState.DRAGGING and self._origin_at_grab is not None:
            delta = self._frame.top_left - self._origin_at_grab
            if delta.x or delta.y:
                self._translate(delta.x, delta.y)
            _CLIENT_LOGGER.debug("Drag finished; frame=%s delta=%s", self._frame.bounds(), delta)
        elif finished is FrameState.RESIZING:
            _CLIENT_LOGGER.debug("Resize finished; frame=%s", self._frame.bounds())
        self._state = FrameState.IDLE
        self._grab_offset = None
        self._origin_at_grab = None
        return finished

    def set_geometry(self, left: float, top: float, width: float, height: float) -> None:
        """Place the frame programmatically; glyphs are reflowed, not translated."""
        self._frame.move_to(left, top)
        self._frame.resize(width, height)
        self._notify_geometry()
        self._reflow()

    def _hits_handle(self, point: Point) -> bool:
        if self._handle_hit is not None:
            return self._handle_hit(point)
        handle = self._frame.bottom_right
        reach = HANDLE_SIZE / 2.0 + HANDLE_TOLERANCE
        return abs(point.x - handle.x) <= reach and abs(point.y - handle.y) <= reach

    def _notify_geometry(self) -> None:
        if self._geometry_changed is not None:
            self._geometry_changed(self._frame)
