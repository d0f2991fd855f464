"""Routes pointer and key events to the frame controller or the force field."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional

from typeforce_client.controls import FieldSettings
from typeforce_client.force_field import FieldShape, ForceMode, PointerField
from typeforce_client.frame_controller import FrameController, FrameHit, FrameState
from typeforce_client.geometry import Point
from typeforce_client.tick_scheduler import TickScheduler
from typeforce_config.input_bindings import ControlScheme, default_scheme

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"
    SELECTING = "selecting"
    TEXT_EDITING = "text_editing"


_MODAL_STATES = (InteractionState.SELECTING, InteractionState.TEXT_EDITING)


class AxisConstraint:
    """Locks pointer movement to the dominant axis while the modifier is held."""

    def __init__(self) -> None:
        self._anchor: Optional[Point] = None

    @property
    def anchor(self) -> Optional[Point]:
        return self._anchor

    def apply(self, point: Point, engaged: bool) -> Point:
        if not engaged:
            self._anchor = None
            return point
        if self._anchor is None:
            self._anchor = point
        anchor = self._anchor
        if abs(point.x - anchor.x) > abs(point.y - anchor.y):
            return Point(point.x, anchor.y)
        return Point(anchor.x, point.y)


class InteractionDispatcher:
    """Arbitrates pointer/keyboard input between frame gestures and the force field.

    Exactly one ``InteractionState`` is active. Selecting and TextEditing are
    modal and suspend frame and force handling until exited. Pointer moves while
    idle become force ticks through the ``TickScheduler``; ``force_fn`` receives
    the coalesced ``PointerField``.
    """

    def __init__(
        self,
        frame_controller: FrameController,
        field_settings: FieldSettings,
        *,
        scheduler: TickScheduler[PointerField],
        key_scheme: Optional[ControlScheme] = None,
        on_modal_change: Optional[Callable[[InteractionState, InteractionState], None]] = None,
        on_field_settings_change: Optional[Callable[[FieldSettings], None]] = None,
    ) -> None:
        self._frame = frame_controller
        self._field = field_settings
        self._scheduler = scheduler
        self._scheme = key_scheme or default_scheme()
        self._on_modal_change = on_modal_change
        self._on_field_settings_change = on_field_settings_change
        self._modal: Optional[InteractionState] = None
        self._axis = AxisConstraint()
        self._actions: Dict[str, Callable[[], None]] = {
            "shape_circle": lambda: self._set_shape(FieldShape.CIRCLE),
            "shape_square": self._square_key,
            "mode_push": lambda: self._set_mode(ForceMode.PUSH),
            "mode_pull": lambda: self._set_mode(ForceMode.PULL),
            "mode_spin": lambda: self._set_mode(ForceMode.SPIN),
            "text_edit_toggle": self.toggle_text_editing,
            "text_edit_exit": self.exit_text_editing,
        }

    @property
    def state(self) -> InteractionState:
        if self._modal is not None:
            return self._modal
        frame_state = self._frame.state
        if frame_state is FrameState.DRAGGING:
            return InteractionState.DRAGGING
        if frame_state is FrameState.RESIZING:
            return InteractionState.RESIZING
        return InteractionState.IDLE

    @property
    def field_settings(self) -> FieldSettings:
        return self._field

    def register_action(self, action_name: str, handler: Callable[[], None]) -> None:
        """Associate a key-binding action with a callable."""
        self._actions[action_name] = handler

    # Pointer ------------------------------------------------------------

    def pointer_down(self, point: Point) -> Optional[FrameHit]:
        if self._modal is not None:
            return None
        if self._frame.state is not FrameState.IDLE:
            return None
        hit = self._frame.pointer_down(point)
        if hit is FrameHit.BACKGROUND and self._field.shape is FieldShape.SQUARE:
            self._field.cycle_direction()
            self._notify_field_change()
        return hit

    def pointer_move(self, point: Point, *, constrain_axis: bool = False) -> bool:
        """Handle a pointer move; returns True if a gesture or force tick consumed it."""
        if self._modal is not None:
            return False
        if self._frame.state is not FrameState.IDLE:
            return self._frame.pointer_move(point)
        center = self._axis.apply(point, constrain_axis)
        self._scheduler.submit(self._field.field_at(center))
        return True

    def pointer_up(self, point: Optional[Point] = None) -> InteractionState:
        if self._modal is not None:
            return self._modal
        previous = self.state
        self._frame.pointer_up()
        return previous

    def wheel(self, delta_y: float) -> Optional[float]:
        """Adjust the field radius from a wheel step; returns the visual scale factor."""
        if self._modal is not None:
            return None
        factor = self._field.adjust_radius_by_wheel(delta_y)
        if factor is not None:
            self._notify_field_change()
        return factor

    # Keys ---------------------------------------------------------------

    def key_press(self, key: str) -> bool:
        action = self._scheme.action_for(key)
        if action is None:
            return False
        if self._modal is InteractionState.TEXT_EDITING and action not in ("text_edit_exit",):
            return False
        handler = self._actions.get(action)
        if handler is None:
            _CLIENT_LOGGER.debug("No handler registered for action '%s' (key=%r)", action, key)
            return False
        handler()
        return True

    # Modal states -------------------------------------------------------

    def enter_text_editing(self) -> bool:
        return self._enter_modal(InteractionState.TEXT_EDITING)

    def exit_text_editing(self) -> bool:
        return self._exit_modal(InteractionState.TEXT_EDITING)

    def toggle_text_editing(self) -> None:
        if self._modal is InteractionState.TEXT_EDITING:
            self.exit_text_editing()
        else:
            self.enter_text_editing()

    def enter_selecting(self) -> bool:
        return self._enter_modal(InteractionState.SELECTING)

    def exit_selecting(self) -> bool:
        return self._exit_modal(InteractionState.SELECTING)

    def _enter_modal(self, state: InteractionState) -> bool:
        if self._modal is not None:
            return False
        previous = self.state
        if self._frame.state is not FrameState.IDLE:
            self._frame.pointer_up()
        self._scheduler.cancel()
        self._modal = state
        _CLIENT_LOGGER.debug("Interaction state %s -> %s", previous.value, state.value)
        if self._on_modal_change is not None:
            self._on_modal_change(previous, state)
        return True

    def _exit_modal(self, state: InteractionState) -> bool:
        if self._modal is not state:
            return False
        self._modal = None
        _CLIENT_LOGGER.debug("Interaction state %s -> idle", state.value)
        if self._on_modal_change is not None:
            self._on_modal_change(state, InteractionState.IDLE)
        return True

    # Field settings -----------------------------------------------------

    def _set_shape(self, shape: FieldShape) -> None:
        if self._field.shape is shape:
            return
        self._field.set_shape(shape)
        _CLIENT_LOGGER.debug("Shape changed to: %s", shape.value)
        self._notify_field_change()

    def _square_key(self) -> None:
        if self._field.shape is FieldShape.SQUARE:
            self._field.cycle_direction()
            self._notify_field_change()
            return
        self._set_shape(FieldShape.SQUARE)

    def _set_mode(self, mode: ForceMode) -> None:
        if self._field.mode is mode:
            return
        self._field.set_mode(mode)
        _CLIENT_LOGGER.debug("Force type changed to: %s", mode.value)
        self._notify_field_change()

    def _notify_field_change(self) -> None:
        if self._on_field_settings_change is not None:
            self._on_field_settings_change(self._field)
