"""PyQt6 widgets: the canvas view that feeds input to the dispatcher and the text overlay."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QObject, QPointF, QRectF, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QPainter
from PyQt6.QtWidgets import QFrame, QGraphicsScene, QGraphicsView, QPlainTextEdit, QWidget

from typeforce_client.canvas_controller import CanvasController
from typeforce_client.force_field import FieldShape, PushDirection
from typeforce_client.geometry import Bounds, Point
from typeforce_client.interaction_dispatcher import InteractionState
from typeforce_client.scene_adapter import TextEditorAdapter

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")


class TickTimer(QObject):
    """Single-shot ``QTimer`` exposed through the ``after``/``after_cancel`` pair."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)
        self._callback: Optional[Callable[[], None]] = None

    def after(self, delay_ms: int, callback: Callable[[], None]) -> QTimer:
        self._callback = callback
        self._timer.start(max(0, int(delay_ms)))
        return self._timer

    def after_cancel(self, handle: object) -> None:
        if handle is self._timer:
            self._timer.stop()
            self._callback = None

    def _fire(self) -> None:
        callback = self._callback
        self._callback = None
        if callback is not None:
            callback()


class _OverlayTextEdit(QPlainTextEdit):
    escape_pressed = pyqtSignal()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key.Key_Escape:
            self.escape_pressed.emit()
            event.accept()
            return
        super().keyPressEvent(event)


class OverlayTextEditor(TextEditorAdapter):
    """Plain-text editor laid over the frame while text editing is active."""

    def __init__(self, view: QGraphicsView, *, font_family: str, color: str) -> None:
        self._view = view
        self._edit = _OverlayTextEdit(view.viewport())
        self._edit.setFrameShape(QFrame.Shape.NoFrame)
        self._edit.setStyleSheet(f"background: transparent; color: {color};")
        self._font_family = font_family
        self._edit.hide()

    @property
    def widget(self) -> QPlainTextEdit:
        return self._edit

    def open(self, text: str, bounds: Bounds, font_size: float) -> None:
        left, top, right, bottom = bounds
        rect = self._view.mapFromScene(QRectF(left, top, right - left, bottom - top)).boundingRect()
        font = QFont(self._font_family)
        font.setPixelSize(max(1, int(round(font_size))))
        self._edit.setFont(font)
        self._edit.setGeometry(rect)
        self._edit.setPlainText(text)
        self._edit.show()
        self._edit.setFocus()

    def close(self) -> str:
        text = self._edit.toPlainText()
        self._edit.hide()
        self._view.setFocus()
        return text


_DIRECTION_CURSORS = {
    PushDirection.RIGHT: Qt.CursorShape.SizeHorCursor,
    PushDirection.LEFT: Qt.CursorShape.SizeHorCursor,
    PushDirection.UP: Qt.CursorShape.SizeVerCursor,
    PushDirection.DOWN: Qt.CursorShape.SizeVerCursor,
}


def field_cursor(shape: FieldShape, direction: PushDirection) -> Optional[Qt.CursorShape]:
    """Cursor showing the square push axis; None restores the default cursor."""
    if shape is not FieldShape.SQUARE:
        return None
    return _DIRECTION_CURSORS[direction]


def _key_name(event) -> str:
    if event.key() == Qt.Key.Key_Escape:
        return "Escape"
    return event.text() or ""


class CanvasView(QGraphicsView):
    """Translates Qt mouse, wheel and key events into dispatcher calls.

    Holding Shift while moving locks the field to the dominant axis.
    """

    def __init__(self, scene: QGraphicsScene, *, background: str = "black", parent: Optional[QWidget] = None) -> None:
        super().__init__(scene, parent)
        self._controller: Optional[CanvasController] = None
        self.setMouseTracking(True)
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setBackgroundBrush(QColor(background))
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

    def bind(self, controller: CanvasController) -> None:
        self._controller = controller

    def show_field_cue(self, shape: FieldShape, direction: PushDirection) -> None:
        cursor = field_cursor(shape, direction)
        if cursor is None:
            self.viewport().unsetCursor()
        else:
            self.viewport().setCursor(cursor)
        _CLIENT_LOGGER.debug("Field cue: shape=%s direction=%s", shape.value, direction.value)

    def _scene_point(self, event) -> Point:
        mapped: QPointF = self.mapToScene(event.position().toPoint())
        return Point(mapped.x(), mapped.y())

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        controller = self._controller
        if controller is None or event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        if controller.dispatcher.state is InteractionState.TEXT_EDITING:
            # Clicking outside the editor commits the text.
            controller.exit_text_editing()
            event.accept()
            return
        hit = controller.dispatcher.pointer_down(self._scene_point(event))
        if hit is not None:
            _CLIENT_LOGGER.debug("Pointer down hit=%s", hit.value)
        event.accept()

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        controller = self._controller
        if controller is None:
            super().mouseMoveEvent(event)
            return
        constrain = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        controller.dispatcher.pointer_move(self._scene_point(event), constrain_axis=constrain)
        event.accept()

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        controller = self._controller
        if controller is None or event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        controller.dispatcher.pointer_up(self._scene_point(event))
        event.accept()

    def wheelEvent(self, event) -> None:  # type: ignore[override]
        controller = self._controller
        delta = event.angleDelta().y()
        if controller is None or delta == 0:
            super().wheelEvent(event)
            return
        # Qt reports scroll-up as positive; the field grows on scroll-up.
        controller.dispatcher.wheel(-float(delta))
        event.accept()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        controller = self._controller
        if controller is not None and controller.dispatcher.key_press(_key_name(event)):
            event.accept()
            return
        super().keyPressEvent(event)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        size = event.size()
        scene = self.scene()
        if scene is not None:
            scene.setSceneRect(QRectF(0.0, 0.0, float(max(size.width(), 1)), float(max(size.height(), 1))))
