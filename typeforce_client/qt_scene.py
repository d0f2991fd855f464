"""QGraphicsScene implementation of the scene adapter."""
from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QFontMetricsF, QPen, QTransform
from PyQt6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsItem,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSimpleTextItem,
)

from typeforce_client.geometry import Bounds, Point
from typeforce_client.scene_adapter import SceneAdapter


def _color(value: Optional[str], fallback: str = "white") -> QColor:
    q_color = QColor(value or fallback)
    if not q_color.isValid():
        q_color = QColor(fallback)
    return q_color


def _pen(stroke: str, dashed: bool) -> QPen:
    pen = QPen(_color(stroke))
    pen.setWidthF(1.0)
    pen.setCosmetic(True)
    if dashed:
        pen.setDashPattern([4.0, 4.0])
    return pen


class _GlyphItem(QGraphicsSimpleTextItem):
    """Text item positioned by its baseline origin rather than its top-left corner."""

    def __init__(self, char: str, font: QFont, color: QColor) -> None:
        super().__init__(char)
        self.setFont(font)
        self.setBrush(QBrush(color))
        self.setPen(QPen(Qt.PenStyle.NoPen))
        self._ascent = QFontMetricsF(font).ascent()
        self.setTransformOriginPoint(self.boundingRect().center())

    def place(self, x: float, y: float, rotation: float) -> None:
        self.setPos(QPointF(x, y - self._ascent))
        self.setRotation(rotation)


class QtSceneAdapter(SceneAdapter):
    def __init__(self, scene: QGraphicsScene) -> None:
        self._scene = scene

    @property
    def scene(self) -> QGraphicsScene:
        return self._scene

    def create_rect(self, x, y, width, height, *, stroke, fill=None, dashed=False):
        item = QGraphicsRectItem(QRectF(x, y, width, height))
        item.setPen(_pen(stroke, dashed))
        if fill:
            item.setBrush(QBrush(_color(fill)))
        else:
            item.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        return item

    def create_ellipse(self, cx, cy, radius, *, stroke, dashed=False):
        item = QGraphicsEllipseItem(QRectF(cx - radius, cy - radius, radius * 2, radius * 2))
        item.setPen(_pen(stroke, dashed))
        item.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        return item

    def create_text(self, char, x, y, *, font_family, font_size, color):
        font = QFont(font_family)
        font.setPixelSize(max(1, int(round(font_size))))
        item = _GlyphItem(char, font, _color(color))
        item.place(x, y, 0.0)
        return item

    def add_node(self, node: object) -> None:
        item = self._item(node)
        if item.scene() is self._scene:
            return
        self._scene.addItem(item)

    def remove_node(self, node: object) -> None:
        if not isinstance(node, QGraphicsItem):
            return
        if node.scene() is not self._scene:
            return
        self._scene.removeItem(node)

    def raise_node(self, node: object) -> None:
        item = self._item(node)
        top = max((other.zValue() for other in self._scene.items()), default=0.0)
        item.setZValue(top + 1.0)

    def set_rect(self, node, x, y, width, height) -> None:
        if isinstance(node, (QGraphicsRectItem, QGraphicsEllipseItem)):
            node.setRect(QRectF(x, y, width, height))

    def move_text(self, node, x, y, rotation) -> None:
        if isinstance(node, _GlyphItem):
            node.place(x, y, rotation)

    def set_visible(self, node, visible) -> None:
        self._item(node).setVisible(bool(visible))

    def is_visible(self, node) -> bool:
        return bool(self._item(node).isVisible())

    def hit_test(self, point: Point, tolerance: float):
        area = QRectF(point.x - tolerance, point.y - tolerance, tolerance * 2, tolerance * 2)
        items = self._scene.items(
            area,
            Qt.ItemSelectionMode.IntersectsItemShape,
            Qt.SortOrder.DescendingOrder,
            QTransform(),
        )
        for item in items:
            if item.isVisible():
                return item
        return None

    def get_bounds(self, node) -> Bounds:
        rect = self._item(node).sceneBoundingRect()
        return (rect.left(), rect.top(), rect.right(), rect.bottom())

    @staticmethod
    def _item(node: object) -> QGraphicsItem:
        if not isinstance(node, QGraphicsItem):
            raise TypeError(f"Expected a QGraphicsItem, got {type(node).__name__}")
        return node
