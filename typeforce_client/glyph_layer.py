"""Scene nodes for glyphs plus the frame, handle and field visuals drawn over them."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from typeforce_client.force_field import FieldShape
from typeforce_client.frame_controller import HANDLE_SIZE
from typeforce_client.geometry import FrameRect, Point
from typeforce_client.glyph_model import Glyph, TypographyParams
from typeforce_client.scene_adapter import SceneAdapter

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")

FRAME_FILL = "#03ffffff"


class GlyphLayer:
    def __init__(self, scene: SceneAdapter, *, ui_color: str = "white") -> None:
        self._scene = scene
        self._ui_color = ui_color
        self._glyph_nodes: List[object] = []
        self.frame_node: Optional[object] = None
        self.handle_node: Optional[object] = None
        self.circle_node: Optional[object] = None
        self.square_node: Optional[object] = None
        self._chrome_hidden = False

    @property
    def scene(self) -> SceneAdapter:
        return self._scene

    @property
    def glyph_node_count(self) -> int:
        return len(self._glyph_nodes)

    def build_chrome(self, frame: FrameRect, *, radius: float, shape: FieldShape) -> None:
        scene = self._scene
        self.frame_node = scene.create_rect(
            frame.left, frame.top, frame.width, frame.height, stroke=self._ui_color, fill=FRAME_FILL
        )
        self.handle_node = scene.create_rect(
            *self._handle_rect(frame), stroke=self._ui_color, fill=self._ui_color
        )
        self.circle_node = scene.create_ellipse(0.0, 0.0, radius, stroke=self._ui_color, dashed=True)
        self.square_node = scene.create_rect(
            -radius, -radius, radius * 2, radius * 2, stroke=self._ui_color, dashed=True
        )
        for node in self.chrome_nodes():
            scene.add_node(node)
        self.show_field_shape(shape)

    def chrome_nodes(self) -> List[object]:
        return [
            node
            for node in (self.frame_node, self.handle_node, self.circle_node, self.square_node)
            if node is not None
        ]

    def rebuild(self, glyphs: Sequence[Glyph], typography: TypographyParams) -> None:
        """Replace every glyph node, then re-assert the chrome on top."""
        scene = self._scene
        for node in self._glyph_nodes:
            scene.remove_node(node)
        self._glyph_nodes = []
        for glyph in glyphs:
            node = scene.create_text(
                glyph.char,
                glyph.x,
                glyph.y,
                font_family=typography.font_family,
                font_size=typography.font_size,
                color=typography.font_color,
            )
            scene.add_node(node)
            glyph.node = node
            self._glyph_nodes.append(node)
            self._measure_pivot(glyph, node)
        _CLIENT_LOGGER.debug("Rebuilt %d glyph nodes", len(self._glyph_nodes))
        for node in self._raise_order():
            scene.add_node(node)
            scene.raise_node(node)

    def handle_hit(self, point: Point, tolerance: float) -> bool:
        """True when the topmost visible node near ``point`` is the resize handle."""
        if self.handle_node is None:
            return False
        return self._scene.hit_test(point, tolerance) is self.handle_node

    def sync(self, glyphs: Sequence[Glyph]) -> None:
        """Push current glyph positions and rotations into the scene."""
        for glyph in glyphs:
            if glyph.node is not None:
                self._scene.move_text(glyph.node, glyph.x, glyph.y, glyph.rotation)

    def update_frame(self, frame: FrameRect) -> None:
        if self.frame_node is not None:
            self._scene.set_rect(self.frame_node, frame.left, frame.top, frame.width, frame.height)
        if self.handle_node is not None:
            self._scene.set_rect(self.handle_node, *self._handle_rect(frame))

    def update_field(self, center: Point, radius: float) -> None:
        x = center.x - radius
        y = center.y - radius
        if self.circle_node is not None:
            self._scene.set_rect(self.circle_node, x, y, radius * 2, radius * 2)
        if self.square_node is not None:
            self._scene.set_rect(self.square_node, x, y, radius * 2, radius * 2)

    def show_field_shape(self, shape: FieldShape) -> None:
        if self._chrome_hidden:
            return
        if self.circle_node is not None:
            self._scene.set_visible(self.circle_node, shape is FieldShape.CIRCLE)
        if self.square_node is not None:
            self._scene.set_visible(self.square_node, shape is FieldShape.SQUARE)

    def set_chrome_visible(self, visible: bool, *, shape: FieldShape = FieldShape.CIRCLE) -> None:
        self._chrome_hidden = not visible
        for node in (self.frame_node, self.handle_node):
            if node is not None:
                self._scene.set_visible(node, visible)
        if visible:
            self.show_field_shape(shape)
        else:
            for node in (self.circle_node, self.square_node):
                if node is not None:
                    self._scene.set_visible(node, False)

    @contextmanager
    def chrome_hidden(self) -> Iterator[None]:
        """Hide frame, handle and field visuals; restore their previous visibility on exit."""
        nodes = self.chrome_nodes()
        previous = [(node, self._scene.is_visible(node)) for node in nodes]
        for node in nodes:
            self._scene.set_visible(node, False)
        try:
            yield
        finally:
            for node, was_visible in previous:
                self._scene.set_visible(node, was_visible)

    def _measure_pivot(self, glyph: Glyph, node: object) -> None:
        left, top, right, bottom = self._scene.get_bounds(node)
        if right <= left and bottom <= top:
            return
        glyph.pivot_dx = (left + right) / 2.0 - glyph.x
        glyph.pivot_dy = (top + bottom) / 2.0 - glyph.y

    def _raise_order(self) -> List[object]:
        # Handle last so scene hit-tests find it above the field visuals.
        nodes = (self.circle_node, self.square_node, self.frame_node, self.handle_node)
        return [node for node in nodes if node is not None]

    @staticmethod
    def _handle_rect(frame: FrameRect):
        corner = frame.bottom_right
        half = HANDLE_SIZE / 2.0
        return (corner.x - half, corner.y - half, HANDLE_SIZE, HANDLE_SIZE)
