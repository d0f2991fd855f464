from __future__ import annotations

from typing import Optional

from typeforce_client.geometry import Bounds, Point


class SceneAdapter:
    """Rendering backend capabilities used by the glyph layer.

    Nodes are opaque handles owned by the backend. ``remove_node`` must accept
    nodes that were already removed and treat them as a no-op.
    """

    def create_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        stroke: str,
        fill: Optional[str] = None,
        dashed: bool = False,
    ) -> object: ...

    def create_ellipse(self, cx: float, cy: float, radius: float, *, stroke: str, dashed: bool = False) -> object: ...

    def create_text(self, char: str, x: float, y: float, *, font_family: str, font_size: float, color: str) -> object: ...

    def add_node(self, node: object) -> None: ...

    def remove_node(self, node: object) -> None: ...

    def raise_node(self, node: object) -> None: ...

    def set_rect(self, node: object, x: float, y: float, width: float, height: float) -> None: ...

    def move_text(self, node: object, x: float, y: float, rotation: float) -> None: ...

    def set_visible(self, node: object, visible: bool) -> None: ...

    def is_visible(self, node: object) -> bool: ...

    def hit_test(self, point: Point, tolerance: float) -> Optional[object]: ...

    def get_bounds(self, node: object) -> Bounds: ...


class TextEditorAdapter:
    """Overlay editor shown over the frame while the canvas is in text editing."""

    def open(self, text: str, bounds: Bounds, font_size: float) -> None: ...

    def close(self) -> str: ...
