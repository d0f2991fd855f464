"""Recording stand-ins for the scene and editor adapters."""
from __future__ import annotations

from typeforce_client.scene_adapter import SceneAdapter, TextEditorAdapter


class StubNode:
    def __init__(self, kind: str, **attrs) -> None:
        self.kind = kind
        self.attrs = attrs
        self.visible = True
        self.z = 0


class StubScene(SceneAdapter):
    """Records scene mutations without any rendering backend."""

    def __init__(self, *, text_box: tuple[float, float, float] | None = None) -> None:
        # (width, height, ascent) given to every text node; None leaves text nodes without bounds.
        self.text_box = text_box
        self.nodes: list[StubNode] = []
        self.removed: list[StubNode] = []
        self.raised: list[StubNode] = []
        self.moves: list[tuple[StubNode, float, float, float]] = []

    def create_rect(self, x, y, width, height, *, stroke, fill=None, dashed=False):
        return StubNode("rect", rect=(x, y, width, height), dashed=dashed)

    def create_ellipse(self, cx, cy, radius, *, stroke, dashed=False):
        return StubNode("ellipse", rect=(cx - radius, cy - radius, radius * 2, radius * 2))

    def create_text(self, char, x, y, *, font_family, font_size, color):
        node = StubNode("text", char=char, pos=(x, y))
        if self.text_box is not None:
            width, height, ascent = self.text_box
            node.attrs["rect"] = (x, y - ascent, width, height)
        return node

    def add_node(self, node):
        if node not in self.nodes:
            self.nodes.append(node)

    def remove_node(self, node):
        if node in self.nodes:
            self.nodes.remove(node)
            self.removed.append(node)

    def raise_node(self, node):
        node.z = max((other.z for other in self.nodes), default=0) + 1
        self.raised.append(node)

    def set_rect(self, node, x, y, width, height):
        node.attrs["rect"] = (x, y, width, height)

    def move_text(self, node, x, y, rotation):
        node.attrs["pos"] = (x, y)
        node.attrs["rotation"] = rotation
        self.moves.append((node, x, y, rotation))

    def set_visible(self, node, visible):
        node.visible = bool(visible)

    def is_visible(self, node):
        return node.visible

    def hit_test(self, point, tolerance):
        hits = []
        for node in self.nodes:
            if not node.visible or "rect" not in node.attrs:
                continue
            x, y, w, h = node.attrs["rect"]
            if x - tolerance <= point.x <= x + w + tolerance and y - tolerance <= point.y <= y + h + tolerance:
                hits.append(node)
        return max(hits, key=lambda node: node.z, default=None)

    def get_bounds(self, node):
        x, y, w, h = node.attrs.get("rect", (0, 0, 0, 0))
        return (x, y, x + w, y + h)


class StubEditor(TextEditorAdapter):
    def __init__(self, result: str) -> None:
        self.result = result
        self.opened_with: list[tuple] = []
        self.closed = 0

    def open(self, text, bounds, font_size):
        self.opened_with.append((text, bounds, font_size))

    def close(self):
        self.closed += 1
        return self.result
