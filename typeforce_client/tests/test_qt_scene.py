from __future__ import annotations

import os
from pathlib import Path

import pytest

pytestmark = pytest.mark.pyqt_required


@pytest.fixture
def qt_app(monkeypatch):
    monkeypatch.setenv("QT_QPA_PLATFORM", os.getenv("QT_QPA_PLATFORM", "offscreen"))
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def adapter(qt_app):
    from PyQt6.QtCore import QRectF
    from PyQt6.QtWidgets import QGraphicsScene

    from typeforce_client.qt_scene import QtSceneAdapter

    scene = QGraphicsScene()
    scene.setSceneRect(QRectF(0, 0, 800, 600))
    return QtSceneAdapter(scene)


def test_remove_node_twice_is_silent(adapter) -> None:
    node = adapter.create_text("A", 10, 50, font_family="Helvetica", font_size=20, color="white")
    adapter.add_node(node)
    adapter.remove_node(node)
    adapter.remove_node(node)
    assert node not in adapter.scene.items()


def test_raise_node_puts_item_on_top(adapter) -> None:
    rect = adapter.create_rect(0, 0, 100, 100, stroke="white")
    text = adapter.create_text("A", 10, 50, font_family="Helvetica", font_size=20, color="white")
    adapter.add_node(rect)
    adapter.add_node(text)
    adapter.raise_node(rect)
    assert rect.zValue() > text.zValue()


def test_hit_test_skips_hidden_items(adapter) -> None:
    from typeforce_client.geometry import Point

    rect = adapter.create_rect(100, 100, 50, 50, stroke="white", fill="white")
    adapter.add_node(rect)
    assert adapter.hit_test(Point(120, 120), 2) is rect
    adapter.set_visible(rect, False)
    assert adapter.hit_test(Point(120, 120), 2) is None


def test_set_rect_updates_bounds(adapter) -> None:
    ellipse = adapter.create_ellipse(50, 50, 10, stroke="white", dashed=True)
    adapter.add_node(ellipse)
    adapter.set_rect(ellipse, 0, 0, 40, 40)
    left, top, right, bottom = adapter.get_bounds(ellipse)
    assert left == pytest.approx(0, abs=1.0)
    assert right == pytest.approx(40, abs=1.0)


def test_export_hides_chrome_and_restores(adapter, tmp_path: Path) -> None:
    from typeforce_client.force_field import FieldShape
    from typeforce_client.geometry import FrameRect
    from typeforce_client.glyph_layer import GlyphLayer
    from typeforce_client.svg_export import export_svg

    layer = GlyphLayer(adapter)
    layer.build_chrome(FrameRect(100, 100, 300, 200), radius=120, shape=FieldShape.CIRCLE)

    target = export_svg(layer, adapter.scene, tmp_path / "out.svg")

    content = target.read_text(encoding="utf-8")
    assert "<svg" in content
    assert adapter.is_visible(layer.frame_node) is True
    assert adapter.is_visible(layer.circle_node) is True
    assert adapter.is_visible(layer.square_node) is False


def test_qt_measurer_caches_and_is_positive(qt_app) -> None:
    from typeforce_client.text_metrics import QtGlyphMeasurer

    measurer = QtGlyphMeasurer("Helvetica")
    first = measurer("W", 60)
    assert first > 0
    assert measurer("W", 60) == first
    assert measurer("W", 30) < first


def test_missing_family_resolves_to_an_installed_candidate(qt_app, tmp_path: Path) -> None:
    from PyQt6.QtGui import QFontDatabase

    from typeforce_client.text_metrics import resolve_font_family

    families = QFontDatabase.families()
    if not families:
        pytest.skip("No fonts available on this Qt platform")
    (tmp_path / "preferred_fonts.txt").write_text("# none\nmissing.ttf\n", encoding="utf-8")

    family = resolve_font_family(
        "No Such Family 7f3a", fonts_dir=tmp_path, installed_candidates=("Also Missing", families[0])
    )

    assert family == families[0]


def test_missing_family_without_candidates_uses_system_font(qt_app, tmp_path: Path) -> None:
    from typeforce_client.text_metrics import resolve_font_family

    family = resolve_font_family("No Such Family 7f3a", fonts_dir=tmp_path, installed_candidates=())

    assert family
    assert family != "No Such Family 7f3a"


def test_qt_measurer_reports_positive_ascent(qt_app) -> None:
    from typeforce_client.text_metrics import QtGlyphMeasurer

    measurer = QtGlyphMeasurer("Helvetica")
    assert 0 < measurer.ascent_ratio(60) < 2
    assert measurer.ascent_ratio(0) == 0.0


def test_glyph_bounds_centre_matches_rotation_origin(adapter) -> None:
    node = adapter.create_text("W", 100, 200, font_family="Helvetica", font_size=40, color="white")
    adapter.add_node(node)
    left, top, right, bottom = adapter.get_bounds(node)
    origin = node.mapToScene(node.transformOriginPoint())

    assert origin.x() == pytest.approx((left + right) / 2.0)
    assert origin.y() == pytest.approx((top + bottom) / 2.0)


@pytest.mark.parametrize(
    "shape,direction,expected",
    [
        ("circle", "right", None),
        ("square", "right", "SizeHorCursor"),
        ("square", "left", "SizeHorCursor"),
        ("square", "up", "SizeVerCursor"),
        ("square", "down", "SizeVerCursor"),
    ],
)
def test_field_cursor_shows_square_push_axis(qt_app, shape, direction, expected) -> None:
    from PyQt6.QtCore import Qt

    from typeforce_client.canvas_view import field_cursor
    from typeforce_client.force_field import FieldShape, PushDirection

    cursor = field_cursor(FieldShape(shape), PushDirection(direction))
    assert cursor == (None if expected is None else getattr(Qt.CursorShape, expected))


def test_view_cursor_follows_field_cue(qt_app) -> None:
    from PyQt6.QtCore import Qt
    from PyQt6.QtWidgets import QGraphicsScene

    from typeforce_client.canvas_view import CanvasView
    from typeforce_client.force_field import FieldShape, PushDirection

    view = CanvasView(QGraphicsScene())
    view.show_field_cue(FieldShape.SQUARE, PushDirection.UP)
    assert view.viewport().cursor().shape() == Qt.CursorShape.SizeVerCursor
    view.show_field_cue(FieldShape.CIRCLE, PushDirection.UP)
    assert view.viewport().cursor().shape() == Qt.CursorShape.ArrowCursor
