from __future__ import annotations

from pathlib import Path

import pytest

from typeforce_client.app_context import build_app_context
from typeforce_client.canvas_controller import EXPORT_FILENAME, CanvasController
from typeforce_client.client_config import InitialSettings
from typeforce_client.debug_config import DebugConfig
from typeforce_client.force_field import FieldShape, PushDirection
from typeforce_client.geometry import Point
from typeforce_client.interaction_dispatcher import InteractionState

from scene_stubs import StubEditor, StubNode, StubScene


def fake_measure(char: str, font_size: float) -> float:
    return font_size * (0.25 if char == " " else 0.5)


class AfterHarness:
    def __init__(self) -> None:
        self.scheduled: list = []

    def after(self, ms, cb):
        self.scheduled.append(cb)
        return f"h{len(self.scheduled)}"

    def cancel(self, handle) -> None:
        pass

    def run_latest(self) -> None:
        self.scheduled[-1]()


def _make(
    text: str = "AB CD",
    *,
    editor=None,
    exporter=None,
    export_dir=None,
    measurer=fake_measure,
    scene=None,
    **controller_kwargs,
):
    settings = InitialSettings(text=text, frame=(100.0, 100.0, 400.0, 300.0))
    scene = scene or StubScene()
    context = build_app_context(
        settings=settings,
        measurer=measurer,
        scene=scene,
        debug_config=DebugConfig(),
        text_editor=editor,
        export_dir=export_dir,
    )
    harness = AfterHarness()
    controller = CanvasController(
        context, after=harness.after, after_cancel=harness.cancel, exporter=exporter, **controller_kwargs
    )
    controller.start()
    return controller, scene, harness


def _settle(controller: CanvasController, harness: AfterHarness) -> None:
    """Consume the deferral left by the initial reflow with a far-away sample."""
    controller.dispatcher.pointer_move(Point(-1000, -1000))
    harness.run_latest()
    harness.run_latest()


def _text_nodes(scene: StubScene) -> list[StubNode]:
    return [node for node in scene.nodes if node.kind == "text"]


def test_start_builds_chrome_and_glyph_nodes() -> None:
    controller, scene, _ = _make()
    layer = controller.context.layer

    assert len(controller.glyphs) == 4
    assert [node.attrs["char"] for node in _text_nodes(scene)] == ["A", "B", "C", "D"]
    assert all(glyph.node is not None for glyph in controller.glyphs)
    assert scene.is_visible(layer.circle_node) is True
    assert scene.is_visible(layer.square_node) is False
    # Frame and handle are raised above the glyphs.
    assert layer.frame_node in scene.raised and layer.handle_node in scene.raised


def test_reflow_replaces_every_glyph_node() -> None:
    controller, scene, _ = _make()
    old_nodes = _text_nodes(scene)

    controller.set_text("Hello")

    assert all(node in scene.removed for node in old_nodes)
    assert [node.attrs["char"] for node in _text_nodes(scene)] == list("Hello")
    assert controller.context.text == "Hello"


def test_force_tick_moves_glyphs_and_syncs_scene() -> None:
    controller, scene, harness = _make()
    first = controller.glyphs[0]
    start = first.position
    # Mark-reflow from start() defers the first tick once.
    controller.dispatcher.pointer_move(Point(start.x - 60, start.y))
    harness.run_latest()
    assert first.position == start
    harness.run_latest()

    assert first.x == pytest.approx(start.x + 4.8)
    assert first.node.attrs["pos"] == (first.x, first.y)
    circle = controller.context.layer.circle_node
    assert circle.attrs["rect"] == (start.x - 60 - 120, start.y - 120, 240, 240)


def test_force_tick_after_reflow_is_deferred() -> None:
    controller, _scene, harness = _make()
    _settle(controller, harness)
    glyph = controller.glyphs[0]
    controller.dispatcher.pointer_move(Point(glyph.x - 60, glyph.y))
    controller.set_typography(font_size=40)
    harness.run_latest()

    assert controller.glyphs[0].position == controller.glyphs[0].base_position
    harness.run_latest()
    assert controller.glyphs[0].position != controller.glyphs[0].base_position


def test_set_typography_ignores_invalid_numbers() -> None:
    controller, _scene, _ = _make()
    controller.set_typography(font_size="NaN", line_height_factor=-2, tracking_em="0.1")

    typography = controller.context.typography
    assert typography.font_size == 60
    assert typography.line_height_factor == 1.25
    assert typography.tracking_em == pytest.approx(0.1)


def test_drag_translates_displaced_glyphs() -> None:
    controller, _scene, harness = _make()
    _settle(controller, harness)
    glyph = controller.glyphs[0]
    controller.dispatcher.pointer_move(Point(glyph.x - 60, glyph.y))
    harness.run_latest()
    displaced = [g.position for g in controller.glyphs]

    dispatcher = controller.dispatcher
    dispatcher.pointer_down(Point(300, 350))
    dispatcher.pointer_move(Point(325, 340))
    dispatcher.pointer_up()

    assert [g.position for g in controller.glyphs] == [p + Point(25, -10) for p in displaced]
    frame_node = controller.context.layer.frame_node
    assert frame_node.attrs["rect"] == (125, 90, 400, 300)


def test_field_setters_update_visuals() -> None:
    controller, scene, _ = _make()
    layer = controller.context.layer

    assert controller.set_shape("square") is FieldShape.SQUARE
    assert scene.is_visible(layer.square_node) is True
    assert scene.is_visible(layer.circle_node) is False
    assert controller.set_radius(60) == pytest.approx(0.5)
    assert layer.square_node.attrs["rect"][2] == 120
    assert controller.set_strength("bad") == pytest.approx(0.08)


def test_text_editing_hides_chrome_and_commits_text() -> None:
    editor = StubEditor("New words")
    controller, scene, _ = _make(editor=editor)
    layer = controller.context.layer

    controller.dispatcher.key_press("t")
    assert controller.dispatcher.state is InteractionState.TEXT_EDITING
    assert editor.opened_with == [("AB CD", (100.0, 100.0, 500.0, 400.0), 60.0)]
    assert not any(scene.is_visible(node) for node in layer.chrome_nodes())

    controller.dispatcher.key_press("Escape")
    assert editor.closed == 1
    assert controller.context.text == "New words"
    assert scene.is_visible(layer.frame_node) and scene.is_visible(layer.circle_node)
    assert scene.is_visible(layer.square_node) is False
    assert "".join(g.char for g in controller.glyphs) == "Newwords"


def test_empty_edit_keeps_previous_text() -> None:
    controller, _scene, _ = _make(editor=StubEditor(""))
    controller.enter_text_editing()
    controller.exit_text_editing()
    assert controller.context.text == "AB CD"


def test_export_restores_chrome_visibility_on_failure(tmp_path: Path) -> None:
    def failing_exporter(path: Path) -> Path:
        with controller.context.layer.chrome_hidden():
            raise OSError("disk full")

    controller, scene, _ = _make(exporter=failing_exporter, export_dir=tmp_path)
    layer = controller.context.layer

    with pytest.raises(OSError):
        controller.export()

    assert scene.is_visible(layer.frame_node) is True
    assert scene.is_visible(layer.handle_node) is True
    assert scene.is_visible(layer.circle_node) is True
    assert scene.is_visible(layer.square_node) is False


def test_export_uses_default_path(tmp_path: Path) -> None:
    seen = []
    controller, _scene, _ = _make(exporter=lambda path: seen.append(path) or path, export_dir=tmp_path)
    assert controller.export() == tmp_path / EXPORT_FILENAME
    assert seen == [tmp_path / EXPORT_FILENAME]


def test_export_without_exporter_raises() -> None:
    controller, _scene, _ = _make()
    with pytest.raises(RuntimeError):
        controller.export()


def test_snapshot_reports_glyphs_and_frame() -> None:
    controller, _scene, _ = _make()
    snapshot = controller.snapshot()
    assert [g.char for g in snapshot.glyphs] == ["A", "B", "C", "D"]
    assert snapshot.frame_bounds == (100.0, 100.0, 500.0, 400.0)
    assert snapshot.typography.font_size == 60


class AscentMeasurer:
    def __call__(self, char: str, font_size: float) -> float:
        return fake_measure(char, font_size)

    def ascent_ratio(self, font_size: float) -> float:
        return 0.75


def test_reflow_uses_measured_ascent_when_available() -> None:
    controller, _scene, _ = _make(measurer=AscentMeasurer())
    # frame top 100 + padding 10 + 60 * 0.75
    assert controller.glyphs[0].y == pytest.approx(155.0)

    plain, _scene, _ = _make()
    assert plain.glyphs[0].y == pytest.approx(161.0)


def test_force_is_measured_from_rendered_glyph_centre() -> None:
    controller, _scene, harness = _make(scene=StubScene(text_box=(30.0, 70.0, 55.0)))
    _settle(controller, harness)
    glyph = controller.glyphs[0]
    start = glyph.position
    assert glyph.center == Point(start.x + 15.0, start.y - 20.0)

    controller.dispatcher.pointer_move(Point(glyph.center.x - 60, glyph.center.y))
    harness.run_latest()

    assert glyph.x == pytest.approx(start.x + 4.8)
    assert glyph.y == pytest.approx(start.y)


def test_handle_press_resizes_through_scene_hit_test() -> None:
    controller, _scene, _ = _make()
    dispatcher = controller.dispatcher

    dispatcher.pointer_down(Point(502, 398))
    dispatcher.pointer_move(Point(450, 350))
    dispatcher.pointer_up()

    assert controller.context.frame.bounds() == (100.0, 100.0, 450.0, 350.0)
    assert controller.context.layer.handle_node.attrs["rect"] == (446.0, 346.0, 8.0, 8.0)


def test_font_family_change_is_resolved_before_use() -> None:
    requested = []

    def resolver(family: str) -> str:
        requested.append(family)
        return "Resolved Sans"

    controller, _scene, _ = _make(font_resolver=resolver)
    controller.set_typography(font_family="Missing Font")

    assert requested == ["Missing Font"]
    assert controller.context.typography.font_family == "Resolved Sans"


def test_field_cue_reports_shape_and_direction_changes() -> None:
    cues = []
    controller, _scene, harness = _make(field_cue_fn=lambda shape, direction: cues.append((shape, direction)))
    assert cues == [(FieldShape.CIRCLE, PushDirection.RIGHT)]

    controller.set_shape("square")
    controller.dispatcher.pointer_down(Point(20, 20))
    controller.dispatcher.pointer_up(Point(20, 20))
    controller.dispatcher.key_press("s")
    controller.dispatcher.pointer_move(Point(30, 30))
    harness.run_latest()
    controller.set_direction("right")
    controller.set_shape("circle")

    assert cues[1:] == [
        (FieldShape.SQUARE, PushDirection.RIGHT),
        (FieldShape.SQUARE, PushDirection.DOWN),
        (FieldShape.SQUARE, PushDirection.LEFT),
        (FieldShape.SQUARE, PushDirection.RIGHT),
        (FieldShape.CIRCLE, PushDirection.RIGHT),
    ]
