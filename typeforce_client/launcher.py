from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import QApplication, QGraphicsScene, QMainWindow

from typeforce_client.app_context import build_app_context
from typeforce_client.canvas_controller import CanvasController
from typeforce_client.canvas_view import CanvasView, OverlayTextEditor, TickTimer
from typeforce_client.client_config import InitialSettings, load_initial_settings, resolve_settings_path, settings_summary
from typeforce_client.debug_config import DEV_MODE_ENV_VAR, is_dev_mode, load_dev_settings
from typeforce_client.logging_utils import configure_client_logger
from typeforce_client.qt_scene import QtSceneAdapter
from typeforce_client.svg_export import export_svg
from typeforce_client.text_metrics import QtGlyphMeasurer, resolve_font_family
from typeforce_config.input_bindings import BindingConfig

CLIENT_DIR = Path(__file__).resolve().parent


class CanvasWindow(QMainWindow):
    def __init__(self, settings: InitialSettings, view: CanvasView) -> None:
        super().__init__()
        self.setWindowTitle("TypeForce")
        self.setCentralWidget(view)
        self.resize(settings.window_width, settings.window_height)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="TypeForce interactive typography canvas")
    parser.add_argument("--settings", help="Path to typeforce_settings.json")
    parser.add_argument("--keybindings", help="Path to a keybindings.json file")
    parser.add_argument("--export-dir", help="Directory that receives exported SVG files")
    parser.add_argument("--text", help="Initial text, overrides the settings file")
    args = parser.parse_args(argv)

    settings_path = Path(args.settings).expanduser() if args.settings else resolve_settings_path(CLIENT_DIR.parent)
    settings = load_initial_settings(settings_path)
    if args.text is not None:
        settings.text = args.text
    dev_mode = is_dev_mode()
    debug_config = load_dev_settings((CLIENT_DIR.parent / "dev_settings.json").resolve(), enabled=dev_mode)
    logger = configure_client_logger(debug_enabled=dev_mode, retention=settings.client_log_retention)
    if not dev_mode:
        logger.debug("dev_settings.json ignored (release mode). Export %s=1 to enable tick tracing.", DEV_MODE_ENV_VAR)

    logger.info("Starting TypeForce canvas (pid=%s)", os.getpid())
    logger.debug("Loaded settings from %s: %s", settings_path, settings_summary(settings))
    logger.debug(
        "Tick config: coalescing=%s interval=%dms trace=%s",
        debug_config.tick_coalescing_enabled,
        debug_config.tick_interval_ms,
        debug_config.trace_ticks,
    )

    bindings_path = Path(args.keybindings).expanduser() if args.keybindings else None
    key_scheme = BindingConfig.load(bindings_path).get_scheme()

    app = QApplication(sys.argv)
    settings.font_family = resolve_font_family(settings.font_family)
    scene = QGraphicsScene()
    view = CanvasView(scene, background=settings.background_color)
    window = CanvasWindow(settings, view)
    editor = OverlayTextEditor(view, font_family=settings.font_family, color=settings.font_color)
    tick_timer = TickTimer(window)
    context = build_app_context(
        settings=settings,
        measurer=QtGlyphMeasurer(settings.font_family),
        scene=QtSceneAdapter(scene),
        debug_config=debug_config,
        key_scheme=key_scheme,
        text_editor=editor,
        export_dir=Path(args.export_dir).expanduser() if args.export_dir else None,
    )
    controller = CanvasController(
        context,
        after=tick_timer.after,
        after_cancel=tick_timer.after_cancel,
        exporter=lambda path: export_svg(context.layer, scene, path),
        font_resolver=resolve_font_family,
        field_cue_fn=view.show_field_cue,
    )
    editor.widget.escape_pressed.connect(controller.exit_text_editing)
    view.bind(controller)
    controller.start()

    window.show()
    view.setFocus()
    exit_code = app.exec()
    logger.info("TypeForce canvas exiting with code %s", exit_code)
    return int(exit_code)


if __name__ == "__main__":
    sys.exit(main())
