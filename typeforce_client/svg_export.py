"""Vector export of the glyph arrangement."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from PyQt6.QtCore import QRectF, QSize
from PyQt6.QtGui import QPainter
from PyQt6.QtSvg import QSvgGenerator
from PyQt6.QtWidgets import QGraphicsScene

from typeforce_client.glyph_layer import GlyphLayer

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")


def render_scene_svg(
    scene: QGraphicsScene,
    path: Union[str, Path],
    *,
    source_rect: Optional[QRectF] = None,
    title: str = "TypeForce layout",
) -> Path:
    """Render every visible item of ``scene`` into an SVG file at ``path``."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    rect = source_rect if source_rect is not None else scene.sceneRect()
    width = max(1, int(round(rect.width())))
    height = max(1, int(round(rect.height())))

    generator = QSvgGenerator()
    generator.setFileName(str(target))
    generator.setSize(QSize(width, height))
    generator.setViewBox(QRectF(0.0, 0.0, float(width), float(height)))
    generator.setTitle(title)

    painter = QPainter()
    if not painter.begin(generator):
        raise OSError(f"Could not open SVG painter for {target}")
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
        scene.render(painter, QRectF(0.0, 0.0, float(width), float(height)), rect)
    finally:
        painter.end()
    return target


def export_svg(layer: GlyphLayer, scene: QGraphicsScene, path: Union[str, Path]) -> Path:
    """Export glyphs only: frame, handle and field visuals are hidden while rendering.

    Visibility is restored even when rendering fails; the failure propagates.
    """
    with layer.chrome_hidden():
        target = render_scene_svg(scene, path)
    _CLIENT_LOGGER.info("Exported SVG to %s", target)
    return target
