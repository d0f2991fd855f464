from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from typeforce_client.client_config import InitialSettings
from typeforce_client.controls import FieldSettings
from typeforce_client.debug_config import DebugConfig
from typeforce_client.force_field import FieldShape, ForceMode, PointerField, PushDirection
from typeforce_client.frame_controller import FrameController
from typeforce_client.geometry import FrameRect, Point
from typeforce_client.glyph_layer import GlyphLayer
from typeforce_client.glyph_model import Glyph, GlyphMeasurer, TypographyParams
from typeforce_client.interaction_dispatcher import InteractionDispatcher
from typeforce_client.scene_adapter import SceneAdapter, TextEditorAdapter
from typeforce_client.tick_scheduler import TickScheduler
from typeforce_config.input_bindings import ControlScheme, default_scheme


@dataclass
class AppContext:
    settings: InitialSettings
    debug_config: DebugConfig
    typography: TypographyParams
    field_settings: FieldSettings
    frame: FrameRect
    text: str
    measurer: GlyphMeasurer
    scene: SceneAdapter
    layer: GlyphLayer
    key_scheme: ControlScheme
    export_dir: Path
    text_editor: Optional[TextEditorAdapter] = None
    glyphs: List[Glyph] = field(default_factory=list)
    pointer: Point = Point(0.0, 0.0)
    # Wired by CanvasController once its callbacks exist.
    frame_controller: Optional[FrameController] = None
    dispatcher: Optional[InteractionDispatcher] = None
    scheduler: Optional[TickScheduler[PointerField]] = None


def build_app_context(
    *,
    settings: InitialSettings,
    measurer: GlyphMeasurer,
    scene: SceneAdapter,
    debug_config: Optional[DebugConfig] = None,
    key_scheme: Optional[ControlScheme] = None,
    text_editor: Optional[TextEditorAdapter] = None,
    export_dir: Optional[Path] = None,
) -> AppContext:
    typography = TypographyParams(
        font_size=settings.font_size,
        line_height_factor=settings.line_height_factor,
        tracking_em=settings.tracking_em,
        font_color=settings.font_color,
        font_family=settings.font_family,
    )
    field_settings = FieldSettings(
        radius=settings.radius,
        strength=settings.strength,
        min_radius=settings.min_radius,
        max_radius=settings.max_radius,
    )
    field_settings.set_shape(settings.shape or FieldShape.CIRCLE)
    field_settings.set_mode(settings.mode or ForceMode.PUSH)
    field_settings.set_direction(settings.direction or PushDirection.RIGHT)
    left, top, width, height = settings.frame

    return AppContext(
        settings=settings,
        debug_config=debug_config or DebugConfig(),
        typography=typography,
        field_settings=field_settings,
        frame=FrameRect(left, top, width, height),
        text=settings.text,
        measurer=measurer,
        scene=scene,
        layer=GlyphLayer(scene, ui_color=settings.font_color),
        key_scheme=key_scheme or default_scheme(),
        export_dir=export_dir or Path.cwd(),
        text_editor=text_editor,
        pointer=Point(left + width / 2.0, top + height / 2.0),
    )
