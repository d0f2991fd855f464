"""Top-level coordinator tying layout, force ticks, frame gestures and the scene together."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from typeforce_client.app_context import AppContext
from typeforce_client.controls import coerce_number
from typeforce_client.force_field import FieldShape, ForceMode, PointerField, PushDirection, apply_field
from typeforce_client.frame_controller import HANDLE_TOLERANCE, FrameController
from typeforce_client.geometry import FrameRect
from typeforce_client.glyph_model import ExportSnapshot, Glyph, snapshot_glyphs
from typeforce_client.interaction_dispatcher import InteractionDispatcher, InteractionState
from typeforce_client.layout_engine import BASELINE_RATIO, layout, translate_glyphs
from typeforce_client.tick_scheduler import AfterCancelFn, AfterFn, TickScheduler

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")

EXPORT_FILENAME = "layout.svg"

Exporter = Callable[[Path], Path]
FontResolver = Callable[[str], str]
# (shape, direction) -> None; told whenever the visible field cue changes
FieldCueFn = Callable[[FieldShape, PushDirection], None]


class CanvasController:
    """Owns the wiring between the application context and its collaborators.

    Reflows replace ``context.glyphs`` wholesale and mark the current tick so the
    scheduler never applies force to a glyph list that was just rebuilt. Force
    ticks mutate glyphs in place and push the result to the glyph layer.
    """

    def __init__(
        self,
        context: AppContext,
        *,
        after: AfterFn,
        after_cancel: Optional[AfterCancelFn] = None,
        exporter: Optional[Exporter] = None,
        font_resolver: Optional[FontResolver] = None,
        field_cue_fn: Optional[FieldCueFn] = None,
    ) -> None:
        self._ctx = context
        self._exporter = exporter
        self._font_resolver = font_resolver
        self._field_cue = field_cue_fn
        self._last_cue: Optional[tuple] = None
        debug = context.debug_config
        self._frame_controller = FrameController(
            context.frame,
            reflow_fn=self.reflow,
            translate_fn=self._translate_glyphs,
            geometry_fn=self._on_frame_geometry,
            handle_hit_fn=lambda point: context.layer.handle_hit(point, HANDLE_TOLERANCE),
        )
        self._scheduler: TickScheduler[PointerField] = TickScheduler(
            self._apply_force,
            after=after,
            after_cancel=after_cancel,
            interval_ms=debug.tick_interval_ms,
            enabled=debug.tick_coalescing_enabled,
            trace=debug.trace_ticks,
        )
        self._dispatcher = InteractionDispatcher(
            self._frame_controller,
            context.field_settings,
            scheduler=self._scheduler,
            key_scheme=context.key_scheme,
            on_modal_change=self._on_modal_change,
            on_field_settings_change=lambda _settings: self._refresh_field_visual(),
        )
        self._dispatcher.register_action("export", self._export_from_key)
        context.frame_controller = self._frame_controller
        context.scheduler = self._scheduler
        context.dispatcher = self._dispatcher
        self._started = False

    @property
    def context(self) -> AppContext:
        return self._ctx

    @property
    def dispatcher(self) -> InteractionDispatcher:
        return self._dispatcher

    @property
    def frame_controller(self) -> FrameController:
        return self._frame_controller

    @property
    def scheduler(self) -> TickScheduler[PointerField]:
        return self._scheduler

    @property
    def glyphs(self) -> List[Glyph]:
        return self._ctx.glyphs

    def start(self) -> None:
        """Create the chrome nodes and run the first layout."""
        if self._started:
            return
        ctx = self._ctx
        ctx.layer.build_chrome(ctx.frame, radius=ctx.field_settings.radius, shape=ctx.field_settings.shape)
        self._refresh_field_visual()
        self._started = True
        self.reflow()

    # Layout -------------------------------------------------------------

    def reflow(self) -> List[Glyph]:
        ctx = self._ctx
        glyphs = layout(
            ctx.text, ctx.frame, ctx.typography, ctx.measurer, baseline_ratio=self._baseline_ratio()
        )
        ctx.glyphs = glyphs
        ctx.layer.rebuild(glyphs, ctx.typography)
        self._scheduler.mark_reflow()
        _CLIENT_LOGGER.debug("Reflow produced %d glyphs in frame=%s", len(glyphs), ctx.frame.bounds())
        return glyphs

    def _baseline_ratio(self) -> float:
        """Measured ascent of the current font when the measurer reports one."""
        ascent_ratio = getattr(self._ctx.measurer, "ascent_ratio", None)
        if not callable(ascent_ratio):
            return BASELINE_RATIO
        ratio = coerce_number(ascent_ratio(self._ctx.typography.font_size), BASELINE_RATIO, label="ascent ratio")
        return ratio if ratio > 0 else BASELINE_RATIO

    def set_text(self, text: Optional[str]) -> None:
        self._ctx.text = text or ""
        self.reflow()

    def set_typography(self, **changes: Any) -> None:
        """Update font size, line height, tracking, colour or family, then reflow.

        Numeric values that do not parse to a finite number keep their previous value.
        """
        current = self._ctx.typography
        updates: dict[str, Any] = {}
        for name in ("font_size", "line_height_factor", "tracking_em"):
            if name in changes:
                value = coerce_number(changes[name], getattr(current, name), label=name)
                if name != "tracking_em" and value <= 0:
                    value = getattr(current, name)
                updates[name] = value
        for name in ("font_color", "font_family"):
            raw = changes.get(name)
            if isinstance(raw, str) and raw.strip():
                updates[name] = raw.strip()
        unknown = set(changes) - {"font_size", "line_height_factor", "tracking_em", "font_color", "font_family"}
        if unknown:
            _CLIENT_LOGGER.debug("Ignoring unknown typography keys: %s", ", ".join(sorted(unknown)))
        if not updates:
            return
        if "font_family" in updates and self._font_resolver is not None:
            updates["font_family"] = self._font_resolver(updates["font_family"])
        if "font_family" in updates:
            set_family = getattr(self._ctx.measurer, "set_font_family", None)
            if callable(set_family):
                set_family(updates["font_family"])
        self._ctx.typography = current.with_changes(**updates)
        self.reflow()

    def set_frame_geometry(self, left: Any, top: Any, width: Any, height: Any) -> FrameRect:
        frame = self._ctx.frame
        self._frame_controller.set_geometry(
            coerce_number(left, frame.left, label="frame left"),
            coerce_number(top, frame.top, label="frame top"),
            coerce_number(width, frame.width, label="frame width"),
            coerce_number(height, frame.height, label="frame height"),
        )
        return frame

    # Field parameters ---------------------------------------------------

    def set_shape(self, shape: Union[str, FieldShape]) -> FieldShape:
        result = self._ctx.field_settings.set_shape(shape)
        self._refresh_field_visual()
        return result

    def set_mode(self, mode: Union[str, ForceMode]) -> ForceMode:
        return self._ctx.field_settings.set_mode(mode)

    def set_radius(self, radius: Any) -> float:
        """Set the field radius; returns the factor applied to the field visuals."""
        factor = self._ctx.field_settings.set_radius(radius)
        self._refresh_field_visual()
        return factor

    def set_strength(self, strength: Any) -> float:
        return self._ctx.field_settings.set_strength(strength)

    def set_direction(self, direction: Union[str, PushDirection]) -> PushDirection:
        result = self._ctx.field_settings.set_direction(direction)
        self._refresh_field_visual()
        return result

    def cycle_direction(self) -> PushDirection:
        result = self._ctx.field_settings.cycle_direction()
        self._refresh_field_visual()
        return result

    # Modal states -------------------------------------------------------

    def enter_text_editing(self) -> bool:
        return self._dispatcher.enter_text_editing()

    def exit_text_editing(self) -> bool:
        return self._dispatcher.exit_text_editing()

    def enter_selecting(self) -> bool:
        return self._dispatcher.enter_selecting()

    def exit_selecting(self) -> bool:
        return self._dispatcher.exit_selecting()

    def _on_modal_change(self, previous: InteractionState, current: InteractionState) -> None:
        ctx = self._ctx
        if current is InteractionState.TEXT_EDITING:
            ctx.layer.set_chrome_visible(False)
            if ctx.text_editor is not None:
                ctx.text_editor.open(ctx.text, ctx.frame.bounds(), ctx.typography.font_size)
            return
        if previous is InteractionState.TEXT_EDITING:
            if ctx.text_editor is not None:
                edited = ctx.text_editor.close()
                if edited:
                    ctx.text = edited
            ctx.layer.set_chrome_visible(True, shape=ctx.field_settings.shape)
            self.reflow()

    # Export -------------------------------------------------------------

    def snapshot(self) -> ExportSnapshot:
        ctx = self._ctx
        return snapshot_glyphs(ctx.glyphs, ctx.frame.bounds(), ctx.typography)

    def export(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the current arrangement through the configured exporter.

        Errors from the exporter propagate to the caller.
        """
        if self._exporter is None:
            raise RuntimeError("No exporter configured for this canvas")
        target = Path(path) if path is not None else self._ctx.export_dir / EXPORT_FILENAME
        return self._exporter(target)

    def _export_from_key(self) -> None:
        try:
            self.export()
        except (OSError, RuntimeError) as exc:
            _CLIENT_LOGGER.warning("Export failed: %s", exc)

    # Internal callbacks -------------------------------------------------

    def _apply_force(self, field: PointerField) -> None:
        ctx = self._ctx
        ctx.pointer = field.center
        self._refresh_field_visual()
        if self._dispatcher.state is not InteractionState.IDLE:
            return
        changed = apply_field(ctx.glyphs, field)
        if changed:
            ctx.layer.sync(ctx.glyphs)

    def _translate_glyphs(self, dx: float, dy: float) -> None:
        translate_glyphs(self._ctx.glyphs, dx, dy)
        self._ctx.layer.sync(self._ctx.glyphs)

    def _on_frame_geometry(self, frame: FrameRect) -> None:
        self._ctx.layer.update_frame(frame)

    def _refresh_field_visual(self) -> None:
        ctx = self._ctx
        settings = ctx.field_settings
        ctx.layer.update_field(ctx.pointer, settings.radius)
        ctx.layer.show_field_shape(settings.shape)
        cue = (settings.shape, settings.direction)
        if self._field_cue is not None and cue != self._last_cue:
            self._last_cue = cue
            self._field_cue(*cue)
