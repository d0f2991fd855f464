"""Configuration helpers for the TypeForce canvas client."""
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

from typeforce_client.controls import DEFAULT_MAX_RADIUS, DEFAULT_MIN_RADIUS, DEFAULT_RADIUS, DEFAULT_STRENGTH
from typeforce_client.glyph_model import (
    DEFAULT_FONT_COLOR,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINE_HEIGHT_FACTOR,
)

SETTINGS_PATH_ENV_VAR = "TYPEFORCE_SETTINGS_PATH"
SETTINGS_FILENAME = "typeforce_settings.json"

DEFAULT_FRAME = (700.0, 100.0, 600.0, 700.0)
DEFAULT_TEXT = "Type something"


@dataclass
class InitialSettings:
    """Values used to bootstrap the canvas before the user changes anything."""

    text: str = DEFAULT_TEXT
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: float = DEFAULT_FONT_SIZE
    font_color: str = DEFAULT_FONT_COLOR
    line_height_factor: float = DEFAULT_LINE_HEIGHT_FACTOR
    tracking_em: float = 0.0
    radius: float = DEFAULT_RADIUS
    strength: float = DEFAULT_STRENGTH
    min_radius: float = DEFAULT_MIN_RADIUS
    max_radius: float = DEFAULT_MAX_RADIUS
    shape: str = "circle"
    mode: str = "push"
    direction: str = "right"
    frame: Tuple[float, float, float, float] = DEFAULT_FRAME
    window_width: int = 1920
    window_height: int = 1080
    background_color: str = "black"
    client_log_retention: int = 5


def resolve_settings_path(default_dir: Path) -> Path:
    env_override = os.getenv(SETTINGS_PATH_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser()
    return default_dir / SETTINGS_FILENAME


def _float(value: Any, fallback: float) -> float:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return number


def _int(value: Any, fallback: int) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _str(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def _frame(value: Any, fallback: Tuple[float, float, float, float]) -> Tuple[float, float, float, float]:
    if isinstance(value, dict):
        keys = ("left", "top", "width", "height")
        return tuple(_float(value.get(key), default) for key, default in zip(keys, fallback))  # type: ignore[return-value]
    if isinstance(value, (list, tuple)) and len(value) == 4:
        return tuple(_float(item, default) for item, default in zip(value, fallback))  # type: ignore[return-value]
    return fallback


def load_initial_settings(settings_path: Path) -> InitialSettings:
    """Read bootstrap defaults from typeforce_settings.json if it exists."""
    defaults = InitialSettings()
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return defaults

    try:
        data: Dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError:
        return defaults
    if not isinstance(data, dict):
        return defaults

    min_radius = max(1.0, _float(data.get("min_radius"), defaults.min_radius))
    max_radius = max(min_radius, _float(data.get("max_radius"), defaults.max_radius))
    radius = min(max_radius, max(min_radius, _float(data.get("radius"), defaults.radius)))
    font_size = _float(data.get("font_size"), defaults.font_size)
    if font_size <= 0:
        font_size = defaults.font_size
    line_height_factor = _float(data.get("line_height_factor"), defaults.line_height_factor)
    if line_height_factor <= 0:
        line_height_factor = defaults.line_height_factor
    text_value = data.get("text")

    return InitialSettings(
        text=text_value if isinstance(text_value, str) else defaults.text,
        font_family=_str(data.get("font_family"), defaults.font_family),
        font_size=font_size,
        font_color=_str(data.get("font_color"), defaults.font_color),
        line_height_factor=line_height_factor,
        tracking_em=_float(data.get("tracking_em"), defaults.tracking_em),
        radius=radius,
        strength=_float(data.get("strength"), defaults.strength),
        min_radius=min_radius,
        max_radius=max_radius,
        shape=_str(data.get("shape"), defaults.shape).lower(),
        mode=_str(data.get("mode"), defaults.mode).lower(),
        direction=_str(data.get("direction"), defaults.direction).lower(),
        frame=_frame(data.get("frame"), defaults.frame),
        window_width=max(200, _int(data.get("window_width"), defaults.window_width)),
        window_height=max(200, _int(data.get("window_height"), defaults.window_height)),
        background_color=_str(data.get("background_color"), defaults.background_color),
        client_log_retention=max(1, _int(data.get("client_log_retention"), defaults.client_log_retention)),
    )


def settings_summary(settings: InitialSettings) -> str:
    left, top, width, height = settings.frame
    return (
        f"font={settings.font_family}@{settings.font_size:g} field={settings.shape}/{settings.mode} "
        f"radius={settings.radius:g} strength={settings.strength:g} "
        f"frame=({left:g},{top:g},{width:g}x{height:g})"
    )
