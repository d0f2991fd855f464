"""Dev-mode flags for force tick tracing and coalescing."""

from __future__ import annotations

import json
import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from typeforce_client.tick_scheduler import DEFAULT_TICK_INTERVAL_MS

DEV_MODE_ENV_VAR = "TYPEFORCE_DEV_MODE"
TICK_INTERVAL_MIN_MS = 1
TICK_INTERVAL_MAX_MS = 250


def is_dev_mode(value: Optional[str] = None) -> bool:
    token = value if value is not None else os.getenv(DEV_MODE_ENV_VAR)
    if token is None:
        return False
    return token.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class DebugConfig:
    trace_ticks: bool = False
    tick_coalescing_enabled: bool = True
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS


def _coerce_interval(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_TICK_INTERVAL_MS
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return DEFAULT_TICK_INTERVAL_MS
    return max(TICK_INTERVAL_MIN_MS, min(TICK_INTERVAL_MAX_MS, numeric))


def load_dev_settings(path: Path, *, enabled: Optional[bool] = None) -> DebugConfig:
    """Load dev-mode-only flags from dev_settings.json.

    Outside dev mode the defaults are returned without touching disk. In dev mode
    missing keys are filled in and the file is written back so the available
    toggles are discoverable.
    """

    if enabled is None:
        enabled = is_dev_mode()
    if not enabled:
        return DebugConfig()
    defaults = {
        "trace_ticks": False,
        "tick_coalescing_enabled": True,
        "tick_interval_ms": DEFAULT_TICK_INTERVAL_MS,
    }
    needs_write = False
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError:
        data: dict[str, Any] = deepcopy(defaults)
        needs_write = True
    else:
        try:
            loaded = json.loads(raw_text)
        except json.JSONDecodeError:
            loaded = None
        if isinstance(loaded, dict):
            data = loaded
        else:
            data = deepcopy(defaults)
            needs_write = True

    for key, default_value in defaults.items():
        if key not in data:
            data[key] = default_value
            needs_write = True

    normalized = DebugConfig(
        trace_ticks=bool(data.get("trace_ticks", False)),
        tick_coalescing_enabled=bool(data.get("tick_coalescing_enabled", True)),
        tick_interval_ms=_coerce_interval(data.get("tick_interval_ms")),
    )

    if needs_write:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError:
            pass

    return normalized
