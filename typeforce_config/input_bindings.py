"""Configurable key bindings for the canvas."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

_LOGGER = logging.getLogger("TypeForce.Client")

DEFAULT_CONFIG_PATH = Path(__file__).with_name("keybindings.json")

# Default layout that can be extended by the user later on.
DEFAULT_CONFIG = {
    "active_scheme": "keyboard_default",
    "schemes": {
        "keyboard_default": {
            "device_type": "keyboard",
            "display_name": "Keyboard (default)",
            "bindings": {
                "shape_circle": ["c"],
                "shape_square": ["s"],
                "mode_push": ["1"],
                "mode_pull": ["2"],
                "mode_spin": ["3"],
                "text_edit_toggle": ["t"],
                "text_edit_exit": ["Escape"],
                "export": ["e"],
            },
        }
    },
}


@dataclass
class ControlScheme:
    """Container for a set of bindings and some metadata."""

    name: str
    device_type: str
    display_name: str
    bindings: Dict[str, List[str]]

    def action_for(self, key: str) -> Optional[str]:
        """Return the action bound to ``key`` (case-insensitive), if any."""

        normalized = normalize_key(key)
        if not normalized:
            return None
        for action, keys in self.bindings.items():
            for candidate in keys:
                if normalize_key(candidate) == normalized:
                    return action
        return None


@dataclass
class BindingConfig:
    """Representation of the configuration file contents."""

    schemes: Dict[str, ControlScheme]
    active_scheme: str
    source_path: Path

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "BindingConfig":
        """Load config from disk, creating the default file if missing."""

        path = path or DEFAULT_CONFIG_PATH
        if not path.exists():
            try:
                path.write_text(json.dumps(DEFAULT_CONFIG, indent=2), encoding="utf-8")
            except OSError as exc:
                _LOGGER.warning("Could not write default keybindings to %s: %s", path, exc)
                return cls.from_payload(DEFAULT_CONFIG, path)

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.warning("Failed to read keybindings at %s (%s); using defaults", path, exc)
            payload = DEFAULT_CONFIG
        return cls.from_payload(payload, path)

    @classmethod
    def from_payload(cls, payload: dict, path: Path) -> "BindingConfig":
        schemes = {
            name: ControlScheme(
                name=name,
                device_type=entry.get("device_type", "keyboard"),
                display_name=entry.get("display_name", name),
                bindings={
                    action: [str(key) for key in (inputs or [])]
                    for action, inputs in (entry.get("bindings") or {}).items()
                },
            )
            for name, entry in (payload.get("schemes") or {}).items()
        }

        active = payload.get("active_scheme")
        if active not in schemes:
            raise ValueError(
                f"Active scheme '{active}' is not defined in keybindings file {path}"
            )

        return cls(schemes=schemes, active_scheme=active, source_path=path)

    def get_scheme(self, name: Optional[str] = None) -> ControlScheme:
        """Return the requested scheme or the currently active one."""

        scheme_name = name or self.active_scheme
        try:
            return self.schemes[scheme_name]
        except KeyError as exc:
            raise ValueError(f"Unknown control scheme '{scheme_name}'") from exc


def default_scheme() -> ControlScheme:
    return BindingConfig.from_payload(DEFAULT_CONFIG, DEFAULT_CONFIG_PATH).get_scheme()


def normalize_key(key: str) -> str:
    seq = (key or "").strip()
    if seq.startswith("<") and seq.endswith(">"):
        seq = seq[1:-1].strip()
    if len(seq) == 1:
        return seq.lower()
    return seq.casefold()
