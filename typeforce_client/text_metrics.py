"""Glyph measurement and font family resolution backed by Qt font metrics."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from PyQt6.QtGui import QFont, QFontDatabase, QFontMetricsF

_LOGGER_NAME = "TypeForce.Client"
_CLIENT_LOGGER = logging.getLogger(_LOGGER_NAME)

FONTS_DIR = Path(__file__).resolve().parent / "fonts"
DEFAULT_FALLBACK_FAMILY = "Helvetica"
# Installed families tried after the requested one, closest match to the rounded default first.
INSTALLED_CANDIDATES = (
    "ABC Diatype Rounded",
    "ABC Diatype",
    "Nunito",
    "Source Sans 3",
    "Helvetica Neue",
    "Helvetica",
    "Arial",
    "Segoe UI",
    "DejaVu Sans",
    "Noto Sans",
    "Liberation Sans",
)


def _find_font_case_insensitive(fonts_dir: Path, filename: str) -> Optional[Path]:
    if not filename or not fonts_dir.exists():
        return None
    target = filename.lower()
    for child in fonts_dir.iterdir():
        if child.is_file() and child.name.lower() == target:
            return child
    return None


def _register_font_file(font_path: Path, label: str) -> Optional[str]:
    try:
        font_id = QFontDatabase.addApplicationFont(str(font_path))
    except Exception as exc:
        _CLIENT_LOGGER.warning("Failed to load %s font from %s: %s", label, font_path, exc)
        return None
    if font_id == -1:
        _CLIENT_LOGGER.warning("%s font file at %s could not be registered; falling back", label, font_path)
        return None
    families = QFontDatabase.applicationFontFamilies(font_id)
    if not families:
        _CLIENT_LOGGER.warning("%s font registered but no families reported; falling back", label)
        return None
    _CLIENT_LOGGER.debug("Using %s font family '%s' from %s", label, families[0], font_path)
    return families[0]


def resolve_font_family(
    preferred_family: str,
    *,
    fonts_dir: Path = FONTS_DIR,
    installed_candidates: Iterable[str] = INSTALLED_CANDIDATES,
) -> str:
    """Pick the family used for glyph rendering.

    Order: font files listed in ``fonts/preferred_fonts.txt``, the requested
    family if installed, any of ``installed_candidates``, then the platform's
    general system font.
    """
    preferred_marker = fonts_dir / "preferred_fonts.txt"
    if preferred_marker.exists():
        try:
            lines = preferred_marker.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            _CLIENT_LOGGER.warning("Failed to read preferred fonts list at %s: %s", preferred_marker, exc)
            lines = []
        for raw_line in lines:
            candidate_name = raw_line.strip()
            if not candidate_name or candidate_name.startswith(("#", ";")):
                continue
            candidate_path = _find_font_case_insensitive(fonts_dir, candidate_name)
            if candidate_path is None:
                _CLIENT_LOGGER.warning(
                    "Preferred font '%s' listed in %s but not found", candidate_name, preferred_marker
                )
                continue
            family = _register_font_file(candidate_path, f"Preferred font '{candidate_path.name}'")
            if family:
                return family

    try:
        available = set(QFontDatabase.families())
    except Exception as exc:
        _CLIENT_LOGGER.warning("Could not enumerate installed fonts: %s", exc)
        available = set()
    if preferred_family and preferred_family in available:
        _CLIENT_LOGGER.debug("Using installed font family '%s'", preferred_family)
        return preferred_family
    for candidate in installed_candidates:
        if candidate and candidate in available:
            _CLIENT_LOGGER.info("Font family '%s' not installed; using '%s'", preferred_family, candidate)
            return candidate

    fallback = QFontDatabase.systemFont(QFontDatabase.SystemFont.GeneralFont).family() or DEFAULT_FALLBACK_FAMILY
    _CLIENT_LOGGER.warning("Font family '%s' unavailable; falling back to %s", preferred_family, fallback)
    return fallback


class QtGlyphMeasurer:
    """Callable ``(char, font_size) -> advance`` using ``QFontMetricsF``.

    Advances are cached per (char, size); the cache is dropped when the family changes.
    Requires a ``QGuiApplication`` instance.
    """

    def __init__(self, font_family: str) -> None:
        self._font_family = font_family
        self._metrics: Dict[float, QFontMetricsF] = {}
        self._cache: Dict[Tuple[str, float], float] = {}

    @property
    def font_family(self) -> str:
        return self._font_family

    def set_font_family(self, font_family: str) -> None:
        if font_family == self._font_family:
            return
        self._font_family = font_family
        self._metrics.clear()
        self._cache.clear()

    def __call__(self, char: str, font_size: float) -> float:
        key = (char, float(font_size))
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        advance = float(self._metrics_for(font_size).horizontalAdvance(char))
        self._cache[key] = advance
        return advance

    def ascent_ratio(self, font_size: float) -> float:
        """Real font ascent as a fraction of the font size."""
        if font_size <= 0:
            return 0.0
        return float(self._metrics_for(font_size).ascent()) / float(font_size)

    def _metrics_for(self, font_size: float) -> QFontMetricsF:
        metrics = self._metrics.get(font_size)
        if metrics is None:
            font = QFont(self._font_family)
            font.setPixelSize(max(1, int(round(font_size))))
            metrics = QFontMetricsF(font)
            self._metrics[font_size] = metrics
        return metrics
