from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

CLIENT_LOGGER_NAME = "TypeForce.Client"
LOG_DIR_ENV_VAR = "TYPEFORCE_LOG_DIR"
PROPAGATE_ENV_VAR = "TYPEFORCE_PROPAGATE_LOGS"
LOG_FILENAME = "typeforce-client.log"


def resolve_logs_dir(log_dir_name: str = "TypeForce") -> Path:
    """
    Resolve the directory to store canvas logs.

    Strategy:
    - Use TYPEFORCE_LOG_DIR if set.
    - Fall back to `<XDG state or cache>/<log_dir_name>/logs`, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / log_dir_name / "logs")
    candidates.append(cache_home / log_dir_name / "logs")
    candidates.append(Path.cwd() / "logs" / log_dir_name)

    for target in candidates:
        try:
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


class ReleaseLogLevelFilter(logging.Filter):
    """Promote debug logs to INFO in release builds so diagnostics stay visible."""

    def __init__(self, release_mode: bool) -> None:
        super().__init__()
        self._release_mode = release_mode

    def filter(self, record: logging.LogRecord) -> bool:
        if self._release_mode and record.levelno == logging.DEBUG:
            record.levelno = logging.INFO
            record.levelname = "INFO"
        return True


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def configure_client_logger(
    *,
    debug_enabled: bool,
    retention: int = 5,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Attach the rotating file handler to the client logger (idempotent)."""
    logger = logging.getLogger(CLIENT_LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug_enabled))
    logger.propagate = _env_flag(PROPAGATE_ENV_VAR)
    if not any(isinstance(existing, ReleaseLogLevelFilter) for existing in logger.filters):
        logger.addFilter(ReleaseLogLevelFilter(release_mode=not debug_enabled))
    if any(getattr(existing, "_typeforce_handler", False) for existing in logger.handlers):
        return logger
    target_dir = log_dir or resolve_logs_dir()
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S")
    try:
        handler = build_rotating_file_handler(target_dir, LOG_FILENAME, retention=retention, formatter=formatter)
    except OSError as exc:
        logger.warning("Could not open log file in %s: %s", target_dir, exc)
        return logger
    handler._typeforce_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.debug("Logging to %s (retention=%d)", target_dir / LOG_FILENAME, max(1, retention))
    return logger
