from __future__ import annotations

import logging
from typing import Callable, Generic, Optional, TypeVar

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]

_CLIENT_LOGGER = logging.getLogger("TypeForce.Client")

DEFAULT_TICK_INTERVAL_MS = 16

SampleT = TypeVar("SampleT")


class TickScheduler(Generic[SampleT]):
    """Coalesces pointer samples so at most one force step runs per frame tick.

    Samples submitted between two ticks replace each other. A tick during which a
    reflow was reported does not apply force; the pending sample carries over to
    the next tick so glyph references are never stale. With coalescing disabled
    samples apply on submit, except after a reflow, when they wait for a tick too.
    """

    def __init__(
        self,
        callback: Callable[[SampleT], None],
        *,
        after: AfterFn,
        after_cancel: Optional[AfterCancelFn] = None,
        interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        enabled: bool = True,
        trace: bool = False,
    ) -> None:
        self._callback = callback
        self._after = after
        self._after_cancel = after_cancel
        self.interval_ms = max(1, int(interval_ms))
        self.enabled = enabled
        self._trace = trace
        self._pending: Optional[SampleT] = None
        self._has_pending = False
        self._handle: object | None = None
        self._reflow_in_tick = False
        self.dropped_samples = 0
        self.ticks_applied = 0

    @property
    def has_pending(self) -> bool:
        return self._has_pending

    def submit(self, sample: SampleT) -> None:
        if not self.enabled and not self._reflow_in_tick and not self._has_pending:
            self._apply(sample)
            return
        if self._has_pending:
            self.dropped_samples += 1
        self._pending = sample
        self._has_pending = True
        self._ensure_scheduled()

    def mark_reflow(self) -> None:
        """Report that the glyph sequence was replaced during the current tick."""
        self._reflow_in_tick = True
        if self._has_pending:
            self._ensure_scheduled()

    def run_tick(self) -> None:
        self._handle = None
        if self._reflow_in_tick:
            self._reflow_in_tick = False
            if self._has_pending:
                if self._trace:
                    _CLIENT_LOGGER.debug("Force tick deferred; reflow ran in this tick")
                self._ensure_scheduled()
            return
        if not self._has_pending:
            return
        sample = self._pending
        self._pending = None
        self._has_pending = False
        self._apply(sample)  # type: ignore[arg-type]

    def cancel(self) -> None:
        handle = self._handle
        self._handle = None
        self._pending = None
        self._has_pending = False
        if handle is not None and self._after_cancel is not None:
            try:
                self._after_cancel(handle)
            except Exception as exc:
                _CLIENT_LOGGER.debug("Tick cancel failed: %s", exc)

    def _ensure_scheduled(self) -> None:
        if self._handle is None:
            self._handle = self._after(self.interval_ms, self.run_tick)
            if self._handle is None:
                # Schedulers that return no handle still fire; keep a sentinel.
                self._handle = True

    def _apply(self, sample: SampleT) -> None:
        self.ticks_applied += 1
        if self._trace:
            _CLIENT_LOGGER.debug(
                "Force tick #%d (dropped=%d) sample=%s", self.ticks_applied, self.dropped_samples, sample
            )
        self._callback(sample)
