"""Debounced live-preview scheduling.

Every edit reschedules a compile pass after a quiet period. Passes are
numbered; a pass that finishes after a newer one was scheduled is dropped
instead of delivered, so stale output never overwrites fresh output.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from friendly_mermaid.pipeline import PreviewResult, render_preview
from friendly_mermaid.utils.config import settings

logger = logging.getLogger(__name__)


class PreviewScheduler:
    def __init__(
        self,
        on_result: Callable[[PreviewResult], None],
        *,
        delay: Optional[float] = None,
        render: Callable[[str], PreviewResult] = render_preview,
    ) -> None:
        self._on_result = on_result
        self._render = render
        self._delay = settings.debounce_seconds if delay is None else delay
        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    def schedule(self, source: str) -> int:
        """Schedule a pass for ``source``, cancelling any pass not yet started."""
        with self._lock:
            if self._closed:
                raise RuntimeError("PreviewScheduler is closed")
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            timer = threading.Timer(self._delay, self._run, args=(generation, source))
            timer.daemon = True
            timer.name = f"preview-pass-{generation}"
            self._timer = timer
            timer.start()
        logger.debug("Scheduled preview pass %d", generation)
        return generation

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return not self._closed and generation == self._generation

    def _run(self, generation: int, source: str) -> None:
        if not self._is_current(generation):
            return
        try:
            result = self._render(source)
        except Exception:
            logger.exception("Preview pass %d failed", generation)
            return
        # staleness check and delivery are atomic with respect to schedule()
        with self._lock:
            if not self._is_current(generation):
                logger.debug("Discarding superseded preview pass %d", generation)
                return
            self._on_result(result)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            # in-flight passes become stale
            self._generation += 1

    def close(self) -> None:
        self.cancel()
        with self._lock:
            self._closed = True
