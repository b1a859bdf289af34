"""Per-step countdown shown as a soft nudge; it never cancels a request."""

from __future__ import annotations

import math
import time
from typing import Callable

from .schemas import TimerState


class Timebox:
    def __init__(
        self,
        duration: int = 180,
        *,
        extend_by: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_duration = duration
        self.extend_by = extend_by
        self._clock = clock
        self.duration = duration
        self.started_at = clock()

    def reset(self) -> None:
        """Restart with the full duration (called on every step change)."""

        self.duration = self.default_duration
        self.started_at = self._clock()

    def extend(self) -> None:
        """Restart with the short extension window."""

        self.duration = self.extend_by
        self.started_at = self._clock()

    @property
    def remaining(self) -> int:
        elapsed = self._clock() - self.started_at
        return max(0, math.ceil(self.duration - elapsed))

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    def state(self, *, visible: bool) -> TimerState:
        return TimerState(visible=visible, duration=self.duration, remaining=self.remaining, expired=self.expired)
