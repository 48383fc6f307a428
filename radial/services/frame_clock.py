"""
Frame clock contract.

A frame clock fires callbacks once before the next paint. The engine uses it
to coalesce redraws, to throttle drag updates and to time bounce().

ManualFrameClock advances only when told to, which makes it suitable for
headless rendering and tests. The Qt implementation lives in
radial.views.canvas.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict


logger = logging.getLogger(__name__)


FrameCallback = Callable[[float], None]


class FrameClock(ABC):
    """Source of frame callbacks and of the time they are measured in."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> int:
        """
        Schedule `callback(now_ms)` for the next frame.

        Returns:
            Handle accepted by cancel_frame()
        """

    @abstractmethod
    def cancel_frame(self, handle: int):
        """Cancel a pending callback. Unknown or fired handles are ignored."""

    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds."""


class ManualFrameClock(FrameClock):
    """
    Frame clock driven explicitly by tick().

    Each tick() advances time by `frame_ms` and fires the callbacks that were
    pending when it started; callbacks requested while firing wait for the
    next tick.
    """

    def __init__(self, frame_ms: float = 16.0, start_ms: float = 0.0):
        self.frame_ms = frame_ms
        self._now = start_ms
        self._ids = itertools.count(1)
        self._pending: Dict[int, FrameCallback] = {}
        self._firing: Dict[int, FrameCallback] = {}

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int):
        self._pending.pop(handle, None)
        # Also drops callbacks of the frame being fired that have not run yet
        self._firing.pop(handle, None)

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of callbacks waiting for the next tick."""
        return len(self._pending)

    def advance(self, ms: float):
        """Move time forward without firing callbacks."""
        self._now += ms

    def tick(self) -> int:
        """
        Advance one frame and fire the pending callbacks.

        Returns:
            Number of callbacks fired
        """
        self._now += self.frame_ms
        self._firing, self._pending = self._pending, {}
        fired = 0
        try:
            while self._firing:
                handle = next(iter(self._firing))
                callback = self._firing.pop(handle)
                callback(self._now)
                fired += 1
        finally:
            self._firing = {}
        return fired

    def run(self, max_frames: int = 1000) -> int:
        """
        Tick until nothing is pending or `max_frames` is reached.

        Returns:
            Number of frames ticked
        """
        frames = 0
        while self._pending and frames < max_frames:
            self.tick()
            frames += 1
        if self._pending:
            logger.warning(f"Frame clock still has {len(self._pending)} callbacks after {frames} frames")
        return frames
