"""Reveal animation for chart redraws.

Each drawing surface has at most one AnimationScheduler. Starting a draw on
a surface that is already animating restarts it from zero; nothing is
queued. Frames are delivered by a FrameScheduler supplied by the host.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from model.ChartState import Point


logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS = 800.0

FrameCallback = Callable[[float], None]
DrawCallback = Callable[[float], None]


def ease_out_quart(t: float) -> float:
    return 1.0 - (1.0 - t) ** 4


def linear(t: float) -> float:
    return t


EASINGS: Dict[str, Callable[[float], float]] = {
    'easeOutQuart': ease_out_quart,
    'linear': linear,
}


def get_easing(name: str) -> Callable[[float], float]:
    if name not in EASINGS:
        raise ValueError(f"Unknown easing: {name!r}")
    return EASINGS[name]


def interpolate_points(points: Sequence[Point], baseline: float, eased: float) -> List[Point]:
    """Move each point's y from the baseline towards its final position."""
    return [(x, baseline + (y - baseline) * eased) for x, y in points]


class FrameScheduler(ABC):
    """Host hook that calls back once per display frame."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> int:
        """Schedule callback(timestamp_ms) for the next frame; returns a handle."""
        pass

    @abstractmethod
    def cancel_frame(self, handle: int) -> None:
        pass


class ManualFrameScheduler(FrameScheduler):
    """Frame scheduler driven explicitly by the host (or a test).

    `pump(timestamp)` runs every callback requested before the call;
    callbacks requested while pumping run on the next pump.
    """

    def __init__(self):
        self._pending: Dict[int, FrameCallback] = {}
        self._handles = itertools.count(1)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def pump(self, timestamp_ms: float) -> int:
        """Run one frame; returns the number of callbacks invoked."""
        due = self._pending
        self._pending = {}
        for callback in due.values():
            callback(timestamp_ms)
        return len(due)

    def run_until_idle(self, start_ms: float = 0.0, frame_ms: float = 16.0, max_frames: int = 1000) -> float:
        """Pump frames at a fixed interval until nothing is pending.

        Returns:
            Timestamp of the last frame pumped
        """
        now = start_ms
        for _ in range(max_frames):
            if not self._pending:
                break
            self.pump(now)
            now += frame_ms
        return now


class AnimationStatus(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    DONE = 'done'


class AnimationScheduler:
    """Drives one reveal animation on one drawing surface.

    The draw callback receives the eased progress (0..1) and is expected to
    redraw every series interpolated at that progress.
    """

    def __init__(self, surface_id: str, frames: FrameScheduler,
                 duration_ms: float = DEFAULT_DURATION_MS, easing: str = 'easeOutQuart'):
        self.surface_id = surface_id
        self.frames = frames
        self.duration_ms = duration_ms
        self.easing = get_easing(easing)
        self.status = AnimationStatus.IDLE
        self.start_ms: Optional[float] = None
        self.eased = 0.0
        self._draw: Optional[DrawCallback] = None
        self._handle: Optional[int] = None

    @property
    def running(self) -> bool:
        return self.status == AnimationStatus.RUNNING

    def start(self, draw: DrawCallback, now_ms: Optional[float] = None) -> None:
        """Begin (or restart) the animation.

        Args:
            draw: Callback invoked with the eased progress on every frame
            now_ms: Start time; taken from the first frame when omitted
        """
        if self.running:
            logger.debug("Restarting animation on %s", self.surface_id)
            self._cancel_pending()
        self._draw = draw
        self.start_ms = now_ms
        self.eased = 0.0
        self.status = AnimationStatus.RUNNING
        self._handle = self.frames.request_frame(self._on_frame)

    def _on_frame(self, timestamp_ms: float) -> None:
        self._handle = None
        if not self.running or self._draw is None:
            return
        if self.start_ms is None:
            self.start_ms = timestamp_ms
        elapsed = timestamp_ms - self.start_ms
        progress = 1.0 if self.duration_ms <= 0 else max(0.0, min(1.0, elapsed / self.duration_ms))
        self.eased = self.easing(progress)
        self._draw(self.eased)
        if progress >= 1.0:
            self.status = AnimationStatus.DONE
            return
        self._handle = self.frames.request_frame(self._on_frame)

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self.frames.cancel_frame(self._handle)
            self._handle = None

    def stop(self) -> None:
        """Cancel the pending frame and return to Idle."""
        self._cancel_pending()
        self._draw = None
        self.status = AnimationStatus.IDLE

    def current_progress(self) -> float:
        """Eased progress a non-animated redraw should use right now."""
        if self.running:
            return self.eased
        return 1.0


class AnimationRegistry:
    """Keeps exactly one AnimationScheduler per drawing surface."""

    def __init__(self, frames: FrameScheduler, duration_ms: float = DEFAULT_DURATION_MS,
                 easing: str = 'easeOutQuart'):
        self.frames = frames
        self.duration_ms = duration_ms
        self.easing = easing
        self._schedulers: Dict[str, AnimationScheduler] = {}

    def get(self, surface_id: str) -> AnimationScheduler:
        if surface_id not in self._schedulers:
            self._schedulers[surface_id] = AnimationScheduler(surface_id, self.frames, self.duration_ms, self.easing)
        return self._schedulers[surface_id]

    def find(self, surface_id: str) -> Optional[AnimationScheduler]:
        return self._schedulers.get(surface_id)

    def start(self, surface_id: str, draw: DrawCallback, now_ms: Optional[float] = None) -> AnimationScheduler:
        scheduler = self.get(surface_id)
        scheduler.start(draw, now_ms)
        return scheduler

    def stop(self, surface_id: str) -> None:
        """Stop and forget the scheduler for a surface."""
        scheduler = self._schedulers.pop(surface_id, None)
        if scheduler is not None:
            scheduler.stop()

    def __len__(self) -> int:
        return len(self._schedulers)
