import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional
import numpy as np

from face_auth.app.utils import monotonic_ms
from face_auth.models.base import LandmarkSet, LandmarkSource, Renderer


logger = logging.getLogger(__name__)


class InferenceGate:
    """
    Single-flight access to a landmark source.

    Every detect() call, whether from the live loop or a one-shot
    enroll/authenticate, goes through the same lock and draws its timestamp
    while holding it, so at most one inference is outstanding and timestamps
    strictly increase across all callers.
    """

    def __init__(self, source: LandmarkSource, clock: Callable[[], int] = monotonic_ms):
        self.source = source
        self._clock = clock
        self._lock = asyncio.Lock()
        self._last_ts: Optional[int] = None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def last_timestamp(self) -> Optional[int]:
        return self._last_ts

    def _next_timestamp(self) -> int:
        ts = int(self._clock())
        if self._last_ts is not None and ts <= self._last_ts:
            ts = self._last_ts + 1
        self._last_ts = ts
        return ts

    async def detect(self, frame_bgr: np.ndarray) -> Optional[LandmarkSet]:
        async with self._lock:
            return await self.source.detect(frame_bgr, self._next_timestamp())


class SchedulerState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


def refresh_every(hz: float) -> Callable[[], Awaitable[None]]:
    period = 1.0 / max(float(hz), 1e-3)

    async def _refresh() -> None:
        await asyncio.sleep(period)

    return _refresh


class DetectionScheduler:
    """Live landmark loop feeding the overlay renderer, one tick per display refresh."""

    def __init__(
        self,
        gate: InferenceGate,
        frames: Callable[[], Optional[np.ndarray]],
        renderer: Renderer,
        refresh: Optional[Callable[[], Awaitable[None]]] = None,
        is_active: Optional[Callable[[], bool]] = None,
    ):
        self.gate = gate
        self._frames = frames
        self.renderer = renderer
        self._refresh = refresh or refresh_every(60.0)
        self._is_active = is_active or (lambda: True)
        self._cancelled = False
        self._in_tick = False
        self._task: Optional[asyncio.Task] = None
        self.state = SchedulerState.STOPPED
        self.ticks = 0
        self.last_landmarks: Optional[LandmarkSet] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def tick(self) -> Optional[LandmarkSet]:
        try:
            frame = self._frames()
        except Exception as e:
            logger.warning("Frame read failed, skipping tick: %s", e)
            return None
        if frame is None:
            return None
        self._in_tick = True
        try:
            try:
                landmarks = await self.gate.detect(frame)
            except Exception as e:
                # A failed inference only costs this tick
                logger.warning("Landmark detection failed, skipping tick: %s", e)
                landmarks = None
        finally:
            self._in_tick = False
        self.ticks += 1
        if not self._is_active():
            return None
        self.last_landmarks = landmarks
        try:
            self.renderer.render(frame, landmarks)
        except Exception as e:
            # Rendering is observational only
            logger.warning("Overlay rendering failed: %s", e)
        return landmarks

    async def run(self) -> None:
        self.state = SchedulerState.RUNNING
        logger.debug("Detection loop started")
        try:
            while not self._cancelled:
                await self.tick()
                if self._cancelled:
                    break
                await self._refresh()
        except Exception:
            logger.exception("Detection loop crashed")
        finally:
            self.state = SchedulerState.STOPPED
            logger.debug("Detection loop stopped after %d ticks", self.ticks)

    def start(self) -> asyncio.Task:
        if self._task is not None and not self._task.done():
            return self._task
        self._cancelled = False
        self.state = SchedulerState.RUNNING
        self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    def cancel(self) -> None:
        """Stop scheduling further ticks; an in-flight inference is allowed to finish."""
        self._cancelled = True

    async def stop(self) -> None:
        self.cancel()
        task, self._task = self._task, None
        if task is not None:
            if not self._in_tick:
                # Only waiting for the next refresh, safe to interrupt
                task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.state = SchedulerState.STOPPED
