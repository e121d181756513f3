import asyncio
import os
from typing import List, Optional

import numpy as np
import pytest

from face_auth.app.config import AppConfig
from face_auth.app.errors import CameraUnavailable, ModelLoadFailure
from face_auth.db import TemplateStore
from face_auth.models.base import FrameSource, LandmarkSet, LandmarkSource, Renderer
from face_auth.pipeline.session import FaceAuthSession


class FakeCamera(FrameSource):
    def __init__(self, frames: Optional[list] = None, fail: bool = False):
        # Frames are served in order, the last one repeats
        self.frames = list(frames) if frames is not None else [np.zeros((4, 6, 3), dtype=np.uint8)]
        self.fail = fail
        self.opened = False
        self.released = 0

    def open(self):
        if self.fail:
            raise CameraUnavailable("camera denied")
        self.opened = True

    def read(self):
        if not self.opened:
            return None
        if len(self.frames) > 1:
            return self.frames.pop(0)
        return self.frames[0]

    def release(self):
        self.opened = False
        self.released += 1


class FakeLandmarkSource(LandmarkSource):
    def __init__(self, default: Optional[LandmarkSet] = None, fail_load: bool = False):
        self.default = default
        self.queue: list = []
        self.fail_load = fail_load
        self.loaded = 0
        self.closed = False
        self.timestamps: List[int] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.delay = 0.0

    async def load(self):
        if self.fail_load:
            raise ModelLoadFailure("model missing")
        self.loaded += 1

    async def detect(self, frame_bgr, timestamp_ms):
        self.timestamps.append(timestamp_ms)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Give other callers a chance to interleave
            await asyncio.sleep(self.delay)
            if self.queue:
                item = self.queue.pop(0)
                if isinstance(item, Exception):
                    raise item
                return item
            return self.default
        finally:
            self.in_flight -= 1

    def close(self):
        self.closed = True


class BrokenRenderer(Renderer):
    def __init__(self):
        self.attempts = 0

    def render(self, frame_bgr, landmarks):
        self.attempts += 1
        raise RuntimeError("display unavailable")


class RecordingRenderer(Renderer):
    def __init__(self):
        self.calls = []

    def render(self, frame_bgr, landmarks):
        self.calls.append((frame_bgr, landmarks))


def frozen_clock(value: int = 1000):
    return lambda: value


async def wait_forever():
    await asyncio.Event().wait()


def landmarks_from_vector(vec) -> LandmarkSet:
    arr = np.asarray(vec, dtype=np.float64).reshape(-1, 3)
    return LandmarkSet.from_xyz(arr.tolist())


@pytest.fixture
def cfg(tmp_path):
    c = AppConfig()
    c.paths.data_dir = str(tmp_path)
    c.paths.db_path = os.path.join(tmp_path, "test.db")
    c.detector.num_landmarks = 2
    c.camera.ready_poll_interval = 0.001
    c.camera.ready_timeout = 0.05
    return c


@pytest.fixture
def make_session(cfg):
    def _make(camera=None, source=None, renderer=None, clock=None):
        store = TemplateStore(cfg.paths.db_path, cfg.paths.template_slot)
        return FaceAuthSession(
            cfg,
            camera or FakeCamera(),
            source or FakeLandmarkSource(),
            store,
            renderer=renderer,
            clock=clock or frozen_clock(),
            refresh=wait_forever,
        )

    return _make
