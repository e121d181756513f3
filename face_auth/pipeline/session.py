import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
import numpy as np

from face_auth.app.config import AppConfig
from face_auth.app.errors import CameraUnavailable, NoEnrollmentFound, NoFaceDetected, SessionNotReady
from face_auth.app.utils import monotonic_ms
from face_auth.db import TemplateStore
from face_auth.models import (
    FrameSource,
    LandmarkSource,
    MediaPipeLandmarkSource,
    NullRenderer,
    OpenCVCamera,
    OverlayRenderer,
    Renderer,
)
from face_auth.models.overlay import face_tesselation
from .encoder import encode
from .scheduler import DetectionScheduler, InferenceGate, refresh_every
from .similarity import decide, score


logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    IDLE = "idle"
    CAMERA_ACTIVE = "camera_active"
    DETECTING = "detecting"


@dataclass
class AuthResult:
    score: float
    accepted: bool
    threshold: float


class FaceAuthSession:
    """
    Owns one camera/detector session and sequences enroll and authenticate.

    Idle -> CameraActive once the camera opens, CameraActive -> Detecting once
    a frame with real dimensions arrives. Enroll and authenticate are only
    accepted while Detecting and share the live loop's inference gate.
    """

    def __init__(
        self,
        cfg: AppConfig,
        camera: FrameSource,
        source: LandmarkSource,
        store: TemplateStore,
        renderer: Optional[Renderer] = None,
        clock: Callable[[], int] = monotonic_ms,
        refresh=None,
    ):
        self.cfg = cfg
        self.camera = camera
        self.source = source
        self.store = store
        self.renderer = renderer or NullRenderer()
        self.gate = InferenceGate(source, clock)
        self.scheduler = DetectionScheduler(
            self.gate,
            self.camera.read,
            self.renderer,
            refresh=refresh or refresh_every(cfg.display.refresh_hz),
            is_active=lambda: self.state is SessionState.DETECTING,
        )
        self.state = SessionState.IDLE
        self.frame_size: Optional[Tuple[int, int]] = None
        self.last_result: Optional[AuthResult] = None
        self._model_ready = False

    @property
    def threshold(self) -> float:
        return float(self.cfg.thresholds.match_threshold)

    async def start(self) -> None:
        if self.state is not SessionState.IDLE:
            return
        if not self._model_ready:
            await self.source.load()
            self._model_ready = True
        self.camera.open()
        self.state = SessionState.CAMERA_ACTIVE
        logger.info("Camera active, waiting for first frame")
        try:
            self.frame_size = await self._wait_for_frame()
        except BaseException:
            self.camera.release()
            self.state = SessionState.IDLE
            raise
        self.state = SessionState.DETECTING
        self.scheduler.start()
        logger.info("Detecting on %dx%d frames", *self.frame_size)

    async def _wait_for_frame(self) -> Tuple[int, int]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.cfg.camera.ready_timeout
        while True:
            frame = self.camera.read()
            if frame is not None and frame.ndim >= 2 and frame.shape[0] > 0 and frame.shape[1] > 0:
                return int(frame.shape[1]), int(frame.shape[0])
            if loop.time() >= deadline:
                raise CameraUnavailable(f"no frames from camera within {self.cfg.camera.ready_timeout:.1f}s")
            await asyncio.sleep(self.cfg.camera.ready_poll_interval)

    async def _capture_vector(self) -> np.ndarray:
        if self.state is not SessionState.DETECTING:
            raise SessionNotReady(f"session is {self.state.value}, start the camera first")
        frame = self.camera.read()
        if frame is None:
            raise CameraUnavailable("camera stopped delivering frames")
        landmarks = await self.gate.detect(frame)
        if landmarks is None:
            raise NoFaceDetected("No face detected. Try again.")
        return encode(landmarks, self.cfg.detector.num_landmarks or None)

    async def enroll_face(self) -> np.ndarray:
        vec = await self._capture_vector()
        self.store.enroll(vec)
        logger.info("Face enrolled (%d features)", vec.size)
        return vec

    async def authenticate_face(self) -> AuthResult:
        vec = await self._capture_vector()
        enrolled = self.store.load()
        if enrolled is None:
            raise NoEnrollmentFound("No registered face found. Register first.")
        sim = score(enrolled, vec)
        result = AuthResult(score=sim, accepted=decide(sim, self.threshold), threshold=self.threshold)
        self.last_result = result
        logger.info("Authentication %s (similarity %.4f)", "accepted" if result.accepted else "rejected", sim)
        return result

    async def close(self) -> None:
        """Tear down the camera session; the loaded detector is kept for the next start()."""
        was = self.state
        self.state = SessionState.IDLE
        try:
            await self.scheduler.stop()
        finally:
            self.camera.release()
        if was is not SessionState.IDLE:
            logger.info("Session closed")

    async def shutdown(self) -> None:
        await self.close()
        self.source.close()
        self._model_ready = False
        self.store.close()
        close_renderer = getattr(self.renderer, "close", None)
        if close_renderer is not None:
            close_renderer()


def build_session(cfg: AppConfig) -> FaceAuthSession:
    camera = OpenCVCamera(cfg.camera)
    source = MediaPipeLandmarkSource(
        cfg.detector.model_path,
        model_url=cfg.detector.model_url,
        delegate=cfg.detector.delegate,
        num_faces=cfg.detector.num_faces,
        min_detection_confidence=cfg.detector.min_detection_confidence,
    )
    store = TemplateStore(cfg.paths.db_path, cfg.paths.template_slot)
    renderer = OverlayRenderer(show=cfg.display.show_overlay, connections=face_tesselation())
    return FaceAuthSession(cfg, camera, source, store, renderer)
