import logging
from typing import Optional
import numpy as np

from face_auth.app.config import CameraConfig
from face_auth.app.errors import CameraUnavailable
from .base import FrameSource


logger = logging.getLogger(__name__)


class OpenCVCamera(FrameSource):
    def __init__(self, cfg: CameraConfig):
        self.cfg = cfg
        self.cap = None

    def _configure(self, cap):
        import cv2

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.cfg.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.cfg.height)
        cap.set(cv2.CAP_PROP_FPS, self.cfg.fps)
        return cap

    def open(self) -> None:
        import cv2

        if self.cap is not None:
            return
        # Prefer V4L2 backend, fall back to the default one
        cap = self._configure(cv2.VideoCapture(self.cfg.device_index, cv2.CAP_V4L2))
        if not cap.isOpened():
            cap.release()
            cap = self._configure(cv2.VideoCapture(self.cfg.device_index))
        if not cap.isOpened():
            cap.release()
            raise CameraUnavailable(f"Camera {self.cfg.device_index} could not be opened")
        logger.info("Camera %d opened", self.cfg.device_index)
        self.cap = cap

    def read(self) -> Optional[np.ndarray]:
        if self.cap is None:
            return None
        ok, frame = self.cap.read()
        return frame if ok else None

    def release(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None
