import logging
import os
from typing import Optional

import numpy as np

from face_auth.app.errors import ModelLoadFailure
from .assets import ensure_model
from .base import LandmarkSet, LandmarkSource


logger = logging.getLogger(__name__)


class MediaPipeLandmarkSource(LandmarkSource):
    """
    MediaPipe FaceLandmarker in VIDEO running mode.
    - Single face, 478 normalized (x, y, z) landmarks.
    - GPU delegate is requested first and falls back to CPU.

    The task file is downloaded from model_url on first load when it is
    missing. FACE_AUTH_LANDMARKER_PATH overrides the configured path.
    """

    def __init__(
        self,
        model_path: str,
        model_url: Optional[str] = None,
        delegate: str = "GPU",
        num_faces: int = 1,
        min_detection_confidence: float = 0.5,
    ):
        self.model_path = model_path
        self.model_url = model_url
        self.delegate = delegate.upper()
        self.num_faces = int(num_faces)
        self.min_detection_confidence = float(min_detection_confidence)
        self._landmarker = None

    @property
    def ready(self) -> bool:
        return self._landmarker is not None

    async def load(self) -> None:
        if self._landmarker is not None:
            return
        if self.model_url:
            ensure_model(self.model_path, self.model_url)
        elif not os.path.exists(self.model_path):
            raise ModelLoadFailure(f"Face landmarker model not found at {self.model_path}")
        try:
            from mediapipe.tasks import python as mp_tasks
            from mediapipe.tasks.python import vision
        except ImportError as e:
            raise ModelLoadFailure("mediapipe is required for MediaPipeLandmarkSource") from e

        delegates = [mp_tasks.BaseOptions.Delegate.CPU]
        if self.delegate == "GPU":
            delegates.insert(0, mp_tasks.BaseOptions.Delegate.GPU)

        last_err: Optional[Exception] = None
        for delegate in delegates:
            options = vision.FaceLandmarkerOptions(
                base_options=mp_tasks.BaseOptions(model_asset_path=self.model_path, delegate=delegate),
                running_mode=vision.RunningMode.VIDEO,
                num_faces=self.num_faces,
                min_face_detection_confidence=self.min_detection_confidence,
                output_face_blendshapes=False,
                output_facial_transformation_matrixes=False,
            )
            try:
                self._landmarker = vision.FaceLandmarker.create_from_options(options)
            except Exception as e:
                logger.info("Landmarker delegate %s unavailable: %s", delegate, e)
                last_err = e
                continue
            logger.info("Face landmarker loaded from %s (delegate=%s)", self.model_path, delegate)
            return
        raise ModelLoadFailure(f"Could not initialize face landmarker: {last_err}") from last_err

    async def detect(self, frame_bgr: np.ndarray, timestamp_ms: int) -> Optional[LandmarkSet]:
        if self._landmarker is None:
            raise ModelLoadFailure("face landmarker used before load()")
        import cv2
        import mediapipe as mp

        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self._landmarker.detect_for_video(image, int(timestamp_ms))
        if not result or not result.face_landmarks:
            return None
        return LandmarkSet.from_xyz((p.x, p.y, p.z) for p in result.face_landmarks[0])

    def close(self) -> None:
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
