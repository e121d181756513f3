from .base import LandmarkPoint, LandmarkSet, FrameSource, LandmarkSource, Renderer, NullRenderer
from .mediapipe_landmarker import MediaPipeLandmarkSource
from .opencv_camera import OpenCVCamera
from .overlay import OverlayRenderer
from .assets import ensure_model

__all__ = [
    "LandmarkPoint",
    "LandmarkSet",
    "FrameSource",
    "LandmarkSource",
    "Renderer",
    "NullRenderer",
    "MediaPipeLandmarkSource",
    "OpenCVCamera",
    "OverlayRenderer",
    "ensure_model",
]
