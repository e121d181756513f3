from typing import Optional, Sequence, Tuple
import cv2
import numpy as np

from .base import LandmarkSet, Renderer


def face_tesselation() -> Tuple[Tuple[int, int], ...]:
    """Face mesh edges from the MediaPipe face landmarker."""
    from mediapipe.tasks.python.vision.face_landmarker import FaceLandmarksConnections

    return tuple((c.start, c.end) for c in FaceLandmarksConnections.FACE_LANDMARKS_TESSELATION)


class OverlayRenderer(Renderer):
    """
    Draws the face mesh over the frame and keeps the last composed image.
    Without connections each landmark is drawn as a dot.
    """

    def __init__(
        self,
        show: bool = False,
        window: str = "face-auth",
        color=(0, 255, 0),
        connections: Optional[Sequence[Tuple[int, int]]] = None,
    ):
        self.show = show
        self.window = window
        self.color = color  # BGR
        self.connections = connections
        self.last_frame: Optional[np.ndarray] = None

    def render(self, frame_bgr: Optional[np.ndarray], landmarks: Optional[LandmarkSet]) -> None:
        if frame_bgr is None:
            return
        disp = frame_bgr.copy()
        if landmarks is not None:
            h, w = disp.shape[:2]
            pts = [(int(p.x * w), int(p.y * h)) for p in landmarks]
            edges = [(a, b) for a, b in (self.connections or ()) if a < len(pts) and b < len(pts)]
            if edges:
                for a, b in edges:
                    cv2.line(disp, pts[a], pts[b], self.color, 1)
            else:
                for pt in pts:
                    cv2.circle(disp, pt, 1, self.color, -1)
        self.last_frame = disp
        if self.show:
            cv2.imshow(self.window, disp)
            cv2.waitKey(1)

    def close(self) -> None:
        if self.show:
            cv2.destroyWindow(self.window)
