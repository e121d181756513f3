from typing import Optional
import numpy as np

from face_auth.app.errors import DimensionMismatch
from face_auth.models.base import LandmarkSet


def encode(landmarks: LandmarkSet, num_points: Optional[int] = None) -> np.ndarray:
    """
    Flatten landmarks into a feature vector [x0, y0, z0, x1, y1, z1, ...].

    Raw detector coordinates are used as-is, no scale or translation
    normalization is applied.
    """
    if num_points is not None and len(landmarks) != int(num_points):
        raise DimensionMismatch(f"expected {num_points} landmarks, got {len(landmarks)}")
    vec = np.empty(3 * len(landmarks), dtype=np.float64)
    for i, p in enumerate(landmarks):
        vec[3 * i] = p.x
        vec[3 * i + 1] = p.y
        vec[3 * i + 2] = p.z
    return vec
