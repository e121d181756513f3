import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple
import numpy as np


@dataclass(frozen=True)
class LandmarkPoint:
    x: float
    y: float
    z: float

    def __post_init__(self):
        if not all(math.isfinite(v) for v in (self.x, self.y, self.z)):
            raise ValueError(f"landmark coordinates must be finite: {(self.x, self.y, self.z)}")


@dataclass(frozen=True)
class LandmarkSet:
    """Ordered face landmarks; index i is the same anatomical point on every call."""

    points: Tuple[LandmarkPoint, ...]

    def __post_init__(self):
        if not self.points:
            raise ValueError("landmark set must not be empty")

    @classmethod
    def from_xyz(cls, coords: Iterable[Sequence[float]]) -> "LandmarkSet":
        return cls(tuple(LandmarkPoint(float(c[0]), float(c[1]), float(c[2])) for c in coords))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)


class FrameSource:
    def open(self) -> None:
        raise NotImplementedError

    def read(self) -> Optional[np.ndarray]:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError


class LandmarkSource:
    """Asynchronous landmark detector. Timestamps must strictly increase."""

    async def load(self) -> None:
        raise NotImplementedError

    async def detect(self, frame_bgr: np.ndarray, timestamp_ms: int) -> Optional[LandmarkSet]:
        raise NotImplementedError

    def close(self) -> None:
        pass


class Renderer:
    def render(self, frame_bgr: Optional[np.ndarray], landmarks: Optional[LandmarkSet]) -> None:
        raise NotImplementedError


class NullRenderer(Renderer):
    def render(self, frame_bgr: Optional[np.ndarray], landmarks: Optional[LandmarkSet]) -> None:
        return None
