import json
import time
import numpy as np


def now_ts() -> float:
    return time.time()


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


def serialize_vector(vec: np.ndarray) -> str:
    # Flat JSON list of numbers
    return json.dumps([float(v) for v in np.asarray(vec, dtype=np.float64).reshape(-1)])


def deserialize_vector(raw: str) -> np.ndarray:
    return np.asarray(json.loads(raw), dtype=np.float64).reshape(-1)
