import numpy as np

from face_auth.app.errors import DegenerateVector, DimensionMismatch


DEFAULT_THRESHOLD = 0.9


def score(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity in [-1, 1] between two feature vectors."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.ndim != 1 or b.ndim != 1 or a.shape[0] != b.shape[0]:
        raise DimensionMismatch(f"cannot compare vectors of shape {a.shape} and {b.shape}")
    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
        raise DegenerateVector("feature vectors must be finite")
    na = float(np.linalg.norm(a))
    nb = float(np.linalg.norm(b))
    if na == 0.0 or nb == 0.0:
        raise DegenerateVector("cosine similarity is undefined for a zero-magnitude vector")
    sim = float(np.dot(a, b) / (na * nb))
    return float(np.clip(sim, -1.0, 1.0))


def decide(similarity: float, threshold: float = DEFAULT_THRESHOLD) -> bool:
    # Equality rejects
    return similarity > threshold
