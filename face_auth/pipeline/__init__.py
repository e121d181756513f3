from .encoder import encode
from .similarity import DEFAULT_THRESHOLD, decide, score
from .scheduler import DetectionScheduler, InferenceGate, SchedulerState
from .session import AuthResult, FaceAuthSession, SessionState, build_session

__all__ = [
    "encode",
    "score",
    "decide",
    "DEFAULT_THRESHOLD",
    "InferenceGate",
    "DetectionScheduler",
    "SchedulerState",
    "AuthResult",
    "FaceAuthSession",
    "SessionState",
    "build_session",
]
