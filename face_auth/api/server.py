from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from face_auth.app.config import AppConfig, load_config
from face_auth.app.errors import (
    CameraUnavailable,
    ContractViolation,
    FaceAuthError,
    ModelLoadFailure,
    NoEnrollmentFound,
    NoFaceDetected,
    SessionNotReady,
)
from face_auth.app.log import setup_logging
from face_auth.pipeline.session import FaceAuthSession, build_session


ERROR_STATUS = [
    (CameraUnavailable, 503),
    (ModelLoadFailure, 503),
    (SessionNotReady, 409),
    (NoFaceDetected, 422),
    (NoEnrollmentFound, 404),
    (ContractViolation, 500),
]


class SessionResponse(BaseModel):
    state: str
    frame_width: Optional[int] = None
    frame_height: Optional[int] = None
    last_score: Optional[float] = None


class EnrollResponse(BaseModel):
    enrolled: bool
    features: int


class AuthenticateResponse(BaseModel):
    score: float
    accepted: bool
    threshold: float


class ClearResponse(BaseModel):
    cleared: bool


def _session_response(session: FaceAuthSession) -> SessionResponse:
    w, h = session.frame_size if session.frame_size else (None, None)
    last = session.last_result.score if session.last_result else None
    return SessionResponse(state=session.state.value, frame_width=w, frame_height=h, last_score=last)


def create_app(session: Optional[FaceAuthSession] = None, cfg: Optional[AppConfig] = None) -> FastAPI:
    if session is None:
        cfg = cfg or load_config()
        setup_logging(cfg.log_level)
        session = build_session(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await session.shutdown()

    app = FastAPI(title="Face Auth API", version="0.1.0", lifespan=lifespan)
    app.state.session = session

    @app.exception_handler(FaceAuthError)
    async def face_auth_error(request: Request, exc: FaceAuthError):
        status = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 400)
        return JSONResponse(status_code=status, content={"error": type(exc).__name__, "detail": str(exc)})

    @app.post("/session/start", response_model=SessionResponse)
    async def start_session():
        await session.start()
        return _session_response(session)

    @app.post("/session/stop", response_model=SessionResponse)
    async def stop_session():
        await session.close()
        return _session_response(session)

    @app.get("/session", response_model=SessionResponse)
    async def get_session():
        return _session_response(session)

    @app.post("/enroll", response_model=EnrollResponse)
    async def enroll():
        vec = await session.enroll_face()
        return EnrollResponse(enrolled=True, features=int(vec.size))

    @app.post("/authenticate", response_model=AuthenticateResponse)
    async def authenticate():
        res = await session.authenticate_face()
        return AuthenticateResponse(score=res.score, accepted=res.accepted, threshold=res.threshold)

    @app.delete("/template", response_model=ClearResponse)
    async def clear_template():
        return ClearResponse(cleared=session.store.clear())

    return app
