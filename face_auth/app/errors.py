"""
Error types raised by the face authentication engine.

Every error is terminal to the operation that raised it and is surfaced to
the caller unchanged. Contract violations indicate a defect (vectors from
different encoders, zero vectors) and are ValueErrors as well.
"""


class FaceAuthError(Exception):
    """Base exception for all face authentication failures."""

    pass


class CameraUnavailable(FaceAuthError):
    """Camera could not be opened or never produced a usable frame."""

    pass


class ModelLoadFailure(FaceAuthError):
    """Landmark model asset missing or detector initialization failed."""

    pass


class SessionNotReady(FaceAuthError):
    """Enroll/authenticate issued before the session is detecting."""

    pass


class NoFaceDetected(FaceAuthError):
    pass


class NoEnrollmentFound(FaceAuthError):
    pass


class ContractViolation(FaceAuthError, ValueError):
    """Programming-contract violation between encoder, store and scorer."""

    pass


class DimensionMismatch(ContractViolation):
    pass


class DegenerateVector(ContractViolation):
    pass
