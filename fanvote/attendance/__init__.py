"""Proof of attendance via challenges broadcast over sound."""

from .authenticator import AttendanceAuthenticator, AuthState, VerificationResult
from .challenge import FailureReason, build_challenge, validate_auth_code

__all__ = [
    "AttendanceAuthenticator",
    "AuthState",
    "FailureReason",
    "VerificationResult",
    "build_challenge",
    "validate_auth_code",
]
