"""Challenge messages broadcast over sound at the venue.

Wire format (plain text, case-sensitive)::

    FANVOTE:<contest_id>:AUTH:<epoch_seconds>

The venue PA system broadcasts a fresh challenge periodically. A listener
accepts it only if it names the expected contest and was issued within the
replay window of the listener's clock.
"""

import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Self

from fanvote.config import REPLAY_WINDOW_SECONDS

PREFIX = "FANVOTE"
AUTH_CODE_TYPE = "AUTH"
SEPARATOR = ":"


class FailureReason(StrEnum):
    """Why an authentication attempt or a single candidate was rejected."""
    MICROPHONE_DENIED = "microphone_denied"
    MICROPHONE_NOT_FOUND = "microphone_not_found"
    TIMEOUT = "timeout"
    CONTEST_MISMATCH = "contest_mismatch"
    INVALID_FORMAT = "invalid_format"
    INVALID_PREFIX = "invalid_prefix"
    INVALID_CODE_TYPE = "invalid_code_type"
    EXPIRED_CODE = "expired_code"
    INITIALIZATION_FAILED = "initialization_failed"


@dataclass(frozen=True)
class ChallengeMessage:
    prefix: str
    contest_id: str
    code_type: str
    issued_at: int

    def encode(self) -> str:
        return SEPARATOR.join(
            [self.prefix, self.contest_id, self.code_type, str(self.issued_at)]
        )

    @classmethod
    def parse(cls, message: str) -> Self | None:
        """Split a decoded payload into its four fields.

        Returns None when the payload has fewer than four fields or the
        timestamp is not an integer. Fields past the fourth are ignored.
        """
        parts = message.split(SEPARATOR)
        if len(parts) < 4:
            return None
        prefix, contest_id, code_type, issued_at = parts[:4]
        try:
            timestamp = int(issued_at, 10)
        except ValueError:
            return None
        return cls(prefix, contest_id, code_type, timestamp)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: FailureReason | None = None
    challenge: ChallengeMessage | None = None


def build_challenge(contest_id: str | int, issued_at: int | None = None) -> str:
    """Build the challenge string the venue broadcasts."""
    if issued_at is None:
        issued_at = int(time.time())
    return ChallengeMessage(PREFIX, str(contest_id), AUTH_CODE_TYPE, issued_at).encode()


def validate_auth_code(
    message: str | None,
    expected_contest_id: str | int,
    now: float | None = None,
    replay_window: int = REPLAY_WINDOW_SECONDS,
) -> ValidationResult:
    """Validate a decoded candidate against the expected contest.

    Checks run in order: field count, prefix, contest id, code type, then the
    timestamp, which must be an integer no more than ``replay_window``
    seconds away from ``now`` in either direction. This function has no side
    effects, so calling it any number of times with garbage is harmless.
    """
    if not message or not isinstance(message, str):
        return ValidationResult(valid=False, reason=FailureReason.INVALID_FORMAT)

    parts = message.split(SEPARATOR)
    if len(parts) < 4:
        return ValidationResult(valid=False, reason=FailureReason.INVALID_FORMAT)

    prefix, contest_id, code_type, _ = parts[:4]
    if prefix != PREFIX:
        return ValidationResult(valid=False, reason=FailureReason.INVALID_PREFIX)
    if contest_id != str(expected_contest_id):
        return ValidationResult(valid=False, reason=FailureReason.CONTEST_MISMATCH)
    if code_type != AUTH_CODE_TYPE:
        return ValidationResult(valid=False, reason=FailureReason.INVALID_CODE_TYPE)

    challenge = ChallengeMessage.parse(message)
    if now is None:
        now = time.time()
    if challenge is None or abs(int(now) - challenge.issued_at) > replay_window:
        return ValidationResult(valid=False, reason=FailureReason.EXPIRED_CODE)

    return ValidationResult(valid=True, challenge=challenge)
