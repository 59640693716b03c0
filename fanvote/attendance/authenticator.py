"""Attendance authentication over sound.

The venue broadcasts a challenge (see :mod:`fanvote.attendance.challenge`)
through its PA system. :class:`AttendanceAuthenticator` listens on the
microphone until it hears a valid challenge for the expected contest, or
until the timeout runs out.

States
======

``idle`` -> ``initializing`` -> ``requesting_permission`` -> ``listening``
-> one of ``verified``, ``failed`` or ``timeout``. A caller cancelling the
attempt ends it in ``cancelled``.

While ``listening``, invalid candidates (garbled audio, another contest's
challenge, an expired broadcast) are logged and ignored; only a valid
candidate or the deadline ends the attempt.

Threading
=========

The capture backend calls back from its own thread. That callback only
hands the buffer to the event loop (``call_soon_threadsafe``) and into a
bounded queue; decoding, validation and every state transition happen in
the single coroutine running :meth:`AttendanceAuthenticator.authenticate`.
Buffers that arrive once the attempt is over are dropped.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Self

import numpy as np

from fanvote.attendance.capture import (
    AudioCapture,
    MicrophoneDeniedError,
    MicrophoneNotFoundError,
    SoundDeviceCapture,
)
from fanvote.attendance.challenge import FailureReason, validate_auth_code
from fanvote.attendance.codec import AcousticCodec, GGWaveCodec
from fanvote.config import AttendanceSettings

logger = logging.getLogger(__name__)


class AuthState(StrEnum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    REQUESTING_PERMISSION = "requesting_permission"
    LISTENING = "listening"
    VERIFIED = "verified"
    FAILED = "failed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


FAILURE_MESSAGES = {
    FailureReason.MICROPHONE_DENIED: (
        "Microphone permission is required. Without microphone access we "
        "can't verify your attendance at the venue. The microphone is only "
        "used briefly to listen for the venue's authentication signal."
    ),
    FailureReason.MICROPHONE_NOT_FOUND: (
        "No microphone found. Please ensure your device has a working "
        "microphone and try again."
    ),
    FailureReason.TIMEOUT: (
        "No authentication signal was detected. Please make sure you are at "
        "the venue, the PA system is broadcasting and your device volume is "
        "not muted."
    ),
}
DEFAULT_FAILURE_MESSAGE = "Unable to verify your attendance. Please try again."


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of one authentication attempt.

    Exactly one of ``raw_message`` (on success) and ``reason`` (on failure)
    is set.
    """
    authenticated: bool
    raw_message: str | None = None
    reason: FailureReason | None = None

    @classmethod
    def success(cls, raw_message: str) -> Self:
        return cls(authenticated=True, raw_message=raw_message)

    @classmethod
    def failure(cls, reason: FailureReason) -> Self:
        return cls(authenticated=False, reason=reason)

    @property
    def message(self) -> str:
        """Text to show the attendee."""
        if self.authenticated:
            return "Attendance verified! You can submit your rankings when the contest concludes."
        return FAILURE_MESSAGES.get(self.reason, DEFAULT_FAILURE_MESSAGE)

    def to_dict(self) -> dict[str, Any]:
        if self.authenticated:
            return {"authenticated": True, "message": self.raw_message}
        return {"authenticated": False, "reason": str(self.reason)}


class _BufferChannel:
    """Bounded hand-off from the capture thread to the event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, maxsize: int):
        self.loop = loop
        self.queue: asyncio.Queue[np.ndarray] = asyncio.Queue(maxsize)
        self.closed = False
        self.dropped = 0

    def deliver(self, samples: np.ndarray) -> None:
        """Called from the capture thread."""
        if self.closed:
            return
        try:
            self.loop.call_soon_threadsafe(self._put, samples)
        except RuntimeError:
            # Loop already closed; the attempt is over
            self.closed = True

    def _put(self, samples: np.ndarray) -> None:
        if self.closed:
            return
        try:
            self.queue.put_nowait(samples)
        except asyncio.QueueFull:
            self.dropped += 1

    def close(self) -> None:
        self.closed = True


class AttendanceAuthenticator:
    """Listens for the venue's sound challenge to prove attendance.

    Each instance owns its capture and codec, created fresh per attempt by
    the given factories, and runs at most one attempt at a time.

    Parameters:
        capture_factory: Returns the AudioCapture to listen on
        codec_factory: Returns the AcousticCodec to decode with
        settings: Timeout, replay window and queue size
        clock: Epoch-seconds clock used for the replay window
        on_state_change: Called with each new AuthState
    """

    def __init__(
        self,
        capture_factory: Callable[[], AudioCapture],
        codec_factory: Callable[[], AcousticCodec],
        settings: AttendanceSettings | None = None,
        clock: Callable[[], float] = time.time,
        on_state_change: Callable[[AuthState], None] | None = None,
    ):
        self.capture_factory = capture_factory
        self.codec_factory = codec_factory
        self.settings = settings or AttendanceSettings()
        self.clock = clock
        self.on_state_change = on_state_change
        self._state = AuthState.IDLE
        self._task: asyncio.Task | None = None

    @classmethod
    def for_microphone(
        cls,
        settings: AttendanceSettings | None = None,
        device: int | str | None = None,
        on_state_change: Callable[[AuthState], None] | None = None,
    ) -> Self:
        """Authenticator reading the system microphone through ggwave."""
        settings = settings or AttendanceSettings()
        return cls(
            capture_factory=lambda: SoundDeviceCapture(
                settings.sample_rate, settings.block_size, device
            ),
            codec_factory=lambda: GGWaveCodec(settings.sample_rate),
            settings=settings,
            on_state_change=on_state_change,
        )

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._task is not None

    def _set_state(self, state: AuthState) -> None:
        self._state = state
        logger.debug("Attendance state: %s", state)
        if self.on_state_change is not None:
            self.on_state_change(state)

    def _fail(self, reason: FailureReason) -> VerificationResult:
        self._set_state(AuthState.FAILED)
        return VerificationResult.failure(reason)

    def cancel(self) -> bool:
        """Cancel the attempt in flight. Returns False if there is none."""
        if self._task is None:
            return False
        return self._task.cancel()

    async def authenticate(
        self, contest_id: str | int, timeout: float | None = None
    ) -> VerificationResult | None:
        """Listen for a valid challenge for ``contest_id``.

        Args:
            contest_id: Contest the attendee claims to be at
            timeout: Seconds to listen, counted from the call; defaults to
                the settings' timeout

        Returns:
            The VerificationResult, or None if another attempt is already in
            flight on this instance (that attempt is left untouched).

        Raises:
            asyncio.CancelledError: If the attempt is cancelled; the
                microphone is released first.
        """
        if self._task is not None:
            logger.warning("Already listening for audio signals")
            return None

        self._task = asyncio.current_task()
        loop = asyncio.get_running_loop()
        timeout = self.settings.timeout if timeout is None else timeout
        deadline = loop.time() + timeout
        channel = _BufferChannel(loop, self.settings.queue_size)
        codec: AcousticCodec | None = None
        capture: AudioCapture | None = None

        try:
            self._set_state(AuthState.INITIALIZING)
            try:
                codec = self.codec_factory()
                codec.open()
            except Exception as e:
                logger.error("Codec initialization failed: %s", e)
                return self._fail(FailureReason.INITIALIZATION_FAILED)

            self._set_state(AuthState.REQUESTING_PERMISSION)
            try:
                capture = self.capture_factory()
                capture.start(channel.deliver)
            except MicrophoneDeniedError as e:
                logger.warning("Microphone access denied: %s", e)
                return self._fail(FailureReason.MICROPHONE_DENIED)
            except MicrophoneNotFoundError as e:
                logger.warning("No microphone found: %s", e)
                return self._fail(FailureReason.MICROPHONE_NOT_FOUND)
            except Exception as e:
                logger.error("Audio capture failed to start: %s", e)
                return self._fail(FailureReason.INITIALIZATION_FAILED)

            self._set_state(AuthState.LISTENING)
            logger.info("Listening for contest %s for %.1f s", contest_id, timeout)
            return await self._listen(channel, codec, str(contest_id), deadline)

        except asyncio.CancelledError:
            self._set_state(AuthState.CANCELLED)
            logger.info("Attendance check cancelled")
            raise

        finally:
            channel.close()
            self._release(capture, codec)
            if channel.dropped:
                logger.warning("Dropped %d audio buffers (queue full)", channel.dropped)
            self._task = None

    async def _listen(
        self,
        channel: _BufferChannel,
        codec: AcousticCodec,
        contest_id: str,
        deadline: float,
    ) -> VerificationResult:
        loop = asyncio.get_running_loop()
        try:
            async with asyncio.timeout_at(deadline):
                # A backlogged queue never suspends get(), so check the deadline too
                while loop.time() < deadline:
                    samples = await channel.queue.get()
                    try:
                        candidate = codec.decode(samples)
                    except Exception as e:
                        logger.debug("Undecodable buffer: %s", e)
                        continue
                    if candidate is None:
                        continue
                    validation = validate_auth_code(
                        candidate,
                        contest_id,
                        now=self.clock(),
                        replay_window=self.settings.replay_window,
                    )
                    if validation.valid:
                        logger.info("Attendance verified for contest %s", contest_id)
                        self._set_state(AuthState.VERIFIED)
                        return VerificationResult.success(candidate)
                    logger.info("Received invalid code: %s", validation.reason)
        except TimeoutError:
            pass

        # Timers may fire a clock tick early; never report timeout before the deadline
        while (remaining := deadline - loop.time()) > 0:
            await asyncio.sleep(remaining)
        logger.info("No valid challenge heard for contest %s", contest_id)
        self._set_state(AuthState.TIMEOUT)
        return VerificationResult.failure(FailureReason.TIMEOUT)

    @staticmethod
    def _release(capture: AudioCapture | None, codec: AcousticCodec | None) -> None:
        try:
            if capture is not None:
                capture.stop()
        finally:
            if codec is not None:
                codec.close()
