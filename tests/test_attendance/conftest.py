"""Fakes and fixtures for attendance tests."""

import threading

import numpy as np
import pytest

from fanvote.attendance.authenticator import AttendanceAuthenticator
from fanvote.attendance.capture import AudioCapture
from fanvote.attendance.challenge import build_challenge
from fanvote.attendance.codec import AcousticCodec
from fanvote.config import AttendanceSettings

NOW = 1_750_000_000


def message_buffer(text: str) -> np.ndarray:
    """A buffer the scripted codec decodes to ``text``."""
    return np.array([text])


def silence(size: int = 1024) -> np.ndarray:
    return np.zeros(size, dtype=np.float32)


class ScriptedCodec(AcousticCodec):
    """Decodes message buffers to their text; float buffers are silence."""

    def __init__(self, fail_open: bool = False):
        self.fail_open = fail_open
        self.opened = False
        self.closed = False
        self.decoded: list[str] = []

    def open(self) -> None:
        if self.fail_open:
            raise RuntimeError("no codec runtime")
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def decode(self, samples: np.ndarray) -> str | None:
        if samples.dtype.kind != "U":
            return None
        self.decoded.append(str(samples[0]))
        return str(samples[0])


class ScriptedCapture(AudioCapture):
    """Delivers buffers from timer threads after the given delays.

    Args:
        script: (delay_seconds, buffer) pairs
        error: Raised from start() instead of capturing
    """

    def __init__(self, script=(), error: Exception | None = None):
        self.script = list(script)
        self.error = error
        self.started = False
        self.stopped = False
        self._timers: list[threading.Timer] = []

    def start(self, on_buffer) -> None:
        if self.error is not None:
            raise self.error
        self.started = True
        for delay, buffer in self.script:
            timer = threading.Timer(delay, on_buffer, args=(buffer,))
            timer.daemon = True
            timer.start()
            self._timers.append(timer)

    def stop(self) -> None:
        self.stopped = True
        for timer in self._timers:
            timer.cancel()


def make_authenticator(capture, codec=None, states=None, **settings):
    """Authenticator over the given fakes with a fixed clock at NOW."""
    codec = codec or ScriptedCodec()
    return AttendanceAuthenticator(
        capture_factory=lambda: capture,
        codec_factory=lambda: codec,
        settings=AttendanceSettings(**settings),
        clock=lambda: NOW,
        on_state_change=states.append if states is not None else None,
    )


@pytest.fixture
def valid_challenge():
    return build_challenge("7", NOW - 10)
