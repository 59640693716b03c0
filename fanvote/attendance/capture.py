"""Microphone capture.

A capture delivers fixed-size float32 mono buffers to a callback, from
whatever thread the audio backend runs on. The callback must be cheap: the
authenticator's callback only hands the buffer over to the event loop.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

import numpy as np

from fanvote.config import BLOCK_SIZE, SAMPLE_RATE

logger = logging.getLogger(__name__)

BufferCallback = Callable[[np.ndarray], None]

# PortAudio error codes
PA_INVALID_DEVICE = -9996
PA_DEVICE_UNAVAILABLE = -9985


class MicrophoneError(Exception):
    """Raised when the microphone cannot be acquired."""
    pass


class MicrophoneDeniedError(MicrophoneError):
    """Access to the microphone was refused (by the OS or another client)."""
    pass


class MicrophoneNotFoundError(MicrophoneError):
    """No usable input device exists."""
    pass


def _raise_microphone_error(error: Exception) -> None:
    """Re-raise a PortAudio error as a MicrophoneError when its code says so."""
    code = error.args[1] if len(error.args) > 1 else None
    if code == PA_INVALID_DEVICE:
        raise MicrophoneNotFoundError(str(error)) from error
    if code == PA_DEVICE_UNAVAILABLE:
        raise MicrophoneDeniedError(str(error)) from error


class AudioCapture(ABC):
    """A live audio source that can be started and stopped once per session."""

    @abstractmethod
    def start(self, on_buffer: BufferCallback) -> None:
        """Open the input device and begin delivering buffers.

        Raises:
            MicrophoneDeniedError: If access to the device is refused
            MicrophoneNotFoundError: If there is no input device
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering buffers and release the device. Idempotent."""
        pass


class SoundDeviceCapture(AudioCapture):
    """Raw PortAudio input stream via sounddevice.

    PortAudio hands over the unprocessed device signal: no echo cancellation,
    automatic gain or noise suppression is applied, which would otherwise
    distort the tones the codec decodes.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        block_size: int = BLOCK_SIZE,
        device: int | str | None = None,
    ):
        self.sample_rate = sample_rate
        self.block_size = block_size
        self.device = device
        self._stream = None

    def start(self, on_buffer: BufferCallback) -> None:
        if self._stream is not None:
            raise RuntimeError("capture already started")

        import sounddevice as sd

        try:
            sd.query_devices(self.device, kind="input")
        except (ValueError, sd.PortAudioError) as e:
            raise MicrophoneNotFoundError(str(e)) from e

        def callback(indata, frames, time_info, status):
            if status:
                logger.debug("Input stream status: %s", status)
            on_buffer(indata[:, 0].copy())

        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                blocksize=self.block_size,
                channels=1,
                dtype="float32",
                device=self.device,
                callback=callback,
            )
        except sd.PortAudioError as e:
            _raise_microphone_error(e)
            raise
        try:
            stream.start()
        except sd.PortAudioError as e:
            stream.close()
            _raise_microphone_error(e)
            raise

        self._stream = stream
        logger.info(
            "Capturing %d-sample blocks at %d Hz", self.block_size, self.sample_rate
        )

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
        logger.info("Stopped capture")
